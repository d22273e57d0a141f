# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Tag-to-tree converter

Decodes the raw IFD structure produced by piexif.load into the
section-oriented metadata tree used everywhere else in the package:
tag names instead of codes, floats instead of rational pairs, text
instead of NUL-terminated ASCII bytes and datetimes for the date-time
tags.

Copyright 2025 DNAi inc.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import piexif
from piexif.helper import UserComment

from exiftransfer.exif_tags import (
    DATETIME_TAGS,
    EXIF_DATETIME_FORMAT,
    IFD_NAMES,
    IFD_TO_SECTION,
    POINTER_TAGS,
    RATIONAL_TYPES,
    tag_name,
    tag_type,
)

logger = logging.getLogger(__name__)

MetadataTree = Dict[str, Dict[str, Any]]

# Character code prefixes of a UserComment payload
_JIS_CODE = b"JIS\x00\x00\x00\x00\x00"
_UNICODE_CODE = b"UNICODE\x00"


def _rational_to_float(pair: Any) -> float:
    numerator, denominator = pair
    if not denominator:
        return 0.0
    return numerator / denominator


def _decode_rational(value: Any) -> Any:
    if isinstance(value, tuple) and len(value) == 2 and all(isinstance(v, int) for v in value):
        return _rational_to_float(value)
    return [_rational_to_float(pair) for pair in value]


def _decode_text(value: bytes) -> str:
    data = value.rstrip(b'\x00')
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return data.decode('latin-1')


def _decode_user_comment(value: bytes) -> Any:
    try:
        comment = UserComment.load(value)
    except (ValueError, UnicodeDecodeError):
        return value
    return {'comment': comment.rstrip('\x00'), 'encoding': _comment_encoding(value)}


def _comment_encoding(value: bytes) -> str:
    prefix = value[:8]
    if prefix == _JIS_CODE:
        return UserComment.JIS
    if prefix == _UNICODE_CODE:
        return UserComment.UNICODE
    return UserComment.ASCII


def decode_value(name: str, type_code: int, value: Any) -> Any:
    """
    Decode one raw value into its tree form.

    Args:
        name: Tag name
        type_code: EXIF type code of the tag
        value: Value as returned by piexif.load

    Returns:
        Tree value
    """
    if type_code in RATIONAL_TYPES:
        return _decode_rational(value)

    if type_code == piexif.TYPES.Ascii:
        text = _decode_text(value) if isinstance(value, bytes) else str(value).rstrip('\x00')
        if name in DATETIME_TAGS:
            try:
                return datetime.strptime(text.strip(), EXIF_DATETIME_FORMAT)
            except ValueError:
                logger.debug(f"{name} is not a valid EXIF timestamp: {text!r}")
        return text

    if type_code == piexif.TYPES.Undefined:
        if name == 'UserComment' and isinstance(value, bytes):
            return _decode_user_comment(value)
        return bytes(value) if isinstance(value, (bytes, bytearray)) else value

    if isinstance(value, tuple):
        if len(value) == 1:
            return value[0]
        return list(value)

    return value


def from_raw_tags(raw: Optional[Mapping[str, Any]]) -> MetadataTree:
    """
    Convert a piexif-style raw tag structure into a metadata tree.

    Pointer tags and codes missing from the tag table are skipped.
    Sections without any decodable tag are omitted.

    Args:
        raw: Dictionary keyed by IFD name ('0th', 'Exif', 'GPS', 'Interop', '1st')

    Returns:
        Metadata tree keyed by section name
    """
    tree: MetadataTree = {}
    for ifd in IFD_NAMES:
        tags = (raw or {}).get(ifd)
        if not tags:
            continue
        section: Dict[str, Any] = {}
        for code, value in tags.items():
            name = tag_name(ifd, code)
            if name is None:
                logger.debug(f"Skipping unknown tag {code} in {ifd} IFD")
                continue
            if name in POINTER_TAGS:
                continue
            section[name] = decode_value(name, tag_type(ifd, code), value)
        if section:
            tree[IFD_TO_SECTION[ifd]] = section
    return tree
