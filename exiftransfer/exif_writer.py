# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Tree-to-tag converter

This module flattens a parsed, section-oriented metadata tree into the
IFD -> numeric tag -> encoded value structure consumed by the EXIF
encoder (piexif.dump).

Encoding is chosen from the EXIF type of the tag's slot:
- RATIONAL/SRATIONAL values become (numerator, denominator) pairs with a
  fixed denominator (100000 by default). This is lossy: a reconstructed
  rational is exact to 5 decimal digits only.
- UNDEFINED values (versions, MakerNote, UserComment, FileSource, ...)
  become raw bytes.
- Date-time tags become "YYYY:MM:DD HH:MM:SS" strings.
- Everything else passes through, with integral floats narrowed to int
  for integer-typed slots.

Tags that cannot be placed or encoded are dropped; conversion as a whole
never fails because of a single tag.

Copyright 2025 DNAi inc.
"""

import logging
import numbers
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

import piexif
from piexif.helper import UserComment

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exif_tags import (
    DATETIME_TAGS,
    EXIF_DATETIME_FORMAT,
    FLOAT_TYPES,
    IFD_NAMES,
    INTEGER_TYPES,
    RATIONAL_TYPES,
    SECTION_TO_IFD,
    TYPE_RANGES,
    TagInfo,
    resolve_tag,
)
from exiftransfer.value_formatter import format_number, round_half_up

logger = logging.getLogger(__name__)

RawTagStructure = Dict[str, Any]

# Record encodings accepted by piexif.helper.UserComment.dump
_COMMENT_ENCODINGS = {
    'ascii': UserComment.ASCII,
    'jis': UserComment.JIS,
    'unicode': UserComment.UNICODE,
}


class _Unencodable(Exception):
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return isinstance(value, float) and value.is_integer()


# ============================================================
# Per-type encoders
# ============================================================

def _rational_pair(value: Any, denominator: int, type_code: int) -> Any:
    if _is_number(value):
        # Large values fall back to the largest power-of-ten denominator that fits.
        low, high = TYPE_RANGES[type_code]
        numerator = round_half_up(value * denominator)
        while denominator > 1 and not low <= numerator <= high:
            denominator //= 10
            numerator = round_half_up(value * denominator)
        return (numerator, denominator)
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_integral(v) for v in value):
        return (int(value[0]), int(value[1]))
    raise _Unencodable(f"not a rational: {value!r}")


def _encode_rational(info: TagInfo, value: Any, config: ConverterConfig) -> Any:
    denominator = config.rational_denominator
    if _is_number(value):
        return _rational_pair(value, denominator, info.type)
    if isinstance(value, (list, tuple)):
        # Element-wise; nested (num, den) pairs are kept as given.
        return tuple(_rational_pair(v, denominator, info.type) for v in value)
    raise _Unencodable(f"not a rational: {value!r}")


def _bytes_from_object(value: Mapping[Any, Any]) -> Optional[bytes]:
    """Bytes from a position-indexed mapping such as {"0": 65, "1": 83}."""
    if not value or not all(_is_integral(v) for v in value.values()):
        return None
    try:
        items = sorted(value.items(), key=lambda item: int(item[0]))
    except (TypeError, ValueError):
        items = list(value.items())
    return bytes(int(v) for _, v in items)


def _encode_undefined(info: TagInfo, value: Any, config: ConverterConfig) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)

    if isinstance(value, dict):
        if isinstance(value.get('comment'), str):
            encoding = _COMMENT_ENCODINGS.get(str(value.get('encoding', 'ascii')).lower(), UserComment.ASCII)
            return UserComment.dump(value['comment'], encoding=encoding)
        if isinstance(value.get('value'), (list, tuple)):
            return bytes(value['value'])
        data = _bytes_from_object(value)
        if data is not None:
            return data
        raise _Unencodable(f"unsupported object for {info.name}")

    if isinstance(value, (list, tuple)) and all(_is_integral(v) for v in value):
        return bytes(int(v) for v in value)

    if isinstance(value, str):
        if info.name == 'UserComment':
            return UserComment.dump(value)
        try:
            # One code point per byte.
            return value.encode('latin-1')
        except UnicodeEncodeError:
            return value.encode('utf-8')

    raise _Unencodable(f"unsupported value for {info.name}: {type(value).__name__}")


def _encode_ascii(info: TagInfo, value: Any, config: ConverterConfig) -> Any:
    if info.name in DATETIME_TAGS and isinstance(value, datetime):
        return value.strftime(EXIF_DATETIME_FORMAT)
    if isinstance(value, str):
        try:
            value.encode('latin-1')
        except UnicodeEncodeError:
            return value.encode('utf-8')
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if _is_number(value):
        return format_number(value)
    raise _Unencodable(f"unsupported value for {info.name}: {type(value).__name__}")


def _encode_integer(info: TagInfo, value: Any, config: ConverterConfig) -> Any:
    if _is_integral(value):
        return int(value)
    if isinstance(value, (list, tuple)) and value and all(_is_integral(v) for v in value):
        return tuple(int(v) for v in value)
    if isinstance(value, (bytes, bytearray)) and info.type == piexif.TYPES.Byte:
        return tuple(value)
    raise _Unencodable(f"not an integer: {value!r}")


def _encode_float(info: TagInfo, value: Any, config: ConverterConfig) -> Any:
    if _is_number(value):
        return float(value)
    if isinstance(value, (list, tuple)) and value and all(_is_number(v) for v in value):
        return tuple(float(v) for v in value)
    raise _Unencodable(f"not a float: {value!r}")


TYPE_ENCODERS: Dict[int, Callable[[TagInfo, Any, ConverterConfig], Any]] = {
    piexif.TYPES.Ascii: _encode_ascii,
    piexif.TYPES.Undefined: _encode_undefined,
}
for _type in RATIONAL_TYPES:
    TYPE_ENCODERS[_type] = _encode_rational
for _type in INTEGER_TYPES:
    TYPE_ENCODERS[_type] = _encode_integer
for _type in FLOAT_TYPES:
    TYPE_ENCODERS[_type] = _encode_float


# ============================================================
# Validation against the EXIF type table
# ============================================================

def _in_range(type_code: int, number: int) -> bool:
    low, high = TYPE_RANGES[type_code]
    return low <= number <= high


def validate_encoded(info: TagInfo, encoded: Any) -> bool:
    """
    Check that an encoded value fits the EXIF type of its slot.

    Args:
        info: Resolved tag slot
        encoded: Value produced by the type encoder

    Returns:
        True if the encoder will accept the value
    """
    if info.type in RATIONAL_TYPES:
        pairs = [encoded] if _is_pair(encoded) else encoded
        if not isinstance(pairs, (list, tuple)) or not pairs or not all(_is_pair(p) for p in pairs):
            return False
        return all(_in_range(info.type, num) and 0 < den <= 0xFFFFFFFF for num, den in pairs)
    if info.type in INTEGER_TYPES:
        numbers_ = encoded if isinstance(encoded, tuple) else (encoded,)
        return all(isinstance(n, int) and _in_range(info.type, n) for n in numbers_)
    if info.type == piexif.TYPES.Undefined:
        return isinstance(encoded, bytes)
    if info.type == piexif.TYPES.Ascii:
        return isinstance(encoded, (str, bytes))
    return True


def _is_pair(value: Any) -> bool:
    return (isinstance(value, tuple) and len(value) == 2
            and all(isinstance(v, int) and not isinstance(v, bool) for v in value))


# ============================================================
# Conversion
# ============================================================

def encode_value(info: TagInfo, value: Any, config: Optional[ConverterConfig] = None) -> Any:
    """
    Encode one tree value for its resolved slot.

    Raises:
        ValueError: If the value cannot be represented in the slot's EXIF type
    """
    config = config or DEFAULT_CONFIG
    encoder = TYPE_ENCODERS.get(info.type)
    try:
        encoded = encoder(info, value, config) if encoder else value
    except (_Unencodable, TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Cannot encode {info.name}: {e}") from e
    if not validate_encoded(info, encoded):
        raise ValueError(f"Cannot encode {info.name}: {encoded!r} does not fit EXIF type {info.type}")
    return encoded


def empty_raw_tags(thumbnail: Optional[bytes] = None) -> RawTagStructure:
    """Return a RawTagStructure with every IFD present and empty."""
    raw: RawTagStructure = {ifd: {} for ifd in IFD_NAMES}
    raw['thumbnail'] = thumbnail
    return raw


def to_raw_tags(tree: Mapping[str, Mapping[str, Any]],
                thumbnail: Optional[bytes] = None,
                config: Optional[ConverterConfig] = None) -> RawTagStructure:
    """
    Convert a parsed metadata tree into a raw tag structure.

    Sections map to IFDs as Image->0th, Photo->Exif, GPSInfo->GPS,
    Iop->Interop, ThumbnailTags->1st. Each tag is looked up in its
    section's IFD first and then in any IFD (see ``resolve_tag``).
    Unknown sections, unresolvable tag names and values that cannot be
    encoded are dropped.

    Args:
        tree: Parsed metadata tree
        thumbnail: Optional JPEG thumbnail bytes to carry through
        config: Optional configuration

    Returns:
        Dictionary with '0th', 'Exif', 'GPS', 'Interop', '1st' and 'thumbnail' keys

    Example:
        >>> to_raw_tags({'Photo': {'FNumber': 2.8}})['Exif']
        {33437: (280000, 100000)}
    """
    config = config or DEFAULT_CONFIG
    raw = empty_raw_tags(thumbnail)
    dropped = 0

    for section, tags in (tree or {}).items():
        if section not in SECTION_TO_IFD or not isinstance(tags, Mapping):
            logger.debug(f"Skipping section {section!r}: no matching IFD")
            continue
        for name, value in tags.items():
            info = resolve_tag(name, section, config)
            if info is None:
                logger.debug(f"Dropping {section}.{name}: not in the tag table")
                dropped += 1
                continue
            try:
                raw[info.ifd][info.code] = encode_value(info, value, config)
            except ValueError as e:
                logger.warning(f"Dropping {section}.{name}: {e}")
                dropped += 1

    if dropped:
        logger.debug(f"{dropped} tag(s) dropped during conversion")
    return raw
