# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Metadata utility functions for common tree operations.

Every edit here is copy-on-write: the input tree is cloned and the clone
is patched and returned, so a caller holding the previous tree never
observes a change.

Copyright 2025 DNAi inc.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exceptions import InvalidTagError
from exiftransfer.exif_tags import ADDABLE_TAGS
from exiftransfer.gps_codec import position_to_gps_tags
from exiftransfer.value_parser import parse_edit, unformat_value

logger = logging.getLogger(__name__)

MetadataTree = Dict[str, Dict[str, Any]]

GPS_SECTION = 'GPSInfo'

_DATETIME_SENTINEL = datetime(1970, 1, 1)

# (output key, candidate tag names) in display order
KEY_PARAMETERS = (
    ('FNumber', ('FNumber', 'ApertureValue')),
    ('ISO', ('ISOSpeedRatings', 'ISO', 'PhotographicSensitivity')),
    ('ExposureTime', ('ExposureTime',)),
    ('ExposureBiasValue', ('ExposureBiasValue',)),
    ('FocalLength', ('FocalLength',)),
    ('Camera', ('Model',)),
    ('Lens', ('LensModel', 'LensInfo')),
    ('Date Taken', ('DateTimeOriginal', 'DateTime')),
)


def _clone_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _clone_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clone_value(v) for v in value]
    if isinstance(value, bytearray):
        return bytearray(value)
    # bytes, str, numbers, datetimes and tuples are immutable
    return value


def clone_tree(tree: Optional[MetadataTree]) -> MetadataTree:
    """
    Deep-copy a metadata tree.

    Mappings and lists are rebuilt and mutable byte buffers duplicated, so
    no mutable leaf is shared between the original and the copy.
    """
    return _clone_value(tree or {})


def replace_value(tree: MetadataTree, section: str, tag: str, value: Any) -> MetadataTree:
    """
    Return a copy of ``tree`` with one leaf replaced.

    Raises:
        InvalidTagError: If the section does not exist
    """
    if section not in (tree or {}):
        raise InvalidTagError(f"Section not found: {section}")
    updated = clone_tree(tree)
    updated[section][tag] = _clone_value(value)
    return updated


def apply_edit(tree: MetadataTree, section: str, tag: str, text: str,
               config: Optional[ConverterConfig] = None) -> MetadataTree:
    """
    Apply an edited display string to one field.

    The text is parsed against the field's current value (see
    ``unformat_value``); unparseable text leaves the value unchanged.

    Args:
        tree: Metadata tree
        section: Section name (e.g., 'Photo')
        tag: Tag name (e.g., 'ExposureTime')
        text: Edited display string (e.g., '1/250s')
        config: Optional configuration

    Returns:
        New metadata tree
    """
    if section not in (tree or {}):
        raise InvalidTagError(f"Section not found: {section}")
    original = tree[section].get(tag)
    return replace_value(tree, section, tag, unformat_value(tag, text, original, config))


def add_field(tree: MetadataTree, section: str, tag: str, text: str,
              config: Optional[ConverterConfig] = None) -> MetadataTree:
    """
    Add a new field from the per-section addable tag list.

    The text is converted according to the tag's input kind: 'number'
    values become int or float, 'datetime-local' values become datetimes
    and 'text' values are kept as typed. The section is created if absent.

    Raises:
        InvalidTagError: If the tag is not addable to the section, already
            exists, or the text does not fit the tag's input kind
    """
    config = config or DEFAULT_CONFIG
    addable = ADDABLE_TAGS.get(section, {})
    if tag not in addable:
        raise InvalidTagError(f"{tag} cannot be added to {section}")
    if tag in (tree or {}).get(section, {}):
        raise InvalidTagError(f"{section}.{tag} already exists")

    kind = addable[tag].kind
    if kind == 'number':
        parsed = parse_edit(tag, text, 0, config)
    elif kind == 'datetime-local':
        parsed = parse_edit(tag, text, _DATETIME_SENTINEL, config)
    else:
        parsed = None

    if parsed is not None and parsed.used_fallback:
        raise InvalidTagError(f"Invalid {kind} value for {tag}: {text!r}")
    value = parsed.value if parsed is not None else text

    updated = clone_tree(tree)
    updated.setdefault(section, {})[tag] = value
    return updated


def remove_field(tree: MetadataTree, section: str, tag: str) -> MetadataTree:
    """
    Return a copy of ``tree`` without one field.

    A section left empty is removed as well.

    Raises:
        InvalidTagError: If the field does not exist
    """
    if tag not in (tree or {}).get(section, {}):
        raise InvalidTagError(f"Field not found: {section}.{tag}")
    updated = clone_tree(tree)
    del updated[section][tag]
    if not updated[section]:
        del updated[section]
    return updated


def update_gps_position(tree: MetadataTree, latitude: float, longitude: float) -> MetadataTree:
    """
    Set the GPS position, keeping the other GPSInfo tags.

    Raises:
        ValueError: If latitude or longitude is out of range
    """
    gps_tags = position_to_gps_tags(latitude, longitude)
    updated = clone_tree(tree)
    updated.setdefault(GPS_SECTION, {}).update(gps_tags)
    return updated


def strip_gps(tree: MetadataTree) -> MetadataTree:
    """Return a copy of ``tree`` without its GPSInfo section."""
    updated = clone_tree(tree)
    if updated.pop(GPS_SECTION, None) is not None:
        logger.debug("Removed GPSInfo section")
    return updated


def extract_key_parameters(tree: MetadataTree) -> Dict[str, Any]:
    """
    Pick the headline shooting parameters out of a tree.

    Image and Photo sections are merged (Photo wins) and searched for
    aperture, ISO, shutter speed, exposure bias, focal length, camera
    model, lens and date taken. Missing or zero values are left out.

    Returns:
        Ordered dictionary of raw values; numeric entries are keyed by the
        tag name whose display rule applies (e.g., 'FNumber', 'ISO')
    """
    merged: Dict[str, Any] = {}
    for section in ('Image', 'Photo'):
        merged.update((tree or {}).get(section) or {})

    params: Dict[str, Any] = {}
    for key, candidates in KEY_PARAMETERS:
        for name in candidates:
            value = merged.get(name)
            if value is not None:
                if value:
                    params[key] = value
                break
    return params
