# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value parser: the inverse of the value formatter.

Turns an edited display string back into the raw typed value stored in
the metadata tree. Parsing never raises; text that cannot be parsed for a
numeric or timestamp field keeps the original value, and the fallback is
reported through ``parse_edit`` and the module logger.

Copyright 2025 DNAi inc.
"""

import logging
import math
import numbers
import re
from datetime import datetime
from typing import Any, Callable, Dict, NamedTuple, Optional

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exif_tags import (
    EXIF_DATETIME_FORMAT,
    FUJI_DYNAMIC_RANGE_MAP,
    FUJI_FILM_SIMULATION_MAP,
    reverse_lookup_any,
)
from exiftransfer.value_formatter import ISO_TAGS, is_number

logger = logging.getLogger(__name__)

_INTEGER_TEXT = re.compile(r'^[+-]?\d+$')


class ParsedEdit(NamedTuple):
    """Result of parsing an edited value."""
    value: Any
    used_fallback: bool


class _Unparseable(Exception):
    pass


def _number(text: str, original: Any = None) -> float:
    """
    Parse numeric text, raising _Unparseable for anything not finite.

    Integral text yields an int unless the original value was a float.
    """
    text = text.strip()
    if not text:
        raise _Unparseable(text)
    if _INTEGER_TEXT.match(text) and not isinstance(original, float):
        return int(text)
    try:
        value = float(text)
    except ValueError:
        raise _Unparseable(text)
    if not math.isfinite(value):
        raise _Unparseable(text)
    return value


def _strip_prefix(text: str, prefix: str) -> str:
    text = text.strip()
    if text.lower().startswith(prefix.lower()):
        return text[len(prefix):]
    return text


def _strip_suffix(text: str, suffix: str) -> str:
    text = text.strip()
    if text.lower().endswith(suffix.lower()):
        return text[:-len(suffix)]
    return text


# ============================================================
# Inverse unit rules
# ============================================================

def _parse_exposure_time(text: str, original: Any) -> float:
    body = _strip_suffix(text, 's').strip()
    if body.startswith('1/'):
        denominator = _number(body[2:])
        if denominator == 0:
            raise _Unparseable(text)
        return 1 / denominator
    return _number(body, original)


def _parse_exposure_bias(text: str, original: Any) -> float:
    body = _strip_suffix(text, 'EV')
    return _number(body.lstrip('+'), original)


def _parse_resolution(text: str, original: Any) -> float:
    return _number(_strip_suffix(text, 'dpi'), original)


UNIT_PARSERS: Dict[str, Callable[[str, Any], Any]] = {
    'ExposureTime': _parse_exposure_time,
    'FNumber': lambda text, original: _number(_strip_prefix(text, 'f/'), original),
    'FocalLength': lambda text, original: _number(_strip_suffix(text, 'mm'), original),
    'ExposureBiasValue': _parse_exposure_bias,
    'XResolution': _parse_resolution,
    'YResolution': _parse_resolution,
}
for _iso_tag in ISO_TAGS:
    UNIT_PARSERS[_iso_tag] = lambda text, original: _number(_strip_prefix(text, 'ISO'), original)


def _number_list(text: str, original: Any) -> list:
    """Inverse of the comma-joined array rendering; element types follow the original."""
    parts = text.split(',')
    if not original:
        raise _Unparseable(text)
    return [_number(part, original[min(i, len(original) - 1)]) for i, part in enumerate(parts)]


def _parse_datetime(text: str, config: ConverterConfig) -> datetime:
    text = text.strip()
    for fmt in (config.date_display_format, EXIF_DATETIME_FORMAT):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            pass
    try:
        # Covers ISO 8601 and the "YYYY-MM-DDTHH:MM" datetime-local form.
        return datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        raise _Unparseable(text)


# ============================================================
# Main parser
# ============================================================

def parse_edit(tag_name: str, text: Any, original: Any,
               config: Optional[ConverterConfig] = None) -> ParsedEdit:
    """
    Parse an edited display string into a raw value.

    Attempts, in order:
    (a) reverse enum lookup (the tag's own category first, then all others);
    (b) the inverse of the tag's unit rule ("1/250s" -> 0.004, "f/2.8" -> 2.8);
    (c) a timestamp, if the original value was a timestamp;
    (d) a number, if the original value was numeric;
    (e) comma-separated numbers, if the original value was a list of numbers;
    (f) the text itself, unless the original value was a list.

    Args:
        tag_name: Tag name being edited
        text: Edited display string
        original: Value the tag held before the edit
        config: Optional configuration

    Returns:
        ParsedEdit(value, used_fallback); used_fallback is True when the
        text could not be parsed and the original value was kept
    """
    config = config or DEFAULT_CONFIG
    if not isinstance(text, str):
        return ParsedEdit(original, True)

    match = reverse_lookup_any(text, tag_name)
    if match is not None:
        return ParsedEdit(match[1], False)

    try:
        unit_parser = UNIT_PARSERS.get(tag_name)
        if unit_parser is not None:
            return ParsedEdit(unit_parser(text, original), False)

        if isinstance(original, datetime):
            return ParsedEdit(_parse_datetime(text, config), False)

        if is_number(original):
            return ParsedEdit(_number(text, original), False)

        if isinstance(original, (list, tuple)):
            if all(is_number(v) for v in original):
                return ParsedEdit(_number_list(text, original), False)
            raise _Unparseable(text)
    except _Unparseable:
        logger.warning(f"Could not parse {text!r} for {tag_name}; keeping the original value")
        return ParsedEdit(original, True)

    return ParsedEdit(text, False)


def unformat_value(tag_name: str, text: Any, original: Any,
                   config: Optional[ConverterConfig] = None) -> Any:
    """
    Inverse of ``format_value``.

    Returns the raw value for an edited display string, or the original
    value when the text cannot be parsed. Never raises.
    """
    return parse_edit(tag_name, text, original, config).value


# ============================================================
# Vendor recipe values
# ============================================================

_REVERSE_FILM = {label: code for code, label in reversed(list(FUJI_FILM_SIMULATION_MAP.items()))}
_REVERSE_DYNAMIC_RANGE = {label: code for code, label in reversed(list(FUJI_DYNAMIC_RANGE_MAP.items()))}


def unformat_recipe_value(key: str, text: Any, original: Any,
                          config: Optional[ConverterConfig] = None) -> Any:
    """
    Inverse of ``format_recipe_value``.

    Reverses the film simulation and dynamic range labels, strips a "K"
    temperature suffix and an explicit "+" sign, and otherwise defers to
    ``unformat_value``.
    """
    if not isinstance(text, str):
        return original
    lowered = key.lower()
    if isinstance(original, str):
        if 'film' in lowered or 'simulation' in lowered:
            return _REVERSE_FILM.get(text, text)
        if 'dynamic' in lowered or 'range' in lowered:
            return _REVERSE_DYNAMIC_RANGE.get(text, text)
    if isinstance(original, numbers.Real) and not isinstance(original, bool):
        body = text.strip()
        if 'temperature' in lowered:
            body = _strip_suffix(body, 'K')
        if 'tint' in lowered or 'fine' in lowered:
            body = body.lstrip('+')
        try:
            return _number(body, original)
        except _Unparseable:
            logger.warning(f"Could not parse {text!r} for recipe field {key}; keeping the original value")
            return original
    return unformat_value(key, text, original, config)
