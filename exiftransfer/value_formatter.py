# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value formatter for converting raw EXIF values to human-readable strings.

This module renders tree values for display: timestamps, byte blobs,
numeric arrays, enumerated codes and unit-bearing measurements. Each
tag-specific rule is an entry in a lookup table keyed by tag name, so the
inverse rules in ``value_parser`` can mirror them one for one.

Copyright 2025 DNAi inc.
"""

import json
import logging
import math
import numbers
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Union

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exif_tags import (
    FUJI_DYNAMIC_RANGE_MAP,
    FUJI_FILM_SIMULATION_MAP,
    enum_category,
    enum_lookup,
)
from exiftransfer.gps_codec import coordinate_values

logger = logging.getLogger(__name__)

# Control characters that mark decoded text as binary (tab..CR excluded).
_CONTROL_CHARS = re.compile('[\x00-\x08\x0e-\x1f]')


@dataclass(frozen=True)
class BinaryData:
    """
    Display marker for an opaque byte sequence.

    Carries the original bytes so a viewer can show a hex dump instead of
    a corrupted string.
    """
    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return f"[Binary data: {len(self.data)} bytes]"

    def to_hex(self) -> str:
        return ' '.join(f"{b:02x}" for b in self.data)

    def to_ascii(self) -> str:
        return self.data.decode('latin-1')


DisplayValue = Union[str, BinaryData]


def is_number(value: Any) -> bool:
    """True for ints and floats, False for bools."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def format_number(value: Any) -> str:
    """
    Render a number the way the original tool printed it.

    Integral floats drop their fractional part (37.0 -> "37"); other
    floats use the shortest repr that round-trips.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, numbers.Integral):
        return str(int(value))
    value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {'type': 'Buffer', 'data': list(value)}
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_json_text(value: Any) -> str:
    """Compact JSON text for structured values."""
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=_json_default)


# ============================================================
# Unit rules
# ============================================================

def _format_exposure_time(value: float) -> str:
    if 0 < value < 1:
        return f"1/{round_half_up(1 / value)}s"
    return f"{format_number(value)}s"


def _format_exposure_bias(value: float) -> str:
    value = value + 0.0  # -0.0 -> 0.0
    sign = '+' if value >= 0 else ''
    return f"{sign}{value:.1f} EV"


ISO_TAGS = frozenset({'ISOSpeedRatings', 'ISO', 'PhotographicSensitivity'})

UNIT_FORMATTERS: Dict[str, Callable[[float], str]] = {
    'ExposureTime': _format_exposure_time,
    'FNumber': lambda v: f"f/{format_number(v)}",
    'FocalLength': lambda v: f"{format_number(v)}mm",
    'ExposureBiasValue': _format_exposure_bias,
    'XResolution': lambda v: f"{format_number(v)} dpi",
    'YResolution': lambda v: f"{format_number(v)} dpi",
}
for _iso_tag in ISO_TAGS:
    UNIT_FORMATTERS[_iso_tag] = lambda v: f"ISO {format_number(v)}"


# ============================================================
# Main formatter
# ============================================================

def _format_bytes(value: bytes) -> DisplayValue:
    data = bytes(value)
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError:
        return BinaryData(data)
    if _CONTROL_CHARS.search(text):
        return BinaryData(data)
    return text.rstrip('\x00')


def format_value(tag_name: str, value: Any, config: Optional[ConverterConfig] = None) -> DisplayValue:
    """
    Format a tree value as a display string.

    Rules, in priority order:
    1. Timestamps use the configured (locale) display format.
    2. Byte sequences decode as UTF-8 text, or become a BinaryData marker
       if they are not valid UTF-8 or contain control characters.
    3. Arrays of numbers are comma-joined; other arrays become JSON text.
    4. Numbers of an enumerated tag become their label or "Unknown (<n>)".
    5. Unit-bearing tags get their unit ("1/250s", "f/2.8", "35mm", ...).
    6. Anything else is converted generically (JSON for mappings).

    Args:
        tag_name: Tag name (e.g., "ExposureTime")
        value: Tree value
        config: Optional configuration

    Returns:
        Display string, or BinaryData for opaque bytes
    """
    config = config or DEFAULT_CONFIG
    try:
        if value is None:
            return ""

        if isinstance(value, datetime):
            return value.strftime(config.date_display_format)

        if isinstance(value, (bytes, bytearray)):
            return _format_bytes(value)

        if isinstance(value, (list, tuple)):
            if all(is_number(v) for v in value):
                return ', '.join(format_number(v) for v in value)
            return to_json_text(list(value))

        if is_number(value):
            category = enum_category(tag_name)
            if category:
                return enum_lookup(category, value)
            formatter = UNIT_FORMATTERS.get(tag_name)
            if formatter:
                return formatter(value)
            return format_number(value)

        if isinstance(value, dict):
            return to_json_text(value)

        return str(value)
    except (TypeError, ValueError, OverflowError, ZeroDivisionError) as e:
        logger.debug(f"Falling back to generic formatting for {tag_name}: {e}")
        if isinstance(value, (bytes, bytearray)):
            return BinaryData(bytes(value))
        return repr(value)


# ============================================================
# Vendor recipe values
# ============================================================

def _key_has(key: str, *fragments: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in fragments)


def _signed(value: float) -> str:
    sign = '+' if value >= 0 else ''
    return f"{sign}{format_number(value)}"


def format_recipe_value(key: str, value: Any, config: Optional[ConverterConfig] = None) -> DisplayValue:
    """
    Format one field of a vendor (Fujifilm) recipe.

    Film simulation and dynamic range codes map through their label
    tables, colour temperatures above 1000 get a "K" suffix, tint and
    fine-tune values get an explicit sign. Everything else is handed to
    ``format_value``.
    """
    if isinstance(value, str):
        if _key_has(key, 'film', 'simulation'):
            return FUJI_FILM_SIMULATION_MAP.get(value, value)
        if _key_has(key, 'dynamic', 'range'):
            return FUJI_DYNAMIC_RANGE_MAP.get(value, value)

    if is_number(value):
        if _key_has(key, 'temperature') and value > 1000:
            return f"{format_number(value)}K"
        if _key_has(key, 'tint', 'fine'):
            return _signed(value)

    return format_value(key, value, config)


# ============================================================
# GPS display helpers
# ============================================================

def format_gps_coordinate(coordinate: Any, ref: Optional[str], axis: str) -> str:
    """
    Render an EXIF coordinate as degrees, minutes and seconds.

    Args:
        coordinate: [degrees, minutes, seconds]
        ref: Hemisphere reference
        axis: 'lat' or 'lng'

    Returns:
        String like 37°48'12.50"N, or "N/A"
    """
    values = coordinate_values(coordinate)
    if values is None:
        return 'N/A'
    degrees, minutes, seconds = values
    if axis == 'lat':
        direction = 'N' if ref == 'N' else 'S'
    else:
        direction = 'E' if ref == 'E' else 'W'
    return f"{math.floor(degrees)}°{math.floor(minutes)}'{seconds:.2f}\"{direction}"


def format_gps_time(time_values: Any) -> str:
    """Render a GPSTimeStamp triplet as HH:MM:SS (empty if incomplete)."""
    values = coordinate_values(time_values)
    if values is None:
        return ''
    return ':'.join(f"{math.floor(v):02d}" for v in values)


def format_gps_altitude(altitude: Any, ref: Any = 0) -> str:
    """Render GPSAltitude in metres, negative when the reference is 1 (below sea level)."""
    if not is_number(altitude):
        return ''
    return f"{'-' if ref == 1 else ''}{format_number(altitude)}m"
