# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
GPS coordinate codec.

Converts between the EXIF representation of a coordinate (three values
[degrees, minutes, seconds] plus a one-letter hemisphere reference) and
signed decimal degrees.

Seconds are not rounded when converting to EXIF form, so repeated
round-trips can drift by sub-arcsecond amounts through floating point.
The encoder's fixed rational precision adds another 1e-5 arcsecond bound.

Copyright 2025 DNAi inc.
"""

import math
import numbers
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


NEGATIVE_REFS = frozenset({'S', 'W'})

AXIS_LIMITS = {
    'lat': 90.0,
    'lng': 180.0,
}


def _as_float(value: Any) -> Optional[float]:
    """Return a float for a number or a (numerator, denominator) pair."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, (list, tuple)) and len(value) == 2:
        num, den = value
        if isinstance(num, numbers.Real) and isinstance(den, numbers.Real) and den:
            return float(num) / float(den)
    return None


def coordinate_values(coordinate: Any) -> Optional[List[float]]:
    """
    Normalize a degrees/minutes/seconds sequence to three floats.

    Args:
        coordinate: Sequence of numbers or rational pairs

    Returns:
        [degrees, minutes, seconds], or None if fewer than three usable values
    """
    if not isinstance(coordinate, (list, tuple)) or len(coordinate) < 3:
        return None
    values = [_as_float(v) for v in coordinate[:3]]
    if any(v is None for v in values):
        return None
    return values


def to_decimal(coordinate: Sequence[Any], ref: Optional[str]) -> Optional[float]:
    """
    Convert an EXIF coordinate to signed decimal degrees.

    Args:
        coordinate: [degrees, minutes, seconds]
        ref: Hemisphere reference ('N', 'S', 'E' or 'W')

    Returns:
        Decimal degrees, negative for S and W, or None if the coordinate
        has fewer than three values
    """
    values = coordinate_values(coordinate)
    if values is None:
        return None
    degrees, minutes, seconds = values
    decimal = degrees + minutes / 60 + seconds / 3600
    if isinstance(ref, str) and ref.strip().upper() in NEGATIVE_REFS:
        decimal = -decimal
    return decimal


def to_exif_format(decimal: float, axis: str) -> Tuple[List[float], str]:
    """
    Convert signed decimal degrees to an EXIF coordinate.

    Args:
        decimal: Latitude (-90 to 90) or longitude (-180 to 180)
        axis: 'lat' or 'lng'

    Returns:
        Tuple of ([degrees, minutes, seconds], ref)

    Raises:
        ValueError: If the axis is unknown or the value is out of range
    """
    if axis not in AXIS_LIMITS:
        raise ValueError(f"Invalid axis: {axis!r} (expected 'lat' or 'lng')")
    if not math.isfinite(decimal) or abs(decimal) > AXIS_LIMITS[axis]:
        raise ValueError(f"Invalid {axis}: {decimal}")

    if axis == 'lat':
        ref = 'N' if decimal >= 0 else 'S'
    else:
        ref = 'E' if decimal >= 0 else 'W'

    abs_decimal = abs(decimal)
    degrees = math.floor(abs_decimal)
    minutes = math.floor((abs_decimal - degrees) * 60)
    seconds = ((abs_decimal - degrees) * 60 - minutes) * 60

    return [float(degrees), float(minutes), seconds], ref


def gps_position(gps_section: Optional[Mapping[str, Any]]) -> Optional[Tuple[float, float]]:
    """
    Read (latitude, longitude) from a GPSInfo section.

    Both coordinates and both references must be present.
    """
    if not gps_section:
        return None
    lat_ref = gps_section.get('GPSLatitudeRef')
    lng_ref = gps_section.get('GPSLongitudeRef')
    if not lat_ref or not lng_ref:
        return None
    latitude = to_decimal(gps_section.get('GPSLatitude'), lat_ref)
    longitude = to_decimal(gps_section.get('GPSLongitude'), lng_ref)
    if latitude is None or longitude is None:
        return None
    return latitude, longitude


def position_to_gps_tags(latitude: float, longitude: float) -> Dict[str, Any]:
    """
    Build the four GPSInfo entries describing a position.

    Args:
        latitude: Latitude in degrees (-90 to 90)
        longitude: Longitude in degrees (-180 to 180)

    Returns:
        Dictionary with GPSLatitude, GPSLatitudeRef, GPSLongitude, GPSLongitudeRef
    """
    lat_coord, lat_ref = to_exif_format(latitude, 'lat')
    lng_coord, lng_ref = to_exif_format(longitude, 'lng')
    return {
        'GPSLatitude': lat_coord,
        'GPSLatitudeRef': lat_ref,
        'GPSLongitude': lng_coord,
        'GPSLongitudeRef': lng_ref,
    }
