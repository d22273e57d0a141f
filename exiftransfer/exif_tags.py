# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF tag catalog

This module maps human-readable tag names onto (numeric code, IFD) pairs
and holds the enumerated-value label tables used for display and editing.

The numeric tag table itself belongs to the encoder (piexif); the indexes
below are derived from it once at import time and are read-only
afterwards.

Copyright 2025 DNAi inc.
"""

import re
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple, Union

import piexif

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG


# ============================================================
# Sections and IFDs
# ============================================================

SECTION_TO_IFD = MappingProxyType({
    'Image': '0th',
    'Photo': 'Exif',
    'GPSInfo': 'GPS',
    'Iop': 'Interop',
    'ThumbnailTags': '1st',
})

IFD_TO_SECTION = MappingProxyType({ifd: section for section, ifd in SECTION_TO_IFD.items()})

IFD_NAMES: Tuple[str, ...] = ('0th', 'Exif', 'GPS', 'Interop', '1st')

# Offsets and lengths the encoder computes itself; never carried in a tree.
POINTER_TAGS = frozenset({
    'ExifTag',
    'GPSTag',
    'InteroperabilityTag',
    'JPEGInterchangeFormat',
    'JPEGInterchangeFormatLength',
})

# Parser-side names that the encoder's table spells differently.
TAG_ALIASES = MappingProxyType({
    'PhotographicSensitivity': 'ISOSpeedRatings',
    'ISO': 'ISOSpeedRatings',
    'FlashPixVersion': 'FlashpixVersion',
    'InteropIndex': 'InteroperabilityIndex',
    'InteropVersion': 'InteroperabilityVersion',
    'ImageHeight': 'ImageLength',
    'ExposureCompensation': 'ExposureBiasValue',
})


class TagInfo(NamedTuple):
    """Location and EXIF type of a tag in the raw tag structure."""
    name: str
    code: int
    ifd: str
    type: int


def _ifd_table(ifd: str) -> Dict[int, Dict[str, Any]]:
    table = piexif.TAGS.get(ifd)
    if table is None and ifd in ('0th', '1st'):
        table = piexif.TAGS.get('Image', {})
    return table or {}


def _build_name_index() -> Mapping[str, Mapping[str, TagInfo]]:
    index: Dict[str, Dict[str, TagInfo]] = {}
    for ifd in IFD_NAMES:
        for code in sorted(_ifd_table(ifd)):
            entry = _ifd_table(ifd)[code]
            name = entry.get('name')
            if not name or name in POINTER_TAGS:
                continue
            per_ifd = index.setdefault(name, {})
            # First (lowest) code wins if a table repeats a name.
            if ifd not in per_ifd:
                per_ifd[ifd] = TagInfo(name, code, ifd, entry['type'])
    return MappingProxyType({name: MappingProxyType(per_ifd) for name, per_ifd in index.items()})


_NAME_INDEX = _build_name_index()


def canonical_tag_name(name: str) -> str:
    """Return the encoder's spelling of a tag name."""
    return TAG_ALIASES.get(name, name)


def lookup_tag(name: str, ifd: Optional[str] = None,
               config: Optional[ConverterConfig] = None) -> Optional[TagInfo]:
    """
    Look up the numeric code and IFD of a tag by name.

    Args:
        name: Tag name (e.g., "FNumber", "GPSLatitude")
        ifd: Restrict the lookup to one IFD ('0th', 'Exif', 'GPS', 'Interop', '1st')
        config: Optional configuration supplying the IFD priority order used
                when ``ifd`` is not given

    Returns:
        TagInfo, or None if the name is unknown (in that IFD)
    """
    per_ifd = _NAME_INDEX.get(canonical_tag_name(name))
    if not per_ifd:
        return None
    if ifd is not None:
        return per_ifd.get(ifd)
    config = config or DEFAULT_CONFIG
    for candidate in config.fallback_ifd_order:
        if candidate in per_ifd:
            return per_ifd[candidate]
    return None


def resolve_tag(name: str, section: str,
                config: Optional[ConverterConfig] = None) -> Optional[TagInfo]:
    """
    Resolve a tree tag to its raw-structure slot.

    The section's own IFD is tried first; if the name is not known there,
    any IFD in the configured fallback order is accepted. This tolerates
    parsers that file a tag under a different section than the encoder's
    table expects.

    Args:
        name: Tag name as it appears in the tree
        section: Tree section name ('Image', 'Photo', 'GPSInfo', 'Iop', 'ThumbnailTags')
        config: Optional configuration

    Returns:
        TagInfo, or None if the tag cannot be placed anywhere
    """
    natural_ifd = SECTION_TO_IFD.get(section)
    if natural_ifd is None:
        return None
    info = lookup_tag(name, natural_ifd)
    if info is not None:
        return info
    return lookup_tag(name, config=config)


def tag_name(ifd: str, code: int) -> Optional[str]:
    """Return the tag name registered for a code in an IFD, if any."""
    entry = _ifd_table(ifd).get(code)
    if not entry:
        return None
    return entry.get('name')


def tag_type(ifd: str, code: int) -> Optional[int]:
    """Return the EXIF type code registered for a code in an IFD, if any."""
    entry = _ifd_table(ifd).get(code)
    if not entry:
        return None
    return entry.get('type')


# ============================================================
# EXIF type classes
# ============================================================

RATIONAL_TYPES = frozenset({piexif.TYPES.Rational, piexif.TYPES.SRational})
INTEGER_TYPES = frozenset({
    piexif.TYPES.Byte, piexif.TYPES.Short, piexif.TYPES.Long,
    piexif.TYPES.SByte, piexif.TYPES.SShort, piexif.TYPES.SLong,
})
SIGNED_TYPES = frozenset({piexif.TYPES.SByte, piexif.TYPES.SShort, piexif.TYPES.SLong, piexif.TYPES.SRational})
FLOAT_TYPES = frozenset({piexif.TYPES.Float, piexif.TYPES.DFloat})

# (min, max) accepted for each integer-like type.
TYPE_RANGES = MappingProxyType({
    piexif.TYPES.Byte: (0, 0xFF),
    piexif.TYPES.SByte: (-0x80, 0x7F),
    piexif.TYPES.Short: (0, 0xFFFF),
    piexif.TYPES.SShort: (-0x8000, 0x7FFF),
    piexif.TYPES.Long: (0, 0xFFFFFFFF),
    piexif.TYPES.SLong: (-0x80000000, 0x7FFFFFFF),
    piexif.TYPES.Rational: (0, 0xFFFFFFFF),
    piexif.TYPES.SRational: (-0x80000000, 0x7FFFFFFF),
})

DATETIME_TAGS = frozenset({'DateTime', 'DateTimeOriginal', 'DateTimeDigitized'})

EXIF_DATETIME_FORMAT = '%Y:%m:%d %H:%M:%S'


# ============================================================
# Enumerated values
# ============================================================

EXPOSURE_PROGRAM_MAP = {
    0: 'Not Defined',
    1: 'Manual',
    2: 'Program AE',
    3: 'Aperture Priority',
    4: 'Shutter Priority',
    5: 'Creative Program',
    6: 'Action Program',
    7: 'Portrait Mode',
    8: 'Landscape Mode',
    9: 'Bulb',
}

METERING_MODE_MAP = {
    0: 'Unknown',
    1: 'Average',
    2: 'Center Weighted Average',
    3: 'Spot',
    4: 'Multi Spot',
    5: 'Multi Segment',
    6: 'Partial',
    255: 'Other',
}

FLASH_MAP = {
    0: 'No Flash',
    1: 'Flash',
    5: 'Flash, No Strobe Return',
    7: 'Flash, Strobe Return',
    8: 'On, Did not fire',
    9: 'On, Fired',
    13: 'On, No Strobe Return',
    15: 'On, Strobe Return',
    16: 'Off, Did not fire',
    20: 'Off, Did not fire, No Return',
    24: 'Auto, Did not fire',
    25: 'Auto, Fired',
    29: 'Auto, Fired, No Return',
    31: 'Auto, Fired, Return',
    32: 'No Flash Function',
    48: 'Off, No Flash Function',
    65: 'Red Eye Reduction',
    69: 'Red Eye Reduction, No Return',
    71: 'Red Eye Reduction, Return',
    73: 'Red Eye Reduction, Fired',
    77: 'Red Eye Reduction, Fired, No Return',
    79: 'Red Eye Reduction, Fired, Return',
    80: 'Off, Red Eye Reduction',
    88: 'Auto, Red Eye Reduction',
    89: 'Auto, Red Eye Reduction, Fired',
    93: 'Auto, Red Eye Reduction, Fired, No Return',
    95: 'Auto, Red Eye Reduction, Fired, Return',
}

WHITE_BALANCE_MAP = {
    0: 'Auto',
    1: 'Manual',
    2: 'Daylight',
    3: 'Cloudy',
    4: 'Tungsten',
    5: 'Fluorescent',
    6: 'Flash',
    7: 'Shade',
    8: 'Kelvin',
    9: 'Manual 2',
    10: 'Manual 3',
}

COLOR_SPACE_MAP = {
    1: 'sRGB',
    2: 'Adobe RGB',
    65535: 'Uncalibrated',
}

ORIENTATION_MAP = {
    1: 'Normal',
    2: 'Flipped Horizontally',
    3: 'Rotated 180°',
    4: 'Flipped Vertically',
    5: 'Rotated 90° CCW, Flipped Horizontally',
    6: 'Rotated 90° CW',
    7: 'Rotated 90° CW, Flipped Horizontally',
    8: 'Rotated 90° CCW',
}

# Fujifilm recipe codes are strings, as emitted by the recipe decoder.
FUJI_FILM_SIMULATION_MAP = {
    'PROVIA': 'Provia (Standard)',
    'Velvia': 'Velvia (Vivid)',
    'ASTIA': 'Astia (Soft)',
    'CLASSIC_CHROME': 'Classic Chrome',
    'PRO_Neg_Hi': 'Pro Neg. Hi',
    'PRO_Neg_Std': 'Pro Neg. Std',
    'CLASSIC_NEG': 'Classic Neg.',
    'ETERNA': 'Eterna (Cinema)',
    'ACROS': 'Acros (B&W)',
    'ACROS_Ye': 'Acros+Ye Filter',
    'ACROS_R': 'Acros+R Filter',
    'ACROS_G': 'Acros+G Filter',
    'MONOCHROME': 'Monochrome',
    'MONOCHROME_Ye': 'Monochrome+Ye Filter',
    'MONOCHROME_R': 'Monochrome+R Filter',
    'MONOCHROME_G': 'Monochrome+G Filter',
    'SEPIA': 'Sepia',
    'NOSTALGIC_NEG': 'Nostalgic Neg.',
    'BLEACH_BYPASS': 'Bleach Bypass',
    'REALA_ACE': 'Reala Ace',
}

FUJI_DYNAMIC_RANGE_MAP = {
    '100': 'DR100',
    '200': 'DR200',
    '400': 'DR400',
    'AUTO': 'DR Auto',
}

EnumCode = Union[int, str]

# Declaration order is the reverse-lookup priority order.
ENUM_CATEGORIES: Mapping[str, Mapping[EnumCode, str]] = MappingProxyType({
    'exposure_program': MappingProxyType(EXPOSURE_PROGRAM_MAP),
    'metering_mode': MappingProxyType(METERING_MODE_MAP),
    'flash': MappingProxyType(FLASH_MAP),
    'white_balance': MappingProxyType(WHITE_BALANCE_MAP),
    'color_space': MappingProxyType(COLOR_SPACE_MAP),
    'orientation': MappingProxyType(ORIENTATION_MAP),
    'fuji_film_simulation': MappingProxyType(FUJI_FILM_SIMULATION_MAP),
    'fuji_dynamic_range': MappingProxyType(FUJI_DYNAMIC_RANGE_MAP),
})

TAG_ENUM_CATEGORIES = MappingProxyType({
    'ExposureProgram': 'exposure_program',
    'MeteringMode': 'metering_mode',
    'Flash': 'flash',
    'WhiteBalance': 'white_balance',
    'ColorSpace': 'color_space',
    'Orientation': 'orientation',
})


def _build_reverse_maps() -> Mapping[str, Mapping[str, EnumCode]]:
    reversed_maps = {}
    for category, table in ENUM_CATEGORIES.items():
        reverse: Dict[str, EnumCode] = {}
        for code, label in table.items():
            # Ambiguous labels keep the first code in table order.
            reverse.setdefault(label, code)
        reversed_maps[category] = MappingProxyType(reverse)
    return MappingProxyType(reversed_maps)


_REVERSE_ENUMS = _build_reverse_maps()


def enum_category(tag: str) -> Optional[str]:
    """Return the enum category registered for a tag name, if any."""
    return TAG_ENUM_CATEGORIES.get(tag)


def enum_lookup(category: str, code: EnumCode) -> str:
    """
    Translate an enumerated code into its label.

    Args:
        category: Enum category name (see ENUM_CATEGORIES)
        code: Numeric (or, for vendor tables, string) code

    Returns:
        The label, or "Unknown (<code>)" when the code is not in the table
    """
    table = ENUM_CATEGORIES.get(category, {})
    try:
        label = table.get(code)
    except TypeError:
        label = None
    if label is not None:
        return label
    if isinstance(code, float) and code.is_integer():
        code = int(code)
    return f"Unknown ({code})"


def enum_reverse_lookup(category: str, label: str) -> Optional[EnumCode]:
    """Translate a label back into its code within one category."""
    reverse = _REVERSE_ENUMS.get(category)
    if reverse is None:
        return None
    return reverse.get(label)


def reverse_lookup_any(label: str, tag: Optional[str] = None) -> Optional[Tuple[str, EnumCode]]:
    """
    Find the code for a label across all enum categories.

    The category registered for ``tag`` is consulted first, then every
    category in declaration order. Labels shared between categories
    (e.g. "Flash", "Manual") therefore resolve to the first category in
    that order; free-text tags whose edited value happens to equal such a
    label are converted to the code as well. This is a known limitation.

    Args:
        label: Display label to look up
        tag: Optional tag name whose own category takes priority

    Returns:
        (category, code) tuple, or None if no category knows the label
    """
    order = list(ENUM_CATEGORIES)
    own = TAG_ENUM_CATEGORIES.get(tag) if tag else None
    if own:
        order.remove(own)
        order.insert(0, own)
    for category in order:
        code = _REVERSE_ENUMS[category].get(label)
        if code is not None:
            return category, code
    return None


# ============================================================
# Display names
# ============================================================

DISPLAY_NAME_OVERRIDES = MappingProxyType({
    '0th': 'Image',
    '1st': 'Thumbnail',
    'IFD0': 'Image',
    'IFD1': 'Thumbnail',
    'Interop': 'Interoperability',
    'Iop': 'Interoperability',
    'Photo': 'Exif',
    'GPSInfo': 'GPS',
    'ThumbnailTags': 'Thumbnail',
    'YCbCrSubSampling': 'YCbCr Sub Sampling',
    'YCbCrPositioning': 'YCbCr Positioning',
    'YCbCrCoefficients': 'YCbCr Coefficients',
    'GPSTimeStamp': 'GPS TimeStamp',
    'GPSHPositioningError': 'GPS HPositioning Error',
    'GPSDOP': 'GPS DOP',
    'ISOSpeedLatitudeyyy': 'ISO Speed Latitude yyy',
    'ISOSpeedLatitudezzz': 'ISO Speed Latitude zzz',
    'DRangePriority': 'D Range Priority',
    'DRangePriorityAuto': 'D Range Priority Auto',
    'DRangePriorityFixed': 'D Range Priority Fixed',
    'ColorChromeFxBlue': 'Color Chrome Fx Blue',
})

_WORD_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])|(?<=[a-z])(?=[0-9])')


def display_name(name: str) -> str:
    """
    Return a human label for a tag, section or recipe key.

    CamelCase names are split into words, keeping acronyms together
    ("GPSLatitude" -> "GPS Latitude", "FNumber" -> "F Number").
    """
    if name in DISPLAY_NAME_OVERRIDES:
        return DISPLAY_NAME_OVERRIDES[name]
    return _WORD_BOUNDARY.sub(' ', name)


# ============================================================
# Tags a user may add to a section
# ============================================================

class AddableTag(NamedTuple):
    """Input kind ('text', 'number', 'datetime-local') and label of an addable tag."""
    kind: str
    description: str


ADDABLE_TAGS: Mapping[str, Mapping[str, AddableTag]] = MappingProxyType({
    'Image': MappingProxyType({
        'Make': AddableTag('text', 'Camera Make'),
        'Model': AddableTag('text', 'Camera Model'),
        'Software': AddableTag('text', 'Software'),
        'Artist': AddableTag('text', 'Artist'),
        'Copyright': AddableTag('text', 'Copyright'),
        'ImageDescription': AddableTag('text', 'Image Description'),
        'DateTime': AddableTag('datetime-local', 'Date Time'),
        'Orientation': AddableTag('number', 'Orientation'),
    }),
    'Photo': MappingProxyType({
        'DateTimeOriginal': AddableTag('datetime-local', 'Date Time Original'),
        'DateTimeDigitized': AddableTag('datetime-local', 'Date Time Digitized'),
        'ExposureTime': AddableTag('number', 'Exposure Time (seconds)'),
        'FNumber': AddableTag('number', 'F Number'),
        'ISOSpeedRatings': AddableTag('number', 'ISO'),
        'FocalLength': AddableTag('number', 'Focal Length (mm)'),
        'FocalLengthIn35mmFilm': AddableTag('number', 'Focal Length In 35mm Film'),
        'ExposureBiasValue': AddableTag('number', 'Exposure Bias (EV)'),
        'LensMake': AddableTag('text', 'Lens Make'),
        'LensModel': AddableTag('text', 'Lens Model'),
        'BodySerialNumber': AddableTag('text', 'Body Serial Number'),
        'CameraOwnerName': AddableTag('text', 'Camera Owner Name'),
    }),
    'GPSInfo': MappingProxyType({
        'GPSAltitude': AddableTag('number', 'Altitude (m)'),
        'GPSAltitudeRef': AddableTag('number', 'Altitude Ref (0 above, 1 below sea level)'),
        'GPSMapDatum': AddableTag('text', 'Map Datum'),
    }),
})
