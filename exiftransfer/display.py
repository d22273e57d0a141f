# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Display model for metadata trees.

Turns a metadata tree (and an optional vendor recipe) into ordered
sections of labelled, formatted fields, with a flag telling a viewer
whether each field may be edited in place.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from exiftransfer.config import ConverterConfig
from exiftransfer.exif_tags import display_name
from exiftransfer.gps_codec import gps_position
from exiftransfer.value_formatter import (
    BinaryData,
    DisplayValue,
    format_gps_altitude,
    format_gps_coordinate,
    format_gps_time,
    format_recipe_value,
    format_value,
)

# Sections shown in this order; any others follow alphabetically.
SECTION_ORDER = ('Image', 'Photo', 'GPSInfo', 'Iop', 'ThumbnailTags')

NON_EDITABLE_SECTIONS = frozenset({'MakerNote', 'thumbnail'})
# GPS coordinates and time are edited through the position, not as text.
NON_EDITABLE_TAGS = frozenset({'MakerNote', 'GPSLatitude', 'GPSLongitude', 'GPSTimeStamp'})

RECIPE_SECTION = 'FujiRecipe'


@dataclass
class FieldView:
    """One rendered field."""
    key: str
    label: str
    value: Any
    text: DisplayValue
    editable: bool

    @property
    def is_binary(self) -> bool:
        return isinstance(self.text, BinaryData)


@dataclass
class SectionView:
    """One rendered section: its name, label and fields in tree order."""
    name: str
    label: str
    fields: List[FieldView] = field(default_factory=list)

    def get(self, key: str) -> Optional[FieldView]:
        for item in self.fields:
            if item.key == key:
                return item
        return None


def is_editable(section: str, tag: str, text: DisplayValue) -> bool:
    """Whether a field may be edited in place; binary values never are."""
    if section in NON_EDITABLE_SECTIONS or tag in NON_EDITABLE_TAGS:
        return False
    return not isinstance(text, BinaryData)


def _gps_text(tag: str, value: Any, gps: Dict[str, Any], config: Optional[ConverterConfig]) -> DisplayValue:
    if tag == 'GPSLatitude':
        return format_gps_coordinate(value, gps.get('GPSLatitudeRef'), 'lat')
    if tag == 'GPSLongitude':
        return format_gps_coordinate(value, gps.get('GPSLongitudeRef'), 'lng')
    if tag == 'GPSTimeStamp':
        return format_gps_time(value)
    if tag == 'GPSAltitude':
        return format_gps_altitude(value, gps.get('GPSAltitudeRef', 0))
    return format_value(tag, value, config)


def describe_section(name: str, tags: Dict[str, Any],
                     config: Optional[ConverterConfig] = None) -> SectionView:
    """Render one section of a tree."""
    view = SectionView(name=name, label=display_name(name))
    for tag, value in tags.items():
        if name == 'GPSInfo':
            text = _gps_text(tag, value, tags, config)
        else:
            text = format_value(tag, value, config)
        view.fields.append(FieldView(
            key=tag,
            label=display_name(tag),
            value=value,
            text=text,
            editable=is_editable(name, tag, text),
        ))
    return view


def describe_tree(tree: Optional[Dict[str, Dict[str, Any]]],
                  config: Optional[ConverterConfig] = None) -> List[SectionView]:
    """
    Render every section of a metadata tree.

    Args:
        tree: Metadata tree
        config: Optional configuration

    Returns:
        List of SectionView in display order; empty sections are skipped
    """
    tree = tree or {}
    known = [name for name in SECTION_ORDER if name in tree]
    others = sorted(name for name in tree if name not in SECTION_ORDER and name not in NON_EDITABLE_SECTIONS)
    sections = []
    for name in known + others:
        tags = tree[name]
        if isinstance(tags, dict) and tags:
            sections.append(describe_section(name, tags, config))
    return sections


def describe_recipe(recipe: Optional[Dict[str, Any]],
                    config: Optional[ConverterConfig] = None) -> Optional[SectionView]:
    """
    Render a vendor recipe as a read-only section.

    Returns:
        SectionView, or None if there is no recipe
    """
    if not recipe:
        return None
    view = SectionView(name=RECIPE_SECTION, label=display_name(RECIPE_SECTION))
    for key, value in recipe.items():
        view.fields.append(FieldView(
            key=key,
            label=display_name(key),
            value=value,
            text=format_recipe_value(key, value, config),
            editable=False,
        ))
    return view


def describe_position(tree: Optional[Dict[str, Dict[str, Any]]]) -> Optional[str]:
    """Decimal 'lat, lng' of the tree's GPS position, or None."""
    position = gps_position((tree or {}).get('GPSInfo'))
    if position is None:
        return None
    return f"{position[0]:.6f}, {position[1]:.6f}"
