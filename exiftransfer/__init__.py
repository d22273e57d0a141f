# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
ExifTransfer - EXIF tag conversion and value (de)serialization

Converts between a friendly, section-oriented EXIF metadata tree and the
raw IFD/tag-code structure used by piexif, formats raw values for display
and parses edited display strings back into EXIF-native values.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exceptions import (
    ExifTransferError,
    InvalidTagError,
    JSONImportError,
    MetadataReadError,
    MetadataWriteError,
    RecipeDecodeError,
)
from exiftransfer.exif_tags import (
    TagInfo,
    display_name,
    enum_lookup,
    enum_reverse_lookup,
    lookup_tag,
    resolve_tag,
)
from exiftransfer.value_formatter import BinaryData, format_recipe_value, format_value
from exiftransfer.value_parser import parse_edit, unformat_recipe_value, unformat_value
from exiftransfer.exif_writer import to_raw_tags
from exiftransfer.exif_reader import from_raw_tags
from exiftransfer.gps_codec import to_decimal, to_exif_format
from exiftransfer.json_io import export_json, import_json
from exiftransfer.metadata_utils import (
    add_field,
    apply_edit,
    clone_tree,
    extract_key_parameters,
    remove_field,
    replace_value,
    strip_gps,
    update_gps_position,
)
from exiftransfer.display import FieldView, SectionView, describe_recipe, describe_tree
from exiftransfer.jpeg_io import ExifDocument, load_exif, transfer_exif, write_exif

__all__ = [
    'ConverterConfig',
    'DEFAULT_CONFIG',
    'ExifTransferError',
    'InvalidTagError',
    'JSONImportError',
    'MetadataReadError',
    'MetadataWriteError',
    'RecipeDecodeError',
    'TagInfo',
    'display_name',
    'enum_lookup',
    'enum_reverse_lookup',
    'lookup_tag',
    'resolve_tag',
    'BinaryData',
    'format_value',
    'format_recipe_value',
    'parse_edit',
    'unformat_value',
    'unformat_recipe_value',
    'to_raw_tags',
    'from_raw_tags',
    'to_decimal',
    'to_exif_format',
    'export_json',
    'import_json',
    'clone_tree',
    'replace_value',
    'apply_edit',
    'add_field',
    'remove_field',
    'update_gps_position',
    'strip_gps',
    'extract_key_parameters',
    'FieldView',
    'SectionView',
    'describe_tree',
    'describe_recipe',
    'ExifDocument',
    'load_exif',
    'write_exif',
    'transfer_exif',
]
