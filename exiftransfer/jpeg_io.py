# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG boundary: reading, writing and transferring EXIF segments.

EXIF APP1 parsing and serialization are delegated to piexif. This module
joins piexif to the tree converters and translates its failures into
MetadataReadError / MetadataWriteError.

Copyright 2025 DNAi inc.
"""

import io
import logging
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import piexif

from exiftransfer.config import ConverterConfig, DEFAULT_CONFIG
from exiftransfer.exceptions import MetadataReadError, MetadataWriteError, RecipeDecodeError
from exiftransfer.exif_reader import from_raw_tags
from exiftransfer.exif_writer import to_raw_tags
from exiftransfer.metadata_utils import clone_tree, strip_gps

logger = logging.getLogger(__name__)

JPEG_SOI = b'\xff\xd8'

# piexif.load / dump / insert failures
_PIEXIF_ERRORS = (piexif.InvalidImageDataError, ValueError, KeyError, IndexError, TypeError, struct.error)


@dataclass
class ExifDocument:
    """
    EXIF content of one loaded image.

    Attributes:
        tree: Parsed metadata tree
        raw: Raw tag snapshot as returned by piexif.load
        thumbnail: Embedded JPEG thumbnail, if any
        recipe: Decoded vendor recipe, or None
    """
    tree: Dict[str, Dict[str, Any]]
    raw: Dict[str, Any] = field(default_factory=dict)
    thumbnail: Optional[bytes] = None
    recipe: Optional[Dict[str, Any]] = None

    @property
    def maker_note(self) -> Optional[bytes]:
        return (self.raw.get('Exif') or {}).get(piexif.ExifIFD.MakerNote)


def is_jpeg(data: bytes) -> bool:
    return isinstance(data, (bytes, bytearray)) and bytes(data[:2]) == JPEG_SOI


def decode_recipe(maker_note: Optional[bytes],
                  config: Optional[ConverterConfig] = None) -> Optional[Dict[str, Any]]:
    """
    Run the configured recipe decoder over a MakerNote payload.

    Decoder failures are logged and yield None; the rest of the document
    is unaffected.
    """
    config = config or DEFAULT_CONFIG
    if not maker_note or config.recipe_decoder is None:
        return None
    try:
        recipe = config.recipe_decoder(bytes(maker_note))
    except Exception as e:
        error = RecipeDecodeError(f"Recipe decoder failed: {e}")
        logger.warning(error.message)
        return None
    if not isinstance(recipe, dict) or not recipe:
        return None
    return recipe


def load_exif(image_bytes: bytes, config: Optional[ConverterConfig] = None) -> ExifDocument:
    """
    Read the EXIF segment of a JPEG image.

    Args:
        image_bytes: JPEG file contents
        config: Optional configuration

    Returns:
        ExifDocument

    Raises:
        MetadataReadError: If the bytes hold no decodable EXIF data
    """
    if not is_jpeg(image_bytes):
        raise MetadataReadError("No EXIF data: not a JPEG image")
    try:
        raw = piexif.load(bytes(image_bytes))
    except _PIEXIF_ERRORS as e:
        raise MetadataReadError(f"No EXIF data: {e}") from e

    tree = from_raw_tags(raw)
    thumbnail = raw.get('thumbnail')
    if not tree and not thumbnail:
        raise MetadataReadError("No EXIF data found in image")

    logger.debug(f"Loaded {sum(len(tags) for tags in tree.values())} tags in {len(tree)} sections")
    document = ExifDocument(tree=tree, raw=raw, thumbnail=thumbnail)
    document.recipe = decode_recipe(document.maker_note, config)
    return document


def dump_exif(tree: Dict[str, Dict[str, Any]],
              thumbnail: Optional[bytes] = None,
              config: Optional[ConverterConfig] = None) -> bytes:
    """
    Encode a metadata tree as an EXIF segment.

    Raises:
        MetadataWriteError: If piexif rejects the converted structure
    """
    raw = to_raw_tags(tree, thumbnail, config)
    try:
        return piexif.dump(raw)
    except _PIEXIF_ERRORS as e:
        raise MetadataWriteError(f"Failed to encode EXIF data: {e}") from e


def insert_exif(exif_bytes: bytes, image_bytes: bytes) -> bytes:
    """
    Replace the EXIF segment of a JPEG image.

    Raises:
        MetadataWriteError: If the image is not a JPEG or insertion fails
    """
    if not is_jpeg(image_bytes):
        raise MetadataWriteError("Target is not a JPEG image")
    output = io.BytesIO()
    try:
        piexif.insert(exif_bytes, bytes(image_bytes), output)
    except _PIEXIF_ERRORS as e:
        raise MetadataWriteError(f"Failed to insert EXIF data: {e}") from e
    return output.getvalue()


def write_exif(tree: Dict[str, Dict[str, Any]],
               image_bytes: bytes,
               thumbnail: Optional[bytes] = None,
               remove_gps: bool = False,
               config: Optional[ConverterConfig] = None) -> bytes:
    """
    Write a metadata tree into a JPEG image.

    Args:
        tree: Metadata tree
        image_bytes: JPEG file contents
        thumbnail: Optional thumbnail to embed (needs a ThumbnailTags section)
        remove_gps: Drop the GPSInfo section before writing
        config: Optional configuration

    Returns:
        New JPEG file contents
    """
    if remove_gps:
        tree = strip_gps(tree)
    return insert_exif(dump_exif(tree, thumbnail, config), image_bytes)


def transfer_exif(source_bytes: bytes,
                  target_bytes: bytes,
                  remove_gps: Optional[bool] = None,
                  config: Optional[ConverterConfig] = None) -> bytes:
    """
    Copy the EXIF data (and thumbnail) of one JPEG into another.

    Args:
        source_bytes: JPEG whose metadata is copied
        target_bytes: JPEG that receives the metadata
        remove_gps: Drop GPS data; defaults to config.remove_gps_on_transfer
        config: Optional configuration

    Returns:
        Target JPEG contents carrying the source metadata

    Raises:
        MetadataReadError: If the source has no EXIF data
        MetadataWriteError: If the target cannot be written
    """
    config = config or DEFAULT_CONFIG
    if remove_gps is None:
        remove_gps = config.remove_gps_on_transfer
    source = load_exif(source_bytes, config)
    logger.info(f"Transferring {len(source.tree)} sections (GPS {'removed' if remove_gps else 'kept'})")
    return write_exif(clone_tree(source.tree), target_bytes, source.thumbnail, remove_gps, config)
