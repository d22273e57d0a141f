# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for ExifTransfer

Provides commands to view EXIF data of a JPEG image, export and re-apply
it as JSON, edit single fields and copy metadata between images.

Copyright 2025 DNAi inc.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from exiftransfer import __version__
from exiftransfer.config import ConverterConfig
from exiftransfer.display import describe_position, describe_recipe, describe_tree
from exiftransfer.exceptions import ExifTransferError, JSONImportError, MetadataWriteError
from exiftransfer.jpeg_io import load_exif, transfer_exif, write_exif
from exiftransfer.json_io import export_json, import_json
from exiftransfer.metadata_utils import add_field, apply_edit, extract_key_parameters
from exiftransfer.value_formatter import format_value

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ExifTransferError(f"Cannot read {path}: {e.strerror or e}") from e


def _write_bytes(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as e:
        raise MetadataWriteError(f"Cannot write {path}: {e.strerror or e}") from e


def format_document(tree, recipe=None, config: Optional[ConverterConfig] = None) -> str:
    """
    Render a tree as indented text.

    Args:
        tree: Metadata tree
        recipe: Optional vendor recipe
        config: Optional configuration

    Returns:
        Multi-line text
    """
    lines: List[str] = []

    key_params = extract_key_parameters(tree)
    if key_params:
        lines.append("Key Parameters")
        for key, value in key_params.items():
            lines.append(f"  {key}: {format_value(key, value, config)}")

    position = describe_position(tree)
    if position:
        lines.append(f"Position: {position}")

    recipe_view = describe_recipe(recipe, config)
    sections = describe_tree(tree, config)
    if recipe_view is not None:
        sections.insert(0, recipe_view)

    for section in sections:
        if lines:
            lines.append("")
        lines.append(section.label)
        for item in section.fields:
            marker = "" if item.editable else " (read-only)"
            lines.append(f"  {item.label}: {item.text}{marker}")
    return "\n".join(lines)


# ============================================================
# Commands
# ============================================================

def cmd_read(args: argparse.Namespace) -> int:
    document = load_exif(_read_bytes(args.image))
    if args.json:
        print(export_json(document.tree))
    else:
        print(format_document(document.tree, document.recipe))
    return 0


def cmd_export_json(args: argparse.Namespace) -> int:
    document = load_exif(_read_bytes(args.image))
    text = export_json(document.tree, indent=args.indent)
    if args.output:
        _write_bytes(args.output, text.encode('utf-8'))
        logger.info(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def cmd_apply_json(args: argparse.Namespace) -> int:
    image = _read_bytes(args.image)
    try:
        text = _read_bytes(args.json_file).decode('utf-8')
    except UnicodeDecodeError as e:
        raise JSONImportError(f"{args.json_file} is not UTF-8 text: {e}") from e
    tree = import_json(text)
    thumbnail = None
    if args.keep_thumbnail:
        try:
            thumbnail = load_exif(image).thumbnail
        except ExifTransferError:
            logger.debug("No thumbnail to keep in target image")
    _write_bytes(args.output, write_exif(tree, image, thumbnail, remove_gps=args.remove_gps))
    logger.info(f"Wrote {args.output}")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    image = _read_bytes(args.image)
    document = load_exif(image)
    if args.tag in document.tree.get(args.section, {}):
        tree = apply_edit(document.tree, args.section, args.tag, args.value)
    else:
        tree = add_field(document.tree, args.section, args.tag, args.value)
    print(f"{args.section}.{args.tag} = {format_value(args.tag, tree[args.section][args.tag])}")
    _write_bytes(args.output, write_exif(tree, image, document.thumbnail))
    logger.info(f"Wrote {args.output}")
    return 0


def cmd_transfer(args: argparse.Namespace) -> int:
    source = _read_bytes(args.source)
    target = _read_bytes(args.target)
    _write_bytes(args.output, transfer_exif(source, target, remove_gps=not args.keep_gps))
    logger.info(f"Wrote {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='exiftransfer',
        description="ExifTransfer - View, edit and transplant EXIF metadata of JPEG images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show EXIF data
  exiftransfer read photo.jpg

  # Export to JSON, edit, and apply again
  exiftransfer export-json photo.jpg -o photo.json
  exiftransfer apply-json photo.jpg photo.json -o edited.jpg

  # Edit one field using its display form
  exiftransfer set photo.jpg Photo ExposureTime 1/250s -o edited.jpg

  # Copy EXIF data from one image to another (GPS removed)
  exiftransfer transfer original.jpg export.jpg -o export-with-exif.jpg
""",
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    read = subparsers.add_parser('read', help='Show the EXIF data of an image')
    read.add_argument('image', type=Path)
    read.add_argument('--json', action='store_true', help='Print the metadata tree as JSON')
    read.set_defaults(func=cmd_read)

    export = subparsers.add_parser('export-json', help='Export the metadata tree as JSON')
    export.add_argument('image', type=Path)
    export.add_argument('-o', '--output', type=Path, help='Output file (default: stdout)')
    export.add_argument('--indent', type=int, default=2)
    export.set_defaults(func=cmd_export_json)

    apply = subparsers.add_parser('apply-json', help='Write a JSON metadata tree into an image')
    apply.add_argument('image', type=Path)
    apply.add_argument('json_file', type=Path)
    apply.add_argument('-o', '--output', type=Path, required=True)
    apply.add_argument('--remove-gps', action='store_true', help='Do not write GPS data')
    apply.add_argument('--keep-thumbnail', action='store_true', help="Keep the image's embedded thumbnail")
    apply.set_defaults(func=cmd_apply_json)

    edit = subparsers.add_parser('set', help='Set one field from its display form')
    edit.add_argument('image', type=Path)
    edit.add_argument('section', help='Section name (Image, Photo, GPSInfo, Iop, ThumbnailTags)')
    edit.add_argument('tag', help='Tag name (e.g., ExposureTime)')
    edit.add_argument('value', help="Display value (e.g., '1/250s', 'f/2.8', 'Auto')")
    edit.add_argument('-o', '--output', type=Path, required=True)
    edit.set_defaults(func=cmd_set)

    transfer = subparsers.add_parser('transfer', help='Copy EXIF data from one image to another')
    transfer.add_argument('source', type=Path)
    transfer.add_argument('target', type=Path)
    transfer.add_argument('-o', '--output', type=Path, required=True)
    transfer.add_argument('--keep-gps', action='store_true', help='Copy GPS data as well')
    transfer.set_defaults(func=cmd_transfer)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        return args.func(args)
    except ExifTransferError as e:
        print(f"Error: {e.message or e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
