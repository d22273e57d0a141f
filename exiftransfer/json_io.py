# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JSON import and export for metadata trees.

Byte sequences are written as {"type": "Buffer", "data": [...]} wrappers
and timestamps as plain ISO 8601 strings. On import, wrappers (either
"Buffer" or "Uint8Array") become bytes again and ISO 8601 strings under
keys containing "Date" or "Time" become datetimes.

Copyright 2025 DNAi inc.
"""

import json
import logging
import numbers
import re
from datetime import datetime
from typing import Any, Dict

from exiftransfer.exceptions import JSONImportError

logger = logging.getLogger(__name__)

BYTE_WRAPPER_TYPES = ('Buffer', 'Uint8Array')

_ISO_DATETIME = re.compile(
    r'^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$'
)


def _to_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {'type': 'Buffer', 'data': list(value)}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


def export_json(tree: Dict[str, Dict[str, Any]], indent: int = 2) -> str:
    """
    Serialize a metadata tree to JSON text.

    Args:
        tree: Metadata tree
        indent: Indentation passed to json.dumps

    Returns:
        JSON text
    """
    return json.dumps(_to_json(tree), indent=indent, ensure_ascii=False)


def _is_date_key(key: str) -> bool:
    return 'Date' in key or 'Time' in key


def _parse_iso(text: str) -> datetime:
    return datetime.fromisoformat(text.replace('Z', '+00:00'))


def _revive_bytes(value: Dict[str, Any], path: str) -> bytes:
    data = value.get('data')
    if not isinstance(data, list):
        raise JSONImportError(f"{path}: {value['type']} wrapper without a data array")
    if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in data):
        raise JSONImportError(f"{path}: {value['type']} data must be integers 0-255")
    return bytes(data)


def _revive(key: str, value: Any, path: str) -> Any:
    if value is None or isinstance(value, bool):
        raise JSONImportError(f"{path}: unsupported value {json.dumps(value)}")

    if isinstance(value, dict):
        if value.get('type') in BYTE_WRAPPER_TYPES:
            return _revive_bytes(value, path)
        return {k: _revive(k, v, f"{path}.{k}") for k, v in value.items()}

    if isinstance(value, list):
        return [_revive(key, v, f"{path}[{i}]") for i, v in enumerate(value)]

    if isinstance(value, str) and _is_date_key(key) and _ISO_DATETIME.match(value):
        try:
            return _parse_iso(value)
        except ValueError:
            logger.debug(f"{path}: {value!r} looks like a date but does not parse; kept as text")
            return value

    if isinstance(value, (str, numbers.Real)):
        return value

    raise JSONImportError(f"{path}: unsupported value of type {type(value).__name__}")


def import_json(text: str) -> Dict[str, Dict[str, Any]]:
    """
    Rebuild a metadata tree from JSON text.

    Args:
        text: JSON text as written by ``export_json``

    Returns:
        Metadata tree with bytes and datetimes restored

    Raises:
        JSONImportError: If the text is not valid JSON or does not have the
            shape of a metadata tree
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise JSONImportError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise JSONImportError(f"Expected a JSON object of sections, got {type(data).__name__}")

    tree: Dict[str, Dict[str, Any]] = {}
    for section, tags in data.items():
        if not isinstance(tags, dict):
            raise JSONImportError(f"Section {section!r} must be a JSON object, got {type(tags).__name__}")
        if tags.get('type') in BYTE_WRAPPER_TYPES:
            raise JSONImportError(f"Section {section!r} must map tag names to values")
        tree[section] = {name: _revive(name, value, f"{section}.{name}") for name, value in tags.items()}
    return tree
