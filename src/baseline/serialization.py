"""
Baseline JSON (de)serialization.

A baseline file is a JSON array of records:

    [
      {
        "key": "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Run",
        "type": "MatchAll",
        "names": ["Updater"],
        "values": ["C:\\Program Files\\Updater\\upd.exe"]
      }
    ]

Value encoding: strings as JSON strings, integers as numbers, multi-strings
as arrays of strings, binary as {"binary": "<base64>"}. Arrays of integers
(0-255) are read as binary too. "matchMode" is accepted in place of "type".
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from core.enums import MatchMode
from core.exceptions import BaselineFormatError, BaselineRecordError
from core.logging import get_logger
from core.values import (
    BinaryValue,
    IntValue,
    RegistryValue,
    StringListValue,
    StringValue,
)
from sources.base import split_key_path

from .records import BaselineRecord, make_baseline_record

LOGGER = get_logger("baseline.serialization")

BINARY_TAG = "binary"
MODE_FIELDS = ("type", "matchMode")


def encode_value(value: RegistryValue) -> Any:
    """Encode a typed value as a JSON-compatible object."""
    if isinstance(value, StringValue):
        return value.data
    if isinstance(value, IntValue):
        return value.data
    if isinstance(value, StringListValue):
        return list(value.data)
    if isinstance(value, BinaryValue):
        return {BINARY_TAG: base64.b64encode(value.data).decode("ascii")}
    raise TypeError(f"Unsupported value object: {type(value).__name__}")


def decode_value(obj: Any) -> RegistryValue:
    """
    Decode a JSON object into a typed value.

    Raises:
        BaselineFormatError: If the object is not a valid encoded value
    """
    if isinstance(obj, bool) or obj is None:
        raise BaselineFormatError(f"Unsupported value in baseline: {obj!r}")
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, int):
        return IntValue(obj)
    if isinstance(obj, dict):
        if set(obj) != {BINARY_TAG} or not isinstance(obj[BINARY_TAG], str):
            raise BaselineFormatError(f"Unsupported value object in baseline: {obj!r}")
        try:
            return BinaryValue(base64.b64decode(obj[BINARY_TAG], validate=True))
        except (binascii.Error, ValueError) as exc:
            raise BaselineFormatError(f"Invalid base64 binary value: {obj[BINARY_TAG]!r}") from exc
    if isinstance(obj, list):
        if all(isinstance(item, str) for item in obj):
            return StringListValue(tuple(obj))
        if all(isinstance(item, int) and not isinstance(item, bool) and 0 <= item <= 255 for item in obj):
            return BinaryValue(bytes(obj))
        raise BaselineFormatError(f"Array value must hold only strings or bytes: {obj!r}")
    raise BaselineFormatError(f"Unsupported value in baseline: {obj!r}")


def record_to_dict(record: BaselineRecord) -> Dict[str, Any]:
    return {
        "key": record.key,
        "type": str(record.match_mode),
        "names": list(record.names),
        "values": [encode_value(value) for value in record.values],
    }


def record_from_dict(data: Any, index: int = 0) -> BaselineRecord:
    """
    Build a record from its decoded JSON object.

    Raises:
        BaselineFormatError: If any field is missing or invalid
    """
    where = f"record {index}"
    if not isinstance(data, dict):
        raise BaselineFormatError(f"{where}: expected an object, got {type(data).__name__}")

    key = data.get("key")
    if not isinstance(key, str) or not key:
        raise BaselineFormatError(f"{where}: 'key' must be a non-empty string")
    where = f"record {index} ({key})"
    try:
        split_key_path(key)
    except ValueError as exc:
        raise BaselineFormatError(f"{where}: {exc}") from exc

    mode = next((data[field] for field in MODE_FIELDS if field in data), None)
    if mode is None:
        raise BaselineFormatError(f"{where}: missing 'type'")
    try:
        mode = MatchMode(mode)
    except ValueError as exc:
        raise BaselineFormatError(f"{where}: unknown type {mode!r}") from exc

    names = data.get("names")
    values = data.get("values")
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise BaselineFormatError(f"{where}: 'names' must be an array of strings")
    if not isinstance(values, list):
        raise BaselineFormatError(f"{where}: 'values' must be an array")

    try:
        decoded = [decode_value(value) for value in values]
    except BaselineFormatError as exc:
        raise BaselineFormatError(f"{where}: {exc}") from exc

    try:
        return make_baseline_record(mode, key, names, decoded)
    except BaselineRecordError as exc:
        raise BaselineFormatError(f"{where}: {exc}") from exc


def records_to_json(records: Iterable[BaselineRecord], indent: int | None = 2) -> str:
    return json.dumps([record_to_dict(r) for r in records], indent=indent, ensure_ascii=False)


def records_from_json(text: str) -> List[BaselineRecord]:
    """
    Parse a baseline document.

    Raises:
        BaselineFormatError: If the document is not a valid baseline
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BaselineFormatError(f"Baseline is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise BaselineFormatError(
            f"Baseline must be a JSON array of records, got {type(data).__name__}"
        )
    return [record_from_dict(item, index) for index, item in enumerate(data)]


def save_baseline(records: Iterable[BaselineRecord], path: Path) -> int:
    """
    Write records to a baseline file.

    Returns:
        Number of records written
    """
    records = list(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(records_to_json(records) + "\n", encoding="utf-8")
    LOGGER.info("Wrote %d baseline records to %s", len(records), path)
    return len(records)


def load_baseline(path: Path) -> List[BaselineRecord]:
    """
    Read and validate a baseline file.

    Raises:
        BaselineFormatError: If the file is unreadable or invalid
    """
    try:
        # utf-8-sig tolerates the BOM PowerShell writes
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise BaselineFormatError(f"Cannot read baseline file {path}: {exc}") from exc

    records = records_from_json(text)
    LOGGER.info("Loaded %d baseline records from %s", len(records), path)
    return records
