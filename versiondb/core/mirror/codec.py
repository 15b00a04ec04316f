# versiondb/core/mirror/codec.py
"""
ROW CODEC - Turn SQLite cell values into JSON values

Rules:
    blob    -> lowercase hex string ("" for an empty blob)
    real    -> number, or its text form when not finite (inf, nan)
    integer -> number
    text    -> string, broken UTF-8 replaced with U+FFFD
    null    -> null

decode() never raises, so the query path can treat it as infallible.
"""

import math
from typing import Any, Dict, Iterable, Sequence


def decode(value: Any) -> Any:
    """Convert one cell into a JSON-compatible value."""
    if value is None:
        return None

    # bool is an int subclass, keep it before the int branch
    if isinstance(value, bool):
        return int(value)

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return str(value)

    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()

    return str(value)


def decode_text(raw: bytes) -> str:
    """Lossy UTF-8 decode for text columns."""
    return raw.decode("utf-8", errors="replace")


def decode_row(columns: Sequence[str], values: Iterable[Any]) -> Dict[str, Any]:
    """
    Build one JSON object from a result row.

    Keys follow column order. A repeated column name keeps the last value.

    Example:
        decode_row(["id", "hash"], [1, b"\\xca\\xfe"])
        -> {"id": 1, "hash": "cafe"}
    """
    row = {}
    for name, value in zip(columns, values):
        row[name] = decode(value)
    return row
