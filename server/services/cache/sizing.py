"""Serialized-size estimation and human readable byte formatting."""

import json
from typing import Any

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


class CacheSerializationError(TypeError):
    """Raised when a value cannot be serialized to measure its size."""


class JsonSizeEstimator:
    """Measures a value as the UTF-8 length of its compact JSON form."""

    def estimate(self, value: Any) -> int:
        try:
            serialized = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
            # Lone surrogates raise UnicodeEncodeError, a ValueError
            return len(serialized.encode("utf-8"))
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(
                f"Cannot cache non-serializable value of type {type(value).__name__}: {e}"
            ) from e

    def __call__(self, value: Any) -> int:
        return self.estimate(value)


def format_bytes(num_bytes: float) -> str:
    """Format a byte count using the largest unit with a value of at least 1.

    Values are rounded to two decimals with trailing zeros dropped,
    e.g. ``1536 -> "1.5 KB"`` and ``0 -> "0 Bytes"``.
    """
    if num_bytes == 0:
        return "0 Bytes"

    value = float(num_bytes)
    unit = 0
    while abs(value) >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[unit]}"
