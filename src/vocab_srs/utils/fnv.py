"""FNV-1a: 32-bit hashing for deterministic card identities.

Hashes UTF-16 code units rather than UTF-8 bytes so that ids match
records created by browser clients (JavaScript strings are UTF-16).
"""

from __future__ import annotations

# 32-bit FNV parameters
_OFFSET_BASIS = 0x811C9DC5
_PRIME = 0x01000193
_MASK = 0xFFFFFFFF


def _utf16_units(text: str) -> list[int]:
    """Split text into UTF-16 code units (surrogate pairs for astral chars)."""
    data = text.encode("utf-16-le")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def fnv1a_32(text: str) -> int:
    """Compute the 32-bit FNV-1a hash of ``text``.

    Args:
        text: Any string, possibly empty.

    Returns:
        An unsigned 32-bit integer.
    """
    h = _OFFSET_BASIS
    for unit in _utf16_units(text):
        h ^= unit
        h = (h * _PRIME) & _MASK
    return h


def fnv1a_hex(text: str) -> str:
    """Hash ``text`` and render it as 8 lowercase hex digits."""
    return f"{fnv1a_32(text):08x}"
