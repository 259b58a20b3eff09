"""Fixed-width field reader over a frame payload."""

from __future__ import annotations

import math
import re

# Optional sign, digits with optional fraction, blank padding on either side.
# Independent of locale; rejects exponents, underscores, "nan" and "inf".
_DECIMAL_RE = re.compile(rb"[ ]*([+-]?(?:\d+\.?\d*|\.\d+))[ ]*")
_HEX_RE = re.compile(rb"[ ]*([0-9A-Fa-f]+)[ ]*")


def parse_decimal(raw: bytes) -> float:
    """Parse an ASCII decimal field, returning NaN if it is not a number."""
    m = _DECIMAL_RE.fullmatch(raw)
    if m is None:
        return math.nan
    return float(m.group(1))


def parse_hex(raw: bytes) -> int | None:
    """Parse an unsigned ASCII hex field, or None if malformed."""
    m = _HEX_RE.fullmatch(raw)
    if m is None:
        return None
    return int(m.group(1), 16)


class FieldCursor:
    """Reads consecutive fixed-width fields from a payload.

    Every read advances the position by the requested width, whether or
    not the field parses.  Reads that would run off the end are clipped to
    the payload, so the position never exceeds ``len(payload)``.
    """

    def __init__(self, payload: bytes):
        self._payload = bytes(payload)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._payload) - self._pos

    def _take(self, width: int) -> bytes:
        if width < 0:
            raise ValueError(f"negative field width: {width}")
        end = min(self._pos + width, len(self._payload))
        raw = self._payload[self._pos:end]
        self._pos = end
        return raw

    def read_decimal(self, width: int) -> float:
        return parse_decimal(self._take(width))

    def read_hex(self, width: int) -> int | None:
        return parse_hex(self._take(width))

    def read_text(self, width: int) -> str:
        return self._take(width).decode("ascii", errors="replace")

    def skip(self, width: int) -> None:
        self._take(width)
