"""Rolling numpy capture of decoded messages, for gauges and plots.

LiveCapture: subscriber-side accumulator; caller feeds decoded messages
(or registers ``add_message`` on a MessageEmitter) and extracts per-label
series as numpy arrays.
"""

from __future__ import annotations

import logging
import math
from collections import deque

import numpy as np

from .schema import Message

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 10_000


class LiveCapture:
    """Keeps the last ``max_messages`` messages, indexed by sequence number."""

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES):
        if max_messages <= 0:
            raise ValueError("max_messages must be positive")
        self.max_messages = max_messages
        self.truncated_messages: int = 0
        self._rows: deque[tuple[int, dict[str, float]]] = deque(maxlen=max_messages)
        self._labels: dict[str, str] = {}  # label -> units, first-seen order
        self._seq = 0
        self._truncation_warned = False

    def __len__(self) -> int:
        return len(self._rows)

    def add_message(self, message: Message) -> None:
        row: dict[str, float] = {}
        for m in message:
            self._labels.setdefault(m.label, m.units)
            row.setdefault(m.label, m.value)

        if len(self._rows) == self.max_messages:
            self.truncated_messages += 1
            if not self._truncation_warned:
                self._truncation_warned = True
                logger.warning(
                    "Rolling window active: oldest messages are being "
                    "discarded (max_messages=%d)", self.max_messages)
        self._rows.append((self._seq, row))
        self._seq += 1

    def labels(self) -> list[str]:
        return list(self._labels)

    def units(self, label: str) -> str:
        return self._labels[label]

    def series(self, label: str) -> tuple[np.ndarray, np.ndarray]:
        """Return (sequence numbers, values) for *label*.

        Messages that did not carry the label contribute NaN.
        """
        n = len(self._rows)
        seq = np.fromiter((s for s, _ in self._rows), dtype=np.uint64, count=n)
        vals = np.fromiter((row.get(label, math.nan) for _, row in self._rows),
                           dtype=np.float64, count=n)
        return seq, vals

    def latest(self, label: str) -> float:
        """Most recent value of *label*, or NaN if never captured."""
        for _, row in reversed(self._rows):
            if label in row:
                return row[label]
        return math.nan

    def clear(self) -> None:
        self._rows.clear()
        self.truncated_messages = 0
        self._truncation_warned = False
