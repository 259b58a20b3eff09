"""Tab-separated variable log: writer and numpy reader.

File format (one row per accepted message, no header):
  [value_0] TAB [value_1] TAB ... TAB [value_K] LF

Column k holds the k-th label registered for the logging session.
Values are fixed-point ("%f"); labels missing from a message are written
as the token ``NaN``.  Column assignments are only valid for the session
that wrote the file.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, TextIO

import numpy as np

from .schema import Measurement, Message, message_value

logger = logging.getLogger(__name__)

NAN_TOKEN = "NaN"
DELIMITER = "\t"


def format_value(value: float) -> str:
    if math.isnan(value):
        return NAN_TOKEN
    return f"{value:f}"


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class VariableLogger:
    """Writes the values of an allow-list of labels, one row per message."""

    def __init__(self):
        self._f: TextIO | None = None
        self._path: Path | None = None
        self._columns: dict[str, int] = {}
        self.rows: int = 0

    @property
    def is_logging(self) -> bool:
        return self._f is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def columns(self) -> list[str]:
        """Registered labels in column order."""
        return list(self._columns)

    def include(self, label: str) -> int:
        """Register *label* for logging; return its column index."""
        if label not in self._columns:
            self._columns[label] = len(self._columns)
        return self._columns[label]

    def include_message(self, message: Iterable[Measurement]) -> None:
        """Register every label of *message*, in message order."""
        for m in message:
            self.include(m.label)

    def start(self, path: str | Path) -> None:
        """Open (truncating) the destination and begin a session."""
        if self._f is not None:
            raise RuntimeError(f"already logging to {self._path}")
        self._path = Path(path)
        self._f = open(self._path, "w", encoding="ascii", newline="\n")
        self.rows = 0
        logger.info("logging %d variable(s) to %s",
                    len(self._columns), self._path)

    def stop(self) -> None:
        """Close the destination and discard the column map."""
        if self._f is not None:
            self._f.close()
            logger.info("closed %s after %d row(s)", self._path, self.rows)
        self._f = None
        self._columns = {}

    def log(self, message: Message) -> bool:
        """Write one row for *message*.  Returns False when not logging."""
        if self._f is None:
            return False
        row = DELIMITER.join(
            format_value(message_value(message, label))
            for label in self.columns
        )
        self._f.write(row + "\n")
        self.rows += 1
        return True

    def flush(self) -> None:
        if self._f is not None:
            self._f.flush()

    @contextmanager
    def session(self, path: str | Path) -> Iterator[VariableLogger]:
        self.start(path)
        try:
            yield self
        finally:
            self.stop()


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

def read_log(path: str | Path) -> np.ndarray:
    """Load a variable log as a 2-D float array (rows x columns)."""
    with open(path, "r", encoding="ascii") as f:
        if not f.read(1):
            return np.empty((0, 0))
    return np.loadtxt(path, delimiter=DELIMITER, dtype=np.float64, ndmin=2)


class LogReader:
    """Reads a variable log back by label, given the session's columns."""

    def __init__(self, path: str | Path, labels: Iterable[str]):
        self._path = Path(path)
        self._labels = list(labels)
        self._data: np.ndarray | None = None

    @property
    def labels(self) -> list[str]:
        return self._labels

    @property
    def data(self) -> np.ndarray:
        if self._data is None:
            data = read_log(self._path)
            if data.size and data.shape[1] != len(self._labels):
                raise ValueError(
                    f"{self._path}: {data.shape[1]} column(s), "
                    f"expected {len(self._labels)}")
            self._data = data
        return self._data

    def column(self, label: str) -> np.ndarray:
        """All logged values of *label*, in row order."""
        idx = self._labels.index(label)
        if not self.data.size:
            return np.empty(0)
        return self.data[:, idx]

    def __len__(self) -> int:
        return self.data.shape[0]
