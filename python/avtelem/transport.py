"""Byte sources for instrument streams."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

DEFAULT_BAUDRATE = 115200


class Transport(Protocol):
    """Abstract byte source interface."""

    def read(self, n: int) -> bytes: ...
    def close(self) -> None: ...


class SerialTransport:
    """UART / serial port transport, 8N1 (requires pyserial)."""

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE,
                 timeout: float = 0.05):
        import serial
        self._ser = serial.Serial(
            port,
            baudrate,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            timeout=timeout,
        )

    @property
    def port(self) -> str:
        return self._ser.port

    def read(self, n: int) -> bytes:
        """Return what is buffered (up to *n*), waiting at most one timeout."""
        waiting = self._ser.in_waiting
        return self._ser.read(min(n, waiting) if waiting else 1)

    def close(self) -> None:
        self._ser.close()


class FileTransport:
    """Replay a captured raw byte stream from a file."""

    def __init__(self, path: str | Path):
        self._f = open(path, "rb")

    def read(self, n: int) -> bytes:
        return self._f.read(n) or b""

    def close(self) -> None:
        self._f.close()
