"""Line framing, frame validation and schema decoding for EMS/EFIS streams."""

from __future__ import annotations

import logging
import math
from typing import Iterator

from .cursor import FieldCursor, parse_hex
from .schema import (
    CHECKSUM_SIZE, EFIS_ALTERNATES, EFIS_STATUS_PRESSURE_ALT, GP_CODE_SIZE,
    GP_CODES, GP_VALUE_SIZE, FieldDef, FieldEncoding, Measurement, Message,
    Schema, SchemaKind, EFIS_ALTERNATE_FIELDS,
)

logger = logging.getLogger(__name__)

FRAME_TERMINATOR = b"\r\n"


class LineFramer:
    """Splits an unbounded byte stream into CR LF terminated lines."""

    def __init__(self):
        self._buf = bytearray()

    @property
    def buffered(self) -> int:
        return len(self._buf)

    def feed(self, data: bytes) -> None:
        self._buf.extend(data)

    def read_line(self) -> bytes | None:
        """Remove and return one line without its terminator, or None."""
        end = self._buf.find(FRAME_TERMINATOR)
        if end < 0:
            return None
        line = bytes(self._buf[:end])
        del self._buf[:end + len(FRAME_TERMINATOR)]
        return line

    def lines(self) -> Iterator[bytes]:
        """Yield every complete line currently buffered."""
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line

    def reset(self) -> None:
        """Discard any partially buffered line."""
        self._buf.clear()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def checksum_ok(schema: Schema, payload: bytes, checksum: int) -> bool:
    """Apply the schema's checksum policy to *payload*.

    EMS frames are self-zeroing: the byte sum of the payload plus the
    checksum byte is 0 mod 256.  EFIS frames carry the payload byte sum
    mod 256 directly.
    """
    total = sum(payload)
    if schema.kind == SchemaKind.EMS:
        return (total + checksum) & 0xFF == 0
    return total & 0xFF == checksum


def validate_frame(schema: Schema, line: bytes) -> bytes | None:
    """Return the payload of *line* if it is a valid frame, else None."""
    size = schema.frame_size
    if len(line) < size:
        logger.debug("%s: short frame (%d < %d bytes)",
                     schema.name, len(line), size)
        return None
    if len(line) > size:
        line = line[:size] if schema.keep_left else line[-size:]

    payload, footer = line[:-CHECKSUM_SIZE], line[-CHECKSUM_SIZE:]
    checksum = parse_hex(footer)
    if checksum is None or footer.strip() != footer:
        logger.debug("%s: malformed checksum field %r", schema.name, footer)
        return None
    if not checksum_ok(schema, payload, checksum):
        logger.debug("%s: checksum mismatch (footer %r)", schema.name, footer)
        return None
    return payload


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _read_field(cursor: FieldCursor, f: FieldDef) -> Measurement:
    if f.encoding == FieldEncoding.HEX:
        raw = cursor.read_hex(f.width)
        value = math.nan if raw is None else f.convert(raw)
    else:
        value = f.convert(cursor.read_decimal(f.width))
    return Measurement(f.name, f.units, value)


def _read_gp_slot(cursor: FieldCursor) -> Measurement | None:
    code = cursor.read_text(GP_CODE_SIZE)
    raw = cursor.read_decimal(GP_VALUE_SIZE)
    gp = GP_CODES.get(code)
    if gp is None:
        logger.debug("ems: unrecognised general-purpose code %r", code)
        return None
    return Measurement(gp.label, gp.units, gp.convert(raw))


def _decode_ems(schema: Schema, cursor: FieldCursor) -> list[Measurement]:
    out: list[Measurement] = []
    for f in schema.fields:
        if f.encoding == FieldEncoding.SKIP:
            cursor.skip(f.width)
        elif f.encoding == FieldEncoding.GP_SLOT:
            m = _read_gp_slot(cursor)
            if m is not None:
                out.append(m)
        else:
            out.append(_read_field(cursor, f))
    return out


def _decode_efis(schema: Schema, cursor: FieldCursor) -> list[Measurement]:
    out: list[Measurement] = []
    # (insert position, value) for the altitude and rate temporaries
    pending: list[tuple[int, float]] = []
    status: int | None = None

    for f in schema.fields:
        if f.encoding == FieldEncoding.SKIP:
            cursor.skip(f.width)
        elif f.name in EFIS_ALTERNATE_FIELDS:
            pending.append((len(out), f.convert(cursor.read_decimal(f.width))))
        elif f.name == "status":
            status = cursor.read_hex(f.width)
        else:
            out.append(_read_field(cursor, f))

    # A malformed bitmask is treated as bit 0 clear
    pressure_alt = status is not None and bool(status & EFIS_STATUS_PRESSURE_ALT)
    names = EFIS_ALTERNATES[pressure_alt]
    for n, ((pos, value), (label, units)) in enumerate(zip(pending, names)):
        out.insert(pos + n, Measurement(label, units, value))
    return out


def decode_payload(schema: Schema, payload: bytes) -> Message:
    """Decode a validated payload into an ordered tuple of measurements."""
    cursor = FieldCursor(payload)
    if schema.kind == SchemaKind.EMS:
        measurements = _decode_ems(schema, cursor)
    elif schema.kind == SchemaKind.EFIS:
        measurements = _decode_efis(schema, cursor)
    else:
        raise ValueError(f"unsupported schema kind: {schema.kind!r}")
    return tuple(measurements)


def decode_frame(schema: Schema, line: bytes) -> Message | None:
    """Validate and decode one line.  Returns None if the frame is rejected."""
    payload = validate_frame(schema, line)
    if payload is None:
        return None
    return decode_payload(schema, payload)


class FrameDecoder:
    """Stateful stream decoder: raw bytes in, decoded messages out.

    Rejected frames are counted in ``dropped`` and otherwise ignored; the
    instrument repeats its broadcast, so the next frame replaces them.
    """

    def __init__(self, schema: Schema):
        self.schema = schema
        self.accepted: int = 0
        self.dropped: int = 0
        self._framer = LineFramer()

    @property
    def buffered(self) -> int:
        return self._framer.buffered

    def feed(self, data: bytes) -> list[Message]:
        """Feed raw bytes, return the messages of every complete valid frame."""
        self._framer.feed(data)
        results: list[Message] = []
        for line in self._framer.lines():
            msg = decode_frame(self.schema, line)
            if msg is None:
                self.dropped += 1
                continue
            self.accepted += 1
            results.append(msg)
        return results

    def reset(self):
        """Clear internal buffer."""
        self._framer.reset()
