"""Frame builders shared by the tests."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

from avtelem.schema import EMS, EFIS, FieldEncoding, Schema, SchemaKind

EMS_DEFAULTS = {
    "hour": "12", "minute": "34", "second": "56", "millisecond": "32",
    "manifold pressure": "03000",
    "oil temperature": "180",
    "oil pressure": "065",
    "fuel pressure": "250",
    "voltage": "138",
    "current": "+012",
    "RPM": "240",
    "fuel flow": "085",
    "remaining fuel": "0350",
    "fuel level 1": "120",
    "fuel level 2": "115",
    "gp1": "OAT+0059",
    "gp2": "FL300123",
    "gp3": "XYZ00000",
    "gp slots": "OAT+0059FL300123XYZ00000",
    "gp thermocouple": "0100",
    "egt1": "1351", "egt2": "1352", "egt3": "1353",
    "egt4": "1354", "egt5": "1355", "egt6": "1356",
    "cht1": "351", "cht2": "352", "cht3": "353",
    "cht4": "354", "cht5": "355", "cht6": "356",
    "contact 1": "1",
    "contact 2": "0",
    "product id": "02",
}

EFIS_DEFAULTS = {
    "hour": "12", "minute": "34", "second": "56", "millisecond": "16",
    "pitch": "+025",
    "roll": "-0123",
    "yaw": "270",
    "airspeed": "0515",
    "altitude": "01500",
    "rate": "+012",
    "lateral acceleration": "-05",
    "vertical acceleration": "+10",
    "angle of attack": "42",
    "status": "000000",
    "reserved": "0001",
}


def make_payload(schema: Schema, **overrides: str) -> bytes:
    """Build a payload for *schema*; keyword names use '_' for spaces."""
    defaults = EMS_DEFAULTS if schema.kind == SchemaKind.EMS else EFIS_DEFAULTS
    values = dict(defaults)
    for key, val in overrides.items():
        values[key.replace("_", " ")] = val

    parts = []
    for f in schema.fields:
        text = values.get(f.name, "")
        if f.encoding == FieldEncoding.SKIP and f.name not in values:
            text = "0" * f.width
        text = text.rjust(f.width, "0")
        assert len(text) == f.width, (f.name, text)
        parts.append(text)
    payload = "".join(parts).encode("ascii")
    assert len(payload) == schema.payload_size
    return payload


def checksum_for(schema: Schema, payload: bytes) -> int:
    if schema.kind == SchemaKind.EMS:
        return (-sum(payload)) & 0xFF
    return sum(payload) & 0xFF


def make_line(schema: Schema, payload: bytes) -> bytes:
    """Payload + hex checksum, without terminator."""
    return payload + b"%02X" % checksum_for(schema, payload)


def make_frame(schema: Schema, payload: bytes) -> bytes:
    """Complete wire frame including CR LF."""
    return make_line(schema, payload) + b"\r\n"


def ems_frame(**overrides: str) -> bytes:
    return make_frame(EMS, make_payload(EMS, **overrides))


def efis_frame(**overrides: str) -> bytes:
    return make_frame(EFIS, make_payload(EFIS, **overrides))


def labels(message) -> list:
    return [m.label for m in message]


def value(message, label: str) -> float:
    for m in message:
        if m.label == label:
            return m.value
    raise KeyError(label)
