#!/usr/bin/env python3
"""Write a synthetic EMS or EFIS byte stream for replay testing.

Usage:
    python examples/synth_capture.py ems /tmp/ems.bin [seconds]

Then:
    avtelem-dump /tmp/ems.bin ems --replay
"""

import math
import random
import sys

from avtelem.schema import FieldEncoding, SchemaKind, get_schema

RATE_HZ = 8


def fmt(value: float, width: int, signed: bool = False) -> str:
    """Right-aligned, zero-padded decimal text of exactly *width* chars."""
    n = int(round(value))
    if signed:
        return ("+" if n >= 0 else "-") + str(abs(n)).rjust(width - 1, "0")[-(width - 1):]
    return str(abs(n)).rjust(width, "0")[-width:]


def ems_values(t: float) -> dict[str, str]:
    rpm = 2400 + 200 * math.sin(2 * math.pi * t / 20.0)
    values = {
        "manifold pressure": fmt(2500 + 300 * math.sin(2 * math.pi * t / 15.0), 5),
        "oil temperature": fmt(180 + random.gauss(0, 1), 3),
        "oil pressure": fmt(65 + random.gauss(0, 0.5), 3),
        "fuel pressure": fmt(250, 3),
        "voltage": fmt(138 + random.gauss(0, 1), 3),
        "current": fmt(12 + random.gauss(0, 2), 4, signed=True),
        "RPM": fmt(rpm / 10, 3),
        "fuel flow": fmt(85, 3),
        "remaining fuel": fmt(400 - t * 0.2, 4),
        "fuel level 1": fmt(200 - t * 0.1, 3),
        "fuel level 2": fmt(200 - t * 0.1, 3),
        "gp1": "OAT" + fmt(59, 5, signed=True),
        "gp2": "CLT" + fmt(190 + random.gauss(0, 1), 5, signed=True),
        "gp3": "FLP" + fmt(10, 5, signed=True),
        "gp thermocouple": fmt(100, 4),
        "contact 1": "1",
        "contact 2": "0",
    }
    for i in range(1, 7):
        values[f"egt{i}"] = fmt(1350 + 10 * i + random.gauss(0, 3), 4)
        values[f"cht{i}"] = fmt(350 + i + random.gauss(0, 1), 3)
    values["gp slots"] = values["gp1"] + values["gp2"] + values["gp3"]
    return values


def efis_values(t: float) -> dict[str, str]:
    pressure_alt = int(t) % 10 < 5
    return {
        "pitch": fmt(30 * math.sin(2 * math.pi * t / 12.0), 4, signed=True),
        "roll": fmt(150 * math.sin(2 * math.pi * t / 9.0), 5, signed=True),
        "yaw": fmt((t * 3) % 360, 3),
        "airspeed": fmt(515 + random.gauss(0, 3), 4),
        "altitude": fmt(1500 + 20 * math.sin(2 * math.pi * t / 30.0), 5),
        "rate": fmt(12 * math.cos(2 * math.pi * t / 30.0), 4, signed=True),
        "lateral acceleration": fmt(random.gauss(0, 3), 3, signed=True),
        "vertical acceleration": fmt(10, 3, signed=True),
        "angle of attack": fmt(40 + random.gauss(0, 2), 2),
        "status": "%06X" % (1 if pressure_alt else 0),
    }


def make_frame(schema, t: float) -> bytes:
    values = ems_values(t) if schema.kind == SchemaKind.EMS else efis_values(t)
    values["hour"] = "%02d" % (int(t) // 3600 % 24)
    values["minute"] = "%02d" % (int(t) // 60 % 60)
    values["second"] = "%02d" % (int(t) % 60)
    values["millisecond"] = "%02d" % int((t % 1.0) * 64)

    payload = "".join(
        values.get(f.name, "0" * f.width)
        if f.encoding != FieldEncoding.SKIP or f.name in values
        else "0" * f.width
        for f in schema.fields
    ).encode("ascii")
    assert len(payload) == schema.payload_size

    if schema.kind == SchemaKind.EMS:
        checksum = (-sum(payload)) & 0xFF
    else:
        checksum = sum(payload) & 0xFF
    return payload + b"%02X\r\n" % checksum


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    schema = get_schema(sys.argv[1])
    seconds = float(sys.argv[3]) if len(sys.argv) > 3 else 60.0

    count = int(seconds * RATE_HZ)
    with open(sys.argv[2], "wb") as f:
        for i in range(count):
            f.write(make_frame(schema, i / RATE_HZ))
    print(f"Wrote {count} {schema.name} frame(s) to {sys.argv[2]}")


if __name__ == "__main__":
    main()
