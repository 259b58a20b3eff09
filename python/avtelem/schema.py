"""Measurement data model and EMS/EFIS field tables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable


class SchemaKind(IntEnum):
    EMS = 0
    EFIS = 1


class FieldEncoding(IntEnum):
    DECIMAL = 0
    HEX = 1
    GP_SLOT = 2   # 3-char code + decimal value
    SKIP = 3      # padding, not decoded


# Trailing ASCII-hex checksum (one byte as two characters)
CHECKSUM_SIZE = 2

# General-purpose slot layout (EMS): code + value
GP_CODE_SIZE = 3
GP_VALUE_SIZE = 5
GP_SLOT_SIZE = GP_CODE_SIZE + GP_VALUE_SIZE  # 8

# Bit 0 of the EFIS status bitmask selects pressure altitude / turn rate
EFIS_STATUS_PRESSURE_ALT = 0x000001


@dataclass(frozen=True)
class Measurement:
    label: str
    units: str
    value: float


# Ordered by byte offset within the frame
Message = tuple[Measurement, ...]


def message_value(message: Iterable[Measurement], label: str) -> float:
    """Return the first value for *label* in *message*, or NaN."""
    for m in message:
        if m.label == label:
            return m.value
    return math.nan


@dataclass(frozen=True)
class FieldDef:
    name: str
    width: int
    encoding: FieldEncoding = FieldEncoding.DECIMAL
    units: str = ""
    scale: float = 1.0
    divisor: float = 1.0

    def convert(self, raw: float) -> float:
        return raw * self.scale / self.divisor


@dataclass(frozen=True)
class GpCode:
    label: str
    units: str
    scale: float = 1.0
    divisor: float = 1.0

    def convert(self, raw: float) -> float:
        return raw * self.scale / self.divisor


@dataclass(frozen=True)
class Schema:
    name: str
    kind: SchemaKind
    payload_size: int
    fields: tuple[FieldDef, ...]
    keep_left: bool
    description: str = ""

    @property
    def frame_size(self) -> int:
        return self.payload_size + CHECKSUM_SIZE

    @property
    def field_width_total(self) -> int:
        return sum(f.width for f in self.fields)

    def field(self, name: str) -> FieldDef:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def offset_of(self, name: str) -> int:
        """Byte offset of a named field within the payload."""
        pos = 0
        for f in self.fields:
            if f.name == name:
                return pos
            pos += f.width
        raise KeyError(name)


# ---------------------------------------------------------------------------
# General-purpose slot codes (EMS)
# ---------------------------------------------------------------------------

GP_CODES: dict[str, GpCode] = {
    "OAT": GpCode("outside air temperature", "°F"),
    "CRB": GpCode("carburetor temperature", "°F"),
    "CLT": GpCode("coolant temperature", "°F"),
    "CLP": GpCode("coolant pressure", "PSI"),
    "FL3": GpCode("fuel level 3", "gal", divisor=10),
    "FL4": GpCode("fuel level 4", "gal", divisor=10),
    "TRA": GpCode("aileron trim", "%"),
    "TRE": GpCode("elevator trim", "%"),
    "TRR": GpCode("rudder trim", "%"),
    "FLP": GpCode("flap position", "°"),
}


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

_TIME_FIELDS = (
    FieldDef("hour", 2, units="h"),
    FieldDef("minute", 2, units="min"),
    FieldDef("second", 2, units="s"),
    FieldDef("millisecond", 2, units="s", divisor=64),
)

_EMS_HEAD = _TIME_FIELDS + (
    FieldDef("manifold pressure", 5, units="inHg", divisor=100),
    FieldDef("oil temperature", 3, units="°F"),
    FieldDef("oil pressure", 3, units="PSI"),
    FieldDef("fuel pressure", 3, units="PSI", divisor=10),
    FieldDef("voltage", 3, units="V", divisor=10),
    FieldDef("current", 4, units="A"),
    FieldDef("RPM", 3, units="rpm", scale=10),
    FieldDef("fuel flow", 3, units="GPH", divisor=10),
    FieldDef("remaining fuel", 4, units="gal", divisor=10),
    FieldDef("fuel level 1", 3, units="gal", divisor=10),
    FieldDef("fuel level 2", 3, units="gal", divisor=10),
)

_EMS_GP_SLOTS = tuple(
    FieldDef(f"gp{i}", GP_SLOT_SIZE, FieldEncoding.GP_SLOT) for i in range(1, 4)
)

_EMS_TAIL = (
    (FieldDef("gp thermocouple", 4, units="°F"),)
    + tuple(FieldDef(f"egt{i}", 4, units="°F") for i in range(1, 7))
    + tuple(FieldDef(f"cht{i}", 3, units="°F") for i in range(1, 7))
    + (
        FieldDef("contact 1", 1),
        FieldDef("contact 2", 1),
        FieldDef("product id", 2, FieldEncoding.SKIP),
    )
)

EMS_PAYLOAD_SIZE = 119
EFIS_PAYLOAD_SIZE = 51

EMS = Schema(
    name="ems",
    kind=SchemaKind.EMS,
    payload_size=EMS_PAYLOAD_SIZE,
    fields=_EMS_HEAD + _EMS_GP_SLOTS + _EMS_TAIL,
    keep_left=True,
    description="Engine monitor, general-purpose slots dispatched by code",
)

EMS_PADDED = Schema(
    name="ems-padded",
    kind=SchemaKind.EMS,
    payload_size=EMS_PAYLOAD_SIZE,
    fields=_EMS_HEAD
    + (FieldDef("gp slots", 3 * GP_SLOT_SIZE, FieldEncoding.SKIP),)
    + _EMS_TAIL,
    keep_left=True,
    description="Engine monitor, general-purpose slots skipped as padding",
)


def _efis_fields(altitude_width: int) -> tuple[FieldDef, ...]:
    # Altitude and rate are labelled after the status bitmask is known;
    # their units here are placeholders.
    tail = 4 + (5 - altitude_width)
    return _TIME_FIELDS + (
        FieldDef("pitch", 4, units="°", divisor=10),
        FieldDef("roll", 5, units="°", divisor=10),
        FieldDef("yaw", 3, units="°"),
        FieldDef("airspeed", 4, units="m/s", divisor=10),
        FieldDef("altitude", altitude_width, units="m"),
        FieldDef("rate", 4, divisor=10),
        FieldDef("lateral acceleration", 3, units="g", divisor=100),
        FieldDef("vertical acceleration", 3, units="g", divisor=10),
        FieldDef("angle of attack", 2, units="% of stall"),
        FieldDef("status", 6, FieldEncoding.HEX),
        FieldDef("reserved", tail, FieldEncoding.SKIP),
    )


EFIS = Schema(
    name="efis",
    kind=SchemaKind.EFIS,
    payload_size=EFIS_PAYLOAD_SIZE,
    fields=_efis_fields(5),
    keep_left=False,
    description="Flight instruments, 5-character altitude",
)

EFIS_ALT4 = Schema(
    name="efis-alt4",
    kind=SchemaKind.EFIS,
    payload_size=EFIS_PAYLOAD_SIZE,
    fields=_efis_fields(4),
    keep_left=False,
    description="Flight instruments, 4-character altitude",
)

# EFIS relabelling of the altitude/rate temporaries, keyed by status bit 0
EFIS_ALTERNATES: dict[bool, tuple[tuple[str, str], tuple[str, str]]] = {
    True: (("pressure altitude", "m"), ("turn rate", "°/s")),
    False: (("displayed altitude", "m"), ("vertical speed", "ft/s")),
}

# EFIS fields whose label depends on the status bitmask, in read order
EFIS_ALTERNATE_FIELDS = ("altitude", "rate")


def schema_labels(schema: Schema) -> list[str]:
    """Every label *schema* can emit, in table order.

    General-purpose slots contribute all ``GP_CODES`` labels once, at the
    first slot.  The EFIS altitude and rate fields contribute both of
    their status-dependent labels.  Padding and the status bitmask emit
    nothing.
    """
    labels: list[str] = []
    for f in schema.fields:
        if f.encoding == FieldEncoding.SKIP:
            continue
        if f.encoding == FieldEncoding.GP_SLOT:
            names = [gp.label for gp in GP_CODES.values()]
        elif schema.kind == SchemaKind.EFIS and f.name in EFIS_ALTERNATE_FIELDS:
            idx = EFIS_ALTERNATE_FIELDS.index(f.name)
            names = [EFIS_ALTERNATES[bit][idx][0] for bit in (True, False)]
        elif f.encoding == FieldEncoding.HEX:
            continue
        else:
            names = [f.name]
        for name in names:
            if name not in labels:
                labels.append(name)
    return labels


SCHEMAS: dict[str, Schema] = {
    s.name: s for s in (EMS, EMS_PADDED, EFIS, EFIS_ALT4)
}

# Stream type (as given on the command line) -> default layout
DEFAULT_LAYOUTS = {"ems": "ems", "efis": "efis"}


def get_schema(name: str) -> Schema:
    """Look up a schema layout by name (``ems``, ``ems-padded``, ...)."""
    try:
        return SCHEMAS[name]
    except KeyError:
        raise KeyError(f"unknown schema layout: {name!r}") from None
