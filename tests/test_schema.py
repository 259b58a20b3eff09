"""Field-table layout tests.

Run from the repo root:
    python3 tests/test_schema.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

from avtelem.schema import (
    EMS, EMS_PADDED, EFIS, EFIS_ALT4, SCHEMAS, FieldEncoding, SchemaKind,
    GP_CODES, get_schema, message_value, schema_labels, Measurement,
)


def test_field_widths_fill_payload():
    """Every layout's field widths sum to exactly its payload size."""
    print("test_field_widths_fill_payload...", end="")

    for schema in SCHEMAS.values():
        assert schema.field_width_total == schema.payload_size, schema.name

    print(" OK")


def test_frame_sizes():
    print("test_frame_sizes...", end="")

    assert EMS.payload_size == 119 and EMS.frame_size == 121
    assert EMS_PADDED.frame_size == 121
    assert EFIS.payload_size == 51 and EFIS.frame_size == 53
    assert EFIS_ALT4.frame_size == 53

    assert EMS.keep_left and EMS_PADDED.keep_left
    assert not EFIS.keep_left and not EFIS_ALT4.keep_left

    print(" OK")


def test_layout_variants():
    """Variants differ only where the protocol revisions disagree."""
    print("test_layout_variants...", end="")

    assert EMS.kind == EMS_PADDED.kind == SchemaKind.EMS
    assert EFIS.kind == EFIS_ALT4.kind == SchemaKind.EFIS

    gp = [f for f in EMS.fields if f.encoding == FieldEncoding.GP_SLOT]
    assert [f.width for f in gp] == [8, 8, 8]
    assert not any(f.encoding == FieldEncoding.GP_SLOT for f in EMS_PADDED.fields)
    assert EMS_PADDED.field("gp slots").width == 24
    assert EMS.offset_of("gp thermocouple") == EMS_PADDED.offset_of("gp thermocouple")

    assert EFIS.field("altitude").width == 5
    assert EFIS_ALT4.field("altitude").width == 4
    assert EFIS.offset_of("rate") == EFIS_ALT4.offset_of("rate") + 1

    print(" OK")


def test_field_offsets():
    print("test_field_offsets...", end="")

    assert EMS.offset_of("manifold pressure") == 8
    assert EMS.offset_of("RPM") == 29
    assert EMS.offset_of("gp1") == 45
    assert EMS.offset_of("contact 2") == 116
    assert EFIS.offset_of("status") == 41

    print(" OK")


def test_scaling():
    print("test_scaling...", end="")

    assert EMS.field("manifold pressure").convert(3000) == 30.0
    assert EMS.field("RPM").convert(240) == 2400.0
    assert EMS.field("millisecond").convert(32) == 0.5
    assert EFIS.field("lateral acceleration").convert(-5) == -0.05
    assert GP_CODES["FL3"].convert(123) == 12.3
    assert GP_CODES["OAT"].convert(59) == 59.0

    print(" OK")


def test_get_schema():
    print("test_get_schema...", end="")

    assert get_schema("ems") is EMS
    assert get_schema("efis-alt4") is EFIS_ALT4
    try:
        get_schema("adahrs")
    except KeyError:
        pass
    else:
        raise AssertionError("expected KeyError")

    print(" OK")


def test_message_value():
    print("test_message_value...", end="")

    msg = (
        Measurement("RPM", "rpm", 2400.0),
        Measurement("RPM", "rpm", 2500.0),
    )
    assert message_value(msg, "RPM") == 2400.0
    assert message_value(msg, "oil pressure") != message_value(msg, "oil pressure")

    print(" OK")


def test_schema_labels():
    """Every label a layout can emit, alternates and GP codes included."""
    print("test_schema_labels...", end="")

    efis = schema_labels(EFIS)
    assert efis == [
        "hour", "minute", "second", "millisecond",
        "pitch", "roll", "yaw", "airspeed",
        "pressure altitude", "displayed altitude",
        "turn rate", "vertical speed",
        "lateral acceleration", "vertical acceleration", "angle of attack",
    ]
    assert schema_labels(EFIS_ALT4) == efis

    ems = schema_labels(EMS)
    gp = [code.label for code in GP_CODES.values()]
    assert len(ems) == 40
    assert ems[4] == "manifold pressure"
    assert ems[15:25] == gp
    assert ems[25] == "gp thermocouple"
    assert ems[-1] == "contact 2"
    assert "product id" not in ems and "status" not in efis

    padded = schema_labels(EMS_PADDED)
    assert padded == [label for label in ems if label not in gp]

    print(" OK")


if __name__ == "__main__":
    print("avtelem schema tests")
    print("====================\n")

    test_field_widths_fill_payload()
    test_frame_sizes()
    test_layout_variants()
    test_field_offsets()
    test_scaling()
    test_get_schema()
    test_message_value()
    test_schema_labels()

    print("\nAll tests passed.")
