"""FieldCursor and ASCII field parsing tests."""

import sys
import os
import math
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

from avtelem.cursor import FieldCursor, parse_decimal, parse_hex


def test_parse_decimal():
    print("test_parse_decimal...", end="")

    assert parse_decimal(b"03000") == 3000.0
    assert parse_decimal(b"-012") == -12.0
    assert parse_decimal(b"+012") == 12.0
    assert parse_decimal(b"12.5") == 12.5
    assert parse_decimal(b" 42") == 42.0
    assert parse_decimal(b".5") == 0.5

    for bad in (b"", b"   ", b"12a", b"1e3", b"1_0", b"nan", b"inf", b"--1",
                b"1,5", b"+"):
        assert math.isnan(parse_decimal(bad)), bad

    print(" OK")


def test_parse_hex():
    print("test_parse_hex...", end="")

    assert parse_hex(b"000001") == 1
    assert parse_hex(b"00FF0a") == 0xFF0A
    assert parse_hex(b"3C") == 0x3C
    assert parse_hex(b"0G") is None
    assert parse_hex(b"-1") is None
    assert parse_hex(b"") is None

    print(" OK")


def test_cursor_advances_on_failure():
    """A bad field yields NaN but the next field still lines up."""
    print("test_cursor_advances_on_failure...", end="")

    cur = FieldCursor(b"12x4567")
    assert math.isnan(cur.read_decimal(3))
    assert cur.position == 3
    assert cur.read_decimal(4) == 4567.0
    assert cur.position == 7
    assert cur.remaining == 0

    print(" OK")


def test_cursor_mixed_reads():
    print("test_cursor_mixed_reads...", end="")

    cur = FieldCursor(b"OAT+0059XX00000A")
    assert cur.read_text(3) == "OAT"
    assert cur.read_decimal(5) == 59.0
    cur.skip(2)
    assert cur.read_hex(6) == 0xA
    assert cur.position == 16

    print(" OK")


def test_cursor_never_passes_end():
    print("test_cursor_never_passes_end...", end="")

    cur = FieldCursor(b"123")
    assert cur.read_decimal(2) == 12.0
    assert cur.read_decimal(5) == 3.0
    assert cur.position == 3
    assert math.isnan(cur.read_decimal(2))
    assert cur.read_hex(2) is None
    assert cur.position == 3

    print(" OK")


def test_cursor_rejects_negative_width():
    print("test_cursor_rejects_negative_width...", end="")

    cur = FieldCursor(b"123")
    try:
        cur.read_decimal(-1)
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError")
    assert cur.position == 0

    print(" OK")


if __name__ == "__main__":
    print("avtelem cursor tests")
    print("====================\n")

    test_parse_decimal()
    test_parse_hex()
    test_cursor_advances_on_failure()
    test_cursor_mixed_reads()
    test_cursor_never_passes_end()
    test_cursor_rejects_negative_width()

    print("\nAll tests passed.")
