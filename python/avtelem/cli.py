"""avtelem decode-dump tool.

    avtelem-dump <serialportname> <ems|efis> [options]

Prints ``label = value units`` for every decoded measurement.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from .schema import (
    DEFAULT_LAYOUTS, SCHEMAS, Measurement, SchemaKind, get_schema, schema_labels,
)
from .storage import VariableLogger
from .stream import TelemetryStream
from .transport import DEFAULT_BAUDRATE

logger = logging.getLogger(__name__)


class _UsageParser(argparse.ArgumentParser):
    """Reports usage errors on standard output with exit status 1."""

    def error(self, message: str):
        self.print_usage(sys.stdout)
        print(f"{self.prog}: error: {message}")
        sys.exit(1)


def format_measurement(var: Measurement) -> str:
    return f"{var.label} = {var.value:g} {var.units}".rstrip()


def _print_measurement(var: Measurement) -> None:
    print(format_measurement(var))


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(prog="avtelem-dump",
                          description="Decode an EMS or EFIS telemetry stream")
    parser.add_argument("port", help="Serial port (e.g. /dev/ttyUSB0)")
    parser.add_argument("stream_type", metavar="ems|efis",
                        help="Instrument stream type")
    parser.add_argument("--baud", type=int, default=DEFAULT_BAUDRATE,
                        help="Baud rate")
    parser.add_argument("--layout", choices=sorted(SCHEMAS),
                        help="Field-table variant (default: same as stream type)")
    parser.add_argument("--replay", action="store_true",
                        help="Treat PORT as a captured byte-stream file")
    parser.add_argument("--log", metavar="PATH",
                        help="Write a tab-separated variable log")
    parser.add_argument("--include", metavar="LABEL", action="append",
                        default=[],
                        help="Label to log (repeatable; default: all)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging (reports dropped frames)")
    return parser


def _open_transport(args: argparse.Namespace):
    if args.replay:
        from .transport import FileTransport
        return FileTransport(args.port)
    from .transport import SerialTransport
    return SerialTransport(args.port, baudrate=args.baud)


def run(args: argparse.Namespace) -> int:
    layout = args.layout or DEFAULT_LAYOUTS[args.stream_type]
    schema = get_schema(layout)
    if schema.kind != SchemaKind[args.stream_type.upper()]:
        print(f"Error: layout '{layout}' does not match stream type "
              f"'{args.stream_type}'")
        return 1

    # Columns are fixed for the whole session
    var_logger = VariableLogger()
    for label in args.include or schema_labels(schema):
        var_logger.include(label)

    if args.log:
        try:
            var_logger.start(args.log)
        except OSError as e:
            print(f"Error: cannot open {args.log}: {e}", file=sys.stderr)
            return 1

    try:
        transport = _open_transport(args)
    except OSError as e:
        print(f"Error: cannot open {args.port}: {e}", file=sys.stderr)
        var_logger.stop()
        return 1

    stream = TelemetryStream(schema, transport)
    stream.emitter.on_variable(_print_measurement)
    if args.log:
        stream.emitter.on_message(var_logger.log)

    status = 0
    try:
        while True:
            before = stream.bytes_read
            stream.trigger_read()
            if stream.bytes_read == before:
                if args.replay:
                    break
                time.sleep(0.01)
    except KeyboardInterrupt:
        pass
    except OSError as e:
        logger.error("%s: read failed: %s", args.port, e)
        status = 1
    finally:
        stream.close()
        var_logger.stop()
        logger.info("%s: %d frame(s) accepted, %d dropped",
                    schema.name, stream.accepted, stream.dropped)
    return status


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(message)s")

    if args.stream_type not in DEFAULT_LAYOUTS:
        print(f"Error: unknown stream type '{args.stream_type}'")
        parser.print_usage(sys.stdout)
        sys.exit(1)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
