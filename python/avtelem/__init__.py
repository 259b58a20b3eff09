"""avtelem - EMS/EFIS instrument-bus telemetry decoder and tooling."""

from .schema import (
    Measurement, Message, Schema, FieldDef, FieldEncoding, SchemaKind,
    EMS, EMS_PADDED, EFIS, EFIS_ALT4, SCHEMAS, get_schema, schema_labels,
)
from .cursor import FieldCursor
from .decoder import (
    LineFramer, FrameDecoder, validate_frame, decode_payload, decode_frame,
)
from .stream import MessageEmitter, TelemetryStream
from .storage import VariableLogger, LogReader, read_log
from .capture import LiveCapture

__all__ = [
    "Measurement", "Message", "Schema", "FieldDef", "FieldEncoding",
    "SchemaKind", "EMS", "EMS_PADDED", "EFIS", "EFIS_ALT4", "SCHEMAS",
    "get_schema", "schema_labels",
    "FieldCursor",
    "LineFramer", "FrameDecoder", "validate_frame", "decode_payload",
    "decode_frame",
    "MessageEmitter", "TelemetryStream",
    "VariableLogger", "LogReader", "read_log",
    "LiveCapture",
]
