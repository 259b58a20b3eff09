"""Event fan-out and the read-notification driver for a telemetry byte source."""

from __future__ import annotations

import logging
from typing import Callable

from .decoder import FrameDecoder
from .schema import Measurement, Message, Schema
from .transport import Transport

logger = logging.getLogger(__name__)

VariableCallback = Callable[[Measurement], None]
MessageCallback = Callable[[Message], None]

# Bytes requested from the transport per read notification
READ_CHUNK = 4096


class MessageEmitter:
    """Publishes decoded messages to registered callbacks, in input order.

    Each message produces one variable event per measurement (NaN values
    included, so consumers can show staleness) followed by one message
    event carrying the whole ordered message.
    """

    def __init__(self):
        self._variable_cbs: list[VariableCallback] = []
        self._message_cbs: list[MessageCallback] = []

    def on_variable(self, callback: VariableCallback) -> VariableCallback:
        self._variable_cbs.append(callback)
        return callback

    def on_message(self, callback: MessageCallback) -> MessageCallback:
        self._message_cbs.append(callback)
        return callback

    def remove(self, callback: Callable) -> None:
        """Unregister *callback* from whichever event lists hold it."""
        if callback in self._variable_cbs:
            self._variable_cbs.remove(callback)
        if callback in self._message_cbs:
            self._message_cbs.remove(callback)

    def publish(self, message: Message) -> None:
        for var in message:
            for cb in self._variable_cbs:
                cb(var)
        for cb in self._message_cbs:
            cb(message)


class TelemetryStream:
    """Decodes one instrument's byte stream and publishes the results.

    The byte source is owned by the caller; call ``trigger_read()`` each
    time it reports bytes available, or ``feed()`` with bytes obtained
    elsewhere.  Frames are decoded and published strictly in arrival order.
    """

    def __init__(self, schema: Schema, transport: Transport | None = None,
                 emitter: MessageEmitter | None = None):
        self.schema = schema
        self.emitter = emitter if emitter is not None else MessageEmitter()
        self._transport = transport
        self._decoder = FrameDecoder(schema)
        self.bytes_read: int = 0

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def accepted(self) -> int:
        return self._decoder.accepted

    @property
    def dropped(self) -> int:
        return self._decoder.dropped

    def feed(self, data: bytes) -> list[Message]:
        """Decode every complete frame in *data* and publish each message."""
        messages = self._decoder.feed(data)
        for msg in messages:
            self.emitter.publish(msg)
        return messages

    def trigger_read(self) -> list[Message]:
        """Handle one "bytes available" notification from the transport."""
        if self._transport is None:
            return []
        data = self._transport.read(READ_CHUNK)
        if not data:
            return []
        self.bytes_read += len(data)
        return self.feed(data)

    def repoint(self, transport: Transport | None) -> None:
        """Switch to a new byte source, discarding any partial line."""
        if self._transport is not None and self._transport is not transport:
            self._transport.close()
        self._transport = transport
        self._decoder.reset()
        logger.info("%s stream repointed", self.schema.name)

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        self._decoder.reset()
