"""ABX decoder: binary token stream -> positioned events.

The decoder is a pull parser.  Iterating an :class:`AbxDecoder` yields
events on demand while the cursor only ever moves forward; restarting
means decoding the buffer again.  Every interned-string field the
decoder reads is recorded as an :class:`InternRef` so byte-level edits
can later repair index references in the untouched tail.

Decoding is strict: unknown commands or types are errors, never
skipped, because later splices rely on exact token boundaries.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from honeycomb.codec.constants import (
    ATTRIBUTE_TYPES,
    COMMAND_MASK,
    INTERN_DEFINE,
    PROTOCOL_MAGIC_VERSION_0,
    TEXT_COMMANDS,
    TYPE_MASK,
    AttributeType,
    Command,
)
from honeycomb.codec.events import (
    TEXT_KIND_BY_COMMAND,
    Attribute,
    ByteRange,
    EndDocument,
    EndElement,
    Event,
    StartDocument,
    StartElement,
    Text,
)
from honeycomb.codec.intern import InternRef, InternTable
from honeycomb.errors import (
    MalformedHeader,
    MalformedString,
    TruncatedStream,
    UnbalancedElement,
    UnknownTag,
)

_SHORT = struct.Struct(">H")
_INT = struct.Struct(">i")
_LONG = struct.Struct(">q")
_FLOAT = struct.Struct(">f")
_DOUBLE = struct.Struct(">d")


class FastDataInput:
    """Bounds-checked big-endian reader over an in-memory buffer."""

    def __init__(
        self,
        buffer: bytes,
        table: InternTable,
        refs: list[InternRef],
        *,
        pos: int = 0,
    ) -> None:
        self._buffer = buffer
        self._table = table
        self._refs = refs
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self._buffer)

    def _take(self, size: int, what: str) -> bytes:
        end = self.pos + size
        if end > len(self._buffer):
            msg = (
                f"Need {size} byte(s) for {what} at offset {self.pos}, "
                f"only {len(self._buffer) - self.pos} left"
            )
            raise TruncatedStream(msg, offset=self.pos, needed=size)
        chunk = self._buffer[self.pos : end]
        self.pos = end
        return chunk

    def peek_byte(self) -> int:
        if self.at_end():
            msg = f"Unexpected end of stream at offset {self.pos}"
            raise TruncatedStream(msg, offset=self.pos, needed=1)
        return self._buffer[self.pos]

    def read_byte(self) -> int:
        return self._take(1, "token")[0]

    def read_short(self) -> int:
        return _SHORT.unpack(self._take(2, "short"))[0]

    def read_int(self) -> int:
        return _INT.unpack(self._take(4, "int"))[0]

    def read_long(self) -> int:
        return _LONG.unpack(self._take(8, "long"))[0]

    def read_float(self) -> float:
        return _FLOAT.unpack(self._take(4, "float"))[0]

    def read_double(self) -> float:
        return _DOUBLE.unpack(self._take(8, "double"))[0]

    def read_bytes(self, length: int) -> bytes:
        return self._take(length, "byte array")

    def read_utf(self) -> str:
        start = self.pos
        length = self.read_short()
        raw = self._take(length, "UTF string")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"Invalid UTF-8 string at offset {start}: {exc.reason}"
            raise MalformedString(msg, offset=start) from exc

    def read_interned_utf(self) -> str:
        offset = self.pos
        index = self.read_short()
        if index == INTERN_DEFINE:
            value = self.read_utf()
            registered = self._table.register(value, offset)
            self._refs.append(InternRef(offset, self.pos, value, True, registered))
            return value
        value = self._table.lookup(index)
        self._refs.append(InternRef(offset, self.pos, value, False, index))
        return value


@dataclass(slots=True)
class DecodedDocument:
    """Fully materialized decode of one buffer."""

    events: list[Event]
    table: InternTable
    refs: list[InternRef] = field(default_factory=list)
    size: int = 0


class AbxDecoder:
    """Iterable decoder over one ABX buffer.

    ``table`` and ``refs`` fill up as iteration proceeds; they are
    complete once the iterator is exhausted.
    """

    def __init__(
        self,
        buffer: bytes | bytearray | memoryview,
        table: InternTable | None = None,
    ) -> None:
        self._buffer = bytes(buffer)
        self.table = table if table is not None else InternTable()
        self.refs: list[InternRef] = []

    def __iter__(self) -> Iterator[Event]:
        return self._events()

    def _events(self) -> Iterator[Event]:
        buffer = self._buffer
        magic = buffer[: len(PROTOCOL_MAGIC_VERSION_0)]
        if magic != PROTOCOL_MAGIC_VERSION_0:
            msg = (
                "Invalid ABX file format: magic header mismatch "
                f"(expected {PROTOCOL_MAGIC_VERSION_0.hex(' ')}, got {magic.hex(' ') or 'nothing'})"
            )
            raise MalformedHeader(msg, expected=PROTOCOL_MAGIC_VERSION_0.hex(), actual=magic.hex())

        reader = FastDataInput(buffer, self.table, self.refs, pos=len(PROTOCOL_MAGIC_VERSION_0))
        stack: list[str] = []

        while not reader.at_end():
            start = reader.pos
            raw = reader.read_byte()
            command = _command(raw, start)
            type_ = raw & TYPE_MASK

            if command is Command.START_DOCUMENT:
                yield StartDocument(span=ByteRange(start, reader.pos))

            elif command is Command.END_DOCUMENT:
                if stack:
                    msg = f"Document ended at offset {start} with <{stack[-1]}> still open"
                    raise UnbalancedElement(msg, offset=start, open=list(stack))
                yield EndDocument(span=ByteRange(start, reader.pos))
                return

            elif command is Command.START_TAG:
                _expect_interned(raw, command, start)
                name = reader.read_interned_utf()
                attributes: list[Attribute] = []
                while not reader.at_end() and _is_attribute(reader.peek_byte()):
                    attributes.append(_read_attribute(reader))
                yield StartElement(
                    name,
                    tuple(attributes),
                    depth=len(stack),
                    span=ByteRange(start, reader.pos),
                )
                stack.append(name)

            elif command is Command.END_TAG:
                _expect_interned(raw, command, start)
                name = reader.read_interned_utf()
                if not stack or stack[-1] != name:
                    expected = stack[-1] if stack else None
                    msg = f"End tag </{name}> at offset {start} does not close <{expected}>"
                    raise UnbalancedElement(msg, offset=start, name=name, expected=expected)
                stack.pop()
                yield EndElement(name, depth=len(stack), span=ByteRange(start, reader.pos))

            elif command in TEXT_COMMANDS:
                if type_ == AttributeType.NULL:
                    value = None
                elif type_ == AttributeType.STRING:
                    value = reader.read_utf()
                else:
                    msg = f"Unsupported type 0x{type_:02X} for {command.name} at offset {start}"
                    raise UnknownTag(msg, offset=start, token=raw)
                yield Text(value, TEXT_KIND_BY_COMMAND[command], span=ByteRange(start, reader.pos))

            else:
                # An ATTRIBUTE token is only valid directly after a start tag.
                msg = f"Attribute token 0x{raw:02X} outside of a start tag at offset {start}"
                raise UnknownTag(msg, offset=start, token=raw)

        if stack:
            msg = f"Stream ended with <{stack[-1]}> still open"
            raise TruncatedStream(msg, offset=reader.pos, open=list(stack))


def _command(raw: int, offset: int) -> Command:
    try:
        return Command(raw & COMMAND_MASK)
    except ValueError:
        msg = f"Unknown token 0x{raw:02X} at offset {offset}"
        raise UnknownTag(msg, offset=offset, token=raw) from None


def _is_attribute(raw: int) -> bool:
    return raw & COMMAND_MASK == Command.ATTRIBUTE


def _expect_interned(raw: int, command: Command, offset: int) -> None:
    if raw & TYPE_MASK != AttributeType.STRING_INTERNED:
        msg = f"{command.name} token 0x{raw:02X} at offset {offset} must carry an interned name"
        raise UnknownTag(msg, offset=offset, token=raw)


def _read_attribute(reader: FastDataInput) -> Attribute:
    start = reader.pos
    raw = reader.read_byte()
    type_bits = raw & TYPE_MASK
    if type_bits not in ATTRIBUTE_TYPES:
        msg = f"Unknown attribute type 0x{type_bits:02X} at offset {start}"
        raise UnknownTag(msg, offset=start, token=raw)
    type_ = AttributeType(type_bits)
    name = reader.read_interned_utf()
    value = _read_value(reader, type_)
    return Attribute(name, type_, value, span=ByteRange(start, reader.pos))


def _read_value(reader: FastDataInput, type_: AttributeType) -> Any:
    match type_:
        case AttributeType.STRING:
            return reader.read_utf()
        case AttributeType.STRING_INTERNED:
            return reader.read_interned_utf()
        case AttributeType.BYTES_HEX | AttributeType.BYTES_BASE64:
            return reader.read_bytes(reader.read_short())
        case AttributeType.INT | AttributeType.INT_HEX:
            return reader.read_int()
        case AttributeType.LONG | AttributeType.LONG_HEX:
            return reader.read_long()
        case AttributeType.FLOAT:
            return reader.read_float()
        case AttributeType.DOUBLE:
            return reader.read_double()
        case AttributeType.BOOLEAN_TRUE:
            return True
        case AttributeType.BOOLEAN_FALSE:
            return False
    msg = f"Unhandled attribute type {type_!r}"
    raise AssertionError(msg)


def decode(
    buffer: bytes | bytearray | memoryview,
    table: InternTable | None = None,
) -> Iterator[Event]:
    """Lazily decode *buffer* into events."""
    return iter(AbxDecoder(buffer, table))


def decode_all(buffer: bytes | bytearray | memoryview) -> DecodedDocument:
    """Decode *buffer* eagerly, returning events plus the finished table."""
    decoder = AbxDecoder(buffer)
    events = list(decoder)
    return DecodedDocument(events=events, table=decoder.table, refs=decoder.refs, size=len(buffer))
