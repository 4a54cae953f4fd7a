"""ABX encoder for small fragments.

Only the shapes a policy needs are supported: a single attribute token,
or one self-contained element (start tag, attributes, optional text,
end tag).  Interned strings go through the caller's
:class:`InternTable`, so a fragment encoded against the table a reader
holds at the splice point decodes back to the same strings.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import Any

from honeycomb.codec.constants import (
    INT32_RANGE,
    INT64_RANGE,
    INTERN_DEFINE,
    MAX_UNSIGNED_SHORT,
    AttributeType,
    Command,
    token,
    type_for_bool,
)
from honeycomb.codec.events import COMMAND_BY_TEXT_KIND, Attribute, TextKind
from honeycomb.codec.intern import InternTable
from honeycomb.errors import EncodeOverflow


class FastDataOutput:
    """Big-endian writer that interns strings against *table*.

    ``appended`` lists the strings this writer added to the table, in
    order.
    """

    def __init__(self, table: InternTable) -> None:
        self._out = bytearray()
        self._table = table
        self.appended: list[str] = []

    def getvalue(self) -> bytes:
        return bytes(self._out)

    def __len__(self) -> int:
        return len(self._out)

    def write_byte(self, value: int) -> None:
        self._out.append(value & 0xFF)

    def write_short(self, value: int) -> None:
        if not 0 <= value <= MAX_UNSIGNED_SHORT:
            msg = f"Value {value} does not fit an unsigned short"
            raise EncodeOverflow(msg, value=value)
        self._out += struct.pack(">H", value)

    def write_int(self, value: int) -> None:
        _check_range(value, INT32_RANGE, "int")
        self._out += struct.pack(">i", value)

    def write_long(self, value: int) -> None:
        _check_range(value, INT64_RANGE, "long")
        self._out += struct.pack(">q", value)

    def write_float(self, value: float) -> None:
        try:
            self._out += struct.pack(">f", value)
        except OverflowError as exc:
            msg = f"Value {value} does not fit a 32-bit float"
            raise EncodeOverflow(msg, value=value) from exc

    def write_double(self, value: float) -> None:
        self._out += struct.pack(">d", value)

    def write_bytes(self, data: bytes) -> None:
        if len(data) > MAX_UNSIGNED_SHORT:
            msg = f"Byte array of {len(data)} bytes exceeds {MAX_UNSIGNED_SHORT}"
            raise EncodeOverflow(msg, length=len(data))
        self.write_short(len(data))
        self._out += data

    def write_utf(self, value: str) -> None:
        raw = value.encode("utf-8")
        if len(raw) > MAX_UNSIGNED_SHORT:
            msg = f"UTF-8 length {len(raw)} exceeds {MAX_UNSIGNED_SHORT}"
            raise EncodeOverflow(msg, length=len(raw))
        self.write_short(len(raw))
        self._out += raw

    def write_interned_utf(self, value: str) -> None:
        """Write a reference to *value*, or define it when not yet interned.

        Raises:
            EncodeOverflow: *value* needs a new entry but the table is full;
                a reader would not register it, so later references break.
        """
        index = self._table.index_of(value)
        if index is not None:
            self.write_short(index)
            return
        if self._table.full:
            msg = f"Intern table is full ({len(self._table)} entries); cannot define {value!r}"
            raise EncodeOverflow(msg, value=value, size=len(self._table))
        self.write_short(INTERN_DEFINE)
        self.write_utf(value)
        self._table.register(value)
        self.appended.append(value)

    def write_attribute(self, attr: Attribute) -> None:
        self.write_byte(token(Command.ATTRIBUTE, attr.type))
        self.write_interned_utf(attr.name)
        _write_value(self, attr)

    def write_text(self, value: str | None, kind: TextKind = TextKind.TEXT) -> None:
        command = COMMAND_BY_TEXT_KIND[kind]
        if value is None:
            self.write_byte(token(command, AttributeType.NULL))
        else:
            self.write_byte(token(command, AttributeType.STRING))
            self.write_utf(value)


def _check_range(value: Any, bounds: tuple[int, int], kind: str) -> None:
    low, high = bounds
    if not low <= value <= high:
        msg = f"Value {value} is outside the {kind} range [{low}, {high}]"
        raise EncodeOverflow(msg, value=value, kind=kind)


def _require(attr: Attribute, expected: type | tuple[type, ...]) -> None:
    ok = isinstance(attr.value, expected) and not (
        isinstance(attr.value, bool) and bool not in _as_tuple(expected)
    )
    if not ok:
        msg = (
            f"Attribute {attr.name!r} of type {attr.type.name} cannot hold "
            f"{type(attr.value).__name__} value {attr.value!r}"
        )
        raise EncodeOverflow(msg, name=attr.name, type=attr.type.name)


def _as_tuple(expected: type | tuple[type, ...]) -> tuple[type, ...]:
    return expected if isinstance(expected, tuple) else (expected,)


def _write_value(out: FastDataOutput, attr: Attribute) -> None:
    match attr.type:
        case AttributeType.STRING:
            _require(attr, str)
            out.write_utf(attr.value)
        case AttributeType.STRING_INTERNED:
            _require(attr, str)
            out.write_interned_utf(attr.value)
        case AttributeType.BYTES_HEX | AttributeType.BYTES_BASE64:
            _require(attr, (bytes, bytearray))
            out.write_bytes(bytes(attr.value))
        case AttributeType.INT | AttributeType.INT_HEX:
            _require(attr, int)
            out.write_int(attr.value)
        case AttributeType.LONG | AttributeType.LONG_HEX:
            _require(attr, int)
            out.write_long(attr.value)
        case AttributeType.FLOAT:
            _require(attr, (int, float))
            out.write_float(attr.value)
        case AttributeType.DOUBLE:
            _require(attr, (int, float))
            out.write_double(attr.value)
        case AttributeType.BOOLEAN_TRUE | AttributeType.BOOLEAN_FALSE:
            _require(attr, bool)
            if type_for_bool(attr.value) is not attr.type:
                msg = f"Attribute {attr.name!r} declares {attr.type.name} but holds {attr.value!r}"
                raise EncodeOverflow(msg, name=attr.name, type=attr.type.name)
        case _:
            msg = f"Attribute type {attr.type!r} cannot be encoded"
            raise EncodeOverflow(msg, name=attr.name, type=str(attr.type))


def attribute_for(name: str, value: Any) -> Attribute:
    """Build an attribute, choosing the narrowest wire type for *value*."""
    if isinstance(value, bool):
        return Attribute(name, type_for_bool(value), value)
    if isinstance(value, int):
        low, high = INT32_RANGE
        type_ = AttributeType.INT if low <= value <= high else AttributeType.LONG
        return Attribute(name, type_, value)
    if isinstance(value, float):
        return Attribute(name, AttributeType.DOUBLE, value)
    if isinstance(value, (bytes, bytearray)):
        return Attribute(name, AttributeType.BYTES_BASE64, bytes(value))
    return Attribute(name, AttributeType.STRING, str(value))


def encode_attribute(attr: Attribute, table: InternTable) -> bytes:
    """Encode one attribute token against *table* (which may grow)."""
    out = FastDataOutput(table)
    out.write_attribute(attr)
    return out.getvalue()


def encode_element(
    name: str,
    attributes: Iterable[Attribute] = (),
    text: str | None = None,
    table: InternTable | None = None,
) -> bytes:
    """Encode a self-contained element: start tag, attributes, text, end tag."""
    out = FastDataOutput(table if table is not None else InternTable())
    out.write_byte(token(Command.START_TAG, AttributeType.STRING_INTERNED))
    out.write_interned_utf(name)
    for attr in attributes:
        out.write_attribute(attr)
    if text is not None:
        out.write_text(text)
    out.write_byte(token(Command.END_TAG, AttributeType.STRING_INTERNED))
    out.write_interned_utf(name)
    return out.getvalue()
