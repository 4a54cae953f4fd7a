"""Byte-exact document mutation: excise a span or splice in a fragment.

Everything outside the edited span is copied from the input.  The one
exception is interned-string indices in the tail: indices are assigned
in stream order, so adding or dropping a table definition before them
shifts what they must point at.  The tail is therefore walked intern
field by intern field against the table a reader would hold after the
splice:

* definitions are copied untouched;
* a reference whose string now sits at another index gets that index
  (same two-byte width, so no length change);
* a reference to a string whose only definition was excised becomes a
  definition (``0xFFFF`` + UTF payload) the first time it is seen.

When neither case occurs, which includes every splice that only appends
new table entries after all existing definitions, the output is the
input with exactly the span replaced.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from honeycomb.codec.constants import PROTOCOL_MAGIC_VERSION_0
from honeycomb.codec.decoder import decode_all
from honeycomb.codec.encoder import FastDataOutput
from honeycomb.codec.events import ByteRange
from honeycomb.codec.intern import InternRef, InternTable
from honeycomb.errors import InvalidSpan, NothingToRemove

FragmentBuilder = Callable[[InternTable], bytes]


@dataclass(frozen=True, slots=True)
class Splice:
    """Result of one mutation.

    Attributes:
        data: The complete new buffer.
        span: Range of the *input* that was replaced.
        fragment: Bytes written in place of ``span``.
        appended: Strings the fragment added to the intern table.
        renumbered: Tail references rewritten to a new index.
        promoted: Tail references turned into definitions.
    """

    data: bytes
    span: ByteRange
    fragment: bytes
    appended: tuple[str, ...] = ()
    renumbered: int = 0
    promoted: int = 0

    @property
    def removed_bytes(self) -> int:
        return len(self.span)

    @property
    def inserted_bytes(self) -> int:
        return len(self.fragment)


def remove(buffer: bytes, span: ByteRange | None) -> Splice:
    """Excise *span* from *buffer*.

    Raises:
        NothingToRemove: *span* is None (the policy was not found).
    """
    if span is None:
        msg = "Nothing to remove: the policy is not set in this document"
        raise NothingToRemove(msg)
    if len(span) == 0:
        msg = f"Nothing to remove: empty range [{span.start}, {span.end})"
        raise NothingToRemove(msg, span=span.as_tuple())
    return splice(buffer, span, lambda _table: b"")


def insert(buffer: bytes, anchor: int, build: FragmentBuilder) -> Splice:
    """Splice the fragment produced by *build* in front of *anchor*.

    *build* receives the intern table as of *anchor* and may grow it;
    existing strings are reused by index, new ones appended.
    """
    return splice(buffer, ByteRange(anchor, anchor), build)


def splice(buffer: bytes, span: ByteRange, build: FragmentBuilder) -> Splice:
    """Replace *span* of *buffer* with ``build(table_at_span_start)``."""
    buffer = bytes(buffer)
    _check_span(buffer, span)
    document = decode_all(buffer)
    _check_boundaries(document.refs, span)

    table = document.table.defined_before(span.start)
    before = len(table)
    fragment = build(table)
    appended = tuple(table.as_list()[before:])

    tail_refs = [ref for ref in document.refs if ref.offset >= span.end]
    tail, renumbered, promoted = _rewrite_tail(buffer, span.end, tail_refs, table)

    return Splice(
        data=buffer[: span.start] + fragment + tail,
        span=span,
        fragment=fragment,
        appended=appended,
        renumbered=renumbered,
        promoted=promoted,
    )


def _check_span(buffer: bytes, span: ByteRange) -> None:
    header = len(PROTOCOL_MAGIC_VERSION_0)
    if span.start < header or not span.within(len(buffer)):
        msg = f"Range [{span.start}, {span.end}) is outside the document body (size {len(buffer)})"
        raise InvalidSpan(msg, span=span.as_tuple(), size=len(buffer))


def _check_boundaries(refs: Sequence[InternRef], span: ByteRange) -> None:
    for ref in refs:
        for boundary in (span.start, span.end):
            if ref.offset < boundary < ref.end:
                msg = f"Offset {boundary} splits the interned string at [{ref.offset}, {ref.end})"
                raise InvalidSpan(msg, offset=boundary, field=(ref.offset, ref.end))


def _rewrite_tail(
    buffer: bytes,
    start: int,
    refs: Sequence[InternRef],
    table: InternTable,
) -> tuple[bytes, int, int]:
    out = bytearray()
    cursor = start
    renumbered = promoted = 0

    for ref in refs:
        out += buffer[cursor : ref.offset]
        if ref.defined:
            out += buffer[ref.offset : ref.end]
            table.register(ref.value, ref.offset)
        else:
            index = table.index_of(ref.value)
            if index is None:
                writer = FastDataOutput(table)
                writer.write_interned_utf(ref.value)
                out += writer.getvalue()
                promoted += 1
            elif index == ref.index:
                out += buffer[ref.offset : ref.end]
            else:
                out += struct.pack(">H", index)
                renumbered += 1
        cursor = ref.end

    out += buffer[cursor:]
    return bytes(out), renumbered, promoted
