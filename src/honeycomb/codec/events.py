"""Decoded ABX events and byte ranges.

Events form a tagged union in document order.  Each carries the
half-open ``[start, end)`` range it occupies in the source buffer;
ranges never take part in equality so a decoded event compares equal
to a hand-built one with the same logical content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from honeycomb.codec.constants import AttributeType, Command


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Half-open span ``[start, end)`` of a buffer."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end:
            msg = f"Invalid byte range [{self.start}, {self.end})"
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.start

    def within(self, size: int) -> bool:
        return self.end <= size

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


class TextKind(StrEnum):
    """Textual token flavours, keyed to their wire command."""

    TEXT = "text"
    CDATA = "cdata"
    ENTITY_REF = "entity_ref"
    IGNORABLE_WHITESPACE = "ignorable_whitespace"
    PROCESSING_INSTRUCTION = "processing_instruction"
    COMMENT = "comment"
    DOCDECL = "docdecl"


TEXT_KIND_BY_COMMAND: dict[Command, TextKind] = {
    Command.TEXT: TextKind.TEXT,
    Command.CDSECT: TextKind.CDATA,
    Command.ENTITY_REF: TextKind.ENTITY_REF,
    Command.IGNORABLE_WHITESPACE: TextKind.IGNORABLE_WHITESPACE,
    Command.PROCESSING_INSTRUCTION: TextKind.PROCESSING_INSTRUCTION,
    Command.COMMENT: TextKind.COMMENT,
    Command.DOCDECL: TextKind.DOCDECL,
}

COMMAND_BY_TEXT_KIND: dict[TextKind, Command] = {v: k for k, v in TEXT_KIND_BY_COMMAND.items()}


@dataclass(frozen=True, slots=True)
class Attribute:
    """One typed attribute.  Belongs to exactly one StartElement."""

    name: str
    type: AttributeType
    value: Any
    span: ByteRange | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Event:
    span: ByteRange | None = field(default=None, compare=False, kw_only=True)


@dataclass(frozen=True, slots=True)
class StartDocument(Event):
    pass


@dataclass(frozen=True, slots=True)
class EndDocument(Event):
    pass


@dataclass(frozen=True, slots=True)
class StartElement(Event):
    """Start tag.  The span covers the tag token and all its attributes."""

    name: str
    attributes: tuple[Attribute, ...] = ()
    depth: int = field(default=0, compare=False)

    def attribute(self, name: str) -> Attribute | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None


@dataclass(frozen=True, slots=True)
class EndElement(Event):
    name: str
    depth: int = field(default=0, compare=False)


@dataclass(frozen=True, slots=True)
class Text(Event):
    """Textual content.  ``value`` is None for a null token."""

    value: str | None
    kind: TextKind = TextKind.TEXT
