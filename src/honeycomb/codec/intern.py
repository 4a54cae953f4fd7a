"""Per-document interned-string table.

ABX interns element names, attribute names and ``STRING_INTERNED``
values.  The first occurrence of a string is written inline behind the
``0xFFFF`` marker and implicitly receives the next index; later
occurrences write that index.  Indices are therefore positional: they
depend on the order in which definitions appear in the byte stream.

One table belongs to exactly one parse.  It is passed explicitly to the
decoder and encoder and never shared between documents.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from honeycomb.codec.constants import INTERN_DEFINE, MAX_UNSIGNED_SHORT
from honeycomb.errors import InvalidInternIndex


@dataclass(frozen=True, slots=True)
class InternRef:
    """One interned-string field as it sits in the source buffer.

    ``index`` is the table index the field resolves to, or ``None`` when
    the field is a definition that was not registered because the table
    was already full.  ``end`` covers the inline UTF payload for
    definitions.
    """

    offset: int
    end: int
    value: str
    defined: bool
    index: int | None

    @property
    def width(self) -> int:
        return self.end - self.offset


class InternTable:
    """Index <-> string table with the offset each entry was defined at."""

    def __init__(self) -> None:
        self._strings: list[str] = []
        self._offsets: list[int] = []
        self._first: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)

    def __contains__(self, value: object) -> bool:
        return value in self._first

    @property
    def full(self) -> bool:
        return len(self._strings) >= MAX_UNSIGNED_SHORT

    def lookup(self, index: int) -> str:
        """Resolve *index*, raising :class:`InvalidInternIndex` when absent."""
        if index == INTERN_DEFINE or not 0 <= index < len(self._strings):
            msg = f"Interned string index {index} is not in the table ({len(self)} entries)"
            raise InvalidInternIndex(msg, index=index, size=len(self))
        return self._strings[index]

    def index_of(self, value: str) -> int | None:
        """Lowest index holding *value*, or None."""
        return self._first.get(value)

    def register(self, value: str, offset: int = -1) -> int | None:
        """Append *value* and return its index.

        Mirrors Android's FastDataInput: once 65535 entries exist, further
        definitions are accepted but not registered (returns None).
        """
        if self.full:
            return None
        index = len(self._strings)
        self._strings.append(value)
        self._offsets.append(offset)
        self._first.setdefault(value, index)
        return index

    def defined_before(self, offset: int) -> InternTable:
        """Copy of the table restricted to entries defined before *offset*.

        This is the table a reader holds when its cursor reaches *offset*.
        """
        snapshot = InternTable()
        for value, defined_at in zip(self._strings, self._offsets, strict=True):
            if defined_at >= offset:
                break
            snapshot.register(value, defined_at)
        return snapshot

    def copy(self) -> InternTable:
        clone = InternTable()
        for value, defined_at in zip(self._strings, self._offsets, strict=True):
            clone.register(value, defined_at)
        return clone

    def as_list(self) -> list[str]:
        return list(self._strings)
