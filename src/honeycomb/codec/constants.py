"""ABX wire-format constants.

A token byte packs a command in its low nibble and a value type in its
high nibble.  All multi-byte integers are big-endian.
"""

from __future__ import annotations

from enum import IntEnum

PROTOCOL_MAGIC_VERSION_0 = b"ABX\x00"

# Interned-string index announcing an inline definition.
INTERN_DEFINE = 0xFFFF
MAX_UNSIGNED_SHORT = 0xFFFF

COMMAND_MASK = 0x0F
TYPE_MASK = 0xF0


class Command(IntEnum):
    """Token commands (low nibble)."""

    START_DOCUMENT = 0
    END_DOCUMENT = 1
    START_TAG = 2
    END_TAG = 3
    TEXT = 4
    CDSECT = 5
    ENTITY_REF = 6
    IGNORABLE_WHITESPACE = 7
    PROCESSING_INSTRUCTION = 8
    COMMENT = 9
    DOCDECL = 10
    ATTRIBUTE = 15


class AttributeType(IntEnum):
    """Value types (high nibble, already shifted)."""

    NULL = 1 << 4
    STRING = 2 << 4
    STRING_INTERNED = 3 << 4
    BYTES_HEX = 4 << 4
    BYTES_BASE64 = 5 << 4
    INT = 6 << 4
    INT_HEX = 7 << 4
    LONG = 8 << 4
    LONG_HEX = 9 << 4
    FLOAT = 10 << 4
    DOUBLE = 11 << 4
    BOOLEAN_TRUE = 12 << 4
    BOOLEAN_FALSE = 13 << 4


# Commands whose payload is a plain (optional) UTF string.
TEXT_COMMANDS = frozenset(
    {
        Command.TEXT,
        Command.CDSECT,
        Command.ENTITY_REF,
        Command.IGNORABLE_WHITESPACE,
        Command.PROCESSING_INSTRUCTION,
        Command.COMMENT,
        Command.DOCDECL,
    }
)

# Attribute types that may appear after an ATTRIBUTE command.
ATTRIBUTE_TYPES = frozenset(AttributeType) - {AttributeType.NULL}

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)


def token(command: Command, type_: AttributeType) -> int:
    """Pack a command and a type into one token byte."""
    return int(command) | int(type_)


def type_for_bool(value: bool) -> AttributeType:
    return AttributeType.BOOLEAN_TRUE if value else AttributeType.BOOLEAN_FALSE
