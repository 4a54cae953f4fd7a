"""Render decoded ABX events as human-readable XML text."""

from __future__ import annotations

import base64
from collections.abc import Iterable

from honeycomb.codec.constants import AttributeType
from honeycomb.codec.events import (
    Attribute,
    EndElement,
    Event,
    StartElement,
    Text,
    TextKind,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_ENTITIES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: str) -> str:
    for raw, entity in _ENTITIES:
        text = text.replace(raw, entity)
    return text


def format_value(attr: Attribute) -> str:
    """String form of an attribute value, as Android's text XML writes it."""
    value = attr.value
    match attr.type:
        case AttributeType.STRING | AttributeType.STRING_INTERNED:
            return escape_xml(value)
        case AttributeType.INT_HEX:
            return f"0x{value & 0xFFFFFFFF:X}"
        case AttributeType.LONG_HEX:
            return f"0x{value & 0xFFFFFFFFFFFFFFFF:X}"
        case AttributeType.BYTES_HEX:
            return bytes(value).hex().upper()
        case AttributeType.BYTES_BASE64:
            return base64.b64encode(bytes(value)).decode("ascii")
        case AttributeType.BOOLEAN_TRUE | AttributeType.BOOLEAN_FALSE:
            return "true" if value else "false"
    return str(value)


def _start_tag(event: StartElement, *, close: bool) -> str:
    parts = [f"<{event.name}"]
    parts.extend(f' {attr.name}="{format_value(attr)}"' for attr in event.attributes)
    parts.append(" />" if close else ">")
    return "".join(parts)


def _text(event: Text) -> str:
    if event.value is None:
        return ""
    match event.kind:
        case TextKind.TEXT:
            return escape_xml(event.value)
        case TextKind.CDATA:
            return f"<![CDATA[{event.value}]]>"
        case TextKind.COMMENT:
            return f"<!--{event.value}-->"
        case TextKind.PROCESSING_INSTRUCTION:
            return f"<?{event.value}?>"
        case TextKind.DOCDECL:
            return f"<!DOCTYPE {event.value}>"
        case TextKind.ENTITY_REF:
            return f"&{event.value};"
    return event.value


def render_xml(events: Iterable[Event], *, declaration: bool = True) -> str:
    """Serialize *events* to XML.  Empty elements collapse to ``<x />``."""
    out: list[str] = [XML_DECLARATION] if declaration else []
    pending: StartElement | None = None

    for event in events:
        if isinstance(event, EndElement) and pending is not None:
            out.append(_start_tag(pending, close=True))
            pending = None
            continue
        if pending is not None:
            out.append(_start_tag(pending, close=False))
            pending = None

        if isinstance(event, StartElement):
            pending = event
        elif isinstance(event, EndElement):
            out.append(f"</{event.name}>")
        elif isinstance(event, Text):
            out.append(_text(event))

    if pending is not None:
        out.append(_start_tag(pending, close=False))
    return "".join(out)
