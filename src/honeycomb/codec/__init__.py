"""Android Binary XML (ABX) codec: decoder, encoder, intern table, rendering."""

from honeycomb.codec.constants import AttributeType, Command
from honeycomb.codec.decoder import AbxDecoder, DecodedDocument, decode, decode_all
from honeycomb.codec.encoder import attribute_for, encode_attribute, encode_element
from honeycomb.codec.events import (
    Attribute,
    ByteRange,
    EndDocument,
    EndElement,
    Event,
    StartDocument,
    StartElement,
    Text,
    TextKind,
)
from honeycomb.codec.intern import InternRef, InternTable
from honeycomb.codec.render import render_xml

__all__ = [
    "AbxDecoder",
    "Attribute",
    "AttributeType",
    "ByteRange",
    "Command",
    "DecodedDocument",
    "EndDocument",
    "EndElement",
    "Event",
    "InternRef",
    "InternTable",
    "StartDocument",
    "StartElement",
    "Text",
    "TextKind",
    "attribute_for",
    "decode",
    "decode_all",
    "encode_attribute",
    "encode_element",
    "render_xml",
]
