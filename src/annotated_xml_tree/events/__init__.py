"""SAX event layer: event variants, locations, errors and the Expat source."""

from .source import ExpatEventSource, iter_chunks, parse_sax, parse_sax_throwing
from .types import (
    AnnotatedEvent,
    CharacterData,
    EndElement,
    EventStream,
    FailDocument,
    SAXEvent,
    StartElement,
    XMLParseError,
    XMLParseException,
    XMLParseLocation,
)

__all__ = [
    "AnnotatedEvent",
    "CharacterData",
    "EndElement",
    "EventStream",
    "ExpatEventSource",
    "FailDocument",
    "SAXEvent",
    "StartElement",
    "XMLParseError",
    "XMLParseException",
    "XMLParseLocation",
    "iter_chunks",
    "parse_sax",
    "parse_sax_throwing",
]
