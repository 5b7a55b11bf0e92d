"""Event, location and error types exchanged between the event source and the builder.

An event stream is an ordered sequence of ``(event, annotation)`` pairs. The
four event variants are plain frozen dataclasses; consumers dispatch on their
class. ``FailDocument`` is always the last event of a stream.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, List, Optional, Tuple, TypeVar, Union

TagT = TypeVar("TagT")
TextT = TypeVar("TextT")


@dataclass(frozen=True)
class XMLParseLocation:
    """Position in the input at which an event was recognised.

    Attributes:
        line: 1-based line number
        column: 0-based column within the line
        byte_index: 0-based byte offset from the start of the input
    """

    line: int
    column: int
    byte_index: int

    def to_dict(self) -> dict:
        return {"line": self.line, "column": self.column, "byte_index": self.byte_index}

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class XMLParseError:
    """Terminal parse error relayed from the event source."""

    message: str
    location: Optional[XMLParseLocation] = None

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location}"

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "location": self.location.to_dict() if self.location else None,
        }


class XMLParseException(Exception):
    """Raised by the throwing convention when a parse error is reached."""

    def __init__(self, error: XMLParseError) -> None:
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True)
class StartElement(Generic[TagT, TextT]):
    tag: TagT
    attributes: List[Tuple[TagT, TextT]] = field(default_factory=list)


@dataclass(frozen=True)
class EndElement(Generic[TagT]):
    tag: TagT


@dataclass(frozen=True)
class CharacterData(Generic[TextT]):
    text: TextT


@dataclass(frozen=True)
class FailDocument:
    error: XMLParseError


SAXEvent = Union[StartElement, EndElement, CharacterData, FailDocument]

# An event paired with its annotation.
AnnotatedEvent = Tuple[SAXEvent, Any]
EventStream = Iterable[AnnotatedEvent]
