"""String representations usable as tag and text payloads.

Trees are generic over the string type carried in tags, attribute values and
text nodes. Any type with equality, ordering and a canonical byte form
qualifies; two concrete representations are provided: ``str`` (the default)
and UTF-8 ``bytes``.
"""

from enum import Enum
from typing import Any, Protocol, Union

CANONICAL_ENCODING = "utf-8"

XMLString = Union[str, bytes]


class GenericXMLString(Protocol):
    """Capability set required of a tag or text type."""

    def __eq__(self, other: Any) -> bool: ...

    def __lt__(self, other: Any) -> bool: ...

    def __hash__(self) -> int: ...


class StringType(Enum):
    """Concrete string representation produced by the event source."""

    STR = "str"
    BYTES = "bytes"


def gx_from_string(value: str, string_type: StringType = StringType.STR) -> XMLString:
    """Convert a Python string into the requested representation."""
    if string_type is StringType.BYTES:
        return value.encode(CANONICAL_ENCODING)
    return value


def gx_to_string(value: XMLString) -> str:
    """Convert either representation back to a Python string."""
    if isinstance(value, bytes):
        return value.decode(CANONICAL_ENCODING)
    return value


def gx_from_bytes(value: bytes, string_type: StringType = StringType.STR) -> XMLString:
    """Build the requested representation from canonical UTF-8 bytes."""
    if string_type is StringType.BYTES:
        return value
    return value.decode(CANONICAL_ENCODING)


def gx_to_bytes(value: XMLString) -> bytes:
    """Canonical UTF-8 byte form of either representation."""
    if isinstance(value, bytes):
        return value
    return value.encode(CANONICAL_ENCODING)


def empty_like(value: XMLString) -> XMLString:
    """Empty payload of the same representation as ``value``."""
    return b"" if isinstance(value, bytes) else ""
