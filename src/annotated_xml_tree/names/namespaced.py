"""Namespaced tag names: namespace URI already resolved upstream.

Resolution itself is performed by Expat when the event source runs in
namespace mode; this module only defines the resulting name shape.
"""

from dataclasses import dataclass
from functools import total_ordering
from typing import Generic, Optional, TypeVar

from annotated_xml_tree.shared.strings import XMLString, gx_to_string

TextT = TypeVar("TextT", str, bytes)

XMLNS_URI = "http://www.w3.org/2000/xmlns/"
XMLNS = "xmlns"

# Separator Expat places between URI and local name in namespace mode.
NAMESPACE_SEPARATOR = " "


@total_ordering
@dataclass(frozen=True)
class NName(Generic[TextT]):
    """A local name together with its resolved namespace URI, if any."""

    uri: Optional[TextT]
    local: TextT

    @classmethod
    def from_expat(cls, name: XMLString) -> "NName":
        """Decode a name reported by Expat with ``namespace_separator``.

        Expat reports ``"uri local"`` for names in a namespace and the bare
        local name otherwise.
        """
        separator = NAMESPACE_SEPARATOR
        if isinstance(name, bytes):
            separator = separator.encode()
        uri, sep, local = name.rpartition(separator)
        if not sep:
            return cls(None, name)
        return cls(uri, local)

    def _sort_key(self) -> tuple:
        return (self.uri is not None, self.uri or self.local[:0], self.local)

    def __lt__(self, other: "NName") -> bool:
        if not isinstance(other, NName):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        if self.uri is None:
            return gx_to_string(self.local)
        return "{%s}%s" % (gx_to_string(self.uri), gx_to_string(self.local))


def mk_nname(uri: XMLString, local: XMLString) -> NName:
    """Make a name in the namespace ``uri``."""
    return NName(uri, local)


def mk_an_nname(local: XMLString) -> NName:
    """Make a name in no namespace."""
    return NName(None, local)
