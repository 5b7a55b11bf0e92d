"""Qualified tag names: namespace prefix kept, URI not resolved."""

from dataclasses import dataclass
from functools import total_ordering
from typing import Generic, Optional, TypeVar

from annotated_xml_tree.shared.strings import XMLString, gx_to_string

TextT = TypeVar("TextT", str, bytes)


@total_ordering
@dataclass(frozen=True)
class QName(Generic[TextT]):
    """A ``prefix:local`` name split into its two parts."""

    prefix: Optional[TextT]
    local: TextT

    @classmethod
    def from_string(cls, name: XMLString) -> "QName":
        """Split a raw name on its first colon.

        Names without a colon have no prefix. Works for ``str`` and ``bytes``.
        """
        colon = b":" if isinstance(name, bytes) else ":"
        prefix, sep, local = name.partition(colon)
        if not sep:
            return cls(None, name)
        return cls(prefix, local)

    def to_string(self) -> XMLString:
        """Join back into ``prefix:local`` form."""
        if self.prefix is None:
            return self.local
        colon = b":" if isinstance(self.local, bytes) else ":"
        return self.prefix + colon + self.local

    def _sort_key(self) -> tuple:
        # Unprefixed names sort first.
        return (self.prefix is not None, self.prefix or self.local[:0], self.local)

    def __lt__(self, other: "QName") -> bool:
        if not isinstance(other, QName):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return gx_to_string(self.to_string())


def mk_qname(local: XMLString, prefix: Optional[XMLString] = None) -> QName:
    return QName(prefix, local)
