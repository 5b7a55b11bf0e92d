"""Tag identities: qualified (prefix, local) and namespaced (uri, local)."""

from .namespaced import XMLNS, XMLNS_URI, NName, mk_an_nname, mk_nname
from .qualified import QName, mk_qname

__all__ = [
    "NName",
    "QName",
    "XMLNS",
    "XMLNS_URI",
    "mk_an_nname",
    "mk_nname",
    "mk_qname",
]
