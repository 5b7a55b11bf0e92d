"""Public parsing API and conversions to other tree libraries."""

from .adapters import from_etree, is_lxml_available, to_etree, to_lxml, to_xml_string
from .parser import (
    CONVENTIONS,
    XMLTreeParser,
    parse,
    parse_file,
    parse_strict,
    parse_throwing,
    stream_nodes,
)

__all__ = [
    "CONVENTIONS",
    "XMLTreeParser",
    "from_etree",
    "is_lxml_available",
    "parse",
    "parse_file",
    "parse_strict",
    "parse_throwing",
    "stream_nodes",
    "to_etree",
    "to_lxml",
    "to_xml_string",
]
