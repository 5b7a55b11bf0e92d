"""Annotated XML Tree.

Builds immutable XML trees from an annotated SAX event stream, attaching to
every element the source location (or any other value) that was paired with
its start tag.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_strict(), parse_throwing(), parse_file()
- Level 2: Configured parser - XMLTreeParser class
- Level 3: Streaming - stream_nodes() and NodeStream
- Level 4: Own event sources - sax_to_tree() over any (event, annotation) stream
"""

__version__ = "0.1.0"
__author__ = "Annotated XML Tree Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured parser
from .api import (
    XMLTreeParser,
    parse,
    parse_file,
    parse_strict,
    parse_throwing,
    stream_nodes,
)

# Event layer for custom event sources
from .events import XMLParseError, XMLParseException, XMLParseLocation, parse_sax

# Tag identities
from .names import NName, QName

# Configuration classes for advanced usage
from .shared.config import Encoding, ParserOptions, TagForm

# Core result objects for all API levels
from .shared.result import ParseFailure, ParseSuccess
from .tree import (
    Element,
    NodeStream,
    Text,
    TreeResult,
    get_attribute,
    get_children,
    is_element,
    is_named,
    is_text,
    modify_children,
    sax_to_tree,
    text_content,
    unannotate,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_strict",
    "parse_throwing",
    "parse_file",

    # Level 2: Configured parser
    "XMLTreeParser",

    # Level 3 and 4: Streaming and custom event sources
    "stream_nodes",
    "NodeStream",
    "parse_sax",
    "sax_to_tree",

    # Result objects and data structures
    "Element",
    "Text",
    "TreeResult",
    "ParseSuccess",
    "ParseFailure",
    "XMLParseError",
    "XMLParseException",
    "XMLParseLocation",
    "QName",
    "NName",

    # Node utilities
    "text_content",
    "is_element",
    "is_text",
    "is_named",
    "get_attribute",
    "get_children",
    "modify_children",
    "unannotate",

    # Configuration classes for advanced usage
    "ParserOptions",
    "Encoding",
    "TagForm",
]
