"""Annotated tree model, node utilities and the SAX-to-tree builder."""

from .builder import NodeStream, TreeResult, first_of, sax_to_tree
from .node import (
    Attributes,
    Element,
    LNode,
    NLNode,
    NNode,
    Node,
    PlainElement,
    PlainNode,
    PlainText,
    QLNode,
    QNode,
    Text,
    ULNode,
    UNode,
    find,
    find_all,
    force,
    get_attribute,
    get_children,
    is_element,
    is_named,
    is_text,
    iter_elements,
    map_annotation,
    map_tags,
    modify_children,
    text_content,
    to_dict,
    unannotate,
)

__all__ = [
    "Attributes",
    "Element",
    "LNode",
    "NLNode",
    "NNode",
    "Node",
    "NodeStream",
    "PlainElement",
    "PlainNode",
    "PlainText",
    "QLNode",
    "QNode",
    "Text",
    "TreeResult",
    "ULNode",
    "UNode",
    "find",
    "find_all",
    "first_of",
    "force",
    "get_attribute",
    "get_children",
    "is_element",
    "is_named",
    "is_text",
    "iter_elements",
    "map_annotation",
    "map_tags",
    "modify_children",
    "sax_to_tree",
    "text_content",
    "to_dict",
    "unannotate",
]
