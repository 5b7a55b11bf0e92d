"""Annotated XML tree data model and node utilities.

A tree is made of two node kinds: :class:`Element`, which carries a tag, an
ordered list of ``(name, value)`` attribute pairs, its children and exactly
one annotation, and :class:`Text`, which carries only a text payload.

Nodes are immutable. Operations that "change" a node, such as
:func:`modify_children` or :func:`map_annotation`, build new nodes.
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from annotated_xml_tree.shared.strings import XMLString, empty_like

TagT = TypeVar("TagT")
TextT = TypeVar("TextT")
AnnT = TypeVar("AnnT")

Attributes = List[Tuple[Any, Any]]


@dataclass(frozen=True)
class Element(Generic[TagT, TextT, AnnT]):
    """Element node with its annotation."""

    tag: TagT
    attributes: List[Tuple[TagT, TextT]] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    annotation: Any = None


@dataclass(frozen=True)
class Text(Generic[TextT]):
    """Text node. Text nodes never carry an annotation."""

    text: TextT


Node = Union[Element, Text]


@dataclass(frozen=True)
class PlainElement(Generic[TagT, TextT]):
    """Element of an unannotated tree (see :func:`unannotate`)."""

    tag: TagT
    attributes: List[Tuple[TagT, TextT]] = field(default_factory=list)
    children: List["PlainNode"] = field(default_factory=list)


@dataclass(frozen=True)
class PlainText(Generic[TextT]):
    text: TextT


PlainNode = Union[PlainElement, PlainText]

# Shortcuts named after their tag and annotation shapes.
UNode = Node                 # tag and text share one string type
LNode = Node                 # annotated with XMLParseLocation
ULNode = Node
QNode = Node                 # tags are QName
QLNode = Node
NNode = Node                 # tags are NName
NLNode = Node


def _empty_for(tag: Any) -> XMLString:
    # QName and NName carry the payload type in their local part.
    return empty_like(getattr(tag, "local", tag))


def text_content(node: Node) -> XMLString:
    """Extract all text content from inside a node, including its descendants.

    Text is concatenated in document order. An element without text yields
    an empty payload of the tree's string type, taken from its tag.
    """
    if isinstance(node, Text):
        return node.text
    parts = [part for part in map(text_content, node.children) if part]
    if not parts:
        return _empty_for(node.tag)
    return empty_like(parts[0]).join(parts)


def is_element(node: Node) -> bool:
    return isinstance(node, Element)


def is_text(node: Node) -> bool:
    return isinstance(node, Text)


def is_named(node: Node, tag: Any) -> bool:
    """Is the given node an element with the given tag? Always False for text."""
    return isinstance(node, Element) and node.tag == tag


def get_attribute(node: Node, name: Any) -> Optional[Any]:
    """Get the value of the first attribute called ``name``.

    Returns None for text nodes and for elements without that attribute.
    """
    if not isinstance(node, Element):
        return None
    for key, value in node.attributes:
        if key == name:
            return value
    return None


def get_children(node: Node) -> List[Node]:
    """Children of an element; an empty list for a text node."""
    if isinstance(node, Text):
        return []
    return node.children


def modify_children(
    func: Callable[[List[Node]], List[Node]], node: Node
) -> Node:
    """Return ``node`` with its child list replaced by ``func(children)``.

    Tag, attributes and annotation are preserved. Text nodes are returned
    unchanged.
    """
    if isinstance(node, Text):
        return node
    return Element(node.tag, node.attributes, list(func(node.children)), node.annotation)


def unannotate(node: Node) -> PlainNode:
    """Drop annotations from the whole tree, yielding a plain tree."""
    if isinstance(node, Text):
        return PlainText(node.text)
    return PlainElement(
        node.tag, node.attributes, [unannotate(child) for child in node.children]
    )


def map_annotation(func: Callable[[Any], Any], node: Node) -> Node:
    """Rebuild the tree with every element annotation passed through ``func``.

    Tags, attributes, tree shape and text nodes are left untouched.
    """
    if isinstance(node, Text):
        return node
    return Element(
        node.tag,
        node.attributes,
        [map_annotation(func, child) for child in node.children],
        func(node.annotation),
    )


def map_tags(func: Callable[[Any], Any], node: Node) -> Node:
    """Rebuild the tree with element and attribute names passed through ``func``.

    Converts between tag representations, e.g. ``QName.to_string`` turns a
    qualified tree into a plain one.
    """
    if isinstance(node, Text):
        return node
    return Element(
        func(node.tag),
        [(func(key), value) for key, value in node.attributes],
        [map_tags(func, child) for child in node.children],
        node.annotation,
    )


def iter_elements(node: Node) -> Iterator[Element]:
    """Iterate over ``node`` and all descendant elements in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Element):
            yield current
            stack.extend(reversed(current.children))


def find(node: Node, tag: Any) -> Optional[Element]:
    """First descendant element (excluding ``node`` itself) with the given tag."""
    for element in iter_elements(node):
        if element is not node and element.tag == tag:
            return element
    return None


def find_all(node: Node, tag: Any) -> List[Element]:
    """All descendant elements (excluding ``node`` itself) with the given tag."""
    return [
        element for element in iter_elements(node)
        if element is not node and element.tag == tag
    ]


def force(node: Node) -> int:
    """Walk the whole tree once and return the number of nodes in it."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        if isinstance(current, Element):
            stack.extend(current.children)
    return count


def _default_serializer(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return str(value)


def to_dict(
    node: Node,
    serializer: Callable[[Any], Any] = _default_serializer
) -> Dict[str, Any]:
    """Convert a node to a JSON-ready dictionary.

    Tags, text and annotations are passed through ``serializer``; by default
    locations become dictionaries and names their string form.
    """
    if isinstance(node, Text):
        return {"text": serializer(node.text)}
    result: Dict[str, Any] = {
        "tag": serializer(node.tag),
        "attributes": [
            [serializer(key), serializer(value)] for key, value in node.attributes
        ],
        "children": [to_dict(child, serializer) for child in node.children],
    }
    if node.annotation is not None:
        result["annotation"] = serializer(node.annotation)
    return result
