"""Conversion between annotated trees and ElementTree-style libraries.

ElementTree and lxml keep text in ``.text``/``.tail`` slots rather than as
separate nodes, and carry no per-element annotation. Converting to them folds
text nodes into those slots and drops annotations; converting back splits
the slots into text nodes and asks a factory for each element's annotation.
"""

from typing import Any, Callable, List, Optional
from xml.etree import ElementTree

from annotated_xml_tree.names import NName, QName
from annotated_xml_tree.shared.logging import get_logger
from annotated_xml_tree.shared.strings import gx_to_string
from annotated_xml_tree.tree.node import Element, Node, Text

logger = get_logger(__name__, component="adapters")


def _tag_to_etree(tag: Any) -> str:
    """Render a tag in ElementTree's naming convention."""
    if isinstance(tag, NName):
        return str(tag)  # "{uri}local" or "local"
    if isinstance(tag, QName):
        return str(tag)
    return gx_to_string(tag)


def _text_to_etree(text: Any) -> str:
    return gx_to_string(text)


def _append_text(target: Any, last_child: Any, text: str) -> None:
    if last_child is None:
        target.text = (target.text or "") + text
    else:
        last_child.tail = (last_child.tail or "") + text


def _build(node: Element, factory: Any) -> Any:
    attributes = {
        _tag_to_etree(key): _text_to_etree(value) for key, value in reversed(node.attributes)
    }
    target = factory.Element(_tag_to_etree(node.tag), attributes)
    last_child = None
    for child in node.children:
        if isinstance(child, Text):
            _append_text(target, last_child, _text_to_etree(child.text))
        else:
            last_child = _build(child, factory)
            target.append(last_child)
    return target


def to_etree(node: Element) -> ElementTree.Element:
    """Convert an annotated element into an ``xml.etree.ElementTree.Element``.

    Duplicate attribute names collapse to their first value.
    """
    if not isinstance(node, Element):
        raise TypeError("Only elements can be converted to ElementTree")
    return _build(node, ElementTree)


def is_lxml_available() -> bool:
    """Check if lxml is installed."""
    try:
        import lxml.etree  # noqa: F401
    except ImportError:
        return False
    return True


def to_lxml(node: Element) -> Any:
    """Convert an annotated element into an ``lxml.etree._Element``.

    Raises:
        ImportError: if lxml is not installed
    """
    if not isinstance(node, Element):
        raise TypeError("Only elements can be converted to lxml")
    import lxml.etree

    return _build(node, lxml.etree)


def from_etree(
    element: Any,
    annotate: Optional[Callable[[Any], Any]] = None
) -> Element:
    """Convert an ElementTree or lxml element into an annotated tree.

    Args:
        element: ``xml.etree`` or ``lxml.etree`` element
        annotate: Called with each source element to produce its annotation;
            annotations are None when omitted. For lxml, ``lambda e: e.sourceline``
            keeps line numbers.

    Comments and processing instructions are skipped; their tails are kept.
    """
    children: List[Node] = []
    if element.text:
        children.append(Text(element.text))
    for child in element:
        if isinstance(child.tag, str):
            children.append(from_etree(child, annotate))
        if child.tail:
            children.append(Text(child.tail))
    annotation = annotate(element) if annotate is not None else None
    return Element(element.tag, list(element.attrib.items()), children, annotation)


def to_xml_string(node: Element, encoding: str = "unicode") -> Any:
    """Serialise an annotated element through ElementTree."""
    logger.debug("Serialising element", extra={"encoding": encoding})
    return ElementTree.tostring(to_etree(node), encoding=encoding)
