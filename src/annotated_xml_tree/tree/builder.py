"""Reduction of annotated SAX event streams into trees.

The builder consumes ``(event, annotation)`` pairs in order. Each
``StartElement`` opens an element that takes the annotation paired with it;
the matching ``EndElement`` closes it. Character data becomes text nodes.
A ``FailDocument`` event ends the reduction: its error is reported next to
the nodes built so far, never instead of them.

Two consumers are provided:

- :class:`NodeStream` pulls events only as far as needed to complete the next
  node at a chosen depth, so large or still-arriving documents can be
  processed piece by piece.
- :class:`TreeResult` (returned by :func:`sax_to_tree`) exposes the first
  top-level node and the terminal error separately. Reading ``root`` consumes
  events only until the first top-level node is complete; reading ``error``
  consumes the whole stream.
"""

import time
from typing import Any, Iterable, Iterator, List, Optional

from annotated_xml_tree.events.types import (
    AnnotatedEvent,
    CharacterData,
    EndElement,
    FailDocument,
    StartElement,
    XMLParseError,
    XMLParseLocation,
)
from annotated_xml_tree.shared.logging import get_logger
from annotated_xml_tree.shared.result import (
    BuildStatistics,
    ParseFailure,
    ParseOutcome,
    ParseSuccess,
)

from .node import Element, Node, Text

MS_PER_SECOND = 1000


def first_of(
    first: Optional[XMLParseError], second: Optional[XMLParseError]
) -> Optional[XMLParseError]:
    """Left-biased error merge: the earlier error wins when both are present."""
    return first if first is not None else second


class _Frame:
    """An element whose start event has been seen but not its end event."""

    __slots__ = ("tag", "attributes", "annotation", "children", "materialized")

    def __init__(
        self, tag: Any, attributes: List[Any], annotation: Any, materialized: bool
    ) -> None:
        self.tag = tag
        self.attributes = attributes
        self.annotation = annotation
        self.children: List[Node] = []
        self.materialized = materialized

    def close(self) -> Element:
        return Element(self.tag, list(self.attributes), self.children, self.annotation)


def _mismatch_error(
    event: EndElement, open_frame: Optional[_Frame], annotation: Any
) -> XMLParseError:
    location = annotation if isinstance(annotation, XMLParseLocation) else None
    if open_frame is None:
        message = f"unexpected end tag {event.tag!r} with no open element"
    else:
        message = f"mismatched end tag: expected {open_frame.tag!r}, got {event.tag!r}"
    return XMLParseError(message, location)


class NodeStream:
    """Pull-based stream of completed nodes at a fixed nesting depth.

    Depth 0 yields top-level nodes, depth 1 the children of each top-level
    element, and so on. Elements above the requested depth are tracked for
    nesting but never built. Each node is yielded as soon as its end event
    has been consumed; an element still open when the stream fails or ends
    is closed with the children collected so far.

    The stream can be iterated once. ``error`` holds the terminal parse
    error, if any, once iteration has finished.

    Example:
        >>> stream = NodeStream(parse_sax(data), depth=1)
        >>> for record in stream:
        ...     handle(record)
        >>> stream.error is None
        True
    """

    def __init__(
        self,
        events: Iterable[AnnotatedEvent],
        depth: int = 0,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize node stream.

        Args:
            events: Annotated SAX events, consumed lazily
            depth: Nesting depth of the nodes to yield
            correlation_id: Optional correlation ID for request tracking
        """
        if depth < 0:
            raise ValueError("depth must be >= 0")
        self._events = iter(events)
        self.depth = depth
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "node_stream")

        self.error: Optional[XMLParseError] = None
        self.statistics = BuildStatistics()
        self._started = False
        self._finished = False

    @property
    def finished(self) -> bool:
        """True once the event stream has been consumed to its end or failure."""
        return self._finished

    def __iter__(self) -> Iterator[Node]:
        if self._started:
            raise RuntimeError("NodeStream can only be iterated once")
        self._started = True
        return self._build()

    def _build(self) -> Iterator[Node]:
        start_time = time.time()
        stack: List[_Frame] = []
        stats = self.statistics
        target = self.depth

        self.logger.debug("Starting tree building", extra={"depth": target})

        for event, annotation in self._events:
            stats.events_processed += 1

            if isinstance(event, StartElement):
                stack.append(
                    _Frame(event.tag, event.attributes, annotation, len(stack) >= target)
                )
                stats.max_depth = max(stats.max_depth, len(stack))

            elif isinstance(event, EndElement):
                open_frame = stack[-1] if stack else None
                if open_frame is None or open_frame.tag != event.tag:
                    self.error = first_of(
                        self.error, _mismatch_error(event, open_frame, annotation)
                    )
                    break
                node = self._close_frame(stack)
                if node is not None:
                    yield node

            elif isinstance(event, CharacterData):
                if len(stack) >= target:
                    stats.text_nodes_created += 1
                    node = Text(event.text)
                    if len(stack) == target:
                        yield node
                    else:
                        stack[-1].children.append(node)

            elif isinstance(event, FailDocument):
                self.error = first_of(self.error, event.error)
                break

            else:
                raise TypeError(f"Unsupported SAX event: {event!r}")

        # Release the source, and any file it reads, when the loop stopped early.
        close = getattr(self._events, "close", None)
        if close is not None:
            close()

        # Elements left open by a failure or a truncated stream keep what
        # they collected so far.
        while stack:
            node = self._close_frame(stack)
            if node is not None:
                yield node

        stats.error = self.error
        stats.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self._finished = True

        if self.error is not None:
            self.logger.warning(
                "Tree building stopped by parse error",
                extra=stats.to_dict()
            )
        else:
            self.logger.debug("Tree building completed", extra=stats.to_dict())

    def _close_frame(self, stack: List[_Frame]) -> Optional[Node]:
        """Pop the innermost frame; return its element if it is to be yielded."""
        frame = stack.pop()
        if not frame.materialized:
            return None
        self.statistics.elements_created += 1
        element = frame.close()
        if len(stack) == self.depth:
            return element
        stack[-1].children.append(element)
        return None


class TreeResult:
    """Deferred-error view of a reduction: first top-level node plus error.

    ``root`` and ``error`` are independent. ``root`` consumes only the events
    needed to complete the first top-level node, so it can be read while the
    input is still arriving. ``error`` consumes every remaining event; read
    it after processing the tree to keep parsing incremental.

    Unpacking forces both, in order::

        root, error = sax_to_tree(events)

    ``root`` is None when the stream produced no node at all.
    """

    def __init__(
        self,
        events: Iterable[AnnotatedEvent],
        correlation_id: Optional[str] = None
    ) -> None:
        self._stream = NodeStream(events, depth=0, correlation_id=correlation_id)
        self._iterator = iter(self._stream)
        self._nodes: List[Node] = []

    def _pull(self) -> bool:
        try:
            self._nodes.append(next(self._iterator))
        except StopIteration:
            return False
        return True

    @property
    def root(self) -> Optional[Node]:
        if not self._nodes:
            self._pull()
        return self._nodes[0] if self._nodes else None

    @property
    def error(self) -> Optional[XMLParseError]:
        """Terminal parse error; forces the rest of the stream."""
        self.force()
        return self._stream.error

    @property
    def complete(self) -> bool:
        return self._stream.finished

    @property
    def statistics(self) -> BuildStatistics:
        return self._stream.statistics

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate over top-level nodes, pulling further events only as needed."""
        index = 0
        while True:
            if index == len(self._nodes) and not self._pull():
                return
            yield self._nodes[index]
            index += 1

    def nodes(self) -> List[Node]:
        """All top-level nodes; forces the whole stream."""
        self.force()
        return list(self._nodes)

    def force(self) -> "TreeResult":
        """Consume the remaining events."""
        while self._pull():
            pass
        return self

    def outcome(self) -> ParseOutcome:
        """Force the reduction and collapse it to success or failure.

        A failure carries only the error; the partial tree is dropped.
        """
        error = self.error
        if error is not None:
            return ParseFailure(error)
        return ParseSuccess(self.root)

    def __iter__(self) -> Iterator[Any]:
        yield self.root
        yield self.error

    def __repr__(self) -> str:
        state = "complete" if self.complete else "pending"
        return f"<TreeResult {state} nodes={len(self._nodes)}>"


def sax_to_tree(
    events: Iterable[AnnotatedEvent],
    correlation_id: Optional[str] = None
) -> TreeResult:
    """Lazily convert an annotated SAX stream into a tree.

    Each element is annotated with the value paired with its start event.
    The error, if any, is the one carried by the stream's ``FailDocument``
    event or a nesting mismatch detected while reducing.
    """
    return TreeResult(events, correlation_id)
