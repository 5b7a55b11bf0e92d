"""Parse entry points producing location-annotated trees.

Three conventions share one pipeline (Expat event source, then the tree
builder) and differ only in how a parse error reaches the caller:

- :func:`parse` returns a :class:`TreeResult`. The root can be read while
  input is still arriving; reading ``error`` consumes the whole input.
- :func:`parse_strict` consumes everything, then returns either
  :class:`ParseSuccess` with the root or :class:`ParseFailure` with the error.
  No partial tree is observable on failure.
- :func:`parse_throwing` returns the root and raises
  :class:`XMLParseException` if an error is reached while building it.
  Errors located after the root element are not looked for; use
  :func:`parse_strict` when every failure must be detected.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from annotated_xml_tree.events.source import InputData, parse_sax, parse_sax_throwing
from annotated_xml_tree.events.types import XMLParseException
from annotated_xml_tree.shared.config import ParserOptions
from annotated_xml_tree.shared.logging import get_logger
from annotated_xml_tree.shared.result import ParseFailure, ParseOutcome
from annotated_xml_tree.tree.builder import NodeStream, TreeResult, sax_to_tree
from annotated_xml_tree.tree.node import Node

PathLike = Union[str, Path]

MS_PER_SECOND = 1000

CONVENTIONS = ("deferred", "strict", "throwing")


def parse(
    data: InputData,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> TreeResult:
    """Lazily parse XML into a location-annotated tree.

    Forcing ``error`` on the result forces the entire parse, so to keep the
    parse incremental check the error only after processing the tree.

    Args:
        data: XML as bytes, str, a file-like object or an iterable of chunks
        options: Parser options (encoding override, entity handling, ...)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        TreeResult giving access to ``root`` and ``error``

    Examples:
        >>> result = parse(b'<root><item id="1">value</item></root>')
        >>> result.root.tag
        'root'
        >>> result.error is None
        True
    """
    logger = get_logger(__name__, correlation_id, "parse")
    logger.debug(
        "Starting deferred parse",
        extra={"input_type": type(data).__name__}
    )
    return sax_to_tree(parse_sax(data, options, correlation_id), correlation_id)


def parse_strict(
    data: InputData,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> ParseOutcome:
    """Parse XML completely; return the root or the error, never both.

    Examples:
        >>> outcome = parse_strict(b'<a><b/></a>')
        >>> outcome.success
        True
        >>> parse_strict(b'<a><b></a>').error.message
        'mismatched tag'
    """
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_strict")

    result = parse(data, options, correlation_id)
    outcome = result.outcome()
    processing_time = (time.time() - start_time) * MS_PER_SECOND

    if not outcome.success:
        logger.info(
            "Strict parse failed",
            extra={"error": str(outcome.error), "processing_time_ms": processing_time}
        )
        return outcome

    logger.info(
        "Strict parse completed",
        extra={
            "elements": result.statistics.elements_created,
            "processing_time_ms": processing_time,
        }
    )
    return outcome


def parse_throwing(
    data: InputData,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> Optional[Node]:
    """Parse XML to its first top-level node, raising on error.

    Raises:
        XMLParseException: if a parse error is reached before the first
            top-level node is complete
    """
    events = parse_sax_throwing(data, options, correlation_id)
    return sax_to_tree(events, correlation_id).root


def stream_nodes(
    data: InputData,
    depth: int = 1,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> NodeStream:
    """Stream completed nodes at ``depth`` as their end tags are parsed.

    With the default depth of 1 each child of the document element is
    yielded as soon as it is complete, which keeps memory bounded for
    record-oriented documents. Check ``error`` on the returned stream after
    iterating.
    """
    return NodeStream(parse_sax(data, options, correlation_id), depth, correlation_id)


def parse_file(
    file_path: PathLike,
    options: Optional[ParserOptions] = None,
    convention: str = "strict",
    correlation_id: Optional[str] = None
) -> Any:
    """Parse an XML file with the selected convention.

    The file is read in ``options.chunk_size`` chunks. With the deferred
    convention the file stays open until the returned result has been
    forced, and is closed when the stream ends or stops on an error.

    Args:
        file_path: Path to the XML file
        options: Parser options
        convention: ``"deferred"``, ``"strict"`` or ``"throwing"``
        correlation_id: Optional correlation ID for request tracking

    Raises:
        ValueError: for an unknown convention
        OSError: if the file cannot be opened
    """
    if convention not in CONVENTIONS:
        raise ValueError(
            f"Unknown convention {convention!r}; expected one of {CONVENTIONS}"
        )
    path_obj = Path(file_path)
    logger = get_logger(__name__, correlation_id, "parse_file")
    logger.info(
        "Starting file parse",
        extra={"file_path": str(path_obj), "convention": convention}
    )

    if convention == "deferred":
        return parse(_read_chunks(path_obj, options), options, correlation_id)

    with path_obj.open("rb") as file:
        if convention == "strict":
            return parse_strict(file, options, correlation_id)
        return parse_throwing(file, options, correlation_id)


def _read_chunks(path_obj: Path, options: Optional[ParserOptions]) -> Any:
    chunk_size = (options or ParserOptions()).chunk_size
    with path_obj.open("rb") as file:
        while True:
            chunk = file.read(chunk_size)
            if not chunk:
                return
            yield chunk


class XMLTreeParser:
    """Reusable parser bound to one set of options and a correlation ID.

    Examples:
        >>> from annotated_xml_tree import TagForm
        >>> parser = XMLTreeParser(ParserOptions(tag_form=TagForm.QUALIFIED))
        >>> outcome = parser.parse_strict(b'<x:a xmlns:x="urn:x"/>')
        >>> outcome.root.tag
        QName(prefix='x', local='a')
    """

    def __init__(
        self,
        options: Optional[ParserOptions] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.options = options or ParserOptions()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_parser")

        self._parse_count = 0
        self._failed_parses = 0

        self.logger.info(
            "XMLTreeParser initialized",
            extra={"options": self.options.to_dict()}
        )

    def parse(self, data: InputData) -> TreeResult:
        self._parse_count += 1
        return parse(data, self.options, self.correlation_id)

    def parse_strict(self, data: InputData) -> ParseOutcome:
        self._parse_count += 1
        outcome = parse_strict(data, self.options, self.correlation_id)
        if not outcome.success:
            self._failed_parses += 1
        return outcome

    def parse_throwing(self, data: InputData) -> Optional[Node]:
        self._parse_count += 1
        try:
            return parse_throwing(data, self.options, self.correlation_id)
        except XMLParseException:
            self._failed_parses += 1
            raise

    def parse_file(self, file_path: PathLike, convention: str = "strict") -> Any:
        self._parse_count += 1
        result = parse_file(file_path, self.options, convention, self.correlation_id)
        if isinstance(result, ParseFailure):
            self._failed_parses += 1
        return result

    def stream_nodes(self, data: InputData, depth: int = 1) -> NodeStream:
        self._parse_count += 1
        return stream_nodes(data, depth, self.options, self.correlation_id)

    def reconfigure(self, **overrides: Any) -> None:
        """Replace options fields, e.g. ``reconfigure(tag_form=TagForm.PLAIN)``."""
        self.options = self.options.override(**overrides)
        self.logger.info("Parser reconfigured", extra={"overrides": sorted(overrides)})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Parse counts; failures are only known for strict and throwing parses."""
        return {
            "total_parses": self._parse_count,
            "failed_parses": self._failed_parses,
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        self._parse_count = 0
        self._failed_parses = 0
