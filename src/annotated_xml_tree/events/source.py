"""Expat-backed event source.

Turns raw XML input into a lazily produced stream of ``(event, location)``
pairs. Input is fed to Expat one chunk at a time and the events a chunk
produced are yielded before the next chunk is read, so consumers can start
working before the whole document has arrived.
"""

import logging
import time
from contextlib import closing
from typing import Any, Callable, Iterator, List, Optional, Union
from xml.parsers import expat

from annotated_xml_tree.names.namespaced import NAMESPACE_SEPARATOR, NName
from annotated_xml_tree.names.qualified import QName
from annotated_xml_tree.shared.config import ParserOptions, TagForm
from annotated_xml_tree.shared.logging import get_logger
from annotated_xml_tree.shared.strings import gx_from_string

from .types import (
    AnnotatedEvent,
    CharacterData,
    EndElement,
    FailDocument,
    StartElement,
    XMLParseError,
    XMLParseException,
    XMLParseLocation,
)

InputData = Union[bytes, bytearray, memoryview, str, Any]

MS_PER_SECOND = 1000


def iter_chunks(data: InputData, chunk_size: int) -> Iterator[Union[bytes, str]]:
    """Split supported input shapes into chunks for incremental feeding.

    Accepts bytes-like objects, ``str``, objects with a ``read`` method and
    any other iterable of ``bytes``/``str`` chunks. Closing the returned
    generator also closes a chunk iterator that has a ``close`` method.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        view = memoryview(data)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start:start + chunk_size])
    elif isinstance(data, str):
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]
    elif hasattr(data, "read"):
        while True:
            chunk = data.read(chunk_size)
            if not chunk:
                break
            yield chunk
    else:
        chunks = iter(data)
        try:
            for chunk in chunks:
                if chunk:
                    yield chunk
        finally:
            # Generators holding a file open get to leave their ``with`` block.
            close = getattr(chunks, "close", None)
            if close is not None:
                close()


class ExpatEventSource:
    """Produces annotated SAX events from XML input using Expat.

    A source instance is single-use per call to :meth:`events`; each call
    creates a fresh Expat parser.
    """

    def __init__(
        self,
        options: Optional[ParserOptions] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.options = options or ParserOptions()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "expat_event_source")
        self._convert_name = self._name_converter()

        self._parser: Any = None
        self._pending: List[AnnotatedEvent] = []

    def events(self, data: InputData, throwing: bool = False) -> Iterator[AnnotatedEvent]:
        """Lazily parse ``data`` into annotated events.

        Args:
            data: XML input (bytes, str, file-like object or iterable of chunks)
            throwing: Raise :class:`XMLParseException` on failure instead of
                yielding a final ``FailDocument`` event

        Yields:
            ``(event, XMLParseLocation)`` pairs in document order
        """
        start_time = time.time()
        self._parser = self._create_parser()
        self._pending = []
        bytes_fed = 0
        chunk_count = 0

        self.logger.info(
            "Starting event production",
            extra={
                "input_type": type(data).__name__,
                "encoding_override": (
                    self.options.encoding.value if self.options.encoding else None
                ),
                "tag_form": self.options.tag_form.name,
            }
        )

        debug_chunks = self.logger.is_enabled_for(logging.DEBUG)
        with closing(iter_chunks(data, self.options.chunk_size)) as chunks:
            for chunk in chunks:
                chunk_count += 1
                bytes_fed += len(chunk)
                error = self._feed(chunk, final=False)
                if debug_chunks:
                    self.logger.debug(
                        "Chunk fed",
                        extra={
                            "chunk": chunk_count,
                            "chunk_length": len(chunk),
                            "events": len(self._pending),
                        }
                    )
                yield from self._drain()
                if error is not None:
                    yield from self._fail(error, throwing, start_time)
                    return

        error = self._feed(b"", final=True)
        yield from self._drain()
        if error is not None:
            yield from self._fail(error, throwing, start_time)
            return

        self.logger.info(
            "Event production completed",
            extra={
                "chunks": chunk_count,
                "bytes_fed": bytes_fed,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )

    def _create_parser(self) -> Any:
        options = self.options
        encoding = options.encoding.value if options.encoding else None
        if options.tag_form is TagForm.NAMESPACED:
            parser = expat.ParserCreate(encoding, NAMESPACE_SEPARATOR)
        else:
            parser = expat.ParserCreate(encoding)

        parser.buffer_text = options.buffer_text
        parser.ordered_attributes = True
        parser.StartElementHandler = self._on_start_element
        parser.EndElementHandler = self._on_end_element
        parser.CharacterDataHandler = self._on_character_data

        if options.entity_decoder is not None:
            # Treat the document as having an unread external subset so that
            # undefined entities are reported as skipped instead of fatal.
            parser.UseForeignDTD(True)
            parser.SkippedEntityHandler = self._on_skipped_entity

        if options.limits_entity_expansion:
            self._apply_entity_limits(parser)

        return parser

    def _apply_entity_limits(self, parser: Any) -> None:
        set_amplification = getattr(
            parser, "SetBillionLaughsAttackProtectionMaximumAmplification", None
        )
        set_threshold = getattr(
            parser, "SetBillionLaughsAttackProtectionActivationThreshold", None
        )
        if set_amplification is None or set_threshold is None:
            self.logger.warning(
                "Entity expansion limits not supported by this Expat build",
                extra={"expat_version": expat.EXPAT_VERSION}
            )
            return
        if self.options.max_entity_amplification is not None:
            set_amplification(self.options.max_entity_amplification)
        if self.options.entity_amplification_threshold is not None:
            set_threshold(self.options.entity_amplification_threshold)

    def _name_converter(self) -> Callable[[str], Any]:
        string_type = self.options.string_type
        tag_form = self.options.tag_form
        if tag_form is TagForm.QUALIFIED:
            return lambda name: QName.from_string(gx_from_string(name, string_type))
        if tag_form is TagForm.NAMESPACED:
            return lambda name: NName.from_expat(gx_from_string(name, string_type))
        return lambda name: gx_from_string(name, string_type)

    def _location(self) -> XMLParseLocation:
        parser = self._parser
        return XMLParseLocation(
            line=parser.CurrentLineNumber,
            column=parser.CurrentColumnNumber,
            byte_index=parser.CurrentByteIndex,
        )

    def _feed(self, chunk: Union[bytes, str], final: bool) -> Optional[XMLParseError]:
        try:
            self._parser.Parse(chunk, final)
        except expat.ExpatError as e:
            return XMLParseError(
                message=expat.ErrorString(e.code),
                location=XMLParseLocation(
                    line=e.lineno,
                    column=e.offset,
                    byte_index=self._parser.ErrorByteIndex,
                ),
            )
        return None

    def _drain(self) -> Iterator[AnnotatedEvent]:
        pending, self._pending = self._pending, []
        return iter(pending)

    def _fail(
        self, error: XMLParseError, throwing: bool, start_time: float
    ) -> Iterator[AnnotatedEvent]:
        self.logger.warning(
            "Event production stopped by parse error",
            extra={
                "error": error.message,
                "line": error.location.line if error.location else None,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        if throwing:
            raise XMLParseException(error)
        yield FailDocument(error), error.location

    # Expat handlers

    def _on_start_element(self, name: str, attributes: List[str]) -> None:
        convert_text = self._convert_text
        pairs = [
            (self._convert_name(attributes[i]), convert_text(attributes[i + 1]))
            for i in range(0, len(attributes), 2)
        ]
        self._pending.append(
            (StartElement(self._convert_name(name), pairs), self._location())
        )

    def _on_end_element(self, name: str) -> None:
        self._pending.append((EndElement(self._convert_name(name)), self._location()))

    def _on_character_data(self, text: str) -> None:
        self._emit_text(self._convert_text(text))

    def _on_skipped_entity(self, name: str, is_parameter_entity: bool) -> None:
        if is_parameter_entity:
            return
        decoded = self.options.entity_decoder(name)
        if decoded is not None:
            self._emit_text(self._convert_text(decoded))

    def _convert_text(self, text: str) -> Any:
        return gx_from_string(text, self.options.string_type)

    def _emit_text(self, text: Any) -> None:
        if self.options.buffer_text and self._pending:
            last_event, location = self._pending[-1]
            if isinstance(last_event, CharacterData):
                self._pending[-1] = (CharacterData(last_event.text + text), location)
                return
        self._pending.append((CharacterData(text), self._location()))


def parse_sax(
    data: InputData,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> Iterator[AnnotatedEvent]:
    """Lazily parse XML into location-annotated SAX events.

    A parse error is reported as a final ``FailDocument`` event.
    """
    return ExpatEventSource(options, correlation_id).events(data)


def parse_sax_throwing(
    data: InputData,
    options: Optional[ParserOptions] = None,
    correlation_id: Optional[str] = None
) -> Iterator[AnnotatedEvent]:
    """Like :func:`parse_sax`, but raise :class:`XMLParseException` on error.

    The exception is raised from the iterator when the failing chunk is
    reached, after every event that preceded the failure has been yielded.
    """
    return ExpatEventSource(options, correlation_id).events(data, throwing=True)

