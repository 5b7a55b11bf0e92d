"""Tests for the Expat event source."""

import io
import logging

import pytest

from annotated_xml_tree.events import (
    CharacterData,
    EndElement,
    ExpatEventSource,
    FailDocument,
    StartElement,
    XMLParseError,
    XMLParseException,
    XMLParseLocation,
    iter_chunks,
    parse_sax,
    parse_sax_throwing,
)
from annotated_xml_tree.names import NName, QName
from annotated_xml_tree.shared.config import Encoding, ParserOptions, TagForm
from annotated_xml_tree.shared.strings import StringType


def events_only(stream):
    return [event for event, _ in stream]


class TestIterChunks:
    """Test input splitting."""

    def test_bytes(self):
        assert list(iter_chunks(b"abcde", 2)) == [b"ab", b"cd", b"e"]

    def test_str(self):
        assert list(iter_chunks("abc", 2)) == ["ab", "c"]

    def test_file_like(self):
        assert list(iter_chunks(io.BytesIO(b"abcd"), 3)) == [b"abc", b"d"]

    def test_iterable_skips_empty_chunks(self):
        assert list(iter_chunks([b"a", b"", b"b"], 10)) == [b"a", b"b"]

    def test_empty_input(self):
        assert list(iter_chunks(b"", 4)) == []

    def test_close_closes_iterable(self):
        closed = []

        def source():
            try:
                yield b"a"
                yield b"b"
            finally:
                closed.append(True)

        chunks = iter_chunks(source(), 10)
        assert next(chunks) == b"a"
        chunks.close()

        assert closed == [True]


class TestParseSax:
    """Test event production."""

    def test_well_formed_document(self):
        """Test the event sequence of a small document."""
        events = events_only(parse_sax(b'<a>hi<b x="1"/></a>'))

        assert events == [
            StartElement("a", []),
            CharacterData("hi"),
            StartElement("b", [("x", "1")]),
            EndElement("b"),
            EndElement("a"),
        ]

    def test_start_locations(self):
        """Test that start events carry the position of their tag."""
        stream = list(parse_sax(b'<a>hi<b x="1"/></a>'))

        assert stream[0][1] == XMLParseLocation(line=1, column=0, byte_index=0)
        assert stream[2][1] == XMLParseLocation(line=1, column=5, byte_index=5)

    def test_line_numbers(self):
        stream = list(parse_sax(b"<a>\n  <b/>\n</a>"))
        starts = [location for event, location in stream if isinstance(event, StartElement)]

        assert [location.line for location in starts] == [1, 2]
        assert starts[1].column == 2

    def test_attribute_order_preserved(self):
        event = events_only(parse_sax(b'<a z="1" a="2" m="3"/>'))[0]

        assert event.attributes == [("z", "1"), ("a", "2"), ("m", "3")]

    def test_failure_is_last_event(self):
        """Test that a parse error ends the stream with FailDocument."""
        stream = list(parse_sax(b"<a><b></a>"))
        last_event, location = stream[-1]

        assert isinstance(last_event, FailDocument)
        assert last_event.error.message == "mismatched tag"
        assert last_event.error.location.line == 1
        assert location == last_event.error.location
        assert stream[0][0] == StartElement("a", [])
        assert stream[1][0] == StartElement("b", [])

    def test_empty_input_fails(self):
        stream = events_only(parse_sax(b""))

        assert len(stream) == 1
        assert stream[0].error.message == "no element found"

    def test_str_input(self):
        events = events_only(parse_sax("<a>é</a>"))

        assert events[1] == CharacterData("é")

    def test_chunked_input(self):
        """Test that input split across chunks yields the same elements."""
        chunks = [b"<r><i", b">1</i><i>", b"2</i></r>"]
        events = events_only(parse_sax(chunks))
        starts = [event for event in events if isinstance(event, StartElement)]
        texts = "".join(event.text for event in events if isinstance(event, CharacterData))

        assert [event.tag for event in starts] == ["r", "i", "i"]
        assert texts == "12"
        assert not any(isinstance(event, FailDocument) for event in events)

    def test_events_are_lazy(self):
        """Test that events of early chunks arrive before later chunks are read."""
        read = []

        def chunks():
            for chunk in (b"<r>", b"<i/>", b"</r>"):
                read.append(chunk)
                yield chunk

        stream = parse_sax(chunks())
        first_event, _ = next(stream)

        assert first_event == StartElement("r", [])
        assert read == [b"<r>"]

    def test_bytes_string_type(self):
        options = ParserOptions(string_type=StringType.BYTES)
        events = events_only(parse_sax(b'<a k="v">t</a>', options))

        assert events[0] == StartElement(b"a", [(b"k", b"v")])
        assert events[1] == CharacterData(b"t")

    def test_encoding_override(self):
        """Test decoding with a forced encoding."""
        options = ParserOptions(encoding=Encoding.ISO88591)
        events = events_only(parse_sax(b"<a>\xe9</a>", options))

        assert events[1] == CharacterData("é")


class TestTagForms:
    """Test delivery of names in the three tag forms."""

    DOCUMENT = b'<x:a xmlns:x="urn:x" x:y="1"/>'

    def test_plain(self):
        event = events_only(parse_sax(self.DOCUMENT))[0]

        assert event.tag == "x:a"
        assert event.attributes == [("xmlns:x", "urn:x"), ("x:y", "1")]

    def test_qualified(self):
        options = ParserOptions(tag_form=TagForm.QUALIFIED)
        event = events_only(parse_sax(self.DOCUMENT, options))[0]

        assert event.tag == QName("x", "a")
        assert event.attributes == [(QName("xmlns", "x"), "urn:x"), (QName("x", "y"), "1")]

    def test_namespaced(self):
        """Test that Expat resolves prefixes and consumes xmlns attributes."""
        options = ParserOptions(tag_form=TagForm.NAMESPACED)
        events = events_only(parse_sax(self.DOCUMENT, options))

        assert events[0].tag == NName("urn:x", "a")
        assert events[0].attributes == [(NName("urn:x", "y"), "1")]
        assert events[1] == EndElement(NName("urn:x", "a"))

    def test_namespaced_unqualified(self):
        options = ParserOptions(tag_form=TagForm.NAMESPACED)
        event = events_only(parse_sax(b"<a/>", options))[0]

        assert event.tag == NName(None, "a")


class TestEntityDecoder:
    """Test handling of entities the document does not declare."""

    def test_undefined_entity_is_an_error_by_default(self):
        events = events_only(parse_sax(b"<a>&nbsp;</a>"))

        assert isinstance(events[-1], FailDocument)
        assert events[-1].error.message == "undefined entity"

    def test_decoder_supplies_text(self):
        options = ParserOptions(entity_decoder={"nbsp": " "}.get)
        events = events_only(parse_sax(b"<a>x&nbsp;y</a>", options))

        assert not any(isinstance(event, FailDocument) for event in events)
        text = "".join(event.text for event in events if isinstance(event, CharacterData))
        assert text == "x y"

    def test_decoder_returning_none_drops_reference(self):
        options = ParserOptions(entity_decoder=lambda name: None)
        events = events_only(parse_sax(b"<a>x&unknown;y</a>", options))

        text = "".join(event.text for event in events if isinstance(event, CharacterData))
        assert text == "xy"


class TestThrowing:
    """Test the raising event source."""

    def test_raises_after_preceding_events(self):
        """Test that events before the failure are delivered first."""
        received = []
        with pytest.raises(XMLParseException) as exc_info:
            for event, _ in parse_sax_throwing(b"<a><b></a>"):
                received.append(event)

        assert exc_info.value.error.message == "mismatched tag"
        assert received == [StartElement("a", []), StartElement("b", [])]

    def test_no_error(self):
        events = events_only(parse_sax_throwing(b"<a/>"))

        assert events == [StartElement("a", []), EndElement("a")]


class TestExpatEventSource:
    """Test the source class directly."""

    def test_reusable_across_calls(self):
        source = ExpatEventSource()

        assert events_only(source.events(b"<a/>")) == [StartElement("a", []), EndElement("a")]
        assert events_only(source.events(b"<b/>")) == [StartElement("b", []), EndElement("b")]

    def test_hardened_options_parse_normal_documents(self):
        source = ExpatEventSource(ParserOptions.hardened())

        assert events_only(source.events(b"<a>ok</a>"))[1] == CharacterData("ok")

    def test_close_releases_chunk_source(self):
        """Test that closing the events early closes the chunk generator."""
        closed = []

        def chunks():
            try:
                yield b"<a><b></a>"
                yield b"<!-- unread -->"
            finally:
                closed.append(True)

        events = parse_sax(chunks())
        for event, _ in events:
            if isinstance(event, FailDocument):
                break
        events.close()

        assert closed == [True]

    def test_chunk_records_only_at_debug(self, caplog):
        source = ExpatEventSource(ParserOptions(chunk_size=2))
        name = "annotated_xml_tree.events.source"

        with caplog.at_level(logging.INFO, logger=name):
            list(source.events(b"<a>ok</a>"))
        assert not [r for r in caplog.records if r.message == "Chunk fed"]

        caplog.clear()
        with caplog.at_level(logging.DEBUG, logger=name):
            list(source.events(b"<a>ok</a>"))
        fed = [r for r in caplog.records if r.message == "Chunk fed"]
        assert [r.chunk for r in fed] == [1, 2, 3, 4, 5]


class TestErrorTypes:
    """Test error and location formatting."""

    def test_error_str(self):
        error = XMLParseError("mismatched tag", XMLParseLocation(3, 7, 40))

        assert str(error) == "mismatched tag at line 3, column 7"
        assert str(XMLParseError("no element found")) == "no element found"

    def test_exception_wraps_error(self):
        error = XMLParseError("junk after document element", XMLParseLocation(1, 4, 4))
        exception = XMLParseException(error)

        assert exception.error is error
        assert str(exception) == "junk after document element at line 1, column 4"
