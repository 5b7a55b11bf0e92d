"""Tests for parser options and their validation."""

import json

import pytest

from annotated_xml_tree.shared.config import (
    DEFAULT_CHUNK_SIZE,
    ConfigError,
    ConfigValidationError,
    Encoding,
    ParserOptions,
    TagForm,
)
from annotated_xml_tree.shared.strings import StringType


class TestEncoding:
    """Test encoding override lookup."""

    def test_from_label(self):
        """Test lookup by IANA label, case-insensitively."""
        assert Encoding.from_name("utf-8") is Encoding.UTF8
        assert Encoding.from_name("ISO-8859-1") is Encoding.ISO88591

    def test_from_member_name(self):
        """Test lookup by enum member name."""
        assert Encoding.from_name("usascii") is Encoding.USASCII

    def test_unknown_encoding(self):
        """Test that unknown encodings report the supported ones."""
        with pytest.raises(ConfigValidationError) as exc_info:
            Encoding.from_name("EBCDIC")

        assert exc_info.value.field_name == "encoding"
        assert "UTF-8" in exc_info.value.suggestions


class TestParserOptions:
    """Test suite for ParserOptions."""

    def test_default_configuration(self):
        """Test default option values."""
        options = ParserOptions()

        assert options.encoding is None
        assert options.entity_decoder is None
        assert options.tag_form is TagForm.PLAIN
        assert options.string_type is StringType.STR
        assert options.buffer_text is True
        assert options.chunk_size == DEFAULT_CHUNK_SIZE
        assert options.limits_entity_expansion is False

    def test_validation_failures(self):
        """Test that invalid values are rejected with the offending field."""
        with pytest.raises(ConfigValidationError, match="chunk_size must be > 0"):
            ParserOptions(chunk_size=0)

        with pytest.raises(ConfigValidationError, match="max_entity_amplification"):
            ParserOptions(max_entity_amplification=0.5)

        with pytest.raises(ConfigValidationError, match="entity_amplification_threshold"):
            ParserOptions(entity_amplification_threshold=-1)

        with pytest.raises(ConfigValidationError) as exc_info:
            ParserOptions(encoding="UTF-8")
        assert exc_info.value.field_name == "encoding"

        with pytest.raises(ConfigValidationError, match="callable"):
            ParserOptions(entity_decoder="amp")

    def test_validation_error_is_config_error(self):
        """Test the exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_immutable(self):
        """Test that options are frozen."""
        options = ParserOptions()
        with pytest.raises(AttributeError):
            options.chunk_size = 10

    def test_override(self):
        """Test creating modified copies."""
        options = ParserOptions()
        qualified = options.override(tag_form=TagForm.QUALIFIED, chunk_size=16)

        assert qualified.tag_form is TagForm.QUALIFIED
        assert qualified.chunk_size == 16
        assert options.tag_form is TagForm.PLAIN

    def test_override_validates(self):
        """Test that overrides go through validation."""
        with pytest.raises(ConfigValidationError):
            ParserOptions().override(chunk_size=-5)

    def test_override_unknown_field(self):
        """Test that unknown fields are reported as validation errors."""
        with pytest.raises(ConfigValidationError):
            ParserOptions().override(no_such_option=True)

    def test_to_dict(self):
        """Test dictionary conversion."""
        options = ParserOptions(
            encoding=Encoding.UTF16,
            entity_decoder=lambda name: None,
            tag_form=TagForm.NAMESPACED,
        )
        data = options.to_dict()

        assert data["encoding"] == "UTF16"
        assert data["tag_form"] == "NAMESPACED"
        assert data["string_type"] == "STR"
        assert data["has_entity_decoder"] is True
        assert "entity_decoder" not in data

    def test_json_round_trip(self):
        """Test serialization through JSON."""
        options = ParserOptions(
            encoding=Encoding.ISO88591,
            tag_form=TagForm.QUALIFIED,
            string_type=StringType.BYTES,
            chunk_size=512,
        )
        restored = ParserOptions.from_json(options.to_json())

        assert restored == options
        assert json.loads(options.to_json())["chunk_size"] == 512

    def test_from_dict_unknown_enum(self):
        """Test that unknown enum names are rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserOptions.from_dict({"tag_form": "EXPANDED"})

        assert exc_info.value.field_name == "tag_form"
        assert "QUALIFIED" in exc_info.value.suggestions

    def test_presets(self):
        """Test preset factory methods."""
        assert ParserOptions.default() == ParserOptions()
        assert ParserOptions.streaming().chunk_size == 4096

        hardened = ParserOptions.hardened()
        assert hardened.max_entity_amplification == 100.0
        assert hardened.entity_amplification_threshold == 8 * 1024 * 1024
        assert hardened.limits_entity_expansion is True
