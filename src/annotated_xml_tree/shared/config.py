"""Configuration for annotated tree parsing.

``ParserOptions`` is an immutable, self-validating description of how the
event source should read its input: encoding override, handling of undefined
entities, entity-expansion limits, the form tags are reported in and the
string type of tags and text.
"""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .strings import StringType

EntityDecoder = Callable[[str], Optional[str]]

DEFAULT_CHUNK_SIZE = 65536


class Encoding(Enum):
    """Input encodings that can be forced instead of detected by Expat."""

    UTF8 = "UTF-8"
    UTF16 = "UTF-16"
    ISO88591 = "ISO-8859-1"
    USASCII = "US-ASCII"

    @classmethod
    def from_name(cls, name: str) -> "Encoding":
        """Look up an encoding by enum name or by its IANA label."""
        normalized = name.strip().upper()
        for member in cls:
            if normalized in (member.name, member.value):
                return member
        raise ConfigValidationError(
            f"Unsupported encoding override: {name}",
            field_name="encoding",
            suggestions=[member.value for member in cls],
        )


class TagForm(Enum):
    """How element and attribute names are delivered."""

    PLAIN = "plain"            # raw names, "p:local" kept intact
    QUALIFIED = "qualified"    # QName(prefix, local), no URI resolution
    NAMESPACED = "namespaced"  # NName(uri, local), resolved by Expat


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserOptions:
    """Options accepted by every parse entry point.

    Attributes:
        encoding: Encoding override; ``None`` lets Expat detect it
        entity_decoder: Called with the name of an entity the document does
            not define; the returned text is delivered as character data,
            ``None`` drops the reference
        max_entity_amplification: Upper bound on entity expansion output
            relative to input size (billion-laughs protection)
        entity_amplification_threshold: Output size in bytes from which the
            amplification limit is enforced
        tag_form: Form in which element and attribute names are delivered
        string_type: Representation of tags, attribute values and text
        buffer_text: Coalesce adjacent character data into one event
        chunk_size: Read size used for files and file-like inputs
    """

    encoding: Optional[Encoding] = None
    entity_decoder: Optional[EntityDecoder] = None
    max_entity_amplification: Optional[float] = None
    entity_amplification_threshold: Optional[int] = None
    tag_form: TagForm = TagForm.PLAIN
    string_type: StringType = StringType.STR
    buffer_text: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate option values."""
        if self.encoding is not None and not isinstance(self.encoding, Encoding):
            raise ConfigValidationError(
                "encoding must be an Encoding member or None",
                field_name="encoding",
                suggestions=["Use Encoding.from_name('UTF-8')"],
            )
        if self.entity_decoder is not None and not callable(self.entity_decoder):
            raise ConfigValidationError(
                "entity_decoder must be callable", field_name="entity_decoder"
            )
        if (
            self.max_entity_amplification is not None
            and self.max_entity_amplification < 1.0
        ):
            raise ConfigValidationError(
                "max_entity_amplification must be >= 1.0 or None",
                field_name="max_entity_amplification",
            )
        if (
            self.entity_amplification_threshold is not None
            and self.entity_amplification_threshold < 0
        ):
            raise ConfigValidationError(
                "entity_amplification_threshold must be >= 0 or None",
                field_name="entity_amplification_threshold",
            )
        if self.chunk_size <= 0:
            raise ConfigValidationError(
                "chunk_size must be > 0", field_name="chunk_size"
            )

    @property
    def limits_entity_expansion(self) -> bool:
        return (
            self.max_entity_amplification is not None
            or self.entity_amplification_threshold is not None
        )

    def override(self, **kwargs: Any) -> "ParserOptions":
        """Create new options with specific fields replaced.

        Example:
            >>> opts = ParserOptions().override(tag_form=TagForm.QUALIFIED)
        """
        try:
            return replace(self, **kwargs)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a JSON-ready dictionary.

        The entity decoder is a callable and is reported only by presence.
        """
        result: Dict[str, Any] = {}
        for option in fields(self):
            value = getattr(self, option.name)
            if option.name == "entity_decoder":
                result["has_entity_decoder"] = value is not None
            elif isinstance(value, Enum):
                result[option.name] = value.name
            else:
                result[option.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserOptions":
        """Create options from a dictionary produced by :meth:`to_dict`."""
        values: Dict[str, Any] = {}
        enum_fields = {
            "encoding": Encoding,
            "tag_form": TagForm,
            "string_type": StringType,
        }
        for option in fields(cls):
            if option.name not in data:
                continue
            value = data[option.name]
            enum_type = enum_fields.get(option.name)
            if enum_type is not None and isinstance(value, str):
                try:
                    value = enum_type[value]
                except KeyError as e:
                    raise ConfigValidationError(
                        f"Unknown {option.name}: {value}",
                        field_name=option.name,
                        suggestions=[member.name for member in enum_type],
                    ) from e
            values[option.name] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserOptions":
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserOptions":
        return cls()

    @classmethod
    def streaming(cls) -> "ParserOptions":
        """Small reads so nodes become available as soon as their bytes arrive."""
        return cls(chunk_size=4096)

    @classmethod
    def hardened(cls) -> "ParserOptions":
        """Options for untrusted input: bounded entity expansion."""
        return cls(
            max_entity_amplification=100.0,
            entity_amplification_threshold=8 * 1024 * 1024,
        )
