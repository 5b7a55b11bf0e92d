"""Shared configuration, result types, string capabilities and logging.

These are used by every layer: the event source, the tree builder and the
parse entry points.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    Encoding,
    ParserOptions,
    TagForm,
)
from .logging import CorrelationLogger, get_logger
from .result import BuildStatistics, ParseFailure, ParseOutcome, ParseSuccess
from .strings import (
    GenericXMLString,
    StringType,
    gx_from_bytes,
    gx_from_string,
    gx_to_bytes,
    gx_to_string,
)

__all__ = [
    "BuildStatistics",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "Encoding",
    "GenericXMLString",
    "ParseFailure",
    "ParseOutcome",
    "ParseSuccess",
    "ParserOptions",
    "StringType",
    "TagForm",
    "get_logger",
    "gx_from_bytes",
    "gx_from_string",
    "gx_to_bytes",
    "gx_to_string",
]
