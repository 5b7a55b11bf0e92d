"""Result and statistics types for tree building.

``ParseSuccess`` / ``ParseFailure`` form the two-case result returned by the
strict parse convention. ``BuildStatistics`` records what a builder did.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar, Union

if TYPE_CHECKING:
    from annotated_xml_tree.events.types import XMLParseError

T = TypeVar("T")


@dataclass(frozen=True)
class ParseSuccess(Generic[T]):
    """Parse completed without error."""

    root: T

    @property
    def success(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class ParseFailure:
    """Parse failed; no tree is observable."""

    error: "XMLParseError"

    @property
    def success(self) -> bool:
        return False

    @property
    def root(self) -> None:
        return None


ParseOutcome = Union[ParseSuccess[Any], ParseFailure]


@dataclass
class BuildStatistics:
    """Counters collected while reducing an event stream to nodes."""

    events_processed: int = 0
    elements_created: int = 0
    text_nodes_created: int = 0
    max_depth: int = 0
    processing_time_ms: float = 0.0
    error: Optional["XMLParseError"] = None

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms

    @property
    def nodes_created(self) -> int:
        return self.elements_created + self.text_nodes_created

    def to_dict(self) -> dict:
        return {
            "events_processed": self.events_processed,
            "elements_created": self.elements_created,
            "text_nodes_created": self.text_nodes_created,
            "max_depth": self.max_depth,
            "processing_time_ms": self.processing_time_ms,
            "error": self.error.to_dict() if self.error else None,
        }
