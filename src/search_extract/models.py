"""Data models for the search extraction stage."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from search_extract.errors import ErrorKind


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Parameters needed to open the search client and run one query."""
    consumer_key: str
    consumer_secret: str
    application_name: str
    auth_endpoint_url: str
    search_endpoint_url: str
    search_term: str


@dataclass(frozen=True)
class SearchResultItem:
    """One status entry parsed from a search response."""
    id: str
    text: str
    author_id: str
    author_friends_count: int
    query: str


@dataclass(frozen=True)
class EntityExtraction:
    """Mentions and hashtags in order of appearance, duplicates kept."""
    mentions: tuple[str, ...] = ()
    hashtags: tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str = "string"


@dataclass(frozen=True)
class OutputShape:
    """Field layout of every record emitted in a run."""
    fields: tuple[FieldSpec, ...]
    input_field_count: int

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class ParsedResponse:
    items: list[SearchResultItem] = field(default_factory=list)
    skipped: int = 0


@dataclass(frozen=True)
class EmptyResponse:
    """Nothing was returned by the search."""


@dataclass(frozen=True)
class ParseFailure:
    kind: ErrorKind
    message: str


ParseResult = Union[ParsedResponse, EmptyResponse, ParseFailure]


class StageState(str, Enum):
    CREATED = "CREATED"
    INITIALIZED = "INITIALIZED"
    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"
    DISPOSED = "DISPOSED"


@dataclass
class StageRunState:
    """Per-run context owned by the stage controller."""
    state: StageState = StageState.CREATED
    output_shape: Optional[OutputShape] = None
    client: Any = None
    rows_emitted: int = 0
    items_skipped: int = 0
    failure: Optional[ErrorKind] = None
    failure_message: str = ""

    @property
    def first_call(self) -> bool:
        return self.state == StageState.INITIALIZED


@dataclass
class StageResult:
    """Result of driving one stage through its lifecycle.

    Attributes:
        success: Whether the run finished without a fatal error.
        records_emitted: Number of rows pushed downstream.
        duration_seconds: Wall time from init to dispose.
        message: Human-readable status message.
        failure: Kind of the fatal error, if any.
    """

    success: bool
    records_emitted: int
    duration_seconds: float
    message: str
    failure: Optional[ErrorKind] = None

    def __str__(self) -> str:
        status = "SUCCESS" if self.success else "FAILED"
        return (
            f"{status}: {self.message} "
            f"({self.records_emitted:,} records in {self.duration_seconds:.1f}s)"
        )
