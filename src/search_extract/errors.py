"""Error taxonomy for the search extraction stage."""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of run-ending failure reported to the host."""

    CONFIGURATION = "CONFIGURATION"
    """Connection descriptor missing or malformed."""

    FETCH = "FETCH"
    """The external search request failed."""

    PARSE = "PARSE"
    """The response structure could not be interpreted."""

    ENCODING = "ENCODING"
    """The echoed query string could not be percent-decoded."""


class SearchExtractError(Exception):
    kind: ErrorKind | None = None


class ConfigurationError(SearchExtractError):
    kind = ErrorKind.CONFIGURATION


class FetchError(SearchExtractError):
    kind = ErrorKind.FETCH


class ParseError(SearchExtractError):
    kind = ErrorKind.PARSE


class EncodingError(SearchExtractError):
    kind = ErrorKind.ENCODING


class StageStateError(SearchExtractError):
    """Raised when the host calls the stage outside its lifecycle."""
