"""Parse raw search responses into SearchResultItems."""

from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib.parse import unquote_plus

from search_extract.errors import EncodingError, ErrorKind, ParseError
from search_extract.models import (
    EmptyResponse,
    ParsedResponse,
    ParseFailure,
    ParseResult,
    SearchResultItem,
)

logger = logging.getLogger(__name__)

STATUSES_KEY = "statuses"
METADATA_KEY = "search_metadata"
QUERY_KEY = "query"

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_query(value: str) -> str:
    """Percent-decode a query string as UTF-8, treating '+' as a space.

    Raises:
        EncodingError: On a truncated or non-hex escape, or invalid UTF-8.
    """
    if _MALFORMED_ESCAPE.search(value):
        raise EncodingError(f"Malformed percent escape in query: {value!r}")
    try:
        return unquote_plus(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise EncodingError(f"Query is not valid UTF-8 once decoded: {value!r}") from exc


def _read_query(response: dict) -> str:
    metadata = response.get(METADATA_KEY)
    if not isinstance(metadata, dict):
        raise EncodingError(f"Response has no {METADATA_KEY} object")
    query = metadata.get(QUERY_KEY)
    if not isinstance(query, str):
        raise EncodingError(f"{METADATA_KEY} has no {QUERY_KEY} string")
    return decode_query(query)


def _read_user(status: dict) -> dict:
    user = status.get("user")
    # Some producers embed the author object as a JSON string.
    if isinstance(user, str):
        try:
            user = json.loads(user)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ParseError(f"user is not valid JSON: {exc}") from exc
    if not isinstance(user, dict):
        raise ParseError("status has no user object")
    return user


def _required_str(obj: dict, key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise ParseError(f"missing string field {key!r}")
    return value


def _required_int(obj: dict, key: str) -> int:
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"missing integer field {key!r}")
    return value


def _parse_status(status: Any, query: str) -> SearchResultItem:
    """Parse a single status entry into a SearchResultItem."""
    if not isinstance(status, dict):
        raise ParseError("status entry is not an object")
    user = _read_user(status)
    return SearchResultItem(
        id=_required_str(status, "id_str"),
        text=_required_str(status, "text"),
        author_id=_required_str(user, "id_str"),
        author_friends_count=_required_int(user, "friends_count"),
        query=query,
    )


def parse_response(raw: str | bytes | None) -> ParseResult:
    """Parse a raw search response.

    Returns:
        EmptyResponse when there is nothing to parse, ParseFailure when the
        response as a whole cannot be used, otherwise ParsedResponse with
        every well-formed status in response order. Malformed statuses are
        skipped and counted.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return ParseFailure(ErrorKind.PARSE, f"Response is not valid UTF-8: {e}")
    if raw is None or not raw.strip():
        return EmptyResponse()

    try:
        response = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as e:
        return ParseFailure(ErrorKind.PARSE, f"Response is not valid JSON: {e}")

    if not isinstance(response, dict):
        return ParseFailure(ErrorKind.PARSE, "Response is not a JSON object")

    statuses = response.get(STATUSES_KEY)
    if not isinstance(statuses, list):
        return ParseFailure(ErrorKind.PARSE, f"Response has no {STATUSES_KEY} list")

    if not statuses:
        return ParsedResponse(items=[])

    try:
        query = _read_query(response)
    except EncodingError as e:
        return ParseFailure(ErrorKind.ENCODING, str(e))

    items = []
    skipped = 0
    for index, status in enumerate(statuses):
        try:
            items.append(_parse_status(status, query))
        except ParseError as e:
            logger.warning("Skipping status %d: %s", index, e)
            skipped += 1

    return ParsedResponse(items=items, skipped=skipped)
