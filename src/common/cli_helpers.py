"""Common CLI helper utilities."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Iterable, TextIO


def setup_logging(level: str = "INFO") -> None:
    """Configure standard logging format for CLI tools.

    Logs go to stderr so stdout stays free for record output.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def write_jsonl(records: Iterable[dict[str, Any]], stream: TextIO) -> int:
    """Write records to a text stream as JSONL.

    Returns:
        Number of records written.
    """
    count = 0
    for record in records:
        stream.write(json.dumps(record, default=str, ensure_ascii=False) + "\n")
        count += 1
    return count
