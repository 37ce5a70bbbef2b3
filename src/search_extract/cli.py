"""CLI entry point for the search extraction stage."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from common.cli_helpers import setup_logging, write_jsonl
from common.serialization import serialize_dataclass
from search_extract.config import load_config, set_config
from search_extract.emit_records import record_to_dict
from search_extract.host import RowStreamHost, run_stage
from search_extract.models import FieldSpec
from search_extract.stage import SearchExtractStage

logger = logging.getLogger(__name__)

CONNECTION_ENV_VAR = "SEARCH_CONNECTION_FILE"
CONNECTION_FIELD = "connection"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run one search and write extracted records to stdout as JSONL.",
    )
    parser.add_argument(
        "--connection",
        default=None,
        help=f"JSON file with connection parameters (default: ${CONNECTION_ENV_VAR})",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ or path to a YAML file (default: $SEARCH_EXTRACT_CONFIG or prod)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def _read_connection(path: str | None) -> str:
    path = path or os.environ.get(CONNECTION_ENV_VAR)
    if not path:
        raise SystemExit(f"No connection file given; pass --connection or set {CONNECTION_ENV_VAR}")
    return Path(path).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.log_level)

    config = load_config(args.config)
    set_config(config)

    payload = _read_connection(args.connection)
    host = RowStreamHost(rows=[[payload]], input_fields=[FieldSpec(name=CONNECTION_FIELD)])
    stage = SearchExtractStage(host, config=config)

    result = run_stage(stage, host)

    if host.output_shape is not None:
        records = (record_to_dict(host.output_shape, row) for row in host.output)
        write_jsonl(records, sys.stdout)

    logger.info("Run summary: %s", json.dumps(serialize_dataclass(result)))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
