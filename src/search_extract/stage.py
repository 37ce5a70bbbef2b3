"""Search extraction stage.

On the first `process()` call the stage reads the connection parameters from
the input row, runs one search, and pushes one output row per status in the
response. It then marks its output done; the host never needs to hand it a
second row.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from search_extract.client import RestSearchClient, SearchClient
from search_extract.config import StageConfig, get_config
from search_extract.connection import descriptor_from_row
from search_extract.emit_records import emit_record, resolve_output_shape
from search_extract.errors import ConfigurationError, ErrorKind, FetchError, StageStateError
from search_extract.extract_entities import extract
from search_extract.host import Stage, StageHost
from search_extract.models import (
    EmptyResponse,
    OutputShape,
    ParsedResponse,
    ParseFailure,
    SearchResultItem,
    StageRunState,
    StageState,
)
from search_extract.parse_response import parse_response

logger = logging.getLogger(__name__)

_DISPOSABLE = (StageState.CREATED, StageState.INITIALIZED, StageState.DONE, StageState.FAILED)


class SearchExtractStage(Stage):
    name = "search_extract"

    def __init__(
        self,
        host: StageHost,
        client_factory: Optional[Callable[[], SearchClient]] = None,
        config: Optional[StageConfig] = None,
    ):
        self.host = host
        self.config = config or get_config()
        self.client_factory = client_factory or self._default_client
        self.run = StageRunState()

    def _default_client(self) -> SearchClient:
        return RestSearchClient(
            timeout=self.config.client.timeout,
            user_agent=self.config.client.user_agent,
        )

    @property
    def state(self) -> StageState:
        return self.run.state

    @property
    def failure(self) -> Optional[ErrorKind]:
        return self.run.failure

    def init(self) -> bool:
        if self.run.state != StageState.CREATED:
            raise StageStateError(f"init() called in state {self.run.state.value}")

        try:
            ok = self.host.init()
        except Exception as e:
            logger.error("Host initialization failed: %s", e)
            ok = False

        if not ok:
            self.run.state = StageState.FAILED
            self.run.failure_message = "host initialization failed"
            return False

        self.run.state = StageState.INITIALIZED
        return True

    def process(self) -> bool:
        if not self.run.first_call:
            raise StageStateError(f"process() called in state {self.run.state.value}")

        row = self.host.get_row()
        if row is None:
            logger.info("No input rows; nothing to search")
            self.run.state = StageState.DONE
            self.host.set_output_done()
            return False

        self.run.state = StageState.RUNNING
        try:
            self._search_and_emit(row)
            if self.run.state == StageState.RUNNING:
                self.run.state = StageState.DONE
        except (ConfigurationError, FetchError) as e:
            self._fail(e.kind, str(e))
        except Exception as e:
            # propagated to the host after marking the run failed
            self.run.state = StageState.FAILED
            self.run.failure_message = f"unexpected error: {e}"
            raise
        finally:
            self.host.set_output_done()
        return False

    def dispose(self) -> None:
        if self.run.state == StageState.DISPOSED:
            return
        if self.run.state not in _DISPOSABLE:
            logger.warning("dispose() called in state %s", self.run.state.value)

        client = self.run.client
        self.run.client = None
        if client is not None:
            try:
                client.close()
            except Exception as e:
                logger.warning("Failed to close search client: %s", e)

        self.run.state = StageState.DISPOSED

    def _fail(self, kind: ErrorKind, message: str) -> None:
        logger.error("[%s] %s", kind.value, message)
        self.run.failure = kind
        self.run.failure_message = message
        self.run.state = StageState.FAILED

    def _resolve_shape(self) -> OutputShape:
        if self.run.output_shape is None:
            self.run.output_shape = resolve_output_shape(
                self.host.input_fields,
                self.config.output_fields,
            )
        return self.run.output_shape

    def _search_and_emit(self, row: Sequence[Any]) -> None:
        shape = self._resolve_shape()
        descriptor = descriptor_from_row(row)

        client = self.client_factory()
        self.run.client = client
        client.open(
            descriptor.consumer_key,
            descriptor.consumer_secret,
            descriptor.application_name,
            descriptor.auth_endpoint_url,
        )
        raw = client.search(descriptor.search_endpoint_url, descriptor.search_term)

        match parse_response(raw):
            case EmptyResponse():
                logger.info("Search for %r returned no response", descriptor.search_term)
            case ParseFailure(kind=kind, message=message):
                self._fail(kind, message)
            case ParsedResponse(items=items, skipped=skipped):
                self.run.items_skipped = skipped
                if skipped:
                    logger.warning("Skipped %d malformed statuses", skipped)
                input_row = row if self.config.pass_through_input else ()
                self._emit_items(items, shape, input_row)
                logger.info(
                    "Emitted %d rows for search %r",
                    self.run.rows_emitted,
                    descriptor.search_term,
                )

    def _emit_items(
        self,
        items: list[SearchResultItem],
        shape: OutputShape,
        input_row: Sequence[Any],
    ) -> None:
        feedback_size = self.config.feedback_size
        for item in items:
            record = emit_record(item, extract(item.text), shape, input_row)
            self.host.put_row(shape, record)
            self.run.rows_emitted += 1
            if feedback_size and self.run.rows_emitted % feedback_size == 0:
                logger.info("Emitted %d rows", self.run.rows_emitted)
