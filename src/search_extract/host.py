"""Lifecycle interfaces between a pipeline host and its stages.

The host pulls work from a stage by calling `process()` until it returns
False, and always calls `dispose()` once `init()` has been attempted.
`RowStreamHost` is an in-memory host used by the CLI and tests.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence

from search_extract.models import FieldSpec, OutputShape, StageResult

logger = logging.getLogger(__name__)


class Stage(ABC):
    """A unit of work driven by a pipeline host."""

    name: str = "stage"

    @abstractmethod
    def init(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def process(self) -> bool:
        """Do one unit of work; return False when no more calls are wanted."""
        raise NotImplementedError

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError


class StageHost(ABC):
    """The host side of the row-processing protocol seen by a stage."""

    @property
    @abstractmethod
    def input_fields(self) -> Sequence[FieldSpec]:
        raise NotImplementedError

    def init(self) -> bool:
        return True

    @abstractmethod
    def get_row(self) -> Optional[Sequence[Any]]:
        """Return the next input row, or None at end of stream."""
        raise NotImplementedError

    @abstractmethod
    def put_row(self, shape: OutputShape, row: list[Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_output_done(self) -> None:
        raise NotImplementedError


class RowStreamHost(StageHost):
    """In-memory host: feeds rows from a list and collects output rows."""

    def __init__(
        self,
        rows: Iterable[Sequence[Any]],
        input_fields: Sequence[FieldSpec],
    ):
        self._rows = iter(list(rows))
        self._input_fields = tuple(input_fields)
        self.output: list[list[Any]] = []
        self.output_shape: OutputShape | None = None
        self.rows_read = 0
        self.output_done = False

    @property
    def input_fields(self) -> Sequence[FieldSpec]:
        return self._input_fields

    def get_row(self) -> Optional[Sequence[Any]]:
        row = next(self._rows, None)
        if row is not None:
            self.rows_read += 1
        return row

    def put_row(self, shape: OutputShape, row: list[Any]) -> None:
        if self.output_done:
            raise RuntimeError("put_row called after output was marked done")
        self.output_shape = shape
        self.output.append(row)

    def set_output_done(self) -> None:
        self.output_done = True


def run_stage(stage: Stage, host: RowStreamHost) -> StageResult:
    """Drive `stage` through init, process and dispose.

    dispose() runs even when init() or process() fail.
    """
    start = time.monotonic()
    success = False
    message = ""
    try:
        if not stage.init():
            message = f"{stage.name} failed to initialize"
        else:
            while stage.process():
                pass
            failure = getattr(stage, "failure", None)
            success = failure is None
            message = f"{stage.name} finished" if success else f"{stage.name} failed: {failure.value}"
    finally:
        stage.dispose()

    result = StageResult(
        success=success,
        records_emitted=len(host.output),
        duration_seconds=time.monotonic() - start,
        message=message,
        failure=getattr(stage, "failure", None),
    )
    if success:
        logger.info("%s", result)
    else:
        logger.error("%s", result)
    return result
