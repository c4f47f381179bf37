"""Record one ingestion run in trend_runs."""

import logging
from typing import Any, Optional

from common.datetime import utc_now

logger = logging.getLogger(__name__)


class RunAlreadyFinishedError(RuntimeError):
    """Raised when a run is ended twice or before it was started."""


class RunRecorder:
    """Creates a `running` run row and ends it exactly once.

    The store must provide start_run(payload) -> run_id and
    update_run(run_id, status, fetched_count, inserted_count, payload, ended_at, error).
    """

    def __init__(self, store) -> None:
        self._store = store
        self.run_id: Optional[str] = None
        self._finished = False

    def start(self, payload: dict[str, Any]) -> str:
        if self.run_id is not None:
            raise RunAlreadyFinishedError(f"run {self.run_id} already started")
        self.run_id = self._store.start_run(payload)
        logger.info("Started trend run %s", self.run_id)
        return self.run_id

    def _end(
        self,
        status: str,
        fetched_count: int,
        inserted_count: int,
        payload: dict[str, Any],
        error: Optional[str] = None,
    ) -> None:
        if self.run_id is None:
            raise RunAlreadyFinishedError("run was never started")
        if self._finished:
            raise RunAlreadyFinishedError(f"run {self.run_id} already ended")

        self._store.update_run(
            self.run_id,
            status=status,
            fetched_count=fetched_count,
            inserted_count=inserted_count,
            payload=payload,
            ended_at=utc_now(),
            error=error,
        )
        self._finished = True
        logger.info("Trend run %s ended with status %s", self.run_id, status)

    def finish(self, fetched_count: int, inserted_count: int, payload: dict[str, Any]) -> None:
        self._end("success", fetched_count, inserted_count, payload)

    def fail(
        self,
        message: str,
        fetched_count: int,
        inserted_count: int,
        payload: dict[str, Any],
    ) -> None:
        self._end("failed", fetched_count, inserted_count, payload, error=message)

    @property
    def finished(self) -> bool:
        return self._finished
