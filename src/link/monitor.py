from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from common.envelope import LinkRequestStatus
from common.result import Failure, Result
from state.models import Session

from .errors import FitcoinError, MonitorAlreadyRunningError


StatusCallback = Callable[[Optional[LinkRequestStatus]], Any]
ErrorCallback = Callable[[str], Any]
StatusQuery = Callable[[], Awaitable[Result[Optional[LinkRequestStatus]]]]
SleepFn = Callable[[float], Awaitable[Any]]

logger = logging.getLogger(__name__)


class LinkRequestMonitor:
    """
    Periodically re-query a link request's status until told to stop.

    - `start()` schedules an asyncio task that waits `interval`, runs one
      status query, hands the outcome to `on_status` / `on_error`, and repeats.
    - Reaching approved or denied does not stop the loop; only `stop()` does.
    - `stop()` flips `session.is_monitoring`; the loop notices at its next
      wake-up and exits quietly. A query already in flight still reports.
    - `sleep` is injectable so tests can drive the loop with a fake clock.
    """

    def __init__(self, session: Session, query: StatusQuery, *, sleep: SleepFn = asyncio.sleep) -> None:
        self._session = session
        self._query = query
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def start(
        self,
        interval: float,
        *,
        on_error: Optional[ErrorCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> asyncio.Task:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if self._session.is_monitoring:
            raise MonitorAlreadyRunningError()

        # Bumped on every start, by any monitor on this session, so older loops exit
        self._session.monitor_generation += 1
        self._session.is_monitoring = True
        self._task = asyncio.create_task(
            self._run(self._session.monitor_generation, interval, on_error, on_status)
        )
        return self._task

    def stop(self) -> None:
        if self._session.is_monitoring:
            logger.info("Stopping link request monitor")
        self._session.is_monitoring = False

    def _is_current(self, generation: int) -> bool:
        return self._session.is_monitoring and generation == self._session.monitor_generation

    async def _run(
        self,
        generation: int,
        interval: float,
        on_error: Optional[ErrorCallback],
        on_status: Optional[StatusCallback],
    ) -> None:
        logger.info("Monitoring link request status every %.2fs", interval)
        try:
            while self._is_current(generation):
                await self._sleep(interval)
                if not self._is_current(generation):
                    break
                try:
                    result = await self._query()
                except FitcoinError as exc:
                    # Session lost its token or link request mid-run; polling cannot continue
                    logger.warning("Link request monitor stopping: %s", exc)
                    await _invoke(on_error, str(exc))
                    if generation == self._session.monitor_generation:
                        self._session.is_monitoring = False
                    break
                if isinstance(result, Failure):
                    await _invoke(on_error, result.message)
                else:
                    await _invoke(on_status, result.value)
        finally:
            if generation == self._session.monitor_generation and self._session.is_monitoring:
                # Task ended without stop() (e.g. cancelled); keep the flag truthful
                self._session.is_monitoring = False
            logger.debug("Link request monitor loop exited")


async def _invoke(callback: Optional[Callable[[Any], Any]], arg: Any) -> None:
    if callback is None:
        return
    try:
        out = callback(arg)
        if inspect.isawaitable(out):
            await out
    except Exception:
        logger.exception("Link request monitor callback raised")


__all__ = ["LinkRequestMonitor"]
