"""Background polling worker with exponential backoff and a circuit breaker.

States:
    STOPPED --start()--> RUNNING --max_retries consecutive failures--> HALTED
    RUNNING/HALTED --stop()--> STOPPED

One asyncio task owns the loop and only sleeps again after the current cycle
has finished, so at most one fetch is ever in flight.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable

from price_ticker.exceptions import PriceServiceError
from price_ticker.schemas import WorkerState, WorkerStatus
from price_ticker.services.protocols import PriceCycle

logger = logging.getLogger(__name__)

BACKOFF_MULTIPLIER = 1.5
MAX_BACKOFF_MS = 300_000
DEFAULT_UPDATE_INTERVAL_MS = 10_000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RESTART_DELAY_MS = 1_000
MIN_UPDATE_INTERVAL_MS = 1_000


def backoff_delay_ms(
    update_interval_ms: float,
    consecutive_errors: int,
    multiplier: float = BACKOFF_MULTIPLIER,
    max_backoff_ms: float = MAX_BACKOFF_MS,
) -> float:
    """Delay before the next cycle given the current failure streak.

    Zero errors gives the base interval; otherwise
    ``min(interval * multiplier ** (errors - 1), max_backoff_ms)``.
    """
    if consecutive_errors <= 0:
        return update_interval_ms
    return min(update_interval_ms * multiplier ** (consecutive_errors - 1), max_backoff_ms)


class PollingWorker:
    """Runs ``service.fetch_and_store()`` on a timer.

    Any exception from a cycle counts as a failure. After ``max_retries``
    consecutive failures the worker halts and schedules nothing until
    ``start()`` or ``restart()`` is called.
    """

    def __init__(
        self,
        service: PriceCycle,
        *,
        update_interval_ms: int = DEFAULT_UPDATE_INTERVAL_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_multiplier: float = BACKOFF_MULTIPLIER,
        max_backoff_ms: float = MAX_BACKOFF_MS,
        restart_delay_ms: int = DEFAULT_RESTART_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize a stopped worker.

        Args:
            service: Cycle runner, normally a PriceService.
            update_interval_ms: Delay between successful cycles.
            max_retries: Consecutive failures that halt the worker.
            backoff_multiplier: Growth factor of the delay per extra failure.
            max_backoff_ms: Upper bound of the backoff delay.
            restart_delay_ms: Pause between stop and start in restart().
            sleep: Coroutine used to wait between cycles (seconds).
        """
        if update_interval_ms < MIN_UPDATE_INTERVAL_MS:
            raise ValueError(f"Update interval must be at least {MIN_UPDATE_INTERVAL_MS}ms")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._service = service
        self._update_interval_ms = update_interval_ms
        self._max_retries = max_retries
        self._backoff_multiplier = backoff_multiplier
        self._max_backoff_ms = max_backoff_ms
        self._restart_delay_ms = restart_delay_ms
        self._sleep = sleep

        self._state = WorkerState.STOPPED
        self._consecutive_errors = 0
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._in_flight = False

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is WorkerState.RUNNING

    def start(self) -> None:
        """Begin polling; the first cycle runs immediately. Needs a running loop."""
        if self._state is WorkerState.RUNNING:
            logger.warning("Price worker is already running")
            return
        self._state = WorkerState.RUNNING
        self._consecutive_errors = 0
        self._generation += 1
        previous = self._task
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, previous), name="price-polling-worker"
        )
        logger.info("Starting price worker with %dms interval", self._update_interval_ms)

    def stop(self) -> None:
        """Stop polling. Cancels a pending cycle; an in-flight one finishes first."""
        if self._state is WorkerState.STOPPED:
            logger.warning("Price worker is not running")
            return
        self._state = WorkerState.STOPPED
        if self._task is not None and not self._task.done() and not self._in_flight:
            self._task.cancel()
        logger.info("Price worker stopped")

    async def restart(self) -> None:
        """Stop, let any in-flight cycle finish, pause briefly, then start again."""
        self.stop()
        await self.wait()
        await self._sleep(self._restart_delay_ms / 1000)
        self.start()

    async def wait(self) -> None:
        """Wait until the current loop task has exited."""
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def update_interval(self, new_interval_ms: int) -> None:
        """Change the base interval; a running worker restarts its loop."""
        if new_interval_ms < MIN_UPDATE_INTERVAL_MS:
            raise ValueError(f"Update interval must be at least {MIN_UPDATE_INTERVAL_MS}ms")
        old_interval_ms = self._update_interval_ms
        self._update_interval_ms = new_interval_ms
        logger.info("Update interval changed from %dms to %dms", old_interval_ms, new_interval_ms)
        if self._state is WorkerState.RUNNING:
            self.stop()
            self.start()

    def get_status(self) -> WorkerStatus:
        """Instantaneous status snapshot; never blocks."""
        return WorkerStatus(
            is_running=self._state is WorkerState.RUNNING,
            state=self._state,
            consecutive_errors=self._consecutive_errors,
            max_retries=self._max_retries,
            update_interval_ms=self._update_interval_ms,
        )

    def _active(self, generation: int) -> bool:
        return self._state is WorkerState.RUNNING and generation == self._generation

    async def _run(self, generation: int, previous: asyncio.Task | None) -> None:
        # A loop from an earlier start() may still be finishing its last cycle.
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        delay_ms: float = 0
        while self._active(generation):
            await self._sleep(delay_ms / 1000)
            if not self._active(generation):
                break
            self._in_flight = True
            try:
                succeeded = await self._run_cycle()
            finally:
                self._in_flight = False
            if not self._active(generation):
                break
            if succeeded:
                delay_ms = self._update_interval_ms
                continue
            if self._consecutive_errors >= self._max_retries:
                self._state = WorkerState.HALTED
                logger.error(
                    "Maximum consecutive errors reached (%d). Halting price worker.",
                    self._consecutive_errors,
                )
                break
            delay_ms = backoff_delay_ms(
                self._update_interval_ms,
                self._consecutive_errors,
                self._backoff_multiplier,
                self._max_backoff_ms,
            )
            logger.warning(
                "Using backoff delay of %.0fms due to %d consecutive errors",
                delay_ms,
                self._consecutive_errors,
            )

    async def _run_cycle(self) -> bool:
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            await self._service.fetch_and_store()
        except Exception as exc:  # pylint: disable=broad-except
            self._consecutive_errors += 1
            # Storage errors and bugs are outside the taxonomy; treat them as permanent.
            transient = isinstance(exc, PriceServiceError) and exc.transient
            logger.error(
                "Price worker %s error (attempt %d/%d): %s",
                "transient" if transient else "permanent",
                self._consecutive_errors,
                self._max_retries,
                exc,
            )
            return False
        self._consecutive_errors = 0
        logger.debug("Price update completed in %.0fms", (loop.time() - started) * 1000)
        return True
