"""
Timed, cancellable progress sequence that gates when a claim is committed.

The sequence ticks from 0 to 100 over a fixed duration, shows the success
screen for a short delay, then awaits its completion callback exactly once.
Cancelling before the callback starts guarantees it never runs.
"""

import asyncio
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from src.core.exceptions.base import ValidationError
from src.core.logger.logger import get_logger
from src.core.service.rewards.models import SequenceSnapshot, SequenceStatus
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

CompletionCallback = Callable[[], Awaitable[None]]

PROGRESS_LABELS = (
    (25, "Preparing your reward..."),
    (50, "Calculating bonus points..."),
    (75, "Verifying account..."),
    (95, "Almost ready..."),
)
COMPLETE_LABEL = "Success!"


def progress_label(progress: float) -> str:
    for threshold, label in PROGRESS_LABELS:
        if progress < threshold:
            return label
    return COMPLETE_LABEL


class ClaimSequence:
    """One run of the claim animation. Create through ClaimSequencer.start()."""

    def __init__(
        self,
        total_duration_ms: int,
        tick_ms: int,
        display_delay_ms: int,
        on_complete: CompletionCallback
    ):
        self.total_ticks = max(1, round(total_duration_ms / tick_ms))
        self.tick_seconds = tick_ms / 1000
        self.display_delay_seconds = display_delay_ms / 1000
        self.status = SequenceStatus.RUNNING
        self._on_complete = on_complete
        self._progress = 0.0
        self._subscribers: List[asyncio.Queue] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def progress_value(self) -> float:
        return self._progress

    @property
    def snapshot(self) -> SequenceSnapshot:
        return SequenceSnapshot(
            progress=self._progress,
            label=progress_label(self._progress),
            status=self.status
        )

    @property
    def is_finished(self) -> bool:
        return self.status in (SequenceStatus.COMPLETED, SequenceStatus.CANCELLED)

    def _launch(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    def _publish(self, value: Optional[float]) -> None:
        for queue in self._subscribers:
            queue.put_nowait(value)

    def _close_streams(self) -> None:
        self._publish(None)
        self._subscribers.clear()

    async def _run(self) -> None:
        try:
            for tick in range(1, self.total_ticks + 1):
                await asyncio.sleep(self.tick_seconds)
                self._progress = tick * 100 / self.total_ticks
                self._publish(self._progress)

            self.status = SequenceStatus.COMPLETING
            self._close_streams()
            await asyncio.sleep(self.display_delay_seconds)
        except asyncio.CancelledError:
            self.status = SequenceStatus.CANCELLED
            self._close_streams()
            raise

        # Past this point cancel() is refused; the callback runs to the end
        self.status = SequenceStatus.COMMITTING
        try:
            await self._on_complete()
        except Exception as e:
            logger.error("Claim completion callback failed", extra={"error": str(e)}, exc_info=True)
            raise
        finally:
            self.status = SequenceStatus.COMPLETED

    async def progress(self) -> AsyncIterator[float]:
        """
        Stream progress values from the current one up to 100.
        Ends when the bar is full or the sequence is cancelled.
        """
        if self.status != SequenceStatus.RUNNING:
            if self.status != SequenceStatus.CANCELLED:
                yield self._progress
            return

        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        yield self._progress
        while True:
            value = await queue.get()
            if value is None:
                return
            yield value

    def cancel(self) -> bool:
        """
        Stop the sequence. Returns False if the completion callback has already
        started or the sequence is over.
        """
        if self.status not in (SequenceStatus.RUNNING, SequenceStatus.COMPLETING):
            return False

        self.status = SequenceStatus.CANCELLED
        self._close_streams()
        if self._task is not None:
            self._task.cancel()
        logger.info("Claim sequence cancelled", extra={"progress": self._progress})
        return True

    async def wait(self) -> None:
        """Wait until the sequence is completed or cancelled"""
        if self._task is not None:
            await asyncio.wait({self._task})


class ClaimSequencer:
    """Starts claim sequences with the configured tick and success-screen timing"""

    def __init__(
        self,
        tick_ms: int = settings.CLAIM_TICK_MS,
        display_delay_ms: int = settings.CLAIM_DISPLAY_DELAY_MS
    ):
        if tick_ms <= 0 or display_delay_ms < 0:
            raise ValueError("tick_ms must be positive and display_delay_ms non-negative")
        self.tick_ms = tick_ms
        self.display_delay_ms = display_delay_ms

    def start(self, total_duration_ms: int, on_complete: CompletionCallback) -> ClaimSequence:
        """Launch a sequence on the running event loop"""
        if total_duration_ms <= 0:
            raise ValidationError("Claim duration must be positive", details={"field": "total_duration_ms"})

        sequence = ClaimSequence(total_duration_ms, self.tick_ms, self.display_delay_ms, on_complete)
        sequence._launch()
        logger.debug(
            "Claim sequence started",
            extra={"duration_ms": total_duration_ms}
        )
        return sequence
