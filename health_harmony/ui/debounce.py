import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` only after ``delay`` seconds without a new trigger."""

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]):
        self.delay = delay
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args: Any) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(args))

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the scheduled call, if any, to finish."""
        task = self._task
        if task is not None:
            await asyncio.wait([task])

    async def _run(self, args) -> None:
        await asyncio.sleep(self.delay)
        try:
            await self.callback(*args)
        except Exception:  # noqa: BLE001
            logger.exception("debounced call failed")
