"""Idle → Loading → Success | Failed, with last-request-wins tickets.

Every ``begin()`` issues a new ticket. Only the holder of the latest ticket
may complete the request; completions carrying an older ticket are dropped
without touching the displayed state.
"""
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from health_harmony.app.errors import (
    HealthHarmonyError,
    InputValidationError,
    ModelContractError,
    ProviderError,
)
from health_harmony.app.schemas import Notification

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTRACT_FAILURE = "Could not get a result. Please try again later."
PROVIDER_FAILURE = "The analysis service is unavailable right now. Please try again later."
UNEXPECTED_FAILURE = "Something went wrong. Please try again later."


class RequestStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


def failure_message(exc: Exception) -> str:
    if isinstance(exc, InputValidationError):
        return str(exc)
    if isinstance(exc, ModelContractError):
        return CONTRACT_FAILURE
    if isinstance(exc, ProviderError):
        return PROVIDER_FAILURE
    return UNEXPECTED_FAILURE


class RequestState(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self.status = RequestStatus.IDLE
        self.result: Optional[T] = None
        self.error: Optional[str] = None
        self._latest = 0

    @property
    def loading(self) -> bool:
        return self.status is RequestStatus.LOADING

    def begin(self) -> int:
        self._latest += 1
        self.status = RequestStatus.LOADING
        self.result = None
        self.error = None
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    def succeed(self, ticket: int, result: T) -> bool:
        if not self.is_current(ticket):
            logger.debug("%s: dropping stale result for ticket %d (latest %d)", self.name, ticket, self._latest)
            return False
        self.status = RequestStatus.SUCCESS
        self.result = result
        return True

    def fail(self, ticket: int, message: str) -> bool:
        if not self.is_current(ticket):
            logger.debug("%s: dropping stale failure for ticket %d (latest %d)", self.name, ticket, self._latest)
            return False
        self.status = RequestStatus.FAILED
        self.error = message
        return True

    def reset(self) -> None:
        # Bumping the ticket turns any in-flight request stale.
        self._latest += 1
        self.status = RequestStatus.IDLE
        self.result = None
        self.error = None

    async def run(
        self,
        call: Callable[[], Awaitable[T]],
        notify: Optional[Callable[[Notification], Any]] = None,
        failure_title: str = "Request Failed",
    ) -> bool:
        """Run ``call`` under a fresh ticket; returns True if its outcome was displayed."""
        ticket = self.begin()
        try:
            result = await call()
        except HealthHarmonyError as exc:
            logger.warning("%s failed: %s", self.name, exc)
            return self._failed(ticket, exc, notify, failure_title)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", self.name)
            return self._failed(ticket, exc, notify, failure_title)
        return self.succeed(ticket, result)

    def _failed(self, ticket, exc, notify, title) -> bool:
        message = failure_message(exc)
        applied = self.fail(ticket, message)
        if applied and notify is not None:
            notify(Notification(title=title, description=message, variant="destructive"))
        return applied
