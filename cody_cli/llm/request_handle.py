"""
Cancellation token for a single in-flight request.
"""
import asyncio
import enum
import logging
from typing import Awaitable, Optional, TypeVar

from ..exceptions import RequestCancelledError, RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelReason(enum.Enum):
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class RequestHandle:
    """
    Explicit cancel token owned by the client for one request.

    Every network await is passed through guard(), which races it against
    the cancel event. A timeout is a deferred cancel armed with
    loop.call_later and disarmed when the request finishes.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[CancelReason] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[CancelReason]:
        return self._reason

    def cancel(self, reason: CancelReason = CancelReason.CANCELLED) -> None:
        """Cancel the request; the first reason recorded wins."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug("Request %s", reason.value)

    def arm_timeout(self, seconds: Optional[float]) -> None:
        """Schedule cancellation with reason TIMEOUT after `seconds`."""
        self.disarm()
        if seconds is None or seconds <= 0:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(seconds, self.cancel, CancelReason.TIMEOUT)

    def disarm(self) -> None:
        """Cancel a pending timeout, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def error(self) -> Exception:
        """Build the exception matching the cancel reason."""
        if self._reason is CancelReason.TIMEOUT:
            return RequestTimeoutError("Request timed out")
        return RequestCancelledError("Request cancelled")

    def raise_if_cancelled(self) -> None:
        """Raise the error matching the cancel reason, if cancelled."""
        if self._event.is_set():
            raise self.error()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the handle is cancelled first.

        Args:
            awaitable: Network operation to run

        Returns:
            The awaitable's result

        Raises:
            RequestTimeoutError: If the timeout fired first
            RequestCancelledError: If cancel() was called first
        """
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self.error()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise self.error()
