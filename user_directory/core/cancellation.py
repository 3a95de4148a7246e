"""Cancellation tokens for aborting in-flight requests."""

import asyncio
from typing import Any, Awaitable, Optional

from user_directory.core.exceptions import RequestCancelledError


class CancellationToken:
    """
    Caller-held handle that aborts every operation it was handed to.

    A single token may be shared by many concurrent requests; cancelling it
    aborts all of them with RequestCancelledError.
    """

    def __init__(self, reason: str = "Operation cancelled"):
        self.reason = reason
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Signal cancellation to every operation using this token."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError(self.reason)

    def _get_event(self) -> asyncio.Event:
        # Created lazily so the token can be built outside a running loop
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    async def run(self, awaitable: Awaitable[Any]) -> Any:
        """
        Await an operation, racing it against this token.

        Args:
            awaitable: Coroutine or future to run

        Returns:
            The operation's result

        Raises:
            RequestCancelledError: If the token fires before the operation completes
        """
        operation = asyncio.ensure_future(awaitable)
        if self._cancelled:
            await self._discard(operation)
            raise RequestCancelledError(self.reason)

        waiter = asyncio.ensure_future(self._get_event().wait())
        try:
            await asyncio.wait({operation, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            operation.cancel()
            waiter.cancel()
            raise

        if operation.done():
            waiter.cancel()
            return operation.result()

        await self._discard(operation)
        raise RequestCancelledError(self.reason)

    @staticmethod
    async def _discard(operation: "asyncio.Future[Any]") -> None:
        """Cancel an operation and wait for it to unwind."""
        operation.cancel()
        await asyncio.gather(operation, return_exceptions=True)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled!r})"
