import asyncio
from typing import Awaitable, Optional, TypeVar

from .errors import RequestCancelled

T = TypeVar("T")


class CancellationToken:
    """
    Cooperative cancellation signal shared between a caller and the
    suspension points it drives.

    The caller calls cancel(); workers check `cancelled` at boundaries and
    await wait() to abort in-flight I/O.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled("Request cancelled by caller")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


async def run_cancellable(
    operation: Awaitable[T], token: Optional[CancellationToken]
) -> T:
    """
    Await `operation`, aborting it if `token` fires first.

    The operation runs as its own task; on cancellation that task is
    cancelled and awaited so any client it opened is closed before
    RequestCancelled is raised.
    """
    if token is None:
        return await operation

    if token.cancelled:
        # Close the un-started coroutine to avoid a "never awaited" warning
        close = getattr(operation, "close", None)
        if close is not None:
            close()
        token.raise_if_cancelled()

    request = asyncio.ensure_future(operation)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not request.done():
            request.cancel()
            # Let the request unwind (connection release) before returning
            await asyncio.wait({request})

    if request.cancelled():
        raise RequestCancelled("Request cancelled by caller")
    return request.result()
