"""
Provider stream channel

The provider's chunk iterator is drained by its own producer task into a
bounded queue. The orchestrator is the single consumer. Both sides share one
cancellation event: the consumer sets it to withdraw, the producer watches it
on every await and closes the provider iterator when it fires.
"""

import asyncio
from typing import Any, AsyncIterator, Optional, Tuple

from loguru import logger

from rep_gateway.providers.base import StreamUnit

# End-of-stream marker placed on the queue by the producer
_END = object()


class ProviderStream:
    """Producer task + bounded queue + shared cancel event for one provider call"""

    def __init__(self, units: AsyncIterator[StreamUnit], queue_depth: int = 1):
        self._units = units
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(queue_depth, 1))
        self.cancelled = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._task = asyncio.create_task(self._produce())
        self._task.add_done_callback(_log_producer_exit)

    @property
    def producer_done(self) -> bool:
        return self._task is not None and self._task.done()

    async def receive(self, timeout: float) -> Optional[StreamUnit]:
        """
        Next unit from the provider, or None once the stream has ended.

        Raises:
            asyncio.TimeoutError: nothing arrived within ``timeout`` seconds
        """
        item = await asyncio.wait_for(self._queue.get(), timeout=max(timeout, 0))
        return None if item is _END else item

    def abandon(self) -> None:
        """Withdraw as reader. The producer is signalled, not awaited."""
        self.cancelled.set()

    async def _produce(self) -> None:
        try:
            while True:
                finished, unit = await self._until_cancelled(self._next_unit())
                if not finished:
                    return
                if not await self._emit(unit):
                    return
                if unit is _END:
                    return
        except Exception as e:
            # Provider iterators should yield an error unit; cover the ones that raise
            logger.error(f"Provider stream raised: {e}")
            await self._emit(StreamUnit.failure(e))
        finally:
            await self._close_units()

    async def _next_unit(self) -> Any:
        try:
            return await self._units.__anext__()
        except StopAsyncIteration:
            return _END

    async def _emit(self, item: Any) -> bool:
        """Hand ``item`` to the consumer; False if the consumer withdrew first."""
        if self.cancelled.is_set():
            return False
        finished, _ = await self._until_cancelled(self._queue.put(item))
        return finished

    async def _until_cancelled(self, coro) -> Tuple[bool, Any]:
        """Await ``coro`` unless the cancel event fires first. Returns (finished, result)."""
        work = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(self.cancelled.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except BaseException:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return True, work.result()

        work.cancel()
        await asyncio.wait({work})
        return False, None

    async def _close_units(self) -> None:
        aclose = getattr(self._units, "aclose", None)
        if aclose is not None:
            await aclose()


def _log_producer_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Provider stream producer failed during shutdown: {error}")
