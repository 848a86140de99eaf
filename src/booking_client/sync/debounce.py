import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class Debouncer:
    """Run only the last call scheduled within a quiet period of `delay` seconds."""

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._pending: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, fn: Callable[[], Awaitable[T]]) -> "asyncio.Task[T]":
        self.cancel()
        task = asyncio.ensure_future(self._run(fn))
        self._pending = task
        return task

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _run(self, fn: Callable[[], Awaitable[T]]) -> T:
        await asyncio.sleep(self._delay)
        return await fn()
