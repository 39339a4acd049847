"""
Live snapshot subscriptions.

A subscription delivers the full current snapshot once on start and again
after every relevant change published on the change feed. It is a disposable
handle: the owner must release it with unsubscribe() (or by leaving its
``async with`` block) once the consumer is gone, otherwise deliveries go on
for as long as the process runs.
"""

# Standard library imports
import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
import inspect
from typing import Any, Generic, TypeVar

# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger
from civic_issues.core.realtime.change_feed import ChangeFeed, ChangeListener
from civic_issues.services.issues.exceptions import IssueError, IssueReadError

logger = get_contextual_logger(__name__)

SnapshotT = TypeVar("SnapshotT")

SnapshotCallback = Callable[[SnapshotT], Awaitable[Any] | Any]
ErrorCallback = Callable[[IssueError], Awaitable[Any] | Any]


async def _invoke(callback: Callable[[Any], Any], value: Any) -> None:
    result = callback(value)
    if inspect.isawaitable(result):
        await result


class Subscription(Generic[SnapshotT]):
    def __init__(
        self,
        name: str,
        listener: ChangeListener,
        load: Callable[[], Awaitable[SnapshotT]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
        is_relevant: Callable[[str], bool],
    ):
        self.name = name
        self._listener = listener
        self._load = load
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._is_relevant = is_relevant
        self._stopped = False
        self._closed = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.logger = logger.bind(subscription=name)

    @classmethod
    async def start(
        cls,
        feed: ChangeFeed,
        name: str,
        load: Callable[[], Awaitable[SnapshotT]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        is_relevant: Callable[[str], bool] | None = None,
    ) -> "Subscription[SnapshotT]":
        # Listen before the first load so no change can slip in between
        listener = await feed.listen()
        subscription = cls(name, listener, load, on_snapshot, on_error, is_relevant or (lambda _issue_id: True))
        subscription._task = asyncio.create_task(subscription._run(), name=f"subscription:{name}")
        return subscription

    @property
    def active(self) -> bool:
        return not self._closed.is_set()

    async def _deliver(self) -> None:
        snapshot = await self._load()
        if not self._stopped:
            await _invoke(self._on_snapshot, snapshot)

    async def _run(self) -> None:
        try:
            await self._deliver()
            async for issue_id in self._listener:
                if self._stopped:
                    break
                # One reload covers every change that queued up meanwhile
                changed = [issue_id, *await self._listener.drain()]
                if any(self._is_relevant(changed_id) for changed_id in changed):
                    await self._deliver()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = e if isinstance(e, IssueError) else IssueReadError(f"Subscription failed: {e}")
            self.logger.warning(f"Closing subscription after error: {error.message}")
            await self._report(error)
        finally:
            self._stopped = True
            await self._release()

    async def _release(self) -> None:
        try:
            await self._listener.close()
        except Exception as e:
            # The feed connection may already be gone; the subscription is closed either way
            self.logger.warning(f"Failed to close change listener: {e}")
        finally:
            self._closed.set()

    async def _report(self, error: IssueError) -> None:
        if self._on_error is None:
            return
        try:
            await _invoke(self._on_error, error)
        except Exception:
            self.logger.exception("Error callback failed")

    async def unsubscribe(self) -> None:
        """Stop deliveries and release the change listener. Safe to call twice."""
        if self._stopped and self._closed.is_set():
            return
        self._stopped = True
        task = self._task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await self._release()
        self.logger.debug("Unsubscribed")

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def __aenter__(self) -> "Subscription[SnapshotT]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unsubscribe()
