"""
Change notifications for the issue store.

Writers publish the id of every issue they changed; subscriptions listen and
re-read the affected snapshot. The feed only carries ids, never documents, so
listeners always render from the store and never from the message.
"""

# Standard library imports
from abc import ABC, abstractmethod
import asyncio
from collections.abc import AsyncIterator
from typing import Any

# Third-party imports
import redis.asyncio as redis
from redis.asyncio.client import PubSub

# Local application imports
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.core.realtime.redis import create_redis_client

logger = get_logger(__name__)


class ChangeListener(ABC):
    """Async iterator over changed issue ids. Ends once closed."""

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    @abstractmethod
    async def __anext__(self) -> str: ...

    async def drain(self) -> list[str]:
        """Ids already received but not yet read, without waiting for more."""
        return []

    @abstractmethod
    async def close(self) -> None: ...


class ChangeFeed(ABC):
    @abstractmethod
    async def publish(self, issue_id: str) -> None: ...

    @abstractmethod
    async def listen(self) -> ChangeListener: ...

    @abstractmethod
    async def close(self) -> None: ...


_CLOSED = object()


class LocalChangeListener(ChangeListener):
    def __init__(self, feed: "LocalChangeFeed"):
        self._feed = feed
        self.queue: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False

    async def __anext__(self) -> str:
        if self.closed:
            raise StopAsyncIteration
        item = await self.queue.get()
        if item is _CLOSED:
            self.closed = True
            raise StopAsyncIteration
        return item

    async def drain(self) -> list[str]:
        drained = []
        while not self.queue.empty():
            item = self.queue.get_nowait()
            if item is _CLOSED:
                # Leave the end marker for the next read
                self.queue.put_nowait(_CLOSED)
                break
            drained.append(item)
        return drained

    async def close(self) -> None:
        if self.closed:
            return
        self._feed.detach(self)
        self.queue.put_nowait(_CLOSED)


class LocalChangeFeed(ChangeFeed):
    """In-process fan-out, one queue per listener. Good for a single worker."""

    def __init__(self) -> None:
        self._listeners: set[LocalChangeListener] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, issue_id: str) -> None:
        for listener in list(self._listeners):
            listener.queue.put_nowait(issue_id)

    async def listen(self) -> ChangeListener:
        listener = LocalChangeListener(self)
        self._listeners.add(listener)
        return listener

    def detach(self, listener: LocalChangeListener) -> None:
        self._listeners.discard(listener)

    async def close(self) -> None:
        for listener in list(self._listeners):
            await listener.close()


class RedisChangeListener(ChangeListener):
    def __init__(self, pubsub: PubSub, channel: str):
        self._pubsub = pubsub
        self._channel = channel
        self._messages = pubsub.listen()
        self.closed = False

    async def __anext__(self) -> str:
        while not self.closed:
            try:
                message = await self._messages.__anext__()
            except StopAsyncIteration:
                break
            if message.get("type") == "message":
                return message["data"]
        raise StopAsyncIteration

    async def drain(self) -> list[str]:
        drained = []
        while not self.closed:
            message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=0.0)
            if message is None:
                break
            if message.get("type") == "message":
                drained.append(message["data"])
        return drained

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._pubsub.unsubscribe(self._channel)
        await self._pubsub.aclose()


class RedisChangeFeed(ChangeFeed):
    """Redis pub/sub fan-out so every API worker sees every worker's writes."""

    def __init__(self, client: redis.Redis, channel: str):
        self._client = client
        self._channel = channel

    async def publish(self, issue_id: str) -> None:
        await self._client.publish(self._channel, issue_id)

    async def listen(self) -> ChangeListener:
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self._channel)
        return RedisChangeListener(pubsub, self._channel)

    async def close(self) -> None:
        await self._client.aclose()


def build_change_feed(redis_url: str | None, channel: str) -> ChangeFeed:
    if redis_url:
        logger.info(f"Using Redis change feed on channel {channel}")
        return RedisChangeFeed(create_redis_client(redis_url), channel)
    logger.info("Using in-process change feed")
    return LocalChangeFeed()
