# Standard library imports
import asyncio
from typing import Any

# Third-party imports
import pytest

# Local application imports
from civic_issues.core.realtime.change_feed import ChangeListener, LocalChangeFeed, LocalChangeListener
from civic_issues.models.issues.issue import IssueCategory
from civic_issues.services.issues.exceptions import IssueError, IssueNotFoundError, IssueReadError
from civic_issues.services.issues.subscriptions import Subscription
from tests.conftest import make_issue_data

TIMEOUT = 2


class Recorder:
    def __init__(self) -> None:
        self.snapshots: asyncio.Queue[Any] = asyncio.Queue()
        self.errors: list[IssueError] = []

    async def on_snapshot(self, snapshot: Any) -> None:
        await self.snapshots.put(snapshot)

    def on_error(self, error: IssueError) -> None:
        self.errors.append(error)

    async def next(self) -> Any:
        return await asyncio.wait_for(self.snapshots.get(), TIMEOUT)


async def test_collection_subscription_delivers_initial_and_updated_snapshots(store):
    recorder = Recorder()
    first_id = await store.create(make_issue_data(), reported_by="u")

    async with await store.subscribe_collection(recorder.on_snapshot, recorder.on_error) as subscription:
        initial = await recorder.next()
        assert [issue.id for issue in initial] == [first_id]

        second_id = await store.create(make_issue_data(IssueCategory.OTHER), reported_by="u")
        updated = await recorder.next()
        assert {issue.id for issue in updated} == {first_id, second_id}

        await store.add_vote(first_id, "voter-1")
        voted = await recorder.next()
        assert next(issue for issue in voted if issue.id == first_id).votes == 1
        assert subscription.active

    assert not subscription.active
    assert recorder.errors == []


async def test_category_subscription_only_contains_matching_issues(store):
    recorder = Recorder()
    await store.create(make_issue_data(IssueCategory.POTHOLE), reported_by="u")

    async with await store.subscribe_collection(recorder.on_snapshot, category=IssueCategory.GARBAGE_DUMP):
        assert await recorder.next() == []
        garbage_id = await store.create(make_issue_data(IssueCategory.GARBAGE_DUMP), reported_by="u")
        assert [issue.id for issue in await recorder.next()] == [garbage_id]


async def test_document_subscription_ignores_other_issues(store):
    recorder = Recorder()
    watched = await store.create(make_issue_data(), reported_by="u")
    other = await store.create(make_issue_data(), reported_by="u")

    async with await store.subscribe_document(watched, recorder.on_snapshot, recorder.on_error):
        assert (await recorder.next()).votes == 0

        await store.add_vote(other, "voter-1")
        await store.add_vote(watched, "voter-1")

        snapshot = await recorder.next()
        assert snapshot.id == watched
        assert snapshot.votes == 1
        assert recorder.snapshots.empty()


async def test_unsubscribe_stops_deliveries_and_releases_listener(store, feed: LocalChangeFeed):
    recorder = Recorder()
    issue_id = await store.create(make_issue_data(), reported_by="u")
    subscription = await store.subscribe_document(issue_id, recorder.on_snapshot)
    await recorder.next()
    assert feed.listener_count == 1

    await subscription.unsubscribe()
    await subscription.unsubscribe()

    assert feed.listener_count == 0
    assert not subscription.active
    await store.add_vote(issue_id, "voter-1")
    await asyncio.sleep(0.05)
    assert recorder.snapshots.empty()


async def test_missing_document_reports_error_and_closes(store, feed: LocalChangeFeed):
    recorder = Recorder()

    subscription = await store.subscribe_document("missing", recorder.on_snapshot, recorder.on_error)
    await asyncio.wait_for(subscription.wait_closed(), TIMEOUT)

    assert recorder.snapshots.empty()
    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], IssueNotFoundError)
    assert feed.listener_count == 0


async def test_unexpected_load_failure_is_wrapped(feed: LocalChangeFeed):
    errors: list[IssueError] = []

    async def load() -> list[str]:
        raise RuntimeError("boom")

    subscription = await Subscription.start(feed, "broken", load, on_snapshot=lambda _: None, on_error=errors.append)
    await asyncio.wait_for(subscription.wait_closed(), TIMEOUT)

    assert len(errors) == 1
    assert isinstance(errors[0], IssueReadError)
    assert "boom" in errors[0].message


async def test_sync_snapshot_callback(store):
    snapshots: list[Any] = []
    issue_id = await store.create(make_issue_data(), reported_by="u")

    subscription = await store.subscribe_document(issue_id, snapshots.append)
    try:
        for _ in range(50):
            if snapshots:
                break
            await asyncio.sleep(0.01)
    finally:
        await subscription.unsubscribe()

    assert [snapshot.id for snapshot in snapshots] == [issue_id]


async def test_unsubscribe_from_inside_callback(store, feed: LocalChangeFeed):
    issue_id = await store.create(make_issue_data(), reported_by="u")
    holder: dict[str, Subscription] = {}
    calls: list[str] = []

    async def on_snapshot(snapshot: Any) -> None:
        calls.append(snapshot.id)
        await holder["subscription"].unsubscribe()

    holder["subscription"] = await store.subscribe_document(issue_id, on_snapshot)
    await asyncio.wait_for(holder["subscription"].wait_closed(), TIMEOUT)

    assert calls == [issue_id]
    assert feed.listener_count == 0


@pytest.mark.parametrize("count", [1, 3])
async def test_each_subscription_has_its_own_listener(store, feed: LocalChangeFeed, count):
    issue_id = await store.create(make_issue_data(), reported_by="u")
    subscriptions = [await store.subscribe_document(issue_id, lambda _: None) for _ in range(count)]

    assert feed.listener_count == count
    for subscription in subscriptions:
        await subscription.unsubscribe()
    assert feed.listener_count == 0


async def test_queued_changes_are_coalesced_into_one_reload(feed: LocalChangeFeed):
    loads: list[int] = []

    async def load() -> int:
        loads.append(len(loads))
        return len(loads)

    subscription = await Subscription.start(feed, "coalesced", load, on_snapshot=lambda _: None)
    # Queued before the pump task first runs
    for i in range(5):
        await feed.publish(f"issue-{i}")

    for _ in range(50):
        if len(loads) >= 2:
            break
        await asyncio.sleep(0.01)
    await asyncio.sleep(0.05)
    await subscription.unsubscribe()

    assert len(loads) == 2


async def test_irrelevant_queued_changes_do_not_reload(feed: LocalChangeFeed):
    loads: list[int] = []

    async def load() -> int:
        loads.append(1)
        return len(loads)

    subscription = await Subscription.start(
        feed, "filtered", load, on_snapshot=lambda _: None, is_relevant=lambda issue_id: issue_id == "watched"
    )
    await feed.publish("other-1")
    await feed.publish("other-2")
    await asyncio.sleep(0.05)
    assert len(loads) == 1

    await feed.publish("other-3")
    await feed.publish("watched")
    for _ in range(50):
        if len(loads) == 2:
            break
        await asyncio.sleep(0.01)
    await subscription.unsubscribe()

    assert len(loads) == 2


async def test_subscription_closes_when_listener_close_fails(store):
    class DroppedListener(LocalChangeListener):
        async def close(self) -> None:
            await super().close()
            raise ConnectionError("connection already dropped")

    class DroppedFeed(LocalChangeFeed):
        async def listen(self) -> ChangeListener:
            listener = DroppedListener(self)
            self._listeners.add(listener)
            return listener

    recorder = Recorder()
    subscription = await Subscription.start(
        DroppedFeed(),
        "dropped",
        load=lambda: store.get("missing"),
        on_snapshot=recorder.on_snapshot,
        on_error=recorder.on_error,
    )

    await asyncio.wait_for(subscription.wait_closed(), TIMEOUT)

    assert not subscription.active
    assert [error.code for error in recorder.errors] == ["not_found"]
    await subscription.unsubscribe()
