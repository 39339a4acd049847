# Standard library imports
import asyncio
from unittest.mock import AsyncMock

# Third-party imports
import pytest

# Local application imports
from civic_issues.models.issues.issue import IssueStatus
from civic_issues.schemas.issues.vote_schemas import VoteOutcome
from civic_issues.services.issues.exceptions import (
    InvalidStatusError,
    IssueNotFoundError,
    IssueWriteError,
    StatusTransitionError,
)
from civic_issues.services.issues.lifecycle import (
    IssueLifecycleController,
    TransitionPolicy,
    display_comments,
    is_transition_allowed,
)
from civic_issues.services.issues.store import IssueStore
from tests.conftest import make_issue_data


@pytest.fixture
def controller(store) -> IssueLifecycleController:
    return IssueLifecycleController(store)


async def test_upvote_records_once(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")

    assert await controller.upvote(await store.get(issue_id), "voter-1") is VoteOutcome.RECORDED
    assert await controller.upvote(await store.get(issue_id), "voter-1") is VoteOutcome.ALREADY_VOTED

    issue = await store.get(issue_id)
    assert issue.votes == 1
    assert issue.voted_by == ["voter-1"]


async def test_upvote_skips_store_when_snapshot_has_voter(store):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")
    await store.add_vote(issue_id, "voter-1")
    snapshot = await store.get(issue_id)
    mock_store = AsyncMock(spec=IssueStore)

    outcome = await IssueLifecycleController(mock_store).upvote(snapshot, "voter-1")

    assert outcome is VoteOutcome.ALREADY_VOTED
    mock_store.add_vote.assert_not_called()
    mock_store.update.assert_not_called()


async def test_upvote_from_stale_snapshots_counts_once(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")
    stale = await store.get(issue_id)

    outcomes = await asyncio.gather(controller.upvote(stale, "voter-1"), controller.upvote(stale, "voter-1"))

    assert sorted(outcomes) == sorted([VoteOutcome.RECORDED, VoteOutcome.ALREADY_VOTED])
    issue = await store.get(issue_id)
    assert issue.votes == 1
    assert issue.voted_by == ["voter-1"]


async def test_upvote_missing_issue(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")
    snapshot = await store.get(issue_id)
    snapshot.id = "missing"

    with pytest.raises(IssueNotFoundError):
        await controller.upvote(snapshot, "voter-1")


async def test_comments_keep_insertion_order(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")

    first = await controller.add_comment(issue_id, "user-a", "  Still broken  ")
    second = await controller.add_comment(issue_id, "user-b", "Reported to ward office")

    issue = await store.get(issue_id)
    assert first is not None and first.text == "  Still broken  "
    assert [comment.id for comment in issue.comments] == [first.id, second.id]
    assert [comment.user_id for comment in issue.comments] == ["user-a", "user-b"]
    assert issue.comments[0].text == "  Still broken  "
    assert all(comment.created_at is not None for comment in issue.comments)
    assert [comment.id for comment in display_comments(issue)] == [second.id, first.id]
    assert [comment.id for comment in issue.comments] == [first.id, second.id]


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
async def test_blank_comment_never_reaches_store(text):
    mock_store = AsyncMock(spec=IssueStore)

    assert await IssueLifecycleController(mock_store).add_comment("issue-1", "user-a", text) is None
    mock_store.update.assert_not_called()


async def test_comment_on_missing_issue(controller):
    with pytest.raises(IssueNotFoundError):
        await controller.add_comment("missing", "user-a", "Hello")


async def test_permissive_status_changes(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")

    await controller.set_status(issue_id, IssueStatus.RESOLVED)
    assert (await store.get(issue_id)).status is IssueStatus.RESOLVED

    await controller.set_status(issue_id, "reported")
    assert (await store.get(issue_id)).status is IssueStatus.REPORTED


async def test_invalid_status_is_rejected_before_the_store(store):
    mock_store = AsyncMock(spec=IssueStore)

    with pytest.raises(InvalidStatusError):
        await IssueLifecycleController(mock_store).set_status("issue-1", "closed")
    mock_store.update.assert_not_called()


async def test_set_status_missing_issue(controller):
    with pytest.raises(IssueNotFoundError):
        await controller.set_status("missing", IssueStatus.IN_PROGRESS)


async def test_forward_only_policy(store):
    controller = IssueLifecycleController(store, TransitionPolicy.FORWARD_ONLY)
    issue_id = await store.create(make_issue_data(), reported_by="reporter")

    await controller.set_status(issue_id, IssueStatus.IN_PROGRESS)
    await controller.set_status(issue_id, IssueStatus.RESOLVED)
    with pytest.raises(StatusTransitionError) as exc_info:
        await controller.set_status(issue_id, IssueStatus.REPORTED)

    assert exc_info.value.current == "resolved"
    assert exc_info.value.requested == "reported"
    assert (await store.get(issue_id)).status is IssueStatus.RESOLVED


@pytest.mark.parametrize(
    ("current", "requested", "allowed"),
    [
        (IssueStatus.REPORTED, IssueStatus.IN_PROGRESS, True),
        (IssueStatus.REPORTED, IssueStatus.RESOLVED, False),
        (IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED, True),
        (IssueStatus.IN_PROGRESS, IssueStatus.REPORTED, False),
        (IssueStatus.RESOLVED, IssueStatus.RESOLVED, True),
    ],
)
def test_forward_transition_table(current, requested, allowed):
    assert is_transition_allowed(TransitionPolicy.FORWARD_ONLY, current, requested) is allowed
    assert is_transition_allowed(TransitionPolicy.PERMISSIVE, current, requested) is True


async def test_write_failures_propagate():
    mock_store = AsyncMock(spec=IssueStore)
    mock_store.update.side_effect = IssueWriteError("Failed to update issue", "issue-1")

    with pytest.raises(IssueWriteError):
        await IssueLifecycleController(mock_store).add_comment("issue-1", "user-a", "Hello")
    with pytest.raises(IssueWriteError):
        await IssueLifecycleController(mock_store).set_status("issue-1", "resolved")
    assert mock_store.update.await_count == 2


async def test_concurrent_commenters_never_drop_each_others_comments(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")

    added = await asyncio.gather(
        *(controller.add_comment(issue_id, f"user-{i}", f"comment {i}") for i in range(10)),
        controller.set_status(issue_id, IssueStatus.IN_PROGRESS),
    )

    issue = await store.get(issue_id)
    assert sorted(comment.id for comment in issue.comments) == sorted(comment.id for comment in added[:10])
    assert {comment.text for comment in issue.comments} == {f"comment {i}" for i in range(10)}
    assert issue.status is IssueStatus.IN_PROGRESS


async def test_concurrent_upvotes_from_one_snapshot(store, controller):
    issue_id = await store.create(make_issue_data(), reported_by="reporter")
    snapshot = await store.get(issue_id)
    voters = [f"voter-{i}" for i in range(10)]

    outcomes = await asyncio.gather(*(controller.upvote(snapshot, voter) for voter in voters))

    assert outcomes == [VoteOutcome.RECORDED] * len(voters)
    issue = await store.get(issue_id)
    assert issue.votes == len(voters)
    assert sorted(issue.voted_by) == sorted(voters)
