"""
The permitted mutations on a single issue: upvote, comment, status change.

Each one is sent to the store as an atomic partial update. Nothing is applied
to local copies; callers re-render from the next snapshot the store pushes.
Store failures propagate as IssueWriteError and are never retried here.
"""

# Standard library imports
from enum import Enum
import uuid

# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger
from civic_issues.models.issues.issue import IssueStatus
from civic_issues.schemas.issues.issue_schemas import Comment, IssueDocument
from civic_issues.schemas.issues.vote_schemas import VoteOutcome
from civic_issues.services.issues.exceptions import InvalidStatusError, StatusTransitionError
from civic_issues.services.issues.field_ops import SERVER_TIMESTAMP, ArrayUnion
from civic_issues.services.issues.store import IssueStore

logger = get_contextual_logger(__name__)


class TransitionPolicy(str, Enum):
    PERMISSIVE = "permissive"
    FORWARD_ONLY = "forward_only"


# Declared transitions for the forward-only workflow; staying put is always allowed
FORWARD_TRANSITIONS: dict[IssueStatus, frozenset[IssueStatus]] = {
    IssueStatus.REPORTED: frozenset({IssueStatus.REPORTED, IssueStatus.IN_PROGRESS}),
    IssueStatus.IN_PROGRESS: frozenset({IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED}),
    IssueStatus.RESOLVED: frozenset({IssueStatus.RESOLVED}),
}


def is_transition_allowed(policy: TransitionPolicy, current: IssueStatus, requested: IssueStatus) -> bool:
    if policy is TransitionPolicy.PERMISSIVE:
        return True
    return requested in FORWARD_TRANSITIONS[current]


def parse_status(value: IssueStatus | str) -> IssueStatus:
    try:
        return IssueStatus(value)
    except ValueError as e:
        raise InvalidStatusError(value) from e


def display_comments(issue: IssueDocument) -> list[Comment]:
    """Newest first, for display only; the stored order is left alone."""
    return list(reversed(issue.comments))


class IssueLifecycleController:
    def __init__(self, store: IssueStore, policy: TransitionPolicy = TransitionPolicy.PERMISSIVE):
        self.store = store
        self.policy = policy

    async def upvote(self, issue: IssueDocument, voter_id: str) -> VoteOutcome:
        """
        Add voter_id's vote to the issue.

        The snapshot check below only saves a round trip; the store's
        per-voter record is what guarantees a voter is counted once even
        when two sessions vote at the same time.
        """
        if voter_id in issue.voted_by:
            logger.debug(f"Already voted, skipping store call [issue_id={issue.id} voter_id={voter_id}]")
            return VoteOutcome.ALREADY_VOTED

        recorded = await self.store.add_vote(issue.id, voter_id)
        return VoteOutcome.RECORDED if recorded else VoteOutcome.ALREADY_VOTED

    async def add_comment(self, issue_id: str, author_id: str, text: str) -> Comment | None:
        """Append a comment as written; blank text is rejected here and never reaches the store."""
        if not text.strip():
            return None

        comment_id = str(uuid.uuid4())
        await self.store.update(
            issue_id,
            {
                "comments": ArrayUnion(
                    {
                        "id": comment_id,
                        "userId": author_id,
                        "text": text,
                        "createdAt": SERVER_TIMESTAMP,
                    }
                )
            },
        )
        logger.info(f"Comment added [issue_id={issue_id} comment_id={comment_id}]")
        return Comment(id=comment_id, user_id=author_id, text=text)

    async def set_status(self, issue_id: str, new_status: IssueStatus | str) -> None:
        requested = parse_status(new_status)

        def check_transition(current: IssueDocument) -> None:
            if not is_transition_allowed(self.policy, current.status, requested):
                raise StatusTransitionError(issue_id, current.status.value, requested.value)

        await self.store.update(
            issue_id,
            {"status": requested},
            precondition=None if self.policy is TransitionPolicy.PERMISSIVE else check_transition,
        )
        logger.info(f"Status changed [issue_id={issue_id} status={requested.value}]")
