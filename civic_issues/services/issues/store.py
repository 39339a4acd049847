"""
Issue document store.

The store is the only source of truth for issues. Every mutation is a partial
update applied inside one short transaction that locks the issue row, so
concurrent writers touching different fields (or appending to the same list)
never lose each other's changes. Readers get full snapshots, either on demand
or pushed through subscriptions.
"""

# Standard library imports
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

# Third-party imports
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger
from civic_issues.core.realtime.change_feed import ChangeFeed
from civic_issues.models.issues.issue import Issue, IssueCategory, IssueStatus
from civic_issues.models.issues.vote import Vote
from civic_issues.schemas.issues.issue_schemas import GeoPoint, IssueCreate, IssueDocument
from civic_issues.services.issues.exceptions import (
    InvalidStatusError,
    InvalidUpdateError,
    IssueError,
    IssueNotFoundError,
    IssueReadError,
    IssueWriteError,
    StoreUnavailableError,
)
from civic_issues.services.issues.field_ops import ArrayUnion, Increment, array_union, resolve_server_timestamps
from civic_issues.services.issues.subscriptions import ErrorCallback, SnapshotCallback, Subscription

logger = get_contextual_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "reported_by", "created_at", "updated_at"})
NUMERIC_FIELDS = frozenset({"votes"})
ARRAY_FIELDS = frozenset({"voted_by", "comments"})
SETTABLE_FIELDS = frozenset({"category", "description", "location", "image_url", "status"})

Precondition = Callable[[IssueDocument], None]


def validate_changes(changes: Mapping[str, Any]) -> None:
    """Reject updates the store cannot apply atomically, before any I/O."""
    if not changes:
        raise InvalidUpdateError("Update has no fields")
    for field, value in changes.items():
        if field in IMMUTABLE_FIELDS:
            raise InvalidUpdateError(f"Field {field} cannot be changed")
        if isinstance(value, Increment):
            if field not in NUMERIC_FIELDS:
                raise InvalidUpdateError(f"Field {field} does not support increment")
            if value.amount < 0:
                raise InvalidUpdateError("Negative increments are not allowed")
        elif isinstance(value, ArrayUnion):
            if field not in ARRAY_FIELDS:
                raise InvalidUpdateError(f"Field {field} does not support array union")
        elif field in ARRAY_FIELDS or field in NUMERIC_FIELDS:
            # Counters and lists only change through their atomic operations
            raise InvalidUpdateError(f"Field {field} can only be changed with an atomic operation")
        elif field not in SETTABLE_FIELDS:
            raise InvalidUpdateError(f"Unknown field {field}")


class IssueStore(ABC):
    """Document store contract for issues, plus live subscriptions over it."""

    def __init__(self, feed: ChangeFeed):
        self.feed = feed

    @abstractmethod
    async def create(self, data: IssueCreate, reported_by: str) -> str: ...

    @abstractmethod
    async def get(self, issue_id: str) -> IssueDocument: ...

    @abstractmethod
    async def list_issues(self, category: IssueCategory | None = None) -> list[IssueDocument]: ...

    @abstractmethod
    async def update(
        self,
        issue_id: str,
        changes: Mapping[str, Any],
        precondition: Precondition | None = None,
    ) -> None: ...

    @abstractmethod
    async def add_vote(self, issue_id: str, voter_id: str) -> bool:
        """Record one vote per voter; False, with nothing written, if the voter already voted."""

    @abstractmethod
    async def ping(self) -> bool: ...

    async def subscribe_collection(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        category: IssueCategory | None = None,
    ) -> Subscription[list[IssueDocument]]:
        return await Subscription.start(
            self.feed,
            name=f"issues:{category.value if category else 'all'}",
            load=lambda: self.list_issues(category),
            on_snapshot=on_snapshot,
            on_error=on_error,
        )

    async def subscribe_document(
        self,
        issue_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription[IssueDocument]:
        return await Subscription.start(
            self.feed,
            name=f"issue:{issue_id}",
            load=lambda: self.get(issue_id),
            on_snapshot=on_snapshot,
            on_error=on_error,
            is_relevant=lambda changed_id: changed_id == issue_id,
        )

    async def _publish(self, issue_id: str) -> None:
        try:
            await self.feed.publish(issue_id)
        except Exception as e:
            # The write itself has landed; live views catch up on the next change
            logger.error(f"Failed to publish change for issue {issue_id}: {e}")


class SqlIssueStore(IssueStore):
    """IssueStore backed by SQLAlchemy (PostgreSQL in production, SQLite in dev/tests)."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed: ChangeFeed,
        placeholder_image_url: str,
    ):
        super().__init__(feed)
        self._session_factory = session_factory
        self.placeholder_image_url = placeholder_image_url

    @contextmanager
    def _store_errors(self, error_cls: type[IssueError], action: str, issue_id: str | None = None) -> Iterator[None]:
        try:
            yield
        except IssueError:
            raise
        except OSError as e:
            logger.error(f"Store unreachable while trying to {action}: {e}")
            raise StoreUnavailableError("Issue store is unreachable", issue_id) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}: {e}")
            raise error_cls(f"Failed to {action}", issue_id) from e

    async def _lock_issue(self, session: AsyncSession, issue_id: str) -> Issue:
        result = await session.execute(select(Issue).where(Issue.id == issue_id).with_for_update())
        issue = result.scalar_one_or_none()
        if issue is None:
            raise IssueNotFoundError(issue_id)
        return issue

    async def create(self, data: IssueCreate, reported_by: str) -> str:
        issue = Issue(
            category=data.category,
            description=data.description,
            latitude=data.location.latitude,
            longitude=data.location.longitude,
            image_url=data.image_url or self.placeholder_image_url,
            status=IssueStatus.REPORTED,
            votes=0,
            voted_by=[],
            comments=[],
            reported_by=reported_by,
        )
        with self._store_errors(IssueWriteError, "create issue"):
            async with self._session_factory() as session, session.begin():
                session.add(issue)
                await session.flush()
                issue_id = issue.id

        logger.info(f"Issue created [issue_id={issue_id} category={data.category.value}]")
        await self._publish(issue_id)
        return issue_id

    async def get(self, issue_id: str) -> IssueDocument:
        with self._store_errors(IssueReadError, "read issue", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(select(Issue).where(Issue.id == issue_id))
                issue = result.scalar_one_or_none()
                if issue is None:
                    raise IssueNotFoundError(issue_id)
                return IssueDocument.from_model(issue)

    async def list_issues(self, category: IssueCategory | None = None) -> list[IssueDocument]:
        query = select(Issue)
        if category is not None:
            query = query.where(Issue.category == category)
        query = query.order_by(Issue.created_at.desc(), Issue.id)

        with self._store_errors(IssueReadError, "list issues"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [IssueDocument.from_model(issue) for issue in result.scalars().all()]

    async def update(
        self,
        issue_id: str,
        changes: Mapping[str, Any],
        precondition: Precondition | None = None,
    ) -> None:
        validate_changes(changes)

        with self._store_errors(IssueWriteError, "update issue", issue_id):
            async with self._session_factory() as session, session.begin():
                issue = await self._lock_issue(session, issue_id)
                if precondition is not None:
                    precondition(IssueDocument.from_model(issue))
                self._apply_changes(issue, changes, datetime.now(UTC))

        logger.debug(f"Issue updated [issue_id={issue_id} fields={','.join(sorted(changes))}]")
        await self._publish(issue_id)

    def _apply_changes(self, issue: Issue, changes: Mapping[str, Any], now: datetime) -> None:
        for field, value in changes.items():
            if isinstance(value, Increment):
                # Evaluated by the database: votes = votes + n
                setattr(issue, field, getattr(Issue, field) + value.amount)
            elif isinstance(value, ArrayUnion):
                additions = tuple(resolve_server_timestamps(list(value.values), now))
                # Reassign so the JSON column is flagged as changed
                setattr(issue, field, array_union(getattr(issue, field), additions))
            elif field == "location":
                location = value if isinstance(value, GeoPoint) else GeoPoint.model_validate(value)
                issue.latitude = location.latitude
                issue.longitude = location.longitude
            elif field == "status":
                try:
                    issue.status = IssueStatus(value)
                except ValueError as e:
                    raise InvalidStatusError(value) from e
            elif field == "category":
                try:
                    issue.category = IssueCategory(value)
                except ValueError as e:
                    raise InvalidUpdateError(f"Unknown category {value!r}", issue.id) from e
            else:
                setattr(issue, field, resolve_server_timestamps(value, now))

    async def add_vote(self, issue_id: str, voter_id: str) -> bool:
        with self._store_errors(IssueWriteError, "record vote", issue_id):
            try:
                async with self._session_factory() as session, session.begin():
                    issue = await self._lock_issue(session, issue_id)
                    if voter_id in (issue.voted_by or []):
                        return False
                    # The unique (voter_id, issue_id) constraint is the real gate
                    session.add(Vote(issue_id=issue_id, voter_id=voter_id))
                    await session.flush()
                    issue.votes = Issue.votes + 1
                    issue.voted_by = array_union(issue.voted_by, (voter_id,))
            except IntegrityError:
                logger.info(f"Duplicate vote rejected by store [issue_id={issue_id} voter_id={voter_id}]")
                return False

        logger.info(f"Vote recorded [issue_id={issue_id} voter_id={voter_id}]")
        await self._publish(issue_id)
        return True

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Issue store ping failed: {e}")
            return False
