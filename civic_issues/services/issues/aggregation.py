"""
Aggregates for the analytics view.

Everything here is a pure function of the snapshot it is given: stats are
recomputed in full on every delivery and no previous state is mutated.
"""

# Standard library imports
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

# Local application imports
from civic_issues.models.issues.issue import IssueCategory, IssueStatus
from civic_issues.schemas.issues.issue_schemas import IssueDocument, IssueStats

IssueLike = IssueDocument | Mapping[str, Any]


def _field(issue: IssueLike, name: str) -> Any:
    if isinstance(issue, Mapping):
        return issue.get(name)
    return getattr(issue, name, None)


def status_of(issue: IssueLike) -> IssueStatus:
    """Missing or unknown statuses count as reported."""
    try:
        return IssueStatus(_field(issue, "status"))
    except ValueError:
        return IssueStatus.REPORTED


def category_of(issue: IssueLike) -> IssueCategory:
    """Missing or unknown categories fall into the 'other' bucket."""
    try:
        return IssueCategory(_field(issue, "category"))
    except ValueError:
        return IssueCategory.OTHER


def aggregate(issues: Iterable[IssueLike]) -> IssueStats:
    by_status = {status.value: 0 for status in IssueStatus}
    by_category = {category.value: 0 for category in IssueCategory}
    total = 0

    for issue in issues:
        total += 1
        by_status[status_of(issue).value] += 1
        by_category[category_of(issue).value] += 1

    return IssueStats(
        total=total,
        by_status=by_status,
        by_category=by_category,
        # Floor of 1 keeps proportional bar widths free of division by zero
        max_status=max(1, *by_status.values()),
        max_category=max(1, *by_category.values()),
    )


@dataclass(frozen=True)
class IssueFeedState:
    """What a live dashboard shows, re-derived from every snapshot."""

    issues: tuple[IssueDocument, ...] = ()
    category_filter: IssueCategory | None = None
    visible: tuple[IssueDocument, ...] = ()
    stats: IssueStats = field(default_factory=lambda: aggregate(()))


def _visible(issues: tuple[IssueDocument, ...], category: IssueCategory | None) -> tuple[IssueDocument, ...]:
    if category is None:
        return issues
    return tuple(issue for issue in issues if category_of(issue) == category)


def apply_snapshot(state: IssueFeedState, snapshot: Iterable[IssueDocument]) -> IssueFeedState:
    issues = tuple(snapshot)
    return replace(
        state,
        issues=issues,
        visible=_visible(issues, state.category_filter),
        stats=aggregate(issues),
    )


def with_category_filter(state: IssueFeedState, category: IssueCategory | None) -> IssueFeedState:
    return replace(state, category_filter=category, visible=_visible(state.issues, category))
