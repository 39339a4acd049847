# Local application imports
from civic_issues.services.issues.aggregation import IssueFeedState, aggregate, apply_snapshot, with_category_filter
from civic_issues.services.issues.lifecycle import IssueLifecycleController, TransitionPolicy, display_comments
from civic_issues.services.issues.store import IssueStore, SqlIssueStore
from civic_issues.services.issues.subscriptions import Subscription

__all__ = [
    "IssueFeedState",
    "IssueLifecycleController",
    "IssueStore",
    "SqlIssueStore",
    "Subscription",
    "TransitionPolicy",
    "aggregate",
    "apply_snapshot",
    "display_comments",
    "with_category_filter",
]
