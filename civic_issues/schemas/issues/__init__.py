from .issue_schemas import (
    Comment,
    CommentCreate,
    GeoPoint,
    IssueChangeMessage,
    IssueCreate,
    IssueCreatedResponse,
    IssueDetailResponse,
    IssueDocument,
    IssueSnapshotMessage,
    IssueStats,
    StatusUpdate,
    StreamErrorMessage,
)
from .vote_schemas import VoteOutcome, VoteResponse
from .weather_schemas import WeatherReport

__all__ = [
    "Comment",
    "CommentCreate",
    "GeoPoint",
    "IssueChangeMessage",
    "IssueCreate",
    "IssueCreatedResponse",
    "IssueDetailResponse",
    "IssueDocument",
    "IssueSnapshotMessage",
    "IssueStats",
    "StatusUpdate",
    "StreamErrorMessage",
    "VoteOutcome",
    "VoteResponse",
    "WeatherReport",
]
