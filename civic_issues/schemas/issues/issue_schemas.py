# Standard library imports
from datetime import datetime
from typing import Any

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Local application imports
from civic_issues.models.issues.issue import Issue, IssueCategory, IssueStatus


class DocumentModel(BaseModel):
    """Base for models persisted in, or read back from, the issue store.

    Attributes are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class GeoPoint(DocumentModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Comment(DocumentModel):
    id: str
    user_id: str
    text: str
    created_at: datetime | None = None


class IssueCreate(DocumentModel):
    category: IssueCategory
    description: str = Field(..., max_length=5000)
    location: GeoPoint
    image_url: str | None = Field(None, max_length=500)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value


class IssueDocument(DocumentModel):
    id: str
    category: IssueCategory
    description: str
    location: GeoPoint
    image_url: str
    status: IssueStatus = IssueStatus.REPORTED
    votes: int = 0
    voted_by: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    reported_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, issue: Issue) -> "IssueDocument":
        return cls(
            id=issue.id,
            category=issue.category,
            description=issue.description,
            location=GeoPoint(latitude=issue.latitude, longitude=issue.longitude),
            image_url=issue.image_url,
            status=issue.status,
            votes=issue.votes or 0,
            voted_by=list(issue.voted_by or []),
            comments=[Comment.model_validate(comment) for comment in issue.comments or []],
            reported_by=issue.reported_by,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
        )


class IssueDetailResponse(IssueDocument):
    # Newest first; `comments` keeps the stored order
    display_comments: list[Comment] = Field(default_factory=list)


class IssueCreatedResponse(DocumentModel):
    id: str


class CommentCreate(DocumentModel):
    text: str = Field(..., max_length=2000)


class StatusUpdate(DocumentModel):
    status: IssueStatus


class IssueStats(DocumentModel):
    total: int
    by_status: dict[str, int]
    by_category: dict[str, int]
    max_status: int
    max_category: int


class IssueSnapshotMessage(DocumentModel):
    type: str = "snapshot"
    issues: list[IssueDocument]
    stats: IssueStats


class IssueChangeMessage(DocumentModel):
    type: str = "issue"
    issue: IssueDocument


class StreamErrorMessage(DocumentModel):
    type: str = "error"
    code: str
    message: str
    details: Any | None = None
