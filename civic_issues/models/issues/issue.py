# Standard library imports
import enum

# Third-party imports
from sqlalchemy import JSON, Column, Enum as SQLEnum, Float, Integer, String, Text

# Local application imports
from civic_issues.models.base import Base
from civic_issues.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class IssueStatus(str, enum.Enum):
    REPORTED = "reported"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class IssueCategory(str, enum.Enum):
    POTHOLE = "pothole"
    GARBAGE_DUMP = "garbage-dump"
    BROKEN_STREETLIGHT = "broken-streetlight"
    WATER_LEAKAGE = "water-leakage"
    DRAINAGE_FAILURE = "drainage-failure"
    ILLEGAL_CONSTRUCTION = "illegal-construction"
    OTHER = "other"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Issue(Base, UUIDTimeStampMixin):
    __tablename__ = "issues"

    # Issue details
    category = Column(
        SQLEnum(IssueCategory, values_callable=_enum_values, native_enum=False, length=32),
        nullable=False,
        index=True,
    )
    description = Column(Text, nullable=False)
    status = Column(
        SQLEnum(IssueStatus, values_callable=_enum_values, native_enum=False, length=32),
        nullable=False,
        default=IssueStatus.REPORTED,
        index=True,
    )

    # Location information
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    # Media
    image_url = Column(String(500), nullable=False)

    # Reporter and engagement
    reported_by = Column(String(64), nullable=False, index=True)
    votes = Column(Integer, nullable=False, default=0)
    voted_by = Column(JSON, nullable=False, default=list)  # mirror of issue_votes, in vote order
    comments = Column(JSON, nullable=False, default=list)  # append-only list of comment dicts
