# Third-party imports
from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

# Local application imports
from civic_issues.models.base import Base
from civic_issues.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class Vote(Base, UUIDTimeStampMixin):
    __tablename__ = "issue_votes"
    __table_args__ = (UniqueConstraint("voter_id", "issue_id", name="unique_voter_issue"),)

    # One row per voter and issue; the unique constraint is what makes a vote count once
    voter_id = Column(String(64), nullable=False, index=True)
    issue_id = Column(String(36), ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
