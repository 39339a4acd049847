"""
Database models package.

This package contains all SQLAlchemy models for the application.
"""

# Local application imports
from civic_issues.models.base import Base
from civic_issues.models.issues import Issue, Vote

__all__ = [
    "Base",
    "Issue",
    "Vote",
]
