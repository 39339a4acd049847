# Local application imports
from civic_issues.models.issues.issue import Issue, IssueCategory, IssueStatus
from civic_issues.models.issues.vote import Vote

__all__ = ["Issue", "IssueCategory", "IssueStatus", "Vote"]
