# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civic_issues.dependancies.common import get_issue_store
from civic_issues.schemas.issues.issue_schemas import IssueStats
from civic_issues.services.issues.aggregation import aggregate
from civic_issues.services.issues.store import IssueStore

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/stats", response_model=IssueStats)
async def get_issue_stats(store: IssueStore = Depends(get_issue_store)):
    """Counts by status and by category over the current snapshot"""
    return aggregate(await store.list_issues())
