# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civic_issues.dependancies.common import get_current_user_id, get_issue_store, get_lifecycle_controller
from civic_issues.schemas.issues.vote_schemas import VoteResponse
from civic_issues.services.issues.lifecycle import IssueLifecycleController
from civic_issues.services.issues.store import IssueStore

router = APIRouter(prefix="/issues", tags=["Votes"])


@router.post("/{issue_id}/votes", response_model=VoteResponse)
async def upvote_issue(
    issue_id: str,
    current_user_id: str = Depends(get_current_user_id),
    store: IssueStore = Depends(get_issue_store),
    controller: IssueLifecycleController = Depends(get_lifecycle_controller),
):
    """Upvote an issue, at most once per voter"""
    issue = await store.get(issue_id)
    outcome = await controller.upvote(issue, current_user_id)
    return VoteResponse(issue_id=issue_id, outcome=outcome)
