# Third-party imports
from fastapi import APIRouter, Depends, HTTPException, Response, status

# Local application imports
from civic_issues.dependancies.common import get_current_user_id, get_issue_store, get_lifecycle_controller
from civic_issues.models.issues.issue import IssueCategory
from civic_issues.schemas.issues.issue_schemas import (
    Comment,
    CommentCreate,
    IssueCreate,
    IssueCreatedResponse,
    IssueDetailResponse,
    IssueDocument,
    StatusUpdate,
)
from civic_issues.services.issues.lifecycle import IssueLifecycleController, display_comments
from civic_issues.services.issues.store import IssueStore

router = APIRouter(prefix="/issues", tags=["Issues"])


@router.post("", response_model=IssueCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_data: IssueCreate,
    current_user_id: str = Depends(get_current_user_id),
    store: IssueStore = Depends(get_issue_store),
):
    """Report a new issue"""
    issue_id = await store.create(issue_data, reported_by=current_user_id)
    return IssueCreatedResponse(id=issue_id)


@router.get("", response_model=list[IssueDocument])
async def list_issues(
    category: IssueCategory | None = None,
    store: IssueStore = Depends(get_issue_store),
):
    """Current snapshot of all issues, optionally for one category"""
    return await store.list_issues(category)


@router.get("/{issue_id}", response_model=IssueDetailResponse)
async def get_issue(issue_id: str, store: IssueStore = Depends(get_issue_store)):
    """Get issue details, comments newest first in displayComments"""
    issue = await store.get(issue_id)
    return IssueDetailResponse(**issue.model_dump(), display_comments=display_comments(issue))


@router.post("/{issue_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    issue_id: str,
    comment_data: CommentCreate,
    current_user_id: str = Depends(get_current_user_id),
    controller: IssueLifecycleController = Depends(get_lifecycle_controller),
):
    """Append a comment to an issue"""
    comment = await controller.add_comment(issue_id, current_user_id, comment_data.text)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment text is required")
    return comment


@router.patch("/{issue_id}/status", status_code=status.HTTP_204_NO_CONTENT)
async def update_status(
    issue_id: str,
    status_data: StatusUpdate,
    current_user_id: str = Depends(get_current_user_id),
    controller: IssueLifecycleController = Depends(get_lifecycle_controller),
):
    """Move an issue to another status"""
    await controller.set_status(issue_id, status_data.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
