"""Issues API endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ... import schemas
from ...actions import issues as issue_actions
from ...database import get_db
from ...identity import AuthContext, IdentityClient
from ..dependencies import get_auth_context, get_identity_client

router = APIRouter(tags=["issues"])


@router.put("/order", response_model=schemas.SuccessResponse)
def update_issue_order(
    updated_issues: list[schemas.IssueOrderUpdate],
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Persist a drag-and-drop reorder.

    All updates are applied in one transaction: either every issue moves or none does.
    """
    return issue_actions.update_issue_order(db, auth, identity, updated_issues)


@router.patch("/{issue_id}", response_model=schemas.IssueResponse)
def update_issue(
    issue_id: UUID,
    issue_update: schemas.IssueUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Update an issue's status and/or priority.
    """
    return issue_actions.update_issue(db, auth, identity, issue_id, issue_update)


@router.delete("/{issue_id}", response_model=schemas.SuccessResponse)
def delete_issue(
    issue_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Delete an issue (reporter or project admin only).
    """
    return issue_actions.delete_issue(db, auth, identity, issue_id)
