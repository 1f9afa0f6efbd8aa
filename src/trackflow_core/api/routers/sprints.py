"""Sprints API endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ... import schemas
from ...actions import issues as issue_actions
from ...actions import sprints as sprint_actions
from ...database import get_db
from ...identity import AuthContext, IdentityClient
from ..dependencies import get_auth_context, get_identity_client

router = APIRouter(tags=["sprints"])


@router.patch("/{sprint_id}/status", response_model=schemas.SprintResponse)
def update_sprint_status(
    sprint_id: UUID,
    status_update: schemas.SprintStatusUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Move a sprint through PLANNED -> ACTIVE -> COMPLETED (organization admins only).
    """
    return sprint_actions.update_sprint_status(db, auth, identity, sprint_id, status_update.status)


@router.get("/{sprint_id}/issues", response_model=list[schemas.IssueResponse])
def list_sprint_issues(
    sprint_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    List a sprint's issues in board order (status, then order).
    """
    return issue_actions.get_issues_for_sprint(db, auth, identity, sprint_id)
