"""Organizations API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import schemas
from ...actions import issues as issue_actions
from ...actions import organizations as organization_actions
from ...database import get_db
from ...identity import AuthContext, IdentityClient
from ..dependencies import get_auth_context, get_identity_client

router = APIRouter(tags=["organizations"])


@router.get("/{slug}", response_model=schemas.OrganizationResponse)
def get_organization(
    slug: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Get an organization by slug.

    Returns 404 both for unknown organizations and for organizations the
    caller is not a member of.
    """
    organization = organization_actions.get_organization(db, auth, identity, slug)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")

    return organization


@router.get("/{org_id}/users", response_model=list[schemas.UserResponse])
def list_organization_users(
    org_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    List the organization's members that have a local user record.
    """
    return organization_actions.get_organization_users(db, auth, identity, org_id)


@router.get("/{org_id}/issues", response_model=list[schemas.UserIssueResponse])
def list_user_issues(
    org_id: str,
    user_id: Optional[str] = Query(None, description="Identity-provider user id (defaults to the caller)"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    List issues in the organization assigned to or reported by a user.

    - **user_id**: Whose issues to list (defaults to the caller)
    """
    return issue_actions.get_user_issues(db, auth, identity, user_id or auth.user_id, org_id)
