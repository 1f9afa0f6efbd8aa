"""Users API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ... import schemas
from ...actions import organizations as organization_actions
from ...database import get_db
from ...identity import AuthContext, IdentityClient
from ..dependencies import get_auth_context, get_identity_client

router = APIRouter(tags=["users"])


@router.post("/sync", response_model=schemas.UserResponse)
def sync_current_user(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Create or refresh the caller's local user record from the identity provider.

    Called once after sign-in so the caller can report and be assigned issues.
    """
    return organization_actions.sync_user(db, auth, identity)
