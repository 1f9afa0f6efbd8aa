"""FastAPI dependencies: caller session and identity provider client."""
from functools import lru_cache
from typing import Optional

from fastapi import Header

from ..identity import AuthContext, IdentityClient


def get_auth_context(
    x_user_id: Optional[str] = Header(
        None, alias="X-User-Id", description="Identity-provider user id of the signed-in caller"
    ),
    x_org_id: Optional[str] = Header(
        None, alias="X-Org-Id", description="Organization currently active in the caller's session"
    ),
    x_org_role: Optional[str] = Header(
        None, alias="X-Org-Role", description="Caller's role in the active organization (e.g. org:admin)"
    ),
) -> AuthContext:
    """
    Build the caller's session from headers forwarded by the frontend.

    A missing ``X-User-Id`` yields an unauthenticated context; actions
    reject it before touching the database.
    """
    return AuthContext(user_id=x_user_id or None, org_id=x_org_id or None, org_role=x_org_role or None)


@lru_cache
def get_identity_client() -> IdentityClient:
    """Shared identity provider client (one connection pool per process)."""
    return IdentityClient.from_settings()
