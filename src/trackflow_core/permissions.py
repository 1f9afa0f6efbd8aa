"""Organization-membership authorization checks shared by all actions.

Access rule: a caller whose active session organization matches the
resource's organization is granted access without contacting the identity
provider. Otherwise the organization's membership list is fetched and the
caller must appear in it.
"""
import logging
from typing import Optional

from .errors import ForbiddenError, UnauthorizedError
from .identity import ADMIN_ROLE, AuthContext, IdentityClient, OrganizationMembership

logger = logging.getLogger("trackflow-core.permissions")

ACCESS_DENIED_MESSAGE = "You do not have access to this project"


def require_session(auth: AuthContext) -> str:
    """
    Ensure the caller has an authenticated session.

    Returns:
        The caller's identity-provider user id

    Raises:
        UnauthorizedError: If there is no session
    """
    if not auth.is_authenticated:
        raise UnauthorizedError("Unauthorized")
    return auth.user_id


def find_membership(
    auth: AuthContext,
    organization_id: str,
    identity: IdentityClient,
) -> Optional[OrganizationMembership]:
    """Look up the caller in an organization's membership list (one provider round trip)."""
    membership_list = identity.get_organization_membership_list(organization_id)
    for membership in membership_list:
        if membership.user_id == auth.user_id:
            return membership
    return None


def is_org_admin(membership: Optional[OrganizationMembership]) -> bool:
    """Check for the organization admin role (exact string match)."""
    return membership is not None and membership.role == ADMIN_ROLE


def require_org_access(
    auth: AuthContext,
    organization_id: str,
    identity: IdentityClient,
) -> None:
    """
    Ensure the caller may access resources owned by an organization.

    Args:
        auth: Caller session
        organization_id: Organization owning the resource
        identity: Identity provider client used for the membership fallback

    Raises:
        ForbiddenError: If the caller is not a member of the organization
    """
    if organization_id == auth.org_id:
        return

    logger.debug(f"Session org {auth.org_id} != resource org {organization_id}, checking membership")
    if find_membership(auth, organization_id, identity) is None:
        logger.warning(f"User {auth.user_id} denied access to organization {organization_id}")
        raise ForbiddenError(ACCESS_DENIED_MESSAGE)


def require_org_admin(
    auth: AuthContext,
    organization_id: str,
    identity: IdentityClient,
    message: str,
) -> None:
    """
    Ensure the caller is an admin of an organization.

    The session role is trusted when the session's active organization is
    ``organization_id``; otherwise the membership list decides.

    Raises:
        ForbiddenError: With ``message`` if the caller is not an admin
    """
    if organization_id == auth.org_id and auth.org_role == ADMIN_ROLE:
        return

    if organization_id != auth.org_id and is_org_admin(find_membership(auth, organization_id, identity)):
        return

    logger.warning(f"User {auth.user_id} is not an admin of organization {organization_id}")
    raise ForbiddenError(message)
