"""Organization and user-mirror actions."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..errors import ForbiddenError, NotFoundError
from ..identity import AuthContext, IdentityClient
from ..permissions import ACCESS_DENIED_MESSAGE, find_membership, require_session

logger = logging.getLogger("trackflow-core.actions.organizations")


def get_organization(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    slug: str,
) -> Optional[models.Organization]:
    """
    Resolve an organization by slug for a member.

    Returns:
        The local organization mirror, or None if the organization does not
        exist or the caller is not one of its members
    """
    require_session(auth)

    provider_org = identity.get_organization(slug)
    if provider_org is None:
        return None

    if provider_org.id != auth.org_id and find_membership(auth, provider_org.id, identity) is None:
        logger.info(f"User {auth.user_id} is not a member of organization {provider_org.slug}")
        return None

    return crud.upsert_organization(db, provider_org.id, provider_org.slug, provider_org.name)


def get_organization_users(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    org_id: str,
) -> list[models.User]:
    """
    List the locally mirrored users who belong to an organization (e.g. for assignee pickers).

    The membership list is fetched once and serves both the access check and
    the listing.

    Raises:
        ForbiddenError: Caller is not a member of the organization
    """
    require_session(auth)

    memberships = identity.get_organization_membership_list(org_id)
    member_ids = [m.user_id for m in memberships]
    if org_id != auth.org_id and auth.user_id not in member_ids:
        logger.warning(f"User {auth.user_id} denied access to organization {org_id}")
        raise ForbiddenError(ACCESS_DENIED_MESSAGE)

    return crud.get_users_by_clerk_ids(db, member_ids)


def sync_user(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
) -> models.User:
    """
    Mirror the caller's identity-provider account into the users table.

    Raises:
        NotFoundError: The provider does not know the session's user
    """
    user_id = require_session(auth)

    provider_user = identity.get_user(user_id)
    if provider_user is None:
        raise NotFoundError("User not found")

    user = crud.upsert_user(
        db,
        clerk_user_id=provider_user.id,
        email=provider_user.email,
        name=provider_user.name,
        image_url=provider_user.image_url,
    )
    logger.info(f"Synced user {user.clerk_user_id} (ID: {user.id})")
    return user
