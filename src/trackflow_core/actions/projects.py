"""Project actions: creation, listing, lookup and deletion."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..errors import ActionError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from ..identity import ADMIN_ROLE, AuthContext, IdentityClient
from ..permissions import find_membership, is_org_admin, require_org_access, require_session

logger = logging.getLogger("trackflow-core.actions.projects")


def create_project(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    data: schemas.ProjectCreate,
) -> models.Project:
    """
    Create a project in the caller's organization.

    The organization is the session's active one, falling back to
    ``data.org_id`` when the session has none. The caller's role in that
    organization is always read from the membership list and must be
    exactly ``org:admin``.

    Raises:
        UnauthorizedError: No session
        ValidationError: No organization selected
        ForbiddenError: Caller is not an organization admin
    """
    org_id = auth.org_id or data.org_id

    user_id = require_session(auth)

    if not org_id:
        raise ValidationError("No Organization Selected")

    membership = find_membership(auth, org_id, identity)
    if not is_org_admin(membership):
        logger.warning(f"User {user_id} tried to create a project in {org_id} without admin role")
        raise ForbiddenError("Only organization admins can create projects")

    creator = crud.get_user_by_clerk_id(db, user_id)
    admin_ids = [str(creator.id)] if creator else []

    try:
        project = crud.create_project(
            db,
            organization_id=org_id,
            name=data.name,
            key=data.key,
            description=data.description,
            admin_ids=admin_ids,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating project: {e}", exc_info=True)
        raise ActionError(f"Error creating project: {e}") from e

    logger.info(f"Created project '{project.name}' ({project.key}) (ID: {project.id})")
    return project


def get_projects(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    org_id: str,
) -> list[models.Project]:
    """
    List an organization's projects, newest first.

    Raises:
        UnauthorizedError: No session
        NotFoundError: Caller is not mirrored locally
        ForbiddenError: Caller is not a member of the organization
    """
    user_id = require_session(auth)

    user = crud.get_user_by_clerk_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    require_org_access(auth, org_id, identity)

    return crud.get_projects(db, org_id)


def delete_project(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    project_id: UUID,
    org_id_from_client: Optional[str] = None,
) -> dict:
    """
    Delete a project with its sprints and issues.

    Admin status comes from the session role; when the organization was
    supplied by the client instead of the session, the membership list is
    consulted.

    Returns:
        ``{"success": True}``
    """
    org_id = auth.org_id or org_id_from_client

    if not auth.is_authenticated or not org_id:
        raise UnauthorizedError("Unauthorized")

    is_admin = auth.org_role == ADMIN_ROLE

    if not is_admin and auth.org_id != org_id:
        is_admin = is_org_admin(find_membership(auth, org_id, identity))

    if not is_admin:
        logger.warning(f"User {auth.user_id} tried to delete project {project_id} without admin role")
        raise ForbiddenError("Only organization admins can delete projects")

    project = crud.get_project(db, project_id)
    if not project or project.organization_id != org_id:
        raise NotFoundError("Project not found or you don't have permission to delete it")

    crud.delete_project(db, project)
    logger.info(f"Deleted project {project_id} from organization {org_id}")
    return {"success": True}


def get_project(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    project_id: UUID,
) -> Optional[models.Project]:
    """
    Get a project with its sprints (newest first).

    Returns:
        The project, or None if it does not exist

    Raises:
        ForbiddenError: Caller is not a member of the project's organization
    """
    user_id = require_session(auth)

    user = crud.get_user_by_clerk_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    project = crud.get_project(db, project_id, include_sprints=True)
    if not project:
        return None

    require_org_access(auth, project.organization_id, identity)

    return project
