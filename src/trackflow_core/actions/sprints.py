"""Sprint actions: planning and lifecycle transitions (admin only)."""
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..errors import ActionError, NotFoundError, ValidationError
from ..identity import AuthContext, IdentityClient
from ..permissions import require_org_admin, require_session
from ..sprint_state_machine import validate_sprint_transition

logger = logging.getLogger("trackflow-core.actions.sprints")


def create_sprint(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    project_id: UUID,
    data: schemas.SprintCreate,
) -> models.Sprint:
    """
    Plan a new sprint for a project.

    Raises:
        NotFoundError: Unknown project
        ForbiddenError: Caller is not an admin of the project's organization
        ValidationError: End date precedes start date, or the name is taken
    """
    require_session(auth)

    project = crud.get_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found")

    require_org_admin(auth, project.organization_id, identity, "Only organization admins can create sprints")

    if data.end_date < data.start_date:
        raise ValidationError("Sprint end date must not be before its start date")

    try:
        sprint = crud.create_sprint(
            db,
            project_id=project.id,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
        )
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Sprint name '{data.name}' rejected: {e.orig}")
        raise ValidationError("Sprint name already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating sprint: {e}", exc_info=True)
        raise ActionError(f"Error creating sprint: {e}") from e

    logger.info(f"Created sprint '{sprint.name}' (ID: {sprint.id}) in project {project.key}")
    return sprint


def update_sprint_status(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    sprint_id: UUID,
    new_status: models.SprintStatus,
) -> models.Sprint:
    """
    Move a sprint to a new lifecycle status.

    Raises:
        NotFoundError: Unknown sprint
        ForbiddenError: Caller is not an admin of the sprint's organization
        SprintStateTransitionError: Transition not allowed
    """
    require_session(auth)

    sprint = crud.get_sprint(db, sprint_id)
    if not sprint:
        raise NotFoundError("Sprint not found")

    require_org_admin(
        auth, sprint.project.organization_id, identity, "Only organization admins can update sprints"
    )

    validate_sprint_transition(sprint.status, new_status)

    sprint = crud.set_sprint_status(db, sprint, new_status)
    logger.info(f"Sprint {sprint.id} moved to {new_status.value}")
    return sprint
