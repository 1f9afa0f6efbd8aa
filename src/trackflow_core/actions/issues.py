"""Issue actions: sprint boards, creation, drag-and-drop ordering, updates, deletion."""
import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..errors import ActionError, ForbiddenError, NotFoundError, ValidationError
from ..identity import AuthContext, IdentityClient
from ..permissions import require_org_access, require_session

logger = logging.getLogger("trackflow-core.actions.issues")


def get_issues_for_sprint(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    sprint_id: UUID,
) -> list[models.Issue]:
    """
    List a sprint's issues in board order (status, then order).

    Raises:
        UnauthorizedError: No session
        NotFoundError: Unknown sprint
        ForbiddenError: Caller is not a member of the sprint's organization
    """
    require_session(auth)

    sprint = crud.get_sprint(db, sprint_id)
    if not sprint:
        raise NotFoundError("Sprint not found")

    require_org_access(auth, sprint.project.organization_id, identity)

    return crud.get_issues_for_sprint(db, sprint_id)


def create_issue(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    project_id: UUID,
    data: schemas.IssueCreate,
) -> models.Issue:
    """
    Create an issue at the bottom of its status column.

    The new issue's order is one more than the highest order among the
    project's issues with the same status, or 0 for an empty column. The
    read-then-write is not guarded, so concurrent creators in one column can
    receive the same order.

    Returns:
        The created issue with assignee and reporter loaded
    """
    user_id = require_session(auth)

    project = crud.get_project(db, project_id)
    if not project:
        raise NotFoundError("Project not found")

    require_org_access(auth, project.organization_id, identity)

    reporter = crud.get_user_by_clerk_id(db, user_id)
    if not reporter:
        raise NotFoundError("User not found")

    if data.sprint_id is not None:
        sprint = crud.get_sprint(db, data.sprint_id)
        if not sprint:
            raise NotFoundError("Sprint not found")
        if sprint.project_id != project.id:
            raise ValidationError("Sprint does not belong to this project")

    if data.assignee_id is not None and db.get(models.User, data.assignee_id) is None:
        raise NotFoundError("Assignee not found")

    new_order = crud.get_next_issue_order(db, project.id, data.status)

    issue = crud.create_issue(
        db,
        project_id=project.id,
        reporter_id=reporter.id,
        title=data.title,
        description=data.description,
        status=data.status,
        priority=data.priority,
        order=new_order,
        sprint_id=data.sprint_id,
        assignee_id=data.assignee_id,
    )
    logger.info(f"Created issue '{issue.title}' (ID: {issue.id}) in project {project.key}")
    return issue


def update_issue_order(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    updated_issues: list[schemas.IssueOrderUpdate],
) -> dict:
    """
    Persist a drag-and-drop reorder as one all-or-nothing transaction.

    Access is checked against the first issue's project only; the batch is
    assumed to come from a single board.

    Returns:
        ``{"success": True}``
    """
    require_session(auth)

    if updated_issues:
        first_issue = crud.get_issue(db, updated_issues[0].id)
        if not first_issue:
            raise NotFoundError("Issue not found")

        require_org_access(auth, first_issue.project.organization_id, identity)

    crud.apply_issue_order(
        db,
        [(update.id, update.status, update.order) for update in updated_issues],
    )
    logger.info(f"Reordered {len(updated_issues)} issues")
    return {"success": True}


def delete_issue(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    issue_id: UUID,
) -> dict:
    """
    Hard-delete an issue.

    Only the issue's reporter or a project admin may delete it.

    Raises:
        ForbiddenError: Caller lacks org access, or is neither reporter nor project admin
    """
    user_id = require_session(auth)

    user = crud.get_user_by_clerk_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    issue = crud.get_issue(db, issue_id)
    if not issue:
        raise NotFoundError("Issue not found")

    require_org_access(auth, issue.project.organization_id, identity)

    if issue.reporter_id != user.id and not issue.project.is_admin(user.id):
        logger.warning(f"User {user.id} may not delete issue {issue_id}")
        raise ForbiddenError("You don't have permission to delete this issue")

    crud.delete_issue(db, issue)
    logger.info(f"Deleted issue {issue_id}")
    return {"success": True}


def update_issue(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    issue_id: UUID,
    data: schemas.IssueUpdate,
) -> models.Issue:
    """
    Update an issue's status and priority.

    Persistence failures are reported as ``Error updating issue: ...``;
    typed errors keep their kind.

    Returns:
        The updated issue with assignee and reporter loaded
    """
    require_session(auth)

    try:
        issue = crud.get_issue(db, issue_id)
        if not issue:
            raise NotFoundError("Issue not found")

        require_org_access(auth, issue.project.organization_id, identity)

        return crud.update_issue(db, issue, status=data.status, priority=data.priority)
    except ActionError:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating issue {issue_id}: {e}", exc_info=True)
        raise ActionError(f"Error updating issue: {e}") from e


def get_user_issues(
    db: Session,
    auth: AuthContext,
    identity: IdentityClient,
    user_id: str,
    org_id: str,
) -> list[models.Issue]:
    """
    List issues in an organization assigned to or reported by a user.

    Args:
        user_id: Identity-provider id of the user whose issues are listed
        org_id: Identity-provider organization id

    Returns:
        Issues newest first, empty if the user is not mirrored locally
    """
    require_session(auth)
    require_org_access(auth, org_id, identity)

    user = crud.get_user_by_clerk_id(db, user_id)
    if not user:
        return []

    return crud.get_user_issues(db, user.id, org_id)
