"""CRUD operations for organizations, users, projects, sprints and issues.

These functions only touch the database. Authorization lives in
``trackflow_core.actions``.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from . import models
from .errors import NotFoundError

logger = logging.getLogger("trackflow-core.crud")


# ============================================================================
# User CRUD Operations
# ============================================================================

def get_user_by_clerk_id(db: Session, clerk_user_id: str) -> Optional[models.User]:
    """
    Get a user by identity-provider user id.

    Args:
        db: Database session
        clerk_user_id: Provider user id (from the caller's session)

    Returns:
        User instance or None if not mirrored yet
    """
    return db.query(models.User).filter(models.User.clerk_user_id == clerk_user_id).first()


def get_users_by_clerk_ids(db: Session, clerk_user_ids: list[str]) -> list[models.User]:
    """Get all mirrored users whose provider ids are in ``clerk_user_ids``."""
    if not clerk_user_ids:
        return []
    return (
        db.query(models.User)
        .filter(models.User.clerk_user_id.in_(clerk_user_ids))
        .order_by(models.User.name)
        .all()
    )


def upsert_user(
    db: Session,
    clerk_user_id: str,
    email: str,
    name: Optional[str] = None,
    image_url: Optional[str] = None,
) -> models.User:
    """
    Create or refresh the local mirror of a provider user.

    Args:
        db: Database session
        clerk_user_id: Provider user id
        email: Primary email address
        name: Optional display name
        image_url: Optional avatar URL

    Returns:
        The created or updated user
    """
    db_user = get_user_by_clerk_id(db, clerk_user_id)
    if db_user is None:
        db_user = models.User(clerk_user_id=clerk_user_id, email=email, name=name, image_url=image_url)
        db.add(db_user)
        logger.debug(f"Mirroring new user {clerk_user_id}")
    else:
        db_user.email = email
        db_user.name = name
        db_user.image_url = image_url

    db.commit()
    db.refresh(db_user)
    return db_user


# ============================================================================
# Organization CRUD Operations
# ============================================================================

def get_organization(db: Session, organization_id: str) -> Optional[models.Organization]:
    """Get a mirrored organization by provider id."""
    return db.query(models.Organization).filter(models.Organization.id == organization_id).first()


def upsert_organization(db: Session, organization_id: str, slug: str, name: str) -> models.Organization:
    """
    Create or refresh the local mirror of a provider organization.

    Args:
        db: Database session
        organization_id: Provider organization id
        slug: Organization slug
        name: Organization display name

    Returns:
        The created or updated organization
    """
    db_org = get_organization(db, organization_id)
    if db_org is None:
        db_org = models.Organization(id=organization_id, slug=slug, name=name)
        db.add(db_org)
    else:
        db_org.slug = slug
        db_org.name = name

    db.commit()
    db.refresh(db_org)
    return db_org


# ============================================================================
# Project CRUD Operations
# ============================================================================

def create_project(
    db: Session,
    organization_id: str,
    name: str,
    key: str,
    description: Optional[str] = None,
    admin_ids: Optional[list[str]] = None,
) -> models.Project:
    """
    Create a new project.

    Args:
        db: Database session
        organization_id: Provider organization id that owns the project
        name: Project name
        key: Uppercase project key (unique within the organization)
        description: Optional description
        admin_ids: Internal user ids allowed to administer the project

    Returns:
        Created project instance
    """
    db_project = models.Project(
        organization_id=organization_id,
        name=name,
        key=key,
        description=description,
        admin_ids=admin_ids or [],
    )
    db.add(db_project)
    db.commit()
    db.refresh(db_project)
    logger.debug(f"Created project {db_project.id} ({db_project.key}) in org {organization_id}")
    return db_project


def get_project(db: Session, project_id: UUID, include_sprints: bool = False) -> Optional[models.Project]:
    """
    Get a project by ID.

    Args:
        db: Database session
        project_id: Project UUID
        include_sprints: Eagerly load the project's sprints

    Returns:
        Project instance or None if not found
    """
    query = db.query(models.Project)
    if include_sprints:
        query = query.options(selectinload(models.Project.sprints))
    return query.filter(models.Project.id == project_id).first()


def get_projects(db: Session, organization_id: str) -> list[models.Project]:
    """Get an organization's projects, newest first."""
    return (
        db.query(models.Project)
        .filter(models.Project.organization_id == organization_id)
        .order_by(models.Project.created_at.desc())
        .all()
    )


def delete_project(db: Session, db_project: models.Project) -> None:
    """Delete a project with its sprints and issues (cascading delete)."""
    project_id = db_project.id
    db.delete(db_project)
    db.commit()
    logger.debug(f"Deleted project {project_id}")


# ============================================================================
# Sprint CRUD Operations
# ============================================================================

def get_sprint(db: Session, sprint_id: UUID) -> Optional[models.Sprint]:
    """Get a sprint (with its project loaded) by ID."""
    return (
        db.query(models.Sprint)
        .options(joinedload(models.Sprint.project))
        .filter(models.Sprint.id == sprint_id)
        .first()
    )


def create_sprint(
    db: Session,
    project_id: UUID,
    name: str,
    start_date: datetime,
    end_date: datetime,
) -> models.Sprint:
    """
    Create a new sprint in PLANNED status.

    Args:
        db: Database session
        project_id: Project UUID
        name: Sprint name
        start_date: Sprint start
        end_date: Sprint end

    Returns:
        Created sprint instance
    """
    db_sprint = models.Sprint(
        project_id=project_id,
        name=name,
        start_date=start_date,
        end_date=end_date,
        status=models.SprintStatus.PLANNED,
    )
    db.add(db_sprint)
    db.commit()
    db.refresh(db_sprint)
    logger.debug(f"Created sprint {db_sprint.id} ({db_sprint.name}) in project {project_id}")
    return db_sprint


def set_sprint_status(db: Session, db_sprint: models.Sprint, status: models.SprintStatus) -> models.Sprint:
    """Persist a new sprint status."""
    db_sprint.status = status
    db.commit()
    db.refresh(db_sprint)
    logger.debug(f"Sprint {db_sprint.id} is now {status.value}")
    return db_sprint


# ============================================================================
# Issue CRUD Operations
# ============================================================================

def _issue_query(db: Session):
    return db.query(models.Issue).options(
        joinedload(models.Issue.assignee),
        joinedload(models.Issue.reporter),
    )


def get_issue(db: Session, issue_id: UUID) -> Optional[models.Issue]:
    """Get an issue (with its project loaded) by ID."""
    return (
        db.query(models.Issue)
        .options(joinedload(models.Issue.project))
        .filter(models.Issue.id == issue_id)
        .first()
    )


def get_issue_with_people(db: Session, issue_id: UUID) -> Optional[models.Issue]:
    """Get an issue with assignee and reporter loaded."""
    return _issue_query(db).filter(models.Issue.id == issue_id).first()


def get_issues_for_sprint(db: Session, sprint_id: UUID) -> list[models.Issue]:
    """
    Get a sprint's issues in board order.

    Args:
        db: Database session
        sprint_id: Sprint UUID

    Returns:
        Issues ordered by status, then order, with assignee and reporter loaded
    """
    return (
        _issue_query(db)
        .filter(models.Issue.sprint_id == sprint_id)
        .order_by(models.Issue.status.asc(), models.Issue.order.asc())
        .all()
    )


def get_next_issue_order(db: Session, project_id: UUID, status: models.IssueStatus) -> int:
    """
    Compute the order for an issue appended to a status column.

    Returns:
        One plus the highest order in the (project, status) column, or 0 if empty
    """
    last_issue = (
        db.query(models.Issue)
        .filter(models.Issue.project_id == project_id, models.Issue.status == status)
        .order_by(models.Issue.order.desc())
        .first()
    )
    return last_issue.order + 1 if last_issue else 0


def create_issue(
    db: Session,
    project_id: UUID,
    reporter_id: UUID,
    title: str,
    status: models.IssueStatus,
    priority: models.IssuePriority,
    order: int,
    description: Optional[str] = None,
    sprint_id: Optional[UUID] = None,
    assignee_id: Optional[UUID] = None,
) -> models.Issue:
    """
    Create a new issue.

    Args:
        db: Database session
        project_id: Project UUID
        reporter_id: Internal id of the reporting user
        title: Issue title
        status: Initial status column
        priority: Issue priority
        order: Rank within the status column
        description: Optional description
        sprint_id: Optional sprint UUID (None puts the issue in the backlog)
        assignee_id: Optional internal id of the assignee

    Returns:
        Created issue with assignee and reporter loaded
    """
    db_issue = models.Issue(
        project_id=project_id,
        reporter_id=reporter_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        order=order,
        sprint_id=sprint_id,
        assignee_id=assignee_id,
    )
    db.add(db_issue)
    db.commit()
    logger.debug(f"Created issue {db_issue.id} in project {project_id} ({status.value} #{order})")
    return get_issue_with_people(db, db_issue.id)


def apply_issue_order(db: Session, updates: list[tuple[UUID, models.IssueStatus, int]]) -> None:
    """
    Apply (id, status, order) updates in a single transaction.

    Either every update is committed or none is.

    Raises:
        NotFoundError: If any issue does not exist (the transaction is rolled back)
    """
    try:
        for issue_id, status, order in updates:
            db_issue = db.get(models.Issue, issue_id)
            if db_issue is None:
                raise NotFoundError(f"Issue {issue_id} not found")
            db_issue.status = status
            db_issue.order = order
            db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.debug(f"Reordered {len(updates)} issues")


def update_issue(
    db: Session,
    db_issue: models.Issue,
    status: Optional[models.IssueStatus] = None,
    priority: Optional[models.IssuePriority] = None,
) -> models.Issue:
    """
    Update an issue's status and priority.

    Returns:
        Updated issue with assignee and reporter loaded
    """
    if status is not None:
        db_issue.status = status
    if priority is not None:
        db_issue.priority = priority

    db.commit()
    logger.debug(f"Updated issue {db_issue.id}")
    return get_issue_with_people(db, db_issue.id)


def delete_issue(db: Session, db_issue: models.Issue) -> None:
    """Hard-delete an issue."""
    issue_id = db_issue.id
    db.delete(db_issue)
    db.commit()
    logger.debug(f"Deleted issue {issue_id}")


def get_user_issues(db: Session, user_id: UUID, organization_id: str) -> list[models.Issue]:
    """
    Get issues in an organization assigned to or reported by a user.

    Args:
        db: Database session
        user_id: Internal user id
        organization_id: Provider organization id

    Returns:
        Issues newest first, with project, assignee and reporter loaded
    """
    return (
        _issue_query(db)
        .options(joinedload(models.Issue.project))
        .join(models.Project, models.Issue.project_id == models.Project.id)
        .filter(
            models.Project.organization_id == organization_id,
            or_(
                models.Issue.assignee_id == user_id,
                models.Issue.reporter_id == user_id,
            ),
        )
        .order_by(models.Issue.updated_at.desc())
        .all()
    )
