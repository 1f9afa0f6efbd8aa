"""Projects API endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import schemas
from ...actions import issues as issue_actions
from ...actions import projects as project_actions
from ...actions import sprints as sprint_actions
from ...database import get_db
from ...identity import AuthContext, IdentityClient
from ..dependencies import get_auth_context, get_identity_client

router = APIRouter(tags=["projects"])


@router.post("/", response_model=schemas.ProjectResponse, status_code=201)
def create_project(
    project: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Create a new project (organization admins only).

    - **name**: Project name
    - **key**: 2-10 uppercase alphanumeric characters, starting with a letter (e.g., "WEB")
    - **description**: Optional description
    - **org_id**: Organization to use when the session has no active organization
    """
    return project_actions.create_project(db, auth, identity, project)


@router.get("/", response_model=list[schemas.ProjectResponse])
def list_projects(
    org_id: str = Query(..., description="Organization whose projects to list"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    List an organization's projects, newest first.
    """
    return project_actions.get_projects(db, auth, identity, org_id)


@router.get("/{project_id}", response_model=schemas.ProjectWithSprintsResponse)
def get_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Get a project with its sprints (newest first).
    """
    project = project_actions.get_project(db, auth, identity, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    return project


@router.delete("/{project_id}", response_model=schemas.SuccessResponse)
def delete_project(
    project_id: UUID,
    org_id: Optional[str] = Query(None, description="Organization to use when the session has no active organization"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Delete a project with all its sprints and issues (organization admins only).

    Use with caution!
    """
    return project_actions.delete_project(db, auth, identity, project_id, org_id)


# Project Sprint & Issue endpoints

@router.post("/{project_id}/sprints", response_model=schemas.SprintResponse, status_code=201)
def create_sprint(
    project_id: UUID,
    sprint: schemas.SprintCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Plan a new sprint (organization admins only).

    - **name**: Sprint name (unique)
    - **start_date** / **end_date**: Sprint time box
    """
    return sprint_actions.create_sprint(db, auth, identity, project_id, sprint)


@router.post("/{project_id}/issues", response_model=schemas.IssueResponse, status_code=201)
def create_issue(
    project_id: UUID,
    issue: schemas.IssueCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Create an issue at the bottom of its status column.

    - **title**: Issue title
    - **status**: Kanban column (default: TODO)
    - **priority**: LOW, MEDIUM, HIGH or URGENT (default: MEDIUM)
    - **sprint_id**: Optional sprint of this project
    - **assignee_id**: Optional assignee (internal user id)
    """
    return issue_actions.create_issue(db, auth, identity, project_id, issue)
