"""Pydantic schemas for request/response validation."""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .models import IssuePriority, IssueStatus, SprintStatus


# ============================================================================
# User & Organization Schemas
# ============================================================================

class UserResponse(BaseModel):
    """Schema for user responses."""

    id: UUID
    clerk_user_id: str
    email: str
    name: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OrganizationResponse(BaseModel):
    """Schema for organization responses."""

    id: str
    slug: str
    name: str

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Project Schemas
# ============================================================================

class ProjectCreate(BaseModel):
    """Schema for creating a new project.

    ``org_id`` is only used when the caller's session has no active
    organization.
    """

    name: str = Field(..., min_length=1, max_length=255)
    key: str = Field(..., min_length=2, max_length=10, pattern=r"^[A-Z][A-Z0-9]{1,9}$")
    description: Optional[str] = None
    org_id: Optional[str] = None


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    id: UUID
    name: str
    key: str
    description: Optional[str] = None
    organization_id: str
    admin_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectSummary(BaseModel):
    """Compact project reference embedded in issue responses."""

    id: UUID
    name: str
    key: str

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Sprint Schemas
# ============================================================================

class SprintCreate(BaseModel):
    """Schema for creating a new sprint.

    Dates are stored naive in UTC; offset-aware input is converted.
    """

    name: str = Field(..., min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class SprintStatusUpdate(BaseModel):
    """Schema for moving a sprint through its lifecycle."""

    status: SprintStatus


class SprintResponse(BaseModel):
    """Schema for sprint responses."""

    id: UUID
    name: str
    start_date: datetime
    end_date: datetime
    status: SprintStatus
    project_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ProjectWithSprintsResponse(ProjectResponse):
    """Project with its sprints, newest first."""

    sprints: list[SprintResponse] = Field(default_factory=list)


# ============================================================================
# Issue Schemas
# ============================================================================

class IssueCreate(BaseModel):
    """Schema for creating a new issue."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: IssueStatus = IssueStatus.TODO
    priority: IssuePriority = IssuePriority.MEDIUM
    sprint_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None


class IssueUpdate(BaseModel):
    """Schema for updating an issue (status and priority only)."""

    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None


class IssueOrderUpdate(BaseModel):
    """One entry of a drag-and-drop reorder batch."""

    id: UUID
    status: IssueStatus
    order: int = Field(..., ge=0)


class IssueResponse(BaseModel):
    """Schema for issue responses."""

    id: UUID
    title: str
    description: Optional[str] = None
    status: IssueStatus
    order: int
    priority: IssuePriority
    project_id: UUID
    sprint_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None
    reporter_id: UUID
    assignee: Optional[UserResponse] = None
    reporter: UserResponse
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class UserIssueResponse(IssueResponse):
    """Issue with its project, for a user's cross-project issue list."""

    project: ProjectSummary


class SuccessResponse(BaseModel):
    """Acknowledgement returned by delete and reorder actions."""

    success: bool = True
