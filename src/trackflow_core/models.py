"""SQLAlchemy database models."""
from datetime import datetime
from uuid import uuid4
import enum

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    Enum,
    Index,
    JSON,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all models
Base = declarative_base()


class SprintStatus(str, enum.Enum):
    """Sprint lifecycle status enum.

    Lifecycle: PLANNED -> ACTIVE -> COMPLETED
    """

    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class IssueStatus(str, enum.Enum):
    """Kanban column an issue sits in.

    Any status may follow any status; columns are not a workflow.
    """

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"


class IssuePriority(str, enum.Enum):
    """Issue priority enum."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Organization(Base):
    """
    Local mirror of an identity-provider organization.

    The primary key is the provider's organization id, so projects can be
    scoped by the same value that appears in a caller's session.
    """

    __tablename__ = "organizations"

    id = Column(String(255), primary_key=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Organization {self.slug}: {self.name}>"


class User(Base):
    """
    User model mirroring an identity-provider account.

    No passwords stored locally. ``clerk_user_id`` links the row to the
    provider's user id found in the caller's session.
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    clerk_user_id = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255))
    image_url = Column(Text)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reported_issues = relationship("Issue", back_populates="reporter", foreign_keys="Issue.reporter_id")
    assigned_issues = relationship("Issue", back_populates="assignee", foreign_keys="Issue.assignee_id")

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.clerk_user_id})>"


class Project(Base):
    """
    Project model scoped to one organization.

    ``organization_id`` is the identity provider's organization id and is
    never changed after creation. ``admin_ids`` lists internal user ids that
    may delete any issue in the project.
    """

    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    key = Column(String(10), nullable=False)
    description = Column(Text)
    organization_id = Column(String(255), nullable=False, index=True)
    admin_ids = Column(JSON, nullable=False, default=list)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sprints = relationship("Sprint", back_populates="project", cascade="all, delete-orphan", order_by="Sprint.created_at.desc()")
    issues = relationship("Issue", back_populates="project", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        UniqueConstraint("organization_id", "key", name="unique_org_project_key"),
    )

    def is_admin(self, user_id) -> bool:
        """Check whether an internal user id is listed as project admin."""
        return str(user_id) in {str(admin_id) for admin_id in (self.admin_ids or [])}

    def __repr__(self) -> str:
        return f"<Project {self.key}: {self.name}>"


class Sprint(Base):
    """Sprint model - a time box of issues within a project."""

    __tablename__ = "sprints"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False, unique=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(
        Enum(SprintStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=SprintStatus.PLANNED,
        index=True
    )
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="sprints")
    issues = relationship("Issue", back_populates="sprint", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Sprint {self.name} ({self.status.value})>"


class Issue(Base):
    """
    Issue model - a card on the project's kanban board.

    ``order`` ranks the issue within its (project, status) column.
    ``sprint_id`` is optional; issues without a sprint are in the backlog.
    """

    __tablename__ = "issues"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    status = Column(
        Enum(IssueStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=IssueStatus.TODO,
    )
    order = Column(Integer, nullable=False, default=0)
    priority = Column(
        Enum(IssuePriority, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=IssuePriority.MEDIUM,
    )

    assignee_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), index=True)
    reporter_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    sprint_id = Column(Uuid(as_uuid=True), ForeignKey("sprints.id", ondelete="SET NULL"), index=True)

    # Audit fields
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    assignee = relationship("User", back_populates="assigned_issues", foreign_keys=[assignee_id])
    reporter = relationship("User", back_populates="reported_issues", foreign_keys=[reporter_id])
    project = relationship("Project", back_populates="issues")
    sprint = relationship("Sprint", back_populates="issues")

    __table_args__ = (
        Index("idx_issues_project_status_order", "project_id", "status", "order"),
    )

    def __repr__(self) -> str:
        return f"<Issue {self.title} ({self.status.value} #{self.order})>"
