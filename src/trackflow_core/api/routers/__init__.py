"""API routers for Trackflow Core."""

from . import issues, organizations, projects, sprints, users

__all__ = ["issues", "organizations", "projects", "sprints", "users"]
