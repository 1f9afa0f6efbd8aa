"""Server-side actions: authorization check followed by a database read or write."""

from . import issues, organizations, projects, sprints

__all__ = ["issues", "organizations", "projects", "sprints"]
