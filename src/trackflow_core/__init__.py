"""Trackflow Core - organization-scoped projects, sprints and kanban issues."""

__version__ = "1.0.0"
