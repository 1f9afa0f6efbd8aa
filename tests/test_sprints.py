"""Tests for sprint actions."""
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from trackflow_core import schemas
from trackflow_core.actions import sprints as sprint_actions
from trackflow_core.errors import ForbiddenError, NotFoundError, ValidationError
from trackflow_core.identity import AuthContext
from trackflow_core.models import Sprint, SprintStatus
from trackflow_core.sprint_state_machine import SprintStateTransitionError

START = datetime(2026, 11, 2)


def sprint_data(name="WEB Sprint 2", days=14):
    return schemas.SprintCreate(name=name, start_date=START, end_date=START + timedelta(days=days))


class TestCreateSprint:
    """Test sprint planning."""

    def test_admin_creates_planned_sprint(self, db, identity, users, project, alice_auth):
        sprint = sprint_actions.create_sprint(db, alice_auth, identity, project.id, sprint_data())

        assert sprint.status == SprintStatus.PLANNED
        assert sprint.project_id == project.id
        assert identity.membership_calls == []

    def test_member_is_forbidden(self, db, identity, users, project, bob_auth):
        with pytest.raises(ForbiddenError, match="Only organization admins can create sprints"):
            sprint_actions.create_sprint(db, bob_auth, identity, project.id, sprint_data())

        assert db.query(Sprint).count() == 0

    def test_admin_of_another_org_is_forbidden(self, db, identity, users, project, carol_auth):
        with pytest.raises(ForbiddenError):
            sprint_actions.create_sprint(db, carol_auth, identity, project.id, sprint_data())

    def test_cross_org_admin_uses_membership_list(self, db, identity, users, project):
        auth = AuthContext(user_id="user_alice", org_id="org_globex", org_role="org:member")

        sprint_actions.create_sprint(db, auth, identity, project.id, sprint_data())

        assert identity.membership_calls == ["org_acme"]

    def test_end_before_start(self, db, identity, users, project, alice_auth):
        with pytest.raises(ValidationError):
            sprint_actions.create_sprint(db, alice_auth, identity, project.id, sprint_data(days=-1))

    def test_single_day_sprint(self, db, identity, users, project, alice_auth):
        sprint = sprint_actions.create_sprint(db, alice_auth, identity, project.id, sprint_data(days=0))

        assert sprint.start_date == sprint.end_date

    def test_unknown_project(self, db, identity, users, alice_auth):
        with pytest.raises(NotFoundError, match="Project not found"):
            sprint_actions.create_sprint(db, alice_auth, identity, uuid4(), sprint_data())

    def test_duplicate_name(self, db, identity, users, project, sprint, alice_auth):
        with pytest.raises(ValidationError, match="Sprint name already exists"):
            sprint_actions.create_sprint(db, alice_auth, identity, project.id, sprint_data(name="WEB Sprint 1"))

        # session is usable after the failed insert
        created = sprint_actions.create_sprint(db, alice_auth, identity, project.id, sprint_data())
        assert db.query(Sprint).count() == 2
        assert created.name == "WEB Sprint 2"

    def test_mixed_timezone_dates(self, db, identity, users, project, alice_auth):
        data = schemas.SprintCreate(
            name="WEB Sprint 2",
            start_date="2026-11-02T00:00:00Z",
            end_date="2026-11-16T00:00:00",
        )

        sprint = sprint_actions.create_sprint(db, alice_auth, identity, project.id, data)

        assert sprint.start_date == datetime(2026, 11, 2)
        assert sprint.end_date == datetime(2026, 11, 16)

    def test_offset_dates_are_converted_to_utc(self, db, identity, users, project, alice_auth):
        data = schemas.SprintCreate(
            name="WEB Sprint 2",
            start_date="2026-11-02T09:00:00+02:00",
            end_date="2026-11-02T08:00:00Z",
        )

        assert data.start_date == datetime(2026, 11, 2, 7, 0)
        assert data.start_date.tzinfo is None
        sprint_actions.create_sprint(db, alice_auth, identity, project.id, data)

    def test_mixed_timezone_end_before_start(self, db, identity, users, project, alice_auth):
        data = schemas.SprintCreate(
            name="WEB Sprint 2",
            start_date="2026-11-02T12:00:00+00:00",
            end_date="2026-11-02T11:00:00",
        )

        with pytest.raises(ValidationError):
            sprint_actions.create_sprint(db, alice_auth, identity, project.id, data)


class TestUpdateSprintStatus:
    """Test sprint lifecycle transitions through the action."""

    def test_start_and_complete(self, db, identity, users, sprint, alice_auth):
        sprint_actions.update_sprint_status(db, alice_auth, identity, sprint.id, SprintStatus.ACTIVE)
        updated = sprint_actions.update_sprint_status(db, alice_auth, identity, sprint.id, SprintStatus.COMPLETED)

        assert updated.status == SprintStatus.COMPLETED

    def test_completed_cannot_be_reopened(self, db, identity, users, sprint, alice_auth):
        sprint.status = SprintStatus.COMPLETED
        db.commit()

        with pytest.raises(SprintStateTransitionError):
            sprint_actions.update_sprint_status(db, alice_auth, identity, sprint.id, SprintStatus.ACTIVE)

        db.expire_all()
        assert db.get(Sprint, sprint.id).status == SprintStatus.COMPLETED

    def test_member_is_forbidden(self, db, identity, users, sprint, bob_auth):
        with pytest.raises(ForbiddenError, match="Only organization admins can update sprints"):
            sprint_actions.update_sprint_status(db, bob_auth, identity, sprint.id, SprintStatus.ACTIVE)

    def test_unknown_sprint(self, db, identity, users, alice_auth):
        with pytest.raises(NotFoundError, match="Sprint not found"):
            sprint_actions.update_sprint_status(db, alice_auth, identity, uuid4(), SprintStatus.ACTIVE)
