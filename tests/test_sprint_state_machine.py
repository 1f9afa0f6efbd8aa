"""Tests for sprint lifecycle state machine validation."""
import pytest

from trackflow_core.errors import ErrorKind, ValidationError
from trackflow_core.models import SprintStatus
from trackflow_core.sprint_state_machine import (
    SprintStateTransitionError,
    get_allowed_sprint_transitions,
    is_sprint_transition_valid,
    validate_sprint_transition,
)


class TestSprintTransitions:
    """Test sprint state machine transition validation."""

    def test_valid_forward_transitions(self):
        """Test that the forward lifecycle is allowed."""
        # Planned → Active
        assert is_sprint_transition_valid(SprintStatus.PLANNED, SprintStatus.ACTIVE)
        validate_sprint_transition(SprintStatus.PLANNED, SprintStatus.ACTIVE)

        # Active → Completed
        assert is_sprint_transition_valid(SprintStatus.ACTIVE, SprintStatus.COMPLETED)
        validate_sprint_transition(SprintStatus.ACTIVE, SprintStatus.COMPLETED)

    def test_noop_transitions(self):
        """Test that staying in the same status is always allowed."""
        for status in SprintStatus:
            assert is_sprint_transition_valid(status, status)
            validate_sprint_transition(status, status)

    def test_skipping_active_is_blocked(self):
        """Test that a planned sprint cannot be completed directly."""
        assert not is_sprint_transition_valid(SprintStatus.PLANNED, SprintStatus.COMPLETED)

        with pytest.raises(SprintStateTransitionError) as exc_info:
            validate_sprint_transition(SprintStatus.PLANNED, SprintStatus.COMPLETED)

        assert "Invalid sprint status transition" in str(exc_info.value)
        assert "ACTIVE" in str(exc_info.value)

    def test_backward_transition_is_blocked(self):
        with pytest.raises(SprintStateTransitionError):
            validate_sprint_transition(SprintStatus.ACTIVE, SprintStatus.PLANNED)

    @pytest.mark.parametrize("target", [SprintStatus.PLANNED, SprintStatus.ACTIVE])
    def test_completed_is_terminal(self, target):
        """Test that completed sprints cannot be reopened."""
        with pytest.raises(SprintStateTransitionError) as exc_info:
            validate_sprint_transition(SprintStatus.COMPLETED, target)

        error = exc_info.value
        assert "Completed sprints cannot be reopened" in str(error)
        assert error.current_status == SprintStatus.COMPLETED
        assert error.requested_status == target
        assert error.allowed_transitions == [SprintStatus.COMPLETED]

    def test_transition_error_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_sprint_transition(SprintStatus.ACTIVE, SprintStatus.PLANNED)

        assert exc_info.value.kind == ErrorKind.VALIDATION


class TestAllowedSprintTransitions:
    """Test listing the next statuses."""

    def test_allowed_transitions(self):
        assert get_allowed_sprint_transitions(SprintStatus.PLANNED) == [SprintStatus.ACTIVE]
        assert get_allowed_sprint_transitions(SprintStatus.ACTIVE) == [SprintStatus.COMPLETED]
        assert get_allowed_sprint_transitions(SprintStatus.COMPLETED) == []
