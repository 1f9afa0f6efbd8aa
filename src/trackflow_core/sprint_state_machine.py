"""State machine validation for sprint lifecycle status transitions.

Lifecycle: PLANNED -> ACTIVE -> COMPLETED
Terminal state: COMPLETED

Issue statuses are deliberately not validated here: issues move freely
between kanban columns.
"""
import logging

from .errors import ValidationError
from .models import SprintStatus

logger = logging.getLogger("trackflow-core.sprint_state_machine")


class SprintStateTransitionError(ValidationError):
    """Raised when an invalid sprint state transition is attempted."""

    def __init__(
        self,
        message: str,
        current_status: SprintStatus,
        requested_status: SprintStatus,
        allowed_transitions: list[SprintStatus]
    ):
        super().__init__(message)
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed_transitions = allowed_transitions


# Maps current status → list of allowed next statuses
SPRINT_TRANSITION_MATRIX: dict[SprintStatus, list[SprintStatus]] = {
    SprintStatus.PLANNED: [
        SprintStatus.PLANNED,     # No-op (allowed)
        SprintStatus.ACTIVE,      # Forward: sprint started
    ],
    SprintStatus.ACTIVE: [
        SprintStatus.ACTIVE,      # No-op (allowed)
        SprintStatus.COMPLETED,   # Forward: sprint ended
    ],
    SprintStatus.COMPLETED: [
        SprintStatus.COMPLETED,   # No-op (allowed)
        # Terminal state - no transitions out
    ],
}


def is_sprint_transition_valid(current_status: SprintStatus, new_status: SprintStatus) -> bool:
    """
    Check if a sprint status transition is valid.

    Args:
        current_status: Current sprint status
        new_status: Requested sprint status

    Returns:
        True if transition is allowed, False otherwise
    """
    return new_status in SPRINT_TRANSITION_MATRIX.get(current_status, [])


def validate_sprint_transition(current_status: SprintStatus, new_status: SprintStatus) -> None:
    """
    Validate a sprint status transition and raise exception if invalid.

    Raises:
        SprintStateTransitionError: If the transition is not allowed
    """
    if current_status == new_status:
        logger.debug(f"No-op sprint transition: {current_status.value} → {new_status.value}")
        return

    if not is_sprint_transition_valid(current_status, new_status):
        allowed_transitions = SPRINT_TRANSITION_MATRIX.get(current_status, [])
        allowed_names = [s.value for s in allowed_transitions if s != current_status]

        error_msg = f"Invalid sprint status transition: {current_status.value} → {new_status.value}."
        if allowed_names:
            error_msg += f" From {current_status.value}, you can only transition to: {', '.join(allowed_names)}."
        if current_status == SprintStatus.COMPLETED:
            error_msg += " Completed sprints cannot be reopened. Plan a new sprint instead."

        logger.warning(f"Blocked sprint transition: {error_msg}")
        raise SprintStateTransitionError(
            message=error_msg,
            current_status=current_status,
            requested_status=new_status,
            allowed_transitions=allowed_transitions
        )

    logger.debug(f"Valid sprint transition: {current_status.value} → {new_status.value}")


def get_allowed_sprint_transitions(current_status: SprintStatus) -> list[SprintStatus]:
    """Get allowed next statuses (excluding the no-op same status)."""
    return [s for s in SPRINT_TRANSITION_MATRIX.get(current_status, []) if s != current_status]
