"""
State machine for the composite control lifecycle.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from detail_composite.core.constants import ControlStatus
from detail_composite.core.logging import get_logger

logger = get_logger(__name__)


class StateTransitionError(Exception):
    """Invalid state transition."""
    pass


@dataclass
class StateData:
    """A state the machine has entered."""

    state: str
    entered_at: datetime = field(default_factory=datetime.utcnow)
    request_id: Optional[int] = None
    error: Optional[str] = None


class StateMachine:
    """
    Generic state machine with an explicit transition table.
    """

    def __init__(
        self,
        states: list[str],
        initial_state: str,
        transitions: dict[str, list[str]],
        history_limit: int = 20,
    ) -> None:
        """
        Initialize the state machine.

        Args:
            states: List of valid states
            initial_state: Starting state
            transitions: Valid transitions {from_state: [to_states]}
            history_limit: Number of entered states to remember
        """
        self.states = set(states)
        self.transitions = transitions
        self.history_limit = history_limit

        if initial_state not in self.states:
            raise ValueError(f"Initial state '{initial_state}' not in states")
        for source, targets in transitions.items():
            for target in [source, *targets]:
                if target not in self.states:
                    raise ValueError(f"Transition state '{target}' not in states")

        self.current = initial_state
        self.history: list[StateData] = [StateData(state=initial_state)]

    def can_transition(self, from_state: str, to_state: str) -> bool:
        """Check if transition is valid."""
        if from_state not in self.transitions:
            return False
        return to_state in self.transitions[from_state]

    def get_next_states(self, current_state: str) -> list[str]:
        """Get valid next states from current state."""
        return self.transitions.get(current_state, [])

    def transition(
        self,
        to_state: str,
        request_id: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Move to another state.

        Raises:
            StateTransitionError: If the transition is not allowed
        """
        if not self.can_transition(self.current, to_state):
            raise StateTransitionError(
                f"Cannot transition from '{self.current}' to '{to_state}'"
            )

        logger.debug(
            "State transition",
            from_state=self.current,
            to_state=to_state,
            request_id=request_id,
        )
        self.current = to_state
        self.history.append(StateData(state=to_state, request_id=request_id, error=error))
        del self.history[: -self.history_limit]


CONTROL_STATES = [status.value for status in ControlStatus]

# A newer request may start while one is computing
CONTROL_TRANSITIONS = {
    ControlStatus.IDLE.value: [ControlStatus.COMPUTING.value],
    ControlStatus.COMPUTING.value: [
        ControlStatus.COMPUTING.value,
        ControlStatus.IDLE.value,
        ControlStatus.ERROR.value,
    ],
    ControlStatus.ERROR.value: [ControlStatus.COMPUTING.value],
}


def create_control_state_machine() -> StateMachine:
    """Create state machine for one composite control."""
    return StateMachine(
        states=CONTROL_STATES,
        initial_state=ControlStatus.IDLE.value,
        transitions=CONTROL_TRANSITIONS,
    )
