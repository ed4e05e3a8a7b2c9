"""
Orchestration of recomputation, staleness and auto-save.
"""

from detail_composite.orchestration.autosave import AutoSaveTrigger
from detail_composite.orchestration.coordinator import RequestCoordinator
from detail_composite.orchestration.state_machine import (
    StateData,
    StateMachine,
    StateTransitionError,
    create_control_state_machine,
)

__all__ = [
    "AutoSaveTrigger",
    "RequestCoordinator",
    "StateData",
    "StateMachine",
    "StateTransitionError",
    "create_control_state_machine",
]
