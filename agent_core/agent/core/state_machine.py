from enum import Enum
from typing import Set, Dict


class LoopState(str, Enum):
    INIT = "init"
    LOOPING = "looping"
    TOOL_DETECTED = "tool_detected"
    EXECUTING = "executing"
    NO_TOOL = "no_tool"
    DONE = "done"
    LIMIT_EXCEEDED = "limit_exceeded"
    FAILED = "failed"


class StateMachine:
    """
    Enforces valid state transitions for one run of the reasoning loop.
    Prevents invalid jumps (e.g., LOOPING -> EXECUTING without TOOL_DETECTED).
    """

    def __init__(self):
        self._current_state = LoopState.INIT

        # Define allowed transitions
        self._transitions: Dict[LoopState, Set[LoopState]] = {
            LoopState.INIT: {LoopState.LOOPING, LoopState.FAILED},
            LoopState.LOOPING: {
                LoopState.TOOL_DETECTED,
                LoopState.NO_TOOL,
                LoopState.LIMIT_EXCEEDED,
                LoopState.FAILED,
            },
            LoopState.TOOL_DETECTED: {LoopState.EXECUTING, LoopState.FAILED},
            LoopState.EXECUTING: {LoopState.LOOPING, LoopState.FAILED},
            LoopState.NO_TOOL: {LoopState.DONE},
            LoopState.LIMIT_EXCEEDED: {LoopState.FAILED},
            LoopState.DONE: set(),  # Terminal
            LoopState.FAILED: set(),  # Terminal
        }

    @property
    def current(self) -> LoopState:
        return self._current_state

    @property
    def is_terminal(self) -> bool:
        return not self._transitions[self._current_state]

    def transition_to(self, new_state: LoopState) -> None:
        """
        Attempts to transition to a new state.
        Raises ValueError if the transition is illegal.
        """
        if new_state not in self._transitions[self._current_state]:
            raise ValueError(
                f"Invalid State Transition: {self._current_state.value} -> {new_state.value}"
            )
        self._current_state = new_state
