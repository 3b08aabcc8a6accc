"""
Run State Machine
-----------------
Lifecycle of a single run through the two-phase flow.

    DISCUSSION -> AWAITING_CONFIRMATION -> EXECUTION -> COMPLETED
                                                     -> ABORTED

DISCUSSION and AWAITING_CONFIRMATION may also move to ABORTED (provider
failure, abandoned plan). COMPLETED and ABORTED are terminal: once a run
reaches either, nothing about it changes again.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Dict, List, Optional, Set
import logging

from .errors import InvalidTransitionError


class RunState(Enum):
    """Valid states for a run."""
    DISCUSSION = auto()             # Provider proposes, nothing executes
    AWAITING_CONFIRMATION = auto()  # Plan is classified, waiting on the user
    EXECUTION = auto()              # Re-validating and running approved calls
    COMPLETED = auto()              # Terminal: execution finished (possibly partial)
    ABORTED = auto()                # Terminal: nothing more will execute


TERMINAL_STATES: Set[RunState] = {RunState.COMPLETED, RunState.ABORTED}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: RunState
    to_state: RunState
    timestamp: datetime
    reason: str
    metadata: Dict = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"StateTransition({self.from_state.name} → {self.to_state.name}, "
            f"reason='{self.reason}')"
        )


VALID_TRANSITIONS: Dict[RunState, Set[RunState]] = {
    RunState.DISCUSSION: {RunState.AWAITING_CONFIRMATION, RunState.ABORTED},
    RunState.AWAITING_CONFIRMATION: {RunState.EXECUTION, RunState.ABORTED},
    RunState.EXECUTION: {RunState.COMPLETED, RunState.ABORTED},
    RunState.COMPLETED: set(),
    RunState.ABORTED: set(),
}


class RunStateMachine:
    """
    State machine for one run.

    Responsibilities:
    - Track current state
    - Validate state transitions
    - Log all transitions
    """

    def __init__(self, run_id: str = "", initial_state: RunState = RunState.DISCUSSION):
        self.run_id = run_id
        self._state = initial_state
        self._history: List[StateTransition] = []
        self._logger = logging.getLogger("agentgate.core.state")

        self._logger.debug(f"Run {run_id or '-'} initialized in state: {self._state.name}")

    @property
    def state(self) -> RunState:
        """Get current state."""
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        """Get transition history."""
        return self._history.copy()

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def can_transition(self, to_state: RunState) -> bool:
        """Check if transition to given state is valid."""
        return to_state in VALID_TRANSITIONS.get(self._state, set())

    def transition(
        self,
        to_state: RunState,
        reason: str,
        metadata: Optional[Dict] = None
    ) -> StateTransition:
        """
        Transition to a new state.

        Raises:
            InvalidTransitionError: If transition is not valid
        """
        if not self.can_transition(to_state):
            valid_names = sorted(s.name for s in VALID_TRANSITIONS.get(self._state, set()))
            raise InvalidTransitionError(
                f"Invalid run transition: {self._state.name} → {to_state.name}. "
                f"Valid targets: {valid_names}",
                details={"run_id": self.run_id, "from": self._state.name, "to": to_state.name},
            )

        transition = StateTransition(
            from_state=self._state,
            to_state=to_state,
            timestamp=datetime.now(timezone.utc),
            reason=reason,
            metadata=metadata or {}
        )

        old_state = self._state
        self._state = to_state
        self._history.append(transition)

        self._logger.info(
            f"Run state: {old_state.name} → {to_state.name} (reason: {reason})",
            extra={"run_id": self.run_id or None},
        )

        return transition

    def get_history_summary(self) -> str:
        """Get a human-readable summary of transitions."""
        if not self._history:
            return "No transitions recorded."

        lines = [f"Run {self.run_id or '-'} transitions:", "-" * 40]
        for t in self._history:
            lines.append(
                f"  {t.timestamp.strftime('%H:%M:%S')} | "
                f"{t.from_state.name:21} → {t.to_state.name:21} | "
                f"{t.reason}"
            )
        return "\n".join(lines)
