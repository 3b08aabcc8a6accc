"""
Run Data Models
---------------
ToolCall, StructuredResult, run requests and phase results.

ToolCall status is a monotonic state machine:

    pending -> approved | rejected
    approved -> executed

rejected and executed are terminal. Status only moves through the
methods below; it cannot be assigned directly.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple
import copy
import uuid

from .errors import InvalidTransitionError, ToolFailure
from .state_machine import RunState, RunStateMachine

if TYPE_CHECKING:
    from agentgate.infra.audit import LogEntry
    from agentgate.schema.validator import ValidationResult


class Phase(str, Enum):
    """Execution phases."""
    DISCUSSION = "discussion"
    EXECUTION = "execution"


class LogType(str, Enum):
    """Audit entry types consumed by the interface."""
    PLAN = "plan"
    TOOL_CALL = "tool_call"
    VALIDATION = "validation"
    EXECUTION = "execution"
    ERROR = "error"
    BLOCKED = "blocked"


class ToolCallStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXECUTED = "executed"


CALL_TRANSITIONS: Dict[ToolCallStatus, Set[ToolCallStatus]] = {
    ToolCallStatus.PENDING: {ToolCallStatus.APPROVED, ToolCallStatus.REJECTED},
    ToolCallStatus.APPROVED: {ToolCallStatus.EXECUTED},
    ToolCallStatus.REJECTED: set(),
    ToolCallStatus.EXECUTED: set(),
}


class ToolCall:
    """A tool call proposed by a model and owned by one run."""

    def __init__(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        call_id: Optional[str] = None,
    ):
        self.tool_name = tool_name
        self.arguments: Dict[str, Any] = arguments if arguments is not None else {}
        self.call_id = call_id or f"call_{uuid.uuid4().hex[:8]}"
        self.result: Any = None
        self.block_reason: Optional[str] = None
        self.failure: Optional[ToolFailure] = None
        self._status = ToolCallStatus.PENDING

    @classmethod
    def proposal(cls, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> "ToolCall":
        """A fresh pending call holding its own copy of the arguments."""
        return cls(tool_name=tool_name, arguments=copy.deepcopy(arguments or {}))

    @property
    def status(self) -> ToolCallStatus:
        return self._status

    @property
    def succeeded(self) -> bool:
        return self._status is ToolCallStatus.EXECUTED and self.failure is None

    def _advance(self, to_status: ToolCallStatus) -> None:
        if to_status not in CALL_TRANSITIONS[self._status]:
            raise InvalidTransitionError(
                f"Invalid tool call transition for {self.tool_name}: "
                f"{self._status.value} → {to_status.value}",
                details={"call_id": self.call_id, "from": self._status.value, "to": to_status.value},
            )
        self._status = to_status

    def approve(self) -> None:
        self._advance(ToolCallStatus.APPROVED)

    def reject(self, reason: str) -> None:
        self._advance(ToolCallStatus.REJECTED)
        self.block_reason = reason

    def mark_executed(self, result: Any) -> None:
        self._advance(ToolCallStatus.EXECUTED)
        self.result = result

    def mark_failed(self, failure: ToolFailure) -> None:
        """The executor was invoked and failed; the attempt is final."""
        self._advance(ToolCallStatus.EXECUTED)
        self.result = None
        self.failure = failure

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.call_id,
            "toolName": self.tool_name,
            "arguments": copy.deepcopy(self.arguments),
            "status": self._status.value,
        }
        if self.result is not None:
            data["result"] = self.result
        if self.block_reason:
            data["blockReason"] = self.block_reason
        if self.failure is not None:
            data["failure"] = self.failure.to_dict()
        return data

    def __repr__(self) -> str:
        return f"ToolCall({self.tool_name}, status={self._status.value})"


@dataclass
class StructuredResult:
    """Normalized output of one model invocation."""
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    tool_calls: List[ToolCall] = field(default_factory=list)
    reasoning: Optional[str] = None
    raw_output: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "StructuredResult":
        """Build from a plain mapping (camelCase or snake_case call lists)."""
        raw_calls = payload.get("toolCalls", payload.get("tool_calls")) or []
        calls = [
            ToolCall.proposal(
                c.get("toolName", c.get("tool_name", "")),
                c.get("arguments") or {},
            )
            for c in raw_calls
        ]
        return cls(
            success=bool(payload.get("success", True)),
            data=copy.deepcopy(payload.get("data") or {}),
            tool_calls=calls,
            reasoning=payload.get("reasoning"),
            raw_output=payload.get("rawOutput", payload.get("raw_output")),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "data": copy.deepcopy(self.data),
            "toolCalls": [c.to_dict() for c in self.tool_calls],
        }
        if self.reasoning is not None:
            data["reasoning"] = self.reasoning
        if self.raw_output is not None:
            data["rawOutput"] = self.raw_output
        return data


@dataclass(frozen=True)
class RunRequest:
    """A request to run an agent on user input."""
    agent: str
    input: str
    model: Optional[str] = None  # runtime override of the agent's default


@dataclass
class DiscussionResult:
    """
    Fully classified plan from the Discussion phase.

    Advisory only: it does not authorize execution by itself.
    """
    run_id: str
    agent_name: str
    model_id: str
    result: StructuredResult
    logs: Tuple["LogEntry", ...]
    validation: "ValidationResult"
    approved_calls: List[ToolCall]
    blocked_calls: List[ToolCall]
    state: RunStateMachine
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def phase(self) -> Phase:
        return Phase.DISCUSSION

    @property
    def validation_passed(self) -> bool:
        return self.validation.valid

    @property
    def run_state(self) -> RunState:
        return self.state.state


@dataclass
class ExecutionResult:
    """Outcome of the Execution phase, with Discussion and Execution logs merged."""
    run_id: str
    agent_name: str
    model_id: str
    result: StructuredResult
    logs: Tuple["LogEntry", ...]
    validation: "ValidationResult"
    approved_calls: List[ToolCall]
    blocked_calls: List[ToolCall]
    state: RunStateMachine

    @property
    def phase(self) -> Phase:
        return Phase.EXECUTION

    @property
    def validation_passed(self) -> bool:
        return self.validation.valid

    @property
    def run_state(self) -> RunState:
        return self.state.state

    @property
    def aborted(self) -> bool:
        return self.state.state is RunState.ABORTED

    @property
    def executed_calls(self) -> List[ToolCall]:
        return [c for c in self.approved_calls if c.status is ToolCallStatus.EXECUTED]

    @property
    def failed_calls(self) -> List[ToolCall]:
        return [c for c in self.approved_calls if c.failure is not None]
