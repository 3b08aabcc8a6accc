"""
Error Handling Module
---------------------
Typed errors with classification.

Only configuration and provider failures are raised out of a run.
Permission and schema outcomes are returned as data, and a failing tool
call is recorded on that call as a ToolFailure.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Dict, Iterable, Optional
import traceback


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    CONFIG_ERROR = auto()              # Unknown agent/model, bad static config
    PERMISSION_ERROR = auto()          # Tool blocked by allow-list/permissions
    SCHEMA_VALIDATION_ERROR = auto()   # Structured data failed validation
    PROVIDER_ERROR = auto()            # Model backend call failed
    TOOL_EXECUTION_ERROR = auto()      # A single approved call failed


class AgentGateError(Exception):
    """Base class for all raised AgentGate errors."""

    category: ErrorCategory = ErrorCategory.CONFIG_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.name}: {self.message})"


class ConfigError(AgentGateError):
    """Static configuration is missing or malformed. Fatal to the run."""
    category = ErrorCategory.CONFIG_ERROR


class UnknownAgentError(ConfigError):
    """No AgentConfig is registered under the requested name."""

    def __init__(self, agent_name: str, known: Iterable[str] = ()):
        known = sorted(known)
        super().__init__(
            f"Unknown agent: {agent_name}. Known agents: {', '.join(known)}",
            details={"agent": agent_name, "known": known},
        )
        self.agent_name = agent_name


class UnknownModelError(ConfigError):
    """No ModelProvider is registered for the effective model id."""

    def __init__(self, model_id: str, supported: Iterable[str] = ()):
        supported = sorted(supported)
        super().__init__(
            f"Unknown model: {model_id}. Supported: {', '.join(supported)}",
            details={"model_id": model_id, "supported": supported},
        )
        self.model_id = model_id


class UnknownSchemaError(ConfigError):
    """An agent references an output schema that is not defined."""

    def __init__(self, schema_name: str, referenced_by: str = ""):
        message = f"Unknown output schema: {schema_name}"
        if referenced_by:
            message += f" (referenced by {referenced_by})"
        super().__init__(message, details={"schema": schema_name, "referenced_by": referenced_by})
        self.schema_name = schema_name


class DuplicateDefinitionError(ConfigError):
    """Two definitions share a unique key."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"Duplicate {kind} definition: {name}", details={"kind": kind, "name": name})


class SchemaDefinitionError(ConfigError):
    """A schema tree uses keywords or types outside the supported subset."""


class ProviderError(AgentGateError):
    """The model backend failed. Fatal to the current Discussion call."""
    category = ErrorCategory.PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        model_id: str = "",
        details: Optional[Dict[str, Any]] = None,
        logs: tuple = (),
    ):
        super().__init__(message, details=details)
        self.model_id = model_id
        self.logs = logs


class InvalidTransitionError(AgentGateError):
    """An illegal ToolCall status or run-state transition was attempted."""
    category = ErrorCategory.CONFIG_ERROR


@dataclass(frozen=True)
class ToolFailure:
    """
    Structured record of a failed tool execution.

    Attached to the failing ToolCall; never propagated to sibling calls.
    """
    message: str
    error_type: str = "Exception"
    category: ErrorCategory = ErrorCategory.TOOL_EXECUTION_ERROR
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ToolFailure":
        """Create a failure record from an exception."""
        return cls(
            message=str(exception) or type(exception).__name__,
            error_type=type(exception).__name__,
            details=details or {},
            stack_trace="".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error_type": self.error_type,
            "category": self.category.name,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return f"ToolFailure({self.error_type}: {self.message})"
