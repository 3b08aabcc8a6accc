# Core module - run lifecycle, data models and errors
# The orchestrator is the only coordinator; import it from agentgate.core.orchestrator
#
# Kept light on purpose: schema and tools import core.errors, so this
# package must not pull in the orchestrator at import time.

from .errors import (
    AgentGateError, ErrorCategory, ConfigError, UnknownAgentError,
    UnknownModelError, UnknownSchemaError, DuplicateDefinitionError,
    SchemaDefinitionError, ProviderError, InvalidTransitionError, ToolFailure,
)
from .state_machine import RunStateMachine, RunState, StateTransition, TERMINAL_STATES
from .models import (
    Phase, LogType, ToolCall, ToolCallStatus, StructuredResult,
    RunRequest, DiscussionResult, ExecutionResult,
)

__all__ = [
    "AgentGateError", "ErrorCategory", "ConfigError", "UnknownAgentError",
    "UnknownModelError", "UnknownSchemaError", "DuplicateDefinitionError",
    "SchemaDefinitionError", "ProviderError", "InvalidTransitionError", "ToolFailure",
    "RunStateMachine", "RunState", "StateTransition", "TERMINAL_STATES",
    "Phase", "LogType", "ToolCall", "ToolCallStatus", "StructuredResult",
    "RunRequest", "DiscussionResult", "ExecutionResult",
]
