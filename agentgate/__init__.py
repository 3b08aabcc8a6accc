"""
AgentGate
=========
Safety enforcement and two-phase orchestration between model backends
and side-effecting tools.

    Discussion  -> model proposes, every call is classified, data validated
    Execution   -> after confirmation: re-validate, run approved calls in order
"""

__version__ = "0.1.0"

from .core.errors import (
    AgentGateError, ErrorCategory, ConfigError, UnknownAgentError,
    UnknownModelError, UnknownSchemaError, ProviderError,
    InvalidTransitionError, ToolFailure,
)
from .core.models import (
    Phase, LogType, ToolCall, ToolCallStatus, StructuredResult,
    RunRequest, DiscussionResult, ExecutionResult,
)
from .core.state_machine import RunState, RunStateMachine
from .schema import ValidationResult, validate
from .tools import (
    Permission, ToolDefinition, ToolRegistry, BlockKind, BlockReason,
    get_permitted_tools, validate_tool_access, ToolExecutor, HandlerToolExecutor,
)
from .agents import AgentConfig, AgentCatalogue
from .providers import ModelProvider, ProviderRegistry, ReplayProvider
from .infra import AuditLog, LogEntry, configure_logging
from .core.orchestrator import Orchestrator, OrchestratorConfig
from .infra.config import Catalogue, load_catalogue, default_catalogue

__all__ = [
    "__version__",
    "AgentGateError", "ErrorCategory", "ConfigError", "UnknownAgentError",
    "UnknownModelError", "UnknownSchemaError", "ProviderError",
    "InvalidTransitionError", "ToolFailure",
    "Phase", "LogType", "ToolCall", "ToolCallStatus", "StructuredResult",
    "RunRequest", "DiscussionResult", "ExecutionResult",
    "RunState", "RunStateMachine",
    "ValidationResult", "validate",
    "Permission", "ToolDefinition", "ToolRegistry", "BlockKind", "BlockReason",
    "get_permitted_tools", "validate_tool_access", "ToolExecutor", "HandlerToolExecutor",
    "AgentConfig", "AgentCatalogue",
    "ModelProvider", "ProviderRegistry", "ReplayProvider",
    "AuditLog", "LogEntry", "configure_logging",
    "Orchestrator", "OrchestratorConfig",
    "Catalogue", "load_catalogue", "default_catalogue",
]
