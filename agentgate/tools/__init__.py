# Tools module - tool registry, permission validator and executor capability
# Each tool: name, JSON schema, required permissions
# This registry is the firewall between model output and side effects

from .registry import (
    Permission, ToolDefinition, ToolRegistry, parse_permissions, create_default_tools,
)
from .permissions import BlockKind, BlockReason, get_permitted_tools, validate_tool_access
from .executor import ToolExecutor, HandlerToolExecutor

__all__ = [
    "Permission",
    "ToolDefinition",
    "ToolRegistry",
    "parse_permissions",
    "create_default_tools",
    "BlockKind",
    "BlockReason",
    "get_permitted_tools",
    "validate_tool_access",
    "ToolExecutor",
    "HandlerToolExecutor",
]
