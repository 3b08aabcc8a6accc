"""
Permission Validator
--------------------
Pure functions over the registry, an agent's allow-list and its granted
permissions.

Two boundaries:
- Visibility: get_permitted_tools decides what a provider is shown.
- Enforcement: validate_tool_access re-checks every proposed call,
  because a model may propose a tool it was never shown.

Both only read immutable state and are safe to call from concurrent runs.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from .registry import Permission, ToolDefinition, ToolRegistry


class BlockKind(Enum):
    """Why a proposed tool call was refused."""
    NOT_ALLOWLISTED = auto()
    NOT_IN_REGISTRY = auto()
    MISSING_PERMISSIONS = auto()


@dataclass(frozen=True)
class BlockReason:
    """A refusal. Returned as data, never raised."""
    kind: BlockKind
    tool_name: str
    missing_permissions: Tuple[Permission, ...] = ()

    @property
    def message(self) -> str:
        if self.kind is BlockKind.NOT_ALLOWLISTED:
            return (
                f'BLOCKED: Tool "{self.tool_name}" is not in the agent\'s allowed tools list. '
                "This call has been rejected."
            )
        if self.kind is BlockKind.NOT_IN_REGISTRY:
            return f'BLOCKED: Tool "{self.tool_name}" does not exist in the registry.'
        missing = ", ".join(p.value for p in self.missing_permissions)
        return f"BLOCKED: Agent lacks permissions: [{missing}]. This call has been rejected."

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.name,
            "tool": self.tool_name,
            "missing_permissions": [p.value for p in self.missing_permissions],
            "message": self.message,
        }

    def __str__(self) -> str:
        return self.message


def get_permitted_tools(
    registry: ToolRegistry,
    allowed_names: Iterable[str],
    granted: Iterable[Permission],
) -> List[ToolDefinition]:
    """
    Every registry entry that is allow-listed and whose required
    permissions are a subset of the granted ones, in registry order.
    """
    allowed = set(allowed_names)
    granted = set(granted)
    return [
        tool for tool in registry
        if tool.name in allowed and set(tool.required_permissions) <= granted
    ]


def validate_tool_access(
    registry: ToolRegistry,
    tool_name: str,
    allowed_names: Iterable[str],
    granted: Iterable[Permission],
) -> Optional[BlockReason]:
    """
    Decide whether a proposed call may be approved.

    Decision order, first match wins:
    1. No registry entry (invented tools), whatever the allow-list says
    2. Not in the agent's allow-list
    3. Required permissions not all granted

    Note the order: registry before allow-list, not the reverse. A name
    that is both unregistered and unlisted is reported as NOT_IN_REGISTRY,
    never NOT_ALLOWLISTED. For registered tools the allow-list is still
    checked before permissions.

    Returns:
        BlockReason if refused, None if permitted
    """
    tool = registry.get(tool_name)
    if tool is None:
        return BlockReason(BlockKind.NOT_IN_REGISTRY, tool_name)

    if tool_name not in set(allowed_names):
        return BlockReason(BlockKind.NOT_ALLOWLISTED, tool_name)

    missing = tool.missing_permissions(granted)
    if missing:
        return BlockReason(BlockKind.MISSING_PERMISSIONS, tool_name, tuple(missing))

    return None
