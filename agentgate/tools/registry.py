"""
Tool Registry
-------------
Static catalogue of tool definitions with permission boundaries.

The registry is the single authority on tool existence. It is built once
at process start and never mutated: there is no register/unregister
after construction, and parameter schemas are deep-frozen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple
import logging

from agentgate.core.errors import DuplicateDefinitionError
from agentgate.schema.validator import check_schema, freeze, thaw


class Permission(str, Enum):
    """Capability tokens. Closed set, equality only, no hierarchy."""
    READ_TASKS = "read:tasks"
    WRITE_TASKS = "write:tasks"
    READ_WORKFLOWS = "read:workflows"
    WRITE_WORKFLOWS = "write:workflows"
    READ_ENTITIES = "read:entities"
    WRITE_ENTITIES = "write:entities"
    EXECUTE_WORKFLOWS = "execute:workflows"

    def __str__(self) -> str:
        return self.value


def parse_permissions(values: Iterable[Any]) -> FrozenSet[Permission]:
    """Coerce raw tokens into Permission members. Raises ValueError on unknown tokens."""
    return frozenset(Permission(v) for v in values)


@dataclass(frozen=True)
class ToolDefinition:
    """
    Tool definition with schema and permission requirements.

    Each tool defines:
    - Unique name and description
    - Parameter schema (JSON-Schema subset, frozen)
    - Permissions the calling agent must hold, in declaration order
    """
    name: str
    description: str
    parameters: Mapping[str, Any] = field(default_factory=lambda: freeze({"type": "object"}))
    required_permissions: Tuple[Permission, ...] = ()

    def __post_init__(self) -> None:
        check_schema(self.parameters, name=f"parameter schema for tool {self.name}")
        object.__setattr__(self, "parameters", freeze(self.parameters))
        # Keep declaration order but drop duplicates
        perms = tuple(dict.fromkeys(Permission(p) for p in self.required_permissions))
        object.__setattr__(self, "required_permissions", perms)

    def missing_permissions(self, granted: Iterable[Permission]) -> List[Permission]:
        """Required permissions absent from the granted set."""
        granted = set(granted)
        return [p for p in self.required_permissions if p not in granted]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view handed to model providers."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": thaw(self.parameters),
            "requiredPermissions": [p.value for p in self.required_permissions],
        }

    def __repr__(self) -> str:
        perms = ", ".join(p.value for p in self.required_permissions)
        return f"ToolDefinition(name={self.name}, permissions=[{perms}])"


class ToolRegistry:
    """
    Registry for all available tools.

    This registry is the firewall between model output and side effects:
    a tool that is not registered here can never be approved.
    Read-only after construction, so it is safe to share across runs.
    """

    def __init__(self, definitions: Iterable[ToolDefinition] = ()):
        self._logger = logging.getLogger("agentgate.tools.registry")
        tools: Dict[str, ToolDefinition] = {}

        for tool in definitions:
            if tool.name in tools:
                raise DuplicateDefinitionError("tool", tool.name)
            tools[tool.name] = tool

        self._tools = tools
        self._logger.info(f"Tool registry built: {len(tools)} tools")

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> List[str]:
        """Tool names in registry order."""
        return list(self._tools)

    def list_tools(self) -> List[ToolDefinition]:
        """List all registered tools in registry order."""
        return list(self._tools.values())

    def to_provider_schemas(self) -> List[Dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"ToolRegistry({', '.join(self._tools)})"


def create_default_tools() -> ToolRegistry:
    """Create registry with the built-in task and workflow tools."""
    task_updates = {
        "type": "object",
        "properties": {
            "status": {"type": "string", "enum": ["open", "in-progress", "urgent", "done"]},
            "priority": {"type": "string", "enum": ["low", "medium", "high", "critical"]},
            "assignee": {"type": "string"},
        },
    }

    workflow = {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "trigger": {"type": "string"},
            "steps": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "enum": ["update", "notify", "condition"]},
                        "entity": {"type": "string"},
                        "update": {"type": "object"},
                    },
                    "required": ["type"],
                },
            },
        },
        "required": ["name", "trigger", "steps"],
    }

    return ToolRegistry([
        ToolDefinition(
            name="readTask",
            description="Read a task by ID. Returns task details including status, assignee, and due date.",
            parameters={
                "type": "object",
                "properties": {
                    "taskId": {"type": "string", "description": "The ID of the task to read"},
                },
                "required": ["taskId"],
            },
            required_permissions=(Permission.READ_TASKS,),
        ),
        ToolDefinition(
            name="updateTask",
            description="Update a task's properties such as status, priority, or assignee.",
            parameters={
                "type": "object",
                "properties": {
                    "taskId": {"type": "string", "description": "The ID of the task to update"},
                    "updates": task_updates,
                },
                "required": ["taskId", "updates"],
            },
            required_permissions=(Permission.WRITE_TASKS,),
        ),
        ToolDefinition(
            name="createWorkflow",
            description="Create an automation workflow with trigger and steps.",
            parameters={
                "type": "object",
                "properties": {"workflow": workflow},
                "required": ["workflow"],
            },
            required_permissions=(Permission.WRITE_WORKFLOWS,),
        ),
        ToolDefinition(
            name="listTasks",
            description="List all tasks matching optional filter criteria.",
            parameters={
                "type": "object",
                "properties": {
                    "filter": {
                        "type": "object",
                        "properties": {
                            "status": {"type": "string"},
                            "priority": {"type": "string"},
                            "assignee": {"type": "string"},
                        },
                    },
                },
            },
            required_permissions=(Permission.READ_TASKS,),
        ),
    ])
