"""
Agent Configuration
-------------------
Static, process-wide agent definitions.

Each agent names its default model, its instructions, the tools it may
ever see or call, the output schema its data must satisfy and the
permissions it holds. Loaded once at startup, never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional
import logging

from agentgate.core.errors import (
    ConfigError, DuplicateDefinitionError, UnknownAgentError, UnknownSchemaError,
)
from agentgate.tools.registry import Permission, ToolRegistry


@dataclass(frozen=True)
class AgentConfig:
    """Immutable agent definition."""
    name: str
    model_id: str
    instructions: str
    allowed_tools: FrozenSet[str] = field(default_factory=frozenset)
    output_schema_name: str = ""
    permissions: FrozenSet[Permission] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_tools", frozenset(self.allowed_tools))
        object.__setattr__(self, "permissions", frozenset(Permission(p) for p in self.permissions))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "model": self.model_id,
            "instructions": self.instructions,
            "allowedTools": sorted(self.allowed_tools),
            "outputSchema": self.output_schema_name,
            "permissions": sorted(p.value for p in self.permissions),
        }


class AgentCatalogue:
    """
    Lookup table of agent configurations.

    Every agent's output schema must exist at construction time, so a run
    can never reach the Execution phase without a schema to re-validate
    against.
    """

    def __init__(
        self,
        agents: Iterable[AgentConfig],
        schemas: Mapping[str, Mapping[str, Any]],
        registry: Optional[ToolRegistry] = None,
    ):
        self._logger = logging.getLogger("agentgate.agents")
        table: Dict[str, AgentConfig] = {}

        for agent in agents:
            if agent.name in table:
                raise DuplicateDefinitionError("agent", agent.name)
            if agent.output_schema_name not in schemas:
                raise UnknownSchemaError(agent.output_schema_name, referenced_by=f"agent {agent.name}")
            if registry is not None:
                unknown = sorted(t for t in agent.allowed_tools if t not in registry)
                if unknown:
                    # Allow-listing a tool that does not exist hides typos in config
                    raise ConfigError(
                        f"Agent {agent.name} allows unknown tools: {', '.join(unknown)}",
                        details={"agent": agent.name, "unknown_tools": unknown},
                    )
            table[agent.name] = agent

        self._agents = MappingProxyType(table)
        self._schemas = MappingProxyType(dict(schemas))
        self._logger.info(f"Agent catalogue built: {len(table)} agents")

    def get(self, name: str) -> AgentConfig:
        """
        Resolve an agent by name.

        Raises:
            UnknownAgentError: if no agent has that name
        """
        agent = self._agents.get(name)
        if agent is None:
            raise UnknownAgentError(name, known=self._agents.keys())
        return agent

    def output_schema(self, agent: AgentConfig) -> Mapping[str, Any]:
        return self._schemas[agent.output_schema_name]

    def names(self) -> List[str]:
        return list(self._agents)

    def __iter__(self) -> Iterator[AgentConfig]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: object) -> bool:
        return name in self._agents


def create_default_agents() -> List[AgentConfig]:
    """The three built-in agents."""
    return [
        AgentConfig(
            name="workflow-agent",
            model_id="claude-opus-4.6",
            instructions=(
                "Create and manage automation workflows safely for Onebeam apps. "
                "Always produce structured workflow definitions."
            ),
            allowed_tools=frozenset({"readTask", "createWorkflow", "listTasks"}),
            output_schema_name="WorkflowDefinition",
            permissions=frozenset({
                Permission.READ_TASKS, Permission.WRITE_WORKFLOWS, Permission.READ_WORKFLOWS,
            }),
        ),
        AgentConfig(
            name="task-agent",
            model_id="gpt-5.2",
            instructions=(
                "Manage tasks: read, list and update them. "
                "Never create workflows or access unauthorized resources."
            ),
            allowed_tools=frozenset({"readTask", "updateTask", "listTasks"}),
            output_schema_name="TaskUpdate",
            permissions=frozenset({Permission.READ_TASKS, Permission.WRITE_TASKS}),
        ),
        AgentConfig(
            name="readonly-agent",
            model_id="gemini-3",
            instructions="Read-only agent that can only list and read tasks. Cannot modify any data.",
            allowed_tools=frozenset({"readTask", "listTasks"}),
            output_schema_name="TaskList",
            permissions=frozenset({Permission.READ_TASKS}),
        ),
    ]
