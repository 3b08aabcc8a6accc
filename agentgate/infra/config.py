"""
Catalogue Configuration
-----------------------
Loads the static catalogue (tools, output schemas, agents, orchestrator
settings) from YAML.

The file is parsed with yaml.safe_load, checked with pydantic, then
turned into the immutable runtime objects. Every problem surfaces as a
ConfigError before any run starts.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agentgate.agents.config import AgentCatalogue, AgentConfig, create_default_agents
from agentgate.core.errors import ConfigError
from agentgate.core.orchestrator import OrchestratorConfig
from agentgate.schema.output_schemas import build_schema_catalogue, create_default_schemas
from agentgate.tools.registry import Permission, ToolDefinition, ToolRegistry, create_default_tools


logger = logging.getLogger("agentgate.infra.config")

DEFAULT_CATALOGUE_PATH = Path(__file__).resolve().parents[2] / "config" / "catalogue.yaml"


class ToolSpec(BaseModel):
    """A tool entry in the catalogue file."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object"})
    required_permissions: List[Permission] = Field(default_factory=list, alias="requiredPermissions")


class AgentSpec(BaseModel):
    """An agent entry in the catalogue file."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid", protected_namespaces=())

    name: str = Field(min_length=1)
    model_id: str = Field(alias="model", min_length=1)
    instructions: str = ""
    allowed_tools: List[str] = Field(default_factory=list, alias="allowedTools")
    output_schema: str = Field(alias="outputSchema", min_length=1)
    permissions: List[Permission] = Field(default_factory=list)


class OrchestratorSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider_timeout_seconds: Optional[float] = Field(default=30.0, gt=0)
    tool_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    validate_tool_arguments: bool = False

    def to_config(self) -> OrchestratorConfig:
        return OrchestratorConfig(**self.model_dump())


class CatalogueSpec(BaseModel):
    """Top-level shape of catalogue.yaml."""
    model_config = ConfigDict(extra="forbid")

    tools: List[ToolSpec] = Field(default_factory=list)
    schemas: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    agents: List[AgentSpec] = Field(default_factory=list)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)


@dataclass(frozen=True)
class Catalogue:
    """Immutable runtime configuration, built once at process start."""
    registry: ToolRegistry
    schemas: Mapping[str, Mapping[str, Any]]
    agents: AgentCatalogue
    settings: OrchestratorConfig


def build_catalogue(spec: CatalogueSpec) -> Catalogue:
    """Convert validated catalogue data into runtime objects."""
    registry = ToolRegistry(
        ToolDefinition(
            name=t.name,
            description=t.description,
            parameters=t.parameters,
            required_permissions=tuple(t.required_permissions),
        )
        for t in spec.tools
    )
    schemas = build_schema_catalogue(spec.schemas)
    agents = AgentCatalogue(
        (
            AgentConfig(
                name=a.name,
                model_id=a.model_id,
                instructions=a.instructions,
                allowed_tools=frozenset(a.allowed_tools),
                output_schema_name=a.output_schema,
                permissions=frozenset(a.permissions),
            )
            for a in spec.agents
        ),
        schemas,
        registry=registry,
    )
    return Catalogue(registry=registry, schemas=schemas, agents=agents, settings=spec.orchestrator.to_config())


def parse_catalogue(data: Mapping[str, Any], source: str = "<data>") -> Catalogue:
    """
    Build a catalogue from already-parsed data.

    Raises:
        ConfigError: on any structural or reference problem
    """
    try:
        spec = CatalogueSpec.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors(include_url=False)
        ]
        raise ConfigError(
            f"Invalid catalogue {source}: {'; '.join(problems)}",
            details={"source": source, "errors": problems},
        ) from e

    catalogue = build_catalogue(spec)
    logger.info(
        f"Catalogue loaded from {source}: {len(catalogue.registry)} tools, "
        f"{len(catalogue.schemas)} schemas, {len(catalogue.agents)} agents"
    )
    return catalogue


def load_catalogue(path: Union[str, Path] = DEFAULT_CATALOGUE_PATH) -> Catalogue:
    """
    Load the catalogue from a YAML file.

    Raises:
        ConfigError: if the file is unreadable, not YAML, or invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read catalogue {path}: {e}", details={"source": str(path)}) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in catalogue {path}: {e}", details={"source": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Catalogue {path} must be a mapping at the top level")

    return parse_catalogue(data, source=str(path))


def default_catalogue(settings: Optional[OrchestratorConfig] = None) -> Catalogue:
    """The built-in catalogue, without touching the filesystem."""
    registry = create_default_tools()
    schemas = create_default_schemas()
    agents = AgentCatalogue(create_default_agents(), schemas, registry=registry)
    return Catalogue(registry=registry, schemas=schemas, agents=agents, settings=settings or OrchestratorConfig())
