"""
Replay Provider
---------------
A ModelProvider that returns canned structured results instead of
calling a vendor API. Used by the CLI and for offline demos.

Responses file format (YAML):

    models:
      gpt-5.2:
        display_name: OpenAI GPT-5.2   # optional
        vendor: openai                 # optional
        responses:
          - success: true
            reasoning: "..."
            data: {taskId: task-001, updates: {status: done}}
            toolCalls:
              - toolName: updateTask
                arguments: {taskId: task-001, updates: {status: done}}

Responses are returned in order. Nothing is derived from the prompt.
"""

from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Mapping, Optional, Sequence, Union
import copy
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agentgate.core.errors import ConfigError, ProviderError
from agentgate.core.models import StructuredResult
from agentgate.tools.registry import ToolDefinition

from .base import ModelProvider, ProviderRegistry


class ReplayToolCallSpec(BaseModel):
    """One proposed call in a canned response."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    tool_name: str = Field(alias="toolName", min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ReplayResponseSpec(BaseModel):
    """One canned StructuredResult."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)
    tool_calls: List[ReplayToolCallSpec] = Field(default_factory=list, alias="toolCalls")
    reasoning: Optional[str] = None
    raw_output: Optional[str] = Field(default=None, alias="rawOutput")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ReplayModelSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    display_name: Optional[str] = None
    vendor: Optional[str] = None
    responses: List[ReplayResponseSpec] = Field(min_length=1)


class ReplayFileSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    models: Dict[str, ReplayModelSpec]


# Most recent prompts kept for inspection
MAX_RECORDED_PROMPTS = 50


class ReplayProvider(ModelProvider):
    """
    Replays canned results for one model id.

    Each call consumes the next response. With cycle=True the sequence
    wraps around; otherwise running out raises ProviderError.
    """

    def __init__(
        self,
        model_id: str,
        responses: Sequence[Mapping[str, Any]],
        display_name: Optional[str] = None,
        vendor: Optional[str] = None,
        cycle: bool = False,
    ):
        super().__init__(model_id, display_name=display_name, vendor=vendor)
        self._responses: List[Dict[str, Any]] = [copy.deepcopy(dict(r)) for r in responses]
        self._cycle = cycle
        self._index = 0
        self.prompts: Deque[Dict[str, Any]] = deque(maxlen=MAX_RECORDED_PROMPTS)
        self._logger = logging.getLogger("agentgate.providers.replay")

    @property
    def remaining(self) -> Optional[int]:
        if self._cycle:
            return None
        return len(self._responses) - self._index

    async def generate_structured_output(
        self,
        system_prompt: str,
        user_prompt: str,
        tools: Sequence[ToolDefinition],
        output_schema: Mapping[str, Any],
    ) -> StructuredResult:
        self.prompts.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "tools": [t.name for t in tools],
        })

        if not self._responses or (not self._cycle and self._index >= len(self._responses)):
            raise ProviderError(
                f"Replay responses exhausted for model {self.model_id}",
                model_id=self.model_id,
            )

        payload = self._responses[self._index % len(self._responses)]
        self._index += 1
        self._logger.debug(f"Replaying response {self._index} for {self.model_id}")
        return StructuredResult.from_dict(payload)


def load_replay_providers(path: Union[str, Path], cycle: bool = False) -> ProviderRegistry:
    """
    Build a ProviderRegistry of ReplayProviders from a responses file.

    Raises:
        ConfigError: if the file is missing, not YAML, or malformed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read responses file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in responses file {path}: {e}") from e

    try:
        spec = ReplayFileSpec.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid responses file {path}: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e

    registry = ProviderRegistry()
    for model_id, model in spec.models.items():
        registry.register(ReplayProvider(
            model_id,
            [r.to_payload() for r in model.responses],
            display_name=model.display_name,
            vendor=model.vendor,
            cycle=cycle,
        ))
    return registry
