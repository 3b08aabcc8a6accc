"""
AgentGate Test Configuration
----------------------------
Shared fixtures and configuration for all tests.

Model behaviour in tests comes from ScriptedProvider: it returns whatever
result a test scripts, including calls to tools that do not exist.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agentgate.agents.config import AgentCatalogue, create_default_agents
from agentgate.core.models import StructuredResult, ToolCall
from agentgate.core.orchestrator import Orchestrator, OrchestratorConfig
from agentgate.infra.audit import AuditLog
from agentgate.providers.base import ModelProvider, ProviderRegistry
from agentgate.schema.output_schemas import create_default_schemas
from agentgate.tools.executor import ToolExecutor
from agentgate.tools.registry import create_default_tools


# =============================================================================
# Test doubles
# =============================================================================

class ScriptedProvider(ModelProvider):
    """Returns a scripted StructuredResult and records every prompt it saw."""

    def __init__(self, model_id: str, result: Optional[StructuredResult] = None):
        super().__init__(model_id)
        self.result = result or StructuredResult(success=True)
        self.calls: List[Dict[str, Any]] = []

    def script(self, data: Dict[str, Any], tool_calls: Sequence[tuple] = (), reasoning: str = "") -> None:
        self.result = StructuredResult(
            success=True,
            data=data,
            tool_calls=[ToolCall(name, dict(args)) for name, args in tool_calls],
            reasoning=reasoning or None,
        )

    async def generate_structured_output(self, system_prompt, user_prompt, tools, output_schema):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "tools": [t.name for t in tools],
            "output_schema": output_schema,
        })
        return self.result


class FailingProvider(ModelProvider):
    """Raises on every call, like a vendor outage."""

    def __init__(self, model_id: str, exc: Exception):
        super().__init__(model_id)
        self.exc = exc

    async def generate_structured_output(self, system_prompt, user_prompt, tools, output_schema):
        raise self.exc


class SlowProvider(ModelProvider):
    """Never answers within a short timeout."""

    async def generate_structured_output(self, system_prompt, user_prompt, tools, output_schema):
        await asyncio.sleep(10)
        return StructuredResult(success=True)


class RecordingExecutor(ToolExecutor):
    """Records invocations; fails or stalls on the configured tool names."""

    def __init__(self, fail_on: Sequence[str] = (), hang_on: Sequence[str] = ()):
        self.invocations: List[str] = []
        self.fail_on = set(fail_on)
        self.hang_on = set(hang_on)

    async def execute(self, call: ToolCall) -> Any:
        self.invocations.append(call.tool_name)
        if call.tool_name in self.fail_on:
            raise RuntimeError(f"backend rejected {call.tool_name}")
        if call.tool_name in self.hang_on:
            await asyncio.sleep(10)
        return {"success": True, "message": f"Executed {call.tool_name} successfully"}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def registry():
    return create_default_tools()


@pytest.fixture
def schemas():
    return create_default_schemas()


@pytest.fixture
def agents(registry, schemas):
    return AgentCatalogue(create_default_agents(), schemas, registry=registry)


@pytest.fixture
def audit():
    return AuditLog()


@pytest.fixture
def scripted_providers():
    """One ScriptedProvider per built-in model id."""
    return {
        model_id: ScriptedProvider(model_id)
        for model_id in ("gpt-5.2", "claude-opus-4.6", "gemini-3")
    }


@pytest.fixture
def providers(scripted_providers):
    return ProviderRegistry(scripted_providers.values())


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def orchestrator(registry, agents, providers, executor, audit):
    return Orchestrator(
        registry=registry,
        agents=agents,
        providers=providers,
        executor=executor,
        audit=audit,
        config=OrchestratorConfig(provider_timeout_seconds=1.0),
    )


@pytest.fixture
def task_update_data():
    """Output data that satisfies the TaskUpdate schema exactly."""
    return {"taskId": "task-001", "updates": {"status": "done", "priority": "high"}}
