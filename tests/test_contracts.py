"""
Contract Tests
---------------
API surface tests.

These tests verify:
- Public symbols exist
- Required types are exported
- Breaking changes cause test failure
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestCoreErrorsAPI:
    """Verify core.errors exports."""

    def test_exports_exist(self):
        from agentgate.core.errors import (
            AgentGateError,
            ErrorCategory,
            ConfigError,
            UnknownAgentError,
            UnknownModelError,
            ProviderError,
            InvalidTransitionError,
            ToolFailure,
        )

        assert AgentGateError is not None
        assert ToolFailure is not None

    def test_error_category_values(self):
        from agentgate.core.errors import ErrorCategory

        # These values must remain stable
        for name in (
            "CONFIG_ERROR", "PERMISSION_ERROR", "SCHEMA_VALIDATION_ERROR",
            "PROVIDER_ERROR", "TOOL_EXECUTION_ERROR",
        ):
            assert hasattr(ErrorCategory, name)

    def test_hierarchy(self):
        from agentgate.core.errors import (
            AgentGateError, ConfigError, ErrorCategory, ProviderError,
            UnknownAgentError, UnknownModelError,
        )

        assert issubclass(UnknownAgentError, ConfigError)
        assert issubclass(UnknownModelError, ConfigError)
        assert issubclass(ProviderError, AgentGateError)
        assert ConfigError.category is ErrorCategory.CONFIG_ERROR
        assert ProviderError.category is ErrorCategory.PROVIDER_ERROR


class TestLogTypeAPI:
    """Audit entry types consumed by interfaces."""

    def test_values(self):
        from agentgate.core.models import LogType

        assert {t.value for t in LogType} == {
            "plan", "tool_call", "validation", "execution", "error", "blocked",
        }

    def test_statuses(self):
        from agentgate.core.models import ToolCallStatus

        assert {s.value for s in ToolCallStatus} == {"pending", "approved", "rejected", "executed"}


class TestPackageAPI:
    """Verify top-level re-exports."""

    def test_exports_exist(self):
        import agentgate

        for name in agentgate.__all__:
            assert hasattr(agentgate, name), name

    def test_core_entry_points(self):
        from agentgate import (
            Orchestrator, OrchestratorConfig, RunRequest, ToolRegistry,
            AgentCatalogue, ProviderRegistry, ModelProvider, ToolExecutor,
            AuditLog, validate, validate_tool_access, get_permitted_tools,
            load_catalogue, default_catalogue,
        )

        assert Orchestrator is not None


class TestVersion:
    """Verify version is consistent."""

    def test_pyproject_matches_package(self):
        import tomllib
        import agentgate

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"

        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)

        assert data["project"]["version"] == agentgate.__version__
        assert data["project"]["name"] == "agentgate"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
