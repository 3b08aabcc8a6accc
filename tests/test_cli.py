"""
CLI Tests
---------
Drives the text-mode runner end to end with the shipped replay file.
"""

import io
import logging
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console

from agentgate import cli


@pytest.fixture
def output(monkeypatch):
    """Capture everything the CLI prints."""
    buffer = io.StringIO()
    monkeypatch.setattr(cli, "console", Console(file=buffer, width=200, color_system=None))
    return buffer


@pytest.fixture
def responses_file(project_root):
    return str(project_root / "config" / "responses.yaml")


class TestListing:
    """agents / tools subcommands."""

    def test_agents(self, output):
        assert cli.main(["agents"]) == 0
        text = output.getvalue()
        assert "task-agent" in text
        assert "readonly-agent" in text

    def test_tools(self, output):
        assert cli.main(["tools"]) == 0
        assert "updateTask" in output.getvalue()

    def test_catalogue_option_after_subcommand(self, output, project_root):
        path = str(project_root / "config" / "catalogue.yaml")
        assert cli.main(["agents", "--catalogue", path]) == 0
        assert "workflow-agent" in output.getvalue()

    def test_missing_catalogue_is_config_error(self, output, tmp_path):
        assert cli.main(["agents", "-c", str(tmp_path / "nope.yaml")]) == 2
        assert "Configuration error" in output.getvalue()


class TestRun:
    """run subcommand."""

    def test_confirmed_run_completes(self, output, responses_file):
        code = cli.main([
            "run", "--agent", "task-agent", "--input", "Mark task-001 done",
            "--responses", responses_file, "--yes",
        ])

        assert code == 0
        text = output.getvalue()
        assert "dropDatabase" in text
        assert "Completed" in text

    def test_declined_run_executes_nothing(self, output, responses_file, monkeypatch):
        monkeypatch.setattr(cli.Confirm, "ask", lambda *a, **k: False)

        code = cli.main([
            "run", "--agent", "task-agent", "--input", "Mark task-001 done",
            "--responses", responses_file,
        ])

        assert code == 0
        assert "Nothing was executed" in output.getvalue()

    def test_run_history_logged_at_debug(self, output, responses_file, caplog):
        caplog.set_level(logging.DEBUG, logger="agentgate.cli")

        cli.main([
            "run", "--agent", "task-agent", "--input", "Mark task-001 done",
            "--responses", responses_file, "--yes",
        ])

        summaries = [r.getMessage() for r in caplog.records if r.name == "agentgate.cli"]
        assert any("AWAITING_CONFIRMATION" in s and "COMPLETED" in s for s in summaries)

    def test_unknown_agent(self, output, responses_file):
        code = cli.main([
            "run", "--agent", "ghost-agent", "--input", "x",
            "--responses", responses_file, "--yes",
        ])

        assert code == 2
        assert "Unknown agent: ghost-agent" in output.getvalue()

    def test_missing_responses_file(self, output, tmp_path):
        code = cli.main([
            "run", "--agent", "task-agent", "--input", "x",
            "--responses", str(tmp_path / "missing.yaml"), "--yes",
        ])

        assert code == 2

    def test_echo_handlers_report_call(self, registry):
        handlers = cli.echo_handlers(registry)

        assert set(handlers) == set(registry.names())
        result = handlers["readTask"](taskId="task-001")
        assert result["message"] == "Executed readTask successfully"
        assert result["arguments"] == {"taskId": "task-001"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
