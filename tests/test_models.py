"""
Run Model Tests
---------------
Tests for ToolCall status monotonicity and StructuredResult parsing.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from agentgate.core.errors import InvalidTransitionError, ToolFailure
from agentgate.core.models import StructuredResult, ToolCall, ToolCallStatus


class TestToolCallStatus:
    """pending -> approved | rejected; approved -> executed; nothing else."""

    def test_starts_pending(self):
        call = ToolCall("readTask", {"taskId": "task-001"})
        assert call.status is ToolCallStatus.PENDING
        assert call.result is None

    def test_approve_then_execute(self):
        call = ToolCall("readTask")
        call.approve()
        call.mark_executed({"ok": True})
        assert call.status is ToolCallStatus.EXECUTED
        assert call.result == {"ok": True}
        assert call.succeeded

    def test_reject_records_reason(self):
        call = ToolCall("dropDatabase")
        call.reject("BLOCKED: nope")
        assert call.status is ToolCallStatus.REJECTED
        assert call.block_reason == "BLOCKED: nope"

    def test_execute_requires_approval(self):
        call = ToolCall("readTask")
        with pytest.raises(InvalidTransitionError):
            call.mark_executed("result")
        assert call.status is ToolCallStatus.PENDING

    @pytest.mark.parametrize("finish", ["reject", "execute"])
    def test_terminal_statuses(self, finish):
        call = ToolCall("readTask")
        if finish == "reject":
            call.reject("BLOCKED")
        else:
            call.approve()
            call.mark_executed(None)

        with pytest.raises(InvalidTransitionError):
            call.approve()
        with pytest.raises(InvalidTransitionError):
            call.reject("again")
        with pytest.raises(InvalidTransitionError):
            call.mark_executed("again")

    def test_rejected_cannot_be_approved(self):
        call = ToolCall("updateTask")
        call.reject("BLOCKED")
        with pytest.raises(InvalidTransitionError):
            call.approve()

    def test_status_not_assignable(self):
        call = ToolCall("readTask")
        with pytest.raises(AttributeError):
            call.status = ToolCallStatus.EXECUTED

    def test_mark_failed(self):
        call = ToolCall("updateTask")
        call.approve()
        call.mark_failed(ToolFailure.from_exception(RuntimeError("backend down")))
        assert call.status is ToolCallStatus.EXECUTED
        assert call.result is None
        assert call.failure.error_type == "RuntimeError"
        assert call.succeeded is False
        assert call.to_dict()["failure"]["message"] == "backend down"


class TestProposal:

    def test_arguments_copied(self):
        args = {"updates": {"status": "done"}}
        call = ToolCall.proposal("updateTask", args)
        args["updates"]["status"] = "open"
        assert call.arguments == {"updates": {"status": "done"}}
        assert call.status is ToolCallStatus.PENDING

    def test_unique_ids(self):
        assert ToolCall("a").call_id != ToolCall("a").call_id


class TestStructuredResult:

    def test_from_dict_camel_case(self):
        result = StructuredResult.from_dict({
            "success": True,
            "data": {"taskId": "task-001"},
            "toolCalls": [{"toolName": "readTask", "arguments": {"taskId": "task-001"}}],
            "reasoning": "Read it",
            "rawOutput": "{}",
        })
        assert result.data == {"taskId": "task-001"}
        assert [c.tool_name for c in result.tool_calls] == ["readTask"]
        assert result.tool_calls[0].status is ToolCallStatus.PENDING
        assert result.reasoning == "Read it"
        assert result.raw_output == "{}"

    def test_from_dict_snake_case(self):
        result = StructuredResult.from_dict({"tool_calls": [{"tool_name": "listTasks"}]})
        assert result.success is True
        assert result.tool_calls[0].tool_name == "listTasks"
        assert result.tool_calls[0].arguments == {}

    def test_to_dict(self):
        result = StructuredResult(success=True, data={"a": 1}, tool_calls=[ToolCall("readTask")])
        data = result.to_dict()
        assert data["toolCalls"][0]["toolName"] == "readTask"
        assert data["toolCalls"][0]["status"] == "pending"
        assert "reasoning" not in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
