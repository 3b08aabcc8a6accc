"""
Tool Executor Tests
-------------------
Tests for the handler-table executor.
"""

import threading

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from agentgate.core.models import ToolCall
from agentgate.tools.executor import HandlerToolExecutor


class TestHandlerToolExecutor:

    @pytest.mark.asyncio
    async def test_sync_handler_runs_off_loop(self):
        """Plain callables run in a worker thread."""
        seen = {}

        def read_task(taskId):
            seen["thread"] = threading.current_thread()
            return {"id": taskId, "status": "open"}

        executor = HandlerToolExecutor({"readTask": read_task})
        result = await executor.execute(ToolCall("readTask", {"taskId": "task-001"}))

        assert result == {"id": "task-001", "status": "open"}
        assert seen["thread"] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_async_handler_awaited(self):
        async def list_tasks(filter=None):
            return [{"id": "task-001"}]

        executor = HandlerToolExecutor({"listTasks": list_tasks})
        assert await executor.execute(ToolCall("listTasks")) == [{"id": "task-001"}]

    @pytest.mark.asyncio
    async def test_missing_handler(self):
        executor = HandlerToolExecutor()
        with pytest.raises(LookupError, match="createWorkflow"):
            await executor.execute(ToolCall("createWorkflow"))

    @pytest.mark.asyncio
    async def test_handler_errors_propagate(self):
        """The executor raises; isolation is the orchestrator's job."""
        def update_task(taskId, updates):
            raise RuntimeError("task locked")

        executor = HandlerToolExecutor()
        executor.register("updateTask", update_task)
        assert executor.has_handler("updateTask")

        with pytest.raises(RuntimeError, match="task locked"):
            await executor.execute(ToolCall("updateTask", {"taskId": "t", "updates": {}}))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
