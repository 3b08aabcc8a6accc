"""
Tool Executor
-------------
The capability that performs an approved call's business logic.

The orchestrator only ever hands this calls that are already approved;
the executor does no authorization of its own. Timeouts and failure
isolation are enforced by the caller.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional
import asyncio
import inspect
import logging
import time

from agentgate.core.models import ToolCall


class ToolExecutor(ABC):
    """Executes one approved tool call."""

    @abstractmethod
    async def execute(self, call: ToolCall) -> Any:
        """Run the call and return its result. Raise on failure."""


class HandlerToolExecutor(ToolExecutor):
    """
    Dispatch table of tool name -> handler.

    Handlers receive the call's arguments as keyword arguments.
    Coroutine functions are awaited; plain callables run in a worker
    thread so a blocking handler cannot stall the event loop.
    """

    def __init__(self, handlers: Optional[Mapping[str, Callable[..., Any]]] = None):
        self._handlers: Dict[str, Callable[..., Any]] = dict(handlers or {})
        self._logger = logging.getLogger("agentgate.tools.executor")

    def register(self, tool_name: str, handler: Callable[..., Any]) -> None:
        self._handlers[tool_name] = handler

    def has_handler(self, tool_name: str) -> bool:
        return tool_name in self._handlers

    async def execute(self, call: ToolCall) -> Any:
        handler = self._handlers.get(call.tool_name)
        if handler is None:
            raise LookupError(f"No handler registered for tool: {call.tool_name}")

        start = time.perf_counter()
        if inspect.iscoroutinefunction(handler):
            result = await handler(**call.arguments)
        else:
            result = await asyncio.to_thread(handler, **call.arguments)

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._logger.debug(
            f"Handler for {call.tool_name} returned in {elapsed_ms:.1f}ms",
            extra={"tool_name": call.tool_name, "execution_time_ms": elapsed_ms},
        )
        return result
