"""
Run Orchestrator
----------------
Two-phase coordinator: every run flows through here.

Discussion: resolve the agent and its provider, show the provider only
the tools the agent may legally call, classify every proposed call and
validate the structured data. Nothing executes.

Execution: only after an explicit confirmation. Re-validate the data
from scratch, then run the approved calls one at a time, in approval
order. A failing call is recorded on that call and does not stop its
siblings.

Non-negotiable rule: no vendor-specific logic above the ModelProvider
boundary.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence
import asyncio
import copy

from agentgate.agents.config import AgentCatalogue, AgentConfig
from agentgate.infra.audit import AuditLog, LogEntry
from agentgate.infra.logging import RunContext, generate_run_id, get_logger
from agentgate.providers.base import ModelProvider, ProviderRegistry
from agentgate.schema.validator import ValidationResult, thaw, validate
from agentgate.tools.executor import ToolExecutor
from agentgate.tools.permissions import get_permitted_tools, validate_tool_access
from agentgate.tools.registry import ToolDefinition, ToolRegistry

from .errors import ConfigError, ProviderError, ToolFailure
from .models import (
    DiscussionResult, ExecutionResult, LogType, Phase, RunRequest,
    StructuredResult, ToolCall, ToolCallStatus,
)
from .state_machine import RunState, RunStateMachine


@dataclass
class OrchestratorConfig:
    """
    Configuration for the orchestrator. None disables a timeout.

    The tool timeout is opt-in: Execution is not cancelled by default, and
    a call that times out may still complete its side effect later.
    """
    provider_timeout_seconds: Optional[float] = 30.0
    tool_timeout_seconds: Optional[float] = None
    validate_tool_arguments: bool = False


class _RunLog:
    """Appends one phase's entries to the shared audit log and keeps its own copy."""

    def __init__(self, audit: AuditLog, phase: Phase, model_id: str, agent_name: str, run_id: str):
        self._audit = audit
        self.phase = phase
        self.model_id = model_id
        self.agent_name = agent_name
        self.run_id = run_id
        self.entries: List[LogEntry] = []

    def add(self, entry_type: LogType, message: str, data: Any = None) -> LogEntry:
        entry = self._audit.append(
            self.phase, self.model_id, self.agent_name, entry_type, message, data, run_id=self.run_id,
        )
        self.entries.append(entry)
        return entry


class Orchestrator:
    """
    Central coordinator for agent runs.

    Responsibilities:
    - Resolve agent config and model provider (fatal if unknown)
    - Enforce the visibility and enforcement permission boundaries
    - Validate structured output, and re-validate before execution
    - Drive each run's state machine
    - Emit the audit trail

    Shared state is read-only (registry, agents, providers). The only
    per-run mutable state is the run's ToolCall list and its audit entries.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        agents: AgentCatalogue,
        providers: ProviderRegistry,
        executor: ToolExecutor,
        audit: Optional[AuditLog] = None,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.registry = registry
        self.agents = agents
        self.providers = providers
        self.executor = executor
        self.audit = audit if audit is not None else AuditLog()
        self.config = config or OrchestratorConfig()
        self._logger = get_logger("core.orchestrator")

    # ------------------------------------------------------------------
    # Discussion phase
    # ------------------------------------------------------------------

    async def run_discussion(self, request: RunRequest) -> DiscussionResult:
        """
        Plan without side effects.

        Raises:
            UnknownAgentError / UnknownModelError: before any log entry
            ProviderError: after the run's error entry is appended
        """
        agent = self.agents.get(request.agent)
        model_id = request.model or agent.model_id
        provider = self.providers.get(model_id)
        output_schema = self.agents.output_schema(agent)

        run_id = generate_run_id()
        state = RunStateMachine(run_id=run_id)
        run = _RunLog(self.audit, Phase.DISCUSSION, model_id, agent.name, run_id)

        with RunContext(run_id):
            self._logger.info(f"Discussion started: agent={agent.name} model={model_id}")
            run.add(LogType.PLAN, f"Starting discussion phase with {provider.display_name}")

            permitted = get_permitted_tools(self.registry, agent.allowed_tools, agent.permissions)
            run.add(LogType.PLAN, f"Permitted tools: [{', '.join(t.name for t in permitted)}]")

            try:
                raw = await self._call_provider(provider, agent, request, permitted, output_schema)
            except ProviderError as e:
                run.add(LogType.ERROR, f"Provider error: {e.message}", {"model": model_id, **e.details})
                state.transition(RunState.ABORTED, "Provider failure", {"model": model_id})
                e.logs = tuple(run.entries)
                self._logger.error(f"Discussion aborted: {e.message}")
                raise

            # Fresh, pending, orchestrator-owned calls; the provider's objects are never reused
            calls = [ToolCall.proposal(c.tool_name, c.arguments) for c in raw.tool_calls]
            result = StructuredResult(
                success=raw.success,
                data=copy.deepcopy(raw.data),
                tool_calls=calls,
                reasoning=raw.reasoning,
                raw_output=raw.raw_output,
            )

            approved: List[ToolCall] = []
            blocked: List[ToolCall] = []
            for call in calls:
                reason = self._classify(call, agent)
                if reason is not None:
                    call.reject(reason)
                    blocked.append(call)
                    run.add(LogType.BLOCKED, reason, call.to_dict())
                    self._logger.warning(reason, extra={"tool_name": call.tool_name})
                else:
                    call.approve()
                    approved.append(call)
                    run.add(LogType.TOOL_CALL, f"Tool call approved: {call.tool_name}", call.to_dict())
                    self._logger.info(
                        f"Tool call approved: {call.tool_name}", extra={"tool_name": call.tool_name}
                    )

            validation = validate(result.data, output_schema)
            if validation.valid:
                run.add(LogType.VALIDATION, "✓ Output matches JSON schema", validation.to_dict())
            else:
                run.add(
                    LogType.VALIDATION,
                    f"✗ Schema validation failed: {'; '.join(validation.messages)}",
                    validation.to_dict(),
                )
                self._logger.warning(f"Output failed validation: {len(validation.errors)} error(s)")

            run.add(
                LogType.PLAN,
                f"Discussion complete. {len(approved)} approved, {len(blocked)} blocked.",
            )
            state.transition(
                RunState.AWAITING_CONFIRMATION,
                "Discussion complete",
                {"approved": len(approved), "blocked": len(blocked), "valid": validation.valid},
            )

        return DiscussionResult(
            run_id=run_id,
            agent_name=agent.name,
            model_id=model_id,
            result=result,
            logs=tuple(run.entries),
            validation=validation,
            approved_calls=approved,
            blocked_calls=blocked,
            state=state,
        )

    async def _call_provider(
        self,
        provider: ModelProvider,
        agent: AgentConfig,
        request: RunRequest,
        permitted: Sequence[ToolDefinition],
        output_schema: Mapping[str, Any],
    ) -> StructuredResult:
        """The sole suspension point of the Discussion phase."""
        timeout = self.config.provider_timeout_seconds
        try:
            result = await asyncio.wait_for(
                provider.generate_structured_output(
                    system_prompt=agent.instructions,
                    user_prompt=request.input,
                    tools=list(permitted),
                    output_schema=thaw(output_schema),
                ),
                timeout=timeout,
            )
        except ProviderError:
            raise
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"{provider.model_id} did not respond within {timeout}s",
                model_id=provider.model_id,
                details={"timeout_seconds": timeout},
            ) from e
        except Exception as e:
            raise ProviderError(
                f"{provider.model_id} failed: {e}",
                model_id=provider.model_id,
                details={"error_type": type(e).__name__},
            ) from e

        if not isinstance(result, StructuredResult):
            raise ProviderError(
                f"{provider.model_id} returned {type(result).__name__}, expected StructuredResult",
                model_id=provider.model_id,
                details={"error_type": "ContractViolation"},
            )
        if not result.success:
            raise ProviderError(
                f"{provider.model_id} reported an unsuccessful result",
                model_id=provider.model_id,
                details={"raw_output": result.raw_output},
            )
        return result

    def _classify(self, call: ToolCall, agent: AgentConfig) -> Optional[str]:
        """Return a block message, or None if the call may be approved."""
        block = validate_tool_access(self.registry, call.tool_name, agent.allowed_tools, agent.permissions)
        if block is not None:
            return block.message

        if self.config.validate_tool_arguments:
            tool = self.registry.get(call.tool_name)
            checked = validate(call.arguments, tool.parameters)
            if not checked.valid:
                return (
                    f'BLOCKED: Arguments for "{call.tool_name}" failed validation: '
                    f"{'; '.join(checked.messages)}"
                )
        return None

    # ------------------------------------------------------------------
    # Execution phase
    # ------------------------------------------------------------------

    async def run_execution(
        self,
        discussion: DiscussionResult,
        request: Optional[RunRequest] = None,
    ) -> ExecutionResult:
        """
        Execute a confirmed plan. Calling this is the confirmation signal.

        Raises:
            ConfigError: if the request names a different agent than the run
            InvalidTransitionError: if the run is not awaiting confirmation
        """
        agent_name = request.agent if request is not None else discussion.agent_name
        agent = self.agents.get(agent_name)
        if agent.name != discussion.agent_name:
            raise ConfigError(
                f"Execution request names agent {agent.name} but run {discussion.run_id} "
                f"belongs to {discussion.agent_name}",
                details={"run_id": discussion.run_id},
            )

        state = discussion.state
        state.transition(RunState.EXECUTION, "User confirmed")
        run = _RunLog(self.audit, Phase.EXECUTION, discussion.model_id, agent.name, discussion.run_id)

        with RunContext(discussion.run_id):
            run.add(LogType.EXECUTION, "User confirmed, entering execution phase")

            # Never trust the Discussion verdict
            validation = validate(discussion.result.data, self.agents.output_schema(agent))
            if validation.valid:
                run.add(LogType.VALIDATION, "✓ Re-validation passed", validation.to_dict())
            else:
                run.add(
                    LogType.VALIDATION,
                    f"✗ Re-validation failed: {'; '.join(validation.messages)}",
                    validation.to_dict(),
                )
                run.add(LogType.ERROR, "Execution aborted: output failed re-validation")
                state.transition(RunState.ABORTED, "Re-validation failed")
                self._logger.warning("Execution aborted: output failed re-validation")
                return self._execution_result(discussion, run, validation)

            for call in discussion.approved_calls:
                await self._execute_call(call, run)

            failed = sum(1 for c in discussion.approved_calls if c.failure is not None)
            summary = f"Execution complete. {len(discussion.approved_calls)} tool calls executed."
            if failed:
                summary += f" {failed} failed."
            run.add(LogType.EXECUTION, summary)
            state.transition(
                RunState.COMPLETED,
                "Execution finished",
                {"executed": len(discussion.approved_calls), "failed": failed},
            )

        return self._execution_result(discussion, run, validation)

    async def _execute_call(self, call: ToolCall, run: _RunLog) -> None:
        """Run one approved call. Failures are recorded on the call, never raised."""
        if call.status is not ToolCallStatus.APPROVED:
            # Only approved calls can reach the executor
            run.add(LogType.ERROR, f"Skipped {call.tool_name}: status is {call.status.value}", call.to_dict())
            return

        timeout = self.config.tool_timeout_seconds
        details = {"tool": call.tool_name, "call_id": call.call_id}
        try:
            output = await asyncio.wait_for(self.executor.execute(call), timeout=timeout)
        except asyncio.TimeoutError:
            # The executor may still be running; its effect cannot be ruled out
            failure = ToolFailure(
                message=f"Tool {call.tool_name} timed out after {timeout}s; outcome unknown",
                error_type="TimeoutError",
                details={**details, "outcome": "unknown", "timeout_seconds": timeout},
            )
        except Exception as e:
            failure = ToolFailure.from_exception(e, details=details)
        else:
            call.mark_executed(output)
            run.add(LogType.EXECUTION, f"Executed: {call.tool_name}", call.to_dict())
            self._logger.info(f"Executed: {call.tool_name}", extra={"tool_name": call.tool_name})
            return

        call.mark_failed(failure)
        run.add(LogType.ERROR, f"Execution failed: {call.tool_name}: {failure.message}", call.to_dict())
        self._logger.warning(
            f"Tool {call.tool_name} failed: {failure.message}", extra={"tool_name": call.tool_name}
        )

    def _execution_result(
        self,
        discussion: DiscussionResult,
        run: _RunLog,
        validation: ValidationResult,
    ) -> ExecutionResult:
        return ExecutionResult(
            run_id=discussion.run_id,
            agent_name=discussion.agent_name,
            model_id=discussion.model_id,
            result=discussion.result,
            logs=tuple(discussion.logs) + tuple(run.entries),
            validation=validation,
            approved_calls=list(discussion.approved_calls),
            blocked_calls=list(discussion.blocked_calls),
            state=discussion.state,
        )

    def abandon(self, discussion: DiscussionResult, reason: str = "Plan discarded") -> None:
        """
        Discard an unconfirmed plan. Nothing ran, so nothing needs undoing.

        Raises:
            InvalidTransitionError: if the run is already terminal
        """
        discussion.state.transition(RunState.ABORTED, reason)
        self._logger.info(f"Run {discussion.run_id} abandoned: {reason}")
