# Infrastructure module - logging and the audit log
# The YAML catalogue loader lives in agentgate.infra.config; it depends on
# the orchestrator, so it is not imported here.

from .logging import (
    get_logger, configure_logging, RunContext,
    get_run_id, generate_run_id,
)
from .audit import AuditLog, LogEntry, VerifyResult, GENESIS_HASH

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "RunContext",
    "get_run_id",
    "generate_run_id",
    # Audit
    "AuditLog",
    "LogEntry",
    "VerifyResult",
    "GENESIS_HASH",
]
