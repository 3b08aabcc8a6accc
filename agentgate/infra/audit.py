"""
Audit Log
---------
Append-only, timestamped record of every decision made during a run.

Design:
- Append-only (no update, no delete in code)
- Ids assigned from a monotonic counter under a lock, so concurrent
  runs can append without interleaving corruption
- SHA-256 chain over canonical JSON makes tampering evident
- run_id on every entry for full run reconstruction

Persistence is left to consumers: export_json() hands the ordered trail
to whatever sink stores it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import hashlib
import json
import logging
import threading

from agentgate.core.models import LogType, Phase


GENESIS_HASH = "0" * 64


def _json_default(value: Any) -> Any:
    if hasattr(value, "to_dict") and not isinstance(value, type):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def _plain(value: Any, active: Tuple[int, ...] = ()) -> Any:
    """Reduce a payload to JSON types: string keys, lists, no cycles."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if id(value) in active:
        return "<circular>"
    active = active + (id(value),)

    if hasattr(value, "to_dict") and not isinstance(value, type):
        return _plain(value.to_dict(), active)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v, active) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v, active) for v in value]
    return repr(value)


def _snapshot(data: Any) -> Any:
    """
    Detach entry payloads from live objects so later mutation cannot rewrite history.

    Never raises: tool results and model arguments are arbitrary, and an
    unencodable payload must not abort the phase that logs it.
    """
    if data is None:
        return None
    try:
        return json.loads(json.dumps(_plain(data), sort_keys=True))
    except (TypeError, ValueError, RecursionError):
        return f"<unserializable {type(data).__name__}>"


@dataclass(frozen=True)
class LogEntry:
    """
    A single audit entry. Immutable once appended.

    Each entry contains:
    - Monotonic id and UTC timestamp
    - Phase, model, agent and run_id for traceability
    - prev_hash / entry_hash for chain integrity
    """
    id: int
    timestamp: datetime
    phase: Phase
    model_id: str
    agent_name: str
    type: LogType
    message: str
    data: Any = None
    run_id: str = ""
    prev_hash: str = GENESIS_HASH
    entry_hash: str = ""

    def canonical_payload(self) -> bytes:
        """
        Canonical serialization for hashing.

        Fixed field set, sorted keys, explicit UTF-8.
        """
        payload = {
            "id": self.id,
            "prev_hash": self.prev_hash,
            "run_id": self.run_id,
            "timestamp": self.timestamp.isoformat(),
            "phase": self.phase.value,
            "model_id": self.model_id,
            "agent_name": self.agent_name,
            "type": self.type.value,
            "message": self.message,
            "data": self.data,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=_json_default).encode("utf-8")

    def compute_hash(self) -> str:
        return hashlib.sha256(self.canonical_payload()).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "runId": self.run_id,
            "timestamp": self.timestamp.isoformat(),
            "phase": self.phase.value,
            "model": self.model_id,
            "agent": self.agent_name,
            "type": self.type.value,
            "message": self.message,
            "data": self.data,
            "prevHash": self.prev_hash,
            "entryHash": self.entry_hash,
        }


@dataclass
class VerifyResult:
    """Result of chain verification."""
    valid: bool
    entries_checked: int
    broken_at: Optional[int] = None  # Entry id where chain broke
    error: Optional[str] = None


class AuditLog:
    """
    Append-only audit log shared by every run in the process.

    Guarantees:
    - Entries are never edited or removed
    - Ids strictly increase in append order
    - Chain integrity verifiable with verify_chain()
    """

    def __init__(self):
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()
        self._next_id = 1
        self._logger = logging.getLogger("agentgate.infra.audit")

    def append(
        self,
        phase: Phase,
        model_id: str,
        agent_name: str,
        entry_type: LogType,
        message: str,
        data: Any = None,
        run_id: str = "",
    ) -> LogEntry:
        """Append an entry and return it."""
        data = _snapshot(data)

        with self._lock:
            prev_hash = self._entries[-1].entry_hash if self._entries else GENESIS_HASH
            entry = LogEntry(
                id=self._next_id,
                timestamp=datetime.now(timezone.utc),
                phase=phase,
                model_id=model_id,
                agent_name=agent_name,
                type=entry_type,
                message=message,
                data=data,
                run_id=run_id,
                prev_hash=prev_hash,
            )
            entry = _with_hash(entry)
            self._entries.append(entry)
            self._next_id += 1

        self._logger.debug(
            f"Audit: {entry.type.value} | {entry.phase.value} | {entry.agent_name} | {message}",
            extra={"run_id": run_id or None, "entry_type": entry.type.value},
        )
        return entry

    def entries(self) -> Tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def for_run(self, run_id: str) -> Tuple[LogEntry, ...]:
        """All entries for one run, in append order."""
        with self._lock:
            return tuple(e for e in self._entries if e.run_id == run_id)

    def verify_chain(self) -> VerifyResult:
        """
        Verify hash chain integrity.

        Returns VerifyResult with:
        - valid: True if chain is intact
        - broken_at: Entry id where chain broke (if any)
        """
        entries = self.entries()
        expected_prev = GENESIS_HASH

        for checked, entry in enumerate(entries):
            if entry.prev_hash != expected_prev:
                return VerifyResult(
                    valid=False,
                    entries_checked=checked,
                    broken_at=entry.id,
                    error=f"prev_hash mismatch at entry {entry.id}",
                )
            if entry.entry_hash != entry.compute_hash():
                return VerifyResult(
                    valid=False,
                    entries_checked=checked,
                    broken_at=entry.id,
                    error=f"entry_hash mismatch at entry {entry.id}",
                )
            expected_prev = entry.entry_hash

        return VerifyResult(valid=True, entries_checked=len(entries))

    def export_json(self, run_id: Optional[str] = None) -> str:
        """Export entries (optionally one run's) as a JSON bundle."""
        entries = self.for_run(run_id) if run_id else self.entries()
        bundle = {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "entry_count": len(entries),
            "final_hash": entries[-1].entry_hash if entries else None,
            "entries": [e.to_dict() for e in entries],
        }
        return json.dumps(bundle, indent=2, sort_keys=True, default=_json_default)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _with_hash(entry: LogEntry) -> LogEntry:
    object.__setattr__(entry, "entry_hash", entry.compute_hash())
    return entry
