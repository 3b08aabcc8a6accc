"""
Audit Log Tests
----------------
Tests for the append-only audit trail.

Tests cover:
- Entry append and monotonic ids
- Chain integrity and tamper detection
- Run trail reconstruction
- Concurrent appends
"""

import json
import threading

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from agentgate.core.models import LogType, Phase
from agentgate.infra.audit import GENESIS_HASH, AuditLog, LogEntry


def _append(log, message="msg", run_id="run_a", entry_type=LogType.PLAN, data=None):
    return log.append(Phase.DISCUSSION, "gpt-5.2", "task-agent", entry_type, message, data, run_id=run_id)


class TestAppend:
    """Tests for audit log append operations."""

    def test_entry_fields(self, audit):
        entry = _append(audit, "Starting discussion phase", data={"k": "v"})
        assert entry.id == 1
        assert entry.phase is Phase.DISCUSSION
        assert entry.model_id == "gpt-5.2"
        assert entry.agent_name == "task-agent"
        assert entry.type is LogType.PLAN
        assert entry.data == {"k": "v"}
        assert entry.timestamp.tzinfo is not None
        assert len(entry.entry_hash) == 64  # SHA256 hex

    def test_ids_increase(self, audit):
        ids = [_append(audit).id for _ in range(5)]
        assert ids == [1, 2, 3, 4, 5]
        assert len(audit) == 5

    def test_entries_immutable(self, audit):
        entry = _append(audit)
        with pytest.raises(AttributeError):
            entry.message = "rewritten"

    def test_data_snapshot(self, audit):
        """Mutating the source object after append does not rewrite history."""
        payload = {"status": "approved"}
        entry = _append(audit, data=payload)
        payload["status"] = "executed"
        assert entry.data == {"status": "approved"}

    def test_non_string_keys(self, audit):
        entry = _append(audit, data={("task", "001"): "open", 7: {"nested": (1, 2)}})
        assert entry.data == {"('task', '001')": "open", "7": {"nested": [1, 2]}}
        assert audit.verify_chain().valid

    def test_circular_payload(self, audit):
        payload = {"name": "loop"}
        payload["self"] = payload
        entry = _append(audit, data=payload)
        assert entry.data == {"name": "loop", "self": "<circular>"}

    def test_arbitrary_objects_are_described(self, audit):
        class Opaque:
            def __repr__(self):
                return "Opaque()"

        entry = _append(audit, data={"value": Opaque()})
        assert entry.data == {"value": "Opaque()"}

    def test_no_delete_api(self):
        for name in ("delete", "remove", "update", "clear"):
            assert not hasattr(AuditLog, name)


class TestChain:
    """Tests for hash chain integrity."""

    def test_first_entry_links_genesis(self, audit):
        entry = _append(audit)
        assert entry.prev_hash == GENESIS_HASH

    def test_entries_linked(self, audit):
        first = _append(audit)
        second = _append(audit)
        assert second.prev_hash == first.entry_hash

    def test_verify_intact(self, audit):
        for i in range(10):
            _append(audit, f"entry {i}")
        result = audit.verify_chain()
        assert result.valid is True
        assert result.entries_checked == 10

    def test_verify_empty(self, audit):
        assert audit.verify_chain().valid is True

    def test_tamper_detected(self, audit):
        """Forging a stored entry breaks the chain at that entry."""
        for i in range(3):
            _append(audit, f"entry {i}")

        original = audit._entries[1]
        forged = LogEntry(
            id=original.id,
            timestamp=original.timestamp,
            phase=original.phase,
            model_id=original.model_id,
            agent_name=original.agent_name,
            type=LogType.EXECUTION,
            message="Executed: dropDatabase",
            data=original.data,
            run_id=original.run_id,
            prev_hash=original.prev_hash,
            entry_hash=original.entry_hash,
        )
        audit._entries[1] = forged

        result = audit.verify_chain()
        assert result.valid is False
        assert result.broken_at == 2


class TestRunTrail:
    """Tests for run reconstruction and export."""

    def test_for_run(self, audit):
        _append(audit, "a1", run_id="run_a")
        _append(audit, "b1", run_id="run_b")
        _append(audit, "a2", run_id="run_a")
        assert [e.message for e in audit.for_run("run_a")] == ["a1", "a2"]

    def test_export_json(self, audit):
        _append(audit, "a1", run_id="run_a")
        _append(audit, "b1", run_id="run_b")
        bundle = json.loads(audit.export_json(run_id="run_b"))
        assert bundle["entry_count"] == 1
        assert bundle["entries"][0]["message"] == "b1"
        assert bundle["entries"][0]["type"] == "plan"
        assert bundle["final_hash"] == bundle["entries"][0]["entryHash"]


class TestConcurrency:
    """Concurrent appends stay atomic and ordered."""

    def test_threaded_appends(self, audit):
        def worker(n):
            for i in range(50):
                _append(audit, f"{n}-{i}", run_id=f"run_{n}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        entries = audit.entries()
        assert len(entries) == 400
        assert [e.id for e in entries] == list(range(1, 401))
        assert audit.verify_chain().valid
        assert len(audit.for_run("run_3")) == 50


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
