"""Audit trail of registry mutations.

Each mutating registry call appends one JSON line to ``audit.jsonl`` under
the trail directory: who called, which operation, what it targeted
(``unit:<id>`` or ``calibration:<counter>``) and, on failure, the error
kind. Reads are never recorded.
"""

from __future__ import annotations

import csv
import io
import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

CSV_COLUMNS = ["id", "recorded_at", "caller", "operation", "target", "error_kind"]


def unit_target(unit_id: Any) -> str:
    return f"unit:{unit_id}"


def calibration_target(counter: str) -> str:
    return f"calibration:{counter}"


@dataclass
class AuditEntry:
    """One recorded registry mutation."""

    id: str
    recorded_at: str
    caller: str
    operation: str
    target: str
    details: dict[str, Any] = field(default_factory=dict)
    error_kind: str = ""

    @property
    def ok(self) -> bool:
        return not self.error_kind


class AuditLogger:
    """Append-only JSONL trail, newest entries last on disk."""

    FILE_NAME = "audit.jsonl"

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = (
            Path(base_dir) if base_dir else Path.home() / ".unitreg" / "audit"
        )
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self.path = self._base_dir / self.FILE_NAME

    def record(
        self,
        caller: str,
        operation: str,
        target: str,
        details: Optional[dict[str, Any]] = None,
        error_kind: str = "",
    ) -> AuditEntry:
        """Append an entry. Raises OSError if the trail cannot be written."""
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            recorded_at=datetime.now(timezone.utc).isoformat(),
            caller=caller,
            operation=operation,
            target=target,
            details=details or {},
            error_kind=error_kind,
        )
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry), default=str) + "\n")
        return entry

    def _load(self) -> list[AuditEntry]:
        if not self.path.exists():
            return []
        entries: list[AuditEntry] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            try:
                entries.append(AuditEntry(**json.loads(line)))
            except (json.JSONDecodeError, TypeError):
                # torn or foreign line
                continue
        return entries

    def events(
        self,
        *,
        caller: Optional[str] = None,
        operation: Optional[str] = None,
        unit_id: Optional[int] = None,
        failed_only: bool = False,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return matching entries, most recent first."""
        target = unit_target(unit_id) if unit_id is not None else None
        matched = [
            e
            for e in reversed(self._load())
            if (caller is None or e.caller == caller)
            and (operation is None or e.operation == operation)
            and (target is None or e.target == target)
            and (not failed_only or not e.ok)
        ]
        return matched[:limit]

    def export(self, fmt: str = "json", **filters: Any) -> str:
        """Render matching entries as ``json`` or ``csv``."""
        entries = self.events(limit=filters.pop("limit", 10000), **filters)

        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.writer(buf)
            writer.writerow(CSV_COLUMNS)
            for e in entries:
                writer.writerow([getattr(e, col) for col in CSV_COLUMNS])
            return buf.getvalue()

        return json.dumps([asdict(e) for e in entries], indent=2, default=str)
