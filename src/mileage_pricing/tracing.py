"""Structured events recorded while a training run progresses."""

from __future__ import annotations

import csv
import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, fields
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class TraceEvent:
    """One step of a run: which component did what, and at which iteration."""

    seq: int
    timestamp: str
    component: str
    action: str
    status: str = "ok"
    iteration: int | None = None
    elapsed_ms: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def as_row(self) -> dict[str, Any]:
        """Flatten for CSV: empty cells for unset values, details as JSON."""
        row = asdict(self)
        row["iteration"] = "" if self.iteration is None else self.iteration
        row["elapsed_ms"] = "" if self.elapsed_ms is None else self.elapsed_ms
        row["details"] = (
            json.dumps(self.details, sort_keys=True, default=str) if self.details else ""
        )
        return row


TraceSink = Callable[[TraceEvent], None]


class RunTraceCollector:
    """Ordered event log for one run, optionally streamed as events arrive."""

    def __init__(self) -> None:
        self._events: list[TraceEvent] = []
        self._live_sink: TraceSink | None = None

    def set_live_sink(self, sink: TraceSink | None) -> None:
        self._live_sink = sink

    def log(
        self,
        component: str,
        action: str,
        *,
        status: str = "ok",
        iteration: int | None = None,
        elapsed_ms: int | None = None,
        **details: Any,
    ) -> TraceEvent:
        """Append an event; keyword arguments beyond the known ones become details."""
        event = TraceEvent(
            seq=len(self._events) + 1,
            timestamp=datetime.now(UTC).isoformat(),
            component=component,
            action=action,
            status=status,
            iteration=iteration,
            elapsed_ms=elapsed_ms,
            details=details,
        )
        self._events.append(event)
        if self._live_sink is not None:
            self._live_sink(event)
        return event

    def events(self) -> list[TraceEvent]:
        return list(self._events)

    def write_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([asdict(event) for event in self._events], indent=2, default=str)
        path.write_text(payload + "\n", encoding="utf-8")

    def write_csv(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        columns = [item.name for item in fields(TraceEvent)]
        with path.open("w", newline="", encoding="utf-8") as file_obj:
            writer = csv.DictWriter(file_obj, fieldnames=columns)
            writer.writeheader()
            for event in self._events:
                writer.writerow(event.as_row())
