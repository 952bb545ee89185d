"""Run journal: append-only JSONL stage events plus a rolling summary."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from weathershopper.logging_config import get_logger

LOGGER = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        LOGGER.warning("Ignoring unreadable journal summary %s: %s", path, exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _empty_summary() -> dict[str, Any]:
    return {
        "runs_started": 0,
        "runs_passed": 0,
        "runs_failed": 0,
        "failures_by_reason": {},
        "last_stage": None,
        "last_event": None,
    }


@dataclass
class RunJournal:
    """Records stage transitions of purchase runs; write failures never abort a run."""

    log_path: Path
    summary_path: Path
    enabled: bool = True
    _summary: dict[str, Any] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.log_path = Path(self.log_path)
        self.summary_path = Path(self.summary_path)
        if not self.enabled:
            return
        self._summary = {**_empty_summary(), **_read_json(self.summary_path)}

    def emit(self, event: str, **fields: Any) -> None:
        if not self.enabled:
            return
        entry = {"ts": _now().isoformat(), "event": event}
        entry.update(fields)
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as exc:
            LOGGER.warning("Run journal write failed: %s", exc)
            return
        self._update_summary(entry)

    def _update_summary(self, entry: dict[str, Any]) -> None:
        event = entry.get("event")
        if event == "run_started":
            self._summary["runs_started"] = int(self._summary.get("runs_started", 0)) + 1
        elif event == "stage_reached":
            self._summary["last_stage"] = entry.get("stage")
        elif event == "run_finished":
            self._summary["runs_passed"] = int(self._summary.get("runs_passed", 0)) + 1
        elif event == "run_failed":
            self._summary["runs_failed"] = int(self._summary.get("runs_failed", 0)) + 1
            reason = entry.get("reason") or "unknown"
            failures = dict(self._summary.get("failures_by_reason") or {})
            failures[reason] = int(failures.get(reason, 0)) + 1
            self._summary["failures_by_reason"] = failures
        self._summary["last_event"] = entry.get("ts")
        try:
            _write_json(self.summary_path, self._summary)
        except OSError as exc:
            LOGGER.warning("Run journal summary write failed: %s", exc)

    def summary(self) -> dict[str, Any]:
        return dict(self._summary)
