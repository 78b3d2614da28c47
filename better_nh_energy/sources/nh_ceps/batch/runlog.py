"""
Run logging utilities for supplier-plan batch updates.

Layout (under `logs_dir`):
    runs/
      <run_id>/
        progress.jsonl          # one JSON object per line
        ok/
          <provider>.ok         # empty marker file
        err/
          <provider>.json       # structured error payload

Notes:
- `RunLog` is append-only: re-logging the same event just appends another line.
- Timestamps are recorded in UTC ISO-8601 with 'Z' suffix.
- `run_id` defaults to a UTC timestamp if not provided.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Literal, Optional

Status = Literal["ok", "err"]


def _utc_now_iso() -> str:
    """Return current UTC time in ISO-8601, suffixed with 'Z' (no microseconds)."""
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def _default_run_id() -> str:
    """Filesystem-safe default run id (UTC), e.g. 2025-10-30T07-59-12."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


class RunLog:
    """
    Lightweight run logger for batch jobs.

    Usage:
        log = RunLog(logs_dir, run_id=None)
        log.log(provider="Eversource", status="ok", count=42)
        log.mark_ok("Eversource")
        log.mark_err("Liberty", {"provider": "Liberty", "error": "boom"})
    """

    def __init__(self, logs_dir: Path, run_id: Optional[str] = None) -> None:
        self._logs_dir = logs_dir
        self._run_id = run_id or _default_run_id()

        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.ok_dir.mkdir(parents=True, exist_ok=True)
        self.err_dir.mkdir(parents=True, exist_ok=True)

        # Touch progress file so it exists even for an empty run (tail -f)
        self.progress_path.touch(exist_ok=True)

    # ---------- Public API ----------

    @property
    def run_id(self) -> str:
        """The identifier of this run (directory name under runs/)."""
        return self._run_id

    def log(
        self,
        *,
        provider: str,
        status: Status,
        count: Optional[int] = None,
        path: Optional[Path] = None,
        error: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Append a line to progress.jsonl.

        Args:
            provider: Provider choice being processed.
            status: One of "ok", "err".
            count: Number of plans written (for ok).
            path: Output file written (for ok).
            error: Optional error message (for err).
            extra: Optional dict to include custom fields.
        """
        rec: Dict[str, Any] = {
            "time": _utc_now_iso(),
            "provider": provider,
            "status": status,
        }
        if count is not None:
            rec["count"] = count
        if path is not None:
            rec["path"] = str(path)
        if error is not None:
            rec["error"] = error
        if extra:
            # do not override standard fields
            for k, v in extra.items():
                if k not in rec:
                    rec[k] = v

        with self.progress_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def mark_ok(self, provider: str) -> None:
        """Create an empty OK marker file for this provider."""
        (self.ok_dir / f"{provider}.ok").touch()

    def mark_err(self, provider: str, error_json: Dict[str, Any]) -> None:
        """Write a structured error payload for this provider."""
        path = self.err_dir / f"{provider}.json"
        path.write_text(
            json.dumps(error_json, ensure_ascii=False, indent=2), encoding="utf-8"
        )

    # ---------- Paths (properties) ----------

    @property
    def runs_root(self) -> Path:
        return self._logs_dir / "runs"

    @property
    def run_dir(self) -> Path:
        return self.runs_root / self._run_id

    @property
    def progress_path(self) -> Path:
        return self.run_dir / "progress.jsonl"

    @property
    def ok_dir(self) -> Path:
        return self.run_dir / "ok"

    @property
    def err_dir(self) -> Path:
        return self.run_dir / "err"


def get_latest_run_dir(runs_root: Path) -> Path:
    """Return the most recent run directory (run ids sort chronologically)."""
    if not runs_root.exists():
        raise FileNotFoundError(f"No runs directory found: {runs_root}")

    run_dirs = [p for p in runs_root.iterdir() if p.is_dir()]
    if not run_dirs:
        raise FileNotFoundError(f"No run directories found under {runs_root}")

    return max(run_dirs, key=lambda p: p.name)


def load_progress(run_dir: Path) -> list[Dict[str, Any]]:
    """Load the JSON objects of progress.jsonl, skipping blank or non-object lines."""
    progress_file = run_dir / "progress.jsonl"
    if not progress_file.exists():
        raise FileNotFoundError(f"No progress file found in {run_dir}")

    out: list[Dict[str, Any]] = []
    for line in progress_file.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        obj = json.loads(line)
        if isinstance(obj, dict):
            out.append(obj)
    return out
