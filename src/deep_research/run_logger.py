"""Run logger for recording intermediate research phases to JSON files."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from deep_research.data import ResearchResult


class PhaseRecord(BaseModel):
    """Record of a single research phase."""

    phase: str
    component: str
    items_processed: int = 0
    input: Any = None
    output: Any = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """Record of a complete research run."""

    run_id: str
    question: str
    started_at: str
    completed_at: str | None = None
    phases: list[PhaseRecord] = []
    confidence: str | None = None
    source_count: int = 0
    stats: dict[str, Any] | None = None
    error: str | None = None


def _serialize(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Handles dataclasses, Pydantic models, datetimes, enums, containers and
    primitives.
    """
    if obj is None:
        return None
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _serialize(dataclasses.asdict(obj))
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, list | tuple):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    return obj


class RunLogger:
    """Accumulates phase records and writes a JSON log file per run.

    When ``enabled=False``, all methods are no-ops.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._record: RunRecord | None = None
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def start_run(self, question: str) -> None:
        """Initialize a new run record for ``question``."""
        if not self._enabled:
            return

        self._record = RunRecord(
            run_id=str(uuid.uuid4()),
            question=question,
            started_at=datetime.now(tz=UTC).isoformat(),
        )

    def log_phase(
        self,
        phase: str,
        component: str,
        input_data: Any,
        output_data: Any,
        items_processed: int,
        duration_seconds: float,
    ) -> None:
        """Append a phase record to the current run.

        Args:
            phase: Phase name (e.g. "decomposition", "search").
            component: Component class name.
            input_data: Phase input (will be serialized).
            output_data: Phase output (will be serialized).
            items_processed: Volume reported for the phase.
            duration_seconds: Wall-clock time for this phase.
        """
        if not self._enabled or self._record is None:
            return

        self._record.phases.append(
            PhaseRecord(
                phase=phase,
                component=component,
                items_processed=items_processed,
                input=_serialize(input_data),
                output=_serialize(output_data),
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish_run(self, result: ResearchResult) -> Path | None:
        """Write the completed run record to a JSON file.

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if not self._enabled or self._record is None:
            return None

        self._record.confidence = str(result.confidence)
        self._record.source_count = len(result.sources)
        self._record.stats = _serialize(result.stats)
        return self._write(self._record)

    def fail_run(self, error: BaseException) -> Path | None:
        """Write the record of a run that aborted with ``error``.

        The phases completed before the failure are kept.
        """
        if not self._enabled or self._record is None:
            return None

        self._record.error = f"{type(error).__name__}: {error}"
        return self._write(self._record)

    def _write(self, record: RunRecord) -> Path:
        record.completed_at = datetime.now(tz=UTC).isoformat()
        self._log_dir.mkdir(parents=True, exist_ok=True)

        # run_2026-02-12T14-30-00_1a2b3c4d.json
        ts = record.started_at.replace(":", "-")
        ts = ts.split(".")[0].split("+")[0]
        filepath = self._log_dir / f"run_{ts}_{record.run_id[:8]}.json"

        filepath.write_text(record.model_dump_json(indent=2))
        self._last_log_path = filepath
        self._record = None
        return filepath
