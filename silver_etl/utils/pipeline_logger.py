"""Structured logging utilities for silver load observability.

Every event carries:
- entity
- run_id
- step
- row_count
- duration_ms
"""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PipelineLogContext:
    """Context for pipeline logging with required fields."""

    entity: str
    run_id: str
    step: str = ""
    row_count: int = 0
    duration_ms: Optional[float] = None
    status: str = "started"
    error: Optional[str] = None
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        data = asdict(self)
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        # Remove None values
        return {k: v for k, v in data.items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class PipelineLogger:
    """Structured logger for one entity's silver load."""

    def __init__(self, entity: str, run_id: str):
        """Initialize pipeline logger.

        Args:
            entity: Entity name (e.g., 'crm_cust_info')
            run_id: Identifier shared by all entities of one run
        """
        self.entity = entity
        self.run_id = run_id
        self.logger = logging.getLogger(f"pipeline.{entity}")
        self._start_time: Optional[float] = None
        self._step_durations: dict[str, float] = {}

    def _log(self, level: int, step: str, **kwargs) -> None:
        ctx = PipelineLogContext(
            entity=self.entity,
            run_id=self.run_id,
            step=step,
            **kwargs
        )
        self.logger.log(level, ctx.to_json(), extra=ctx.to_dict())

    def _elapsed_ms(self) -> Optional[float]:
        if self._start_time is None:
            return None
        return (time.time() - self._start_time) * 1000

    def start(self, step: str) -> None:
        """Log step start."""
        self._start_time = time.time()
        self._log(logging.INFO, step, status="started")

    def success(self, step: str, **kwargs) -> None:
        """Log step success."""
        self._log(logging.INFO, step, status="success", duration_ms=self._elapsed_ms(), **kwargs)

    def error(self, step: str, error: Exception, **kwargs) -> None:
        """Log step error."""
        self._log(
            logging.ERROR,
            step,
            status="error",
            error=str(error),
            duration_ms=self._elapsed_ms(),
            **kwargs
        )

    def log_transform(
        self,
        input_count: int,
        output_count: int,
        duration_ms: float,
    ) -> None:
        """Log transformation step."""
        self._step_durations["transform"] = duration_ms
        self._log(
            logging.INFO,
            step="transform",
            status="success",
            row_count=output_count,
            duration_ms=duration_ms,
            extra={
                "input_count": input_count,
                "output_count": output_count,
                "dropped_count": input_count - output_count,
            }
        )

    def log_audit(self, layer: str, summary: dict[str, int], row_count: int) -> None:
        """Log a validation report summary; findings are warnings."""
        self._log(
            logging.WARNING if summary else logging.INFO,
            step=f"audit_{layer}",
            status="findings" if summary else "clean",
            row_count=row_count,
            extra={"findings": summary},
        )

    def log_write(
        self,
        path: str,
        row_count: int,
        file_size_bytes: int,
        duration_ms: float,
    ) -> None:
        """Log silver replacement."""
        self._step_durations["write"] = duration_ms
        self._log(
            logging.INFO,
            step="write",
            status="success",
            row_count=row_count,
            duration_ms=duration_ms,
            extra={
                "path": path,
                "file_size_bytes": file_size_bytes,
            }
        )

    def get_metrics(self) -> dict:
        """Get aggregated metrics."""
        return {
            "entity": self.entity,
            "run_id": self.run_id,
            "step_durations_ms": dict(self._step_durations),
            "total_duration_ms": self._elapsed_ms(),
        }


@contextmanager
def timed_operation(name: str, logger: logging.Logger = None):
    """Context manager to time an operation.

    Usage:
        with timed_operation("transform") as timer:
            rows = pipeline.transform(raw)
        print(f"Took {timer.duration_ms}ms")
    """
    class Timer:
        def __init__(self):
            self.start_time = time.time()
            self.end_time = None
            self.duration_ms = 0

    timer = Timer()

    try:
        yield timer
    finally:
        timer.end_time = time.time()
        timer.duration_ms = (timer.end_time - timer.start_time) * 1000

        if logger:
            logger.debug(
                f"Operation '{name}' completed",
                extra={"operation": name, "duration_ms": timer.duration_ms}
            )
