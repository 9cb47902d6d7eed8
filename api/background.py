"""Lightweight in-memory job manager for long-running simulations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Event, RLock, Thread
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class JobRecord:
    job_id: str
    job_type: str
    status: str
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    result: Optional[Any] = None
    error: Optional[str] = None
    progress: Dict[str, int] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


class JobControl:
    """Handle given to a running job so it can poll for cancellation and report progress."""

    def __init__(self, manager: "JobManager", job_id: str, cancel_event: Event) -> None:
        self._manager = manager
        self._job_id = job_id
        self._cancel_event = cancel_event

    def should_cancel(self) -> bool:
        return self._cancel_event.is_set()

    def report_progress(self, completed: int, total: int) -> None:
        self._manager._update(self._job_id, progress={"completed": completed, "total": total})


class JobManager:
    """Manage background jobs executed in daemon threads.

    All job state lives in memory, so this is only suitable for a
    single-process deployment. Jobs are cancelled cooperatively: ``cancel``
    sets a flag that the job polls through its :class:`JobControl`.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._jobs: Dict[str, JobRecord] = {}
        self._cancel_events: Dict[str, Event] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _set(self, record: JobRecord) -> None:
        with self._lock:
            self._jobs[record.job_id] = record

    def _update(self, job_id: str, **fields: Any) -> None:
        with self._lock:
            record = self._jobs.get(job_id)
            if record is None:
                return
            for key, value in fields.items():
                setattr(record, key, value)

    def create_job(
        self,
        job_type: str,
        func: Callable[..., Any],
        *,
        args: tuple[Any, ...] = (),
        kwargs: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Start ``func(*args, control=..., **kwargs)`` in a daemon thread."""

        job_id = uuid4().hex
        cancel_event = Event()
        record = JobRecord(
            job_id=job_id,
            job_type=job_type,
            status="pending",
            created_at=self._now(),
            metadata=metadata or {},
        )
        self._set(record)
        with self._lock:
            self._cancel_events[job_id] = cancel_event
        control = JobControl(self, job_id, cancel_event)

        def runner() -> None:
            self._update(job_id, status="running", started_at=self._now())
            try:
                result = func(*args, control=control, **(kwargs or {}))
            except Exception as exc:
                logger.exception("Job %s (%s) failed", job_id, job_type)
                self._update(
                    job_id,
                    status="failed",
                    finished_at=self._now(),
                    error=str(exc),
                )
            else:
                self._update(
                    job_id,
                    status="cancelled" if cancel_event.is_set() else "completed",
                    finished_at=self._now(),
                    result=result,
                )
            finally:
                with self._lock:
                    self._cancel_events.pop(job_id, None)

        thread = Thread(target=runner, name=f"job-{job_id}", daemon=True)
        thread.start()
        return job_id

    def cancel(self, job_id: str) -> bool:
        """Request cancellation; returns ``False`` for unknown or finished jobs."""

        with self._lock:
            record = self._jobs.get(job_id)
            event = self._cancel_events.get(job_id)
            if record is None or event is None or record.status not in ("pending", "running"):
                return False
            event.set()
            return True

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._jobs.get(job_id)
            if record is None:
                return None
            # Shallow copy so callers cannot mutate internal state.
            return JobRecord(
                job_id=record.job_id,
                job_type=record.job_type,
                status=record.status,
                created_at=record.created_at,
                started_at=record.started_at,
                finished_at=record.finished_at,
                result=record.result,
                error=record.error,
                progress=dict(record.progress),
                metadata=dict(record.metadata),
            )


# Global singleton used throughout the API layer.
job_manager = JobManager()
