"""Background handoff for session analysis.

Chat requests enqueue finished sessions here and return immediately. Each job
carries a ``Future`` so callers (and tests) can observe the outcome, and every
failure is logged and emitted as an ``analysis_failed`` telemetry event instead
of disappearing.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from .cognitive_profile import CognitiveProfile
from .learning_analytics import LearningAnalyticsEngine, SessionAnalysis, SessionRecord
from .telemetry import emit_event

logger = logging.getLogger(__name__)


class AnalysisSink(Protocol):
    def record_analysis(self, user_id: str, analysis: SessionAnalysis) -> CognitiveProfile:  # pragma: no cover
        ...


@dataclass
class AnalysisJob:
    job_id: str
    user_id: str
    session: SessionRecord
    profile: CognitiveProfile
    enqueued_at: float = field(default_factory=time.time)
    future: "Future[SessionAnalysis]" = field(default_factory=Future)


class AnalysisQueue:
    """Worker threads draining a FIFO of analysis jobs."""

    def __init__(
        self,
        sink: AnalysisSink,
        *,
        engine: Optional[LearningAnalyticsEngine] = None,
        num_workers: int = 2,
    ) -> None:
        self._sink = sink
        self._engine = engine or LearningAnalyticsEngine()
        self._queue: "queue.Queue[Optional[AnalysisJob]]" = queue.Queue()
        self._lock = threading.Lock()
        self._submitted = 0
        self._completed = 0
        self._failed = 0
        self._running = True
        self._workers: List[threading.Thread] = []
        for index in range(num_workers):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"SessionAnalysis-Worker-{index}",
                daemon=True,
            )
            worker.start()
            self._workers.append(worker)

    def submit(self, user_id: str, session: SessionRecord, profile: CognitiveProfile) -> AnalysisJob:
        if not self._running:
            raise RuntimeError("Analysis queue has been shut down.")
        job = AnalysisJob(
            job_id=f"analysis_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            session=session,
            profile=profile.model_copy(deep=True),
        )
        with self._lock:
            self._submitted += 1
        self._queue.put(job)
        logger.debug("Queued %s for user=%s", job.job_id, user_id)
        return job

    def _worker_loop(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                self._run(job)
            finally:
                self._queue.task_done()

    def _run(self, job: AnalysisJob) -> None:
        if not job.future.set_running_or_notify_cancel():
            return
        try:
            analysis = self._engine.analyze(job.session, job.profile)
            self._sink.record_analysis(job.user_id, analysis)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Session analysis %s failed for user=%s", job.job_id, job.user_id)
            with self._lock:
                self._failed += 1
            job.future.set_exception(exc)
            emit_event(
                "analysis_failed",
                job_id=job.job_id,
                user_id=job.user_id,
                error=exc,
            )
            return

        with self._lock:
            self._completed += 1
        job.future.set_result(analysis)
        emit_event(
            "analysis_completed",
            job_id=job.job_id,
            user_id=job.user_id,
            insight_count=len(analysis.insights),
            comprehension_score=analysis.comprehension_score,
            engagement_score=analysis.engagement_score,
            latency_ms=round((time.time() - job.enqueued_at) * 1000, 1),
        )

    def wait_for_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued job has finished; False on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._queue.all_tasks_done:
            while self._queue.unfinished_tasks:
                if deadline is None:
                    self._queue.all_tasks_done.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._queue.all_tasks_done.wait(remaining)
        return True

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "queued": self._queue.qsize(),
                "submitted": self._submitted,
                "completed": self._completed,
                "failed": self._failed,
                "workers": len(self._workers),
            }

    def shutdown(self, wait: bool = True) -> None:
        if not self._running:
            return
        self._running = False
        for _ in self._workers:
            self._queue.put(None)
        if wait:
            for worker in self._workers:
                worker.join(timeout=5.0)


_analysis_queue: Optional[AnalysisQueue] = None
_analysis_queue_lock = threading.Lock()


def get_analysis_queue() -> AnalysisQueue:
    """Process-wide queue persisting into the default cognitive twin store."""
    global _analysis_queue
    with _analysis_queue_lock:
        if _analysis_queue is None:
            from .cognitive_twin_store import twin_store
            from .config import get_settings

            _analysis_queue = AnalysisQueue(twin_store, num_workers=get_settings().analysis_workers)
        return _analysis_queue


def shutdown_analysis_queue() -> None:
    global _analysis_queue
    with _analysis_queue_lock:
        if _analysis_queue is not None:
            _analysis_queue.shutdown()
        _analysis_queue = None


__all__ = [
    "AnalysisJob",
    "AnalysisQueue",
    "AnalysisSink",
    "get_analysis_queue",
    "shutdown_analysis_queue",
]
