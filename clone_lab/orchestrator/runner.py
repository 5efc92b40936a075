"""Pipeline runner: executes Minds wave by wave.

Flow per run:
1. Reject malformed input (empty or duplicate source ids) before any Mind runs
2. For each wave, snapshot published results and run the wave's Minds in a
   thread pool, each under its own timeout
3. Publish each successful result once its analyze() has returned
4. On a stage failure, abort: later waves are skipped, partial results kept
   (with continue_on_error only the failed Mind's dependents are skipped)
5. Validate every published result

Generator failures are retried with backoff. Precondition failures,
timeouts and unexpected exceptions are not.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, as_completed
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import ValidationError

from clone_lab.errors import GeneratorError, PipelineConfigurationError, StageTimeoutError
from clone_lab.llm.backends import ContentGenerator
from clone_lab.minds.base import Mind
from clone_lab.minds.registry import MindRegistry, get_mind_registry
from clone_lab.minds.schemas import (
    ExtractedData,
    MindContext,
    MindHealthStatus,
    MindId,
    MindResult,
    utc_now,
)
from clone_lab.orchestrator.planner import ExecutionPlanner
from clone_lab.orchestrator.schemas import (
    ExecutionPlan,
    MindExecutionInfo,
    MindExecutionStatus,
    OrchestrationError,
    OrchestrationResult,
    OrchestratorConfig,
)
from clone_lab.orchestrator.shared_context import SharedContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[MindId, MindExecutionStatus, MindExecutionInfo], None]

# In-memory cancellation flags (per session_id), only set for active sessions
_cancellation_flags: dict[str, bool] = {}
_active_sessions: set[str] = set()
_flags_lock = threading.Lock()


def request_cancellation(session_id: str) -> bool:
    """Ask a running session to stop scheduling further Minds.

    Returns True if the session was running and is now being cancelled.
    """
    with _flags_lock:
        active = session_id in _active_sessions
        if active:
            _cancellation_flags[session_id] = True
    if not active:
        logger.warning(f"Cannot cancel session {session_id}: not running")
        return False
    logger.info(f"Cancellation requested for session {session_id}")
    return True


def is_session_active(session_id: str) -> bool:
    with _flags_lock:
        return session_id in _active_sessions


def is_cancelled(session_id: str) -> bool:
    with _flags_lock:
        return _cancellation_flags.get(session_id, False)


def clear_cancellation(session_id: str) -> None:
    with _flags_lock:
        _cancellation_flags.pop(session_id, None)


def _begin_session(session_id: str) -> None:
    with _flags_lock:
        if session_id in _active_sessions:
            raise PipelineConfigurationError(f"Session {session_id} is already running")
        _active_sessions.add(session_id)
        _cancellation_flags.pop(session_id, None)


def _end_session(session_id: str) -> None:
    with _flags_lock:
        _active_sessions.discard(session_id)
        _cancellation_flags.pop(session_id, None)


def check_input(extracted_data: Sequence[ExtractedData]) -> None:
    """Raises PipelineConfigurationError on empty input or duplicate source ids."""
    if not extracted_data:
        raise PipelineConfigurationError("No extracted data supplied; nothing to analyze")
    seen: set[str] = set()
    duplicates = []
    for item in extracted_data:
        if item.id in seen:
            duplicates.append(item.id)
        seen.add(item.id)
    if duplicates:
        raise PipelineConfigurationError(f"Duplicate source ids: {sorted(set(duplicates))}")


class MindOrchestrator:
    """Runs a validated set of Minds in dependency order."""

    def __init__(
        self,
        minds: Optional[Sequence[Mind]] = None,
        config: Optional[OrchestratorConfig] = None,
        mind_options: Optional[Mapping[MindId, Mapping[str, Any]]] = None,
        generator: Optional[ContentGenerator] = None,
        registry: Optional[MindRegistry] = None,
    ):
        """Build the plan and initialize every Mind.

        Raises:
            PipelineConfigurationError: On unknown dependencies, cycles or
                duplicate Minds
        """
        if minds is None:
            minds = (registry or get_mind_registry()).create_minds(generator)
        self.config = config or OrchestratorConfig()
        self.planner = ExecutionPlanner(minds)
        self._minds: dict[MindId, Mind] = {m.mind_id: m for m in minds}

        mind_options = mind_options or {}
        for mind in self._minds.values():
            mind.initialize(mind_options.get(mind.mind_id))

    @property
    def plan(self) -> ExecutionPlan:
        return self.planner.plan

    def get_mind(self, mind_id: MindId) -> Mind:
        return self._minds[mind_id]

    def health_check(self) -> list[MindHealthStatus]:
        return [m.health_check() for m in self._minds.values()]

    def dispose(self) -> None:
        for mind in self._minds.values():
            mind.dispose()

    def execute(
        self,
        extracted_data: Sequence[ExtractedData],
        session_id: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        reference_time: Optional[datetime] = None,
        cancellation_check: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> OrchestrationResult:
        """Run every Mind over the extracted data.

        Args:
            options: Per-run option overrides keyed by mind id value
                (e.g. {"tim": {"min_quality_score": 40}})
            reference_time: "Now" for recency scoring; defaults to run start
            cancellation_check: Extra cancellation source polled with the
                session's own flag

        Raises:
            PipelineConfigurationError: On empty input, duplicate source ids,
                invalid per-run options or a session id that is already running
        """
        check_input(extracted_data)
        self._check_options(options or {})
        session_id = session_id or uuid.uuid4().hex
        shared = SharedContext(extracted_data, session_id, options, reference_time)

        def cancelled() -> bool:
            return is_cancelled(session_id) or bool(cancellation_check and cancellation_check())

        started = utc_now()
        start_time = time.time()
        run = OrchestrationResult(
            session_id=session_id,
            success=False,
            started_at=started,
            waves=self.plan.waves,
            execution={
                mind_id: MindExecutionInfo(mind_id=mind_id, wave=wave.index)
                for wave in self.plan.waves
                for mind_id in wave.mind_ids
            },
        )
        logger.info(
            f"Session {session_id}: running {len(self._minds)} minds in "
            f"{len(self.plan.waves)} waves over {len(shared.extracted_data)} sources"
        )

        blocked: set[MindId] = set()
        _begin_session(session_id)
        try:
            for wave in self.plan.waves:
                if run.aborted or run.cancelled or cancelled():
                    if not run.aborted:
                        run.cancelled = True
                    for mind_id in wave.mind_ids:
                        self._skip(run, mind_id, "run aborted" if run.aborted else "run cancelled", progress_callback)
                    continue

                runnable = []
                for mind_id in wave.mind_ids:
                    if mind_id in blocked:
                        self._skip(run, mind_id, "a dependency failed", progress_callback)
                    else:
                        runnable.append(mind_id)
                if runnable:
                    self._run_wave(wave.index, runnable, shared, run, blocked, cancelled, progress_callback)
        finally:
            _end_session(session_id)

        run.results = shared.results()
        if self.config.validate_results:
            for mind_id, result in run.results.items():
                run.validations[mind_id] = self._minds[mind_id].validate(result)

        run.completed_at = utc_now()
        run.duration_ms = int((time.time() - start_time) * 1000)
        run.success = (
            not run.aborted
            and not run.cancelled
            and not run.errors
            and len(run.results) == len(self._minds)
        )
        logger.info(
            f"Session {session_id} finished in {run.duration_ms}ms: "
            f"{run.completed_count} completed, {run.failed_count} failed, {run.skipped_count} skipped"
        )
        return run

    def _check_options(self, options: Mapping[str, Any]) -> None:
        """Reject per-run overrides that name unknown Minds or invalid options."""
        for key, overrides in options.items():
            try:
                mind = self._minds[MindId(key)]
            except (ValueError, KeyError):
                raise PipelineConfigurationError(f"Options given for unknown mind: {key}")
            merged = mind.options.model_dump()
            merged.update(overrides or {})
            try:
                effective = mind.options_model.model_validate(merged)
            except ValidationError as e:
                raise PipelineConfigurationError(f"Invalid options for mind '{key}': {e}") from e
            mind.check_options(effective)

    def _run_wave(
        self,
        wave_index: int,
        mind_ids: list[MindId],
        shared: SharedContext,
        run: OrchestrationResult,
        blocked: set[MindId],
        cancelled: Callable[[], bool],
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        logger.info(f"Wave {wave_index}: {[m.value for m in mind_ids]}")
        # one snapshot per wave so sibling Minds never see each other
        context = shared.snapshot(cancellation_check=cancelled)
        failures: list[MindId] = []

        with ThreadPoolExecutor(max_workers=min(self.config.max_parallelism, len(mind_ids))) as executor:
            futures = {}
            for mind_id in mind_ids:
                info = run.execution[mind_id]
                info.status = MindExecutionStatus.RUNNING
                info.started_at = utc_now()
                self._notify(progress_callback, mind_id, info)
                futures[executor.submit(self._run_mind, self._minds[mind_id], context, info, cancelled)] = mind_id

            for future in as_completed(futures):
                mind_id = futures[future]
                info = run.execution[mind_id]
                info.completed_at = utc_now()
                try:
                    result = future.result()
                except InterruptedError as e:
                    info.status = MindExecutionStatus.SKIPPED
                    info.error = str(e)
                    run.cancelled = True
                    blocked.add(mind_id)
                    blocked.update(self.planner.dependents_of(mind_id))
                    logger.warning(f"[{mind_id.value}] Cancelled: {e}")
                except Exception as e:
                    info.status = MindExecutionStatus.FAILED
                    info.error = str(e)
                    run.errors.append(OrchestrationError(
                        mind_id=mind_id,
                        error_type=type(e).__name__,
                        message=str(e),
                        retryable=isinstance(e, GeneratorError),
                    ))
                    failures.append(mind_id)
                    logger.error(f"[{mind_id.value}] Stage failed: {e}", exc_info=True)
                else:
                    shared.publish(mind_id, result)
                    info.status = MindExecutionStatus.COMPLETED
                self._notify(progress_callback, mind_id, info)

        if not failures:
            return
        if self.config.continue_on_error:
            for mind_id in failures:
                blocked.add(mind_id)
                blocked.update(self.planner.dependents_of(mind_id))
            return
        run.aborted = True
        run.failed_stage = next(m for m in mind_ids if m in failures)
        logger.error(f"Aborting run: stage '{run.failed_stage.value}' failed")

    def _run_mind(
        self,
        mind: Mind,
        context: MindContext,
        info: MindExecutionInfo,
        cancelled: Callable[[], bool],
    ) -> MindResult:
        """Run one Mind with generator retries and a per-attempt timeout."""
        label = mind.mind_id.value
        last_error: Optional[Exception] = None
        max_attempts = self.config.max_retries + 1

        for attempt in range(max_attempts):
            if cancelled():
                raise InterruptedError(f"[{label}] Cancelled before attempt {attempt + 1}")
            if attempt > 0:
                delay = self.config.retry_delay(attempt)
                logger.warning(
                    f"[{label}] Retry {attempt}/{self.config.max_retries} after {delay}s "
                    f"(previous error: {last_error})"
                )
                time.sleep(delay)

            info.attempts = attempt + 1
            start_time = time.time()
            try:
                result = self._analyze_with_timeout(mind, context)
            except GeneratorError as e:
                last_error = e
                continue
            info.duration_ms = int((time.time() - start_time) * 1000)
            return result

        raise last_error

    def _analyze_with_timeout(self, mind: Mind, context: MindContext) -> MindResult:
        timeout = self.config.timeout_for(mind.mind_id)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"mind-{mind.mind_id.value}")
        future = executor.submit(mind.analyze, context)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            # the worker thread cannot be killed; its late result is discarded
            future.cancel()
            raise StageTimeoutError(mind.mind_id.value, timeout) from None
        finally:
            executor.shutdown(wait=False)

    @staticmethod
    def _skip(
        run: OrchestrationResult,
        mind_id: MindId,
        reason: str,
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        info = run.execution[mind_id]
        info.status = MindExecutionStatus.SKIPPED
        info.error = reason
        logger.warning(f"[{mind_id.value}] Skipped: {reason}")
        MindOrchestrator._notify(progress_callback, mind_id, info)

    @staticmethod
    def _notify(
        progress_callback: Optional[ProgressCallback],
        mind_id: MindId,
        info: MindExecutionInfo,
    ) -> None:
        if progress_callback is not None:
            progress_callback(mind_id, info.status, info)
