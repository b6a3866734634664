"""
Run orchestrator: one maintenance run from authentication to verdict.

    NotStarted -> Authenticating -> Running -> Completed | Failed

Only one run may be authenticating or running at a time; a second
``start()`` in that window is rejected without touching the live run.
Every chunk is handed to the listeners, the progress estimator and the
error aggregator, in order, before the next chunk is read.
"""

import asyncio
import logging
import time
from dataclasses import replace
from pathlib import Path

from updatewiz.engine.aggregator import ErrorAggregator
from updatewiz.engine.errors import (
    AuthError,
    ExecutionError,
    NonZeroExitError,
    RunCancelledError,
    RunTimeoutError,
)
from updatewiz.engine.executor import SubprocessExecutor
from updatewiz.engine.models import Phase, RunOptions, RunResult, RunState, Verdict
from updatewiz.engine.progress import ProgressEstimator

logger = logging.getLogger(__name__)

INITIAL_LABEL = "Initializing..."
COMPLETE_LABEL = "Complete!"


class RunListener:
    """Receives push events for a run. Override what you need."""

    def on_output_chunk(self, chunk) -> None:
        pass

    def on_progress(self, percent: float, label: str) -> None:
        pass

    def on_terminal(self, result: RunResult) -> None:
        pass


class RunSession:
    """State of one run. Created by ``start()``, archived into a RunResult."""

    def __init__(self, options: RunOptions, estimator, aggregator=None):
        self.options = options
        self.state = RunState(current_label=INITIAL_LABEL)
        self.estimator = estimator
        self.aggregator = aggregator or ErrorAggregator()
        self.handle = None
        self.cancelled = False

    def to_result(self) -> RunResult:
        state = self.state
        verdict = self.aggregator.verdict(state.phase == Phase.COMPLETED)
        return RunResult(
            success=verdict != Verdict.FAILED,
            exit_code=state.exit_code,
            transcript=tuple(state.transcript),
            warnings=tuple(state.warnings),
            verdict=verdict,
            progress_percent=state.progress_percent,
            error=state.error,
            started_at=state.started_at,
            finished_at=time.time(),
        )


class RunOrchestrator:
    def __init__(self, script, gate, executor=None, *, estimator_factory=None, timeout=None):
        self.script = Path(script) if script is not None else None
        self.gate = gate
        self.executor = executor or SubprocessExecutor()
        self.estimator_factory = estimator_factory or ProgressEstimator.for_options
        self.timeout = timeout
        self._listeners = []
        self._session = None
        self._last_phase = Phase.NOT_STARTED
        self.last_result = None

    # ── Listeners ──────────────────────────────────────────────

    def add_listener(self, listener: RunListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: RunListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.exception("Listener %r failed in %s", listener, event)

    # ── State ──────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        if self._session is not None:
            return self._session.state.phase
        return self._last_phase

    @property
    def state(self):
        """A copy of the live run state, or None between runs."""
        if self._session is None:
            return None
        return replace(
            self._session.state,
            transcript=list(self._session.state.transcript),
            warnings=list(self._session.state.warnings),
        )

    @property
    def is_running(self) -> bool:
        return self._session is not None and self._session.state.phase.is_active

    # ── Run ────────────────────────────────────────────────────

    async def start(self, options: RunOptions):
        """Run the script once. Returns the RunResult, or None if a run is active."""
        if self.is_running:
            logger.warning("Run rejected: another run is %s", self._session.state.phase.value)
            return None

        session = RunSession(options, self.estimator_factory(options))
        self._session = session
        session.state.phase = Phase.AUTHENTICATING
        logger.info("Run started (%d options enabled)", options.enabled_count)
        self._emit("on_progress", 0.0, INITIAL_LABEL)

        try:
            await self.gate.elevate()
        except AuthError as e:
            return self._finish(session, Phase.FAILED, error=str(e))

        if session.cancelled:
            return self._finish(session, Phase.FAILED, error=str(RunCancelledError()))

        session.state.phase = Phase.RUNNING
        try:
            session.handle = await self.executor.execute(self.script, options.to_env())
            if session.cancelled:
                session.handle.terminate()
            if self.timeout:
                code = await asyncio.wait_for(self._supervise(session), self.timeout)
            else:
                code = await self._supervise(session)
            session.state.exit_code = code
        except asyncio.TimeoutError:
            code = await self._stop(session)
            error = RunTimeoutError(self.timeout, code, session.state.transcript)
            return self._finish(session, Phase.FAILED, error=str(error), exit_code=code)
        except NonZeroExitError as e:
            if session.cancelled:
                return self._finish(session, Phase.FAILED, error=str(RunCancelledError(e.code)),
                                    exit_code=e.code)
            return self._finish(session, Phase.FAILED, error=str(e), exit_code=e.code)
        except ExecutionError as e:
            return self._finish(session, Phase.FAILED, error=str(e))

        if session.cancelled:
            return self._finish(session, Phase.FAILED, error=str(RunCancelledError(0)), exit_code=0)
        return self._finish(session, Phase.COMPLETED)

    async def _supervise(self, session: RunSession) -> int:
        """Stream every chunk, then reap the process. The timeout covers both."""
        await self._drain(session)
        return await session.handle.wait()

    async def _drain(self, session: RunSession) -> None:
        state = session.state
        async for chunk in session.handle:
            state.transcript.append(chunk)
            self._emit("on_output_chunk", chunk)

            update = session.estimator.estimate(chunk)
            session.aggregator.observe(chunk)
            state.warnings = list(session.aggregator.warnings)

            if update.counted:
                # Never let the reported value go backwards.
                state.progress_percent = max(state.progress_percent, update.percent)
                state.current_label = update.label or state.current_label
                self._emit("on_progress", state.progress_percent, state.current_label)

    async def _stop(self, session: RunSession):
        session.handle.terminate()
        code = await session.handle.process.wait()
        # Keep whatever was read but not yet delivered.
        session.state.transcript = list(session.handle.transcript)
        return code

    def cancel(self) -> bool:
        """Ask the in-flight run to stop. The run ends Failed with its partial output."""
        session = self._session
        if session is None or not session.state.phase.is_active:
            return False
        session.cancelled = True
        if session.handle is not None:
            session.handle.terminate()
        logger.info("Run cancellation requested")
        return True

    def _finish(self, session: RunSession, phase: Phase, error=None, exit_code=None) -> RunResult:
        state = session.state
        state.phase = phase
        state.error = error
        if exit_code is not None:
            state.exit_code = exit_code
        if phase == Phase.COMPLETED:
            state.progress_percent = 100.0
            state.current_label = COMPLETE_LABEL
            self._emit("on_progress", state.progress_percent, state.current_label)

        result = session.to_result()
        if result.success:
            logger.info("Run finished: %s (%d warnings)", result.verdict.value, len(result.warnings))
        else:
            logger.warning("Run failed: %s", error)

        self.last_result = result
        self._last_phase = phase
        self._session = None
        self._emit("on_terminal", result)
        return result
