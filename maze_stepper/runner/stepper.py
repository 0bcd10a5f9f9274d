import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from maze_stepper.core.errors import ConcurrentRunRejected, InvalidInterval, InvalidStateTransition
from maze_stepper.algo.base import RunKind, Steppable, StepResult, StepStatus

logger = logging.getLogger(__name__)

# Milliseconds between pulls, the front-end's default animation speed
DEFAULT_INTERVAL_MS = 200


def check_interval(interval_ms: float):
    if interval_ms < 0:
        raise InvalidInterval(interval_ms)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunMetrics:
    kind: RunKind
    step_count: int = 0
    elapsed_time_ms: float = 0.0
    # Solving only
    path_length: Optional[int] = None
    cells_explored: Optional[int] = None


class StepListener:
    """Collaborator hooks. Subclass and override what you need."""

    def on_state_change(self, old: RunState, new: RunState):
        pass

    def on_step(self, result: StepResult):
        pass

    def on_complete(self, result: StepResult, metrics: RunMetrics):
        pass

    def on_failed(self, reason: str):
        pass


class Stepper:
    """
    Cooperative scheduler for one Steppable at a time.

    Idle -> Running <-> Paused, Running -> Completed | Failed.
    The host calls poll() from its own loop (a frame tick, a timer); a step is
    pulled whenever the configured interval has elapsed since the previous pull.
    """

    def __init__(self, listener: StepListener = None, clock: Callable[[], float] = time.monotonic):
        self.listener = listener or StepListener()
        self.clock = clock
        self.state = RunState.IDLE
        self.source: Optional[Steppable] = None
        self.interval_ms = DEFAULT_INTERVAL_MS
        self.metrics: Optional[RunMetrics] = None
        self.last_result: Optional[StepResult] = None
        self.failure_reason: Optional[str] = None
        self._started_at = 0.0
        self._next_due: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.state in (RunState.RUNNING, RunState.PAUSED)

    def _set_state(self, new: RunState):
        old, self.state = self.state, new
        if old is not new:
            logger.debug(f"Stepper {old.value} -> {new.value}")
            self.listener.on_state_change(old, new)

    def start(self, source: Steppable, interval_ms: float = DEFAULT_INTERVAL_MS):
        if self.is_active:
            raise ConcurrentRunRejected(
                f"A {self.source.kind.value} run is already {self.state.value}; reset it before starting another")
        check_interval(interval_ms)

        if self.state is not RunState.IDLE:
            self.reset()

        self.source = source
        self.interval_ms = interval_ms
        self.metrics = RunMetrics(kind=source.kind)
        self.last_result = None
        self.failure_reason = None

        now = self.clock()
        self._started_at = now
        self._next_due = now
        logger.info(f"Starting {source.kind.value} with {type(source).__name__} ({interval_ms} ms/step)")
        self._set_state(RunState.RUNNING)

    def pause(self):
        if self.state is not RunState.RUNNING:
            raise InvalidStateTransition(f"Cannot pause while {self.state.value}")
        self._next_due = None
        self._set_state(RunState.PAUSED)

    def resume(self, interval_ms: float = None):
        if self.state is not RunState.PAUSED:
            raise InvalidStateTransition(f"Cannot resume while {self.state.value}")
        if interval_ms is not None:
            check_interval(interval_ms)
            self.interval_ms = interval_ms
        self._next_due = self.clock()
        self._set_state(RunState.RUNNING)

    def reset(self):
        self.source = None
        self.metrics = None
        self.last_result = None
        self.failure_reason = None
        self._next_due = None
        self._set_state(RunState.IDLE)

    def poll(self, now: float = None) -> Optional[StepResult]:
        """Pulls one step if Running and due. Returns the step pulled, if any."""
        if self.state is not RunState.RUNNING:
            return None
        if now is None:
            now = self.clock()
        if now < self._next_due:
            return None
        return self._pull(now)

    def tick(self) -> Optional[StepResult]:
        """Pulls one step immediately, ignoring the interval."""
        if self.state is not RunState.RUNNING:
            return None
        return self._pull(self.clock())

    def run_blocking(self, sleep: Callable[[float], None] = time.sleep) -> RunState:
        """Drives the run until it leaves Running. Returns the state it ended in."""
        while self.state is RunState.RUNNING:
            now = self.clock()
            if now < self._next_due:
                sleep(self._next_due - now)
                continue
            self._pull(now)
        return self.state

    def _pull(self, now: float) -> Optional[StepResult]:
        source = self.source
        try:
            result = source.step()
        except Exception as exc:
            logger.exception(f"{type(source).__name__} raised during step {self.metrics.step_count + 1}")
            self._fail(f"{source.kind.value.capitalize()} failed: {exc}", now)
            return None

        self.last_result = result
        if result.status is StepStatus.RUNNING:
            self.metrics.step_count += 1
            self._next_due = now + self.interval_ms / 1000.0
        self.listener.on_step(result)

        if result.status is StepStatus.DONE:
            self._complete(result, now)
        elif result.status is StepStatus.FAILED:
            self._fail(result.message, now)
        return result

    def _complete(self, result: StepResult, now: float):
        metrics = self.metrics
        metrics.elapsed_time_ms = (now - self._started_at) * 1000.0
        if metrics.kind is RunKind.SOLVING:
            metrics.path_length = len(result.path)
            metrics.cells_explored = self.source.explored_count
        logger.info(f"{metrics.kind.value.capitalize()} completed: {metrics}")
        self._set_state(RunState.COMPLETED)
        self.listener.on_complete(result, metrics)

    def _fail(self, reason: str, now: float):
        self.metrics.elapsed_time_ms = (now - self._started_at) * 1000.0
        self.failure_reason = reason
        logger.warning(f"Run failed: {reason}")
        self._set_state(RunState.FAILED)
        self.listener.on_failed(reason)
