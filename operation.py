# operation.py
# Operation lock, live operation driver and the shared engine base

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, List, Optional, Sequence, Tuple

from settings import STEP_DELAYS, Pacing
from sound import LoggingSound, SoundSink
from steps import Highlights, Step, StepRecorder
from timeline import TimelinePlayer

logger = logging.getLogger(__name__)


class Outcome(Enum):
    OK = "ok"
    OVERFLOW = "overflow"
    UNDERFLOW = "underflow"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


@dataclass
class OperationResult:
    outcome: Outcome
    message: str = ""
    value: Any = None
    steps: Tuple[Step, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    def __bool__(self) -> bool:
        return self.ok


def done(message: str, value: Any = None) -> OperationResult:
    return OperationResult(Outcome.OK, message, value)


def failed(outcome: Outcome, message: str) -> OperationResult:
    return OperationResult(outcome, message)


class OperationCancelled(Exception):
    """Thrown into a running operation once its owning view is gone."""


class OperationControl:
    """
    One exclusive operation lock plus the liveness flag for one engine
    instance. Not a queue: a second acquire while busy simply fails.
    """

    def __init__(self):
        self.current: Optional[str] = None
        self.alive = True

    @property
    def busy(self) -> bool:
        return self.current is not None

    def acquire(self, name: str) -> bool:
        if self.busy or not self.alive:
            return False
        self.current = name
        return True

    def release(self):
        self.current = None

    def teardown(self):
        self.alive = False


# A step generator yields recorded steps and returns its OperationResult.
StepGenerator = Generator[Step, None, OperationResult]


class Operation:
    """
    Drives one live step generator. Every yielded step is a suspension
    point; update(dt) resumes the generator once the step's pause (scaled
    by the engine's Pacing) has elapsed. run() ignores time entirely.
    """

    def __init__(
        self,
        name: str,
        generator: Optional[StepGenerator],
        recorder: StepRecorder,
        control: Optional[OperationControl],
        pacing: Pacing,
        on_finish: Optional[Callable[[OperationResult], None]] = None,
    ):
        self.name = name
        self.recorder = recorder
        self.current: Optional[Step] = None
        self.result: Optional[OperationResult] = None
        self._gen = generator
        self._control = control
        self._pacing = pacing
        self._on_finish = on_finish
        self._timer = 0.0
        self._wait = 0.0

    @classmethod
    def finished(cls, name: str, result: OperationResult) -> "Operation":
        op = cls(name, None, StepRecorder(), None, Pacing())
        op.result = result
        return op

    @property
    def done(self) -> bool:
        return self.result is not None

    @property
    def steps(self) -> List[Step]:
        return self.recorder.steps

    def update(self, dt: float):
        if self.done:
            return
        self._timer += dt
        while not self.done and self._timer >= self._wait:
            self._timer -= self._wait
            self._advance()

    def run(self) -> OperationResult:
        while not self.done:
            self._advance()
        return self.result

    def _advance(self):
        try:
            if not self._control.alive:
                step = self._gen.throw(OperationCancelled())
            else:
                step = next(self._gen)
        except StopIteration as stop:
            self._finish(stop.value if stop.value is not None else done(""))
            return
        except OperationCancelled:
            logger.debug("%s cancelled", self.name)
            self._finish(OperationResult(Outcome.CANCELLED, "Cancelled"))
            return
        except Exception:
            self._control.release()
            raise
        self.current = step
        self._wait = self._pacing.delay(step.pause)

    def _finish(self, result: OperationResult):
        self._control.release()
        result.steps = tuple(self.recorder.steps)
        self.result = result
        if self._on_finish and result.outcome is not Outcome.CANCELLED:
            self._on_finish(result)


class Engine:
    """
    Shared plumbing for every structure engine: the operation lock, pacing,
    sound, the status message and a Timeline Player for the last operation.
    Subclasses implement snapshot() and their operations as step generators.
    """

    feature = "engine"
    context = ""

    def __init__(
        self,
        control: Optional[OperationControl] = None,
        pacing: Optional[Pacing] = None,
        sound: Optional[SoundSink] = None,
        step_delay: Optional[float] = None,
    ):
        self.control = control or OperationControl()
        self.pacing = pacing or Pacing()
        self.sound = sound or LoggingSound()
        self.step_delay = STEP_DELAYS.get(self.feature, 500) if step_delay is None else step_delay
        self.player = TimelinePlayer()
        self.message = "Ready"
        self.operation: Optional[Operation] = None

    # --- state ---

    def snapshot(self) -> Any:
        raise NotImplementedError

    def aux(self) -> Any:
        return None

    def ids_with_value(self, value: Any) -> List[str]:
        return []

    def build(self, values: Sequence[Any]) -> OperationResult:
        raise NotImplementedError

    @property
    def busy(self) -> bool:
        return self.control.busy

    def idle_step(self) -> Step:
        return StepRecorder().record(self.snapshot(), None, None, self.message, self.aux())

    def current_step(self) -> Step:
        if self.operation is not None and not self.operation.done and self.operation.current:
            return self.operation.current
        return self.player.current_step or self.idle_step()

    def update(self, dt: float):
        if self.operation is not None and not self.operation.done:
            self.operation.update(dt)
        else:
            self.player.update(dt)

    def teardown(self):
        self.control.teardown()
        self.player.stop()

    # --- recording helpers ---

    _quiet = False

    def _step(
        self,
        rec: Optional[StepRecorder],
        highlights: Highlights = None,
        pointers=None,
        message: str = "",
        delay: Optional[float] = None,
        state: Any = None,
        aux: Any = None,
    ) -> Optional[Step]:
        if message:
            self.message = message
        if self._quiet or rec is None:
            return None
        return rec.record(
            self.snapshot() if state is None else state,
            highlights,
            pointers,
            message or self.message,
            self.aux() if aux is None else aux,
            pause=self.step_delay if delay is None else delay,
        )

    def _play(self, event: str):
        if not self._quiet:
            self.sound.play(event)

    def _silently(self, gen: StepGenerator) -> OperationResult:
        """Drains a step generator without recording or sound."""
        self._quiet = True
        try:
            while True:
                next(gen)
        except StopIteration as stop:
            return stop.value if stop.value is not None else done("")
        finally:
            self._quiet = False

    def _reject(self, name: str) -> OperationResult:
        logger.debug("%s rejected: %s in flight", name, self.control.current)
        return failed(Outcome.REJECTED, f"Busy: {self.control.current or 'animation playing'}")

    def _sync(self, name: str, action: Callable[[], OperationResult]) -> OperationResult:
        """Runs an unanimated edit under the operation lock."""
        if self.player.is_playing or not self.control.acquire(name):
            return self._reject(name)
        try:
            result = action()
        finally:
            self.control.release()
        if result.message:
            self.message = result.message
        self.player.clear()
        return result

    # --- live operations ---

    def _begin(self, name: str, factory: Callable[[StepRecorder], StepGenerator]) -> Operation:
        if not self.control.acquire(name):
            return Operation.finished(name, self._reject(name))
        rec = StepRecorder()
        op = Operation(name, factory(rec), rec, self.control, self.pacing, self._finished)
        self.operation = op
        return op

    def _finished(self, result: OperationResult):
        if result.message:
            self.message = result.message
        self.player.load(result.steps)
        self.player.seek_end()

    # --- precomputed timelines ---

    def _precompute(
        self,
        name: str,
        factory: Callable[[StepRecorder], StepGenerator],
        autoplay: bool = True,
    ) -> OperationResult:
        if self.player.is_playing or not self.control.acquire(name):
            return self._reject(name)
        rec = StepRecorder()
        gen = factory(rec)
        try:
            while True:
                next(gen)
        except StopIteration as stop:
            result = stop.value if stop.value is not None else done("")
        finally:
            self.control.release()
        result.steps = tuple(rec.steps)
        if result.message:
            self.message = result.message
        self.player.load(result.steps, autoplay=autoplay)
        return result
