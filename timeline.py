# timeline.py
# VCR-style playback over a recorded step sequence

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, List, Optional, Sequence

from settings import DEFAULT_SPEED
from steps import Step


class PlayerState(Enum):
    STOPPED = auto()
    PLAYING = auto()


class TimelinePlayer:
    """
    Holds a step sequence, the current index, a play/pause flag and a speed
    multiplier. The frame loop drives it through update(dt_ms); while
    playing it advances one step every 1000 / speed milliseconds and stops
    on the last step.
    """

    def __init__(
        self,
        steps: Sequence[Step] = (),
        speed: float = DEFAULT_SPEED,
        on_step: Optional[Callable[[Step], None]] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.index = 0
        self.state = PlayerState.STOPPED
        self.speed = speed
        self.on_step = on_step
        self._timer = 0.0

    # --- sequence ---

    def load(self, steps: Sequence[Step], autoplay: bool = False):
        self.stop()
        self.steps = list(steps)
        self.index = 0
        self._notify()
        if autoplay:
            self.play()

    def clear(self):
        self.load(())

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return max(0, len(self.steps) - 1)

    @property
    def current_step(self) -> Optional[Step]:
        if 0 <= self.index < len(self.steps):
            return self.steps[self.index]
        return None

    @property
    def at_end(self) -> bool:
        return self.index >= self.last_index

    @property
    def is_playing(self) -> bool:
        return self.state is PlayerState.PLAYING

    @property
    def interval(self) -> float:
        return 1000.0 / self.speed

    # --- transport ---

    def play(self):
        if not self.steps:
            return
        if self.at_end:
            self._goto(0)
        self._timer = 0.0
        self.state = PlayerState.PLAYING

    def pause(self):
        self.state = PlayerState.STOPPED
        self._timer = 0.0

    stop = pause

    def toggle_play(self):
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def step_forward(self):
        self.stop()
        if self.index < self.last_index:
            self._goto(self.index + 1)

    def step_backward(self):
        self.stop()
        if self.index > 0:
            self._goto(self.index - 1)

    def seek(self, index: int):
        if self.is_playing:
            self.pause()
        if not self.steps:
            return
        self._goto(max(0, min(self.last_index, index)))

    def seek_end(self):
        self.seek(self.last_index)

    def set_speed(self, speed: float):
        if speed <= 0:
            raise ValueError("speed must be positive")
        self.speed = speed

    # --- cadence ---

    def update(self, dt: float):
        if not self.is_playing:
            return
        if self.at_end:
            self.stop()
            return
        self._timer += dt
        while self._timer >= self.interval and self.is_playing:
            self._timer -= self.interval
            self._goto(self.index + 1)
            if self.at_end:
                self.stop()

    def _goto(self, index: int):
        self.index = index
        self._notify()

    def _notify(self):
        step = self.current_step
        if self.on_step and step is not None:
            self.on_step(step)
