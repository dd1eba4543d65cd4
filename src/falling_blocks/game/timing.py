from __future__ import annotations

import time
from typing import Callable, Iterable, Optional

from .controls import Button, InputSampler
from .core import FallingBlockGame, TickResult


class FixedTimestep:
    """Counts fixed-period ticks elapsed on a monotonic clock."""

    def __init__(self, period: float) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = float(period)
        self.accumulated = 0.0
        self.last_time: Optional[float] = None

    def reset(self) -> None:
        self.accumulated = 0.0
        self.last_time = None

    def advance(self, now: float) -> int:
        if self.last_time is None:
            self.last_time = now
            return 0
        self.accumulated += max(0.0, now - self.last_time)
        self.last_time = now
        due = int(self.accumulated // self.period)
        self.accumulated -= due * self.period
        return due


class GameLoop:
    """Per-frame driver: samples input every frame, runs the engine on fixed ticks."""

    def __init__(
        self,
        game: FallingBlockGame,
        sampler: Optional[InputSampler] = None,
        timestep: Optional[FixedTimestep] = None,
    ) -> None:
        self.game = game
        self.sampler = sampler or InputSampler()
        self.timestep = timestep or FixedTimestep(game.config.tick_period)

    def frame(self, now: float, pressed: Iterable[Button] = ()) -> list[TickResult]:
        self.game.queue_direction(self.sampler.sample(pressed))
        due = self.timestep.advance(now)
        results = []
        for i in range(due):
            tick_time = now - (due - 1 - i) * self.timestep.period
            results.append(self.game.tick(tick_time))
        return results

    def run(
        self,
        read_buttons: Callable[[], Iterable[Button]],
        frames: int,
        fps: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        frame_time = 1.0 / fps
        for _ in range(frames):
            self.frame(clock(), read_buttons())
            if self.game.game_over:
                break
            sleep(frame_time)
