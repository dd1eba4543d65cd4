from __future__ import annotations

from enum import IntEnum
from typing import Any, FrozenSet, Iterable

import numpy as np


class Direction(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    SOFT_DROP = 3
    RISE = 4

    @classmethod
    def coerce(cls, value: Any) -> "Direction":
        """Normalize a direction-like value; anything unrecognized becomes NONE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), cls.NONE)
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
            return cls.NONE
        try:
            return cls(int(value))
        except ValueError:
            return cls.NONE


class Button(IntEnum):
    LEFT = 0
    RIGHT = 1
    DOWN = 2
    UP = 3


class InputSampler:
    """Turns the set of held buttons into one direction per sample.

    Left, Right and Up are edge-triggered (they act on the sample where the
    button goes down). Down is level-triggered and repeats while held.
    """

    def __init__(self) -> None:
        self._previous: FrozenSet[Button] = frozenset()

    def reset(self) -> None:
        self._previous = frozenset()

    def _just_pressed(self, pressed: FrozenSet[Button], button: Button) -> bool:
        return button in pressed and button not in self._previous

    def sample(self, pressed: Iterable[Button]) -> Direction:
        now = frozenset(Button(b) for b in pressed)
        if self._just_pressed(now, Button.LEFT):
            direction = Direction.LEFT
        elif self._just_pressed(now, Button.RIGHT):
            direction = Direction.RIGHT
        elif Button.DOWN in now:
            direction = Direction.SOFT_DROP
        elif self._just_pressed(now, Button.UP):
            direction = Direction.RISE
        else:
            direction = Direction.NONE
        self._previous = now
        return direction
