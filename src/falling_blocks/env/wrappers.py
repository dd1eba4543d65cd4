from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import Button, InputSampler


class ButtonInputWrapper(gym.ActionWrapper):
    """Accepts held-button flags instead of directions.

    The action is ``MultiBinary(4)`` ordered Left, Right, Down, Up. Each step
    runs the flags through :class:`InputSampler`, so Left/Right/Up act once
    per press and Down repeats while held.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.Discrete)
        self.sampler = InputSampler()
        self.action_space = spaces.MultiBinary(len(Button))

    def reset(self, **kwargs):  # type: ignore[override]
        self.sampler.reset()
        return self.env.reset(**kwargs)

    def action(self, action) -> int:  # type: ignore[override]
        flags = np.asarray(action).reshape(-1)
        pressed = [button for button in Button if button < flags.size and bool(flags[button])]
        return int(self.sampler.sample(pressed))

