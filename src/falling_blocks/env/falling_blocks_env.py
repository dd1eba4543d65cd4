from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import Direction, FallingBlockGame, GameConfig
from falling_blocks.visualization.renderer import Renderer


class FallingBlocksEnv(gym.Env):
    """One environment step is one fixed engine tick.

    Actions are :class:`Direction` values (0..4). The observation is the board
    as an ``int8`` array indexed ``[y, x]`` with row 0 at the floor: 0 empty,
    1 locked, 2 active. The reward is the number of rows cleared by the tick.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 2}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"unsupported render_mode {render_mode!r}")
        self.game = FallingBlockGame(config)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.renderer = Renderer(self.game)

        h = self.game.config.height
        w = self.game.config.width
        self.observation_space = spaces.Box(low=0, high=2, shape=(h, w), dtype=np.int8)
        self.action_space = spaces.Discrete(len(Direction))

        self._now = 0.0
        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.to_array()

    def _get_info(self) -> Dict[str, Any]:
        return {
            "lines_cleared_total": self.game.lines_cleared_total,
            "pieces_spawned": self.game.pieces_spawned,
            "ticks": self.game.ticks,
            "stack_height": self.game.board.get_max_height(),
            "game_over": self.game.game_over,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self._now = 0.0
        self._steps = 0
        self.game.reset(seed, now=self._now)
        return self._get_obs(), self._get_info()

    def step(self, action):
        self._now += self.game.config.tick_period
        self._steps += 1
        result = self.game.tick(self._now, Direction.coerce(action))

        reward = float(result.lines_cleared)
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated

        info = self._get_info()
        info["tick"] = result
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi":
            return self.renderer.draw()
        return None

    def close(self) -> None:
        pass
