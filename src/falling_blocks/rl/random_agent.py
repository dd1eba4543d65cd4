from __future__ import annotations

import argparse
from typing import Optional

import gymnasium as gym

import falling_blocks.env  # noqa: F401  ensure registration


def run_random(steps: int = 200, seed: Optional[int] = None, render: bool = False) -> float:
    env = gym.make("FallingBlocks-10x20-v0", render_mode="ansi" if render else None)
    env.action_space.seed(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if render:
            print(env.render())
            print()
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    print(f"Random agent: {total_reward:.0f} rows cleared over {steps} ticks ({episodes} finished episodes)")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--render", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    run_random(steps=args.steps, seed=args.seed, render=args.render)


if __name__ == "__main__":  # pragma: no cover
    main()
