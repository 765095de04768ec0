from __future__ import annotations

import argparse
import logging
import random
from typing import Optional

import numpy as np
import gymnasium as gym

import block_fit.env  # noqa: F401


def run_random(steps: int = 200, level: int = 0, seed: Optional[int] = None) -> float:
    rng = random.Random(seed)
    env = gym.make("BlockFit-v0", level_index=level)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    wins = 0
    for _ in range(steps):
        # Prefer valid actions if available
        valid = np.argwhere(info["action_mask"])
        if len(valid):
            action = valid[rng.randrange(len(valid))]
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            wins += int(info["status"] == "won")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f} over {episodes} episodes ({wins} won)")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--level", type=int, default=1, help="Level to play (1-based)")
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    logging.basicConfig(level=logging.WARNING)
    run_random(args.steps, max(0, args.level - 1), args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
