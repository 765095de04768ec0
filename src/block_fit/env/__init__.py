"""Gymnasium environments for Block Fit."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .placement_env import BlockFitEnv
from .wrappers import FlattenDiscreteActionWrapper

# One level per episode; pass level_index to gym.make to pick another level
register(
    id="BlockFit-v0",
    entry_point="block_fit.env.placement_env:BlockFitEnv",
)

__all__ = ["BlockFitEnv", "FlattenDiscreteActionWrapper"]
