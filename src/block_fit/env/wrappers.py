from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .placement_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens MultiDiscrete (piece, row, col, orientation) -> Discrete(N).

    Also exposes `get_action_mask()` returning a 1D boolean mask of shape (N,).
    Order: piece, row, col, orientation (C-order flattening).
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        self.nvec = tuple(int(n) for n in env.action_space.nvec)
        self.n = int(np.prod(self.nvec))
        self.action_space = spaces.Discrete(self.n)

    def _unflatten(self, idx: int) -> tuple[int, int, int, int]:
        piece, row, col, o = np.unravel_index(int(idx), self.nvec)
        return int(piece), int(row), int(col), int(o)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        mask4d = _compute_action_mask(self.env.unwrapped.session)
        return mask4d.reshape(-1)
