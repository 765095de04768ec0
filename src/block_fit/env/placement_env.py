from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_fit.game import GameConfig, Piece, PieceType, PuzzleGame, ScoringRules, Session
from block_fit.game.grid import OBSTACLE_VALUE
from block_fit.visualization.palette import color_for_value

ORIENTATIONS = 8  # 4 rotations x mirrored or not


def orientation_of(index: int) -> Tuple[int, bool]:
    """Map an orientation index to (rotation, flipped)."""
    return index % 4, index >= 4


def _compute_action_mask(session: Session) -> np.ndarray:
    kinds = list(session.pieces)
    rows, cols = session.grid.rows, session.grid.cols
    mask = np.zeros((len(kinds), rows, cols, ORIENTATIONS), dtype=np.bool_)
    if not session.is_active:
        return mask
    for idx, kind in enumerate(kinds):
        if session.pieces[kind].is_placed:
            continue
        probe = Piece(kind)
        for o in range(ORIENTATIONS):
            probe.rotation, probe.flipped = orientation_of(o)
            for row, col in session.grid.valid_anchors(probe.shape()):
                mask[idx, row, col, o] = True
    return mask


class BlockFitEnv(gym.Env):
    """One level of Block Fit as an episodic task.

    Action: (piece index in the level inventory, anchor row, anchor col,
    orientation). Orientation 0-3 are clockwise quarter turns, 4-7 the same
    turns mirrored. The episode ends when the level is won or the clock runs
    out, and is truncated when no unplaced piece fits anywhere.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, level_index: int = 0, config: Optional[GameConfig] = None,
                 rules: Optional[ScoringRules] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0,
                 seconds_per_step: int = 0) -> None:
        super().__init__()
        self.level_index = int(level_index)
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.seconds_per_step = int(seconds_per_step)
        self.reward_weights: Dict[str, float] = {
            "cells": 0.1,   # reward per cell placed
            "win": 10.0,    # completing the board
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        self.game = PuzzleGame(self.config, self.rules)
        session = self.game.load_level(self.level_index)
        level = session.level
        k = len(level.pieces)

        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=OBSTACLE_VALUE, high=int(max(PieceType)), shape=(level.rows, level.cols), dtype=np.int8),
                "placed": spaces.MultiBinary(k),
                "time_remaining": spaces.Box(low=0, high=level.time_budget, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, level.rows, level.cols, ORIENTATIONS))

        self._last_obs: Optional[Dict[str, Any]] = None

    @property
    def session(self) -> Session:
        assert self.game.session is not None
        return self.game.session

    def _get_obs(self) -> Dict[str, Any]:
        session = self.session
        placed = np.array([int(p.is_placed) for p in session.pieces.values()], dtype=np.int8)
        return {
            "grid": session.grid.clone_state().astype(np.int8),
            "placed": placed,
            "time_remaining": np.array([session.time_remaining], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        session = self.session
        return {
            "action_mask": _compute_action_mask(session),
            "score": session.score,
            "progress": session.progress_percentage(),
            "status": session.status.value,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.session)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        # Fresh coordinator so the engine score does not carry across episodes
        self.game = PuzzleGame(self.config, self.rules)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.load_level(self.level_index)
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def _orient(self, kind: PieceType, rotation: int, flipped: bool) -> None:
        session = self.session
        piece = session.pieces[kind]
        for _ in range(4):
            if piece.rotation == rotation:
                break
            session.rotate(kind)
        if piece.flipped != flipped:
            session.flip(kind)

    def step(self, action: np.ndarray | Tuple[int, int, int, int]):
        piece_idx, row, col, o = map(int, action)
        session = self.session
        kinds = list(session.pieces)

        reward_components: Dict[str, float] = {}
        score_before = session.score
        accepted = False
        if 0 <= piece_idx < len(kinds) and 0 <= o < ORIENTATIONS:
            kind = kinds[piece_idx]
            rotation, flipped = orientation_of(o)
            if session.is_active and not session.pieces[kind].is_placed:
                self._orient(kind, rotation, flipped)
            result = session.place_piece(kind, row, col)
            accepted = result.accepted
            if accepted:
                reward_components["cells"] = self.reward_weights["cells"] * float(result.cells_placed)
                if result.victory:
                    reward_components["win"] = self.reward_weights["win"]
        if not accepted:
            reward_components["invalid"] = self.invalid_action_penalty

        reward_components["step"] = self.step_penalty
        for _ in range(self.seconds_per_step):
            self.game.ticker.tick()

        terminated = not session.is_active
        truncated = bool(session.is_active and not session.has_legal_move())
        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = float(session.score - score_before)
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.session.grid.clone_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color_for_value(grid[y, x])
            return img
        return None

    def close(self) -> None:
        if self.game.session is not None:
            self.game.session.stop()
