"""Puzzle engine for Block Fit.

Exports the engine and its supporting classes:
- PieceType / Piece: piece catalog, orientation and shape transforms
- GameGrid: board cells, obstacles and placement validation
- ScoringRules: victory and hint score arithmetic
- LevelDescriptor / GameConfig: level table and tunables
- Ticker: one-second clock driving the countdown
- Session / PuzzleGame: level state machine and level coordinator
"""

from .pieces import (
    PIECE_DEFINITIONS,
    Piece,
    PieceDefinition,
    PieceType,
    current_shape,
    mirror_horizontal,
    rotate_cw,
)
from .grid import Cell, GameGrid, Rejection, generate_obstacles
from .rules import ScoringRules
from .levels import GameConfig, LevelDescriptor, build_levels
from .timer import Ticker
from .hints import Hint, find_hint
from .core import PlacedPiece, PlacementResult, PuzzleGame, Session, SessionStatus

__all__ = [
    "PIECE_DEFINITIONS",
    "Piece",
    "PieceDefinition",
    "PieceType",
    "current_shape",
    "mirror_horizontal",
    "rotate_cw",
    "Cell",
    "GameGrid",
    "Rejection",
    "generate_obstacles",
    "ScoringRules",
    "GameConfig",
    "LevelDescriptor",
    "build_levels",
    "Ticker",
    "Hint",
    "find_hint",
    "PlacedPiece",
    "PlacementResult",
    "PuzzleGame",
    "Session",
    "SessionStatus",
]
