from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .pieces import PIECE_DEFINITIONS, PieceType


@dataclass
class GameConfig:
    initial_time: int = 120
    time_reduction: int = 10
    obstacle_ratio: float = 0.1
    hint_attempts: int = 100
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class LevelDescriptor:
    rows: int
    cols: int
    pieces: Tuple[PieceType, ...]
    time_budget: int
    obstacles: bool = False
    # Declared per level but without gameplay effect yet
    mirror_start: bool = False
    rotation_locked: bool = False
    time_attack: bool = False

    def reserved_modifiers(self) -> List[str]:
        names = ("mirror_start", "rotation_locked", "time_attack")
        return [name for name in names if getattr(self, name)]

    def piece_cells(self) -> int:
        return sum(int(PIECE_DEFINITIONS[kind].base_shape.sum()) for kind in self.pieces)


_BASE_PIECES = (PieceType.I, PieceType.O, PieceType.L, PieceType.J)
_ALL_PIECES = _BASE_PIECES + (
    PieceType.T,
    PieceType.S,
    PieceType.Z,
    PieceType.PLUS,
    PieceType.U,
)

# (rows, cols, piece count, modifier)
_LEVEL_LAYOUT = [
    (4, 4, 4, None),
    (5, 5, 5, None),
    (5, 6, 6, None),
    (6, 6, 7, None),
    (7, 7, 8, None),
    (8, 8, 9, None),
    (9, 9, 9, "mirror_start"),
    (10, 10, 9, "rotation_locked"),
    (8, 12, 9, "obstacles"),
    (12, 12, 9, "time_attack"),
]


def build_levels(config: Optional[GameConfig] = None) -> List[LevelDescriptor]:
    """Return the level table, each level shorter on time than the previous."""
    config = config or GameConfig()
    levels: List[LevelDescriptor] = []
    for index, (rows, cols, count, modifier) in enumerate(_LEVEL_LAYOUT):
        flags = {modifier: True} if modifier else {}
        levels.append(
            LevelDescriptor(
                rows=rows,
                cols=cols,
                pieces=_ALL_PIECES[:count],
                time_budget=config.initial_time - index * config.time_reduction,
                **flags,
            )
        )
    return levels
