from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .pieces import PieceType

if TYPE_CHECKING:
    from .core import Session


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hint:
    kind: PieceType
    row: int
    col: int


def find_hint(session: "Session", rng: random.Random, attempts: int = 100) -> Optional[Hint]:
    """Look for a legal anchor for one random unplaced piece.

    Only the piece's current orientation is tried, with `attempts` uniform
    anchor draws. This is a heuristic: it may miss placements that exist.
    Nothing is mutated.
    """
    candidates = session.unplaced_pieces()
    if not candidates:
        return None
    piece = rng.choice(candidates)
    shape = piece.shape()
    h, w = shape.shape
    max_row = session.grid.rows - h
    max_col = session.grid.cols - w
    if max_row < 0 or max_col < 0:
        logger.debug("Piece %s does not fit the board in its current orientation", piece.kind.name)
        return None
    for _ in range(attempts):
        row = rng.randint(0, max_row)
        col = rng.randint(0, max_col)
        if session.is_valid_placement(piece.kind, row, col):
            return Hint(piece.kind, row, col)
    logger.info("No hint found for piece %s after %d attempts", piece.kind.name, attempts)
    return None
