from __future__ import annotations

from typing import Tuple

from block_fit.game import PieceType
from block_fit.game.grid import OBSTACLE_VALUE

Color = Tuple[int, int, int]

BOARD_COLOR: Color = (30, 58, 95)
BORDER_COLOR: Color = (52, 152, 219)
OBSTACLE_COLOR: Color = (127, 140, 141)

PIECE_COLORS = {
    PieceType.I: (46, 204, 113),
    PieceType.O: (231, 76, 60),
    PieceType.T: (52, 152, 219),
    PieceType.L: (241, 196, 15),
    PieceType.J: (155, 89, 182),
    PieceType.S: (26, 188, 156),
    PieceType.Z: (230, 126, 34),
    PieceType.PLUS: (46, 204, 113),
    PieceType.U: (231, 76, 60),
}


def color_for_value(v: int) -> Color:
    """Color of one cell of a grid snapshot (0 empty, -1 obstacle, else a piece)."""
    v = int(v)
    if v == 0:
        return BOARD_COLOR
    if v == OBSTACLE_VALUE:
        return OBSTACLE_COLOR
    return PIECE_COLORS.get(PieceType(v), (200, 200, 200))
