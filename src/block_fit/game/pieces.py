from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Tuple, Union

import numpy as np


class PieceType(IntEnum):
    I = 1
    O = 2
    T = 3
    L = 4
    J = 5
    S = 6
    Z = 7
    PLUS = 8
    U = 9

    @classmethod
    def parse(cls, value: Union["PieceType", str, int]) -> "PieceType":
        """Resolve a piece kind from an enum member, its name or its value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown piece id: {value!r}") from None
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            return cls(int(value))
        raise ValueError(f"unknown piece id: {value!r}")


Shape = np.ndarray
Anchor = Tuple[int, int]


def rotate_cw(shape: Shape) -> Shape:
    """Rotate a mask 90 degrees clockwise: out[i, j] == shape[R - 1 - j, i]."""
    return np.rot90(shape, 1, axes=(1, 0)).copy()


def mirror_horizontal(shape: Shape) -> Shape:
    return shape[:, ::-1].copy()


def current_shape(base: Shape, rotation: int = 0, flipped: bool = False) -> Shape:
    # Rotation first, then the mirror; renderers and validation rely on this order
    shape = np.array(base, dtype=np.int8)
    for _ in range(rotation % 4):
        shape = rotate_cw(shape)
    if flipped:
        shape = mirror_horizontal(shape)
    return shape


@dataclass(frozen=True)
class PieceDefinition:
    kind: PieceType
    base_shape: Shape
    unlock_level: int = 0  # informational, levels list their own inventory


def _mask(rows) -> Shape:
    # Shared by every level, so never writable
    arr = np.array(rows, dtype=np.int8)
    arr.setflags(write=False)
    return arr


PIECE_DEFINITIONS: Dict[PieceType, PieceDefinition] = {
    PieceType.I: PieceDefinition(PieceType.I, _mask([[1, 1, 1, 1]])),
    PieceType.O: PieceDefinition(PieceType.O, _mask([[1, 1], [1, 1]])),
    PieceType.T: PieceDefinition(PieceType.T, _mask([[0, 1, 0], [1, 1, 1]])),
    PieceType.L: PieceDefinition(PieceType.L, _mask([[1, 0], [1, 0], [1, 1]])),
    PieceType.J: PieceDefinition(PieceType.J, _mask([[0, 1], [0, 1], [1, 1]])),
    PieceType.S: PieceDefinition(PieceType.S, _mask([[0, 1, 1], [1, 1, 0]])),
    PieceType.Z: PieceDefinition(PieceType.Z, _mask([[1, 1, 0], [0, 1, 1]])),
    PieceType.PLUS: PieceDefinition(PieceType.PLUS, _mask([[0, 1, 0], [1, 1, 1], [0, 1, 0]]), unlock_level=3),
    PieceType.U: PieceDefinition(PieceType.U, _mask([[1, 0, 1], [1, 1, 1]]), unlock_level=4),
}


@dataclass
class Piece:
    """One piece of a level's inventory.

    Orientation can change only until the piece is placed; afterwards the
    piece keeps the anchor it was committed at for the rest of the level.
    """

    kind: PieceType
    rotation: int = 0  # 0..3, clockwise quarter turns
    flipped: bool = False
    is_placed: bool = False
    anchor: Optional[Anchor] = None

    @property
    def definition(self) -> PieceDefinition:
        return PIECE_DEFINITIONS[self.kind]

    def shape(self) -> Shape:
        return current_shape(self.definition.base_shape, self.rotation, self.flipped)

    def cell_count(self) -> int:
        return int(np.count_nonzero(self.definition.base_shape))

    def rotate(self) -> bool:
        if self.is_placed:
            return False
        self.rotation = (self.rotation + 1) % 4
        return True

    def flip(self) -> bool:
        if self.is_placed:
            return False
        self.flipped = not self.flipped
        return True
