from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .pieces import PieceType, Shape


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

OBSTACLE_VALUE = -1


class Rejection(str, Enum):
    """Why a placement (or another session request) was refused."""

    OUT_OF_BOUNDS = "out_of_bounds"
    OCCUPIED = "occupied"
    OBSTACLE = "obstacle"
    ALREADY_PLACED = "already_placed"
    UNKNOWN_PIECE = "unknown_piece"
    NOT_ACTIVE = "not_active"


@dataclass(frozen=True)
class Cell:
    occupied: bool
    piece_id: Optional[PieceType]
    is_obstacle: bool


class GameGrid:
    """Rectangular board of cells.

    `grid` holds 0 for empty cells and the `PieceType` value of the occupying
    piece otherwise; `obstacles` flags blocked cells. Cells are only ever
    marked, never cleared, for the lifetime of a level.
    """

    def __init__(self, rows: int, cols: int) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError(f"board dimensions must be positive, got {rows}x{cols}")
        self.rows = int(rows)
        self.cols = int(cols)
        self.grid = np.zeros((self.rows, self.cols), dtype=np.int8)
        self.obstacles = np.zeros((self.rows, self.cols), dtype=np.bool_)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check_bounds(self, row: int, col: int) -> None:
        # numpy would silently wrap negative indices
        if not self.is_inside(row, col):
            raise IndexError(f"cell ({row}, {col}) outside {self.rows}x{self.cols} board")

    def cell(self, row: int, col: int) -> Cell:
        self._check_bounds(row, col)
        value = int(self.grid[row, col])
        return Cell(
            occupied=value != 0,
            piece_id=PieceType(value) if value else None,
            is_obstacle=bool(self.obstacles[row, col]),
        )

    def mark_obstacle(self, row: int, col: int) -> None:
        self._check_bounds(row, col)
        if self.grid[row, col] != 0:
            raise ValueError(f"cell ({row}, {col}) is occupied and cannot become an obstacle")
        self.obstacles[row, col] = True

    def mark_occupied(self, row: int, col: int, kind: PieceType) -> None:
        self._check_bounds(row, col)
        if self.obstacles[row, col]:
            raise ValueError(f"cell ({row}, {col}) is an obstacle")
        if self.grid[row, col] != 0:
            raise ValueError(f"cell ({row}, {col}) is already occupied")
        self.grid[row, col] = int(kind)

    def placement_error(self, shape: Shape, row: int, col: int) -> Optional[Rejection]:
        """Return why `shape` anchored at (row, col) cannot be placed, or None."""
        h, w = shape.shape
        for i in range(h):
            for j in range(w):
                if not shape[i, j]:
                    continue
                r, c = row + i, col + j
                if not self.is_inside(r, c):
                    return Rejection.OUT_OF_BOUNDS
                if self.grid[r, c] != 0:
                    return Rejection.OCCUPIED
                if self.obstacles[r, c]:
                    return Rejection.OBSTACLE
        return None

    def can_place(self, shape: Shape, row: int, col: int) -> bool:
        return self.placement_error(shape, row, col) is None

    def place(self, shape: Shape, row: int, col: int, kind: PieceType) -> int:
        """Write `kind` into every filled cell of `shape`; returns cells written."""
        error = self.placement_error(shape, row, col)
        if error is not None:
            raise ValueError(f"illegal placement of {kind.name} at ({row}, {col}): {error.value}")
        cells = 0
        for i, j in zip(*np.nonzero(shape)):
            self.grid[row + i, col + j] = int(kind)
            cells += 1
        return cells

    def valid_anchors(self, shape: Shape) -> List[Coordinate]:
        h, w = shape.shape
        anchors: List[Coordinate] = []
        for row in range(self.rows - h + 1):
            for col in range(self.cols - w + 1):
                if self.can_place(shape, row, col):
                    anchors.append((row, col))
        return anchors

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    def obstacle_count(self) -> int:
        return int(np.count_nonzero(self.obstacles))

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def available_cells(self) -> int:
        return self.total_cells - self.obstacle_count()

    def is_complete(self) -> bool:
        return bool(np.all((self.grid != 0) | self.obstacles))

    def progress_percentage(self) -> int:
        available = self.available_cells()
        if available <= 0:
            return 0
        # Round half up, not Python's banker's rounding
        return int(math.floor(self.occupied_count() / available * 100 + 0.5))

    def clone_state(self) -> np.ndarray:
        state = self.grid.copy()
        state[self.obstacles] = OBSTACLE_VALUE
        return state


def obstacle_target(rows: int, cols: int, ratio: float) -> int:
    return int(math.floor(rows * cols * ratio))


def generate_obstacles(grid: GameGrid, count: int, rng: random.Random) -> List[Coordinate]:
    """Mark `count` distinct random free cells as obstacles.

    Must run before any piece is placed. Duplicates are rejected and redrawn.
    """
    free = grid.total_cells - grid.obstacle_count() - grid.occupied_count()
    if count > free:
        raise ValueError(f"cannot place {count} obstacles on {free} free cells")
    marked: List[Coordinate] = []
    while len(marked) < count:
        row = rng.randrange(grid.rows)
        col = rng.randrange(grid.cols)
        if grid.obstacles[row, col] or grid.grid[row, col] != 0:
            continue
        grid.mark_obstacle(row, col)
        marked.append((row, col))
    logger.debug("Marked %d obstacles on %dx%d board", len(marked), grid.rows, grid.cols)
    return marked
