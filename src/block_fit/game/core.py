from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .grid import GameGrid, Rejection, generate_obstacles, obstacle_target
from .hints import Hint, find_hint
from .levels import GameConfig, LevelDescriptor, build_levels
from .pieces import Piece, PieceType, Shape
from .rules import ScoringRules
from .timer import Ticker


logger = logging.getLogger(__name__)

PieceRef = Union[PieceType, str, int]


class SessionStatus(Enum):
    LOADING = "loading"
    ACTIVE = "active"
    WON = "won"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PlacedPiece:
    kind: PieceType
    row: int
    col: int
    shape: Shape


@dataclass
class PlacementResult:
    accepted: bool
    rejection: Optional[Rejection] = None
    cells_placed: int = 0
    progress: int = 0
    victory: bool = False


class Session:
    """Runtime state of one attempt at one level.

    A session is created ready to play and ends in WON or TIMED_OUT. Reloading
    a level always builds a new session; nothing here is reset in place.
    """

    def __init__(
        self,
        level_index: int,
        level: LevelDescriptor,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        ticker: Optional[Ticker] = None,
        score: int = 0,
    ) -> None:
        self.level_index = level_index
        self.level = level
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng or random.Random(self.config.random_seed)
        self.ticker = ticker or Ticker()
        self.score = int(score)
        self.status = SessionStatus.LOADING

        self.grid = GameGrid(level.rows, level.cols)
        if level.obstacles:
            count = obstacle_target(level.rows, level.cols, self.config.obstacle_ratio)
            generate_obstacles(self.grid, count, self.rng)
        for name in level.reserved_modifiers():
            logger.debug("Level %d declares modifier %s; it has no effect", level_index + 1, name)

        self.pieces: Dict[PieceType, Piece] = {kind: Piece(kind) for kind in level.pieces}
        self._placed: List[PlacedPiece] = []
        self.time_remaining = int(level.time_budget)

        self.status = SessionStatus.ACTIVE
        self.ticker.subscribe(self.on_tick)

    # ---------- Lifecycle ----------
    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    def stop(self) -> None:
        self.ticker.unsubscribe(self.on_tick)

    def on_tick(self) -> None:
        if not self.is_active:
            self.stop()
            return
        self.time_remaining -= 1
        if self.time_remaining <= 0:
            self.time_remaining = 0
            self.status = SessionStatus.TIMED_OUT
            self.stop()
            logger.info("Level %d timed out", self.level_index + 1)

    def _win(self) -> None:
        self.status = SessionStatus.WON
        self.stop()
        gained = self.rules.victory_score(self.time_remaining, self.level_index)
        self.score += gained
        logger.info(
            "Level %d complete with %ds left: +%d (score %d)",
            self.level_index + 1,
            self.time_remaining,
            gained,
            self.score,
        )

    # ---------- Pieces ----------
    def _lookup(self, kind: PieceRef) -> Optional[Piece]:
        try:
            return self.pieces.get(PieceType.parse(kind))
        except ValueError:
            return None

    def piece(self, kind: PieceRef) -> Piece:
        found = self._lookup(kind)
        if found is None:
            raise KeyError(f"piece {kind!r} is not part of this level")
        return found

    def unplaced_pieces(self) -> List[Piece]:
        return [p for p in self.pieces.values() if not p.is_placed]

    @property
    def placed_pieces(self) -> Tuple[PlacedPiece, ...]:
        return tuple(self._placed)

    def rotate(self, kind: PieceRef) -> bool:
        piece = self._lookup(kind)
        if piece is None or not self.is_active:
            return False
        return piece.rotate()

    def flip(self, kind: PieceRef) -> bool:
        piece = self._lookup(kind)
        if piece is None or not self.is_active:
            return False
        return piece.flip()

    # ---------- Placement ----------
    def placement_error(self, kind: PieceRef, row: int, col: int) -> Optional[Rejection]:
        if not self.is_active:
            return Rejection.NOT_ACTIVE
        piece = self._lookup(kind)
        if piece is None:
            return Rejection.UNKNOWN_PIECE
        if piece.is_placed:
            return Rejection.ALREADY_PLACED
        return self.grid.placement_error(piece.shape(), row, col)

    def is_valid_placement(self, kind: PieceRef, row: int, col: int) -> bool:
        return self.placement_error(kind, row, col) is None

    def place_piece(self, kind: PieceRef, row: int, col: int) -> PlacementResult:
        error = self.placement_error(kind, row, col)
        if error is not None:
            logger.debug("Rejected %s at (%d, %d): %s", kind, row, col, error.value)
            return PlacementResult(accepted=False, rejection=error, progress=self.progress_percentage())

        piece = self.piece(kind)
        shape = piece.shape()
        cells = self.grid.place(shape, row, col, piece.kind)
        piece.is_placed = True
        piece.anchor = (row, col)
        record = shape.copy()
        record.setflags(write=False)
        self._placed.append(PlacedPiece(piece.kind, row, col, record))

        victory = self.check_victory()
        if victory:
            self._win()
        return PlacementResult(
            accepted=True,
            cells_placed=cells,
            progress=self.progress_percentage(),
            victory=victory,
        )

    def hint(self) -> Optional[Hint]:
        if not self.is_active:
            return None
        found = find_hint(self, self.rng, self.config.hint_attempts)
        if found is None:
            return None
        result = self.place_piece(found.kind, found.row, found.col)
        if not result.accepted:
            return None
        self.score = self.rules.apply_hint_penalty(self.score)
        logger.debug("Hint placed %s at (%d, %d)", found.kind.name, found.row, found.col)
        return found

    # ---------- Queries ----------
    def check_victory(self) -> bool:
        return self.grid.is_complete()

    def current_score(self) -> int:
        return self.score

    def progress_percentage(self) -> int:
        return self.grid.progress_percentage()

    def has_legal_move(self) -> bool:
        """True if some unplaced piece fits somewhere in any orientation."""
        for piece in self.unplaced_pieces():
            probe = Piece(piece.kind)
            for orientation in range(8):
                probe.rotation, probe.flipped = orientation % 4, orientation >= 4
                if self.grid.valid_anchors(probe.shape()):
                    return True
        return False

    def get_state(self) -> dict:
        return {
            "level": self.level_index,
            "grid": self.grid.clone_state(),
            "pieces": [
                {
                    "kind": p.kind,
                    "rotation": p.rotation,
                    "flipped": p.flipped,
                    "is_placed": p.is_placed,
                    "anchor": p.anchor,
                }
                for p in self.pieces.values()
            ],
            "score": self.score,
            "time_remaining": self.time_remaining,
            "status": self.status,
            "progress": self.progress_percentage(),
        }


class PuzzleGame:
    """Owns the level table and the session currently in play."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        ticker: Optional[Ticker] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.ticker = ticker or Ticker()
        self.rng = random.Random(self.config.random_seed)
        self.levels = build_levels(self.config)
        self.current_level = 0
        self.session: Optional[Session] = None

    @property
    def level_count(self) -> int:
        return len(self.levels)

    @property
    def score(self) -> int:
        return self.session.score if self.session is not None else 0

    def load_level(self, level_index: int) -> Session:
        if not 0 <= level_index < len(self.levels):
            raise IndexError(f"level {level_index} outside 0..{len(self.levels) - 1}")
        carried = self.score
        if self.session is not None:
            self.session.stop()
        self.current_level = level_index
        level = self.levels[level_index]
        self.session = Session(
            level_index,
            level,
            config=self.config,
            rules=self.rules,
            rng=self.rng,
            ticker=self.ticker,
            score=carried,
        )
        logger.info(
            "Loaded level %d: %dx%d board, %d pieces, %ds",
            level_index + 1,
            level.rows,
            level.cols,
            len(level.pieces),
            level.time_budget,
        )
        return self.session

    def retry(self) -> Session:
        return self.load_level(self.current_level)

    reset = retry

    def next_level(self) -> Optional[Session]:
        if self.current_level + 1 >= len(self.levels):
            logger.info("All %d levels complete", len(self.levels))
            return None
        return self.load_level(self.current_level + 1)

    def grid_snapshot(self) -> np.ndarray:
        if self.session is None:
            raise RuntimeError("no level loaded")
        return self.session.grid.clone_state()
