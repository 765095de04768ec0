from __future__ import annotations

from typing import Optional

import numpy as np
import pygame

from block_fit.game import Piece, Session
from block_fit.game.grid import OBSTACLE_VALUE

from .palette import BORDER_COLOR, PIECE_COLORS, color_for_value


class Renderer:
    def __init__(self, cell_size: int = 40, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(BORDER_COLOR)
        for y in range(h):
            for x in range(w):
                v = int(state[y, x])
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color_for_value(v), rect)
                if v == OBSTACLE_VALUE:
                    pygame.draw.line(surf, (52, 73, 94), rect.topleft, rect.bottomright, 2)
                    pygame.draw.line(surf, (52, 73, 94), rect.topright, rect.bottomleft, 2)
        return surf

    def cell_at(self, pos: tuple[int, int]) -> tuple[int, int]:
        """Map a window position to the (row, col) under it; may be off-board."""
        mx, my = pos
        return (my - self.margin) // self.cell_size, (mx - self.margin) // self.cell_size

    def draw_board(self, screen: pygame.Surface, state: np.ndarray) -> None:
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(state), (self.margin, self.margin))

    def draw_ghost(self, screen: pygame.Surface, session: Session, piece: Optional[Piece], row: int, col: int) -> None:
        if piece is None or piece.is_placed:
            return
        shape = piece.shape()
        color = (120, 220, 140) if session.is_valid_placement(piece.kind, row, col) else (220, 120, 120)
        for i, j in zip(*np.nonzero(shape)):
            rect = pygame.Rect(
                self.margin + (col + j) * self.cell_size,
                self.margin + (row + i) * self.cell_size,
                self.cell_size - 1,
                self.cell_size - 1,
            )
            pygame.draw.rect(screen, color, rect, 2)

    def draw_pieces(self, screen: pygame.Surface, session: Session, selected: Optional[Piece], x0: int, y0: int) -> int:
        """Draw the inventory in a side panel; returns the y below the panel."""
        small = max(8, self.cell_size // 3)
        font = pygame.font.SysFont(None, 20)
        y = y0
        for idx, piece in enumerate(session.pieces.values()):
            shape = piece.shape()
            color = PIECE_COLORS[piece.kind] if not piece.is_placed else (70, 70, 80)
            label = font.render(f"{idx + 1}: {piece.kind.name}", True, (230, 230, 230))
            screen.blit(label, (x0, y))
            top = y + 18
            for i, j in zip(*np.nonzero(shape)):
                rect = pygame.Rect(x0 + j * small, top + i * small, small - 1, small - 1)
                pygame.draw.rect(screen, color, rect)
            if selected is piece:
                outline = pygame.Rect(x0 - 2, top - 2, shape.shape[1] * small + 4, shape.shape[0] * small + 4)
                pygame.draw.rect(screen, (255, 255, 255), outline, 2)
            y = top + shape.shape[0] * small + 10
        return y
