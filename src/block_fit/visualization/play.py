from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

import pygame

from block_fit.game import GameConfig, Piece, PuzzleGame, SessionStatus

from .renderer import Renderer


KEY_TO_INDEX: Dict[int, int] = {
    getattr(pygame, f"K_{n}"): n - 1 for n in range(1, 10)
}


def _format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def _first_unplaced(pieces: List[Piece]) -> Optional[Piece]:
    for piece in pieces:
        if not piece.is_placed:
            return piece
    return None


def status_banner(game: PuzzleGame, message: str) -> str:
    """Banner text for the top line; terminal states override `message`."""
    session = game.session
    if session is None:
        return message
    if session.status is SessionStatus.WON:
        if game.current_level + 1 >= game.level_count:
            return f"All levels complete! Final score {session.score}, N to retry"
        return "Level complete! Enter for next level, N to retry"
    if session.status is SessionStatus.TIMED_OUT:
        return "Time's up! Press N to retry"
    return message


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Fit")
    p.add_argument("--level", type=int, default=1, help="Level to start on (1-based)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=40)
    return p


def run(level: int = 0, seed: Optional[int] = None, cell_size: int = 40) -> None:
    pygame.init()
    try:
        game = PuzzleGame(GameConfig(random_seed=seed))
        session = game.load_level(level)
        renderer = Renderer(cell_size=cell_size)
        margin = renderer.margin

        max_rows = max(lvl.rows for lvl in game.levels)
        max_cols = max(lvl.cols for lvl in game.levels)
        side_panel_w = 8 * 30
        width = margin * 3 + max_cols * cell_size + side_panel_w
        height = max(margin * 2 + max_rows * cell_size, 760)
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Block Fit")
        font = pygame.font.SysFont(None, 24)
        clock = pygame.time.Clock()

        selected = _first_unplaced(list(session.pieces.values()))
        message = f"Level {level + 1}: fill the {session.level.rows}x{session.level.cols} board"

        running = True
        while running:
            elapsed = clock.tick(60)
            game.ticker.advance(elapsed)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in KEY_TO_INDEX:
                        pieces = list(session.pieces.values())
                        idx = KEY_TO_INDEX[event.key]
                        if idx < len(pieces) and not pieces[idx].is_placed:
                            selected = pieces[idx]
                    elif event.key == pygame.K_r and selected is not None:
                        if session.rotate(selected.kind):
                            message = f"Rotated {selected.kind.name}"
                    elif event.key == pygame.K_f and selected is not None:
                        if session.flip(selected.kind):
                            message = f"Flipped {selected.kind.name}"
                    elif event.key == pygame.K_h:
                        hint = session.hint()
                        if hint is not None:
                            message = f"Hint: placed {hint.kind.name} at ({hint.row}, {hint.col}), -{game.rules.hint_penalty}"
                        elif session.is_active:
                            message = "No placement found for the hint, try rotating a piece"
                        selected = _first_unplaced(list(session.pieces.values()))
                    elif event.key == pygame.K_n:
                        session = game.retry()
                        selected = _first_unplaced(list(session.pieces.values()))
                        message = f"Retrying level {game.current_level + 1}"
                    elif event.key == pygame.K_RETURN and session.status is SessionStatus.WON:
                        nxt = game.next_level()
                        if nxt is not None:
                            session = nxt
                            selected = _first_unplaced(list(session.pieces.values()))
                            message = f"Level {game.current_level + 1}"
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and selected is not None:
                    row, col = renderer.cell_at(event.pos)
                    result = session.place_piece(selected.kind, row, col)
                    if result.accepted:
                        message = f"Placed {selected.kind.name}"
                        selected = _first_unplaced(list(session.pieces.values()))
                    elif result.rejection is not None:
                        message = f"Invalid placement for {selected.kind.name}: {result.rejection.value}"

            renderer.draw_board(screen, session.grid.clone_state())
            if session.is_active:
                row, col = renderer.cell_at(pygame.mouse.get_pos())
                renderer.draw_ghost(screen, session, selected, row, col)

            x_text = margin * 2 + max_cols * cell_size
            y = renderer.draw_pieces(screen, session, selected, x_text, margin)
            info_lines = [
                f"Level: {game.current_level + 1}/{game.level_count}",
                f"Time: {_format_time(session.time_remaining)}",
                f"Score: {session.score}",
                f"Progress: {session.progress_percentage()}%",
                "1-9 select  R rotate  F flip",
                "H hint  N retry  Enter next",
            ]
            for i, txt in enumerate(info_lines):
                img = font.render(txt, True, (230, 230, 230))
                screen.blit(img, (x_text, y + i * 20))

            banner = status_banner(game, message)
            screen.blit(font.render(banner, True, (255, 220, 120)), (margin, 2))

            pygame.display.flip()
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run(level=max(0, args.level - 1), seed=args.seed, cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
