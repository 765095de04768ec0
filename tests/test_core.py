import numpy as np
import pytest

from block_fit.game import (
    GameConfig,
    LevelDescriptor,
    PieceType,
    PuzzleGame,
    Rejection,
    Session,
    SessionStatus,
    Ticker,
    build_levels,
)


def solve_level_zero_rest(session):
    """Finish the 4x4 level-0 board once I fills the top row."""
    results = [
        session.place_piece(PieceType.O, 2, 0),
        session.place_piece(PieceType.J, 1, 2),
    ]
    assert session.rotate(PieceType.L)
    assert session.flip(PieceType.L)
    results.append(session.place_piece(PieceType.L, 1, 0))
    return results


def solve_level_zero(session):
    return [session.place_piece(PieceType.I, 0, 0)] + solve_level_zero_rest(session)


def test_level_table():
    levels = build_levels()
    assert len(levels) == 10
    assert [lvl.time_budget for lvl in levels] == [120, 110, 100, 90, 80, 70, 60, 50, 40, 30]
    assert (levels[0].rows, levels[0].cols) == (4, 4)
    assert levels[0].pieces == (PieceType.I, PieceType.O, PieceType.L, PieceType.J)
    assert (levels[8].rows, levels[8].cols) == (8, 12)
    assert levels[8].obstacles
    assert levels[6].reserved_modifiers() == ["mirror_start"]
    assert levels[7].reserved_modifiers() == ["rotation_locked"]
    assert levels[9].reserved_modifiers() == ["time_attack"]
    assert levels[5].pieces[-1] is PieceType.U
    assert levels[0].piece_cells() == 16


def test_custom_time_config():
    levels = build_levels(GameConfig(initial_time=60, time_reduction=5))
    assert levels[0].time_budget == 60
    assert levels[9].time_budget == 15


def test_load_level_starts_active(game):
    session = game.load_level(0)
    assert session.status is SessionStatus.ACTIVE
    assert session.time_remaining == 120
    assert session.score == 0
    assert session.progress_percentage() == 0
    assert [p.kind for p in session.unplaced_pieces()] == list(session.level.pieces)
    assert session.grid.obstacle_count() == 0


def test_load_level_out_of_range(game):
    with pytest.raises(IndexError):
        game.load_level(10)
    with pytest.raises(IndexError):
        game.load_level(-1)


def test_level_zero_walkthrough(game):
    session = game.load_level(0)
    first = session.place_piece("I", 0, 0)
    assert first.accepted and first.cells_placed == 4
    for col in range(4):
        assert session.grid.cell(0, col).piece_id is PieceType.I
    assert not session.is_valid_placement(PieceType.O, 0, 0)
    assert session.place_piece(PieceType.O, 0, 1).rejection is Rejection.OCCUPIED
    assert not session.is_valid_placement(PieceType.I, 0, 1)
    assert session.progress_percentage() == 25
    assert not session.check_victory()

    results = solve_level_zero_rest(session)
    assert all(r.accepted for r in results)
    assert results[-1].victory
    assert session.check_victory()
    assert session.status is SessionStatus.WON
    assert session.grid.occupied_count() == 16
    assert session.progress_percentage() == 100
    assert session.current_score() == 100 + 120 * 5 + 50
    assert [p.kind for p in session.placed_pieces] == [PieceType.I, PieceType.O, PieceType.J, PieceType.L]
    assert session.pieces[PieceType.L].anchor == (1, 0)


def test_l_shape_placement_from_scenario(game):
    session = game.load_level(0)
    session.place_piece(PieceType.I, 0, 0)
    session.place_piece(PieceType.O, 1, 0)
    result = session.place_piece(PieceType.L, 1, 2)
    assert result.accepted
    for r, c in [(1, 2), (2, 2), (3, 2), (3, 3)]:
        assert session.grid.cell(r, c).piece_id is PieceType.L
    # Remaining cells are scattered; J cannot finish this board
    assert not session.check_victory()
    assert session.status is SessionStatus.ACTIVE


def test_win_score_uses_remaining_time(game, ticker):
    session = game.load_level(0)
    for _ in range(10):
        ticker.tick()
    assert session.time_remaining == 110
    solve_level_zero(session)
    assert session.status is SessionStatus.WON
    assert session.score == 100 + 110 * 5 + 50
    # The ticker is released once the level is won
    assert not ticker.active
    ticker.tick()
    assert session.time_remaining == 110


def test_second_placement_of_same_piece_rejected(game):
    session = game.load_level(0)
    assert session.place_piece(PieceType.O, 0, 0).accepted
    before = session.grid.clone_state()
    again = session.place_piece(PieceType.O, 2, 2)
    assert not again.accepted
    assert again.rejection is Rejection.ALREADY_PLACED
    assert (session.grid.clone_state() == before).all()
    assert len(session.placed_pieces) == 1


def test_unknown_piece_rejected(game):
    session = game.load_level(0)
    result = session.place_piece(PieceType.T, 0, 0)
    assert result.rejection is Rejection.UNKNOWN_PIECE
    assert session.place_piece("nope", 0, 0).rejection is Rejection.UNKNOWN_PIECE
    assert not session.rotate(PieceType.PLUS)
    assert not session.flip("nope")
    for bad in (None, 2.9, True):
        assert session.place_piece(bad, 0, 0).rejection is Rejection.UNKNOWN_PIECE
        assert not session.is_valid_placement(bad, 0, 0)
        assert not session.rotate(bad)
        assert not session.flip(bad)
    assert session.grid.occupied_count() == 0
    with pytest.raises(KeyError):
        session.piece(PieceType.U)


def test_rejected_placement_does_not_mutate(game):
    session = game.load_level(0)
    result = session.place_piece(PieceType.I, 1, 1)
    assert not result.accepted
    assert result.rejection is Rejection.OUT_OF_BOUNDS
    assert session.grid.occupied_count() == 0
    assert not session.pieces[PieceType.I].is_placed
    assert session.pieces[PieceType.I].anchor is None


def test_rotate_and_flip_ignored_after_placement(game):
    session = game.load_level(0)
    session.place_piece(PieceType.L, 0, 0)
    assert not session.rotate(PieceType.L)
    assert not session.flip(PieceType.L)
    piece = session.pieces[PieceType.L]
    assert piece.rotation == 0 and not piece.flipped


def test_rotation_changes_validity(game):
    session = game.load_level(0)
    # Vertical I needs four rows
    assert session.rotate(PieceType.I)
    assert session.is_valid_placement(PieceType.I, 0, 3)
    assert not session.is_valid_placement(PieceType.I, 1, 3)


def test_timeout(game, ticker):
    session = game.load_level(0)
    for _ in range(119):
        ticker.tick()
    assert session.status is SessionStatus.ACTIVE
    assert session.time_remaining == 1
    ticker.tick()
    assert session.time_remaining == 0
    assert session.status is SessionStatus.TIMED_OUT
    assert not ticker.active
    ticker.tick()
    assert session.time_remaining == 0
    assert session.score == 0


def test_terminal_session_rejects_requests(game, ticker):
    session = game.load_level(0)
    for _ in range(120):
        ticker.tick()
    assert session.place_piece(PieceType.I, 0, 0).rejection is Rejection.NOT_ACTIVE
    assert not session.is_valid_placement(PieceType.I, 0, 0)
    assert not session.rotate(PieceType.I)
    assert not session.flip(PieceType.I)
    assert session.hint() is None
    assert session.grid.occupied_count() == 0


def test_direct_tick_on_terminal_session_is_idempotent(ticker):
    level = LevelDescriptor(rows=1, cols=4, pieces=(PieceType.I,), time_budget=1)
    session = Session(0, level, ticker=ticker)
    session.on_tick()
    assert session.status is SessionStatus.TIMED_OUT
    session.on_tick()
    assert session.time_remaining == 0
    assert session.status is SessionStatus.TIMED_OUT


def test_reload_cancels_previous_timer(game, ticker):
    first = game.load_level(0)
    second = game.retry()
    assert second is not first
    ticker.tick()
    assert first.time_remaining == 120
    assert second.time_remaining == 119
    # A stale stop never detaches the live session
    first.stop()
    ticker.tick()
    assert second.time_remaining == 118


def test_score_persists_across_retry(game):
    session = game.load_level(0)
    solve_level_zero(session)
    won = session.score
    assert won == 750
    again = game.retry()
    assert again.score == won
    assert game.score == won
    assert again.grid.occupied_count() == 0
    assert again.time_remaining == 120
    assert again.status is SessionStatus.ACTIVE
    assert all(not p.is_placed for p in again.pieces.values())


def test_next_level_carries_score(game):
    solve_level_zero(game.load_level(0))
    nxt = game.next_level()
    assert nxt is not None
    assert game.current_level == 1
    assert nxt.score == 750
    assert (nxt.grid.rows, nxt.grid.cols) == (5, 5)
    assert nxt.time_remaining == 110


def test_next_level_after_last_returns_none(game):
    game.load_level(9)
    assert game.next_level() is None
    assert game.current_level == 9


def test_obstacle_level(game):
    session = game.load_level(8)
    assert session.grid.obstacle_count() == 9
    assert session.grid.available_cells() == 96 - 9
    assert session.grid.occupied_count() == 0


def test_obstacles_are_seeded():
    a = PuzzleGame(GameConfig(random_seed=42)).load_level(8)
    b = PuzzleGame(GameConfig(random_seed=42)).load_level(8)
    assert (a.grid.obstacles == b.grid.obstacles).all()


def test_obstacles_regenerated_on_retry(game):
    first = game.load_level(8)
    second = game.retry()
    assert second.grid is not first.grid
    assert second.grid.obstacle_count() == 9


def test_get_state_snapshot(game):
    session = game.load_level(0)
    session.place_piece(PieceType.O, 0, 0)
    state = session.get_state()
    assert state["grid"][0, 0] == int(PieceType.O)
    assert state["status"] is SessionStatus.ACTIVE
    assert state["progress"] == 25
    assert state["time_remaining"] == 120
    assert {p["kind"] for p in state["pieces"] if p["is_placed"]} == {PieceType.O}
    assert game.grid_snapshot().shape == (4, 4)


def test_has_legal_move(ticker):
    level = LevelDescriptor(rows=2, cols=2, pieces=(PieceType.I,), time_budget=10)
    session = Session(0, level, ticker=ticker)
    assert not session.has_legal_move()
    level = LevelDescriptor(rows=1, cols=4, pieces=(PieceType.I,), time_budget=10)
    session = Session(0, level, ticker=Ticker())
    assert session.has_legal_move()


def test_placed_piece_record_is_read_only(game):
    session = game.load_level(0)
    session.place_piece(PieceType.O, 0, 0)
    record = session.placed_pieces[0]
    with pytest.raises(ValueError):
        record.shape[0, 0] = 0
    assert record.shape.tolist() == [[1, 1], [1, 1]]


def test_score_is_zero_before_any_level(ticker):
    game = PuzzleGame(ticker=ticker)
    assert game.session is None
    assert game.score == 0


def test_obstacle_cell_rejects_placement(game):
    session = game.load_level(8)
    row, col = (int(v) for v in np.argwhere(session.grid.obstacles)[0])
    anchor = (min(row, session.grid.rows - 2), min(col, session.grid.cols - 2))
    result = session.place_piece(PieceType.O, *anchor)
    assert result.rejection is Rejection.OBSTACLE
    assert not session.is_valid_placement(PieceType.O, *anchor)
    assert session.grid.occupied_count() == 0
