"""Move execution: the single mutator of a :class:`~tristris.game.GameState`."""
from __future__ import annotations

from typing import Iterable, NamedTuple, Optional, Tuple

from .board import coords_of, index_of
from .game import (
    GameEnd,
    GameState,
    IllegalMoveError,
    check_game_end,
    check_sub_board_win,
    init_game_state,
    is_move_legal,
    is_sub_board_playable,
)


class MoveResult(NamedTuple):
    moved: bool
    game_end: Optional[GameEnd]


REJECTED = MoveResult(False, None)


def apply_move(state: GameState, sub_board: int, row: int, col: int) -> MoveResult:
    """Play the current player's mark at ``(sub_board, row, col)``.

    Illegal moves leave ``state`` untouched and return ``moved=False``.  When
    the move ends the game, ``turn`` and ``next_forced_cell`` are left as they
    were; the caller must not feed a finished state back into this function.
    """

    if not is_move_legal(state, sub_board, row, col):
        return REJECTED

    board = state.micro_boards[sub_board]
    board[row][col] = state.current_player

    macro_row, macro_col = coords_of(sub_board, state.macro_size)
    if state.macro_board[macro_row][macro_col] is None:
        winner = check_sub_board_win(board)
        if winner is not None:
            state.macro_board[macro_row][macro_col] = winner

    game_end = check_game_end(state)
    if game_end.finished:
        return MoveResult(True, game_end)

    candidate = index_of(row, col, state.micro_size)
    state.next_forced_cell = candidate if is_sub_board_playable(state, candidate) else None
    state.turn = 1 - state.turn
    return MoveResult(True, None)


def replay_moves(
    moves: Iterable[Tuple[int, int, int]], state: Optional[GameState] = None
) -> GameState:
    """Replay a move log onto ``state`` (a fresh game by default)."""

    state = state if state is not None else init_game_state()
    for ply, (sub_board, row, col) in enumerate(moves):
        if check_game_end(state).finished:
            raise IllegalMoveError(f"Move {ply} ({sub_board}, {row}, {col}) played after game end")
        result = apply_move(state, sub_board, row, col)
        if not result.moved:
            raise IllegalMoveError(f"Move {ply} ({sub_board}, {row}, {col}) is not legal")
    return state


__all__ = ["MoveResult", "apply_move", "replay_moves"]
