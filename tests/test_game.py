from __future__ import annotations

import json

import pytest

from tristris.board import coords_of, index_of
from tristris.game import (
    GameEnd,
    GameState,
    InvalidStateError,
    check_game_end,
    check_sub_board_win,
    init_game_state,
    is_cell_empty,
    is_move_legal,
    is_sub_board_full,
    is_sub_board_playable,
    is_sub_board_won,
    playable_sub_boards,
)

DRAWN_GRID = [["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]]


def set_macro(state: GameState, sub_board: int, owner: str) -> None:
    row, col = coords_of(sub_board)
    state.macro_board[row][col] = owner


def test_board_coordinates_round_trip():
    for index in range(9):
        row, col = coords_of(index)
        assert index_of(row, col) == index
    assert coords_of(5) == (1, 2)
    assert index_of(2, 1) == 7
    assert index_of(3, 3, size=4) == 15


def test_initial_state_is_empty():
    state = init_game_state()
    assert state.turn == 0
    assert state.current_player == "X"
    assert state.next_forced_cell is None
    assert all(cell is None for row in state.macro_board for cell in row)
    assert len(state.micro_boards) == 9
    assert all(is_sub_board_playable(state, idx) for idx in range(9))
    assert check_game_end(state) == GameEnd(False, None)


def test_check_sub_board_win_lines():
    empty = [[None] * 3 for _ in range(3)]
    assert check_sub_board_win(empty) is None
    assert check_sub_board_win([["O", "O", "O"], [None] * 3, [None] * 3]) == "O"
    assert check_sub_board_win([["X", None, None], ["X", None, None], ["X", None, None]]) == "X"
    assert check_sub_board_win([["O", None, None], [None, "O", None], [None, None, "O"]]) == "O"
    assert check_sub_board_win([[None, None, "X"], [None, "X", None], ["X", None, None]]) == "X"
    assert check_sub_board_win(DRAWN_GRID) is None


def test_check_sub_board_win_takes_first_line_in_scan_order():
    board = [["X", "X", "X"], [None, None, None], ["O", "O", "O"]]
    assert check_sub_board_win(board) == "X"
    assert check_sub_board_win(board) == "X"


def test_sub_board_full_and_playable():
    state = init_game_state()
    state.micro_boards[3] = [row[:] for row in DRAWN_GRID]
    assert is_sub_board_full(state.micro_boards[3])
    assert not is_sub_board_won(state, 3)
    assert not is_sub_board_playable(state, 3)


def test_won_sub_board_is_not_playable_with_empty_cells():
    state = init_game_state()
    state.micro_boards[0][0] = ["X", "X", "X"]
    set_macro(state, 0, "X")
    assert is_sub_board_won(state, 0)
    assert is_cell_empty(state, 0, 1, 1)
    assert not is_sub_board_playable(state, 0)
    assert not is_move_legal(state, 0, 1, 1)


def test_forced_sub_board_binds_when_playable():
    state = init_game_state()
    state.next_forced_cell = 4
    assert is_move_legal(state, 4, 0, 0)
    assert not is_move_legal(state, 0, 0, 0)
    assert playable_sub_boards(state) == [4]


def test_occupied_cell_is_illegal():
    state = init_game_state()
    state.micro_boards[4][1][1] = "X"
    assert not is_cell_empty(state, 4, 1, 1)
    assert not is_move_legal(state, 4, 1, 1)


def test_forced_constraint_lifts_when_target_is_won():
    state = init_game_state()
    state.micro_boards[2][0] = ["O", "O", "O"]
    set_macro(state, 2, "O")
    state.next_forced_cell = 2
    assert is_move_legal(state, 5, 1, 1)
    assert is_move_legal(state, 0, 0, 0)
    assert not is_move_legal(state, 2, 2, 2)
    assert playable_sub_boards(state) == [0, 1, 3, 4, 5, 6, 7, 8]


def test_forced_constraint_lifts_when_target_is_full():
    state = init_game_state()
    state.micro_boards[2] = [row[:] for row in DRAWN_GRID]
    state.next_forced_cell = 2
    assert is_move_legal(state, 7, 0, 0)


def test_macro_line_finishes_game_with_open_sub_boards():
    state = init_game_state()
    for sub_board in (0, 1, 2):
        set_macro(state, sub_board, "X")
    assert any(is_sub_board_playable(state, idx) for idx in range(9))
    assert check_game_end(state) == GameEnd(True, "X")


def test_all_sub_boards_closed_without_line_is_draw():
    state = init_game_state()
    macro = [["X", "O", "X"], ["X", None, "O"], ["O", "X", "X"]]
    state.macro_board = [row[:] for row in macro]
    state.micro_boards[4] = [row[:] for row in DRAWN_GRID]
    assert not any(is_sub_board_playable(state, idx) for idx in range(9))
    assert check_game_end(state) == GameEnd(True, "draw")


def test_state_serialization_round_trip():
    state = init_game_state()
    state.micro_boards[0][0] = ["X", "X", "X"]
    state.micro_boards[4][1][1] = "O"
    set_macro(state, 0, "X")
    state.turn = 1
    state.next_forced_cell = 4

    payload = json.loads(json.dumps(state.to_dict()))
    assert payload["nextForcedCell"] == 4
    assert payload["macroBoard"][0][0] == "X"

    restored = GameState.from_dict(payload)
    assert restored == state
    assert restored.micro_boards[0] is not state.micro_boards[0]


def test_clone_does_not_alias_boards():
    state = init_game_state()
    copy = state.clone()
    copy.micro_boards[0][0][0] = "X"
    copy.macro_board[0][0] = "X"
    assert state.micro_boards[0][0][0] is None
    assert state.macro_board[0][0] is None


@pytest.mark.parametrize(
    "mutate",
    [
        lambda data: data.pop("turn"),
        lambda data: data.__setitem__("turn", 2),
        lambda data: data.__setitem__("microBoards", data["microBoards"][:8]),
        lambda data: data["microBoards"][0].__setitem__(0, ["X", "Z", None]),
        lambda data: data.__setitem__("macroBoard", [[None] * 3] * 2),
        lambda data: data.__setitem__("nextForcedCell", 9),
        lambda data: data.__setitem__("nextForcedCell", True),
        lambda data: data.__setitem__("players", "XO"),
        lambda data: data.__setitem__("players", ("X", "O")),
    ],
)
def test_from_dict_rejects_malformed_payload(mutate):
    data = init_game_state().to_dict()
    mutate(data)
    with pytest.raises(InvalidStateError):
        GameState.from_dict(data)


def test_render_ascii_shows_marks():
    state = init_game_state()
    state.micro_boards[0][0][0] = "X"
    state.micro_boards[8][2][2] = "O"
    lines = state.render_ascii().splitlines()
    assert len(lines) == 11
    assert lines[0].startswith("X . .")
    assert lines[-1].endswith(". . O")
