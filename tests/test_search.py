from __future__ import annotations

import pytest

from tristris.engine import apply_move
from tristris.game import Move, init_game_state
from tristris.search import EvaluationWeights, SearchBudget, enumerate_legal_moves, evaluate


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_enumeration_on_empty_board_is_ordered():
    moves = enumerate_legal_moves(init_game_state())
    assert len(moves) == 81
    assert moves[0] == Move(0, 0, 0)
    assert moves[1] == Move(0, 0, 1)
    assert moves[3] == Move(0, 1, 0)
    assert moves[-1] == Move(8, 2, 2)
    assert moves == sorted(moves)


def test_enumeration_respects_forced_sub_board():
    state = init_game_state()
    apply_move(state, 4, 1, 1)
    moves = enumerate_legal_moves(state)
    assert len(moves) == 8
    assert all(move.sub_board == 4 for move in moves)
    assert Move(4, 1, 1) not in moves


def test_enumeration_is_free_when_forced_board_is_closed():
    state = init_game_state()
    state.micro_boards[2][0] = ["O", "O", "O"]
    state.macro_board[0][2] = "O"
    state.next_forced_cell = 2
    moves = enumerate_legal_moves(state)
    assert len(moves) == 72
    assert {move.sub_board for move in moves} == {0, 1, 3, 4, 5, 6, 7, 8}


def test_enumeration_is_empty_for_finished_draw():
    state = init_game_state()
    state.macro_board = [["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]]
    assert enumerate_legal_moves(state) == []


def test_evaluate_positional_terms():
    state = init_game_state()
    assert evaluate(state) == 0.0

    state.micro_boards[0][1][1] = "O"
    assert evaluate(state) == 3 + 1

    state.micro_boards[5][2][0] = "X"
    assert evaluate(state) == (3 + 1) - (2 + 1)

    state.micro_boards[7][0][1] = "X"
    assert evaluate(state) == (3 + 1) - (2 + 1) - 1


def test_evaluate_macro_control_and_terminal_scores():
    state = init_game_state()
    state.macro_board[1][1] = "O"
    assert evaluate(state) == 100

    state.macro_board[0][0] = "O"
    state.macro_board[2][2] = "O"
    assert evaluate(state) == 1000

    state.macro_board = [["X"] * 3, [None] * 3, [None] * 3]
    assert evaluate(state) == -1000

    state.macro_board = [["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]]
    assert evaluate(state) == 0


def test_evaluate_uses_custom_weights():
    state = init_game_state()
    state.micro_boards[0][1][1] = "O"
    state.macro_board[2][0] = "X"
    weights = EvaluationWeights(macro_cell=10, center=0.5, corner=0, cell=0)
    assert evaluate(state, weights) == pytest.approx(-9.5)


def test_search_budget_expiry():
    clock = FakeClock()
    budget = SearchBudget(50, clock=clock)
    assert not budget.expired()
    clock.now = 0.049
    assert not budget.expired()
    clock.now = 0.05
    assert budget.expired()
    assert budget.elapsed_ms() == pytest.approx(50)


def test_unbounded_budget_never_expires():
    clock = FakeClock()
    budget = SearchBudget(None, clock=clock)
    clock.now = 1e9
    assert not budget.expired()


def test_search_budget_calls_checkpoint_every_n_ticks():
    calls = []
    budget = SearchBudget(None, checkpoint=lambda: calls.append(1), yield_every=10)
    for _ in range(35):
        budget.tick()
    assert budget.ticks == 35
    assert len(calls) == 3
