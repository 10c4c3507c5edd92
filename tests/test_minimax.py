from __future__ import annotations

from tristris.engine import apply_move
from tristris.game import GameState, Move, init_game_state, is_move_legal
from tristris.minimax import MinimaxAgent, MinimaxConfig
from tristris.search import enumerate_legal_moves


def build_macro_threat(player: str) -> GameState:
    """``player`` owns two macro cells of the top row and can take the third."""

    state = init_game_state()
    state.macro_board[0][0] = player
    state.macro_board[0][1] = player
    state.micro_boards[2][0] = [player, player, None]
    state.next_forced_cell = 2
    state.turn = 0 if player == "X" else 1
    return state


def test_returns_none_without_legal_moves():
    state = init_game_state()
    state.macro_board = [["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]]
    agent = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None))
    assert agent.select_move(state) is None


def test_o_takes_the_winning_move():
    agent = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None))
    assert agent.select_move(build_macro_threat("O")) == Move(2, 0, 2)


def test_x_takes_the_winning_move():
    agent = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None))
    assert agent.select_move(build_macro_threat("X")) == Move(2, 0, 2)


def test_selection_is_deterministic():
    state = init_game_state()
    apply_move(state, 4, 1, 1)
    agent = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None))
    first = agent.select_move(state)
    second = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None)).select_move(state)
    assert first == second
    assert first is not None and is_move_legal(state, *first)


def test_exhausted_budget_still_returns_a_move():
    state = init_game_state()
    agent = MinimaxAgent(MinimaxConfig(max_depth=3, time_budget_ms=0))
    assert agent.select_move(state) == enumerate_legal_moves(state)[0]


def test_moves_are_legal_through_a_game():
    state = init_game_state()
    agent = MinimaxAgent(MinimaxConfig(max_depth=1, time_budget_ms=None))
    for _ in range(20):
        move = agent.select_move(state)
        assert move is not None
        assert is_move_legal(state, *move)
        result = apply_move(state, *move)
        if result.game_end is not None:
            break


def test_checkpoint_is_invoked_during_search():
    calls = []
    state = init_game_state()
    apply_move(state, 4, 1, 1)
    agent = MinimaxAgent(MinimaxConfig(max_depth=2, time_budget_ms=None, yield_every=5))
    agent.select_move(state, checkpoint=lambda: calls.append(1))
    assert calls
