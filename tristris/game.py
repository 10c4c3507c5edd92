"""Core rules for the TrisTris (Ultimate Tic-Tac-Toe) variant.

The state is kept independent from any UI and from the agents.  The board is
organised as nine 3x3 sub-boards stored in row-major order.  A move is the
triple ``(sub_board, row, col)``: ``sub_board`` selects one of the nine local
boards and ``row``/``col`` select a cell inside it.  The position of a move
inside its sub-board decides which sub-board the opponent must play next.

All query functions in this module are pure.  The only mutator of a
:class:`GameState` is :func:`tristris.engine.apply_move`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional, Sequence

from .board import coords_of, index_of

Player = str  # Either "X" or "O"
Cell = Optional[Player]
Grid = List[List[Cell]]

PLAYERS: Sequence[Player] = ("X", "O")
DRAW = "draw"


class Move(NamedTuple):
    sub_board: int
    row: int
    col: int


class GameEnd(NamedTuple):
    finished: bool
    winner: Optional[str]  # "X", "O", "draw" or None while in progress


NOT_FINISHED = GameEnd(False, None)


class InvalidStateError(ValueError):
    """Raised when a serialized state does not describe a well-formed game."""


class IllegalMoveError(RuntimeError):
    """Raised when a replayed move is not legal in the current state."""


def _empty_grid(size: int) -> Grid:
    return [[None] * size for _ in range(size)]


@dataclass
class GameState:
    """Representation of a single TrisTris game session."""

    macro_size: int = 3
    micro_size: int = 3
    players: List[Player] = field(default_factory=lambda: list(PLAYERS))
    turn: int = 0
    macro_board: Grid = field(default_factory=lambda: _empty_grid(3))
    micro_boards: List[Grid] = field(
        default_factory=lambda: [_empty_grid(3) for _ in range(9)]
    )
    next_forced_cell: Optional[int] = None

    @property
    def current_player(self) -> Player:
        return self.players[self.turn]

    @property
    def opponent(self) -> Player:
        return self.players[1 - self.turn]

    @property
    def sub_board_count(self) -> int:
        return self.macro_size * self.macro_size

    def clone(self) -> "GameState":
        return GameState(
            macro_size=self.macro_size,
            micro_size=self.micro_size,
            players=self.players[:],
            turn=self.turn,
            macro_board=[row[:] for row in self.macro_board],
            micro_boards=[[row[:] for row in board] for board in self.micro_boards],
            next_forced_cell=self.next_forced_cell,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-compatible snapshot using the shared wire field names."""

        return {
            "macroSize": self.macro_size,
            "microSize": self.micro_size,
            "players": self.players[:],
            "turn": self.turn,
            "macroBoard": [row[:] for row in self.macro_board],
            "microBoards": [[row[:] for row in board] for board in self.micro_boards],
            "nextForcedCell": self.next_forced_cell,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameState":
        try:
            macro_size = int(data.get("macroSize", 3))
            micro_size = int(data.get("microSize", 3))
            players = data.get("players", list(PLAYERS))
            turn = int(data["turn"])
            macro_board = [list(row) for row in data["macroBoard"]]
            micro_boards = [[list(row) for row in board] for board in data["microBoards"]]
            forced = data.get("nextForcedCell")
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InvalidStateError(f"Malformed game state payload: {exc}") from exc

        if not isinstance(players, list) or players != list(PLAYERS):
            raise InvalidStateError(f"players must be {list(PLAYERS)}, got {players}")
        if turn not in (0, 1):
            raise InvalidStateError(f"turn must be 0 or 1, got {turn}")
        _check_grid(macro_board, macro_size, "macroBoard")
        if len(micro_boards) != macro_size * macro_size:
            raise InvalidStateError(
                f"microBoards must hold {macro_size * macro_size} boards, got {len(micro_boards)}"
            )
        for idx, board in enumerate(micro_boards):
            _check_grid(board, micro_size, f"microBoards[{idx}]")
        if forced is not None and not (
            isinstance(forced, int)
            and not isinstance(forced, bool)
            and 0 <= forced < macro_size * macro_size
        ):
            raise InvalidStateError(f"nextForcedCell out of range: {forced!r}")

        return cls(
            macro_size=macro_size,
            micro_size=micro_size,
            players=list(players),
            turn=turn,
            macro_board=macro_board,
            micro_boards=micro_boards,
            next_forced_cell=forced,
        )

    def render_ascii(self) -> str:
        def cell_value(value: Cell) -> str:
            return value if value is not None else "."

        rows: List[str] = []
        for big_row in range(self.macro_size):
            for inner_row in range(self.micro_size):
                row_cells: List[str] = []
                for big_col in range(self.macro_size):
                    board = self.micro_boards[index_of(big_row, big_col, self.macro_size)]
                    row_cells.append(" ".join(cell_value(v) for v in board[inner_row]))
                rows.append(" || ".join(row_cells))
            if big_row < self.macro_size - 1:
                rows.append("======++=======++======")
        return "\n".join(rows)


def _check_grid(grid: Sequence[Sequence[Any]], size: int, name: str) -> None:
    if len(grid) != size or any(len(row) != size for row in grid):
        raise InvalidStateError(f"{name} must be a {size}x{size} grid")
    for row in grid:
        for value in row:
            if value is not None and value not in PLAYERS:
                raise InvalidStateError(f"{name} contains invalid mark {value!r}")


def init_game_state() -> GameState:
    return GameState()


def _lines(board: Sequence[Sequence[Cell]]) -> Iterator[List[Cell]]:
    """Yield rows, then columns, then the two diagonals."""

    size = len(board)
    for r in range(size):
        yield list(board[r])
    for c in range(size):
        yield [board[r][c] for r in range(size)]
    yield [board[i][i] for i in range(size)]
    yield [board[i][size - 1 - i] for i in range(size)]


def check_sub_board_win(board: Sequence[Sequence[Cell]]) -> Cell:
    """Return the mark owning a full line of ``board`` or ``None``.

    Lines are scanned rows first, then columns, then diagonals; the first
    complete line found decides the result.  Two simultaneous lines for
    different players cannot arise in legal play, so the scan order is an
    arbitrary tie-break.  Works for the macro board as well.
    """

    for line in _lines(board):
        first = line[0]
        if first is not None and all(value == first for value in line):
            return first
    return None


def is_cell_empty(state: GameState, sub_board: int, row: int, col: int) -> bool:
    return state.micro_boards[sub_board][row][col] is None


def is_sub_board_full(board: Sequence[Sequence[Cell]]) -> bool:
    return all(cell is not None for row in board for cell in row)


def is_sub_board_won(state: GameState, sub_board: int) -> bool:
    row, col = coords_of(sub_board, state.macro_size)
    return state.macro_board[row][col] is not None


def is_sub_board_playable(state: GameState, sub_board: int) -> bool:
    """A sub-board accepts moves while it is neither won nor full (drawn)."""

    return not is_sub_board_won(state, sub_board) and not is_sub_board_full(
        state.micro_boards[sub_board]
    )


def forced_sub_board(state: GameState) -> Optional[int]:
    """Return the sub-board the mover is constrained to, if the constraint binds."""

    forced = state.next_forced_cell
    if forced is not None and is_sub_board_playable(state, forced):
        return forced
    return None


def playable_sub_boards(state: GameState) -> List[int]:
    forced = forced_sub_board(state)
    if forced is not None:
        return [forced]
    return [idx for idx in range(state.sub_board_count) if is_sub_board_playable(state, idx)]


def is_move_legal(state: GameState, sub_board: int, row: int, col: int) -> bool:
    if not is_cell_empty(state, sub_board, row, col):
        return False
    if not is_sub_board_playable(state, sub_board):
        return False

    forced = state.next_forced_cell
    if forced is None:
        return True
    if not is_sub_board_playable(state, forced):
        # The forced sub-board is closed: any playable sub-board will do.
        return True
    return forced == sub_board


def check_game_end(state: GameState) -> GameEnd:
    winner = check_sub_board_win(state.macro_board)
    if winner is not None:
        return GameEnd(True, winner)
    if not any(is_sub_board_playable(state, idx) for idx in range(state.sub_board_count)):
        return GameEnd(True, DRAW)
    return NOT_FINISHED


__all__ = [
    "DRAW",
    "GameEnd",
    "GameState",
    "IllegalMoveError",
    "InvalidStateError",
    "Move",
    "NOT_FINISHED",
    "PLAYERS",
    "Player",
    "check_game_end",
    "check_sub_board_win",
    "forced_sub_board",
    "init_game_state",
    "is_cell_empty",
    "is_move_legal",
    "is_sub_board_full",
    "is_sub_board_playable",
    "is_sub_board_won",
    "playable_sub_boards",
]
