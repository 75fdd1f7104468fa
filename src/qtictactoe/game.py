"""Tic-Tac-Toe game rules and state management."""

from enum import Enum
from typing import List


class Token(str, Enum):
    """Marks that can occupy a board cell."""

    X = "X"
    O = "O"
    EMPTY = "_"

    @property
    def symbol(self) -> str:
        """Single-character display symbol."""
        return self.value


class GameStatus(str, Enum):
    """Game lifecycle states."""

    IN_PROGRESS = "in_progress"
    X_WINS = "x_wins"
    O_WINS = "o_wins"
    TIE = "tie"

    @property
    def message(self) -> str:
        """Human readable description of the status."""
        return _STATUS_MESSAGES[self]


_STATUS_MESSAGES = {
    GameStatus.IN_PROGRESS: "Still playing...",
    GameStatus.X_WINS: "X wins!",
    GameStatus.O_WINS: "O wins!",
    GameStatus.TIE: "It's a cat's game!",
}

BOARD_SIZE = 3

# Winning lines as (row, col) triples: rows, columns, diagonals
WIN_LINES = (
    [[(row, col) for col in range(BOARD_SIZE)] for row in range(BOARD_SIZE)]
    + [[(row, col) for row in range(BOARD_SIZE)] for col in range(BOARD_SIZE)]
    + [[(i, i) for i in range(BOARD_SIZE)]]
    + [[(i, BOARD_SIZE - 1 - i) for i in range(BOARD_SIZE)]]
)


def opponent(token: Token) -> Token:
    """
    Get the other player.

    Args:
        token: Player token (X or O)

    Returns:
        The opposing player token

    Raises:
        ValueError: If token is EMPTY
    """
    if token is Token.X:
        return Token.O
    if token is Token.O:
        return Token.X
    raise ValueError("EMPTY is not a player token")


class TicTacToe:
    """
    A single Tic-Tac-Toe game.

    Board layout (row, col) and the matching cell indices:
        0 1 2
        3 4 5
        6 7 8

    X always moves first. The game is mutated only through play_move(),
    which keeps the status and the player to move consistent with the board.
    """

    def __init__(self) -> None:
        """Initialize an empty board with X to move."""
        self._board: List[List[Token]] = [
            [Token.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)
        ]
        self._status = GameStatus.IN_PROGRESS
        self._current_player = Token.X

    @property
    def status(self) -> GameStatus:
        """Current game status."""
        return self._status

    @property
    def current_player(self) -> Token:
        """Token expected to make the next move."""
        return self._current_player

    @property
    def board(self) -> List[List[Token]]:
        """Copy of the board rows."""
        return [row[:] for row in self._board]

    def play_move(self, row: int, col: int, token: Token) -> bool:
        """
        Place a token on the board.

        Args:
            row: Row of the move (0-2)
            col: Column of the move (0-2)
            token: Player making the move

        Returns:
            True if the move was accepted, False otherwise (board unchanged)
        """
        if (
            self._status is not GameStatus.IN_PROGRESS
            or not self.is_empty(row, col)
            or token is not self._current_player
        ):
            return False

        self._board[row][col] = token
        self._current_player = opponent(token)
        self._update_status()
        return True

    def is_empty(self, row: int, col: int) -> bool:
        """
        Check whether a cell exists and holds no token.

        Bounds are checked first so that out-of-range (including negative)
        indices never reach the board.

        Args:
            row: Row to check
            col: Column to check

        Returns:
            True if the cell is on the board and empty
        """
        return (
            0 <= row < BOARD_SIZE
            and 0 <= col < BOARD_SIZE
            and self._board[row][col] is Token.EMPTY
        )

    def is_terminal(self) -> bool:
        """Check if the game is over (win or tie)."""
        return self._status is not GameStatus.IN_PROGRESS

    def empty_cells(self) -> List[int]:
        """
        Get the indices of all empty cells.

        Returns:
            Cell indices (row * 3 + col) in ascending order
        """
        return [
            row * BOARD_SIZE + col
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if self._board[row][col] is Token.EMPTY
        ]

    def fingerprint(self) -> str:
        """
        Canonical state key of the board.

        Returns:
            Row-major concatenation of the 9 cell symbols, e.g. "X_O__X___"
        """
        return "".join(token.symbol for row in self._board for token in row)

    def render(self) -> str:
        """
        Render the board as a string.

        Returns:
            Board grid with row and column labels
        """
        symbols = {Token.X: "X", Token.O: "O", Token.EMPTY: "."}
        lines = ["  0 1 2"]
        for i, row in enumerate(self._board):
            lines.append(f"{i} " + " ".join(symbols[token] for token in row))
        return "\n".join(lines)

    def _update_status(self) -> None:
        """Recompute the status from the board."""
        if self._is_winner(Token.X):
            self._status = GameStatus.X_WINS
        elif self._is_winner(Token.O):
            self._status = GameStatus.O_WINS
        elif not self.empty_cells():
            self._status = GameStatus.TIE
        else:
            self._status = GameStatus.IN_PROGRESS

    def _is_winner(self, token: Token) -> bool:
        return any(
            all(self._board[row][col] is token for row, col in line)
            for line in WIN_LINES
        )

    def __str__(self) -> str:
        return self.fingerprint()

    def __repr__(self) -> str:
        return (
            f"TicTacToe(board={self.fingerprint()!r}, "
            f"status={self._status.value}, current_player={self._current_player.value})"
        )


def new_game() -> TicTacToe:
    """Create a fresh game: empty board, in progress, X to move."""
    return TicTacToe()
