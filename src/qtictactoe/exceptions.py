"""QTicTacToe exception classes."""


class QTicTacToeError(Exception):
    """Base exception for all QTicTacToe errors."""

    pass


class InvalidConfigurationError(QTicTacToeError):
    """Raised when agent or training configuration is invalid."""

    pass
