"""Tic-Tac-Toe with a tabular Q-learning agent trained by self-play."""

from qtictactoe.game import GameStatus, TicTacToe, Token, new_game, opponent
from qtictactoe.memory import QTable, StateAction
from qtictactoe.agent import QLearningAgent, reward_for
from qtictactoe.training import TrainingState, TrainingTask
from qtictactoe.exceptions import InvalidConfigurationError, QTicTacToeError

__version__ = "0.1.0"
__all__ = [
    "GameStatus",
    "TicTacToe",
    "Token",
    "new_game",
    "opponent",
    "QTable",
    "StateAction",
    "QLearningAgent",
    "reward_for",
    "TrainingState",
    "TrainingTask",
    "InvalidConfigurationError",
    "QTicTacToeError",
]
