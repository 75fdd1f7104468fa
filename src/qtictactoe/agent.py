"""Q-learning agent for Tic-Tac-Toe."""

import threading
from typing import Dict, List

from pydantic import ValidationError
from rich.console import Console

from qtictactoe.config import AgentConfig, QTicTacToeConfig
from qtictactoe.exceptions import InvalidConfigurationError
from qtictactoe.game import BOARD_SIZE, GameStatus, TicTacToe
from qtictactoe.memory import QTable, StateAction
from qtictactoe.randomness import NumpyRandomSource, RandomSource

console = Console()

NO_MOVE = -1

WIN_REWARD = 10.0
TIE_REWARD = 5.0


def reward_for(game: TicTacToe) -> float:
    """
    Reward for the move that produced the given game state.

    Args:
        game: Game right after the move

    Returns:
        10.0 for a win by either side, 5.0 for a tie, 0.0 otherwise
    """
    if game.status in (GameStatus.X_WINS, GameStatus.O_WINS):
        return WIN_REWARD
    if game.status is GameStatus.TIE:
        return TIE_REWARD
    return 0.0


class QLearningAgent:
    """
    Tabular Q-learning agent trained by self-play.

    Update rule applied after every self-play move:
    Q(s,a) <- Q(s,a) + alpha * [r - gamma * max_a' Q(s',a') - Q(s,a)]

    s' is the board after the move, where the opponent is to play, so the
    best value found there belongs to the other side.

    Q-table: QTable keyed by (state fingerprint, move)
    """

    def __init__(
        self,
        learning_rate: float = 0.5,
        discount_factor: float = 0.9,
        exploration_chance: float = 0.95,
        rng: RandomSource | None = None,
        seed: int | None = None,
    ) -> None:
        """
        Initialize Q-learning agent.

        Args:
            learning_rate: Learning rate, in (0, 1]
            discount_factor: Discount factor, in [0, 1]
            exploration_chance: Probability of a random move while training, in [0, 1]
            rng: Randomness provider (default: numpy-backed, seeded with seed)
            seed: Random seed used when rng is not given

        Raises:
            InvalidConfigurationError: If a rate is outside its range
        """
        try:
            config = AgentConfig(
                learning_rate=learning_rate,
                discount_factor=discount_factor,
                exploration_chance=exploration_chance,
            )
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid agent configuration: {e}") from e

        self._learning_rate = config.learning_rate
        self._discount_factor = config.discount_factor
        self._exploration_chance = config.exploration_chance
        self.rng: RandomSource = rng if rng is not None else NumpyRandomSource(seed)

        self.q_table = QTable()
        self._current_game = 0
        self._training_lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: QTicTacToeConfig, rng: RandomSource | None = None
    ) -> "QLearningAgent":
        """Create an agent from a loaded configuration."""
        return cls(
            learning_rate=config.agent.learning_rate,
            discount_factor=config.agent.discount_factor,
            exploration_chance=config.agent.exploration_chance,
            rng=rng,
            seed=config.seed,
        )

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @property
    def discount_factor(self) -> float:
        return self._discount_factor

    @property
    def exploration_chance(self) -> float:
        return self._exploration_chance

    @property
    def current_game(self) -> int:
        """Number of the self-play game being played in the current (or last) run."""
        return self._current_game

    @property
    def is_training(self) -> bool:
        """Whether a training run is in progress."""
        return self._training_lock.locked()

    def memory_size(self) -> int:
        """Number of state-action pairs in the Q-table."""
        return len(self.q_table)

    def q_values(self, state: str) -> Dict[int, float]:
        """Snapshot of the known Q-values for a board fingerprint."""
        return self.q_table.actions(state)

    def choose_move(self, game: TicTacToe, explore: bool) -> int:
        """
        Choose a move for the player to move in the given game.

        Unseen states, and exploration draws while explore is set, pick a
        random empty cell. Otherwise the move with the highest Q-value is
        returned, ties broken at random.

        Args:
            game: Game to move in
            explore: Whether exploration is enabled (training)

        Returns:
            Cell index 0-8, or NO_MOVE (-1) if the game is over
        """
        if game.is_terminal():
            return NO_MOVE

        known = self.q_table.actions(game.fingerprint())

        if not known or (explore and self.rng.uniform() < self._exploration_chance):
            return self._pick(game.empty_cells())

        max_q = max(known.values())
        tied_moves = sorted(move for move, q in known.items() if q == max_q)
        return self._pick(tied_moves)

    def update_q_value(
        self, state_action: StateAction, reward: float, next_state: str
    ) -> float:
        """
        Apply the temporal-difference update to one state-action pair.

        Args:
            state_action: Pair to update
            reward: Reward for the move
            next_state: Fingerprint of the board after the move

        Returns:
            The stored Q-value
        """
        current_q = self.q_table.get(state_action)
        next_best_q = self.q_table.best_value(next_state)

        new_q = current_q + self._learning_rate * (
            reward - self._discount_factor * next_best_q - current_q
        )
        self.q_table.put(state_action, new_q)
        return new_q

    def train_self_play(
        self, num_games: int, verbose: bool = False, report_interval: int = 1000
    ) -> bool:
        """
        Train by playing games against itself.

        Only one run may be active per agent; a call made while another
        run is in progress returns False without doing anything.

        Args:
            num_games: Number of self-play games
            verbose: Print progress
            report_interval: Games between progress lines when verbose

        Returns:
            True if the run completed, False if another run was active
        """
        if not self.begin_training():
            return False

        try:
            self.play_training_games(num_games, verbose, report_interval)
        finally:
            self.end_training()

        return True

    def begin_training(self) -> bool:
        """
        Claim the agent for a training run without blocking.

        Returns:
            True if claimed, False if another run holds the agent
        """
        return self._training_lock.acquire(blocking=False)

    def end_training(self) -> None:
        """Release a claim made with begin_training(), from any thread."""
        self._training_lock.release()

    def play_training_games(
        self, num_games: int, verbose: bool = False, report_interval: int = 1000
    ) -> None:
        """Play the games of a training run; the caller holds the training claim."""
        if verbose:
            console.print(f"Training AI with {num_games} games...")

        self._current_game = 0
        for game_number in range(1, num_games + 1):
            self._current_game = game_number
            self._play_training_game()

            if verbose and game_number % report_interval == 0:
                console.print(
                    f"Game {game_number}/{num_games} | "
                    f"State-action pairs: {self.memory_size()}"
                )

        if verbose:
            console.print("Done training.")
            console.print(f"{self.memory_size()} state-action pairs in memory.")

    def _play_training_game(self) -> None:
        """Play one self-play game, updating Q-values after every move."""
        game = TicTacToe()

        while not game.is_terminal():
            move = self.choose_move(game, explore=True)
            state_action = StateAction(game.fingerprint(), move)

            row, col = divmod(move, BOARD_SIZE)
            game.play_move(row, col, game.current_player)

            self.update_q_value(state_action, reward_for(game), game.fingerprint())

    def _pick(self, candidates: List[int]) -> int:
        return candidates[self.rng.pick_index(len(candidates))]

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the Q-table."""
        return {
            "num_states": self.q_table.num_states(),
            "num_state_actions": self.memory_size(),
            "current_game": self._current_game,
        }
