"""Background self-play training."""

import threading
from enum import Enum
from typing import Optional

from qtictactoe.agent import QLearningAgent


class TrainingState(str, Enum):
    """Training task lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


class TrainingTask:
    """
    Handle for a self-play training run on a worker thread.

    The task is started once. Callers observe it by polling state (and
    games_played for progress) or by waiting on wait(). Starting fails when
    the agent is already training.
    """

    def __init__(
        self,
        agent: QLearningAgent,
        num_games: int,
        verbose: bool = False,
        report_interval: int = 1000,
    ) -> None:
        """
        Initialize the task.

        Args:
            agent: Agent to train
            num_games: Number of self-play games
            verbose: Print training progress
            report_interval: Games between progress lines when verbose
        """
        if num_games < 1:
            raise ValueError("num_games must be at least 1")

        self.agent = agent
        self.num_games = num_games
        self.verbose = verbose
        self.report_interval = report_interval

        self._state = TrainingState.PENDING
        self._result: Optional[int] = None
        self._error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> TrainingState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is TrainingState.RUNNING

    @property
    def is_done(self) -> bool:
        """Whether the task has stopped (finished or failed)."""
        return self._done.is_set()

    @property
    def result(self) -> Optional[int]:
        """State-action pairs in the agent's memory when the run finished."""
        return self._result

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def games_played(self) -> int:
        """Progress of the run, for display only."""
        if self._state is TrainingState.PENDING:
            return 0
        if self._state is TrainingState.FINISHED:
            return self.num_games
        return self.agent.current_game

    def start(self) -> bool:
        """
        Start training on a background thread.

        Returns:
            True if the run was started, False if this task was already
            started or the agent is already training
        """
        with self._lock:
            if self._state is not TrainingState.PENDING:
                return False
            if not self.agent.begin_training():
                return False

            self._state = TrainingState.RUNNING
            self._thread = threading.Thread(
                target=self._run, name="qtictactoe-training", daemon=True
            )
            self._thread.start()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the task to stop.

        Args:
            timeout: Maximum seconds to wait (None = until done)

        Returns:
            True if the task is done, False on timeout
        """
        return self._done.wait(timeout)

    def _run(self) -> None:
        try:
            self.agent.play_training_games(
                self.num_games,
                verbose=self.verbose,
                report_interval=self.report_interval,
            )
            self._result = self.agent.memory_size()
            self._state = TrainingState.FINISHED
        except Exception as e:
            self._error = e
            self._state = TrainingState.FAILED
        finally:
            self.agent.end_training()
            self._done.set()
