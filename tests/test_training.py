"""Tests for background training tasks."""

import pytest
from qtictactoe.agent import QLearningAgent
from qtictactoe.game import TicTacToe
from qtictactoe.training import TrainingState, TrainingTask

TIMEOUT = 60


class TestTrainingTask:
    """Test TrainingTask lifecycle."""

    def test_initial_state(self) -> None:
        """Test a task that has not been started."""
        task = TrainingTask(QLearningAgent(seed=0), num_games=10)

        assert task.state == TrainingState.PENDING
        assert not task.is_running
        assert not task.is_done
        assert task.result is None
        assert task.error is None
        assert task.games_played == 0

    def test_invalid_game_count(self) -> None:
        """Test that a run needs at least one game."""
        with pytest.raises(ValueError):
            TrainingTask(QLearningAgent(seed=0), num_games=0)

    def test_runs_to_completion(self) -> None:
        """Test a background run finishes and reports the table size."""
        agent = QLearningAgent(seed=0)
        task = TrainingTask(agent, num_games=200)

        assert task.start()
        assert task.wait(timeout=TIMEOUT)

        assert task.state == TrainingState.FINISHED
        assert task.is_done
        assert not task.is_running
        assert task.result == agent.memory_size()
        assert task.result > 0
        assert task.games_played == 200
        assert agent.current_game == 200

    def test_agent_released_after_run(self) -> None:
        """Test the agent can train again once a task is done."""
        agent = QLearningAgent(seed=0)
        task = TrainingTask(agent, num_games=20)
        task.start()
        task.wait(timeout=TIMEOUT)

        assert not agent.is_training
        assert agent.train_self_play(5)

    def test_task_starts_only_once(self) -> None:
        """Test that a task cannot be restarted."""
        task = TrainingTask(QLearningAgent(seed=0), num_games=10)

        assert task.start()
        assert not task.start()
        task.wait(timeout=TIMEOUT)
        assert not task.start()

    def test_second_task_rejected_while_running(self) -> None:
        """Test that only one run per agent is active at a time."""
        agent = QLearningAgent(seed=0)
        first = TrainingTask(agent, num_games=20)
        second = TrainingTask(agent, num_games=20)

        agent.begin_training()
        try:
            assert agent.is_training
            assert not first.start()
            assert first.state == TrainingState.PENDING
        finally:
            agent.end_training()

        assert first.start()
        first.wait(timeout=TIMEOUT)

        assert second.start()
        second.wait(timeout=TIMEOUT)
        assert second.state == TrainingState.FINISHED

    def test_start_claims_agent_synchronously(self) -> None:
        """Test that a started task blocks other runs immediately."""
        agent = QLearningAgent(seed=0)
        first = TrainingTask(agent, num_games=5000)
        second = TrainingTask(agent, num_games=10)

        assert first.start()
        second_started = second.start()
        first_was_running = not first.is_done
        first.wait(timeout=TIMEOUT)

        if first_was_running:
            assert not second_started
            assert second.state == TrainingState.PENDING

    def test_interactive_queries_during_training(self) -> None:
        """Test choosing moves while the table is being written."""
        agent = QLearningAgent(seed=0)
        task = TrainingTask(agent, num_games=3000)
        task.start()

        game = TicTacToe()
        queries = 0
        while not task.is_done or queries < 10:
            move = agent.choose_move(game, explore=False)
            assert 0 <= move <= 8
            queries += 1

        assert task.wait(timeout=TIMEOUT)
        assert task.state == TrainingState.FINISHED

    def test_failure_is_captured(self) -> None:
        """Test that an exception in the worker marks the task failed."""

        class BrokenAgent(QLearningAgent):
            def play_training_games(
                self, num_games: int, verbose: bool = False, report_interval: int = 1000
            ) -> None:
                raise RuntimeError("boom")

        agent = BrokenAgent(seed=0)
        task = TrainingTask(agent, num_games=10)

        assert task.start()
        assert task.wait(timeout=TIMEOUT)

        assert task.state == TrainingState.FAILED
        assert isinstance(task.error, RuntimeError)
        assert task.result is None
        assert not agent.is_training
