"""Tests for QTicTacToe CLI commands."""

from pathlib import Path

import yaml
from click.testing import CliRunner

from qtictactoe.cli import _parse_cell, cli

# Trying every cell in order always fills the board, whoever moves first
ALL_CELLS = "".join(f"{cell}\n" for cell in range(9))


class TestCLI:
    """Test CLI commands."""

    def setup_method(self) -> None:
        """Set up test environment."""
        self.runner = CliRunner()

    def test_cli_help(self) -> None:
        """Test CLI help output."""
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "QTicTacToe" in result.output
        assert "train" in result.output
        assert "play" in result.output

    def test_train_command(self) -> None:
        """Test a short training run."""
        result = self.runner.invoke(cli, ["train", "--games", "50", "--seed", "1"])

        assert result.exit_code == 0
        assert "Training with 50 games" in result.output
        assert "Training completed" in result.output
        assert "State-action pairs:" in result.output

    def test_train_verbose_with_config(self, tmp_path: Path) -> None:
        """Test verbose progress using the configured report interval."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump({"training": {"num_games": 4, "report_interval": 2}, "seed": 0})
        )

        result = self.runner.invoke(cli, ["train", "-c", str(config_file), "--verbose"])

        assert result.exit_code == 0
        assert "Training AI with 4 games..." in result.output
        assert "Game 2/4" in result.output
        assert "Done training." in result.output

    def test_train_invalid_config(self, tmp_path: Path) -> None:
        """Test that configuration errors are reported, not raised."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"agent": {"learning_rate": 5.0}}))

        result = self.runner.invoke(cli, ["train", "-c", str(config_file)])

        assert result.exit_code != 0
        assert "validation failed" in result.output

    def test_train_invalid_game_count(self) -> None:
        """Test rejecting a non-positive game count."""
        result = self.runner.invoke(cli, ["train", "--games", "0"])

        assert result.exit_code != 0
        assert "Invalid options" in result.output

    def test_play_quit(self) -> None:
        """Test starting and leaving an interactive session."""
        result = self.runner.invoke(cli, ["play", "--seed", "1"], input="quit\n")

        assert result.exit_code == 0
        assert "New game" in result.output
        assert "  0 1 2" in result.output

    def test_play_full_game(self) -> None:
        """Test playing a game to the end."""
        result = self.runner.invoke(
            cli, ["play", "--seed", "2"], input=ALL_CELLS + "n\n"
        )

        assert result.exit_code == 0
        assert "Game ended:" in result.output
        assert "Play again?" in result.output

    def test_play_again(self) -> None:
        """Test starting a second game after the first ends."""
        result = self.runner.invoke(
            cli, ["play", "--seed", "3"], input=ALL_CELLS + "y\nquit\n"
        )

        assert result.exit_code == 0
        assert result.output.count("New game") == 2

    def test_play_invalid_input(self) -> None:
        """Test that unknown input is reported."""
        result = self.runner.invoke(cli, ["play", "--seed", "1"], input="abc\nquit\n")

        assert result.exit_code == 0
        assert "Enter 'row col'" in result.output

    def test_play_unavailable_cell(self) -> None:
        """Test that an out-of-range cell is refused."""
        result = self.runner.invoke(cli, ["play", "--seed", "1"], input="5 5\nquit\n")

        assert result.exit_code == 0
        assert "Cell (5, 5) is not available" in result.output

    def test_play_status_and_hint_untrained(self) -> None:
        """Test status and hint before any training."""
        result = self.runner.invoke(
            cli, ["play", "--seed", "1"], input="status\nhint\nquit\n"
        )

        assert result.exit_code == 0
        assert "not started" in result.output
        assert "State-action pairs" in result.output
        assert "no experience" in result.output

    def test_play_train_first(self) -> None:
        """Test training before the first game."""
        result = self.runner.invoke(
            cli, ["play", "--train", "--games", "100", "--seed", "4"], input="train\nquit\n"
        )

        assert result.exit_code == 0
        assert "state-action pairs learned" in result.output
        assert "already trained" in result.output

    def test_play_background_training(self) -> None:
        """Test starting background training from the prompt."""
        result = self.runner.invoke(
            cli,
            ["play", "--games", "50", "--seed", "5"],
            input="train\ntrain\nstatus\nquit\n",
        )

        assert result.exit_code == 0
        assert "background thread" in result.output
        assert "currently training" in result.output or "already trained" in result.output


class TestParseCell:
    """Test parsing of move input."""

    def test_row_col(self) -> None:
        assert _parse_cell("1 2") == (1, 2)
        assert _parse_cell("1,2") == (1, 2)

    def test_cell_index(self) -> None:
        assert _parse_cell("0") == (0, 0)
        assert _parse_cell("5") == (1, 2)
        assert _parse_cell("8") == (2, 2)

    def test_invalid(self) -> None:
        assert _parse_cell("") is None
        assert _parse_cell("9") is None
        assert _parse_cell("a b") is None
        assert _parse_cell("1 2 3") is None
