"""Command line interface for QTicTacToe."""

from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from qtictactoe.agent import NO_MOVE, QLearningAgent
from qtictactoe.config import QTicTacToeConfig, TrainingConfig, load_config
from qtictactoe.exceptions import QTicTacToeError
from qtictactoe.game import BOARD_SIZE, TicTacToe
from qtictactoe.randomness import NumpyRandomSource, RandomSource
from qtictactoe.training import TrainingState, TrainingTask

console = Console()

POLL_INTERVAL = 0.1


@click.group()
def cli() -> None:
    """QTicTacToe: Tic-Tac-Toe against a self-taught Q-learning agent.

    \b
    Examples:
        qtictactoe train --games 20000   # Train and report what was learned
        qtictactoe play --train          # Train, then play against the AI
        qtictactoe play                  # Play; type 'train' to train in background
    """


def _load_settings(
    config_path: Optional[Path], games: Optional[int], seed: Optional[int]
) -> QTicTacToeConfig:
    """Load configuration and apply command line overrides."""
    try:
        config = load_config(config_path)
        if games is not None:
            config.training = TrainingConfig(
                num_games=games, report_interval=config.training.report_interval
            )
    except QTicTacToeError as e:
        raise click.ClickException(str(e)) from e
    except ValidationError as e:
        raise click.ClickException(f"Invalid options: {e}") from e

    if seed is not None:
        config.seed = seed
    return config


def _build_agent(config: QTicTacToeConfig) -> QLearningAgent:
    try:
        return QLearningAgent.from_config(config)
    except QTicTacToeError as e:
        raise click.ClickException(str(e)) from e


def _run_training(
    agent: QLearningAgent, config: QTicTacToeConfig, verbose: bool = False
) -> TrainingTask:
    """Run a training task to completion, showing progress."""
    task = TrainingTask(
        agent,
        config.training.num_games,
        verbose=verbose,
        report_interval=config.training.report_interval,
    )
    if not task.start():
        raise click.ClickException("The AI agent is already training")

    if verbose:
        # The agent reports progress itself
        task.wait()
    else:
        _show_progress(task)

    if task.state is TrainingState.FAILED:
        raise click.ClickException(f"Training failed: {task.error}")
    return task


def _show_progress(task: TrainingTask) -> None:
    with Progress(
        TextColumn("[cyan]Training AI"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        bar = progress.add_task("train", total=task.num_games)
        while not task.wait(POLL_INTERVAL):
            progress.update(bar, completed=task.games_played)
        progress.update(bar, completed=task.games_played)


@cli.command("train")
@click.option("--games", "-n", type=int, default=None, help="Number of self-play games")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Print progress lines while training")
@click.option("--seed", type=int, default=None, help="Random seed")
def train_command(
    games: Optional[int],
    config_path: Optional[Path],
    seed: Optional[int],
    verbose: bool,
) -> None:
    """Train the agent by self-play and report the learned table size.

    Learned values are not saved; every process starts from an empty table.
    """
    config = _load_settings(config_path, games, seed)
    agent = _build_agent(config)

    console.print(
        f"[blue]Training with {config.training.num_games} games[/blue] "
        f"(alpha={agent.learning_rate}, gamma={agent.discount_factor}, "
        f"epsilon={agent.exploration_chance})"
    )
    task = _run_training(agent, config, verbose=verbose)

    stats = agent.get_stats()
    console.print("[green]✓[/green] Training completed")
    console.print(f"  State-action pairs: {task.result}")
    console.print(f"  Distinct states:    {stats['num_states']}")


class PlaySession:
    """Interactive human-vs-AI games in the terminal."""

    def __init__(
        self,
        agent: QLearningAgent,
        config: QTicTacToeConfig,
        rng: RandomSource,
    ) -> None:
        self.agent = agent
        self.config = config
        self.rng = rng
        self.game = TicTacToe()
        self.training_task: Optional[TrainingTask] = None
        self._training_reported = False

    def run(self) -> None:
        """Play games until the user quits."""
        self.new_game()
        while True:
            self._report_finished_training()

            if self.game.is_terminal():
                console.print(f"\n[bold]Game ended:[/bold] {self.game.status.message}")
                if not click.confirm("Play again?", default=False):
                    return
                self.new_game()
                continue

            command = click.prompt(
                f"Your move ({self.game.current_player.symbol})", type=str
            ).strip().lower()

            if command in ("q", "quit", "exit"):
                return
            if command == "new":
                self.new_game()
            elif command == "train":
                self.start_training()
            elif command == "status":
                self.show_status()
            elif command == "hint":
                self.show_hint()
            else:
                self.human_move(command)

    def new_game(self) -> None:
        """Start a new game; the AI moves first half of the time."""
        self.game = TicTacToe()
        if self.rng.pick_index(2) == 1:
            self.ai_move()
        console.print(
            f"\n[bold cyan]New game[/bold cyan] - you play "
            f"[bold]{self.game.current_player.symbol}[/bold]"
        )
        console.print(self.game.render())

    def human_move(self, text: str) -> None:
        """Parse and play the human's move, then let the AI answer."""
        cell = _parse_cell(text)
        if cell is None:
            console.print(
                "[yellow]Enter 'row col' or a cell 0-8, "
                "or one of: new, train, status, hint, quit[/yellow]"
            )
            return

        row, col = cell
        if not self.game.play_move(row, col, self.game.current_player):
            console.print(f"[yellow]Cell ({row}, {col}) is not available[/yellow]")
            return

        self.ai_move()
        console.print(self.game.render())

    def ai_move(self) -> None:
        move = self.agent.choose_move(self.game, explore=False)
        if move == NO_MOVE:
            return
        row, col = divmod(move, BOARD_SIZE)
        self.game.play_move(row, col, self.game.current_player)

    def start_training(self) -> None:
        """Start background training unless it is running or already done."""
        if self.training_task is not None and self.training_task.is_running:
            console.print(
                "[yellow]The AI agent is currently training[/yellow] "
                f"({self.training_task.games_played}/{self.training_task.num_games} "
                "games played). Please wait until it is done."
            )
            return

        if self.agent.memory_size() != 0:
            console.print(
                "[yellow]The AI agent is already trained[/yellow] "
                f"({self.agent.memory_size()} state-action pairs in memory). "
                "Restart the application to train from scratch."
            )
            return

        task = TrainingTask(self.agent, self.config.training.num_games)
        if not task.start():
            console.print("[yellow]The AI agent is currently training[/yellow]")
            return

        self.training_task = task
        self._training_reported = False
        console.print(
            "The AI agent will be trained in a background thread. "
            "You will be notified when it is done."
        )

    def show_status(self) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Field", style="cyan")
        table.add_column("Value")

        if self.training_task is None:
            table.add_row("Training", "not started")
        else:
            table.add_row("Training", self.training_task.state.value)
            table.add_row(
                "Games played",
                f"{self.training_task.games_played}/{self.training_task.num_games}",
            )
        table.add_row("State-action pairs", str(self.agent.memory_size()))
        table.add_row("Game", self.game.status.message)
        console.print(table)

    def show_hint(self) -> None:
        """Show the Q-values the agent knows for the current board."""
        q_values = self.agent.q_values(self.game.fingerprint())
        if not q_values:
            console.print("[dim]The AI has no experience with this board[/dim]")
            return

        table = Table(title="Known moves")
        table.add_column("Cell", justify="right")
        table.add_column("Row, Col")
        table.add_column("Q-value", justify="right")
        for move, q in sorted(q_values.items(), key=lambda item: -item[1]):
            row, col = divmod(move, BOARD_SIZE)
            table.add_row(str(move), f"{row}, {col}", f"{q:.3f}")
        console.print(table)

    def _report_finished_training(self) -> None:
        task = self.training_task
        if task is None or not task.is_done or self._training_reported:
            return

        self._training_reported = True
        if task.state is TrainingState.FINISHED:
            console.print(
                Panel.fit(
                    f"Training completed.\nThe AI agent saved {task.result} "
                    "state-action pairs in its memory.",
                    border_style="green",
                )
            )
        elif task.state is TrainingState.FAILED:
            console.print(f"[red]Training failed:[/red] {task.error}")


def _parse_cell(text: str) -> Optional[tuple[int, int]]:
    """
    Parse a board cell from user input.

    Args:
        text: "row col", "row,col" or a single cell index 0-8

    Returns:
        (row, col), or None if the input is not a cell
    """
    parts = text.replace(",", " ").split()
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None

    if len(numbers) == 1 and 0 <= numbers[0] < BOARD_SIZE * BOARD_SIZE:
        return divmod(numbers[0], BOARD_SIZE)
    if len(numbers) == 2:
        return numbers[0], numbers[1]
    return None


@cli.command("play")
@click.option(
    "--train/--no-train",
    "train_first",
    default=False,
    help="Train the AI before the first game",
)
@click.option("--games", "-n", type=int, default=None, help="Number of self-play games")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.option("--seed", type=int, default=None, help="Random seed")
def play_command(
    train_first: bool,
    games: Optional[int],
    config_path: Optional[Path],
    seed: Optional[int],
) -> None:
    """Play Tic-Tac-Toe against the AI.

    Enter moves as 'row col' (0-2 each) or as a cell index 0-8.
    At the prompt you can also type: new, train, status, hint, quit.
    """
    config = _load_settings(config_path, games, seed)
    agent = _build_agent(config)

    console.print(
        Panel.fit(
            "[bold cyan]QTicTacToe[/bold cyan]\n[dim]Human vs Q-learning AI[/dim]",
            border_style="cyan",
        )
    )

    if train_first:
        task = _run_training(agent, config)
        console.print(f"[green]✓[/green] {task.result} state-action pairs learned")

    session_seed = None if config.seed is None else config.seed + 1
    session = PlaySession(agent, config, NumpyRandomSource(session_seed))
    try:
        session.run()
    except (KeyboardInterrupt, click.Abort):
        console.print("\n[yellow]Bye[/yellow]")


def main() -> None:
    """Entry point for the qtictactoe command."""
    cli()


if __name__ == "__main__":
    main()
