"""Q-table storage for the learning agent.

The table is a two-level mapping: state fingerprint -> move -> Q-value.
It is written by a single training thread while other threads read it to
pick interactive moves. Every read and write is a single dict operation,
which is atomic, and multi-entry reads copy one state's actions before
looking at them, so no table-wide lock is taken.
"""

from typing import Dict, Iterator, NamedTuple, Optional, Tuple

KEY_SEPARATOR = "-"


class StateAction(NamedTuple):
    """A move taken from a board state."""

    state: str
    move: int

    @property
    def key(self) -> str:
        """Composite string key, e.g. "X_O__X___-4"."""
        return f"{self.state}{KEY_SEPARATOR}{self.move}"

    @classmethod
    def from_key(cls, key: str) -> "StateAction":
        """
        Parse a composite key.

        Args:
            key: String produced by StateAction.key

        Returns:
            The matching StateAction

        Raises:
            ValueError: If the key has no separator or a non-integer move
        """
        state, sep, move = key.rpartition(KEY_SEPARATOR)
        if not sep:
            raise ValueError(f"Invalid state-action key: {key!r}")
        return cls(state, int(move))


class QTable:
    """Concurrency-safe mapping from StateAction to Q-value."""

    def __init__(self) -> None:
        self._table: Dict[str, Dict[int, float]] = {}

    def get(self, state_action: StateAction, default: float = 0.0) -> float:
        """Get the Q-value of a state-action pair (default if unseen)."""
        actions = self._table.get(state_action.state)
        if actions is None:
            return default
        return actions.get(state_action.move, default)

    def put(self, state_action: StateAction, value: float) -> None:
        """Store a Q-value, overwriting any previous one."""
        self._table.setdefault(state_action.state, {})[state_action.move] = value

    def actions(self, state: str) -> Dict[int, float]:
        """
        Get every known move for a state.

        Args:
            state: Board fingerprint

        Returns:
            Snapshot mapping move -> Q-value (empty if the state is unseen)
        """
        actions = self._table.get(state)
        if actions is None:
            return {}
        return actions.copy()

    def best_value(self, state: str, default: float = 0.0) -> float:
        """Maximum Q-value among a state's moves (default if unseen)."""
        actions = self.actions(state)
        if not actions:
            return default
        return max(actions.values())

    def num_states(self) -> int:
        """Number of distinct states with at least one entry."""
        return len(self._table)

    def items(self) -> Iterator[Tuple[StateAction, float]]:
        """Iterate over a snapshot of all entries."""
        for state in list(self._table):
            for move, value in self.actions(state).items():
                yield StateAction(state, move), value

    def __len__(self) -> int:
        return sum(len(actions) for actions in list(self._table.values()))

    def __contains__(self, state_action: object) -> bool:
        if not isinstance(state_action, StateAction):
            return False
        actions: Optional[Dict[int, float]] = self._table.get(state_action.state)
        return actions is not None and state_action.move in actions
