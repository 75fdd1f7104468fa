"""Configuration models and loading for QTicTacToe."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from qtictactoe.exceptions import InvalidConfigurationError


class AgentConfig(BaseModel):
    """Q-learning agent hyperparameters."""

    learning_rate: float = Field(
        default=0.5, description="Weight of new information in Q-value updates"
    )
    discount_factor: float = Field(
        default=0.9, description="Weight of the best next-state Q-value"
    )
    exploration_chance: float = Field(
        default=0.95, description="Probability of a random move while training"
    )

    @field_validator("learning_rate")
    @classmethod
    def validate_learning_rate(cls, v: float) -> float:
        """Validate learning rate is in (0, 1]."""
        if not 0.0 < v <= 1.0:
            raise ValueError(f"learning_rate must be in (0, 1], got {v}")
        return v

    @field_validator("discount_factor", "exploration_chance")
    @classmethod
    def validate_unit_interval(cls, v: float, info: ValidationInfo) -> float:
        """Validate probabilities and factors are in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"{info.field_name} must be in [0, 1], got {v}")
        return v


class TrainingConfig(BaseModel):
    """Self-play training configuration."""

    num_games: int = Field(default=16000, description="Self-play games per run")
    report_interval: int = Field(
        default=1000, description="Games between progress reports"
    )

    @field_validator("num_games", "report_interval")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        """Validate positive integers."""
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v


class QTicTacToeConfig(BaseModel):
    """Complete QTicTacToe configuration."""

    agent: AgentConfig = Field(default_factory=AgentConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    seed: Optional[int] = Field(default=None, description="Random seed")


def load_config(config_path: Optional[Path] = None) -> QTicTacToeConfig:
    """Load configuration, optionally overriding defaults from a YAML file.

    Args:
        config_path: Path to a YAML configuration file (None = defaults only)

    Returns:
        Validated configuration

    Raises:
        InvalidConfigurationError: If the file cannot be read or is invalid
    """
    if config_path is None:
        return QTicTacToeConfig()

    config_data = _load_yaml_file(config_path)
    try:
        return QTicTacToeConfig(**config_data)
    except ValidationError as e:
        raise InvalidConfigurationError(
            f"Configuration validation failed: {e}"
        ) from e


def _load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from file."""
    if not file_path.exists():
        raise InvalidConfigurationError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfigurationError(f"Invalid YAML in {file_path}: {e}") from e
    except OSError as e:
        raise InvalidConfigurationError(f"Failed to read {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            f"Configuration file must contain a mapping: {file_path}"
        )
    return data
