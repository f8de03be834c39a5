"""Configuration loader and validation for matching and reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AmountScoring(BaseModel):
    """Amount signal tiers. Only the best matching tier contributes."""

    exact_points: int = Field(default=50, ge=0)
    exact_tolerance: float = Field(default=0.01, gt=0)
    close_points: int = Field(default=30, ge=0)
    close_tolerance: float = Field(default=1.0, gt=0)
    near_points: int = Field(default=15, ge=0)
    near_ratio: float = Field(default=0.05, gt=0)


class DescriptionScoring(BaseModel):
    """Shared-word signal on the free-text descriptions."""

    points_per_word: int = Field(default=5, ge=0)
    max_points: int = Field(default=15, ge=0)
    # Words must be longer than this to count
    min_word_length: int = Field(default=3, ge=0)


class DateScoring(BaseModel):
    """Date proximity tiers."""

    close_days: int = Field(default=3, ge=0)
    close_points: int = Field(default=10, ge=0)
    near_days: int = Field(default=7, ge=0)
    near_points: int = Field(default=5, ge=0)


class ScoringConfig(BaseModel):
    """Weights for the confidence scorer."""

    amount: AmountScoring = Field(default_factory=AmountScoring)
    reference_points: int = Field(default=25, ge=0)
    description: DescriptionScoring = Field(default_factory=DescriptionScoring)
    counterparty_points: int = Field(default=20, ge=0)
    date: DateScoring = Field(default_factory=DateScoring)
    max_confidence: int = Field(default=100, ge=1)


class SuggestionConfig(BaseModel):
    """Filtering and truncation of ranked suggestions."""

    min_confidence: int = Field(default=30, ge=0)
    max_suggestions: int = Field(default=5, ge=1)


class AutoMatchConfig(BaseModel):
    """Batch auto-matching policy."""

    accept_threshold: int = Field(default=75, ge=0)
    # Threads used to score transactions; 1 runs sequentially
    workers: int = Field(default=1, ge=1)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Must be one of {', '.join(LOG_LEVELS)}")
        return level


class ReconConfig(BaseModel):
    """Main configuration model for the reconciliation engine."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    auto_match: AutoMatchConfig = Field(default_factory=AutoMatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "scoring": {
            "amount": {
                "exact_points": 50,
                "exact_tolerance": 0.01,
                "close_points": 30,
                "close_tolerance": 1.0,
                "near_points": 15,
                "near_ratio": 0.05,
            },
            "reference_points": 25,
            "description": {
                "points_per_word": 5,
                "max_points": 15,
                "min_word_length": 3,
            },
            "counterparty_points": 20,
            "date": {
                "close_days": 3,
                "close_points": 10,
                "near_days": 7,
                "near_points": 5,
            },
            "max_confidence": 100,
        },
        "suggestions": {
            "min_confidence": 30,
            "max_suggestions": 5,
        },
        "auto_match": {
            "accept_threshold": 75,
            "workers": 1,
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid values
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_path}"
            )

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Bank reconciliation matching engine configuration
# Scores are points out of 100; thresholds compare against the capped score

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
