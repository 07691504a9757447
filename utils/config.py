"""
Runtime settings for fund scoring and backtests.
Loaded from YAML with environment overrides; scoring tables are not configurable.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = './config/settings.yml'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(Exception):
    """Raised when the settings file cannot be used."""
    pass


@dataclass(frozen=True)
class Settings:
    """Runtime settings."""
    log_level: str = 'INFO'
    backtest_step_months: int = 3
    backtest_forward_years: List[float] = field(default_factory=lambda: [1])
    backtest_min_history_years: float = 1.0
    backtest_max_workers: int = 1
    holdings_top_n: int = 10
    var_confidence: float = 0.95

    def __post_init__(self):
        """Validate values."""
        if self.backtest_step_months <= 0:
            raise ConfigError("backtest_step_months must be positive")
        if not self.backtest_forward_years or any(y <= 0 for y in self.backtest_forward_years):
            raise ConfigError("backtest_forward_years must be a non-empty list of positive years")
        if self.backtest_min_history_years < 0:
            raise ConfigError("backtest_min_history_years must be >= 0")
        if self.backtest_max_workers < 1:
            raise ConfigError("backtest_max_workers must be >= 1")
        if self.holdings_top_n < 1:
            raise ConfigError("holdings_top_n must be >= 1")
        if not 0 < self.var_confidence < 1:
            raise ConfigError("var_confidence must be between 0 and 1")


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML, then apply environment overrides.

    Args:
        config_path: Settings file; defaults to $FUND_SCORING_CONFIG, then
            ./config/settings.yml when it exists, else built-in defaults

    Returns:
        Settings

    Raises:
        ConfigError: If an explicitly requested file is missing or the file is not a mapping
    """
    load_dotenv()

    explicit = config_path or os.getenv('FUND_SCORING_CONFIG')
    values: Dict[str, Any] = {}

    if explicit:
        values = _read_yaml(Path(explicit))
    elif Path(DEFAULT_CONFIG_PATH).exists():
        values = _read_yaml(Path(DEFAULT_CONFIG_PATH))

    known = {f.name for f in fields(Settings)}
    ignored = sorted(set(values) - known)
    if ignored:
        logger.warning(f"Ignoring unknown settings: {ignored}")
    values = {k: v for k, v in values.items() if k in known}

    level = os.getenv('FUND_SCORING_LOG_LEVEL')
    if level:
        values['log_level'] = level

    workers = os.getenv('FUND_SCORING_MAX_WORKERS')
    if workers:
        try:
            values['backtest_max_workers'] = int(workers)
        except ValueError:
            raise ConfigError(f"FUND_SCORING_MAX_WORKERS must be an integer, got {workers!r}")

    return Settings(**values)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse settings file {path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    logger.info(f"Loaded settings from {path}")
    return data


def configure_logging(settings: Settings) -> None:
    """Configure the root logger once for an application entry point."""
    level = str(settings.log_level).upper()
    if level not in VALID_LOG_LEVELS:
        logger.warning(f"Invalid log level {settings.log_level!r}, using INFO")
        level = 'INFO'

    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)
