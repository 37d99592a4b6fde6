"""Project-level configuration and path helpers."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError

PROJECT_ROOT = Path(os.getenv("STOIC_HOME", str(Path.home() / ".stoic")))
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_DB_PATH = DATA_DIR / "stoic.db"
DEFAULT_LOG_PATH = LOGS_DIR / "agent.log"


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def check_agent_config(config: "AgentConfig") -> None:
    """Reject threshold orderings and intervals the listener cannot run with."""
    if config.process_interval <= 0:
        raise ConfigurationError(
            f"process_interval must be positive, got {config.process_interval}"
        )
    if config.cooldown_period <= 0:
        raise ConfigurationError(
            f"cooldown_period must be positive, got {config.cooldown_period}"
        )
    if config.sample_timeout <= 0:
        raise ConfigurationError(
            f"sample_timeout must be positive, got {config.sample_timeout}"
        )
    if config.cpu_warning_threshold >= config.cpu_critical_threshold:
        raise ConfigurationError(
            "cpu_warning_threshold must be lower than cpu_critical_threshold "
            f"({config.cpu_warning_threshold} >= {config.cpu_critical_threshold})"
        )


class AgentConfig(BaseModel):
    """Resolved agent settings.

    Intervals are in milliseconds, thresholds are CPU percentages (0-100).
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    notifications_enabled: bool = True
    process_interval: int = 5000
    cooldown_period: int = 30000
    cpu_warning_threshold: float = Field(default=70.0, ge=0, le=100)
    cpu_critical_threshold: float = Field(default=90.0, ge=0, le=100)
    sample_timeout: float = 2.0  # seconds
    database_url: str | None = None
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_ordering(self) -> "AgentConfig":
        check_agent_config(self)
        return self

    @property
    def window_size(self) -> int:
        """Number of samples kept by a listener's moving average."""
        return max(1, round(self.cooldown_period / self.process_interval))


# Environment variable -> AgentConfig field
ENV_FIELDS = {
    "STOIC_AGENT_ENABLED": "enabled",
    "STOIC_NOTIFICATIONS_ENABLED": "notifications_enabled",
    "STOIC_PROCESS_INTERVAL": "process_interval",
    "STOIC_COOLDOWN_PERIOD": "cooldown_period",
    "STOIC_CPU_WARNING_THRESHOLD": "cpu_warning_threshold",
    "STOIC_CPU_CRITICAL_THRESHOLD": "cpu_critical_threshold",
    "STOIC_SAMPLE_TIMEOUT": "sample_timeout",
    "DATABASE_URL": "database_url",
    "LOG_LEVEL": "log_level",
}


def load_config(environ: Mapping[str, str] | None = None) -> AgentConfig:
    """
    Build AgentConfig from environment variables.

    Unset variables fall back to the model defaults.

    Raises:
        ConfigurationError: if any value fails validation.
    """
    if environ is None:
        environ = os.environ

    values = {
        field: environ[name]
        for name, field in ENV_FIELDS.items()
        if environ.get(name) not in (None, "")
    }

    try:
        return AgentConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid agent configuration: {e}") from e
