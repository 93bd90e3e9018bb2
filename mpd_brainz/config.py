"""Configuration module."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from mpd_brainz.errors import ConfigError

CONFIG_DIR = "mpd-brainz"
CONFIG_FILE = "mpd-brainz.conf"
DEFAULT_LOG_FILE = "mpd-brainz.log"
TOKEN_ENV_VAR = "LISTENBRAINZ_TOKEN"

logger = logging.getLogger("config")


class Config(BaseModel):
    """Settings read from the YAML configuration file."""

    mpd_address: str = "localhost:6600"
    mpd_password: str = ""
    polling_interval_seconds: float = Field(10, gt=0)
    listenbrainz_token: str = ""
    log_file: str = ""
    request_timeout_seconds: float = Field(10, gt=0)

    # Directory the configuration was looked up in, not read from the file
    config_root: Path | None = Field(None, exclude=True)

    @property
    def request_timeout(self) -> float:
        """Request timeout, never longer than the polling interval."""
        return min(self.request_timeout_seconds, self.polling_interval_seconds)

    def log_path(self, cli_log_path: str = "") -> str:
        """Resolve where logs go, "-" meaning stdout only.

        Args:
            cli_log_path: Value of the -l flag, takes precedence.

        Returns:
            str: Log file path or "-".

        """
        if cli_log_path:
            return cli_log_path
        if self.log_file:
            return self.log_file
        if self.config_root is None:
            return DEFAULT_LOG_FILE
        return str(self.config_root / DEFAULT_LOG_FILE)


def default_config_path() -> Path:
    """Get $XDG_CONFIG_HOME/mpd-brainz/mpd-brainz.conf or its ~/.config twin."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        root = Path(xdg_config_home)
    else:
        root = Path.home() / ".config"
    return root / CONFIG_DIR / CONFIG_FILE


def load_config(config_path: str | Path | None = None) -> Config:
    """Load the configuration and resolve the ListenBrainz token.

    A missing configuration file is not an error, defaults are used. The
    token falls back to the LISTENBRAINZ_TOKEN environment variable.

    Args:
        config_path: Configuration file, defaults to the XDG location.

    Raises:
        ConfigError: Unreadable or invalid file, or no token anywhere.

    Returns:
        Config: The loaded configuration.

    """
    if config_path:
        path = Path(config_path).expanduser().absolute()
    else:
        path = default_config_path()
        try:
            path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Can't access config directory: {path.parent}: {e}")

    data: dict = {}
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        logger.debug(f"Loading configuration: {path}")
    except FileNotFoundError:
        logger.error(f"Opening configuration file: {path}: not found, using defaults")
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid configuration file: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid configuration file: {path}: expected a mapping")

    try:
        config = Config(**{**data, "config_root": path.parent})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration file: {path}: {e}") from e

    if not config.listenbrainz_token:
        config.listenbrainz_token = os.environ.get(TOKEN_ENV_VAR, "")
    if not config.listenbrainz_token:
        raise ConfigError(
            f"ListenBrainz token not found. Either define {TOKEN_ENV_VAR} "
            f"or set listenbrainz_token in {path}."
        )
    return config
