"""Server configuration and logging setup.

Settings come from command-line flags first, then the environment (a
``.env`` file in the working directory is loaded into it), then defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_DATA_FILE = "beads.json"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9999
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigError(ValueError):
    """Invalid or incomplete server configuration"""


@dataclass
class Settings:
    token: str = ""
    projects_file: Optional[Path] = None
    data_file: Path = Path(DEFAULT_DATA_FILE)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def multi_tenant(self) -> bool:
        return self.projects_file is not None

    def validate(self) -> "Settings":
        """Check that exactly one of token and projects file is configured"""
        if self.token and self.projects_file is not None:
            raise ConfigError("BS_TOKEN and BS_PROJECTS_FILE are mutually exclusive")
        if not self.token and self.projects_file is None:
            raise ConfigError("either BS_TOKEN or BS_PROJECTS_FILE is required")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"unknown log level: {self.log_level}")
        return self


def _parse_port(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"port must be an integer, got {value!r}")


def load_settings(
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
    dotenv: bool = True,
) -> Settings:
    """Resolve settings from ``overrides`` (CLI flags), the environment and defaults.

    ``None`` values in ``overrides`` fall through to the environment.
    """
    if dotenv:
        load_dotenv()
    env = os.environ if environ is None else environ
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    def pick(key: str, env_name: str, default):
        if key in overrides:
            return overrides[key]
        value = env.get(env_name, "")
        return value if value != "" else default

    projects_file = pick("projects_file", "BS_PROJECTS_FILE", None)
    settings = Settings(
        token=str(pick("token", "BS_TOKEN", "")).strip(),
        projects_file=Path(projects_file) if projects_file else None,
        data_file=Path(pick("data_file", "BS_DATA_FILE", DEFAULT_DATA_FILE)),
        host=str(pick("host", "BS_HOST", DEFAULT_HOST)),
        port=_parse_port(pick("port", "BS_PORT", DEFAULT_PORT)),
        log_level=str(pick("log_level", "BS_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper(),
    )
    return settings.validate()


def setup_logging(level: str = DEFAULT_LOG_LEVEL):
    """Configure root logging once for the server process"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
