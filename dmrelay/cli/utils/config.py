"""Configuration file management for CLI."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from dmrelay.client.transport import DEFAULT_TIMEOUT
from dmrelay.client.types import Scope

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))
_FALSE_VALUES = frozenset(("0", "false", "no", "off"))


@dataclass(frozen=True)
class ClientConfig:
    """Client configuration loaded from config file and environment."""

    api_url: str
    user_id: str
    role: Scope
    token: str = field(repr=False)
    db_path: Path
    timeout: float = DEFAULT_TIMEOUT
    http2: bool = True
    send_order: tuple[str, ...] = ()


class ConfigError(Exception):
    """Configuration file error."""

    pass


def _parse_bool(value: str, default: bool) -> bool:
    """Interpret an on/off environment value; empty means ``default``.

    Unknown spellings are logged and fall back to ``default``.
    """
    if not value:
        return default
    flag = value.strip().lower()
    if flag in _TRUE_VALUES:
        return True
    if flag in _FALSE_VALUES:
        return False
    logger.warning("Unrecognised boolean value %r, keeping default %s (use true/false, 1/0, yes/no, on/off)",
                   value, default)
    return default


def _parse_timeout(value: str, default: float) -> float:
    if not value:
        return default
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Unrecognised timeout %r, using default %s", value, default)
        return default
    if timeout <= 0:
        logger.warning("Timeout must be positive, got %s; using default %s", timeout, default)
        return default
    return timeout


class ConfigManager:
    """Manages client configuration in ~/.dmrelay/config.yaml.

    Environment variables override file values: ``DMRELAY_API_URL``,
    ``DMRELAY_TOKEN``, ``DMRELAY_TIMEOUT`` and ``DMRELAY_HTTP2``.
    """

    DEFAULT_DIR = Path.home() / ".dmrelay"
    CONFIG_FILE = "config.yaml"
    TOKEN_FILE = "token"
    DB_FILE = "offline.db"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = config_dir or self.DEFAULT_DIR
        self._config_path = self._config_dir / self.CONFIG_FILE
        self._token_path = self._config_dir / self.TOKEN_FILE
        self._db_path = self._config_dir / self.DB_FILE

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def db_path(self) -> Path:
        return self._db_path

    def exists(self) -> bool:
        """Check if configuration exists."""
        return self._config_path.exists()

    def _read(self) -> dict:
        if not self._config_path.exists():
            raise ConfigError(
                f"Config not found at {self._config_path}. Run 'dmrelay init' first."
            )
        with open(self._config_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid config file: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Invalid config: expected a mapping")
        return data

    def load(self) -> ClientConfig:
        """Load configuration from file. Raises ConfigError if not found."""
        data = self._read()
        api_url = os.environ.get("DMRELAY_API_URL") or data.get("api_url")
        if not api_url or "user_id" not in data:
            raise ConfigError("Invalid config: missing api_url or user_id")
        try:
            role = Scope(data.get("role", Scope.STUDENT.value))
        except ValueError as e:
            raise ConfigError(f"Invalid role in config: {data.get('role')!r}") from e

        token = os.environ.get("DMRELAY_TOKEN", "")
        if not token and self._token_path.exists():
            token = self._token_path.read_text().strip()

        file_timeout = data.get("timeout", DEFAULT_TIMEOUT)
        timeout = _parse_timeout(os.environ.get("DMRELAY_TIMEOUT", ""), float(file_timeout))
        http2 = _parse_bool(os.environ.get("DMRELAY_HTTP2", ""), bool(data.get("http2", True)))

        return ClientConfig(
            api_url=api_url,
            user_id=str(data["user_id"]),
            role=role,
            token=token,
            db_path=self._db_path,
            timeout=timeout,
            http2=http2,
            send_order=tuple(data.get("send_order") or ()),
        )

    def save(
        self, api_url: str, user_id: str, role: Scope, token: str, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        """Save configuration to file."""
        self._config_dir.mkdir(parents=True, exist_ok=True)

        config_data = {"api_url": api_url, "user_id": user_id, "role": Scope(role).value, "timeout": timeout}

        with open(self._config_path, "w") as f:
            yaml.safe_dump(config_data, f, default_flow_style=False)

        with open(self._token_path, "w") as f:
            f.write(token)

        self._token_path.chmod(0o600)

    def save_send_order(self, order: list[str]) -> None:
        """Persist the preferred send candidate order."""
        data = self._read()
        data["send_order"] = list(order)
        with open(self._config_path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
