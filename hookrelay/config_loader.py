"""Configuration loading from YAML files with environment variable support."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

logger = logging.getLogger("hookrelay")

DEFAULT_CONFIG_PATH = "configs/config_default.yaml"
CONFIG_PATH_ENV = "HOOKRELAY_CONFIG"

PROJECT_ROOT = Path(__file__).resolve().parent.parent

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def resolve_config_path(path: str) -> Path:
    """Resolve a relative path against the working directory, then the project root."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    if candidate.exists():
        return candidate.resolve()
    return PROJECT_ROOT / candidate


def resolve_env_path(config_path: Path, env_path: Optional[str] = None) -> Path:
    """Pick the env file for a config file.

    ``configs/config_prod.yaml`` pairs with ``configs/.env_prod``; any other
    file name pairs with a plain ``.env`` next to it.
    """
    if env_path:
        return resolve_config_path(env_path)
    prefix, _, suffix = config_path.stem.partition("config_")
    if not prefix and suffix:
        return config_path.with_name(f".env_{suffix}")
    return config_path.with_name(".env")


@dataclass
class EnvSubstituter:
    """Replaces ``${VAR}`` and ``$VAR`` inside nested config values.

    Values from the env file win over the process environment. Unset
    variables keep their placeholder and are collected in ``missing``.
    """

    env_values: Mapping[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    missing: set = field(default_factory=set)

    def lookup(self, name: str) -> Optional[str]:
        value = self.env_values.get(name)
        return value if value is not None else self.environ.get(name)

    def _replace(self, match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(2)
        value = self.lookup(name)
        if value is None:
            self.missing.add(name)
            return match.group(0)
        return value

    def __call__(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {key: self(value) for key, value in obj.items()}
        if isinstance(obj, list):
            return [self(item) for item in obj]
        if isinstance(obj, str):
            return ENV_VAR_PATTERN.sub(self._replace, obj)
        return obj


def substitute_env_vars(obj: Any, env_values: Optional[Mapping[str, str]] = None) -> Any:
    """Substitute env placeholders in ``obj``, warning once per unset variable."""
    substituter = EnvSubstituter(env_values or {})
    result = substituter(obj)
    for name in sorted(substituter.missing):
        logger.warning(
            f"Environment variable '{name}' is not set; "
            f"the literal placeholder is kept in the config"
        )
    return result


@dataclass(frozen=True)
class ConfigSource:
    """A config file together with the env file used to fill its placeholders."""

    config_path: Path
    env_path: Path

    @classmethod
    def locate(cls, path: Optional[str] = None, env_path: Optional[str] = None) -> "ConfigSource":
        if path is None:
            path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
        config_path = resolve_config_path(path)
        return cls(config_path, resolve_env_path(config_path, env_path))

    def env_values(self) -> dict[str, str]:
        """Read the env file without touching ``os.environ``."""
        if not self.env_path.exists():
            return {}
        logger.info(f"Loading environment variables from {self.env_path}")
        raw = dotenv_values(self.env_path)
        return {key: value for key, value in raw.items() if value is not None}

    def read(self) -> dict:
        if not self.config_path.exists():
            logger.error(f"Config file not found: {self.config_path}")
            raise RuntimeError(f"Config file not found: {self.config_path}")
        with self.config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        return data if isinstance(data, dict) else {}


def load_config(
    path: Optional[str] = None,
    env_path: Optional[str] = None,
    substitute_env: bool = True,
) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Config file. Defaults to ``$HOOKRELAY_CONFIG`` or
              ``configs/config_default.yaml``.
        env_path: Env file override for placeholder substitution.
        substitute_env: Whether to fill ``${VAR}`` placeholders.

    Returns:
        Parsed configuration dictionary.
    """
    source = ConfigSource.locate(path, env_path)
    logger.info(f"Loading configuration from {source.config_path}")
    data = source.read()
    if substitute_env:
        data = substitute_env_vars(data, source.env_values())
    return data
