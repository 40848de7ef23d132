# File: apitypes/config.py
"""
apitypes - Project Configuration File
======================================
Load / save ``apitypes.config.json`` from a project directory.

:func:`load_config` never raises: every failure is reported through a
:class:`ConfigError` with a machine-readable :class:`ConfigErrorType`, so
the CLI can decide between "run ``--init`` first" and a hard error.
"""

from __future__ import annotations

import errno
import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from apitypes.models import ProjectConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.config")

CONFIG_FILE_NAME: str = "apitypes.config.json"

PathLike = Union[str, Path]


class ConfigErrorType(str, Enum):
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    PERMISSION_DENIED = "permission_denied"
    INVALID = "invalid"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Why a configuration file could not be used."""

    type: ConfigErrorType
    message: str
    original_error: Optional[BaseException] = None


@dataclass(frozen=True, slots=True)
class LoadConfigResult:
    config: Optional[ProjectConfig]
    error: Optional[ConfigError]
    config_path: Path

    @property
    def ok(self) -> bool:
        return self.config is not None


def get_config_path(cwd: Optional[PathLike] = None) -> Path:
    """Configuration file location for a project directory (default: cwd)."""
    base: Path = Path(cwd) if cwd is not None else Path.cwd()
    return base / CONFIG_FILE_NAME


def load_config(cwd: Optional[PathLike] = None) -> LoadConfigResult:
    """Read and validate the project configuration."""
    config_path: Path = get_config_path(cwd)

    try:
        content: str = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return LoadConfigResult(
            None,
            ConfigError(ConfigErrorType.NOT_FOUND, f"{CONFIG_FILE_NAME} not found"),
            config_path,
        )
    except PermissionError as exc:
        return LoadConfigResult(
            None,
            ConfigError(
                ConfigErrorType.PERMISSION_DENIED,
                f"Permission denied: {config_path}",
                exc,
            ),
            config_path,
        )
    except OSError as exc:
        error_type: ConfigErrorType = (
            ConfigErrorType.NOT_FOUND if exc.errno == errno.ENOTDIR else ConfigErrorType.UNKNOWN
        )
        return LoadConfigResult(
            None,
            ConfigError(error_type, exc.strerror or str(exc), exc),
            config_path,
        )

    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as exc:
        return LoadConfigResult(
            None,
            ConfigError(
                ConfigErrorType.PARSE_ERROR, f"Invalid JSON in {CONFIG_FILE_NAME}", exc
            ),
            config_path,
        )

    if not isinstance(data, dict):
        return LoadConfigResult(
            None,
            ConfigError(
                ConfigErrorType.INVALID,
                f"{CONFIG_FILE_NAME} must contain a JSON object, "
                f"got {type(data).__name__}.",
            ),
            config_path,
        )

    try:
        config: ProjectConfig = ProjectConfig.model_validate(data)
    except ValidationError as exc:
        return LoadConfigResult(
            None,
            ConfigError(
                ConfigErrorType.INVALID,
                f"Invalid {CONFIG_FILE_NAME}: {exc.error_count()} problem(s): "
                + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in exc.errors()
                ),
                exc,
            ),
            config_path,
        )

    logger.debug("Loaded configuration from %s (%d spec(s)).", config_path, len(config.specs))
    return LoadConfigResult(config, None, config_path)


def load_config_simple(cwd: Optional[PathLike] = None) -> Optional[ProjectConfig]:
    """Configuration or ``None``; the reason for failure is discarded."""
    return load_config(cwd).config


def save_config(config: ProjectConfig, cwd: Optional[PathLike] = None) -> Path:
    """Write *config* as pretty-printed JSON and return the file path."""
    config_path: Path = get_config_path(cwd)
    text: str = json.dumps(config.to_file_dict(), indent=2, ensure_ascii=False) + "\n"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path = config_path.with_name(f".{config_path.name}.tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, config_path)
    logger.info("Saved configuration to %s", config_path)
    return config_path


def config_exists(cwd: Optional[PathLike] = None) -> bool:
    """True only when the file exists *and* loads cleanly."""
    return load_config(cwd).ok


__all__: List[str] = [
    "CONFIG_FILE_NAME",
    "ConfigErrorType",
    "ConfigError",
    "LoadConfigResult",
    "get_config_path",
    "load_config",
    "load_config_simple",
    "save_config",
    "config_exists",
]

logger.debug("apitypes.config loaded — %d public symbols.", len(__all__))
