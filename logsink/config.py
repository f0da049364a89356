"""Configuration module: frozen dataclasses loaded from YAML and environment variables."""

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from enum import Enum

import yaml

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "logsink"


class RetentionMode(Enum):
    COUNT_BOUND = "count"
    AGE_BOUND = "age"


def _parse_bool(value: str) -> bool:
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_mode(value) -> RetentionMode:
    if isinstance(value, RetentionMode):
        return value
    raw = str(value).strip().lower()
    for mode in RetentionMode:
        if raw in (mode.value, mode.name.lower()):
            return mode
    raise ValueError(f"Unknown retention mode: {value!r} (expected 'count' or 'age')")


@dataclass(frozen=True)
class RotationConfig:
    max_active_size_bytes: int = 5 * 1024 * 1024  # 5 MB
    retention_mode: RetentionMode = RetentionMode.COUNT_BOUND
    max_archive_count: int = 100
    max_archive_age_seconds: int = 60 * 60  # 1h
    compression_level: int = 6

    def __post_init__(self):
        if self.max_active_size_bytes < 0:
            raise ValueError("max_active_size_bytes must be >= 0")
        if self.max_archive_count < 1:
            raise ValueError("max_archive_count must be >= 1")
        if self.max_archive_age_seconds < 0:
            raise ValueError("max_archive_age_seconds must be >= 0")
        if not 0 <= self.compression_level <= 9:
            raise ValueError("compression_level must be between 0 and 9")


@dataclass(frozen=True)
class SinkConfig:
    log_path: str | None = None
    sync_after_each_write: bool = False
    rotation: RotationConfig = field(default_factory=RotationConfig)


def default_log_path(app_name: str = DEFAULT_APP_NAME) -> str:
    """Platform-dependent location for the active log file."""
    filename = f"{app_name}.log"
    if sys.platform.startswith("linux"):
        return os.path.join("/var/cache", filename)
    if sys.platform == "darwin":
        return os.path.join(
            os.path.expanduser("~/Library/Caches"), app_name, filename
        )
    base = os.environ.get("LOCALAPPDATA") or os.path.expanduser("~/.cache")
    return os.path.join(base, app_name, filename)


def load_yaml_config(path: str | None) -> dict:
    """Load the ``sink`` settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    return data.get("sink", data)


def load_config(path: str | None = None) -> SinkConfig:
    """Build SinkConfig from defaults <- YAML file <- env vars (highest priority)."""
    yaml_data = load_yaml_config(path or os.environ.get("CONFIG_PATH"))
    rotation_data = yaml_data.get("rotation", {}) or {}
    env = os.environ

    # MAX_ACTIVE_SIZE_BYTES takes precedence over MAX_ACTIVE_SIZE_MB
    raw_bytes = env.get("MAX_ACTIVE_SIZE_BYTES")
    raw_mb = env.get("MAX_ACTIVE_SIZE_MB")
    if raw_bytes is not None:
        max_size = int(raw_bytes)
    elif raw_mb is not None:
        max_size = int(float(raw_mb) * 1024 * 1024)
    else:
        max_size = int(rotation_data.get(
            "max_active_size_bytes", RotationConfig.max_active_size_bytes
        ))

    rotation = RotationConfig(
        max_active_size_bytes=max_size,
        retention_mode=_parse_mode(
            env.get("RETENTION_MODE", rotation_data.get("retention_mode", "count"))
        ),
        max_archive_count=int(
            env.get("MAX_ARCHIVE_COUNT",
                    rotation_data.get("max_archive_count", RotationConfig.max_archive_count))
        ),
        max_archive_age_seconds=int(
            env.get("MAX_ARCHIVE_AGE_SECONDS",
                    rotation_data.get("max_archive_age_seconds",
                                      RotationConfig.max_archive_age_seconds))
        ),
        compression_level=int(
            env.get("COMPRESSION_LEVEL",
                    rotation_data.get("compression_level", RotationConfig.compression_level))
        ),
    )

    return SinkConfig(
        log_path=env.get("LOG_PATH", yaml_data.get("log_path")),
        sync_after_each_write=_parse_bool(
            env.get("SYNC_AFTER_EACH_WRITE", yaml_data.get("sync_after_each_write", "false"))
        ),
        rotation=rotation,
    )


def with_resolved_path(config: SinkConfig, app_name: str = DEFAULT_APP_NAME) -> SinkConfig:
    """Return a copy of *config* whose log_path falls back to the platform default."""
    if config.log_path:
        return config
    return replace(config, log_path=default_log_path(app_name))
