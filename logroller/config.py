"""Configuration module: frozen dataclass loaded from YAML and environment variables."""

import enum
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S.%L"
DEFAULT_COMPRESS_SUFFIX = ".gz"


class ConfigError(ValueError):
    """Raised when a RollerConfig cannot describe a working roller."""


class RotateStrategy(str, enum.Enum):
    # rotate before a write when the size or interval threshold fires
    THRESHOLD = "threshold"
    # rotate after every completed write
    DIRECT = "direct"


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def parse_timezone(name) -> tzinfo | None:
    """Resolve ``UTC``, ``local`` or an IANA zone name to a tzinfo.

    ``local`` resolves to None, meaning the system zone, looked up for each
    timestamp so DST changes are followed.
    """
    if name is None or isinstance(name, tzinfo):
        return name
    key = str(name).strip()
    if key.upper() == "UTC":
        return timezone.utc
    if key.lower() == "local":
        return None
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ConfigError(f"unknown timezone {key!r}") from e


@dataclass(frozen=True)
class RollerConfig:
    log_dir: str = "./logs"
    log_filename: str = "application.log"
    max_file_size_bytes: int | None = 10 * 1024 * 1024  # 10 MB
    rotation_interval_seconds: float | None = None
    rotate_strategy: RotateStrategy = RotateStrategy.THRESHOLD
    # retention thresholds, 0 disables
    max_backup_bytes: int = 0
    max_backup_count: int = 0
    max_backup_age_seconds: float = 0
    compression_enabled: bool = False
    compress_suffix: str = DEFAULT_COMPRESS_SUFFIX
    compression_level: int = 6
    backup_time_format: str = DEFAULT_BACKUP_TIME_FORMAT
    # None means the system zone
    backup_timezone: tzinfo | None = timezone.utc
    # (canonical path, rotation time) -> backup path
    backup_name_func: Callable[[str, datetime], str] | None = field(
        default=None, compare=False, repr=False
    )
    # glob selecting the backup set for retention, relative to log_dir;
    # backups found this way are ordered by mtime instead of by name
    backup_glob: str | None = None

    def __post_init__(self):
        if not self.log_filename:
            raise ConfigError("log_filename cannot be empty")
        if self.max_file_size_bytes is not None and self.max_file_size_bytes <= 0:
            raise ConfigError(
                f"max_file_size_bytes must be positive, got {self.max_file_size_bytes}"
            )
        if self.rotation_interval_seconds is not None and self.rotation_interval_seconds < 0:
            raise ConfigError("rotation_interval_seconds cannot be negative")
        if (
            self.rotate_strategy == RotateStrategy.THRESHOLD
            and self.max_file_size_bytes is None
            and self.rotation_interval_seconds is None
        ):
            raise ConfigError(
                "threshold rotation needs max_file_size_bytes or rotation_interval_seconds"
            )
        for name in ("max_backup_bytes", "max_backup_count", "max_backup_age_seconds"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} cannot be negative")
        if self.compression_enabled and not self.compress_suffix:
            raise ConfigError("compress_suffix cannot be empty when compression is enabled")
        if not 1 <= self.compression_level <= 9:
            raise ConfigError(f"compression_level must be 1-9, got {self.compression_level}")
        if not self.backup_time_format:
            raise ConfigError("backup_time_format cannot be empty")
        if self.backup_name_func is not None and self.retention_enabled and not self.backup_glob:
            raise ConfigError(
                "backup_name_func with retention or compression needs backup_glob "
                "to find the backups it names"
            )

    @property
    def filepath(self) -> str:
        return os.path.join(self.log_dir, self.log_filename)

    @property
    def retention_enabled(self) -> bool:
        return bool(
            self.max_backup_bytes
            or self.max_backup_count
            or self.max_backup_age_seconds
            or self.compression_enabled
        )


def load_yaml_config(path: str | None) -> dict:
    """Load roller settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data.get("roller", data)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def _optional_float(value) -> float | None:
    if value is None or value == "":
        return None
    value = float(value)
    return value or None


def load_config(yaml_data: dict | None = None) -> RollerConfig:
    """Build RollerConfig: dataclass defaults, then YAML keys, then environment variables."""
    data = dict(yaml_data or {})

    def setting(env_name, key, default):
        return os.environ.get(env_name, data.get(key, default))

    # MAX_FILE_SIZE_BYTES takes precedence over MAX_FILE_SIZE_MB
    raw_bytes = setting("MAX_FILE_SIZE_BYTES", "max_file_size_bytes", None)
    raw_mb = setting("MAX_FILE_SIZE_MB", "max_file_size_mb", None)
    if raw_bytes is not None:
        max_size = int(raw_bytes) or None
    elif raw_mb is not None:
        max_size = int(float(raw_mb) * 1024 * 1024) or None
    else:
        max_size = RollerConfig.max_file_size_bytes

    # MAX_BACKUP_AGE_SECONDS takes precedence over MAX_BACKUP_AGE_DAYS
    raw_age_seconds = setting("MAX_BACKUP_AGE_SECONDS", "max_backup_age_seconds", None)
    raw_age_days = setting("MAX_BACKUP_AGE_DAYS", "max_backup_age_days", None)
    if raw_age_seconds is not None:
        max_age = float(raw_age_seconds)
    elif raw_age_days is not None:
        max_age = float(raw_age_days) * 86400
    else:
        max_age = RollerConfig.max_backup_age_seconds

    raw_strategy = setting("ROTATE_STRATEGY", "rotate_strategy", RollerConfig.rotate_strategy.value)
    try:
        strategy = RotateStrategy(str(raw_strategy).strip().lower())
    except ValueError as e:
        raise ConfigError(f"unknown rotate strategy {raw_strategy!r}") from e

    return RollerConfig(
        log_dir=setting("LOG_DIR", "log_dir", RollerConfig.log_dir),
        log_filename=setting("LOG_FILENAME", "log_filename", RollerConfig.log_filename),
        max_file_size_bytes=max_size,
        rotation_interval_seconds=_optional_float(
            setting("ROTATION_INTERVAL_SECONDS", "rotation_interval_seconds", None)
        ),
        rotate_strategy=strategy,
        max_backup_bytes=int(
            setting("MAX_BACKUP_BYTES", "max_backup_bytes", RollerConfig.max_backup_bytes)
        ),
        max_backup_count=int(
            setting("MAX_BACKUP_COUNT", "max_backup_count", RollerConfig.max_backup_count)
        ),
        max_backup_age_seconds=max_age,
        compression_enabled=_parse_bool(
            setting("COMPRESSION_ENABLED", "compression_enabled", "false")
        ),
        compress_suffix=setting("COMPRESS_SUFFIX", "compress_suffix", RollerConfig.compress_suffix),
        compression_level=int(
            setting("COMPRESSION_LEVEL", "compression_level", RollerConfig.compression_level)
        ),
        backup_time_format=setting(
            "BACKUP_TIME_FORMAT", "backup_time_format", RollerConfig.backup_time_format
        ),
        backup_timezone=parse_timezone(setting("BACKUP_TIMEZONE", "backup_timezone", "UTC")),
        backup_glob=setting("BACKUP_GLOB", "backup_glob", None) or None,
    )
