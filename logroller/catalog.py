"""Backup listing: find rotated files next to the active one and order them newest-first."""

import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone

from logroller.config import RollerConfig
from logroller.fs import FileSystem
from logroller.naming import prefix_and_ext, time_from_name


@dataclass(frozen=True)
class BackupEntry:
    name: str
    path: str
    timestamp: datetime
    size: int
    compressed: bool


def list_backups(config: RollerConfig, fs: FileSystem | None = None) -> list[BackupEntry]:
    """Scan ``config.log_dir`` for backups of ``config.log_filename``.

    Files whose name doesn't carry a timestamp in the configured format were
    not produced by the roller and are skipped, as are subdirectories. With
    ``config.backup_glob`` set, the glob (and its compressed variant) selects
    the backups instead.
    """
    fs = fs or FileSystem()
    if config.backup_glob:
        backups = _glob_backups(config, fs)
    else:
        backups = _named_backups(config, fs)
    backups.sort(key=lambda b: b.timestamp, reverse=True)
    return backups


def _named_backups(config: RollerConfig, fs: FileSystem) -> list[BackupEntry]:
    prefix, ext = prefix_and_ext(config.log_filename)
    fmt = config.backup_time_format
    tz = config.backup_timezone
    suffix = config.compress_suffix

    backups = []
    for entry in fs.scandir(config.log_dir):
        if entry.is_dir():
            continue
        ts = time_from_name(entry.name, prefix, ext, fmt, tz)
        if ts is None and suffix:
            ts = time_from_name(entry.name, prefix, ext + suffix, fmt, tz)
        if ts is None:
            continue
        compressed = bool(suffix) and entry.name.endswith(suffix)
        try:
            size = entry.stat().st_size
        except FileNotFoundError:
            # removed between scandir and stat
            continue
        backups.append(BackupEntry(entry.name, entry.path, ts, size, compressed))
    return backups


def _glob_backups(config: RollerConfig, fs: FileSystem) -> list[BackupEntry]:
    pattern = os.path.join(config.log_dir, config.backup_glob)
    suffix = config.compress_suffix
    paths = set(fs.glob(pattern))
    if suffix:
        paths.update(fs.glob(pattern + suffix))
    active = os.path.abspath(config.filepath)

    backups = []
    for path in paths:
        if os.path.abspath(path) == active:
            continue
        try:
            st = fs.stat(path)
        except FileNotFoundError:
            continue
        if not stat.S_ISREG(st.st_mode):
            continue
        ts = datetime.fromtimestamp(st.st_mtime, timezone.utc)
        compressed = bool(suffix) and path.endswith(suffix)
        name = os.path.relpath(path, config.log_dir)
        backups.append(BackupEntry(name, path, ts, st.st_size, compressed))
    return backups
