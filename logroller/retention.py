"""Retention ("mill"): size, count and age eviction of backups plus gzip compression."""

import gzip
import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from logroller.catalog import BackupEntry, list_backups
from logroller.config import RollerConfig
from logroller.fs import FileSystem

logger = logging.getLogger(__name__)


@dataclass
class RetentionDecision:
    retained: list[BackupEntry] = field(default_factory=list)
    to_delete: list[BackupEntry] = field(default_factory=list)
    to_compress: list[BackupEntry] = field(default_factory=list)


@dataclass
class RetentionReport:
    deleted: list[str] = field(default_factory=list)
    compressed: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    @property
    def first_error(self) -> Exception | None:
        return self.errors[0] if self.errors else None


def plan_retention(backups: list[BackupEntry], config: RollerConfig, now: datetime) -> RetentionDecision:
    """Partition newest-first *backups* into retained / to_delete / to_compress.

    Each enabled filter only sees the survivors of the previous one, so a
    backup is retained only if it passes all of them.
    """
    decision = RetentionDecision()
    survivors = list(backups)

    if config.max_backup_bytes > 0:
        remaining = []
        total = 0
        for b in survivors:
            total += b.size
            if total > config.max_backup_bytes:
                decision.to_delete.append(b)
            else:
                remaining.append(b)
        survivors = remaining

    if 0 < config.max_backup_count < len(survivors):
        # app-T.log and app-T.log.gz are the same backup
        seen = set()
        remaining = []
        for b in survivors:
            seen.add(strip_suffix(b.name, config.compress_suffix))
            if len(seen) > config.max_backup_count:
                decision.to_delete.append(b)
            else:
                remaining.append(b)
        survivors = remaining

    if config.max_backup_age_seconds > 0:
        cutoff = now - timedelta(seconds=config.max_backup_age_seconds)
        remaining = []
        for b in survivors:
            if b.timestamp < cutoff:
                decision.to_delete.append(b)
            else:
                remaining.append(b)
        survivors = remaining

    decision.retained = survivors
    if config.compression_enabled:
        decision.to_compress = [b for b in survivors if not b.compressed]
    return decision


def strip_suffix(name: str, suffix: str) -> str:
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name


def compress_file(src: str, dst: str, fs: FileSystem | None = None, level: int = 6) -> str:
    """Gzip *src* into *dst*, then remove *src*. Returns *dst*.

    The source is only removed once *dst* is completely written and closed.
    On failure *dst* is removed and *src* left untouched.
    """
    fs = fs or FileSystem()
    st = fs.stat(src)
    mode = stat.S_IMODE(st.st_mode)
    try:
        with fs.open_read(src) as f_in, fs.open_truncate(dst, mode) as raw_out:
            with gzip.GzipFile(
                filename=os.path.basename(src), mode="wb", fileobj=raw_out, compresslevel=level
            ) as f_out:
                shutil.copyfileobj(f_in, f_out)
        fs.chmod(dst, mode)
        fs.copy_times(dst, st)
        try:
            fs.chown_like(dst, st)
        except PermissionError as e:
            logger.debug("Could not copy ownership onto %s: %s", dst, e)
    except Exception:
        try:
            fs.remove(dst)
        except FileNotFoundError:
            pass
        raise
    fs.remove(src)
    return dst


class RetentionEngine:
    """Runs one retention pass at a time over the backups of a RollerConfig."""

    def __init__(self, config: RollerConfig, fs: FileSystem | None = None, time_func=None):
        self._config = config
        self._fs = fs or FileSystem()
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))

    def run_once(self) -> RetentionReport:
        report = RetentionReport()
        if not self._config.retention_enabled:
            return report

        try:
            backups = list_backups(self._config, self._fs)
        except OSError as e:
            report.errors.append(e)
            return report

        decision = plan_retention(backups, self._config, self._time_func())

        for b in decision.to_delete:
            try:
                self._fs.remove(b.path)
            except OSError as e:
                report.errors.append(e)
                continue
            report.deleted.append(b.name)
            logger.debug("Removed backup %s", b.name)

        for b in decision.to_compress:
            dst = b.path + self._config.compress_suffix
            try:
                compress_file(b.path, dst, self._fs, self._config.compression_level)
            except OSError as e:
                report.errors.append(e)
                continue
            report.compressed.append(b.name + self._config.compress_suffix)
            logger.debug("Compressed backup %s", b.name)

        if report.deleted or report.compressed:
            logger.info(
                "Retention pass: removed %d, compressed %d backup(s)",
                len(report.deleted), len(report.compressed),
            )
        return report
