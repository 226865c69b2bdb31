"""Rotation: move the active file aside under a timestamped name and start a fresh one."""

import logging
import os
import stat
from datetime import datetime, timezone

from logroller.active_file import ActiveFile
from logroller.config import RollerConfig
from logroller.fs import FileSystem
from logroller.naming import backup_name, prefix_and_ext, with_counter
from logroller.trigger import RotationTrigger

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


class Rotator:
    """Performs close/rename/reopen on an ActiveFile.

    Not thread-safe on its own: callers hold the writer lock around every
    method. ``on_rotated`` is called after each successful rotation and must
    not block.
    """

    def __init__(
        self,
        config: RollerConfig,
        active: ActiveFile,
        fs: FileSystem,
        time_func=None,
        on_rotated=None,
    ):
        self._config = config
        self._active = active
        self._fs = fs
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._on_rotated = on_rotated

    def backup_name(self, when: datetime) -> str:
        if self._config.backup_name_func is not None:
            return self._config.backup_name_func(self._config.filepath, when)
        return backup_name(
            self._config.filepath,
            when,
            self._config.backup_time_format,
            self._config.backup_timezone,
        )

    def _stat_or_none(self, path: str) -> os.stat_result | None:
        try:
            return self._fs.stat(path)
        except FileNotFoundError:
            return None

    def _copy_metadata(self, path: str, st: os.stat_result):
        self._fs.chmod(path, stat.S_IMODE(st.st_mode))
        try:
            self._fs.chown_like(path, st)
        except PermissionError as e:
            logger.debug("Could not copy ownership onto %s: %s", path, e)

    def _exists(self, path: str) -> bool:
        return self._stat_or_none(path) is not None

    def _unused_name(self, path: str) -> str:
        """Return *path*, or *path* with a ``-N`` counter if it or its compressed copy exists."""
        suffix = self._config.compress_suffix

        def taken(p):
            return self._exists(p) or (bool(suffix) and self._exists(p + suffix))

        if not taken(path):
            return path
        ext = None
        if self._config.backup_name_func is None:
            ext = prefix_and_ext(self._config.filepath)[1]
        n = 1
        while taken(with_counter(path, n, ext)):
            n += 1
        logger.info("Backup %s already exists, using counter %d", path, n)
        return with_counter(path, n, ext)

    def rotate(self) -> str | None:
        """Rotate the active file. Returns the backup path, or None if there was nothing to move."""
        self._active.close()

        path = self._config.filepath
        self._fs.makedirs(os.path.dirname(path))

        st = self._stat_or_none(path)
        rotated_path = None
        if st is not None:
            rotated_path = self._unused_name(self.backup_name(self._time_func()))
            self._fs.makedirs(os.path.dirname(rotated_path))
            self._fs.rename(path, rotated_path)

        self._active.create(DEFAULT_FILE_MODE if st is None else stat.S_IMODE(st.st_mode))
        if st is not None:
            self._copy_metadata(path, st)
            logger.info("Rotated %s -> %s", path, rotated_path)

        if self._on_rotated is not None:
            self._on_rotated()
        return rotated_path

    def open_existing_or_new(self, trigger: RotationTrigger, write_len: int = 0) -> str | None:
        """Open the canonical file for appending, rotating first if it is already due.

        Returns the backup path when a rotation happened.
        """
        path = self._config.filepath
        st = self._stat_or_none(path)
        if st is None:
            return self.rotate()

        if trigger.should_rotate_after():
            if st.st_size > 0:
                return self.rotate()
        else:
            mtime = datetime.fromtimestamp(st.st_mtime, timezone.utc)
            elapsed = (self._time_func() - mtime).total_seconds()
            if trigger.should_rotate_before(st.st_size, write_len, elapsed):
                return self.rotate()

        try:
            self._active.open_append()
        except OSError as e:
            logger.warning("Cannot append to %s (%s), starting a new file", path, e)
            return self.rotate()
        return None
