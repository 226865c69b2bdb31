"""Write interceptor: a byte sink that rotates its file and triggers retention."""

import logging
import threading
from datetime import datetime, timezone

from logroller.active_file import ActiveFile
from logroller.config import RollerConfig
from logroller.fs import FileSystem
from logroller.retention import RetentionEngine
from logroller.rotator import Rotator
from logroller.scheduler import RetentionWorker
from logroller.trigger import RotationTrigger

logger = logging.getLogger(__name__)


class WriteTooLongError(ValueError):
    """A single write is larger than the maximum file size."""


class RollingWriter:
    """File-like writer for ``config.filepath`` with rotation and retention.

    The canonical path is always the file being written. Rotated files are
    kept next to it as ``<base>-<timestamp><ext>`` and cleaned up by a
    background retention worker.
    """

    def __init__(self, config: RollerConfig, time_func=None, fs: FileSystem | None = None):
        self._config = config
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._fs = fs or FileSystem()
        self._lock = threading.Lock()
        self._closed = False
        self._trigger = RotationTrigger.from_config(config)

        self._worker = None
        if config.retention_enabled:
            engine = RetentionEngine(config, self._fs, self._time_func)
            self._worker = RetentionWorker(engine)
            self._worker.start()

        self._active = ActiveFile(config.filepath, self._fs, self._time_func)
        self._rotator = Rotator(
            config, self._active, self._fs, self._time_func, on_rotated=self._request_retention
        )
        try:
            self._fs.makedirs(config.log_dir)
            self._request_retention()
            self._rotator.open_existing_or_new(self._trigger)
        except Exception:
            if self._worker is not None:
                self._worker.stop()
            raise

    @property
    def config(self) -> RollerConfig:
        return self._config

    @property
    def size(self) -> int:
        with self._lock:
            return self._active.size

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def retention_worker(self) -> RetentionWorker | None:
        return self._worker

    def _request_retention(self):
        if self._worker is not None:
            self._worker.request()

    def _check_open(self):
        if self._closed:
            raise ValueError("I/O operation on closed RollingWriter")

    def write(self, data) -> int:
        """Write *data* (bytes, or str encoded as UTF-8). Returns bytes written."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        write_len = len(data)
        max_size = self._config.max_file_size_bytes
        if max_size is not None and write_len > max_size:
            raise WriteTooLongError(f"write length {write_len}, max size {max_size}")

        with self._lock:
            self._check_open()
            if self._active.closed:
                # a previous rotation failed part way
                self._rotator.open_existing_or_new(self._trigger, write_len)
            if self._trigger.should_rotate_before(
                self._active.size, write_len, self._active.age_seconds()
            ):
                self._rotator.rotate()

            n = self._active.write(data)

            if self._trigger.should_rotate_after():
                self._rotator.rotate()
            return n

    def rotate(self) -> str | None:
        """Force a rotation. Returns the backup path, or None if no file was moved."""
        with self._lock:
            self._check_open()
            return self._rotator.rotate()

    def flush(self):
        # the underlying file is unbuffered
        pass

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._active.close()
            finally:
                if self._worker is not None:
                    self._worker.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
