"""The file currently being written: handle, tracked size and creation time."""

from datetime import datetime, timezone

from logroller.fs import FileSystem


class ActiveFile:
    """Owns the open handle for the canonical path.

    ``size`` is the on-disk size at open time plus every byte written since.
    The handle is None whenever the file is closed.
    """

    def __init__(self, path: str, fs: FileSystem, time_func=None):
        self.path = path
        self._fs = fs
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._file = None
        self.size = 0
        self.created_at: datetime | None = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def open_append(self):
        """Open the existing file for appending, resuming its size and mtime."""
        f = self._fs.open_append(self.path)
        try:
            st = self._fs.stat(self.path)
        except OSError:
            f.close()
            raise
        self._file = f
        self.size = st.st_size
        self.created_at = datetime.fromtimestamp(st.st_mtime, timezone.utc)

    def create(self, mode: int):
        """Create (or truncate) the file and start counting from zero."""
        self._file = self._fs.open_truncate(self.path, mode)
        self.size = 0
        self.created_at = self._time_func()

    def age_seconds(self) -> float:
        if self.created_at is None:
            return 0.0
        return (self._time_func() - self.created_at).total_seconds()

    def write(self, data: bytes) -> int:
        n = self._file.write(data) or 0
        self.size += n
        return n

    def close(self):
        if self._file is None:
            return
        f = self._file
        self._file = None
        self.size = 0
        self.created_at = None
        f.close()
