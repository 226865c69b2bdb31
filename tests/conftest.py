import os
from datetime import datetime, timedelta, timezone

import pytest

from logroller.config import DEFAULT_BACKUP_TIME_FORMAT
from logroller.fs import FileSystem
from logroller.naming import format_backup_time

START = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock for ``time_func`` that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class FailingFileSystem(FileSystem):
    """FileSystem whose named operations raise for paths containing a marker."""

    def __init__(self, fail_ops=(), marker=""):
        self.fail_ops = set(fail_ops)
        self.marker = marker

    def _maybe_fail(self, op, path):
        if op in self.fail_ops and self.marker in os.path.basename(path):
            raise PermissionError(f"{op} denied: {path}")

    def rename(self, src, dst):
        self._maybe_fail("rename", src)
        super().rename(src, dst)

    def remove(self, path):
        self._maybe_fail("remove", path)
        super().remove(path)

    def open_read(self, path):
        self._maybe_fail("open_read", path)
        return super().open_read(path)

    def open_truncate(self, path, mode):
        self._maybe_fail("open_truncate", path)
        return super().open_truncate(path, mode)


class ShortWrite:
    """File wrapper that writes at most *limit* bytes per call, like a raw fd."""

    def __init__(self, f, limit):
        self._f = f
        self._limit = limit

    def write(self, data):
        return self._f.write(data[: self._limit])

    def close(self):
        self._f.close()


class ShortWriteFileSystem(FileSystem):
    """FileSystem whose write handles accept at most *limit* bytes per call."""

    def __init__(self, limit):
        self.limit = limit

    def open_append(self, path):
        return ShortWrite(super().open_append(path), self.limit)

    def open_truncate(self, path, mode):
        return ShortWrite(super().open_truncate(path, mode), self.limit)


@pytest.fixture
def clock():
    return FakeClock()


def backup_filename(when: datetime, base="app", ext=".log", suffix=""):
    return f"{base}-{format_backup_time(when, DEFAULT_BACKUP_TIME_FORMAT)}{ext}{suffix}"


def make_file(directory, name, content=b"x"):
    path = os.path.join(str(directory), name)
    with open(path, "wb") as f:
        f.write(content)
    return path
