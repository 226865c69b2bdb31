"""Filesystem operations used by the roller, behind one injectable object."""

import glob
import os


class FileSystem:
    """Thin wrapper over ``os`` so tests can substitute failing operations."""

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def scandir(self, path: str) -> list[os.DirEntry]:
        with os.scandir(path) as it:
            return list(it)

    def glob(self, pattern: str) -> list[str]:
        return glob.glob(pattern)

    def makedirs(self, path: str):
        if path:
            os.makedirs(path, exist_ok=True)

    def rename(self, src: str, dst: str):
        os.rename(src, dst)

    def remove(self, path: str):
        os.remove(path)

    def open_read(self, path: str):
        return open(path, "rb")

    def open_append(self, path: str):
        return open(path, "ab", buffering=0)

    def open_truncate(self, path: str, mode: int):
        """Create or truncate *path* for writing, applying *mode* to new files."""
        fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
        return open(fd, "wb", buffering=0)

    def chmod(self, path: str, mode: int):
        os.chmod(path, mode)

    def copy_times(self, path: str, st: os.stat_result):
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns))

    def chown_like(self, path: str, st: os.stat_result):
        """Give *path* the owner of *st*. No-op where ownership is unsupported."""
        if not hasattr(os, "chown"):
            return
        os.chown(path, st.st_uid, st.st_gid)
