"""Inspector logic: list, read, and search the active file and its backups."""

import gzip
import io
import os
from dataclasses import dataclass
from datetime import datetime

from logroller.catalog import list_backups
from logroller.config import RollerConfig
from logroller.fs import FileSystem


@dataclass(frozen=True)
class LogFileInfo:
    name: str
    size: int
    timestamp: datetime | None  # None for the active file
    compressed: bool


def list_log_files(config: RollerConfig, fs: FileSystem | None = None) -> list[LogFileInfo]:
    """Return the active file (if present) followed by backups, newest first."""
    fs = fs or FileSystem()
    files = []
    try:
        st = fs.stat(config.filepath)
    except FileNotFoundError:
        pass
    else:
        files.append(LogFileInfo(config.log_filename, st.st_size, None, False))
    try:
        backups = list_backups(config, fs)
    except FileNotFoundError:
        return files
    for b in backups:
        files.append(LogFileInfo(b.name, b.size, b.timestamp, b.compressed))
    return files


def _text(raw, name: str, compress_suffix: str):
    if compress_suffix and name.endswith(compress_suffix):
        raw = gzip.GzipFile(fileobj=raw, mode="rb")
    return io.TextIOWrapper(raw, encoding="utf-8", errors="replace")


def read_file(config: RollerConfig, filename: str, fs: FileSystem | None = None) -> str:
    """Read a log file, transparently decompressing compressed backups."""
    fs = fs or FileSystem()
    path = os.path.join(config.log_dir, filename)
    try:
        raw = fs.open_read(path)
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    with raw, _text(raw, filename, config.compress_suffix) as f:
        return f.read()


def search_files(
    config: RollerConfig, text: str, fs: FileSystem | None = None
) -> list[tuple[str, int, str]]:
    """Search for text across the active file and backups. Returns (filename, line_num, line) tuples."""
    fs = fs or FileSystem()
    results = []
    for info in list_log_files(config, fs):
        path = os.path.join(config.log_dir, info.name)
        try:
            with fs.open_read(path) as raw, _text(raw, info.name, config.compress_suffix) as f:
                for line_num, line in enumerate(f, 1):
                    if text in line:
                        results.append((info.name, line_num, line.rstrip("\n")))
        except (OSError, EOFError):
            continue
    return results
