"""Backup file naming: timestamped names and parsing them back."""

import os
import re
from datetime import datetime, tzinfo

MILLIS_TOKEN = "%L"

# "-2" appended when a backup name was already taken
_COUNTER_RE = re.compile(r"^(.*)-(\d+)$")


def format_backup_time(when: datetime, fmt: str) -> str:
    """strftime with an extra ``%L`` token for zero-padded milliseconds."""
    fmt = fmt.replace(MILLIS_TOKEN, f"{when.microsecond // 1000:03d}")
    return when.strftime(fmt)


def parse_backup_time(text: str, fmt: str, tz: tzinfo | None) -> datetime:
    """Inverse of format_backup_time. Raises ValueError when *text* doesn't match.

    A naive result is placed in *tz*, or in the system zone when *tz* is None.
    """
    # %f accepts 1-6 digits and right-pads, so "123" reads back as 123000us
    parsed = datetime.strptime(text, fmt.replace(MILLIS_TOKEN, "%f"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()
    return parsed


def prefix_and_ext(filename: str) -> tuple[str, str]:
    """Split a canonical filename into the backup prefix (``base-``) and extension."""
    base = os.path.basename(filename)
    stem, ext = os.path.splitext(base)
    return stem + "-", ext


def backup_name(filepath: str, when: datetime, fmt: str, tz: tzinfo | None) -> str:
    """``/var/log/app.log`` -> ``/var/log/app-2016-11-04T18-30-00.000.log``."""
    prefix, ext = prefix_and_ext(filepath)
    timestamp = format_backup_time(when.astimezone(tz), fmt)
    return os.path.join(os.path.dirname(filepath), f"{prefix}{timestamp}{ext}")


def with_counter(path: str, n: int, ext: str | None = None) -> str:
    """``app-T.log`` -> ``app-T-2.log``. *ext* defaults to the path's own extension."""
    if ext is None:
        root, ext = os.path.splitext(path)
    else:
        root = path[: len(path) - len(ext)]
    return f"{root}-{n}{ext}"


def time_from_name(
    filename: str, prefix: str, ext: str, fmt: str, tz: tzinfo | None
) -> datetime | None:
    """Extract the rotation time embedded in a backup filename, or None if it isn't one."""
    if not filename.startswith(prefix) or not filename.endswith(ext):
        return None
    end = len(filename) - len(ext) if ext else len(filename)
    if end <= len(prefix):
        return None
    text = filename[len(prefix):end]
    try:
        return parse_backup_time(text, fmt, tz)
    except ValueError:
        pass
    m = _COUNTER_RE.match(text)
    if m is None:
        return None
    try:
        return parse_backup_time(m.group(1), fmt, tz)
    except ValueError:
        return None
