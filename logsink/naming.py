"""Archive naming: ``<base>-<YYYY-MM-DD HH:MM:SS>-<index>.gz`` and its inverse.

Everything here is pure; no function touches the filesystem.
"""

import os
import re
from datetime import datetime
from typing import NamedTuple

from logsink.errors import NamingCorruptionError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ARCHIVE_SUFFIX = ".gz"

_LABEL_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


class ArchiveName(NamedTuple):
    prefix: str
    timestamp_label: str
    index: int

    @property
    def filename(self) -> str:
        return f"{self.prefix}-{self.timestamp_label}-{self.index}{ARCHIVE_SUFFIX}"

    def with_index(self, index: int) -> "ArchiveName":
        return self._replace(index=index)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(label: str) -> datetime:
    """Parse a timestamp label. Raises NamingCorruptionError if it is malformed."""
    if not _LABEL_RE.match(label):
        raise NamingCorruptionError(label, "timestamp label does not match YYYY-MM-DD HH:MM:SS")
    try:
        return datetime.strptime(label, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise NamingCorruptionError(label, f"invalid timestamp: {e}") from e


def base_name(active_path: str) -> str:
    """Active file name without directory and extension (``/var/log/app.log`` -> ``app``)."""
    return os.path.splitext(os.path.basename(active_path))[0]


def archive_dir_for(active_path: str) -> str:
    """Sibling directory holding the archives of *active_path*."""
    return os.path.join(os.path.dirname(active_path), base_name(active_path))


def archive_filename(base: str, moment: datetime, index: int = 1) -> str:
    if index < 1:
        raise ValueError(f"archive index must be positive, got {index}")
    return ArchiveName(base, format_timestamp(moment), index).filename


def parse_archive_name(filename: str) -> ArchiveName:
    """Split an archive filename into (prefix, timestamp label, index).

    The timestamp label itself contains dashes, so it is taken by its fixed
    width (19 characters) from just before the index.
    """
    if not filename.endswith(ARCHIVE_SUFFIX):
        raise NamingCorruptionError(filename, "missing .gz suffix")
    stem = filename[:-len(ARCHIVE_SUFFIX)]
    head, sep, raw_index = stem.rpartition("-")
    if not sep or not raw_index.isdigit():
        raise NamingCorruptionError(filename, "missing numeric index")
    index = int(raw_index)
    if index < 1:
        raise NamingCorruptionError(filename, "index must be positive")

    label = head[-19:]
    prefix = head[:-20]
    if len(head) < 21 or head[-20] != "-" or not _LABEL_RE.match(label):
        raise NamingCorruptionError(filename, "missing timestamp label")
    return ArchiveName(prefix, label, index)
