"""Inspector logic: describe the active file and its archives from names and sizes."""

import os
from typing import NamedTuple

from logsink.archiver import list_archive_entries
from logsink.naming import archive_dir_for, base_name


class ArchiveInfo(NamedTuple):
    index: int
    timestamp_label: str
    filename: str
    size: int


def active_file_size(log_path: str) -> int | None:
    """Size of the active file, or None if there is none."""
    try:
        return os.path.getsize(log_path)
    except FileNotFoundError:
        return None


def list_archives(log_path: str) -> list[ArchiveInfo]:
    """Archives of *log_path*, newest (index 1) first."""
    archive_dir = archive_dir_for(log_path)
    infos = []
    for entry in list_archive_entries(archive_dir, base_name(log_path)):
        path = os.path.join(archive_dir, entry.filename)
        try:
            size = os.path.getsize(path)
        except OSError:
            continue
        infos.append(ArchiveInfo(entry.index, entry.timestamp_label, entry.filename, size))
    return infos


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    elif size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    else:
        return f"{size / (1024 * 1024):.1f} MB"
