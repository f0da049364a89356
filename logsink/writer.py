"""Append-only log writer with size-triggered, archived rotation."""

import logging
import os
from datetime import datetime

from logsink.archiver import Archiver
from logsink.config import SinkConfig, with_resolved_path
from logsink.locking import path_lock
from logsink.trigger import should_rotate

logger = logging.getLogger(__name__)


class LogWriter:
    """Owns one active log file and its archive directory.

    Each ``write`` opens, appends and closes the file under the path lock, then
    rotates it when it has grown past the configured size. Nothing raises out
    of ``write``; callers get a boolean.
    """

    def __init__(self, config: SinkConfig, time_func=None, archiver: Archiver | None = None):
        self._config = with_resolved_path(config)
        self._path = self._config.log_path
        self._time_func = time_func or datetime.now
        self._archiver = archiver or Archiver(self._config.rotation, time_func=time_func)
        # (inode, time) of the active file when this writer created it
        self._created: tuple[int, datetime] | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def archiver(self) -> Archiver:
        return self._archiver

    def write(self, line: str) -> bool:
        """Append *line* plus a newline. Returns False if the write failed."""
        try:
            data = (line + "\n").encode("utf-8")
        except UnicodeEncodeError as e:
            logger.error("Could not encode log line for %s: %s", self._path, e)
            return False
        with path_lock(self._path):
            size = self._append(data)
            if size is None:
                return False
            if should_rotate(size, self._config.rotation):
                self._rotate_locked()
            return True

    def _append(self, data: bytes) -> int | None:
        """Write *data* to the end of the active file. Returns its new size."""
        try:
            created_at = None
            if not os.path.exists(self._path):
                directory = os.path.dirname(self._path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                created_at = self._time_func()
            with open(self._path, "ab") as f:
                if created_at is not None:
                    self._created = (os.fstat(f.fileno()).st_ino, created_at)
                f.write(data)
                f.flush()
                if self._config.sync_after_each_write:
                    os.fsync(f.fileno())
                return os.fstat(f.fileno()).st_size
        except OSError as e:
            logger.error("Could not write to log file %s: %s", self._path, e)
            return None

    def _known_creation_time(self) -> datetime | None:
        if self._created is None:
            return None
        ino, created_at = self._created
        try:
            if os.stat(self._path).st_ino == ino:
                return created_at
        except OSError:
            pass
        return None

    def _rotate_locked(self) -> str | None:
        archive_path = self._archiver.rotate(self._path, self._known_creation_time())
        if archive_path is not None:
            self._created = None
        return archive_path

    def rotate(self) -> str | None:
        """Rotate the active file now, regardless of its size."""
        with path_lock(self._path):
            return self._rotate_locked()

    def delete_log_file(self) -> bool:
        """Remove the active file. True if it is gone afterwards (or never existed)."""
        with path_lock(self._path):
            try:
                os.remove(self._path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Could not remove log file %s: %s", self._path, e)
                return False
            self._created = None
            return True
