"""Rotation of the active log file into the gzip archive directory."""

import logging
import os
import tempfile
from datetime import datetime
from enum import Enum

from logsink.compressor import GzipCompressor
from logsink.config import RotationConfig
from logsink.errors import CompressError, NamingCorruptionError
from logsink.eviction import evict
from logsink.naming import (
    ArchiveName,
    archive_dir_for,
    archive_filename,
    base_name,
    parse_archive_name,
)
from logsink.shifter import shift

logger = logging.getLogger(__name__)


class RotationState(Enum):
    IDLE = "idle"
    EVICTING = "evicting"
    SHIFTING = "shifting"
    COMPRESSING = "compressing"
    WRITING = "writing"
    FINALIZING = "finalizing"
    ABORTED = "aborted"


def list_archive_entries(archive_dir: str, base: str) -> list[ArchiveName]:
    """Well-formed archives of *base* in *archive_dir*, lowest index first.

    Anything else in the directory is logged and left alone.
    """
    entries = []
    try:
        names = os.listdir(archive_dir)
    except FileNotFoundError:
        return []
    for name in names:
        if name.startswith("."):
            continue
        try:
            entry = parse_archive_name(name)
        except NamingCorruptionError as e:
            logger.warning("Ignoring malformed archive name in %s: %s", archive_dir, e)
            continue
        if entry.prefix != base:
            logger.warning("Ignoring foreign archive %s in %s", name, archive_dir)
            continue
        entries.append(entry)
    entries.sort(key=lambda e: e.index)
    return entries


def _umask_mode(mode: int = 0o666) -> int:
    umask = os.umask(0)
    os.umask(umask)
    return mode & ~umask


def file_creation_time(path: str) -> datetime:
    """Birth time where the platform records one, otherwise st_ctime.

    On Linux st_ctime moves with every append, so callers that saw the file
    being created should pass that moment to ``Archiver.rotate`` instead.
    """
    st = os.stat(path)
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_ctime
    return datetime.fromtimestamp(created)


class Archiver:
    """Evicts, shifts, compresses and finalizes one rotation at a time.

    Callers must hold the active file's path lock around ``rotate``. The
    archiver never raises; every failed step is logged and leaves the active
    file in place so a later rotation can retry.
    """

    def __init__(self, config: RotationConfig, compressor: GzipCompressor | None = None,
                 time_func=None):
        self._config = config
        self._compressor = compressor or GzipCompressor(config.compression_level)
        self._time_func = time_func or datetime.now
        self.state = RotationState.IDLE

    def _abort(self, active_path: str, message: str, *args) -> None:
        logger.error("Rotation of %s aborted while %s: " + message,
                     active_path, self.state.value, *args)
        self.state = RotationState.ABORTED

    def rotate(self, active_path: str, created_at: datetime | None = None) -> str | None:
        """Archive *active_path* as index 1. Returns the archive path, or None on abort.

        *created_at* labels the archive; without it the file's stat times are used.
        """
        base = base_name(active_path)
        archive_dir = archive_dir_for(active_path)

        if not os.path.exists(active_path):
            logger.debug("Nothing to rotate, %s does not exist", active_path)
            return None

        self.state = RotationState.EVICTING
        try:
            os.makedirs(archive_dir, exist_ok=True)
        except OSError as e:
            self._abort(active_path, "cannot create %s: %s", archive_dir, e)
            return None

        entries = list_archive_entries(archive_dir, base)
        survivors = evict(archive_dir, entries, self._config, self._time_func())

        self.state = RotationState.SHIFTING
        survivors = shift(archive_dir, survivors)
        if any(entry.index == 1 for entry in survivors):
            self._abort(active_path, "index 1 is still taken in %s", archive_dir)
            return None

        self.state = RotationState.COMPRESSING
        try:
            created = created_at or file_creation_time(active_path)
            with open(active_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            self._abort(active_path, "cannot read active file: %s", e)
            return None
        try:
            payload = self._compressor.compress(raw)
        except CompressError as e:
            self._abort(active_path, "%s", e)
            return None

        self.state = RotationState.WRITING
        archive_path = os.path.join(archive_dir, archive_filename(base, created, 1))
        try:
            self._write_atomic(archive_dir, archive_path, payload)
        except OSError as e:
            self._abort(active_path, "cannot write %s: %s", archive_path, e)
            return None

        self.state = RotationState.FINALIZING
        try:
            os.remove(active_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            # the archive already holds these bytes; the next write keeps appending
            logger.error("Archived %s but could not remove it: %s", active_path, e)

        logger.info("Rotated %s -> %s (%d -> %d bytes)",
                    active_path, archive_path, len(raw), len(payload))
        self.state = RotationState.IDLE
        return archive_path

    @staticmethod
    def _write_atomic(archive_dir: str, archive_path: str, payload: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=archive_dir, prefix=".rotating-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.chmod(tmp_path, _umask_mode())
            os.replace(tmp_path, archive_path)
        except OSError:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise
