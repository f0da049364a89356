"""Per-path exclusive lock spanning a write and any rotation it triggers.

Threads in this process serialize on a re-entrant lock keyed by the absolute
path. On POSIX the outermost holder also takes an advisory ``flock`` on a
``<path>.lock`` sidecar so cooperating processes do not interleave with it.
"""

import logging
import os
import threading
from contextlib import contextmanager

if os.name == "posix":
    import fcntl
else:
    fcntl = None

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_path_locks: dict[str, threading.RLock] = {}
_held = threading.local()


def _thread_lock_for(path: str) -> threading.RLock:
    with _registry_lock:
        lock = _path_locks.get(path)
        if lock is None:
            lock = threading.RLock()
            _path_locks[path] = lock
        return lock


def _depths() -> dict[str, int]:
    if not hasattr(_held, "depths"):
        _held.depths = {}
    return _held.depths


def lock_file_path(path: str) -> str:
    return os.path.abspath(path) + ".lock"


def _acquire_file_lock(key: str) -> int | None:
    fd = None
    try:
        os.makedirs(os.path.dirname(key), exist_ok=True)
        fd = os.open(lock_file_path(key), os.O_RDWR | os.O_CREAT, 0o644)
        fcntl.flock(fd, fcntl.LOCK_EX)
    except OSError as e:
        logger.warning("Advisory lock unavailable for %s: %s", key, e)
        if fd is not None:
            os.close(fd)
        return None
    return fd


def _release_file_lock(key: str, fd: int) -> None:
    try:
        fcntl.flock(fd, fcntl.LOCK_UN)
    except OSError as e:
        logger.warning("Could not release advisory lock for %s: %s", key, e)
    finally:
        os.close(fd)


@contextmanager
def path_lock(path: str):
    """Hold the exclusive lock for *path* for the duration of the ``with`` block.

    The advisory file lock is best-effort: if the sidecar cannot be opened the
    block still runs under the in-process lock.
    """
    key = os.path.abspath(path)
    depths = _depths()
    with _thread_lock_for(key):
        fd = None
        if fcntl is not None and depths.get(key, 0) == 0:
            fd = _acquire_file_lock(key)
        depths[key] = depths.get(key, 0) + 1
        try:
            yield
        finally:
            depths[key] -= 1
            if fd is not None:
                _release_file_lock(key, fd)
