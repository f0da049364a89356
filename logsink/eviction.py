"""Retention enforcement for the archive directory: count-bound or age-bound eviction."""

import logging
import math
import os
from datetime import datetime

from logsink.config import RetentionMode, RotationConfig
from logsink.errors import NamingCorruptionError
from logsink.naming import ArchiveName, parse_timestamp

logger = logging.getLogger(__name__)


def select_count_bound(entries: list[ArchiveName], max_count: int) -> list[ArchiveName]:
    """Entries to drop so the next rotation keeps at most *max_count* archives."""
    if len(entries) < max_count:
        return []
    return [entry for entry in entries if entry.index >= max_count]


def select_age_bound(entries: list[ArchiveName], max_age_seconds: int,
                     now: datetime) -> list[ArchiveName]:
    """Entries whose embedded timestamp is more than *max_age_seconds* away from *now*."""
    expired = []
    for entry in entries:
        try:
            created = parse_timestamp(entry.timestamp_label)
        except NamingCorruptionError as e:
            logger.warning("Skipping archive with unreadable timestamp %s: %s", entry.filename, e)
            continue
        elapsed = math.ceil(abs((now - created).total_seconds()))
        if elapsed > max_age_seconds:
            expired.append(entry)
    return expired


def evict(archive_dir: str, entries: list[ArchiveName], config: RotationConfig,
          now: datetime) -> list[ArchiveName]:
    """Delete the entries the retention mode rejects. Returns the surviving entries.

    Deletions are independent: an entry that cannot be removed is logged and
    stays in the returned listing.
    """
    if config.retention_mode is RetentionMode.COUNT_BOUND:
        doomed = select_count_bound(entries, config.max_archive_count)
    else:
        doomed = select_age_bound(entries, config.max_archive_age_seconds, now)

    deleted = set()
    for entry in doomed:
        path = os.path.join(archive_dir, entry.filename)
        try:
            os.remove(path)
        except FileNotFoundError:
            deleted.add(entry)
        except OSError as e:
            logger.error("Eviction failed for %s: %s", path, e)
        else:
            logger.info("Evicted archive %s", path)
            deleted.add(entry)

    return [entry for entry in entries if entry not in deleted]
