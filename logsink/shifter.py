"""Index shifting: every surviving archive moves one index up to free index 1."""

import logging
import os

from logsink.naming import ArchiveName

logger = logging.getLogger(__name__)


def shift(archive_dir: str, entries: list[ArchiveName]) -> list[ArchiveName]:
    """Rename each entry to ``index + 1``, highest index first.

    A rename whose target already exists is refused rather than overwriting a
    live archive; that entry and any failed rename keep their old name in the
    returned listing.
    """
    shifted = []
    for entry in sorted(entries, key=lambda e: e.index, reverse=True):
        target = entry.with_index(entry.index + 1)
        src = os.path.join(archive_dir, entry.filename)
        dst = os.path.join(archive_dir, target.filename)
        if os.path.exists(dst):
            logger.error("Refusing to shift %s: %s already exists", src, dst)
            shifted.append(entry)
            continue
        try:
            os.rename(src, dst)
        except OSError as e:
            logger.error("Shift failed for %s -> %s: %s", src, dst, e)
            shifted.append(entry)
        else:
            shifted.append(target)
    shifted.sort(key=lambda e: e.index)
    return shifted
