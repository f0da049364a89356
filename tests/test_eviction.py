"""Tests for count-bound and age-bound eviction."""

import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta
from unittest import mock

from logsink.config import RetentionMode, RotationConfig
from logsink.eviction import evict, select_age_bound, select_count_bound
from logsink.naming import ArchiveName, format_timestamp

NOW = datetime(2025, 1, 15, 12, 0, 0)


def _entry(index, age_seconds=0, prefix="app"):
    return ArchiveName(prefix, format_timestamp(NOW - timedelta(seconds=age_seconds)), index)


class TestSelectCountBound(unittest.TestCase):
    def test_below_cap_keeps_everything(self):
        entries = [_entry(1), _entry(2)]
        self.assertEqual(select_count_bound(entries, 3), [])

    def test_at_cap_drops_last_index(self):
        entries = [_entry(1), _entry(2), _entry(3)]
        self.assertEqual(select_count_bound(entries, 3), [entries[2]])

    def test_drops_every_index_at_or_past_cap(self):
        entries = [_entry(1), _entry(3), _entry(5)]
        self.assertEqual(select_count_bound(entries, 3), [entries[1], entries[2]])


class TestSelectAgeBound(unittest.TestCase):
    def test_expired_entries(self):
        young = _entry(1, age_seconds=30)
        old = _entry(2, age_seconds=120)
        self.assertEqual(select_age_bound([young, old], 60, NOW), [old])

    def test_exact_limit_is_kept(self):
        edge = _entry(1, age_seconds=60)
        self.assertEqual(select_age_bound([edge], 60, NOW), [])

    def test_future_timestamp_counts_as_elapsed(self):
        future = ArchiveName("app", format_timestamp(NOW + timedelta(hours=2)), 1)
        self.assertEqual(select_age_bound([future], 60, NOW), [future])

    def test_unparseable_timestamp_is_skipped(self):
        bad = ArchiveName("app", "2025-13-45 99:99:99", 1)
        with self.assertLogs("logsink.eviction", level="WARNING"):
            self.assertEqual(select_age_bound([bad], 60, NOW), [])


class TestEvict(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _touch(self, entry):
        open(os.path.join(self.tmpdir, entry.filename), "w").close()
        return entry

    def _exists(self, entry):
        return os.path.exists(os.path.join(self.tmpdir, entry.filename))

    def test_count_bound_deletes_oldest(self):
        entries = [self._touch(_entry(i, age_seconds=i * 10)) for i in (1, 2, 3)]
        cfg = RotationConfig(max_archive_count=3)
        survivors = evict(self.tmpdir, entries, cfg, NOW)
        self.assertEqual(survivors, entries[:2])
        self.assertFalse(self._exists(entries[2]))
        self.assertTrue(self._exists(entries[0]))

    def test_count_bound_ignores_age(self):
        entries = [self._touch(_entry(1, age_seconds=10 ** 6))]
        cfg = RotationConfig(max_archive_count=3, max_archive_age_seconds=1)
        self.assertEqual(evict(self.tmpdir, entries, cfg, NOW), entries)

    def test_age_bound_deletes_expired(self):
        young = self._touch(_entry(1, age_seconds=10))
        old = self._touch(_entry(2, age_seconds=120))
        cfg = RotationConfig(retention_mode=RetentionMode.AGE_BOUND, max_archive_age_seconds=60)
        survivors = evict(self.tmpdir, [young, old], cfg, NOW)
        self.assertEqual(survivors, [young])
        self.assertFalse(self._exists(old))

    def test_age_bound_ignores_count(self):
        entries = [self._touch(_entry(i, age_seconds=1)) for i in range(1, 6)]
        cfg = RotationConfig(
            retention_mode=RetentionMode.AGE_BOUND,
            max_archive_count=2,
            max_archive_age_seconds=60,
        )
        self.assertEqual(evict(self.tmpdir, entries, cfg, NOW), entries)

    def test_already_missing_entry_counts_as_deleted(self):
        ghost = _entry(3)
        entries = [self._touch(_entry(1)), self._touch(_entry(2)), ghost]
        survivors = evict(self.tmpdir, entries, RotationConfig(max_archive_count=3), NOW)
        self.assertEqual(survivors, entries[:2])

    def test_failed_deletion_does_not_stop_others(self):
        old_a = self._touch(_entry(1, age_seconds=100))
        old_b = self._touch(_entry(2, age_seconds=200))
        cfg = RotationConfig(retention_mode=RetentionMode.AGE_BOUND, max_archive_age_seconds=60)
        real_remove = os.remove

        def flaky_remove(path):
            if path.endswith(old_a.filename):
                raise PermissionError("read-only")
            real_remove(path)

        with mock.patch("logsink.eviction.os.remove", side_effect=flaky_remove):
            with self.assertLogs("logsink.eviction", level="ERROR"):
                survivors = evict(self.tmpdir, [old_a, old_b], cfg, NOW)

        self.assertEqual(survivors, [old_a])
        self.assertTrue(self._exists(old_a))
        self.assertFalse(self._exists(old_b))


if __name__ == "__main__":
    unittest.main()
