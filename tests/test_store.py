import unittest
from datetime import date

from platformwatch.jobs.ingest.loader import ingest_update

from support import FakeClock, departure, open_store, resolver_for, utc

SERVICE_DATE = date(2025, 9, 22)


class SnapshotStoreTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock(utc(2025, 9, 22, 13, 0))
        self.store = open_store(self.clock)
        self.resolver = resolver_for(self.clock)

    def tearDown(self):
        self.store.close()

    def _ingest(self, update, minutes=1):
        row = ingest_update(self.store, self.resolver, update)
        self.clock.advance(minutes=minutes)
        return row

    def test_same_fields_twice_append_one_row(self):
        self.assertIsNotNone(self._ingest(departure("4")))
        self.assertIsNone(self._ingest(departure("4")))
        self.assertEqual(len(self.store.recent()), 1)

        self.assertIsNotNone(self._ingest(departure("4", estimated_time="14:50")))
        self.assertEqual(len(self.store.recent()), 2)

    def test_platform_flapping_appends_every_change(self):
        for platform in ("4", "5", "4"):
            self._ingest(departure(platform))
        rows = self.store.recent()
        self.assertEqual([r.platform for r in rows], ["4", "5", "4"])

    def test_most_recent_returns_latest_capture(self):
        self._ingest(departure("4"), minutes=10)
        self._ingest(departure("5"))

        latest = self.store.most_recent(SERVICE_DATE, "TLH", "14:45")
        self.assertEqual(latest.platform, "5")
        self.assertEqual(latest.day_of_week, "Monday")
        self.assertEqual(latest.departure_time, "14:45")
        self.assertIsNone(latest.estimated_time)

    def test_most_recent_is_scoped_to_identity(self):
        self._ingest(departure("4"))
        self._ingest(departure("2", scheduled_time="15:15"))
        self._ingest(departure("7", destination="RDG"))

        self.assertEqual(self.store.most_recent(SERVICE_DATE, "TLH", "14:45").platform, "4")
        self.assertIsNone(self.store.most_recent(date(2025, 9, 23), "TLH", "14:45"))

    def test_same_capture_time_breaks_ties_by_id(self):
        self._ingest(departure("4"), minutes=0)
        self._ingest(departure("5"), minutes=0)
        self.assertEqual(self.store.most_recent(SERVICE_DATE, "TLH", "14:45").platform, "5")

    def test_last_known_platform_skips_unassigned_snapshots(self):
        self._ingest(departure("4"))
        self._ingest(departure(None))

        self.assertIsNone(self.store.most_recent(SERVICE_DATE, "TLH", "14:45").platform)
        self.assertEqual(self.store.last_known_platform(SERVICE_DATE, "14:45", "TLH"), "4")

    def test_last_known_platform_none_when_never_assigned(self):
        self._ingest(departure(None))
        self.assertIsNone(self.store.last_known_platform(SERVICE_DATE, "14:45", "TLH"))
        self.assertIsNone(self.store.last_known_platform(SERVICE_DATE, "15:15", "TLH"))

    def test_recent_is_newest_first_and_limited(self):
        for hhmm in ("14:45", "15:15", "15:45"):
            self._ingest(departure("4", scheduled_time=hhmm))

        self.assertEqual([r.scheduled_time for r in self.store.recent()], ["15:45", "15:15", "14:45"])
        self.assertEqual([r.scheduled_time for r in self.store.recent(2)], ["15:45", "15:15"])

    def test_recent_on_empty_store(self):
        self.assertEqual(self.store.recent(10), [])

    def test_by_platform_is_newest_first_and_limited(self):
        self._ingest(departure("4"))
        self._ingest(departure("5"))
        self._ingest(departure("4", scheduled_time="15:15"))

        rows = self.store.by_platform("4")
        self.assertEqual([(r.scheduled_time, r.platform) for r in rows], [("15:15", "4"), ("14:45", "4")])
        self.assertEqual([r.scheduled_time for r in self.store.by_platform("4", limit=1)], ["15:15"])
        self.assertEqual(len(self.store.by_platform("5")), 1)
        self.assertEqual(self.store.by_platform("10"), [])

    def test_snapshot_to_dict_is_json_ready(self):
        self._ingest(departure("4", is_cancelled=True, cancel_reason="Signal failure"))
        d = self.store.recent(1)[0].to_dict()
        self.assertEqual(d["service_date"], "2025-09-22")
        self.assertEqual(d["platform"], "4")
        self.assertTrue(d["is_cancelled"])
        self.assertEqual(d["cancel_reason"], "Signal failure")
        self.assertIsInstance(d["captured_at"], str)

    def test_open_is_idempotent_and_reports_revision(self):
        self.store.open()
        self.assertEqual(self.store.schema_revision(), "0003")
        self.assertTrue(self.store.is_open)


if __name__ == "__main__":
    unittest.main()
