import unittest

from sqlalchemy import inspect, text

from platformwatch.core import migrations
from platformwatch.core.db import create_db_engine


def _columns(engine):
    return {c["name"]: c for c in inspect(engine).get_columns("service_snapshots")}


def _indexes(engine):
    return {i["name"] for i in inspect(engine).get_indexes("service_snapshots")}


class MigrationTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite://")

    def tearDown(self):
        self.engine.dispose()

    def _insert_legacy_row(self):
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO service_snapshots
                      (service_date, departure_time, platform, destination, operator, is_cancelled, captured_at)
                    VALUES
                      ('2025-09-22', '14:45', '4', 'TLH', 'Great Western Railway', 0, '2025-09-22 13:00:00.000000')
                    """
                )
            )

    def test_empty_database_has_no_revision(self):
        self.assertIsNone(migrations.current_revision(self.engine))
        self.assertEqual(migrations.head_revision(self.engine), "0003")

    def test_0001_creates_base_table(self):
        self.assertEqual(migrations.upgrade(self.engine, "0001"), "0001")
        cols = _columns(self.engine)
        self.assertIn("departure_time", cols)
        self.assertIn("captured_at", cols)
        self.assertNotIn("scheduled_time", cols)
        self.assertTrue(cols["day_of_week"]["nullable"])

    def test_0002_adds_times_and_backfills_scheduled_time(self):
        migrations.upgrade(self.engine, "0001")
        self._insert_legacy_row()

        self.assertEqual(migrations.upgrade(self.engine, "0002"), "0002")
        cols = _columns(self.engine)
        self.assertFalse(cols["scheduled_time"]["nullable"])
        self.assertTrue(cols["estimated_time"]["nullable"])

        with self.engine.connect() as conn:
            row = conn.execute(text("SELECT scheduled_time, estimated_time, platform FROM service_snapshots")).one()
        self.assertEqual(tuple(row), ("14:45", None, "4"))

    def test_0003_backfills_weekday_and_creates_indexes(self):
        migrations.upgrade(self.engine, "0001")
        self._insert_legacy_row()
        migrations.upgrade(self.engine, "0002")

        self.assertEqual(migrations.upgrade(self.engine, "0003"), "0003")
        self.assertFalse(_columns(self.engine)["day_of_week"]["nullable"])
        self.assertTrue(
            {
                "ix_service_snapshots_departure_time",
                "ix_service_snapshots_date_time",
                "ix_service_snapshots_identity",
                "ix_service_snapshots_recurring",
                "ix_service_snapshots_captured_at",
            }
            <= _indexes(self.engine)
        )
        with self.engine.connect() as conn:
            dow = conn.execute(text("SELECT day_of_week FROM service_snapshots")).scalar_one()
        self.assertEqual(dow, "Monday")

    def test_upgrade_is_idempotent(self):
        migrations.upgrade(self.engine)
        migrations.upgrade(self.engine)
        self.assertEqual(migrations.current_revision(self.engine), "0003")

    def test_downgrade_drops_indexes(self):
        migrations.upgrade(self.engine)
        self.assertEqual(migrations.downgrade(self.engine, "0002"), "0002")
        self.assertNotIn("ix_service_snapshots_identity", _indexes(self.engine))


if __name__ == "__main__":
    unittest.main()
