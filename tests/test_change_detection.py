import unittest
from datetime import date
from types import SimpleNamespace

from platformwatch.history.change_detection import changed_fields, should_append
from platformwatch.history.types import ResolvedIdentity, SnapshotCandidate

IDENT = ResolvedIdentity(service_date=date(2025, 9, 22), day_of_week="Monday", destination="TLH", scheduled_time="14:45")


def _candidate(**overrides):
    fields = dict(
        identity=IDENT,
        estimated_time=None,
        departure_time="14:45",
        platform="4",
        operator="Great Western Railway",
        is_cancelled=False,
        cancel_reason=None,
    )
    fields.update(overrides)
    return SnapshotCandidate(**fields)


def _stored(**overrides):
    fields = dict(
        estimated_time=None,
        departure_time="14:45",
        platform="4",
        operator="Great Western Railway",
        is_cancelled=False,
        cancel_reason=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class ShouldAppendTests(unittest.TestCase):
    def test_first_snapshot_is_always_appended(self):
        self.assertTrue(should_append(_candidate(), None))

    def test_identical_snapshot_is_skipped(self):
        self.assertFalse(should_append(_candidate(), _stored()))

    def test_null_platform_equals_null_platform(self):
        self.assertFalse(should_append(_candidate(platform=None), _stored(platform=None)))

    def test_null_vs_assigned_platform_is_a_change(self):
        self.assertTrue(should_append(_candidate(platform="4"), _stored(platform=None)))
        self.assertTrue(should_append(_candidate(platform=None), _stored(platform="4")))

    def test_blank_and_missing_are_the_same_absent_value(self):
        self.assertFalse(should_append(_candidate(cancel_reason=None), _stored(cancel_reason="")))
        latest = SimpleNamespace(
            estimated_time=None, departure_time="14:45", platform="4", operator="Great Western Railway", is_cancelled=0
        )
        self.assertFalse(should_append(_candidate(), latest))

    def test_each_compared_field_triggers_append(self):
        cases = {
            "platform": "5",
            "operator": "Elizabeth line",
            "is_cancelled": True,
            "cancel_reason": "Signal failure",
            "estimated_time": "14:52",
            "departure_time": "14:52",
        }
        for field, value in cases.items():
            with self.subTest(field=field):
                self.assertEqual(changed_fields(_candidate(**{field: value}), _stored()), [field])

    def test_cancelled_flag_compares_as_bool(self):
        self.assertFalse(should_append(_candidate(is_cancelled=True), _stored(is_cancelled=1)))


if __name__ == "__main__":
    unittest.main()
