import unittest
from datetime import datetime, timedelta, timezone

from odgate.util.time import date_shards, normalize_dt, now_utc, parse_rfc3339


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        naive = datetime(2025, 1, 1, 12, 0, 0)
        with self.assertRaises(ValueError):
            normalize_dt(naive)

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("")

    def test_date_shards_are_zero_padded(self) -> None:
        dt = datetime(2024, 3, 5, 23, 59, tzinfo=timezone.utc)
        self.assertEqual(date_shards(dt), ["2024", "03", "05"])

    def test_date_shards_use_the_datetime_own_zone(self) -> None:
        tokyo = timezone(timedelta(hours=9))
        dt = datetime(2024, 3, 6, 1, 0, tzinfo=tokyo)
        self.assertEqual(date_shards(dt), ["2024", "03", "06"])

    def test_date_shards_reject_naive(self) -> None:
        with self.assertRaises(ValueError):
            date_shards(datetime(2024, 3, 5))


if __name__ == "__main__":
    unittest.main()
