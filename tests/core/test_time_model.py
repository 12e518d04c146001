#!/usr/bin/env python3
"""Test suite for time scales and leap-second aware conversion"""

import os
import tempfile
import unittest
from datetime import datetime

from gnss_preprocess.core.errors import OutOfTableRange, UnsupportedScale
from gnss_preprocess.core.time import (DEFAULT_LEAP_TABLE, LeapSecondTable, TimeModel,
                                       TimeScale, TimeStamp, compare, to_canonical)


def stamp(dt, scale):
    return TimeStamp.from_datetime(dt, scale)


class TestTimeScale(unittest.TestCase):
    """Test scale tag parsing"""

    def test_aliases(self):
        """Test time scale name aliases"""
        self.assertIs(TimeScale.parse('GPS'), TimeScale.GPST)
        self.assertIs(TimeScale.parse('gal'), TimeScale.GST)
        self.assertIs(TimeScale.parse('BDS'), TimeScale.BDT)
        self.assertIs(TimeScale.parse('R'), TimeScale.GLONASST)
        self.assertIs(TimeScale.parse(TimeScale.UTC), TimeScale.UTC)

    def test_unknown_scale(self):
        """Test unknown time scale names"""
        with self.assertRaises(UnsupportedScale):
            TimeScale.parse('XYZ')
        with self.assertRaises(UnsupportedScale):
            TimeStamp(0.0, 'LORAN')

    def test_unsupported_scale_is_value_error(self):
        """Test unsupported scales raise a ValueError"""
        with self.assertRaises(ValueError):
            TimeScale.parse('')


class TestTimeStamp(unittest.TestCase):
    """Test TimeStamp construction and arithmetic"""

    def test_datetime_round_trip(self):
        """Test datetime to timestamp and back"""
        dt = datetime(2021, 3, 4, 5, 6, 7)
        self.assertEqual(stamp(dt, 'GPST').to_datetime(), dt)

    def test_week_tow(self):
        """Test week and time of week conversion"""
        ts = TimeStamp.from_week_tow(2086, 302400.0)
        self.assertEqual(ts.week_tow(), (2086, 302400.0))
        self.assertEqual(ts.scale, TimeScale.GPST)

    def test_week_epochs(self):
        """Test week numbering epochs per scale"""
        self.assertEqual(TimeStamp.from_week_tow(0, 0.0, 'BDT').to_datetime(),
                         datetime(2006, 1, 1))
        self.assertEqual(TimeStamp.from_week_tow(0, 0.0, 'GST').to_datetime(),
                         datetime(1999, 8, 22))
        self.assertEqual(TimeStamp(0.0).to_datetime(), datetime(1980, 1, 6))

    def test_ordering_same_scale(self):
        """Test ordering of timestamps on one scale"""
        a = TimeStamp(10.0)
        b = TimeStamp(20.0)
        self.assertLess(a, b)
        self.assertEqual(b - a, 10.0)
        self.assertEqual(a + 10.0, b)

    def test_ordering_across_scales_raises(self):
        """Test ordering across scales raises"""
        with self.assertRaises(ValueError):
            TimeStamp(10.0, 'GPST') < TimeStamp(20.0, 'UTC')

    def test_hashable(self):
        """Test timestamps are hashable"""
        self.assertEqual(len({TimeStamp(1.0), TimeStamp(1.0), TimeStamp(1.0, 'UTC')}), 2)


class TestLeapSecondTable(unittest.TestCase):
    """Test the leap-second table"""

    def test_offsets(self):
        """Test leap second offsets around table entries"""
        table = DEFAULT_LEAP_TABLE
        before = stamp(datetime(2016, 12, 31, 23, 59, 59), 'UTC').seconds
        after = stamp(datetime(2017, 1, 1), 'UTC').seconds
        self.assertEqual(table.offset_at_utc(before), 36)
        self.assertEqual(table.offset_at_utc(after), 37)
        self.assertEqual(table.offset_at_utc(stamp(datetime(1980, 1, 6), 'UTC').seconds), 19)

    def test_out_of_range(self):
        """Test lookups outside the leap second table"""
        table = DEFAULT_LEAP_TABLE
        with self.assertRaises(OutOfTableRange):
            table.offset_at_utc(stamp(datetime(1970, 1, 1), 'UTC').seconds)
        with self.assertRaises(OutOfTableRange):
            table.offset_at_utc(stamp(datetime(2030, 1, 1), 'UTC').seconds)

    def test_immutable(self):
        """Test timestamps cannot be modified"""
        with self.assertRaises(Exception):
            DEFAULT_LEAP_TABLE.offsets = (0,)

    def test_from_iers_file(self):
        """Test loading a leap second table from an IERS file"""
        content = (
            "# leap second file\n"
            "#@\t3944332800\n"
            "2272060800\t10\t# 1 Jan 1972\n"
            "3692217600\t37\t# 1 Jan 2017\n"
        )
        fd, path = tempfile.mkstemp(suffix='.list')
        try:
            with os.fdopen(fd, 'w') as f:
                f.write(content)
            table = LeapSecondTable.from_iers_file(path)
        finally:
            os.remove(path)

        self.assertEqual(table.offsets, (10, 37))
        self.assertEqual(table.offset_at_utc(stamp(datetime(2020, 1, 1), 'UTC').seconds), 37)
        self.assertEqual(table.offset_at_utc(stamp(datetime(2000, 1, 1), 'UTC').seconds), 10)
        with self.assertRaises(OutOfTableRange):
            table.offset_at_utc(stamp(datetime(2025, 6, 1), 'UTC').seconds)


class TestTimeModel(unittest.TestCase):
    """Test conversion between scales"""

    def setUp(self):
        self.model = TimeModel()
        self.gpst = stamp(datetime(2020, 1, 1, 0, 0, 18), 'GPST')

    def test_gpst_to_utc(self):
        """Test GPST to UTC conversion"""
        utc = self.model.convert(self.gpst, 'UTC')
        self.assertEqual(utc.scale, TimeScale.UTC)
        self.assertEqual(utc.to_datetime(), datetime(2020, 1, 1))

    def test_gpst_to_bdt(self):
        """Test GPST to BDT conversion"""
        bdt = self.model.convert(self.gpst, TimeScale.BDT)
        self.assertEqual(bdt.to_datetime(), datetime(2020, 1, 1, 0, 0, 4))

    def test_gpst_to_glonass(self):
        """Test GPST to GLONASS time conversion"""
        glo = self.model.convert(self.gpst, TimeScale.GLONASST)
        self.assertEqual(glo.to_datetime(), datetime(2020, 1, 1, 3, 0, 0))

    def test_locked_scales_match_gpst(self):
        """Test scales locked to GPST convert without offset"""
        for scale in (TimeScale.GST, TimeScale.QZSST, TimeScale.IRNWT):
            other = self.model.convert(self.gpst, scale)
            self.assertAlmostEqual(other.seconds, self.gpst.seconds, places=9)

    def test_round_trip_all_scales(self):
        """Test conversion to every scale and back"""
        for scale in TimeScale:
            there = self.model.convert(self.gpst, scale)
            back = self.model.convert(there, TimeScale.GPST)
            self.assertTrue(back.isclose(self.gpst), f"round trip through {scale.value}")

    def test_canonicalization_idempotent(self):
        """Test moving a canonical timestamp to canonical time"""
        for scale in TimeScale:
            ts = stamp(datetime(2019, 6, 1, 12), scale)
            once = to_canonical(ts)
            self.assertEqual(once.scale, TimeScale.GPST)
            self.assertEqual(to_canonical(once), once)

    def test_canonical_identity(self):
        """Test canonical timestamps are returned unchanged"""
        self.assertIs(self.model.to_canonical(self.gpst), self.gpst)

    def test_compare_across_scales(self):
        """Test comparison through the time model"""
        utc = stamp(datetime(2020, 1, 1), 'UTC')
        later = stamp(datetime(2020, 1, 1, 0, 0, 1), 'UTC')
        self.assertEqual(compare(self.gpst, utc), 0)
        self.assertEqual(compare(utc, self.gpst), 0)
        self.assertEqual(compare(self.gpst, later), -1)
        self.assertEqual(compare(later, self.gpst), 1)

    def test_out_of_table_range(self):
        """Test conversions outside the leap second table"""
        with self.assertRaises(OutOfTableRange):
            to_canonical(stamp(datetime(2030, 1, 1), 'UTC'))
        with self.assertRaises(OutOfTableRange):
            to_canonical(stamp(datetime(1970, 6, 1), 'GLONASST'))

    def test_other_canonical_scale(self):
        """Test a model with a non-GPST canonical scale"""
        model = TimeModel('UTC')
        utc = model.to_canonical(self.gpst)
        self.assertEqual(utc.scale, TimeScale.UTC)
        self.assertEqual(model.to_canonical(utc), utc)

    def test_sort(self):
        """Test sorting timestamps of mixed scales"""
        stamps = [stamp(datetime(2020, 1, 1, 0, 1), 'UTC'), self.gpst,
                  stamp(datetime(2020, 1, 1, 0, 0, 30), 'GPST')]
        ordered = self.model.sort(stamps)
        self.assertEqual([ts.to_datetime() for ts in ordered],
                         [datetime(2020, 1, 1, 0, 0, 18), datetime(2020, 1, 1, 0, 0, 30),
                          datetime(2020, 1, 1, 0, 1, 18)])


if __name__ == '__main__':
    unittest.main()
