#!/usr/bin/env python3
"""Test suite for reshaping cssrlib ephemerides into RINEX blocks"""

import math
import unittest
from types import SimpleNamespace

import numpy as np
from cssrlib.gnss import gpst2time, id2sat

from gnss_preprocess.core.channels import CHANNEL_UNITS
from gnss_preprocess.core.satellite import SatelliteId
from gnss_preprocess.core.time import TimeScale, TimeStamp
from gnss_preprocess.io.rinex import (eph_to_frame, frames_to_blocks, geph_to_frame,
                                      gtime_to_timestamp, nav_to_blocks)
from gnss_preprocess.nav.adapter import RinexRecordAdapter


WEEK = 2086


def gps_eph(sv='G05', tow=7200.0):
    return SimpleNamespace(
        sat=id2sat(sv), iode=45, f0=-1.2e-4, f1=-3.0e-12, f2=0.0,
        toc=gpst2time(WEEK, tow), toes=tow, crs=12.5, deln=4.3e-9, M0=1.1,
        cuc=6.0e-7, e=0.01, cus=8.0e-6, A=26560000.0,
        cic=1.0e-8, OMG0=-2.1, cis=-3.0e-8, i0=0.96, crc=220.0, omg=0.7,
        OMGd=-8.1e-9, idot=1.2e-10, svh=0)


def glo_eph(sv='R07', tow=900.0):
    return SimpleNamespace(
        sat=id2sat(sv), taun=5.0e-5, gamn=1.8e-12, tof=gpst2time(WEEK, tow - 30.0),
        toe=gpst2time(WEEK, tow), pos=np.array([1.0e7, -1.5e7, 1.8e7]),
        vel=np.array([1200.0, 2100.0, -800.0]), acc=np.array([0.0, 9.3e-7, -1.9e-6]),
        svh=0, frq=-4, age=0)


class TestGpsEphemeris(unittest.TestCase):
    """Test Keplerian ephemeris reshaping"""

    def test_frame_fields(self):
        """Test Keplerian ephemeris fields in the frame"""
        frame = eph_to_frame(gps_eph())
        self.assertEqual(frame.sv, 'G05')
        self.assertEqual(frame.clock_bias, -1.2e-4)
        self.assertEqual(frame.clock_drift, -3.0e-12)
        self.assertEqual(frame.orbits['iode'], 45)
        self.assertEqual(frame.orbits['deltaN'], 4.3e-9)
        self.assertAlmostEqual(frame.orbits['sqrta'], math.sqrt(26560000.0))
        self.assertEqual(frame.orbits['toe'], 7200.0)
        self.assertEqual(frame.epoch, TimeStamp.from_week_tow(WEEK, 7200.0))

    def test_adapter_accepts_frame(self):
        """Test the adapter normalizes a Keplerian frame"""
        frame = eph_to_frame(gps_eph())
        rec = RinexRecordAdapter().normalize_frame(frame, None)
        self.assertEqual(rec.sat, SatelliteId.parse('G05'))
        self.assertEqual(len(rec.channels), 20)
        self.assertEqual(rec.channel_value('omega_dot'), -8.1e-9)


class TestGlonassEphemeris(unittest.TestCase):
    """Test GLONASS ephemeris reshaping"""

    def test_frame_fields(self):
        """Test GLONASS ephemeris fields in the frame"""
        frame = geph_to_frame(glo_eph())
        self.assertEqual(frame.sv, 'R07')
        self.assertEqual(frame.clock_bias, -5.0e-5)
        self.assertEqual(frame.clock_drift, 1.8e-12)
        self.assertIsNone(frame.clock_drift_rate)
        self.assertEqual(frame.orbits['mrt'], 870.0)
        self.assertEqual(frame.orbits['velY'], 2.1)
        self.assertEqual(frame.orbits['channel'], -4)
        self.assertEqual(frame.units['satPosX'], 'km')

    def test_adapter_gets_kilometres(self):
        """State vectors reach the adapter in the GLONASS channel units"""
        rec = RinexRecordAdapter().normalize_frame(geph_to_frame(glo_eph()), None)
        self.assertEqual(rec.orbit['x'], (1.0e4, 'km'))
        self.assertEqual(rec.orbit['accel_z'].unit, 'km/s^2')
        for name in ('x', 'vel_y', 'accel_z'):
            self.assertEqual(rec.orbit[name].unit, CHANNEL_UNITS[name])
        self.assertEqual(rec.channel_value('channel'), -4.0)


class TestBlocks(unittest.TestCase):
    """Test grouping frames into epoch blocks"""

    def test_timestamp_conversion(self):
        """Test cssrlib time conversion to timestamps"""
        ts = gtime_to_timestamp(gpst2time(WEEK, 30.5))
        self.assertEqual(ts.scale, TimeScale.GPST)
        self.assertEqual(ts.week_tow(), (WEEK, 30.5))
        self.assertEqual(gtime_to_timestamp(12.0), TimeStamp(12.0))

    def test_grouped_by_epoch(self):
        """Test frames are grouped into one block per epoch"""
        frames = [eph_to_frame(gps_eph('G05', 7200.0)), eph_to_frame(gps_eph('G07', 0.0)),
                  eph_to_frame(gps_eph('G09', 7200.0))]
        blocks = frames_to_blocks(frames)
        self.assertEqual([len(b.frames) for b in blocks], [1, 2])
        self.assertEqual([f.sv for f in blocks[1].frames], ['G05', 'G09'])

    def test_nav_to_blocks(self):
        """Test reshaping a navigation object into blocks"""
        nav = SimpleNamespace(eph=[gps_eph('G05', 7200.0), gps_eph('G05', 14400.0)],
                              geph=[glo_eph('R07', 7200.0)])
        blocks = nav_to_blocks(nav)
        self.assertEqual(len(blocks), 2)
        self.assertEqual(sorted(f.sv for f in blocks[0].frames), ['G05', 'R07'])
        self.assertEqual(nav_to_blocks(SimpleNamespace(eph=[], geph=[])), [])


if __name__ == '__main__':
    unittest.main()
