#!/usr/bin/env python3
"""Test suite for the SSC converter"""

import math
import unittest

from gnss_preprocess.core.channels import ChannelSpec
from gnss_preprocess.core.errors import SchemaMismatch
from gnss_preprocess.core.satellite import SatelliteId
from gnss_preprocess.core.time import TimeStamp
from gnss_preprocess.nav.interpolation import InterpolatedSample, Validity
from gnss_preprocess.ssc.converter import SscConverter, convert, records_to_frame
from gnss_preprocess.ssc.record import GlonassSsc, KeplerSsc
from gnss_preprocess.ssc.schema import GLONASS_SCHEMA, KEPLER_SCHEMA, SscSchema


def full_sample(sat, schema, validity=Validity.IN_RANGE, t=45.0):
    names = schema.channel_names
    values = {name: float(i) for i, name in enumerate(names)}
    flags = {name: validity for name in names}
    return InterpolatedSample(SatelliteId.parse(sat), TimeStamp(t), values, flags, validity)


class TestConvert(unittest.TestCase):
    """Test conversion of matching samples"""

    def test_kepler_record(self):
        """Test converting a Keplerian sample"""
        sample = full_sample('G01', KEPLER_SCHEMA)
        rec = convert(sample)
        self.assertIsInstance(rec, KeplerSsc)
        self.assertEqual(rec.field_count(), KEPLER_SCHEMA.field_count)
        self.assertEqual(rec.sat, SatelliteId.parse('G01'))
        self.assertEqual(rec.time, TimeStamp(45.0))
        self.assertEqual(rec.clock_bias, 0.0)
        self.assertEqual(rec.i_dot, 19.0)
        self.assertEqual(rec.i_dot_valid, Validity.IN_RANGE)

    def test_schema_chosen_by_constellation(self):
        """Test the schema follows the constellation"""
        self.assertIsInstance(convert(full_sample('R03', GLONASS_SCHEMA)), GlonassSsc)

    def test_channel_order_follows_schema(self):
        """Test field order ignores sample channel order"""
        sample = full_sample('E11', KEPLER_SCHEMA)
        reordered = InterpolatedSample(sample.sat, sample.time,
                                       dict(reversed(list(sample.values.items()))),
                                       dict(reversed(list(sample.flags.items()))),
                                       sample.validity)
        self.assertEqual(convert(reordered), convert(sample))

    def test_field_values_in_order(self):
        """Test field values and positions"""
        rec = convert(full_sample('C20', KEPLER_SCHEMA, Validity.EXTRAPOLATED))
        self.assertEqual(list(rec.values), [float(i) for i in range(20)])
        self.assertEqual(set(rec.flags.values()), {Validity.EXTRAPOLATED})
        pos = rec.fields_pos()
        self.assertEqual(pos['sat'], 0)
        self.assertEqual(pos['clock_bias'], 2)
        self.assertEqual(pos['clock_bias_valid'], 22)

    def test_vector_restores_converted_record(self):
        """A converted record read back from its vector and flags is unchanged"""
        rec = convert(full_sample('C20', KEPLER_SCHEMA, Validity.EXTRAPOLATED))
        restored = KeplerSsc.from_vector(rec.sat, rec.time, rec.to_vector(),
                                         list(rec.flags.values()))
        self.assertEqual(restored, rec)

    def test_unavailable_sample(self):
        """Test unavailable channels convert to NaN"""
        schema = SscSchema('Clock', [ChannelSpec('clock_bias', 's')])
        sample = InterpolatedSample(SatelliteId.parse('G01'), TimeStamp(0.0),
                                    {'clock_bias': math.nan},
                                    {'clock_bias': Validity.UNAVAILABLE}, Validity.UNAVAILABLE)
        rec = SscConverter(schema).convert(sample)
        self.assertTrue(math.isnan(rec.clock_bias))
        self.assertEqual(rec.clock_bias_valid, Validity.UNAVAILABLE)


class TestSchemaMismatch(unittest.TestCase):
    """Test channel set mismatches"""

    def test_missing_channel(self):
        """Test a sample missing a channel"""
        sample = full_sample('G01', KEPLER_SCHEMA)
        values = dict(sample.values)
        flags = dict(sample.flags)
        del values['crs'], flags['crs']
        partial = InterpolatedSample(sample.sat, sample.time, values, flags, sample.validity)
        with self.assertRaises(SchemaMismatch) as ctx:
            convert(partial)
        self.assertIn('crs', str(ctx.exception))

    def test_extra_channel(self):
        """Test a sample with an extra channel"""
        sample = full_sample('G01', KEPLER_SCHEMA)
        values = dict(sample.values, x=1.0)
        flags = dict(sample.flags, x=Validity.IN_RANGE)
        with self.assertRaises(SchemaMismatch):
            convert(InterpolatedSample(sample.sat, sample.time, values, flags, sample.validity))

    def test_wrong_schema(self):
        """Test converting with another constellation's schema"""
        with self.assertRaises(SchemaMismatch):
            convert(full_sample('G01', KEPLER_SCHEMA), GLONASS_SCHEMA)


class TestRecordsToFrame(unittest.TestCase):
    """Test DataFrame export"""

    def test_frame(self):
        """Test exporting records to a DataFrame"""
        records = [convert(full_sample('G01', KEPLER_SCHEMA, t=t)) for t in (0.0, 30.0)]
        records.append(convert(full_sample('R01', GLONASS_SCHEMA)))
        frame = records_to_frame(records)
        self.assertEqual(len(frame), 3)
        self.assertEqual(list(frame.columns[:3]), ['sat', 'time', 'scale'])
        self.assertEqual(list(frame['sat']), ['G01', 'G01', 'R01'])
        self.assertEqual(frame['clock_bias_valid'].iloc[0], 'in-range')
        self.assertIn('vel_x', frame.columns)
        self.assertTrue(math.isnan(frame['crs'].iloc[2]))

    def test_empty(self):
        """Test exporting no records"""
        frame = records_to_frame([])
        self.assertEqual(len(frame), 0)
        self.assertEqual(list(frame.columns), ['sat', 'time', 'scale'])


if __name__ == '__main__':
    unittest.main()
