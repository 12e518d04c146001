#!/usr/bin/env python3
"""Test suite for SSC schemas and generated record types"""

import dataclasses
import unittest

import numpy as np

from gnss_preprocess.core.channels import ChannelSpec
from gnss_preprocess.core.errors import SchemaMismatch
from gnss_preprocess.core.satellite import Constellation, SatelliteId
from gnss_preprocess.core.time import TimeStamp
from gnss_preprocess.nav.interpolation import Validity
from gnss_preprocess.ssc.record import (RECORD_TYPES, GlonassSsc, KeplerSsc, SscRecord,
                                        build_record_type, record_type_for, stack_vectors,
                                        verify_record_type)
from gnss_preprocess.ssc.schema import (GLONASS_SCHEMA, KEPLER_SCHEMA, MAX_CHANNELS,
                                        SBAS_SCHEMA, SscSchema, schema_for)


class TestSchemaDeclarations(unittest.TestCase):
    """Test schema layout"""

    def test_field_layout(self):
        """Test schema field names and count"""
        schema = SscSchema('Clock', [ChannelSpec('clock_bias', 's'),
                                     ChannelSpec('clock_drift', 's/s')])
        self.assertEqual(schema.field_names,
                         ('sat', 'time', 'clock_bias', 'clock_drift',
                          'clock_bias_valid', 'clock_drift_valid'))
        self.assertEqual(schema.field_count, 6)
        self.assertEqual(schema.fields_pos()['clock_drift'], 3)
        self.assertEqual(schema.units(), {'clock_bias': 's', 'clock_drift': 's/s'})

    def test_builtin_schemas(self):
        """Test the built-in schemas"""
        self.assertEqual(len(KEPLER_SCHEMA.channels), 20)
        self.assertEqual(len(GLONASS_SCHEMA.channels), 16)
        self.assertEqual(len(SBAS_SCHEMA.channels), 16)
        self.assertEqual(MAX_CHANNELS, 20)
        self.assertEqual(KEPLER_SCHEMA.channel_names[:4],
                         ('clock_bias', 'clock_drift', 'clock_drift_rate', 'iode'))

    def test_schema_for_constellation(self):
        """Test schema lookup by constellation"""
        self.assertIs(schema_for(Constellation.GPS), KEPLER_SCHEMA)
        self.assertIs(schema_for(Constellation.BEIDOU), KEPLER_SCHEMA)
        self.assertIs(schema_for(Constellation.GLONASS), GLONASS_SCHEMA)
        self.assertIs(schema_for(Constellation.SBAS), SBAS_SCHEMA)

    def test_invalid_declarations(self):
        """Test invalid schema declarations"""
        with self.assertRaises(SchemaMismatch):
            SscSchema('Empty', [])
        with self.assertRaises(SchemaMismatch):
            SscSchema('Twice', [ChannelSpec('x', 'm'), ChannelSpec('x', 'm')])
        with self.assertRaises(SchemaMismatch):
            SscSchema('Clash', [ChannelSpec('time', 's')])
        with self.assertRaises(SchemaMismatch):
            SscSchema('Flag', [ChannelSpec('x', 'm'), ChannelSpec('x_valid', '')])


class TestGeneratedRecords(unittest.TestCase):
    """Test record types generated from schemas"""

    def test_field_count_matches_schema(self):
        """Test record classes match their schema"""
        for name, cls in RECORD_TYPES.items():
            self.assertTrue(issubclass(cls, SscRecord))
            self.assertEqual(len(dataclasses.fields(cls)), cls.schema.field_count, name)
            self.assertEqual(tuple(f.name for f in dataclasses.fields(cls)),
                             cls.schema.field_names)

    def test_verify_detects_mismatch(self):
        """Test schema verification"""
        # a hand-written record type that forgot one channel
        other = SscSchema('Clock', [ChannelSpec('clock_bias', 's')])
        Broken = dataclasses.make_dataclass(
            'Broken', [('sat', SatelliteId), ('time', TimeStamp), ('clock_bias', float)],
            bases=(SscRecord,), frozen=True, namespace={'schema': other})
        with self.assertRaises(SchemaMismatch):
            verify_record_type(Broken, other)

        Reordered = dataclasses.make_dataclass(
            'Reordered', [('time', TimeStamp), ('sat', SatelliteId), ('clock_bias', float),
                          ('clock_bias_valid', Validity)],
            bases=(SscRecord,), frozen=True, namespace={'schema': other})
        with self.assertRaises(SchemaMismatch):
            verify_record_type(Reordered, other)

    def test_custom_schema_cached(self):
        """Test record classes for custom schemas are cached"""
        schema = SscSchema('ClockOnly', [ChannelSpec('clock_bias', 's')])
        cls = record_type_for(schema)
        self.assertIs(record_type_for(schema), cls)
        self.assertEqual(cls.field_count(), 4)
        self.assertIs(record_type_for(KEPLER_SCHEMA), KeplerSsc)

    def test_vector_round_trip(self):
        """Test record to vector and back"""
        sat = SatelliteId.parse('R07')
        time = TimeStamp(100.0)
        values = np.arange(len(GLONASS_SCHEMA.channels), dtype=float)
        rec = GlonassSsc.from_vector(sat, time, values)
        vec = rec.to_vector()
        self.assertEqual(vec.shape, (MAX_CHANNELS,))
        np.testing.assert_array_equal(vec[:16], values)
        np.testing.assert_array_equal(vec[16:], 0.0)
        self.assertEqual(GlonassSsc.from_vector(sat, time, vec), rec)

    def test_from_vector_flags(self):
        """Test validity flags read from a vector"""
        schema = SscSchema('Pair', [ChannelSpec('a', ''), ChannelSpec('b', '')])
        cls = build_record_type(schema)
        rec = cls.from_vector(SatelliteId.parse('G01'), TimeStamp(0.0), [1.0, float('nan')])
        self.assertEqual(rec.a_valid, Validity.IN_RANGE)
        self.assertEqual(rec.b_valid, Validity.UNAVAILABLE)
        np.testing.assert_array_equal(rec.validity_codes, [0, 2])
        with self.assertRaises(ValueError):
            cls.from_vector(SatelliteId.parse('G01'), TimeStamp(0.0), [1.0])
        with self.assertRaises(ValueError):
            rec.to_vector(width=1)

    def test_records_are_frozen(self):
        """Test records cannot be modified"""
        rec = KeplerSsc.from_vector(SatelliteId.parse('G01'), TimeStamp(0.0),
                                    np.zeros(MAX_CHANNELS))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            rec.clock_bias = 1.0

    def test_stack_vectors(self):
        """Test stacking record vectors"""
        sat = SatelliteId.parse('G01')
        records = [KeplerSsc.from_vector(sat, TimeStamp(t), np.full(20, t)) for t in (0.0, 1.0)]
        self.assertEqual(stack_vectors(records).shape, (2, MAX_CHANNELS))
        self.assertEqual(stack_vectors([]).shape, (0, MAX_CHANNELS))


if __name__ == '__main__':
    unittest.main()
