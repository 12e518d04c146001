#!/usr/bin/env python3
"""Test suite for preprocessing configuration"""

import dataclasses
import unittest

from gnss_preprocess.config import PreprocessConfig
from gnss_preprocess.core.errors import UnsupportedScale
from gnss_preprocess.core.time import TimeScale


class TestDefaults(unittest.TestCase):
    """Test default values"""

    def test_defaults(self):
        """Test default configuration values"""
        config = PreprocessConfig()
        self.assertEqual(config.spline_order, 3)
        self.assertEqual(config.required_samples, 4)
        self.assertEqual(config.max_gap_multiplier, 2.0)
        self.assertIsNone(config.max_gap)
        self.assertEqual(config.extrapolation_margin, 300.0)
        self.assertEqual(config.canonical_scale, TimeScale.GPST)
        self.assertEqual(config.method, 'spline')
        self.assertEqual(config.workers, 1)

    def test_required_samples(self):
        """Test the required sample count"""
        self.assertEqual(PreprocessConfig(spline_order=1).required_samples, 2)
        self.assertEqual(PreprocessConfig(spline_order=1, min_samples=6).required_samples, 6)

    def test_frozen(self):
        """Test configuration cannot be modified"""
        with self.assertRaises(dataclasses.FrozenInstanceError):
            PreprocessConfig().workers = 2


class TestValidation(unittest.TestCase):
    """Test rejection of invalid values"""

    def test_invalid_values(self):
        """Test invalid option values"""
        for options in ({'spline_order': -1},
                        {'spline_order': 2.5},
                        {'min_samples': 2},
                        {'max_gap_multiplier': 1.0},
                        {'max_gap': 0.0},
                        {'extrapolation_margin': -1.0},
                        {'method': 'akima'},
                        {'workers': 0}):
            with self.subTest(options=options):
                with self.assertRaises(ValueError):
                    PreprocessConfig(**options)

    def test_unknown_scale(self):
        """Test unknown time scale names"""
        with self.assertRaises(UnsupportedScale):
            PreprocessConfig(canonical_scale='LMT')

    def test_scale_parsed(self):
        """Test scale names are parsed"""
        config = PreprocessConfig(canonical_scale='GAL')
        self.assertEqual(config.canonical_scale, TimeScale.GST)
        self.assertEqual(config.time_model().canonical, TimeScale.GST)


class TestSerialization(unittest.TestCase):
    """Test dictionary round trips"""

    def test_to_dict(self):
        """Test exporting configuration to a dict"""
        out = PreprocessConfig(max_gap=900.0).to_dict()
        self.assertEqual(out['canonical_scale'], 'GPST')
        self.assertEqual(out['max_gap'], 900.0)

    def test_from_dict(self):
        """Test loading configuration from a dict"""
        config = PreprocessConfig.from_dict({'spline_order': 1, 'canonical_scale': 'BDT'})
        self.assertEqual(config.spline_order, 1)
        self.assertEqual(config.canonical_scale, TimeScale.BDT)
        self.assertEqual(PreprocessConfig.from_dict(config.to_dict()), config)

    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected"""
        with self.assertRaises(ValueError) as ctx:
            PreprocessConfig.from_dict({'order': 3})
        self.assertIn('order', str(ctx.exception))

    def test_with_options(self):
        """Test overriding options"""
        config = PreprocessConfig().with_options(method='lagrange', workers=3)
        self.assertEqual((config.method, config.workers), ('lagrange', 3))
        with self.assertRaises(ValueError):
            config.with_options(workers=0)


if __name__ == '__main__':
    unittest.main()
