# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core Preprocessing Types.

This module provides the building blocks shared by every stage:

- **Time Model**: GPS, Galileo, BeiDou, QZSS, NavIC, GLONASS, UTC and TAI time
  scales with leap-second aware conversion to a canonical scale
- **Satellite Identifiers**: totally ordered ``SatelliteId`` with RINEX parsing
  and the unified internal satellite numbering
- **Channels**: per-constellation parameter channels with units and kinds
- **Records**: parsed input frames and normalized ``EpochRecord`` values
- **Errors**: exception hierarchy rooted at ``PreprocessError``

Example Usage:
    >>> from gnss_preprocess.core import TimeStamp, TimeScale, to_canonical
    >>>
    >>> ts = TimeStamp.from_week_tow(1200, 3600.0, TimeScale.BDT)
    >>> to_canonical(ts).scale
    <TimeScale.GPST: 'GPST'>
"""

from .channels import (CONSTELLATION_CHANNELS, ChannelKind, ChannelSpec,
                       canonical_key, channels_for)
from .errors import (AdapterError, FitError, InconsistentRecord, InsufficientSamples,
                     OutOfTableRange, PreprocessError, SchemaMismatch,
                     TimeModelError, UnitMismatch, UnknownSatellite, UnsupportedScale)
from .records import (ClockParameters, EphemerisFrame, EpochRecord, Observation,
                      ObservationBlock, Parameter, QualityFlag, RinexBlock)
from .satellite import Constellation, SatelliteId
from .time import (DEFAULT_LEAP_TABLE, LeapSecondTable, TimeModel, TimeScale,
                   TimeStamp, compare, to_canonical)

__all__ = [
    'TimeScale', 'TimeStamp', 'TimeModel', 'LeapSecondTable', 'DEFAULT_LEAP_TABLE',
    'to_canonical', 'compare',
    'Constellation', 'SatelliteId',
    'ChannelKind', 'ChannelSpec', 'CONSTELLATION_CHANNELS', 'channels_for', 'canonical_key',
    'Parameter', 'ClockParameters', 'QualityFlag', 'EpochRecord', 'EphemerisFrame',
    'RinexBlock', 'Observation', 'ObservationBlock',
    'PreprocessError', 'TimeModelError', 'UnsupportedScale', 'OutOfTableRange',
    'AdapterError', 'InconsistentRecord', 'UnknownSatellite', 'FitError',
    'InsufficientSamples', 'UnitMismatch', 'SchemaMismatch',
]
