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

"""RINEX record adapter.

Turns parsed navigation blocks into ``EpochRecord`` values: resolves the
satellite identifier, moves the epoch to the canonical time scale, maps RINEX
orbit keys to channel names and tags every value with its unit. Values keep
the precision and units they were parsed with.
"""

import logging
import math
import numbers
from typing import Dict, Iterable, List, Optional

from ..core.channels import CHANNEL_UNITS, canonical_key
from ..core.errors import InconsistentRecord, PreprocessError
from ..core.records import (ClockParameters, EphemerisFrame, EpochRecord, Parameter,
                            QualityFlag, RinexBlock)
from ..core.satellite import SatelliteId
from ..core.time import TimeModel, TimeStamp
from ..diagnostics import DiagnosticKind, Diagnostics

logger = logging.getLogger(__name__)

CLOCK_UNITS = {
    'clock_bias': 's',
    'clock_drift': 's/s',
    'clock_drift_rate': 's/s^2',
}


def _as_float(sat, name, value) -> float:
    """Numeric value of a field, rejecting text and non-finite numbers"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InconsistentRecord(sat, f"{name} is not numeric ({value!r})")
    value = float(value)
    if not math.isfinite(value):
        raise InconsistentRecord(sat, f"{name} is not finite ({value})")
    return value


def quality_from_health(health: Optional[Parameter]) -> QualityFlag:
    if health is None:
        return QualityFlag.UNKNOWN
    return QualityFlag.OK if health.value == 0 else QualityFlag.UNHEALTHY


class RinexRecordAdapter:
    """Normalizes parsed RINEX navigation blocks

    Parameters
    ----------
    time_model : TimeModel, optional
        Model used to move epochs to the canonical scale (GPST by default)
    """

    def __init__(self, time_model: Optional[TimeModel] = None):
        self.time_model = time_model if time_model is not None else TimeModel()

    def normalize(self, block: RinexBlock) -> List[EpochRecord]:
        """Normalize every frame of a block

        Raises
        ------
        InconsistentRecord
            A frame's fields contradict each other
        UnknownSatellite
            A frame's satellite identifier cannot be resolved
        TimeModelError
            A frame's epoch cannot be moved to the canonical scale
        """
        return [self.normalize_frame(frame, block.epoch) for frame in block.frames]

    def normalize_frame(self, frame: EphemerisFrame,
                        epoch: Optional[TimeStamp] = None) -> EpochRecord:
        """Normalize one frame; ``frame.epoch`` takes precedence over ``epoch``"""
        sat = SatelliteId.parse(frame.sv)

        stamp = frame.epoch if frame.epoch is not None else epoch
        if stamp is None:
            raise InconsistentRecord(sat, "no epoch")
        stamp = self.time_model.to_canonical(stamp)

        clock = self._clock(sat, frame)
        orbit = self._orbit(sat, frame)
        record = EpochRecord(sat, stamp, clock, orbit, quality_from_health(orbit.get('health')))
        logger.trace("normalized %r", record)
        return record

    def normalize_blocks(self, blocks: Iterable[RinexBlock],
                         diagnostics: Diagnostics) -> List[EpochRecord]:
        """Normalize many blocks, recording rejected frames instead of raising"""
        records = []
        for block in blocks:
            for frame in block.frames:
                try:
                    records.append(self.normalize_frame(frame, block.epoch))
                except PreprocessError as e:
                    logger.warning("Rejected record %s: %s", frame.sv, e)
                    diagnostics.add(DiagnosticKind.REJECTED_RECORD, str(e),
                                    time=frame.epoch or block.epoch,
                                    error=type(e).__name__)
        return records

    def _clock(self, sat, frame: EphemerisFrame) -> ClockParameters:
        if frame.clock_bias is None and frame.clock_drift is not None:
            raise InconsistentRecord(sat, "clock drift present without clock bias")
        if frame.clock_drift is None and frame.clock_drift_rate is not None:
            raise InconsistentRecord(sat, "clock drift rate present without clock drift")

        terms = {}
        for name in ('clock_bias', 'clock_drift', 'clock_drift_rate'):
            value = getattr(frame, name)
            if value is not None:
                unit = frame.units.get(name, CLOCK_UNITS[name])
                terms[name] = Parameter(_as_float(sat, name, value), unit)
        return ClockParameters(terms.get('clock_bias'), terms.get('clock_drift'),
                               terms.get('clock_drift_rate'))

    def _orbit(self, sat, frame: EphemerisFrame) -> Dict[str, Parameter]:
        orbit: Dict[str, Parameter] = {}
        for key, value in frame.orbits.items():
            name = canonical_key(key)
            if name in CLOCK_UNITS:
                continue
            number = _as_float(sat, key, value)
            if name in orbit and orbit[name].value != number:
                raise InconsistentRecord(sat, f"conflicting values for {name}")
            unit = frame.units.get(key, frame.units.get(name, CHANNEL_UNITS.get(name, '')))
            orbit[name] = Parameter(number, unit)
        return orbit
