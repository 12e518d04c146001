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

"""Record types shared by the preprocessing stages.

Input side (produced by the external RINEX parser):
- ``EphemerisFrame``: one satellite's parsed ephemeris entry
- ``RinexBlock``: frames sharing a block epoch
- ``ObservationBlock``: one epoch of a parsed observation file

Normalized side:
- ``Parameter``: value with its unit
- ``ClockParameters``: clock bias, drift and drift rate
- ``EpochRecord``: one satellite at one canonical timestamp
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from .satellite import SatelliteId
from .time import TimeStamp


class Parameter(NamedTuple):
    """Parameter value tagged with its unit"""
    value: float
    unit: str


class QualityFlag(Enum):
    """Record validity derived from the broadcast health word"""
    OK = 0
    UNHEALTHY = 1
    UNKNOWN = 2


@dataclass(frozen=True)
class ClockParameters:
    """Satellite clock polynomial terms (af0, af1, af2)"""
    bias: Optional[Parameter] = None
    drift: Optional[Parameter] = None
    drift_rate: Optional[Parameter] = None

    def items(self) -> List[Tuple[str, Parameter]]:
        out = []
        for name, param in (('clock_bias', self.bias),
                            ('clock_drift', self.drift),
                            ('clock_drift_rate', self.drift_rate)):
            if param is not None:
                out.append((name, param))
        return out


@dataclass(frozen=True)
class EpochRecord:
    """Normalized ephemeris entry for one satellite at one epoch

    Attributes
    ----------
    sat : SatelliteId
    time : TimeStamp
        Epoch in the canonical time scale
    clock : ClockParameters
    orbit : Mapping[str, Parameter]
        Orbit parameters keyed by channel name (read-only)
    quality : QualityFlag
    """
    sat: SatelliteId
    time: TimeStamp
    clock: ClockParameters = field(default_factory=ClockParameters)
    orbit: Mapping[str, Parameter] = field(default_factory=dict)
    quality: QualityFlag = QualityFlag.UNKNOWN

    def __post_init__(self):
        if not isinstance(self.orbit, MappingProxyType):
            object.__setattr__(self, 'orbit', MappingProxyType(dict(self.orbit)))

    @property
    def channels(self) -> Dict[str, Parameter]:
        """All parameters keyed by channel name"""
        out = dict(self.clock.items())
        out.update(self.orbit)
        return out

    def channel_value(self, name: str) -> float:
        """Value of a channel, NaN when the record does not carry it"""
        param = self.channels.get(name)
        return param.value if param is not None else math.nan

    def __repr__(self):
        return (f"EpochRecord(sat={self.sat}, time={self.time}, "
                f"channels={len(self.channels)}, quality={self.quality.name})")


@dataclass
class EphemerisFrame:
    """One satellite's parsed ephemeris entry

    Attributes
    ----------
    sv : str or SatelliteId
        Satellite identifier as written in the file ("G01", "R 5", "S120")
    clock_bias, clock_drift, clock_drift_rate : float, optional
        Clock polynomial terms
    orbits : dict
        Orbit fields keyed by RINEX name ("deltaN", "sqrta", ...) or channel name
    units : dict, optional
        Per-field unit overrides
    epoch : TimeStamp, optional
        Frame epoch (time of clock), overriding the block epoch
    """
    sv: object
    clock_bias: Optional[float] = None
    clock_drift: Optional[float] = None
    clock_drift_rate: Optional[float] = None
    orbits: Dict[str, object] = field(default_factory=dict)
    units: Dict[str, str] = field(default_factory=dict)
    epoch: Optional[TimeStamp] = None


@dataclass
class RinexBlock:
    """Frames decoded for one epoch of a navigation file"""
    epoch: Optional[TimeStamp]
    frames: List[EphemerisFrame] = field(default_factory=list)

    def __len__(self):
        return len(self.frames)


class Observation(NamedTuple):
    """Observed value with its RINEX signal strength indicator (1-9)"""
    value: float
    ssi: Optional[int] = None


@dataclass
class ObservationBlock:
    """Observations of one epoch of an observation file

    Attributes
    ----------
    epoch : TimeStamp
        Receiver epoch
    observations : dict
        Satellite identifier -> {observable code ("C1C", "S2W", ...) -> value
        or Observation}
    flag : int
        RINEX epoch flag; only 0 (OK) carries usable observations
    position : tuple of float, optional
        Approximate receiver position (ECEF, m) from the file header
    """
    epoch: TimeStamp
    observations: Dict[str, Dict[str, Union[float, Observation]]] = field(default_factory=dict)
    flag: int = 0
    position: Optional[Tuple[float, float, float]] = None

    def __len__(self):
        return len(self.observations)
