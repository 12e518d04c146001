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

"""Satellite identifiers.

``SatelliteId`` is the grouping key used by every stage. It is immutable,
hashable and totally ordered (constellation order, then PRN).

The unified internal satellite numbers used by RTKLIB-family tools are:
- GPS (G): 1-32
- SBAS (S): 33-64, 133-140
- GLONASS (R): 65-88
- Galileo (E): 97-132
- BeiDou (C): 141-203
- QZSS (J): 210-216
- IRNSS (I): 230-243
"""

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import UnknownSatellite


class Constellation(Enum):
    """GNSS constellations, valued by their RINEX system letter"""
    GPS = 'G'
    GLONASS = 'R'
    GALILEO = 'E'
    BEIDOU = 'C'
    QZSS = 'J'
    SBAS = 'S'
    IRNSS = 'I'

    @property
    def rank(self) -> int:
        return _CONSTELLATION_ORDER.index(self)

    @property
    def prn_range(self):
        return _PRN_RANGES[self]

    @property
    def time_scale(self) -> str:
        """Native time scale tag of the constellation's broadcast messages"""
        return _NATIVE_SCALES[self]


_CONSTELLATION_ORDER = [
    Constellation.GPS, Constellation.GLONASS, Constellation.GALILEO,
    Constellation.BEIDOU, Constellation.QZSS, Constellation.SBAS, Constellation.IRNSS,
]

# RINEX PRN (slot) ranges; SBAS PRN 120-159 is kept in the short form 20-59
_PRN_RANGES = {
    Constellation.GPS: (1, 32),
    Constellation.GLONASS: (1, 24),
    Constellation.GALILEO: (1, 36),
    Constellation.BEIDOU: (1, 63),
    Constellation.QZSS: (1, 7),
    Constellation.SBAS: (20, 59),
    Constellation.IRNSS: (1, 14),
}

_NATIVE_SCALES = {
    Constellation.GPS: 'GPST',
    Constellation.GLONASS: 'GLONASST',
    Constellation.GALILEO: 'GST',
    Constellation.BEIDOU: 'BDT',
    Constellation.QZSS: 'QZSST',
    Constellation.SBAS: 'GPST',
    Constellation.IRNSS: 'IRNWT',
}

# (first internal number, constellation, first PRN, last PRN)
_SAT_NUMBER_BLOCKS = [
    (1, Constellation.GPS, 1, 32),
    (33, Constellation.SBAS, 20, 51),
    (65, Constellation.GLONASS, 1, 24),
    (97, Constellation.GALILEO, 1, 36),
    (133, Constellation.SBAS, 52, 59),
    (141, Constellation.BEIDOU, 1, 63),
    (210, Constellation.QZSS, 1, 7),
    (230, Constellation.IRNSS, 1, 14),
]

_SAT_PATTERN = re.compile(r'^\s*([GRECJSI])\s*0*(\d{1,3})\s*$')

SBAS_PRN_OFFSET = 100


@dataclass(frozen=True)
class SatelliteId:
    """Constellation plus PRN/slot number

    Attributes
    ----------
    constellation : Constellation
    prn : int
        PRN within the constellation (SBAS stored in short form, S20 for PRN 120)
    """
    constellation: Constellation
    prn: int

    def __post_init__(self):
        if not isinstance(self.constellation, Constellation):
            try:
                object.__setattr__(self, 'constellation', Constellation(self.constellation))
            except ValueError:
                raise UnknownSatellite(f"{self.constellation}{self.prn}") from None
        try:
            object.__setattr__(self, 'prn', operator.index(self.prn))
        except TypeError:
            raise UnknownSatellite(f"{self.constellation.value}{self.prn}") from None
        lo, hi = self.constellation.prn_range
        if not lo <= self.prn <= hi:
            raise UnknownSatellite(f"{self.constellation.value}{self.prn}")

    @classmethod
    def parse(cls, ident: Union['SatelliteId', str]) -> 'SatelliteId':
        """Parse a RINEX style identifier ("G01", "G 1", "S120", "S20")

        Raises
        ------
        UnknownSatellite
            If the identifier does not name a known satellite
        """
        if isinstance(ident, SatelliteId):
            return ident
        if not isinstance(ident, str):
            raise UnknownSatellite(ident)
        match = _SAT_PATTERN.match(ident.upper())
        if match is None:
            raise UnknownSatellite(ident)
        constellation = Constellation(match.group(1))
        prn = int(match.group(2))
        if constellation is Constellation.SBAS and prn >= SBAS_PRN_OFFSET:
            prn -= SBAS_PRN_OFFSET
        try:
            return cls(constellation, prn)
        except UnknownSatellite:
            raise UnknownSatellite(ident) from None

    @classmethod
    def from_sat_number(cls, sat: int) -> 'SatelliteId':
        """Convert a unified internal satellite number"""
        for first, constellation, prn_lo, prn_hi in _SAT_NUMBER_BLOCKS:
            count = prn_hi - prn_lo + 1
            if first <= sat < first + count:
                return cls(constellation, prn_lo + sat - first)
        raise UnknownSatellite(sat)

    @property
    def sat_number(self) -> int:
        """Unified internal satellite number"""
        for first, constellation, prn_lo, prn_hi in _SAT_NUMBER_BLOCKS:
            if constellation is self.constellation and prn_lo <= self.prn <= prn_hi:
                return first + self.prn - prn_lo
        raise UnknownSatellite(str(self))

    def _key(self):
        return (self.constellation.rank, self.prn)

    def __lt__(self, other):
        if not isinstance(other, SatelliteId):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other):
        if not isinstance(other, SatelliteId):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other):
        if not isinstance(other, SatelliteId):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other):
        if not isinstance(other, SatelliteId):
            return NotImplemented
        return self._key() >= other._key()

    def __str__(self):
        return f"{self.constellation.value}{self.prn:02d}"
