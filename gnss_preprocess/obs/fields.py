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

"""
Observable field tables.

Each constellation has a fixed list of RINEX 3 observable codes. An
observation vector stores, per code, the observed value followed by its
signal strength indicator, after a short header:

    [sat number, time, x, y, z, value_0, ssi_0, value_1, ssi_1, ...]

Vectors of every constellation are padded to the same width so they can be
stacked into one array.
"""

from typing import Dict, Mapping, Tuple

from ..core.satellite import Constellation

GPS_FIELDS = (
    'C1C', 'L1C', 'D1C', 'S1C', 'C1W', 'S1W', 'C2W', 'L2W', 'D2W', 'S2W', 'C2L', 'L2L', 'D2L',
    'S2L', 'C5Q', 'L5Q', 'D5Q', 'S5Q', 'D1W', 'L1W', 'C2X', 'C5X', 'D2X', 'D5X', 'L2X', 'L5X',
    'S2X', 'S5X', 'C2S', 'L2S', 'D2S', 'S2S', 'C1L', 'L1L', 'D1L', 'S1L', 'C1X', 'L1X', 'S1X',
    'D1X', 'C1P', 'L1P', 'S1P', 'C2C', 'L2C', 'S2C', 'C2P', 'L2P', 'S2P', 'C5I', 'L5I', 'S5I',
    'C2Y', 'D2Y', 'L2Y', 'S2Y', 'D5I', 'D2C', 'D2P',
)

GLONASS_FIELDS = (
    'C1C', 'L1C', 'D1C', 'S1C', 'C1P', 'L1P', 'D1P', 'S1P', 'C2P', 'L2P', 'D2P', 'S2P', 'C2C',
    'L2C', 'D2C', 'S2C', 'C3Q', 'L3Q', 'D3Q', 'S3Q', 'C3X', 'L3X', 'S3X', 'D3X',
)

BEIDOU_FIELDS = (
    'C2I', 'L2I', 'D2I', 'S2I', 'C7I', 'L7I', 'D7I', 'S7I', 'C6I', 'L6I', 'D6I', 'S6I', 'C1I',
    'L1I', 'D1I', 'S1I', 'C1X', 'L1X', 'S1X', 'C5X', 'L5X', 'S5X', 'C1P', 'L1P', 'D1P', 'S1P',
    'C5P', 'L5P', 'D5P', 'S5P', 'C7Z', 'C8X', 'D5X', 'D7Z', 'D8X', 'L7Z', 'L8X', 'S7Z', 'S8X',
    'C2X', 'D2X', 'L2X', 'S2X', 'D1X', 'C6X', 'L6X', 'S6X', 'C7X', 'L7X', 'S7X', 'C1D', 'C5D',
    'D1D', 'D5D', 'L1D', 'L5D', 'S1D', 'S5D', 'C7D', 'L7D', 'S7D', 'D7D',
)

SBAS_FIELDS = ('C1C', 'L1C', 'D1C', 'S1C', 'C5I', 'L5I', 'D5I', 'S5I', 'C5X', 'L5X', 'S5X')

GALILEO_FIELDS = (
    'C1C', 'L1C', 'D1C', 'S1C', 'C6C', 'L6C', 'D6C', 'S6C', 'C5Q', 'L5Q', 'D5Q', 'S5Q', 'C7Q',
    'L7Q', 'D7Q', 'S7Q', 'C8Q', 'L8Q', 'D8Q', 'S8Q', 'C1X', 'C5X', 'C7X', 'D1X', 'D5X', 'D7X',
    'L1X', 'L5X', 'L7X', 'S1X', 'S5X', 'S7X', 'C8X', 'D8X', 'L8X', 'S8X', 'C6X', 'L6X', 'S6X',
    'D6X', 'C1B', 'L1B', 'S1B', 'C5I', 'L5I', 'S5I', 'C6B', 'L6B', 'S6B', 'C8I', 'L8I', 'S8I',
    'C7I', 'L7I', 'S7I', 'D1B', 'D5I', 'D7I',
)

QZSS_FIELDS = (
    'C1C', 'L1C', 'D1C', 'S1C', 'C2L', 'L2L', 'D2L', 'S2L', 'C5Q', 'L5Q', 'D5Q', 'S5Q', 'C2S',
    'L2S', 'D2S', 'S2S', 'C2X', 'L2X', 'S2X', 'S6X', 'C5X', 'L5X', 'S5X', 'C1X', 'L1X', 'S1X',
    'C1Z', 'L1Z', 'S1Z', 'C6X', 'L6X', 'C1L', 'L1L', 'D1L', 'S1L', 'D1Z', 'D2X', 'D5X', 'D1X',
    'C6L', 'L6L', 'S6L', 'D6X', 'C6Z', 'L6Z', 'S6Z', 'D6Z', 'C1B', 'L1B', 'S1B', 'C5P', 'L5P',
    'D5P', 'S5P',
)

IRNSS_FIELDS = ('C5A', 'L5A', 'D5A', 'S5A', 'C9A', 'L9A', 'S9A')

OBSERVATION_FIELDS: Mapping[Constellation, Tuple[str, ...]] = {
    Constellation.GPS: GPS_FIELDS,
    Constellation.GLONASS: GLONASS_FIELDS,
    Constellation.GALILEO: GALILEO_FIELDS,
    Constellation.BEIDOU: BEIDOU_FIELDS,
    Constellation.QZSS: QZSS_FIELDS,
    Constellation.SBAS: SBAS_FIELDS,
    Constellation.IRNSS: IRNSS_FIELDS,
}

MAX_OBS_FIELDS = max(len(codes) for codes in OBSERVATION_FIELDS.values())

HEADER_FIELDS = ('sat', 'time', 'x', 'y', 'z')
HEADER_SIZE = len(HEADER_FIELDS)
OBS_VECTOR_SIZE = HEADER_SIZE + 2 * MAX_OBS_FIELDS

# Observation type letter -> unit
OBSERVABLE_UNITS = {
    'C': 'm',
    'L': 'cycles',
    'D': 'Hz',
    'S': 'dB-Hz',
}


def fields_for(constellation: Constellation) -> Tuple[str, ...]:
    return OBSERVATION_FIELDS[constellation]


def fields_pos(constellation: Constellation) -> Dict[str, int]:
    """Vector index of each observable's value; its SSI follows at index + 1"""
    return {code: HEADER_SIZE + 2 * i for i, code in enumerate(fields_for(constellation))}


def observable_unit(code: str) -> str:
    return OBSERVABLE_UNITS[code[0]]


def ssi_from_snr(snr: float) -> int:
    """RINEX signal strength indicator (1-9) for a carrier-to-noise ratio in dB-Hz"""
    return min(max(int(snr / 6), 1), 9)
