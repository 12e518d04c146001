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

"""Parameter channels carried by broadcast ephemerides.

A channel is one named, unit-tagged parameter (clock bias, an orbital element,
a state vector component, ...). Channels are either continuous, and fitted
with splines, or discrete (issue-of-data counters, health words), and held
constant between epochs.

Channel layout per constellation family:
- Keplerian (GPS, Galileo, BeiDou, QZSS, IRNSS): clock terms, issue of data
  and the 16 broadcast elements
- GLONASS: clock terms and the PZ-90 state vector
- SBAS: clock terms and the WGS-84 state vector
"""

from enum import Enum
from typing import NamedTuple, Tuple

from .satellite import Constellation


class ChannelKind(Enum):
    CONTINUOUS = 'continuous'
    DISCRETE = 'discrete'


class ChannelSpec(NamedTuple):
    """Named channel with its unit and kind"""
    name: str
    unit: str
    kind: ChannelKind = ChannelKind.CONTINUOUS

    @property
    def is_discrete(self) -> bool:
        return self.kind is ChannelKind.DISCRETE


_C = ChannelKind.CONTINUOUS
_D = ChannelKind.DISCRETE

CLOCK_CHANNELS: Tuple[ChannelSpec, ...] = (
    ChannelSpec('clock_bias', 's'),
    ChannelSpec('clock_drift', 's/s'),
    ChannelSpec('clock_drift_rate', 's/s^2'),
)

KEPLER_CHANNELS: Tuple[ChannelSpec, ...] = CLOCK_CHANNELS + (
    ChannelSpec('iode', '', _D),
    ChannelSpec('crs', 'm'),
    ChannelSpec('delta_n', 'rad/s'),
    ChannelSpec('m0', 'rad'),
    ChannelSpec('cuc', 'rad'),
    ChannelSpec('e', ''),
    ChannelSpec('cus', 'rad'),
    ChannelSpec('sqrt_a', 'm^0.5'),
    ChannelSpec('toe', 's'),
    ChannelSpec('cic', 'rad'),
    ChannelSpec('omega_0', 'rad'),
    ChannelSpec('cis', 'rad'),
    ChannelSpec('i0', 'rad'),
    ChannelSpec('crc', 'm'),
    ChannelSpec('omega', 'rad'),
    ChannelSpec('omega_dot', 'rad/s'),
    ChannelSpec('i_dot', 'rad/s'),
)

GLONASS_CHANNELS: Tuple[ChannelSpec, ...] = CLOCK_CHANNELS + (
    ChannelSpec('mrt', 's'),
    ChannelSpec('x', 'km'),
    ChannelSpec('vel_x', 'km/s'),
    ChannelSpec('accel_x', 'km/s^2'),
    ChannelSpec('health', '', _D),
    ChannelSpec('y', 'km'),
    ChannelSpec('vel_y', 'km/s'),
    ChannelSpec('accel_y', 'km/s^2'),
    ChannelSpec('channel', '', _D),
    ChannelSpec('z', 'km'),
    ChannelSpec('vel_z', 'km/s'),
    ChannelSpec('accel_z', 'km/s^2'),
    ChannelSpec('age_op', 'day', _D),
)

SBAS_CHANNELS: Tuple[ChannelSpec, ...] = CLOCK_CHANNELS + (
    ChannelSpec('tom', 's'),
    ChannelSpec('x', 'km'),
    ChannelSpec('vel_x', 'km/s'),
    ChannelSpec('accel_x', 'km/s^2'),
    ChannelSpec('health', '', _D),
    ChannelSpec('y', 'km'),
    ChannelSpec('vel_y', 'km/s'),
    ChannelSpec('accel_y', 'km/s^2'),
    ChannelSpec('ura', 'm', _D),
    ChannelSpec('z', 'km'),
    ChannelSpec('vel_z', 'km/s'),
    ChannelSpec('accel_z', 'km/s^2'),
    ChannelSpec('iodn', '', _D),
)

CONSTELLATION_CHANNELS = {
    Constellation.GPS: KEPLER_CHANNELS,
    Constellation.GALILEO: KEPLER_CHANNELS,
    Constellation.BEIDOU: KEPLER_CHANNELS,
    Constellation.QZSS: KEPLER_CHANNELS,
    Constellation.IRNSS: KEPLER_CHANNELS,
    Constellation.GLONASS: GLONASS_CHANNELS,
    Constellation.SBAS: SBAS_CHANNELS,
}

# Default unit of every known channel name
CHANNEL_UNITS = {
    spec.name: spec.unit
    for specs in (KEPLER_CHANNELS, GLONASS_CHANNELS, SBAS_CHANNELS)
    for spec in specs
}

# RINEX orbit field names -> channel names
RINEX_KEY_ALIASES = {
    'iode': 'iode',
    'iodnav': 'iode',
    'aode': 'iode',
    'crs': 'crs',
    'deltaN': 'delta_n',
    'm0': 'm0',
    'cuc': 'cuc',
    'e': 'e',
    'cus': 'cus',
    'sqrta': 'sqrt_a',
    'toe': 'toe',
    'cic': 'cic',
    'omega0': 'omega_0',
    'cis': 'cis',
    'i0': 'i0',
    'crc': 'crc',
    'omega': 'omega',
    'omegaDot': 'omega_dot',
    'idot': 'i_dot',
    'satPosX': 'x',
    'satPosY': 'y',
    'satPosZ': 'z',
    'posX': 'x',
    'posY': 'y',
    'posZ': 'z',
    'velX': 'vel_x',
    'velY': 'vel_y',
    'velZ': 'vel_z',
    'accelX': 'accel_x',
    'accelY': 'accel_y',
    'accelZ': 'accel_z',
    'health': 'health',
    'channel': 'channel',
    'ageOp': 'age_op',
    'tom': 'tom',
    'ura': 'ura',
    'iodn': 'iodn',
}


def channels_for(constellation: Constellation) -> Tuple[ChannelSpec, ...]:
    """Ordered channel list of a constellation"""
    return CONSTELLATION_CHANNELS[constellation]


def canonical_key(key: str) -> str:
    """Channel name for a RINEX orbit key (snake_case names pass through)"""
    return RINEX_KEY_ALIASES.get(key, key)
