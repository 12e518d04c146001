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

"""SSC schema declarations.

A schema is the single ordered list of channels an SSC record carries. The
record layout is derived from it:

    sat, time, <channel values in schema order>, <channel>_valid flags in schema order
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..core.channels import GLONASS_CHANNELS, KEPLER_CHANNELS, SBAS_CHANNELS, ChannelSpec
from ..core.errors import SchemaMismatch
from ..core.satellite import Constellation

HEADER_FIELDS = ('sat', 'time')
VALID_SUFFIX = '_valid'


@dataclass(frozen=True)
class SscSchema:
    """Ordered channel declaration of an SSC record type

    Attributes
    ----------
    name : str
        Schema name, also used to name the generated record type
    channels : tuple of ChannelSpec
    """
    name: str
    channels: Tuple[ChannelSpec, ...]

    def __post_init__(self):
        object.__setattr__(self, 'channels', tuple(self.channels))
        names = self.channel_names
        if not names:
            raise SchemaMismatch(f"Schema {self.name!r} declares no channels")
        if len(set(names)) != len(names):
            raise SchemaMismatch(f"Schema {self.name!r} declares a channel twice")
        clash = set(names) & (set(HEADER_FIELDS) | {n + VALID_SUFFIX for n in names})
        if clash:
            raise SchemaMismatch(f"Schema {self.name!r} channel names clash: {sorted(clash)}")

    @property
    def channel_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.channels)

    @property
    def flag_names(self) -> Tuple[str, ...]:
        return tuple(name + VALID_SUFFIX for name in self.channel_names)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return HEADER_FIELDS + self.channel_names + self.flag_names

    @property
    def field_count(self) -> int:
        return len(HEADER_FIELDS) + 2 * len(self.channels)

    def fields_pos(self) -> Dict[str, int]:
        """Field name -> position in the record"""
        return {name: i for i, name in enumerate(self.field_names)}

    def units(self) -> Dict[str, str]:
        return {spec.name: spec.unit for spec in self.channels}


KEPLER_SCHEMA = SscSchema('KeplerSsc', KEPLER_CHANNELS)
GLONASS_SCHEMA = SscSchema('GlonassSsc', GLONASS_CHANNELS)
SBAS_SCHEMA = SscSchema('SbasSsc', SBAS_CHANNELS)

SCHEMAS = {schema.name: schema for schema in (KEPLER_SCHEMA, GLONASS_SCHEMA, SBAS_SCHEMA)}

_CONSTELLATION_SCHEMAS = {
    Constellation.GPS: KEPLER_SCHEMA,
    Constellation.GALILEO: KEPLER_SCHEMA,
    Constellation.BEIDOU: KEPLER_SCHEMA,
    Constellation.QZSS: KEPLER_SCHEMA,
    Constellation.IRNSS: KEPLER_SCHEMA,
    Constellation.GLONASS: GLONASS_SCHEMA,
    Constellation.SBAS: SBAS_SCHEMA,
}

# Width of fixed-size channel vectors shared by all record types
MAX_CHANNELS = max(len(schema.channels) for schema in SCHEMAS.values())


def schema_for(constellation: Constellation) -> SscSchema:
    """SSC schema used for a constellation"""
    return _CONSTELLATION_SCHEMAS[constellation]
