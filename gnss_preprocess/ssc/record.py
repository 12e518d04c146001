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

"""SSC record types generated from schema declarations.

Record classes are frozen dataclasses built from an ``SscSchema`` when this
module is imported. Each generated class is checked against its schema right
away, so a layout mismatch surfaces as ``SchemaMismatch`` at import time and
never at conversion time.
"""

import dataclasses
import math
from typing import ClassVar, Dict, Iterable, Optional, Sequence, Type

import numpy as np

from ..core.errors import SchemaMismatch
from ..core.satellite import SatelliteId
from ..core.time import TimeStamp
from ..nav.interpolation import Validity
from .schema import MAX_CHANNELS, SCHEMAS, SscSchema


class SscRecord:
    """Base class of generated SSC record types"""
    schema: ClassVar[SscSchema]

    @classmethod
    def field_count(cls) -> int:
        return cls.schema.field_count

    @classmethod
    def fields_pos(cls) -> Dict[str, int]:
        return cls.schema.fields_pos()

    @property
    def values(self) -> np.ndarray:
        """Channel values in schema order"""
        return np.array([getattr(self, name) for name in self.schema.channel_names],
                        dtype=np.float64)

    @property
    def flags(self) -> Dict[str, Validity]:
        return {name: getattr(self, flag)
                for name, flag in zip(self.schema.channel_names, self.schema.flag_names)}

    @property
    def validity_codes(self) -> np.ndarray:
        return np.array([flag.code for flag in self.flags.values()], dtype=np.int8)

    def to_vector(self, width: Optional[int] = None, fill: float = 0.0) -> np.ndarray:
        """Channel values padded to a fixed width

        Parameters
        ----------
        width : int, optional
            Vector length, defaults to the widest schema's channel count
        fill : float
            Padding value
        """
        width = MAX_CHANNELS if width is None else width
        n = len(self.schema.channels)
        if width < n:
            raise ValueError(f"width {width} is smaller than {n} channels")
        out = np.full(width, fill, dtype=np.float64)
        out[:n] = self.values
        return out

    @classmethod
    def from_vector(cls, sat: SatelliteId, time: TimeStamp, vector: Sequence[float],
                    flags: Optional[Sequence[Validity]] = None) -> 'SscRecord':
        """Rebuild a record from the output of ``to_vector``

        Deserialization only: new records are produced from interpolated
        samples by ``SscConverter``. Without ``flags``, NaN values read back as
        unavailable and every other value as in-range.
        """
        n = len(cls.schema.channels)
        if len(vector) < n:
            raise ValueError(f"{cls.__name__} needs {n} values, got {len(vector)}")
        values = [float(v) for v in vector[:n]]
        if flags is None:
            flags = [Validity.UNAVAILABLE if math.isnan(v) else Validity.IN_RANGE
                     for v in values]
        elif len(flags) != n:
            raise ValueError(f"{cls.__name__} needs {n} flags, got {len(flags)}")
        return cls(sat, time, *values, *flags)

    def as_dict(self) -> Dict[str, object]:
        """Field name -> value, in field order"""
        return {name: getattr(self, name) for name in self.schema.field_names}


def verify_record_type(cls: Type[SscRecord], schema: SscSchema):
    """Check a record type's fields against its schema

    Raises
    ------
    SchemaMismatch
        If field count, names or order differ from the schema
    """
    names = tuple(f.name for f in dataclasses.fields(cls))
    if len(names) != schema.field_count:
        raise SchemaMismatch(
            f"{cls.__name__} has {len(names)} fields, schema {schema.name!r} "
            f"declares {schema.field_count}")
    if names != schema.field_names:
        raise SchemaMismatch(f"{cls.__name__} field order differs from schema {schema.name!r}")
    if getattr(cls, 'schema', None) is not schema:
        raise SchemaMismatch(f"{cls.__name__} is not bound to schema {schema.name!r}")


def build_record_type(schema: SscSchema) -> Type[SscRecord]:
    """Generate and verify the frozen record dataclass for a schema"""
    spec = [('sat', SatelliteId), ('time', TimeStamp)]
    spec += [(name, float) for name in schema.channel_names]
    spec += [(name, Validity) for name in schema.flag_names]
    cls = dataclasses.make_dataclass(schema.name, spec, bases=(SscRecord,), frozen=True,
                                     namespace={'schema': schema})
    cls.__module__ = __name__
    verify_record_type(cls, schema)
    return cls


RECORD_TYPES: Dict[str, Type[SscRecord]] = {
    name: build_record_type(schema) for name, schema in SCHEMAS.items()
}

KeplerSsc = RECORD_TYPES['KeplerSsc']
GlonassSsc = RECORD_TYPES['GlonassSsc']
SbasSsc = RECORD_TYPES['SbasSsc']

_BY_SCHEMA = {cls.schema: cls for cls in RECORD_TYPES.values()}


def record_type_for(schema: SscSchema) -> Type[SscRecord]:
    """Record type generated for a schema (built on first use for custom schemas)"""
    cls = _BY_SCHEMA.get(schema)
    if cls is None:
        cls = _BY_SCHEMA.setdefault(schema, build_record_type(schema))
    return cls


def stack_vectors(records: Iterable[SscRecord], width: Optional[int] = None) -> np.ndarray:
    """Stack records' padded channel vectors into a 2-D array"""
    rows = [rec.to_vector(width) for rec in records]
    if not rows:
        return np.empty((0, MAX_CHANNELS if width is None else width))
    return np.vstack(rows)
