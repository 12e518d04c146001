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

"""Conversion of interpolated samples into SSC records"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from ..core.errors import SchemaMismatch
from ..nav.interpolation import InterpolatedSample
from .record import SscRecord, record_type_for
from .schema import SscSchema, schema_for

logger = logging.getLogger(__name__)


class SscConverter:
    """Maps interpolated samples onto SSC record types

    Parameters
    ----------
    schema : SscSchema, optional
        Fixed schema for every sample; by default the schema is chosen from
        the sample's constellation
    """

    def __init__(self, schema: Optional[SscSchema] = None):
        self.schema = schema

    def schema_of(self, sample: InterpolatedSample) -> SscSchema:
        return self.schema if self.schema is not None else schema_for(sample.sat.constellation)

    def convert(self, sample: InterpolatedSample) -> SscRecord:
        """Build the SSC record of a sample

        Raises
        ------
        SchemaMismatch
            If the sample's channels are not exactly the schema's channels
        """
        schema = self.schema_of(sample)
        expected = schema.channel_names
        if set(sample.channels) != set(expected):
            missing = [name for name in expected if name not in sample.values]
            extra = [name for name in sample.channels if name not in expected]
            raise SchemaMismatch(
                f"{sample.sat}: channels do not match schema {schema.name!r} "
                f"(missing {missing}, unexpected {extra})")

        cls = record_type_for(schema)
        values = [sample.values[name] for name in expected]
        flags = [sample.flags[name] for name in expected]
        return cls(sample.sat, sample.time, *values, *flags)

    def convert_all(self, samples: Iterable[InterpolatedSample]) -> List[SscRecord]:
        return [self.convert(sample) for sample in samples]


_DEFAULT_CONVERTER = SscConverter()


def convert(sample: InterpolatedSample, schema: Optional[SscSchema] = None) -> SscRecord:
    """Convert one sample with the constellation's (or the given) schema"""
    if schema is None:
        return _DEFAULT_CONVERTER.convert(sample)
    return SscConverter(schema).convert(sample)


def records_to_frame(records: Iterable[SscRecord]) -> pd.DataFrame:
    """
    Tabulate SSC records.

    Parameters
    ----------
    records : iterable of SscRecord

    Returns
    -------
    pd.DataFrame
        One row per record with columns ``sat``, ``time`` (canonical seconds),
        ``scale``, the channel values and their validity flags (as strings).
        Records of different schemas share columns where channel names match.
    """
    rows = []
    for rec in records:
        row = {'sat': str(rec.sat), 'time': rec.time.seconds, 'scale': rec.time.scale.value}
        for name, value in rec.as_dict().items():
            if name in ('sat', 'time'):
                continue
            row[name] = value.value if hasattr(value, 'code') else value
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=['sat', 'time', 'scale'])
    return pd.DataFrame(rows)
