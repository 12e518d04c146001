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

"""Navigation data stages: record adapter, epoch series and interpolation."""

from .adapter import RinexRecordAdapter
from .interpolation import (InterpolatedSample, InterpolationEngine, Resolution,
                            Spline, Validity, resolve_time)
from .series import (EpochSeriesBuilder, SatelliteSeries, Segment, combine_series,
                     first_records, last_records)

__all__ = [
    'RinexRecordAdapter',
    'EpochSeriesBuilder', 'SatelliteSeries', 'Segment',
    'combine_series', 'first_records', 'last_records',
    'InterpolationEngine', 'InterpolatedSample', 'Spline', 'Validity',
    'Resolution', 'resolve_time',
]
