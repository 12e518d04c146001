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

"""Observation data: field tables, adapter and fixed-layout records."""

from .adapter import ObservationAdapter
from .fields import (MAX_OBS_FIELDS, OBS_VECTOR_SIZE, OBSERVATION_FIELDS, fields_for,
                     fields_pos, observable_unit, ssi_from_snr)
from .record import ObservationRecord, stack_observations

__all__ = [
    'ObservationAdapter', 'ObservationRecord', 'stack_observations',
    'OBSERVATION_FIELDS', 'MAX_OBS_FIELDS', 'OBS_VECTOR_SIZE',
    'fields_for', 'fields_pos', 'observable_unit', 'ssi_from_snr',
]
