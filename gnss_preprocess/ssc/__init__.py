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

"""SSC schemas, generated record types and the sample converter."""

from .converter import SscConverter, convert, records_to_frame
from .record import (RECORD_TYPES, GlonassSsc, KeplerSsc, SbasSsc, SscRecord,
                     build_record_type, record_type_for, stack_vectors,
                     verify_record_type)
from .schema import (GLONASS_SCHEMA, KEPLER_SCHEMA, MAX_CHANNELS, SBAS_SCHEMA,
                     SscSchema, schema_for)

__all__ = [
    'SscSchema', 'KEPLER_SCHEMA', 'GLONASS_SCHEMA', 'SBAS_SCHEMA', 'MAX_CHANNELS',
    'schema_for',
    'SscRecord', 'KeplerSsc', 'GlonassSsc', 'SbasSsc', 'RECORD_TYPES',
    'build_record_type', 'verify_record_type', 'record_type_for', 'stack_vectors',
    'SscConverter', 'convert', 'records_to_frame',
]
