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

"""I/O utilities for gnss_preprocess."""

from .rinex import (RinexNavReader, RinexObsReader, eph_to_frame, frames_to_blocks,
                    geph_to_frame, gtime_to_timestamp, nav_to_blocks, obs_to_block,
                    obs_to_blocks, read_nav, read_obs)

__all__ = [
    'RinexNavReader', 'read_nav', 'nav_to_blocks', 'frames_to_blocks',
    'eph_to_frame', 'geph_to_frame', 'gtime_to_timestamp',
    'RinexObsReader', 'read_obs', 'obs_to_block', 'obs_to_blocks',
]
