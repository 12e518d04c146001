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
gnss_preprocess - GNSS Navigation Data Preprocessing

Turns parsed RINEX navigation data into continuous per-satellite orbit and
clock state and emits fixed-layout SSC (state space correction) records for
numerical consumers.
"""

__version__ = "1.0.0"
__author__ = "gnss_preprocess Development Team"
__title__ = "gnss_preprocess"
__description__ = "GNSS navigation data interpolation and SSC record generation"

from . import logger
from .config import PreprocessConfig
from .core import *
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .nav import *
from .obs import *
from .pipeline import (ObservationPair, ObservationResult, PipelineResult, PreprocessPipeline,
                       process)
from .ssc import *
