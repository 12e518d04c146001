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

"""Exception types raised by the preprocessing core.

Errors are grouped by the stage that raises them:

- Time model: ``UnsupportedScale``, ``OutOfTableRange``
- Record adapter: ``InconsistentRecord``, ``UnknownSatellite``
- Interpolation: ``InsufficientSamples``, ``UnitMismatch``
- SSC conversion: ``SchemaMismatch``

Record, time and fit errors also derive from ``ValueError`` so callers that
only know about builtin exceptions still catch them.
"""


class PreprocessError(Exception):
    """Base class for all preprocessing errors"""


class TimeModelError(PreprocessError, ValueError):
    """Time scale conversion failed"""


class UnsupportedScale(TimeModelError):
    """Time scale tag is not recognized"""

    def __init__(self, scale):
        self.scale = scale
        super().__init__(f"Unsupported time scale: {scale!r}")


class OutOfTableRange(TimeModelError):
    """Leap-second table does not cover the requested instant"""

    def __init__(self, instant, first_valid, valid_until):
        self.instant = instant
        self.first_valid = first_valid
        self.valid_until = valid_until
        super().__init__(
            f"Instant {instant} outside leap-second table range "
            f"[{first_valid}, {valid_until}]")


class AdapterError(PreprocessError, ValueError):
    """A parsed RINEX record could not be normalized"""


class InconsistentRecord(AdapterError):
    """Record fields contradict each other (e.g. drift without bias)"""

    def __init__(self, sat, reason):
        self.sat = sat
        self.reason = reason
        super().__init__(f"Inconsistent record for {sat}: {reason}")


class UnknownSatellite(AdapterError):
    """Satellite identifier cannot be resolved"""

    def __init__(self, ident):
        self.ident = ident
        super().__init__(f"Unknown satellite identifier: {ident!r}")


class FitError(PreprocessError, ValueError):
    """Spline fitting failed"""


class InsufficientSamples(FitError):
    """Segment has fewer samples than the spline order requires"""

    def __init__(self, sat, channel, available, required, segment=None):
        self.sat = sat
        self.channel = channel
        self.available = available
        self.required = required
        self.segment = segment
        where = f" segment {segment}" if segment is not None else ""
        super().__init__(
            f"{sat} {channel}{where}: {available} samples, need {required}")


class UnitMismatch(FitError):
    """Series values are tagged with a unit other than the channel declares"""

    def __init__(self, sat, channel, unit, expected):
        self.sat = sat
        self.channel = channel
        self.unit = unit
        self.expected = expected
        super().__init__(
            f"{sat} {channel}: values in {unit!r}, channel expects {expected!r}")


class SchemaMismatch(PreprocessError, TypeError):
    """Record layout or sample channels disagree with the declared schema"""
