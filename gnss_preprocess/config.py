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

"""Preprocessing configuration.

``PreprocessConfig`` holds the values every stage reads: spline order and
minimum sample count, segmentation threshold, extrapolation margin, canonical
time scale, interpolation method and worker count. Instances are immutable
and validated on creation.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

from .core.constants import (DEFAULT_EXTRAPOLATION_MARGIN, DEFAULT_MAX_GAP_MULTIPLIER,
                             DEFAULT_SPLINE_ORDER, INTERPOLATION_METHODS)
from .core.time import LeapSecondTable, TimeModel, TimeScale


@dataclass(frozen=True)
class PreprocessConfig:
    """
    Container for preprocessing configuration.

    Attributes:
        spline_order: Polynomial degree of the fitted splines (1 linear, 3 cubic).
        min_samples: Minimum samples per segment; None means ``spline_order + 1``.
        max_gap_multiplier: A gap larger than this multiple of the series'
            median sampling interval starts a new segment.
        max_gap: Absolute gap threshold in seconds, overriding the multiplier.
        extrapolation_margin: Seconds beyond a segment's span that still
            evaluate (as extrapolated).
        canonical_scale: Time scale all ordering and interpolation happens in.
        method: 'spline' (B-spline fit) or 'lagrange' (windowed Neville).
        workers: Worker threads for per-satellite processing (1 = serial).
        emit_unavailable: Emit SSC records for unavailable samples (values NaN).
    """
    spline_order: int = DEFAULT_SPLINE_ORDER
    min_samples: Optional[int] = None
    max_gap_multiplier: float = DEFAULT_MAX_GAP_MULTIPLIER
    max_gap: Optional[float] = None
    extrapolation_margin: float = DEFAULT_EXTRAPOLATION_MARGIN
    canonical_scale: Union[TimeScale, str] = TimeScale.GPST
    method: str = 'spline'
    workers: int = 1
    emit_unavailable: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'canonical_scale', TimeScale.parse(self.canonical_scale))
        if not isinstance(self.spline_order, int) or self.spline_order < 0:
            raise ValueError(f"spline_order must be a non-negative integer, got {self.spline_order!r}")
        if self.min_samples is not None and self.min_samples < self.spline_order + 1:
            raise ValueError(
                f"min_samples ({self.min_samples}) must be at least spline_order + 1 "
                f"({self.spline_order + 1})")
        if self.max_gap_multiplier <= 1.0:
            raise ValueError(f"max_gap_multiplier must be > 1, got {self.max_gap_multiplier}")
        if self.max_gap is not None and self.max_gap <= 0:
            raise ValueError(f"max_gap must be positive, got {self.max_gap}")
        if self.extrapolation_margin < 0:
            raise ValueError(f"extrapolation_margin must be >= 0, got {self.extrapolation_margin}")
        if self.method not in INTERPOLATION_METHODS:
            raise ValueError(f"method must be one of {INTERPOLATION_METHODS}, got {self.method!r}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def required_samples(self) -> int:
        """Effective minimum number of samples per segment"""
        if self.min_samples is None:
            return self.spline_order + 1
        return self.min_samples

    def time_model(self, leap_table: Optional[LeapSecondTable] = None) -> TimeModel:
        return TimeModel(self.canonical_scale, leap_table)

    def with_options(self, **changes) -> 'PreprocessConfig':
        """Copy with some fields replaced"""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> 'PreprocessConfig':
        """Build from a mapping, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(config))

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out['canonical_scale'] = self.canonical_scale.value
        return out
