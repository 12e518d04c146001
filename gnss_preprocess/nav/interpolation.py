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
Interpolation of per-satellite parameter channels.

Each channel of a series is fitted independently, one model per segment:

- continuous channels, method 'spline': interpolating B-spline of the
  configured order (``scipy.interpolate.make_interp_spline``)
- continuous channels, method 'lagrange': Neville polynomial over the
  ``order + 1`` samples nearest the request time
- discrete channels (issue of data, health, ...): zero-order hold

A request time is resolved to a segment once and that resolution is shared by
every channel of the sample:

- inside a segment's span: in-range
- outside every span but within the extrapolation margin of one: extrapolated
  with that segment's model (nearest segment, earlier one on ties)
- otherwise: unavailable, values are NaN

A channel's own samples may cover only part of the chosen segment. Its flag is
then judged against that coverage with the same margin, so a channel is never
in-range outside the samples it was fitted on.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import make_interp_spline

from ..config import PreprocessConfig
from ..core.channels import ChannelKind, ChannelSpec
from ..core.constants import VALIDITY_EXTRAPOLATED, VALIDITY_IN_RANGE, VALIDITY_UNAVAILABLE
from ..core.errors import InsufficientSamples, UnitMismatch
from ..core.satellite import SatelliteId
from ..core.time import TimeModel, TimeScale, TimeStamp
from ..diagnostics import DiagnosticKind, Diagnostics
from .kernels import nearest_window, neville, step_value
from .series import SatelliteSeries, Segment

logger = logging.getLogger(__name__)


class Validity(Enum):
    """How an interpolated value was obtained"""
    IN_RANGE = 'in-range'
    EXTRAPOLATED = 'extrapolated'
    UNAVAILABLE = 'unavailable'

    @property
    def code(self) -> int:
        return _VALIDITY_CODES[self]

    @property
    def is_available(self) -> bool:
        return self is not Validity.UNAVAILABLE


_VALIDITY_CODES = {
    Validity.IN_RANGE: VALIDITY_IN_RANGE,
    Validity.EXTRAPOLATED: VALIDITY_EXTRAPOLATED,
    Validity.UNAVAILABLE: VALIDITY_UNAVAILABLE,
}


class Resolution(NamedTuple):
    """Segment chosen for a request time"""
    segment: Optional[int]
    validity: Validity


def resolve_time(segments: Sequence[Segment], t: float, margin: float) -> Resolution:
    """Resolve a canonical time (seconds) against a series' segments"""
    best = None
    best_distance = math.inf
    for seg in segments:
        if seg.contains(t):
            return Resolution(seg.index, Validity.IN_RANGE)
        distance = seg.distance(t)
        if distance <= margin and distance < best_distance:
            best, best_distance = seg.index, distance
    if best is None:
        return Resolution(None, Validity.UNAVAILABLE)
    return Resolution(best, Validity.EXTRAPOLATED)


@dataclass(frozen=True)
class InterpolatedSample:
    """Channel values of one satellite at one requested time

    Attributes
    ----------
    sat : SatelliteId
    time : TimeStamp
        Request time in the canonical scale
    values : Mapping[str, float]
        Value per channel (NaN when unavailable)
    flags : Mapping[str, Validity]
        Validity per channel
    validity : Validity
        Time-to-segment resolution shared by all channels; unavailable when
        no channel could be evaluated
    """
    sat: SatelliteId
    time: TimeStamp
    values: Mapping[str, float]
    flags: Mapping[str, Validity]
    validity: Validity

    def __post_init__(self):
        if list(self.values) != list(self.flags):
            raise ValueError("values and flags must cover the same channels")
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))
        object.__setattr__(self, 'flags', MappingProxyType(dict(self.flags)))

    @property
    def channels(self) -> List[str]:
        return list(self.values)

    @property
    def value(self) -> float:
        """Value of a single-channel sample"""
        if len(self.values) != 1:
            raise ValueError(f"Sample has {len(self.values)} channels, expected 1")
        return next(iter(self.values.values()))

    def __getitem__(self, channel: str) -> float:
        return self.values[channel]


class _BSplineModel:
    def __init__(self, t0, bspline):
        self.t0 = t0
        self.bspline = bspline

    def __call__(self, t):
        return float(self.bspline(t - self.t0))


class _WindowModel:
    def __init__(self, t0, x, y, size):
        self.t0 = t0
        self.x = x
        self.y = y
        self.size = size

    def __call__(self, t):
        t = t - self.t0
        start = nearest_window(self.x, t, self.size)
        stop = start + self.size
        return float(neville(self.x[start:stop], self.y[start:stop], t))


class _StepModel:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __call__(self, t):
        return float(step_value(self.x, self.y, t))


@dataclass
class Spline:
    """Fitted models of one channel of one satellite series, one per segment

    Attributes
    ----------
    sat : SatelliteId
    channel : ChannelSpec
    method : str
        'spline', 'lagrange' or 'step'
    scale : TimeScale
        Scale the fitted times are in
    segments : tuple of Segment
    models : dict
        Segment index -> fitted model
    spans : dict
        Segment index -> (first, last) time of the samples the model was fitted on
    failures : dict
        Segment index -> InsufficientSamples for segments that could not be fitted
    """
    sat: SatelliteId
    channel: ChannelSpec
    method: str
    scale: TimeScale
    segments: Sequence[Segment]
    models: Dict[int, object] = field(default_factory=dict)
    spans: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    failures: Dict[int, InsufficientSamples] = field(default_factory=dict)

    @property
    def fitted(self) -> bool:
        return bool(self.models)

    def value_at(self, segment: Optional[int], t: float,
                 margin: float) -> Tuple[float, Validity]:
        """Value and validity at ``t`` (seconds) for a resolved segment

        Validity is measured against the span of the fitted samples: inside it
        in-range, within ``margin`` of it extrapolated, otherwise unavailable
        with a NaN value.
        """
        model = self.models.get(segment)
        if model is None:
            return math.nan, Validity.UNAVAILABLE
        first, last = self.spans[segment]
        distance = max(first - t, t - last, 0.0)
        if distance > margin:
            return math.nan, Validity.UNAVAILABLE
        value = model(t)
        if not np.isfinite(value):
            return math.nan, Validity.UNAVAILABLE
        return value, Validity.IN_RANGE if distance == 0.0 else Validity.EXTRAPOLATED


class InterpolationEngine:
    """Fits and evaluates channel models

    Parameters
    ----------
    config : PreprocessConfig, optional
        Spline order, minimum samples, method and extrapolation margin
    time_model : TimeModel, optional
        Used to move request times to the canonical scale
    """

    def __init__(self, config: Optional[PreprocessConfig] = None,
                 time_model: Optional[TimeModel] = None):
        self.config = config or PreprocessConfig()
        self.time_model = time_model or self.config.time_model()

    @property
    def margin(self) -> float:
        return self.config.extrapolation_margin

    def fit(self, series: SatelliteSeries, channel: Union[ChannelSpec, str]) -> Spline:
        """Fit one channel of a series

        Segments that are too short are left unfitted and recorded in
        ``Spline.failures``; requests resolving to them are unavailable.

        Raises
        ------
        InsufficientSamples
            If no segment of the series has enough samples
        UnitMismatch
            If the series tags the channel with another unit than ``channel``
        ValueError
            If the series is not on the canonical time scale
        """
        spline = self._fit(series, channel)
        if not spline.fitted:
            raise next(iter(spline.failures.values()))
        return spline

    def fit_series(self, series: SatelliteSeries,
                   channels: Optional[Iterable[Union[ChannelSpec, str]]] = None,
                   diagnostics: Optional[Diagnostics] = None) -> Dict[str, Spline]:
        """Fit every channel of a series without raising

        Unfittable segments are reported as ``INSUFFICIENT_SAMPLES`` diagnostics.
        A channel whose series unit disagrees with its spec is reported as
        ``UNIT_MISMATCH`` and left without models, so it samples as unavailable.
        """
        if channels is None:
            channels = series.channels
        splines = {}
        for channel in channels:
            try:
                spline = self._fit(series, channel)
            except UnitMismatch as err:
                logger.warning("%s", err)
                if diagnostics is not None:
                    diagnostics.add(DiagnosticKind.UNIT_MISMATCH, str(err), sat=series.sat,
                                    channel=err.channel, unit=err.unit,
                                    expected=err.expected)
                spec = self._channel_spec(series, channel)
                spline = Spline(series.sat, spec, self.config.method, series.scale,
                                series.segments)
                splines[spec.name] = spline
                continue
            for err in spline.failures.values():
                logger.debug("%s", err)
                if diagnostics is not None:
                    diagnostics.add(DiagnosticKind.INSUFFICIENT_SAMPLES, str(err),
                                    sat=series.sat, channel=err.channel,
                                    segment=err.segment, available=err.available,
                                    required=err.required)
            splines[spline.channel.name] = spline
        return splines

    def evaluate(self, spline: Spline, t: Union[TimeStamp, float]) -> InterpolatedSample:
        """Evaluate a single channel at a request time"""
        return self.sample({spline.channel.name: spline}, t, sat=spline.sat,
                           segments=spline.segments)

    def sample(self, splines: Mapping[str, Spline], t: Union[TimeStamp, float],
               sat: Optional[SatelliteId] = None,
               segments: Optional[Sequence[Segment]] = None) -> InterpolatedSample:
        """Evaluate several channels of one satellite with one shared resolution"""
        if segments is None or sat is None:
            first = next(iter(splines.values()), None)
            if first is None:
                raise ValueError("sample() needs at least one spline or an explicit sat/segments")
            segments = first.segments if segments is None else segments
            sat = first.sat if sat is None else sat

        stamp = self._canonical(t)
        resolution = resolve_time(segments, stamp.seconds, self.margin)

        values = {}
        flags = {}
        for name, spline in splines.items():
            if spline.scale is not stamp.scale:
                raise ValueError(f"{sat} {name}: fitted on {spline.scale.value} times, "
                                 f"requests are on {stamp.scale.value}")
            values[name], flags[name] = spline.value_at(resolution.segment, stamp.seconds,
                                                        self.margin)

        validity = resolution.validity
        if flags and not any(flag.is_available for flag in flags.values()):
            validity = Validity.UNAVAILABLE
        logger.trace("%s %s -> %s (segment %s)", sat, stamp, validity.value, resolution.segment)
        return InterpolatedSample(sat, stamp, values, flags, validity)

    def _canonical(self, t: Union[TimeStamp, float]) -> TimeStamp:
        if isinstance(t, TimeStamp):
            return self.time_model.to_canonical(t)
        return TimeStamp(float(t), self.time_model.canonical)

    def _channel_spec(self, series: SatelliteSeries, channel) -> ChannelSpec:
        if isinstance(channel, ChannelSpec):
            return channel
        return ChannelSpec(channel, series.units.get(channel, ''))

    @staticmethod
    def _check_unit(series: SatelliteSeries, spec: ChannelSpec):
        unit = series.units.get(spec.name)
        if unit and spec.unit and unit != spec.unit:
            raise UnitMismatch(series.sat, spec.name, unit, spec.unit)

    def _fit(self, series: SatelliteSeries, channel) -> Spline:
        canonical = self.time_model.canonical
        if series.scale is not canonical:
            raise ValueError(f"{series.sat}: series is on {series.scale.value}, "
                             f"expected the canonical scale {canonical.value}")
        spec = self._channel_spec(series, channel)
        self._check_unit(series, spec)
        if spec.kind is ChannelKind.DISCRETE:
            method = 'step'
            required = 1
        else:
            method = self.config.method
            required = self.config.required_samples

        spline = Spline(series.sat, spec, method, series.scale, series.segments)
        values = series.values(spec.name)
        for seg in series.segments:
            x = series.times[seg.start:seg.stop]
            y = values[seg.start:seg.stop]
            mask = np.isfinite(y)
            available = int(mask.sum())
            if available < required:
                spline.failures[seg.index] = InsufficientSamples(
                    series.sat, spec.name, available, required, seg.index)
                continue
            x, y = x[mask], y[mask]
            spline.models[seg.index] = self._fit_segment(method, x, y)
            spline.spans[seg.index] = (float(x[0]), float(x[-1]))
        return spline

    def _fit_segment(self, method: str, x: np.ndarray, y: np.ndarray):
        order = self.config.spline_order
        if method == 'step':
            return _StepModel(np.ascontiguousarray(x), np.ascontiguousarray(y))
        t0 = float(x[0])
        if method == 'lagrange':
            return _WindowModel(t0, np.ascontiguousarray(x - t0), np.ascontiguousarray(y),
                                order + 1)
        return _BSplineModel(t0, make_interp_spline(x - t0, y, k=order))
