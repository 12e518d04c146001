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

"""Per-satellite epoch series.

The builder groups normalized records by satellite, orders them in canonical
time, drops repeated epochs (the first one seen is kept) and splits each series
into segments wherever consecutive epochs are further apart than the gap
threshold. Interpolation never crosses a segment boundary.
"""

import dataclasses
import logging
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..config import PreprocessConfig
from ..core.constants import TIME_TOLERANCE
from ..core.records import EpochRecord
from ..core.satellite import SatelliteId
from ..core.time import TimeModel
from ..diagnostics import DiagnosticKind, Diagnostics
from .kernels import segment_breaks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """Contiguous run of a series without an over-threshold gap

    ``start``/``stop`` index the series records like a slice.
    """
    index: int
    start: int
    stop: int
    t_start: float
    t_end: float

    @property
    def n_samples(self) -> int:
        return self.stop - self.start

    @property
    def span(self) -> float:
        return self.t_end - self.t_start

    def contains(self, t: float) -> bool:
        return self.t_start <= t <= self.t_end

    def distance(self, t: float) -> float:
        """Seconds from ``t`` to the segment's span (0 inside)"""
        if t < self.t_start:
            return self.t_start - t
        if t > self.t_end:
            return t - self.t_end
        return 0.0


def gap_threshold(times: np.ndarray, multiplier: float,
                  max_gap: Optional[float] = None) -> float:
    """Gap above which a series is split

    An absolute ``max_gap`` wins; otherwise ``multiplier`` times the median
    sampling interval. Series with fewer than two samples are never split.
    """
    if max_gap is not None:
        return float(max_gap)
    if times.shape[0] < 2:
        return np.inf
    return float(multiplier * np.median(np.diff(times)))


def channel_units(sat: SatelliteId, records: Iterable[EpochRecord]) -> Dict[str, str]:
    """Unit of each channel across records, in first-seen order

    Raises
    ------
    ValueError
        If a channel is tagged with two different units
    """
    units: Dict[str, str] = {}
    for rec in records:
        for name, param in rec.channels.items():
            expected = units.setdefault(name, param.unit)
            if param.unit != expected:
                raise ValueError(f"{sat} {name}: mixed units {expected!r} and {param.unit!r}")
    return units


class SatelliteSeries:
    """Time-ordered records of one satellite

    Parameters
    ----------
    sat : SatelliteId
    records : sequence of EpochRecord
        Records in strictly increasing canonical time
    max_gap_multiplier : float
        Split threshold as a multiple of the median sampling interval
    max_gap : float, optional
        Absolute split threshold (seconds)

    Raises
    ------
    ValueError
        If the records are empty, belong to another satellite, mix time scales,
        tag one channel with different units or are not strictly increasing in time
    """

    def __init__(self, sat: SatelliteId, records: Sequence[EpochRecord],
                 max_gap_multiplier: float = 2.0, max_gap: Optional[float] = None):
        if not records:
            raise ValueError(f"{sat}: series needs at least one record")
        scale = records[0].time.scale
        for rec in records:
            if rec.sat != sat:
                raise ValueError(f"{sat}: record for {rec.sat} in series")
            if rec.time.scale != scale:
                raise ValueError(f"{sat}: records on mixed time scales")
        units = channel_units(sat, records)

        self.sat = sat
        self.records: Tuple[EpochRecord, ...] = tuple(records)
        self.scale = scale
        self.units: Mapping[str, str] = MappingProxyType(units)
        self.times = np.array([rec.time.seconds for rec in self.records], dtype=np.float64)
        self.times.setflags(write=False)
        if np.any(np.diff(self.times) <= 0):
            raise ValueError(f"{sat}: record times must be strictly increasing")

        self.threshold = gap_threshold(self.times, max_gap_multiplier, max_gap)
        breaks = segment_breaks(self.times, self.threshold)
        self.segments: Tuple[Segment, ...] = self._build_segments(breaks)

    def _build_segments(self, breaks) -> Tuple[Segment, ...]:
        bounds = [0] + [int(b) for b in breaks] + [len(self.records)]
        return tuple(
            Segment(i, lo, hi, float(self.times[lo]), float(self.times[hi - 1]))
            for i, (lo, hi) in enumerate(zip(bounds[:-1], bounds[1:])))

    @property
    def gaps(self) -> np.ndarray:
        """Time gap between each pair of adjacent records"""
        return np.diff(self.times)

    @property
    def median_interval(self) -> float:
        if len(self.records) < 2:
            return np.nan
        return float(np.median(self.gaps))

    @property
    def is_segmented(self) -> bool:
        return len(self.segments) > 1

    @property
    def boundaries(self) -> List[int]:
        """Record indices where a new segment starts"""
        return [seg.start for seg in self.segments[1:]]

    @property
    def channels(self) -> List[str]:
        """Channel names carried by any record, in first-seen order"""
        names = {}
        for rec in self.records:
            for name in rec.channels:
                names.setdefault(name, None)
        return list(names)

    def values(self, channel: str) -> np.ndarray:
        """Channel values per record (NaN where a record lacks the channel)"""
        return np.array([rec.channel_value(channel) for rec in self.records], dtype=np.float64)

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __repr__(self):
        return (f"SatelliteSeries(sat={self.sat}, records={len(self.records)}, "
                f"segments={len(self.segments)})")


class EpochSeriesBuilder:
    """Groups normalized records into per-satellite series

    Parameters
    ----------
    config : PreprocessConfig, optional
    time_model : TimeModel, optional
        Defaults to the configured canonical scale
    """

    def __init__(self, config: Optional[PreprocessConfig] = None,
                 time_model: Optional[TimeModel] = None):
        self.config = config or PreprocessConfig()
        self.time_model = time_model or self.config.time_model()

    def ingest(self, records: Iterable[EpochRecord],
               diagnostics: Optional[Diagnostics] = None) -> Dict[SatelliteId, SatelliteSeries]:
        """Build one series per satellite

        Parameters
        ----------
        records : iterable of EpochRecord
            Records in arrival order; arrival order decides which of two
            records with the same epoch is kept
        diagnostics : Diagnostics, optional
            Receives ``DUPLICATE_DROPPED``, ``REJECTED_RECORD`` and
            ``SEGMENT_BOUNDARY`` entries

        Returns
        -------
        dict
            SatelliteSeries keyed by SatelliteId, in satellite order
        """
        if diagnostics is None:
            diagnostics = Diagnostics()

        grouped: Dict[SatelliteId, List[EpochRecord]] = defaultdict(list)
        for rec in records:
            grouped[rec.sat].append(self._canonical(rec))

        result = {}
        n_records = 0
        for sat in sorted(grouped):
            kept = self._drop_duplicates(sat, grouped[sat], diagnostics)
            kept = self._drop_unit_conflicts(sat, kept, diagnostics)
            series = SatelliteSeries(sat, kept, self.config.max_gap_multiplier,
                                     self.config.max_gap)
            for seg in series.segments[1:]:
                gap = seg.t_start - float(series.times[seg.start - 1])
                diagnostics.add(DiagnosticKind.SEGMENT_BOUNDARY,
                                f"gap of {gap:.1f} s exceeds {series.threshold:.1f} s",
                                sat=sat, time=series.records[seg.start].time,
                                gap=gap, threshold=series.threshold, segment=seg.index)
            result[sat] = series
            n_records += len(series)

        logger.info("Built %d series from %d records (%d duplicates dropped, %d boundaries)",
                    len(result), n_records,
                    diagnostics.count(DiagnosticKind.DUPLICATE_DROPPED),
                    diagnostics.count(DiagnosticKind.SEGMENT_BOUNDARY))
        return result

    def combine(self, current: Mapping[SatelliteId, SatelliteSeries],
                following: Mapping[SatelliteId, SatelliteSeries],
                diagnostics: Optional[Diagnostics] = None) -> Dict[SatelliteId, SatelliteSeries]:
        """Merge two series mappings (e.g. consecutive daily files)

        Records of ``current`` take precedence on repeated epochs.
        """
        records = [rec for series in current.values() for rec in series.records]
        records += [rec for series in following.values() for rec in series.records]
        return self.ingest(records, diagnostics)

    def _canonical(self, rec: EpochRecord) -> EpochRecord:
        stamp = self.time_model.to_canonical(rec.time)
        if stamp is rec.time:
            return rec
        return dataclasses.replace(rec, time=stamp)

    @staticmethod
    def _drop_unit_conflicts(sat: SatelliteId, records: List[EpochRecord],
                             diagnostics: Diagnostics) -> List[EpochRecord]:
        # the unit of the earliest record carrying a channel is authoritative
        units: Dict[str, str] = {}
        kept = []
        for rec in records:
            conflict = None
            for name, param in rec.channels.items():
                expected = units.get(name, param.unit)
                if param.unit != expected:
                    conflict = (name, param.unit, expected)
                    break
            if conflict is not None:
                name, unit, expected = conflict
                diagnostics.add(DiagnosticKind.REJECTED_RECORD,
                                f"{name} in {unit!r}, series uses {expected!r}",
                                sat=sat, time=rec.time, error='InconsistentRecord',
                                channel=name, unit=unit, expected=expected)
                continue
            for name, param in rec.channels.items():
                units.setdefault(name, param.unit)
            kept.append(rec)
        return kept

    @staticmethod
    def _drop_duplicates(sat: SatelliteId, records: List[EpochRecord],
                         diagnostics: Diagnostics) -> List[EpochRecord]:
        # sorted() is stable, so equal epochs stay in arrival order
        ordered = sorted(records, key=lambda rec: rec.time.seconds)
        kept = [ordered[0]]
        for rec in ordered[1:]:
            first = kept[-1]
            if rec.time.seconds - first.time.seconds <= TIME_TOLERANCE:
                identical = rec.channels == first.channels
                diagnostics.add(DiagnosticKind.DUPLICATE_DROPPED,
                                "duplicate epoch, keeping first record",
                                sat=sat, time=rec.time, identical=identical)
                continue
            kept.append(rec)
        return kept


def combine_series(current: Mapping[SatelliteId, SatelliteSeries],
                   following: Mapping[SatelliteId, SatelliteSeries],
                   config: Optional[PreprocessConfig] = None,
                   diagnostics: Optional[Diagnostics] = None) -> Dict[SatelliteId, SatelliteSeries]:
    """Merge today's and tomorrow's series into continuous series"""
    return EpochSeriesBuilder(config).combine(current, following, diagnostics)


def first_records(series_map: Mapping[SatelliteId, SatelliteSeries]) -> Dict[SatelliteId, EpochRecord]:
    """Earliest record of each satellite"""
    return {sat: series.records[0] for sat, series in series_map.items()}


def last_records(series_map: Mapping[SatelliteId, SatelliteSeries]) -> Dict[SatelliteId, EpochRecord]:
    """Latest record of each satellite"""
    return {sat: series.records[-1] for sat, series in series_map.items()}
