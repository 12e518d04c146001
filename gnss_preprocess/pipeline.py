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
End-to-end preprocessing: parsed RINEX blocks in, SSC records out.

Stages run in order: record adapter, epoch series builder, interpolation
engine, SSC converter. Observation runs add the observation adapter and use
each satellite's observation epochs as its request times. Series are built serially; fitting and evaluation then
run per satellite, on a thread pool when ``workers > 1``. Each satellite gets
its own diagnostics list and results are merged in satellite order, so output
does not depend on scheduling.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import PreprocessConfig
from .core.errors import TimeModelError
from .core.records import ObservationBlock, RinexBlock
from .core.satellite import SatelliteId
from .core.time import TimeStamp
from .diagnostics import DiagnosticKind, Diagnostics
from .io.rinex import RinexNavReader, RinexObsReader
from .nav.adapter import RinexRecordAdapter
from .nav.interpolation import InterpolationEngine, Validity
from .nav.series import EpochSeriesBuilder, SatelliteSeries
from .obs.adapter import ObservationAdapter
from .obs.fields import OBS_VECTOR_SIZE
from .obs.record import ObservationRecord
from .ssc.converter import SscConverter, records_to_frame
from .ssc.record import SscRecord, stack_vectors
from .ssc.schema import MAX_CHANNELS
from .ssc.schema import SscSchema, schema_for

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """SSC records of a run plus everything that was dropped or degraded"""
    records: List[SscRecord] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def to_frame(self) -> pd.DataFrame:
        return records_to_frame(self.records)

    def to_array(self, width: Optional[int] = None) -> np.ndarray:
        """Padded channel vectors, one row per record"""
        return stack_vectors(self.records, width)

    def for_satellite(self, sat: Union[SatelliteId, str]) -> List[SscRecord]:
        sat = SatelliteId.parse(sat)
        return [rec for rec in self.records if rec.sat == sat]

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


@dataclass(frozen=True)
class ObservationPair:
    """An observation record and the navigation state sampled at its epoch

    ``state`` is None when the satellite has no navigation series or the
    sample was unavailable and unavailable samples are not emitted.
    """
    observation: ObservationRecord
    state: Optional[SscRecord] = None

    @property
    def sat(self) -> SatelliteId:
        return self.observation.sat

    @property
    def time(self) -> TimeStamp:
        return self.observation.time


@dataclass
class ObservationResult:
    """Observation records paired with navigation state, plus diagnostics"""
    pairs: List[ObservationPair] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def to_array(self, fill: float = 0.0) -> np.ndarray:
        """Observation vector followed by the state's channel vector, one row per pair"""
        width = OBS_VECTOR_SIZE + MAX_CHANNELS
        out = np.full((len(self.pairs), width), fill, dtype=np.float64)
        for i, pair in enumerate(self.pairs):
            out[i, :OBS_VECTOR_SIZE] = pair.observation.to_vector(fill=fill)
            if pair.state is not None:
                out[i, OBS_VECTOR_SIZE:] = pair.state.to_vector(fill=fill)
        return out

    def for_satellite(self, sat: Union[SatelliteId, str]) -> List[ObservationPair]:
        sat = SatelliteId.parse(sat)
        return [pair for pair in self.pairs if pair.sat == sat]

    def __len__(self):
        return len(self.pairs)

    def __iter__(self):
        return iter(self.pairs)


class PreprocessPipeline:
    """Runs the preprocessing stages with one configuration

    Parameters
    ----------
    config : PreprocessConfig, optional
    schema : SscSchema, optional
        Force one SSC schema for every satellite instead of choosing it by
        constellation
    """

    def __init__(self, config: Optional[PreprocessConfig] = None,
                 schema: Optional[SscSchema] = None):
        self.config = config or PreprocessConfig()
        self.time_model = self.config.time_model()
        self.adapter = RinexRecordAdapter(self.time_model)
        self.obs_adapter = ObservationAdapter(self.time_model)
        self.builder = EpochSeriesBuilder(self.config, self.time_model)
        self.engine = InterpolationEngine(self.config, self.time_model)
        self.converter = SscConverter(schema)

    def run(self, blocks: Iterable[RinexBlock], request_times: Iterable[TimeStamp],
            satellites: Optional[Iterable[Union[SatelliteId, str]]] = None) -> PipelineResult:
        """
        Process parsed blocks and sample every satellite at the request times.

        Parameters
        ----------
        blocks : iterable of RinexBlock
            Parsed navigation blocks
        request_times : iterable of TimeStamp
            Sample times on any supported scale
        satellites : iterable, optional
            Restrict output to these satellites

        Returns
        -------
        PipelineResult
            Records ordered by satellite then time, and the run's diagnostics
        """
        diagnostics = Diagnostics()
        series_map = self._series(blocks, satellites, diagnostics)

        requests = self._canonical_requests(request_times, diagnostics)

        sats = list(series_map)
        outputs = self._map(lambda sat: self._process_satellite(series_map[sat], requests), sats)

        result = PipelineResult(diagnostics=diagnostics)
        for sat_records, sat_diagnostics in outputs:
            result.records.extend(sat_records)
            diagnostics.extend(sat_diagnostics)

        logger.info("Processed %d satellites x %d request times: %d records, diagnostics %s",
                    len(sats), len(requests), len(result.records), diagnostics.summary())
        return result

    def run_file(self, filename: str, request_times: Iterable[TimeStamp],
                 satellites=None) -> PipelineResult:
        """Read a navigation file with cssrlib and process it"""
        return self.run(RinexNavReader(filename).blocks(), request_times, satellites)

    def run_observations(self, nav_blocks: Iterable[RinexBlock],
                         obs_blocks: Iterable[ObservationBlock],
                         satellites: Optional[Iterable[Union[SatelliteId, str]]] = None
                         ) -> ObservationResult:
        """
        Pair every observation record with the navigation state at its epoch.

        Parameters
        ----------
        nav_blocks : iterable of RinexBlock
            Parsed navigation blocks
        obs_blocks : iterable of ObservationBlock
            Parsed observation epochs; epochs with a non-OK flag are skipped
        satellites : iterable, optional
            Restrict output to these satellites

        Returns
        -------
        ObservationResult
            Pairs ordered by satellite then epoch, and the run's diagnostics
        """
        diagnostics = Diagnostics()
        series_map = self._series(nav_blocks, satellites, diagnostics)

        wanted = self._wanted(satellites)
        by_sat: Dict[SatelliteId, List[ObservationRecord]] = defaultdict(list)
        for rec in self.obs_adapter.normalize_blocks(obs_blocks, diagnostics):
            if wanted is None or rec.sat in wanted:
                by_sat[rec.sat].append(rec)
        for records in by_sat.values():
            records.sort(key=lambda rec: rec.time.seconds)

        sats = sorted(by_sat)
        outputs = self._map(
            lambda sat: self._pair_satellite(sat, series_map.get(sat), by_sat[sat]), sats)

        result = ObservationResult(diagnostics=diagnostics)
        for sat_pairs, sat_diagnostics in outputs:
            result.pairs.extend(sat_pairs)
            diagnostics.extend(sat_diagnostics)

        logger.info("Paired %d observation records of %d satellites, diagnostics %s",
                    len(result.pairs), len(sats), diagnostics.summary())
        return result

    def run_files(self, nav_file: str, obs_file: str, satellites=None) -> ObservationResult:
        """Read a navigation and an observation file with cssrlib and pair them"""
        return self.run_observations(RinexNavReader(nav_file).blocks(),
                                     RinexObsReader(obs_file).blocks(), satellites)

    @staticmethod
    def _wanted(satellites):
        if satellites is None:
            return None
        return {SatelliteId.parse(sat) for sat in satellites}

    def _series(self, blocks, satellites, diagnostics: Diagnostics):
        records = self.adapter.normalize_blocks(blocks, diagnostics)
        series_map = self.builder.ingest(records, diagnostics)
        wanted = self._wanted(satellites)
        if wanted is not None:
            series_map = {sat: s for sat, s in series_map.items() if sat in wanted}
        return series_map

    def _map(self, func, sats):
        if self.config.workers > 1 and len(sats) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                return list(executor.map(func, sats))
        return [func(sat) for sat in sats]

    def _canonical_requests(self, request_times: Iterable[TimeStamp],
                            diagnostics: Diagnostics) -> List[TimeStamp]:
        requests = []
        for t in request_times:
            try:
                requests.append(self.time_model.to_canonical(t))
            except TimeModelError as e:
                logger.warning("Rejected request time %s: %s", t, e)
                diagnostics.add(DiagnosticKind.REJECTED_REQUEST, str(e), time=t)
        requests.sort(key=lambda ts: ts.seconds)
        return requests

    def _process_satellite(self, series: SatelliteSeries,
                           requests: Sequence[TimeStamp]) -> Tuple[List[SscRecord], Diagnostics]:
        diagnostics = Diagnostics()
        splines = self._fit(series, diagnostics)
        out = []
        for t in requests:
            state = self._state(series, splines, t, diagnostics)
            if state is not None:
                out.append(state)
        return out, diagnostics

    def _pair_satellite(self, sat: SatelliteId, series: Optional[SatelliteSeries],
                        observations: Sequence[ObservationRecord]
                        ) -> Tuple[List[ObservationPair], Diagnostics]:
        diagnostics = Diagnostics()
        if series is None:
            diagnostics.add(DiagnosticKind.UNAVAILABLE_SAMPLE,
                            f"no navigation data for {len(observations)} observation epochs",
                            sat=sat, epochs=len(observations))
            return [ObservationPair(rec) for rec in observations], diagnostics
        splines = self._fit(series, diagnostics)
        pairs = [ObservationPair(rec, self._state(series, splines, rec.time, diagnostics))
                 for rec in observations]
        return pairs, diagnostics

    def _fit(self, series: SatelliteSeries, diagnostics: Diagnostics):
        schema = self.converter.schema or schema_for(series.sat.constellation)
        return self.engine.fit_series(series, schema.channels, diagnostics)

    def _state(self, series: SatelliteSeries, splines, t: TimeStamp,
               diagnostics: Diagnostics) -> Optional[SscRecord]:
        sample = self.engine.sample(splines, t, series.sat, series.segments)
        if sample.validity is Validity.UNAVAILABLE:
            diagnostics.add(DiagnosticKind.UNAVAILABLE_SAMPLE,
                            "no channel available at request time",
                            sat=series.sat, time=sample.time)
            if not self.config.emit_unavailable:
                return None
        return self.converter.convert(sample)


def process(blocks: Iterable[RinexBlock], request_times: Iterable[TimeStamp],
            config: Optional[PreprocessConfig] = None, satellites=None,
            **options) -> PipelineResult:
    """
    Process parsed RINEX blocks into SSC records for the request times.

    Keyword options override fields of ``config`` (e.g. ``spline_order=1``).
    """
    config = config or PreprocessConfig()
    if options:
        config = config.with_options(**options)
    return PreprocessPipeline(config).run(blocks, request_times, satellites)
