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

"""Observation adapter.

Turns parsed observation epochs into ``ObservationRecord`` values laid out by
the constellation's field table. Epochs whose RINEX flag is not OK (power
failure, antenna move, header lines, cycle slip records) are skipped.
Observables outside the field table are ignored.
"""

import logging
from typing import Iterable, List, Mapping, Optional, Union

import numpy as np

from ..core.errors import InconsistentRecord, PreprocessError
from ..core.records import Observation, ObservationBlock
from ..core.satellite import SatelliteId
from ..core.time import TimeModel, TimeStamp
from ..diagnostics import DiagnosticKind, Diagnostics
from ..nav.adapter import _as_float
from .fields import fields_for
from .record import ObservationRecord

logger = logging.getLogger(__name__)

EPOCH_OK = 0


class ObservationAdapter:
    """Normalizes parsed observation epochs

    Parameters
    ----------
    time_model : TimeModel, optional
        Model used to move epochs to the canonical scale (GPST by default)
    """

    def __init__(self, time_model: Optional[TimeModel] = None):
        self.time_model = time_model if time_model is not None else TimeModel()

    def normalize(self, sv, epoch: TimeStamp,
                  observations: Mapping[str, Union[float, Observation]],
                  position=None) -> ObservationRecord:
        """Normalize one satellite's observables at one epoch

        Raises
        ------
        UnknownSatellite
            The satellite identifier cannot be resolved
        InconsistentRecord
            A value or signal strength indicator is not a finite number
        TimeModelError
            The epoch cannot be moved to the canonical scale
        """
        sat = SatelliteId.parse(sv)
        stamp = self.time_model.to_canonical(epoch)
        codes = fields_for(sat.constellation)
        data = np.full((len(codes), 2), np.nan)
        for code, obs in observations.items():
            code = code.upper()
            if code not in codes:
                logger.trace("%s: ignoring observable %s", sat, code)
                continue
            if not isinstance(obs, Observation):
                obs = Observation(obs)
            row = codes.index(code)
            data[row, 0] = _as_float(sat, code, obs.value)
            if obs.ssi is not None:
                ssi = _as_float(sat, f"{code} ssi", obs.ssi)
                if not 0 <= ssi <= 9:
                    raise InconsistentRecord(sat, f"{code} ssi {obs.ssi} outside 0-9")
                data[row, 1] = ssi
        if position is not None:
            position = tuple(_as_float(sat, 'position', v) for v in position)
            if len(position) != 3:
                raise InconsistentRecord(sat, "position must have three components")
        record = ObservationRecord(sat, stamp, data, position)
        logger.trace("normalized %r", record)
        return record

    def normalize_block(self, block: ObservationBlock) -> List[ObservationRecord]:
        """Normalize every satellite of an epoch, raising on the first bad one"""
        if block.flag != EPOCH_OK:
            return []
        return [self.normalize(sv, block.epoch, observations, block.position)
                for sv, observations in block.observations.items()]

    def normalize_blocks(self, blocks: Iterable[ObservationBlock],
                         diagnostics: Diagnostics) -> List[ObservationRecord]:
        """Normalize many epochs, recording skipped epochs and rejected satellites"""
        records = []
        for block in blocks:
            if block.flag != EPOCH_OK:
                diagnostics.add(DiagnosticKind.SKIPPED_EPOCH,
                                f"epoch flag {block.flag}, {len(block)} satellites skipped",
                                time=block.epoch, flag=block.flag)
                continue
            for sv, observations in block.observations.items():
                try:
                    records.append(self.normalize(sv, block.epoch, observations,
                                                  block.position))
                except PreprocessError as e:
                    logger.warning("Rejected observation %s: %s", sv, e)
                    diagnostics.add(DiagnosticKind.REJECTED_RECORD, str(e),
                                    time=block.epoch, error=type(e).__name__)
        logger.info("Normalized %d observation records (%d epochs skipped)",
                    len(records), diagnostics.count(DiagnosticKind.SKIPPED_EPOCH))
        return records
