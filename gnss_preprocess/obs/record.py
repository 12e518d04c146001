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

"""Fixed-layout observation records"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from ..core.satellite import SatelliteId
from ..core.time import TimeStamp
from .fields import HEADER_SIZE, OBS_VECTOR_SIZE, fields_for, fields_pos


@dataclass(frozen=True, eq=False)
class ObservationRecord:
    """One satellite's observables at one receiver epoch

    Attributes
    ----------
    sat : SatelliteId
    time : TimeStamp
        Epoch in the canonical time scale
    data : np.ndarray
        Shape (n_fields, 2): value and signal strength indicator per
        observable of the constellation's field table, NaN where not observed
        (read-only)
    position : tuple of float, optional
        Approximate receiver position (ECEF, m)
    """
    sat: SatelliteId
    time: TimeStamp
    data: np.ndarray
    position: Optional[Tuple[float, float, float]] = None

    def __post_init__(self):
        n = len(self.codes)
        data = np.array(self.data, dtype=np.float64)
        if data.shape != (n, 2):
            raise ValueError(f"{self.sat}: observation data must have shape ({n}, 2), "
                             f"got {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    @property
    def codes(self) -> Tuple[str, ...]:
        return fields_for(self.sat.constellation)

    @property
    def values(self) -> np.ndarray:
        return self.data[:, 0]

    @property
    def ssi(self) -> np.ndarray:
        return self.data[:, 1]

    def _index(self, code: str) -> int:
        try:
            return self.codes.index(code.upper())
        except ValueError:
            raise KeyError(f"{code} is not an observable of {self.sat.constellation.name}") from None

    def value(self, code: str) -> float:
        return float(self.data[self._index(code), 0])

    def signal_strength(self, code: str) -> float:
        """Signal strength indicator of an observable, NaN if not reported"""
        return float(self.data[self._index(code), 1])

    @property
    def observed(self) -> Dict[str, float]:
        """Observed values keyed by code, in field order"""
        return {code: float(v) for code, v in zip(self.codes, self.values) if np.isfinite(v)}

    def fields_pos(self) -> Dict[str, int]:
        return fields_pos(self.sat.constellation)

    def to_vector(self, width: Optional[int] = None, fill: float = 0.0) -> np.ndarray:
        """Header and value/indicator pairs padded to a fixed width

        Missing values and a missing position are written as ``fill``.
        """
        width = OBS_VECTOR_SIZE if width is None else width
        n = HEADER_SIZE + self.data.size
        if width < n:
            raise ValueError(f"width {width} is smaller than {n} fields")
        out = np.full(width, fill, dtype=np.float64)
        out[0] = self.sat.sat_number
        out[1] = self.time.seconds
        if self.position is not None:
            out[2:HEADER_SIZE] = self.position
        body = self.data.ravel()
        out[HEADER_SIZE:n] = np.where(np.isfinite(body), body, fill)
        return out

    def ss_compare(self, other: 'ObservationRecord') -> np.ndarray:
        """Signal strength (S observables) of this record minus ``other``'s

        NaN where either record lacks the observable.

        Raises
        ------
        ValueError
            If the records belong to different constellations
        """
        if other.sat.constellation is not self.sat.constellation:
            raise ValueError(f"cannot compare {self.sat} with {other.sat}")
        mask = np.array([code.startswith('S') for code in self.codes])
        return self.values[mask] - other.values[mask]

    def __eq__(self, other):
        if not isinstance(other, ObservationRecord):
            return NotImplemented
        return (self.sat == other.sat and self.time == other.time
                and self.position == other.position
                and np.array_equal(self.data, other.data, equal_nan=True))

    __hash__ = None

    def __repr__(self):
        return (f"ObservationRecord(sat={self.sat}, time={self.time}, "
                f"observed={len(self.observed)})")


def stack_observations(records: Iterable[ObservationRecord],
                       width: Optional[int] = None) -> np.ndarray:
    """One padded observation vector per row"""
    width = OBS_VECTOR_SIZE if width is None else width
    rows = [rec.to_vector(width) for rec in records]
    if not rows:
        return np.zeros((0, width), dtype=np.float64)
    return np.vstack(rows)
