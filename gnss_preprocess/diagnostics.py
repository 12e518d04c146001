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

"""Non-fatal findings collected during a preprocessing run"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .core.satellite import SatelliteId
from .core.time import TimeStamp

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    DUPLICATE_DROPPED = 'duplicate_dropped'
    SEGMENT_BOUNDARY = 'segment_boundary'
    INSUFFICIENT_SAMPLES = 'insufficient_samples'
    UNAVAILABLE_SAMPLE = 'unavailable_sample'
    REJECTED_RECORD = 'rejected_record'
    REJECTED_REQUEST = 'rejected_request'
    UNIT_MISMATCH = 'unit_mismatch'
    SKIPPED_EPOCH = 'skipped_epoch'


@dataclass(frozen=True)
class Diagnostic:
    """One finding, optionally tied to a satellite and an instant"""
    kind: DiagnosticKind
    message: str
    sat: Optional[SatelliteId] = None
    time: Optional[TimeStamp] = None
    details: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __str__(self):
        where = " ".join(str(x) for x in (self.sat, self.time) if x is not None)
        prefix = f"[{self.kind.value}]"
        return f"{prefix} {where}: {self.message}" if where else f"{prefix} {self.message}"


class Diagnostics:
    """Ordered collection of diagnostics"""

    def __init__(self, items: Optional[Iterable[Diagnostic]] = None):
        self._items: List[Diagnostic] = list(items) if items else []

    def add(self, kind: DiagnosticKind, message: str, sat=None, time=None,
            **details) -> Diagnostic:
        diag = Diagnostic(kind, message, sat, time, details)
        self._items.append(diag)
        logger.debug("%s", diag)
        return diag

    def extend(self, other: Iterable[Diagnostic]):
        self._items.extend(other)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self._items if d.kind is kind]

    def count(self, kind: Optional[DiagnosticKind] = None) -> int:
        if kind is None:
            return len(self._items)
        return sum(1 for d in self._items if d.kind is kind)

    def summary(self) -> Dict[str, int]:
        """Number of diagnostics per kind"""
        return dict(Counter(d.kind.value for d in self._items))

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self):
        return f"Diagnostics({self.summary()})"
