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

"""GNSS Time Scales and Leap-Second Aware Conversion

This module provides the time model every later stage works in:

- ``TimeScale``: GPS, Galileo, BeiDou, QZSS, NavIC, GLONASS, UTC and TAI
- ``TimeStamp``: seconds since the 1980-01-06 00:00:00 calendar label, read on
  the clock of its own scale
- ``LeapSecondTable``: immutable TAI-UTC history with a validity window
- ``TimeModel``: conversion between scales and canonical ordering

All conversions go through TAI. Scales locked to TAI (GPST, GST, QZSST, IRNWT,
BDT) use fixed offsets; UTC and GLONASST need the leap-second table.
"""

import bisect
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

from .constants import (BDT0, GLO_UTC_OFFSET, GPST0, GST0, LEAP_SECONDS_HISTORY,
                        LEAP_SECONDS_VALID_UNTIL, NTP_EPOCH, SECONDS_PER_WEEK,
                        TAI_BDT_OFFSET, TAI_GPST_OFFSET, TIME_REFERENCE,
                        TIME_TOLERANCE)
from .errors import OutOfTableRange, UnsupportedScale


class TimeScale(Enum):
    """Supported time scales"""
    GPST = "GPST"
    GST = "GST"
    BDT = "BDT"
    QZSST = "QZSST"
    IRNWT = "IRNWT"
    GLONASST = "GLONASST"
    UTC = "UTC"
    TAI = "TAI"

    @classmethod
    def parse(cls, tag: Union['TimeScale', str]) -> 'TimeScale':
        """Resolve a scale tag (enum member, name or RINEX time system code)"""
        if isinstance(tag, TimeScale):
            return tag
        if not isinstance(tag, str):
            raise UnsupportedScale(tag)
        try:
            return _SCALE_ALIASES[tag.strip().upper()]
        except KeyError:
            raise UnsupportedScale(tag) from None

    @property
    def uses_leap_seconds(self) -> bool:
        return self in (TimeScale.UTC, TimeScale.GLONASST)


_SCALE_ALIASES = {
    'GPST': TimeScale.GPST, 'GPS': TimeScale.GPST, 'G': TimeScale.GPST,
    'GST': TimeScale.GST, 'GAL': TimeScale.GST, 'E': TimeScale.GST,
    'BDT': TimeScale.BDT, 'BDS': TimeScale.BDT, 'C': TimeScale.BDT,
    'QZSST': TimeScale.QZSST, 'QZS': TimeScale.QZSST, 'J': TimeScale.QZSST,
    'IRNWT': TimeScale.IRNWT, 'IRN': TimeScale.IRNWT, 'IRNSS': TimeScale.IRNWT,
    'I': TimeScale.IRNWT,
    'GLONASST': TimeScale.GLONASST, 'GLO': TimeScale.GLONASST, 'R': TimeScale.GLONASST,
    'UTC': TimeScale.UTC,
    'TAI': TimeScale.TAI,
}

# TAI - scale for scales locked to atomic time
_TAI_OFFSETS = {
    TimeScale.GPST: TAI_GPST_OFFSET,
    TimeScale.GST: TAI_GPST_OFFSET,
    TimeScale.QZSST: TAI_GPST_OFFSET,
    TimeScale.IRNWT: TAI_GPST_OFFSET,
    TimeScale.BDT: TAI_BDT_OFFSET,
    TimeScale.TAI: 0.0,
}

# Week zero of each scale's own week numbering
_WEEK_EPOCHS = {
    TimeScale.GST: datetime(*GST0),
    TimeScale.IRNWT: datetime(*GST0),
    TimeScale.BDT: datetime(*BDT0),
}


def _label_seconds(dt: datetime) -> float:
    """Seconds from TIME_REFERENCE to a naive calendar label"""
    if dt.tzinfo is not None:
        dt = dt.replace(tzinfo=None)
    return (dt - TIME_REFERENCE).total_seconds()


@dataclass(frozen=True)
class TimeStamp:
    """Instant on a given time scale

    Attributes
    ----------
    seconds : float
        Seconds since the 1980-01-06 00:00:00 label, read on ``scale``'s clock
    scale : TimeScale
        Time scale the reading belongs to

    Timestamps on different scales cannot be ordered directly; convert them
    with ``TimeModel`` first.
    """
    seconds: float
    scale: TimeScale = TimeScale.GPST

    def __post_init__(self):
        object.__setattr__(self, 'seconds', float(self.seconds))
        object.__setattr__(self, 'scale', TimeScale.parse(self.scale))

    @classmethod
    def from_datetime(cls, dt: datetime, scale=TimeScale.GPST) -> 'TimeStamp':
        """Create from a calendar label read on ``scale``"""
        return cls(_label_seconds(dt), scale)

    @classmethod
    def from_week_tow(cls, week: int, tow: float, scale=TimeScale.GPST) -> 'TimeStamp':
        """Create from a week number and time of week in the scale's own numbering"""
        scale = TimeScale.parse(scale)
        week_zero = _WEEK_EPOCHS.get(scale, datetime(*GPST0))
        return cls(_label_seconds(week_zero) + int(week) * SECONDS_PER_WEEK + float(tow), scale)

    def to_datetime(self) -> datetime:
        """Calendar label of this reading (naive, in the timestamp's own scale)"""
        return TIME_REFERENCE + timedelta(seconds=self.seconds)

    def week_tow(self) -> Tuple[int, float]:
        """Week number and time of week in the scale's own numbering"""
        week_zero = _WEEK_EPOCHS.get(self.scale, datetime(*GPST0))
        elapsed = self.seconds - _label_seconds(week_zero)
        week = int(elapsed // SECONDS_PER_WEEK)
        return week, elapsed - week * SECONDS_PER_WEEK

    def isclose(self, other: 'TimeStamp', tol: float = TIME_TOLERANCE) -> bool:
        """Same scale and readings equal within ``tol`` seconds"""
        return self.scale == other.scale and abs(self.seconds - other.seconds) <= tol

    def _check_scale(self, other):
        if self.scale != other.scale:
            raise ValueError(
                f"Cannot compare times with different scales: "
                f"{self.scale.value} and {other.scale.value}")

    def __add__(self, seconds: float) -> 'TimeStamp':
        if isinstance(seconds, (int, float)):
            return TimeStamp(self.seconds + seconds, self.scale)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, TimeStamp):
            self._check_scale(other)
            return self.seconds - other.seconds
        if isinstance(other, (int, float)):
            return TimeStamp(self.seconds - other, self.scale)
        return NotImplemented

    def __lt__(self, other: 'TimeStamp') -> bool:
        if not isinstance(other, TimeStamp):
            return NotImplemented
        self._check_scale(other)
        return self.seconds < other.seconds

    def __le__(self, other: 'TimeStamp') -> bool:
        if not isinstance(other, TimeStamp):
            return NotImplemented
        self._check_scale(other)
        return self.seconds <= other.seconds

    def __gt__(self, other: 'TimeStamp') -> bool:
        if not isinstance(other, TimeStamp):
            return NotImplemented
        self._check_scale(other)
        return self.seconds > other.seconds

    def __ge__(self, other: 'TimeStamp') -> bool:
        if not isinstance(other, TimeStamp):
            return NotImplemented
        self._check_scale(other)
        return self.seconds >= other.seconds

    def __str__(self):
        return f"{self.to_datetime().isoformat(sep=' ')} {self.scale.value}"


@dataclass(frozen=True)
class LeapSecondTable:
    """Immutable TAI-UTC history

    Attributes
    ----------
    starts : tuple of float
        UTC readings (seconds since the reference label) at which each offset begins
    offsets : tuple of int
        TAI - UTC in effect from the matching start
    valid_until : float
        Last UTC reading the table is known to cover
    """
    starts: Tuple[float, ...]
    offsets: Tuple[int, ...]
    valid_until: float

    def __post_init__(self):
        if len(self.starts) != len(self.offsets) or not self.starts:
            raise ValueError("Leap-second table needs matching, non-empty starts and offsets")
        if list(self.starts) != sorted(self.starts):
            raise ValueError("Leap-second table starts must be increasing")

    @classmethod
    def from_history(cls, history: Iterable[Tuple[datetime, int]],
                     valid_until: datetime) -> 'LeapSecondTable':
        """Build from (UTC date, TAI-UTC) pairs"""
        entries = sorted(history)
        return cls(tuple(_label_seconds(dt) for dt, _ in entries),
                   tuple(int(offset) for _, offset in entries),
                   _label_seconds(valid_until))

    @classmethod
    def from_iers_file(cls, path: Union[str, Path]) -> 'LeapSecondTable':
        """Load an IERS/NTP ``leap-seconds.list`` file

        Data lines hold NTP seconds (since 1900-01-01) and TAI-UTC; the
        ``#@`` line holds the expiry date in NTP seconds.
        """
        history = []
        expires = None
        with open(path, 'r') as f:
            for line in f:
                line = line.strip()
                if line.startswith('#@'):
                    expires = NTP_EPOCH + timedelta(seconds=int(line[2:].split()[0]))
                    continue
                if not line or line.startswith('#'):
                    continue
                parts = line.split('#', 1)[0].split()
                history.append((NTP_EPOCH + timedelta(seconds=int(parts[0])), int(parts[1])))
        if not history:
            raise ValueError(f"No leap-second entries found in {path}")
        if expires is None:
            raise ValueError(f"Missing expiry (#@) line in {path}")
        return cls.from_history(history, expires)

    @property
    def first_valid(self) -> float:
        return self.starts[0]

    def _raise_out_of_range(self, utc_seconds: float):
        raise OutOfTableRange(TIME_REFERENCE + timedelta(seconds=utc_seconds),
                              TIME_REFERENCE + timedelta(seconds=self.first_valid),
                              TIME_REFERENCE + timedelta(seconds=self.valid_until))

    def offset_at_utc(self, utc_seconds: float) -> int:
        """TAI - UTC at a UTC reading"""
        if utc_seconds < self.first_valid or utc_seconds > self.valid_until:
            self._raise_out_of_range(utc_seconds)
        return self.offsets[bisect.bisect_right(self.starts, utc_seconds) - 1]

    def offset_at_tai(self, tai_seconds: float) -> int:
        """TAI - UTC at a TAI reading"""
        for start, offset in zip(reversed(self.starts), reversed(self.offsets)):
            if tai_seconds - offset >= start:
                utc_seconds = tai_seconds - offset
                if utc_seconds > self.valid_until:
                    self._raise_out_of_range(utc_seconds)
                return offset
        self._raise_out_of_range(tai_seconds - self.offsets[0])


# Loaded once per process and shared read-only
DEFAULT_LEAP_TABLE = LeapSecondTable.from_history(LEAP_SECONDS_HISTORY,
                                                  LEAP_SECONDS_VALID_UNTIL)


class TimeModel:
    """Converts timestamps between scales and orders them canonically

    Parameters
    ----------
    canonical : TimeScale or str
        Scale every comparison and interpolation happens in
    leap_table : LeapSecondTable, optional
        TAI-UTC history, defaults to the bundled table
    """

    def __init__(self, canonical: Union[TimeScale, str] = TimeScale.GPST,
                 leap_table: Optional[LeapSecondTable] = None):
        self.canonical = TimeScale.parse(canonical)
        self.leap_table = leap_table if leap_table is not None else DEFAULT_LEAP_TABLE

    def to_tai(self, ts: TimeStamp) -> float:
        """TAI reading of a timestamp"""
        scale = TimeScale.parse(ts.scale)
        if scale in _TAI_OFFSETS:
            return ts.seconds + _TAI_OFFSETS[scale]
        utc_seconds = ts.seconds - GLO_UTC_OFFSET if scale is TimeScale.GLONASST else ts.seconds
        return utc_seconds + self.leap_table.offset_at_utc(utc_seconds)

    def from_tai(self, tai_seconds: float, scale: Union[TimeScale, str]) -> TimeStamp:
        """Timestamp on ``scale`` for a TAI reading"""
        scale = TimeScale.parse(scale)
        if scale in _TAI_OFFSETS:
            return TimeStamp(tai_seconds - _TAI_OFFSETS[scale], scale)
        utc_seconds = tai_seconds - self.leap_table.offset_at_tai(tai_seconds)
        if scale is TimeScale.GLONASST:
            return TimeStamp(utc_seconds + GLO_UTC_OFFSET, scale)
        return TimeStamp(utc_seconds, scale)

    def convert(self, ts: TimeStamp, scale: Union[TimeScale, str]) -> TimeStamp:
        """Convert a timestamp to another scale"""
        scale = TimeScale.parse(scale)
        if TimeScale.parse(ts.scale) is scale:
            return ts
        return self.from_tai(self.to_tai(ts), scale)

    def to_canonical(self, ts: TimeStamp) -> TimeStamp:
        """Convert to the canonical scale (identity when already canonical)"""
        return self.convert(ts, self.canonical)

    def canonical_seconds(self, ts: TimeStamp) -> float:
        return self.to_canonical(ts).seconds

    def compare(self, a: TimeStamp, b: TimeStamp) -> int:
        """-1, 0 or 1 ordering of two timestamps after canonicalization"""
        diff = self.canonical_seconds(a) - self.canonical_seconds(b)
        if abs(diff) <= TIME_TOLERANCE:
            return 0
        return -1 if diff < 0 else 1

    def sort(self, stamps: Sequence[TimeStamp]):
        """Canonical timestamps in increasing order (stable)"""
        return sorted((self.to_canonical(ts) for ts in stamps), key=lambda ts: ts.seconds)


DEFAULT_TIME_MODEL = TimeModel()


def to_canonical(ts: TimeStamp, model: Optional[TimeModel] = None) -> TimeStamp:
    """Convert ``ts`` to the canonical scale of ``model`` (GPST by default)"""
    return (model or DEFAULT_TIME_MODEL).to_canonical(ts)


def compare(a: TimeStamp, b: TimeStamp, model: Optional[TimeModel] = None) -> int:
    """Order two timestamps on any scales"""
    return (model or DEFAULT_TIME_MODEL).compare(a, b)
