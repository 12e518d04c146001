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

"""Thin wrappers around cssrlib.rinex.

cssrlib decodes navigation files into ``Eph`` (Keplerian) and ``Geph``
(GLONASS) objects and observation files into ``Obs`` epochs, all in GPST.
These helpers reshape them into ``RinexBlock`` and ``ObservationBlock`` values
for the adapters.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from cssrlib.gnss import Nav, gtime_t, rSigRnx, sat2id, sat2prn, time2gpst, uTYP
from cssrlib.rinex import rnxdec

from ..core.records import EphemerisFrame, Observation, ObservationBlock, RinexBlock
from ..core.time import TimeScale, TimeStamp
from ..obs.fields import ssi_from_snr

logger = logging.getLogger(__name__)

# cssrlib stores GLONASS state vectors in metres; frames carry them in the
# kilometre units of the RINEX file and the GLONASS channel specs
GLONASS_UNITS = {
    'satPosX': 'km', 'satPosY': 'km', 'satPosZ': 'km',
    'velX': 'km/s', 'velY': 'km/s', 'velZ': 'km/s',
    'accelX': 'km/s^2', 'accelY': 'km/s^2', 'accelZ': 'km/s^2',
}
M_PER_KM = 1.0e3


def read_nav(filename: str) -> Nav:
    """Decode a RINEX navigation file into a cssrlib Nav object."""

    nav = Nav()
    decoder = rnxdec()
    decoder.decode_nav(str(filename), nav, append=False)
    return nav


def gtime_to_timestamp(value) -> TimeStamp:
    """cssrlib ``gtime_t`` (GPST) to a GPST TimeStamp"""
    if isinstance(value, gtime_t):
        week, tow = time2gpst(value)
        return TimeStamp.from_week_tow(week, tow, TimeScale.GPST)
    return TimeStamp(float(value), TimeScale.GPST)


def _tow(value) -> float:
    if isinstance(value, gtime_t):
        return float(time2gpst(value)[1])
    return float(value)


def eph_to_frame(eph) -> EphemerisFrame:
    """Reshape a cssrlib Keplerian ephemeris into a frame"""
    return EphemerisFrame(
        sv=sat2id(eph.sat),
        clock_bias=eph.f0,
        clock_drift=eph.f1,
        clock_drift_rate=eph.f2,
        orbits={
            'iode': eph.iode,
            'crs': eph.crs,
            'deltaN': eph.deln,
            'm0': eph.M0,
            'cuc': eph.cuc,
            'e': eph.e,
            'cus': eph.cus,
            'sqrta': math.sqrt(eph.A),
            'toe': eph.toes,
            'cic': eph.cic,
            'omega0': eph.OMG0,
            'cis': eph.cis,
            'i0': eph.i0,
            'crc': eph.crc,
            'omega': eph.omg,
            'omegaDot': eph.OMGd,
            'idot': eph.idot,
            'health': eph.svh,
        },
        epoch=gtime_to_timestamp(eph.toc),
    )


def geph_to_frame(geph) -> EphemerisFrame:
    """Reshape a cssrlib GLONASS ephemeris into a frame

    The RINEX clock bias is ``-TauN`` and the relative frequency bias ``GammaN``.
    Position, velocity and acceleration are converted from metres to kilometres.
    """
    pos, vel, acc = (np.asarray(v, dtype=float) / M_PER_KM for v in (geph.pos, geph.vel, geph.acc))
    return EphemerisFrame(
        sv=sat2id(geph.sat),
        clock_bias=-geph.taun,
        clock_drift=geph.gamn,
        orbits={
            'mrt': _tow(geph.tof),
            'satPosX': pos[0], 'velX': vel[0], 'accelX': acc[0],
            'health': geph.svh,
            'satPosY': pos[1], 'velY': vel[1], 'accelY': acc[1],
            'channel': geph.frq,
            'satPosZ': pos[2], 'velZ': vel[2], 'accelZ': acc[2],
            'ageOp': geph.age,
        },
        units=dict(GLONASS_UNITS),
        epoch=gtime_to_timestamp(geph.toe),
    )


def frames_to_blocks(frames: Iterable[EphemerisFrame]) -> List[RinexBlock]:
    """Group frames by epoch into blocks in time order"""
    by_epoch: Dict[TimeStamp, List[EphemerisFrame]] = defaultdict(list)
    for frame in frames:
        by_epoch[frame.epoch].append(frame)
    return [RinexBlock(epoch, by_epoch[epoch])
            for epoch in sorted(by_epoch, key=lambda ts: ts.seconds)]


def nav_to_blocks(nav: Nav) -> List[RinexBlock]:
    """Structured blocks from a decoded cssrlib Nav object"""
    frames = [eph_to_frame(eph) for eph in getattr(nav, 'eph', [])]
    frames += [geph_to_frame(geph) for geph in getattr(nav, 'geph', [])]
    blocks = frames_to_blocks(frames)
    logger.info("Reshaped %d ephemerides into %d blocks", len(frames), len(blocks))
    return blocks


class RinexNavReader:
    """Reads a navigation file into cssrlib Nav objects or structured blocks."""

    def __init__(self, filename: str):
        self.filename = Path(filename)

    def read(self) -> Nav:
        return read_nav(str(self.filename))

    def blocks(self) -> List[RinexBlock]:
        return nav_to_blocks(self.read())


def _prepare_decoder(decoder: rnxdec) -> None:
    """Select every signal declared in the header, padded to equal counts"""
    decoder.setSignals([])

    for sys, sigs in decoder.sig_map.items():
        for sig in sigs.values():
            decoder.sig_tab.setdefault(sys, {}).setdefault(sig.typ, [])
            if sig not in decoder.sig_tab[sys][sig.typ]:
                decoder.sig_tab[sys][sig.typ].append(sig)

    max_counts = {typ: 0 for typ in decoder.nsig}
    for sigs in decoder.sig_tab.values():
        for typ, sig_list in sigs.items():
            max_counts[typ] = max(max_counts[typ], len(sig_list))

    for typ, count in max_counts.items():
        decoder.nsig[typ] = count

    for sigs in decoder.sig_tab.values():
        for typ, sig_list in sigs.items():
            if not sig_list:
                continue
            while len(sig_list) < max_counts[typ]:
                sig_list.append(sig_list[-1])


def _decode_obs(filename: str, signal_codes: Optional[List[str]] = None):
    decoder = rnxdec()
    if signal_codes:
        decoder.setSignals([rSigRnx(code) for code in signal_codes])
    if decoder.decode_obsh(str(filename)) < 0:
        raise RuntimeError("Unsupported RINEX version")

    if not signal_codes:
        _prepare_decoder(decoder)

    epochs: List = []
    while True:
        obs = decoder.decode_obs()
        if obs is None or len(obs.sat) == 0:
            break
        epochs.append(deepcopy(obs))
    return decoder, epochs


def read_obs(filename: str, signal_codes: Optional[List[str]] = None) -> List:
    """Decode a RINEX observation file into cssrlib Obs epochs."""
    return _decode_obs(filename, signal_codes)[1]


_OBS_ARRAYS = ((uTYP.C, 'P'), (uTYP.L, 'L'), (uTYP.D, 'D'), (uTYP.S, 'S'))


def obs_to_block(obs, position: Optional[Tuple[float, float, float]] = None) -> ObservationBlock:
    """Reshape one cssrlib Obs epoch into an observation block

    Zero entries are unobserved. Code, phase and doppler observables get the
    signal strength indicator derived from the S observable of the same
    signal.
    """
    block = ObservationBlock(gtime_to_timestamp(obs.t), position=position)
    for k, sat in enumerate(obs.sat):
        sys = sat2prn(sat)[0]
        sigs = obs.sig.get(sys, {})
        values: Dict[str, float] = {}
        for typ, attr in _OBS_ARRAYS:
            row = getattr(obs, attr)[k]
            for j, sig in enumerate(sigs.get(typ, [])):
                code = sig.str()
                value = float(row[j])
                if value != 0.0 and code not in values:
                    values[code] = value
        observations = {}
        for code, value in values.items():
            snr = values.get('S' + code[1:])
            if code[0] != 'S' and snr is not None:
                observations[code] = Observation(value, ssi_from_snr(snr))
            else:
                observations[code] = value
        block.observations[sat2id(sat)] = observations
    return block


def obs_to_blocks(epochs: Iterable, position: Optional[Tuple[float, float, float]] = None
                  ) -> List[ObservationBlock]:
    """Observation blocks from decoded cssrlib Obs epochs"""
    blocks = [obs_to_block(obs, position) for obs in epochs]
    logger.info("Reshaped %d observation epochs", len(blocks))
    return blocks


class RinexObsReader:
    """Reads an observation file into cssrlib Obs epochs or observation blocks.

    ``position`` holds the header's approximate receiver position after a read.
    """

    def __init__(self, filename: str, signal_codes: Optional[List[str]] = None):
        self.filename = Path(filename)
        self.signal_codes = signal_codes
        self.position: Optional[Tuple[float, float, float]] = None

    def read(self) -> List:
        decoder, epochs = _decode_obs(str(self.filename), self.signal_codes)
        pos = tuple(float(v) for v in decoder.pos)
        self.position = pos if any(pos) else None
        return epochs

    def blocks(self) -> List[ObservationBlock]:
        epochs = self.read()
        return obs_to_blocks(epochs, self.position)
