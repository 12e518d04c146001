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

"""Compiled numeric kernels for segmentation and windowed interpolation"""

import numpy as np
from numba import njit


@njit(cache=True)
def segment_breaks(times, max_gap):
    """
    Indices where a new segment starts.

    Parameters
    ----------
    times : np.ndarray
        Strictly increasing sample times (seconds)
    max_gap : float
        Largest gap allowed inside a segment

    Returns
    -------
    np.ndarray
        int64 indices ``i`` with ``times[i] - times[i-1] > max_gap``
    """
    n = times.shape[0]
    out = np.empty(max(n - 1, 0), dtype=np.int64)
    count = 0
    for i in range(1, n):
        if times[i] - times[i - 1] > max_gap:
            out[count] = i
            count += 1
    return out[:count]


@njit(cache=True)
def neville(x, y, x0):
    """
    Neville's algorithm for polynomial interpolation

    Parameters
    ----------
    x : np.ndarray
        Sample times
    y : np.ndarray
        Sample values
    x0 : float
        Point at which to interpolate

    Returns
    -------
    float
        Value of the interpolating polynomial at x0
    """
    n = x.shape[0]
    if n == 0:
        return np.nan
    p = y.copy()
    for j in range(1, n):
        for i in range(n - j):
            p[i] = ((x0 - x[i]) * p[i + 1] - (x0 - x[i + j]) * p[i]) / (x[i + j] - x[i])
    return p[0]


@njit(cache=True)
def nearest_window(times, t, size):
    """Start index of the ``size`` consecutive samples closest to ``t``"""
    n = times.shape[0]
    if size >= n:
        return 0
    start = np.searchsorted(times, t) - size // 2
    if start < 0:
        start = 0
    if start > n - size:
        start = n - size
    # slide toward the side whose outer sample is nearer
    while start > 0 and t - times[start - 1] < times[start + size - 1] - t:
        start -= 1
    while start < n - size and times[start + size] - t < t - times[start]:
        start += 1
    return start


@njit(cache=True)
def step_value(times, values, t):
    """Zero-order hold: value of the latest sample at or before ``t``"""
    i = np.searchsorted(times, t, side='right') - 1
    if i < 0:
        i = 0
    return values[i]
