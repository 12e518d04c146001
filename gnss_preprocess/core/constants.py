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

"""GNSS Constants and Preprocessing Parameters"""

from datetime import datetime

# Time Constants
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800

# Calendar label all TimeStamp seconds are counted from (in each scale's own reading)
TIME_REFERENCE = datetime(1980, 1, 6, 0, 0, 0)

# Week numbering epochs (calendar labels in the scale's own reading)
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch
GST0 = [1999, 8, 22, 0, 0, 0]  # Galileo time reference epoch
BDT0 = [2006, 1, 1, 0, 0, 0]   # BeiDou time reference epoch

# NTP epoch used by the IERS leap-seconds.list file
NTP_EPOCH = datetime(1900, 1, 1, 0, 0, 0)

# Fixed offsets TAI - scale (seconds)
TAI_GPST_OFFSET = 19.0   # GPS time was UTC at 1980-01-06 when TAI-UTC = 19
TAI_BDT_OFFSET = 33.0    # BDT was UTC at 2006-01-01 when TAI-UTC = 33

# GLONASS Time = UTC + 3 hours (Moscow time)
GLO_UTC_OFFSET = 3 * 3600

# Leap seconds history (UTC date of change, TAI - UTC after the change)
# Source: https://hpiers.obspm.fr/iers/bul/bulc/ntp/leap-seconds.list
LEAP_SECONDS_HISTORY = [
    (datetime(1972, 1, 1), 10),
    (datetime(1972, 7, 1), 11),
    (datetime(1973, 1, 1), 12),
    (datetime(1974, 1, 1), 13),
    (datetime(1975, 1, 1), 14),
    (datetime(1976, 1, 1), 15),
    (datetime(1977, 1, 1), 16),
    (datetime(1978, 1, 1), 17),
    (datetime(1979, 1, 1), 18),
    (datetime(1980, 1, 1), 19),
    (datetime(1981, 7, 1), 20),
    (datetime(1982, 7, 1), 21),
    (datetime(1983, 7, 1), 22),
    (datetime(1985, 7, 1), 23),
    (datetime(1988, 1, 1), 24),
    (datetime(1990, 1, 1), 25),
    (datetime(1991, 1, 1), 26),
    (datetime(1992, 7, 1), 27),
    (datetime(1993, 7, 1), 28),
    (datetime(1994, 7, 1), 29),
    (datetime(1996, 1, 1), 30),
    (datetime(1997, 7, 1), 31),
    (datetime(1999, 1, 1), 32),
    (datetime(2006, 1, 1), 33),
    (datetime(2009, 1, 1), 34),
    (datetime(2012, 7, 1), 35),
    (datetime(2015, 7, 1), 36),
    (datetime(2017, 1, 1), 37),
]

# Expiry of the bundled table (IERS Bulletin C 71)
LEAP_SECONDS_VALID_UNTIL = datetime(2026, 12, 28)

# Tolerance for lossless time round trips (seconds)
TIME_TOLERANCE = 1e-6

# Interpolation defaults
DEFAULT_SPLINE_ORDER = 3            # cubic
DEFAULT_MAX_GAP_MULTIPLIER = 2.0    # gap > 2x median sampling interval splits a series
DEFAULT_EXTRAPOLATION_MARGIN = 300.0  # seconds beyond a segment's span
INTERPOLATION_METHODS = ('spline', 'lagrange')

# Validity codes used in numeric SSC exports
VALIDITY_IN_RANGE = 0
VALIDITY_EXTRAPOLATED = 1
VALIDITY_UNAVAILABLE = 2
