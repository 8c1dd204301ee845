# MIT License
#
# Copyright (c) 2025 Alain Bernard
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the \"Software\"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED \"AS IS\", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

import numpy as np

__all__ = [
    "PI", "TAU", "HALF_PI",
    "bfloat", "bint", "bbool",
    "ZERO", "EPS",
    "ARC", "BEZIER", "CURVE_TYPES",
    "LINEAR", "BANK_MODES",
    "EXTRAPOLATE", "LOOP", "OVERRUN_POLICIES",
    "MAX_SPACING_GROUPS",
    "UP", "FORWARD", "RIGHT",
]

PI = np.pi
TAU = np.pi*2
HALF_PI = np.pi/2

# Track geometry is accumulated over thousands of segments: keep double precision
bfloat = np.float64
bint = np.int64
bbool = np.bool_

ZERO = 1e-6
EPS = ZERO

# Curve types
ARC    = 'ARC'
BEZIER = 'BEZIER'
CURVE_TYPES = (ARC, BEZIER)

# Bank interpolation modes (BEZIER is shared with the curve type tag)
LINEAR = 'LINEAR'
BANK_MODES = (LINEAR, BEZIER)

# Segment overrun policies
EXTRAPOLATE = 'EXTRAPOLATE'
LOOP        = 'LOOP'
OVERRUN_POLICIES = (EXTRAPOLATE, LOOP)

MAX_SPACING_GROUPS = 16

# Track space axes
UP      = np.array((0., 1., 0.), dtype=bfloat)
FORWARD = np.array((0., 0., 1.), dtype=bfloat)
RIGHT   = np.array((1., 0., 0.), dtype=bfloat)
