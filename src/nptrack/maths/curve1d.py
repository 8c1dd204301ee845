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

"""
Module Name: curve1d
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-20
Last updated: 2025-10-02

Summary:
    Scalar interpolation across one span from 4 control values.

    The span goes from `p1` (t=0) to `p2` (t=1); `p0` and `p3` are the values
    before and after the span, used to shape the transition.

    Curve1D (abstract)
    ├── LinearCurve1D     # straight line from p1 to p2
    └── BezierCurve1D     # Catmull-Rom tangents as a cubic Bézier
"""

__all__ = ["Curve1D", "LinearCurve1D", "BezierCurve1D", "get_curve1d"]

import numpy as np

from ..constants import LINEAR, BEZIER, BANK_MODES

# ====================================================================================================
# Curve1D
# ====================================================================================================

class Curve1D:

    def __init__(self, p0, p1, p2, p3):
        self.p0 = float(p0)
        self.p1 = float(p1)
        self.p2 = float(p2)
        self.p3 = float(p3)

    def __repr__(self):
        return f"<{type(self).__name__} {self.p0:.2f}, [{self.p1:.2f} -> {self.p2:.2f}], {self.p3:.2f}>"

    def evaluate(self, t):
        raise NotImplementedError("Curve1D> evaluate must be overloaded")

    def __call__(self, t):
        return self.evaluate(t)

# ----------------------------------------------------------------------------------------------------
# Linear
# ----------------------------------------------------------------------------------------------------

class LinearCurve1D(Curve1D):

    def evaluate(self, t):
        t = np.asarray(t, dtype=float)
        return self.p1 + (self.p2 - self.p1)*t

# ----------------------------------------------------------------------------------------------------
# Cubic Bézier
# ----------------------------------------------------------------------------------------------------

class BezierCurve1D(Curve1D):
    """
    Cubic interpolation whose end slopes are the Catmull-Rom slopes.

    The handles are `p1 + (p2 - p0)/6` and `p2 - (p3 - p1)/6`, which gives
    a continuous first derivative when consecutive spans share their values.
    """

    def evaluate(self, t):
        t = np.asarray(t, dtype=float)

        h0 = self.p1 + (self.p2 - self.p0)/6
        h1 = self.p2 - (self.p3 - self.p1)/6

        omt = 1.0 - t
        return (omt**3*self.p1 +
                3.0*omt**2*t*h0 +
                3.0*omt*t**2*h1 +
                t**3*self.p2)

# ====================================================================================================
# Factory
# ====================================================================================================

def get_curve1d(mode, p0, p1, p2, p3):
    """ Interpolator for a bank interpolation mode ('LINEAR' or 'BEZIER'). """
    if mode == LINEAR:
        return LinearCurve1D(p0, p1, p2, p3)
    elif mode == BEZIER:
        return BezierCurve1D(p0, p1, p2, p3)
    else:
        raise ValueError(f"Unknown interpolation mode '{mode}', valid modes are {BANK_MODES}")
