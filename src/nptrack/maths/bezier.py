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
Module Name: bezier
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-20
Last updated: 2025-10-02

Summary:
    Single cubic Bézier segment: evaluation, derivative and arc-length
    parametrization.

    The arc-length table is built by adaptive subdivision: an interval is split
    until the length of its two half chords doesn't differ from its chord by
    more than the tolerance. The table maps parameter `t` to cumulated
    distance and is then inverted by linear interpolation to get one parameter
    per requested distance.

Usage example:
    >>> bz = CubicBezier(p0, p1, p2, p3)
    >>> table = bz.arc_length_table(1e-4)
    >>> t = table.parameters(np.arange(count)*table.length/count)
"""

__all__ = ["CubicBezier", "ArcLengthTable"]

import numpy as np

from ..constants import bfloat

# ====================================================================================================
# Arc length table
# ====================================================================================================

class ArcLengthTable:
    """
    Monotonic mapping between Bézier parameter and distance along the curve.

    Attributes
    ----------
    t : ndarray (n,)
        Increasing parameters from 0 to 1.
    distance : ndarray (n,)
        Cumulated distances, `distance[0] == 0`.
    """

    def __init__(self, t, distance):
        self.t = np.asarray(t, dtype=bfloat)
        self.distance = np.asarray(distance, dtype=bfloat)

    def __len__(self):
        return len(self.t)

    def __repr__(self):
        return f"<ArcLengthTable: {len(self)} entries, length={self.length:.4f}>"

    @property
    def length(self):
        return float(self.distance[-1])

    def parameters(self, distances):
        """ Parameters at the given distances along the curve (clamped to [0, length]). """
        return np.interp(np.asarray(distances, dtype=bfloat), self.distance, self.t)

# ====================================================================================================
# Cubic Bézier
# ====================================================================================================

class CubicBezier:

    def __init__(self, p0, p1, p2, p3):
        self.points = np.array([p0, p1, p2, p3], dtype=bfloat)
        if self.points.shape != (4, 3):
            raise ValueError(f"CubicBezier> 4 control points of 3 components expected, not {self.points.shape}")

    def __repr__(self):
        return f"<CubicBezier {self.points[0]} -> {self.points[3]}>"

    # ----------------------------------------------------------------------------------------------------
    # Evaluation
    # ----------------------------------------------------------------------------------------------------

    def evaluate(self, t):
        """
        Positions at parameter(s) `t`.

        Parameters
        ----------
        t : float or ndarray (...)

        Returns
        -------
        ndarray (..., 3)
        """
        t = np.asarray(t, dtype=bfloat)[..., None]
        P0, P1, P2, P3 = self.points
        omt = 1.0 - t
        return omt**3*P0 + 3.0*omt**2*t*P1 + 3.0*omt*t**2*P2 + t**3*P3

    def tangent(self, t, normalize=True, eps=1e-12):
        """ First derivative at parameter(s) `t`, optionally normalized. """
        t = np.asarray(t, dtype=bfloat)[..., None]
        P0, P1, P2, P3 = self.points
        omt = 1.0 - t
        d = 3.0*omt**2*(P1 - P0) + 6.0*omt*t*(P2 - P1) + 3.0*t**2*(P3 - P2)

        if normalize:
            n = np.linalg.norm(d, axis=-1, keepdims=True)
            n[n < eps] = 1.0
            d = d/n

        return d

    # ----------------------------------------------------------------------------------------------------
    # Arc length
    # ----------------------------------------------------------------------------------------------------

    def arc_length_table(self, tolerance=1e-4, min_depth=3, max_depth=20):
        """
        Build the arc-length table by adaptive subdivision.

        Parameters
        ----------
        tolerance : float, default 1e-4
            Maximum difference between an interval chord and its two half chords.
        min_depth : int, default 3
            Intervals are always split at least this number of times.
        max_depth : int, default 20
            Intervals are never split more than this number of times.

        Returns
        -------
        ArcLengthTable
        """
        ts = [0.0]
        dists = [0.0]

        # Depth first, left interval popped first so that t increases
        stack = [(0.0, 1.0, 0)]
        while stack:
            t0, t1, depth = stack.pop()
            tm = (t0 + t1)/2
            p0, pm, p1 = self.evaluate(np.array((t0, tm, t1)))

            chord = np.linalg.norm(p1 - p0)
            halves = np.linalg.norm(pm - p0) + np.linalg.norm(p1 - pm)

            if depth >= max_depth or (depth >= min_depth and halves - chord < tolerance):
                ts.append(t1)
                dists.append(dists[-1] + halves)
            else:
                stack.append((tm, t1, depth + 1))
                stack.append((t0, tm, depth + 1))

        return ArcLengthTable(ts, dists)

    def length(self, tolerance=1e-4):
        return self.arc_length_table(tolerance).length
