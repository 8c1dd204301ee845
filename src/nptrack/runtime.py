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
Module Name: runtime
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-27
Last updated: 2025-10-02

Summary:
    Per curve information used while racing: surface normal, respawn point,
    flags and distance from the track start.

    The helpers find the curve following a given curve and the curve to
    respawn at.

Usage example:
    >>> infos = compute_curve_infos(curves, segments, respawn_height=0.75)
    >>> i = next_curve_index(infos, current)
"""

__all__ = ["CurveRuntimeInfo", "compute_curve_infos", "next_curve_index", "respawn_curve_index"]

from dataclasses import dataclass

import numpy as np

from .constants import UP, FORWARD, ZERO
from .maths import look_rotation, matrix_to_quaternion

# ====================================================================================================
# Runtime info
# ====================================================================================================

@dataclass(frozen=True)
class CurveRuntimeInfo:
    """
    Runtime information of a curve, in track space.

    Attributes
    ----------
    normal : ndarray (3,)
        Up axis in the middle of the curve.
    respawn_position : ndarray (3,)
    respawn_rotation : ndarray (4,)
        Quaternion (x, y, z, w).
    is_jump : bool
    can_respawn : bool
    z_offset : float
        Distance from the track start to the curve start.
    """

    normal: np.ndarray
    respawn_position: np.ndarray
    respawn_rotation: np.ndarray
    is_jump: bool
    can_respawn: bool
    z_offset: float

def _normalized(v):
    n = np.linalg.norm(v)
    return v/n if n > ZERO else v

def compute_curve_infos(curves, segments, respawn_height=0.75, respawn_distance=2.0):
    """
    Runtime information of the curves.

    Parameters
    ----------
    curves : list of Curve
    segments : SegmentArray
    respawn_height : float, default 0.75
        Height of the respawn point above the surface.
    respawn_distance : float, default 2.0
        Distance from the curve start to the respawn point, limited to the middle of the curve.

    Returns
    -------
    list of CurveRuntimeInfo
    """
    seg_length = segments.length
    infos = []

    for curve in curves:
        r = segments.curve_range(curve.index)
        seg_index, end_index = r.start, r.stop
        mid_index = (seg_index + end_index)//2

        normal = segments.get(mid_index).matrix().apply_vector(UP)

        respawn_index = min(seg_index + int(np.ceil(respawn_distance/seg_length)), mid_index)
        m = segments.get(respawn_index).matrix()
        rotation = look_rotation(_normalized(m.apply_vector(FORWARD)), _normalized(m.apply_vector(UP)))

        infos.append(CurveRuntimeInfo(
            normal           = normal,
            respawn_position = m.apply(UP*respawn_height),
            respawn_rotation = matrix_to_quaternion(rotation),
            is_jump          = curve.is_jump,
            can_respawn      = curve.can_respawn,
            z_offset         = seg_index*seg_length,
        ))

    return infos

# ====================================================================================================
# Progress helpers
# ====================================================================================================

def next_curve_index(infos, index):
    """
    Index of the curve after `index`, jumps excluded.

    The search wraps around the track. If all the other curves are jumps,
    `index` is returned.
    """
    n = len(infos)
    i = index
    while True:
        i = (i + 1) % n
        if i == index or not infos[i].is_jump:
            return i

def respawn_curve_index(infos, index):
    """ The last curve at or before `index` where a respawn is allowed, curve 0 at worst. """
    i = index
    while i > 0 and not infos[i].can_respawn:
        i -= 1
    return i
