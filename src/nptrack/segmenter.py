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
Module Name: segmenter
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-23
Last updated: 2025-10-02

Summary:
    Walk the curves of a track and break them into segments.

    The walk starts at the track origin, facing +Z. Each curve appends its
    segments; a terminal segment marks the end of the path.

    - ARC curves change pitch and yaw by constant steps.
    - BEZIER curves are sampled at regular distances along a cubic Bézier from
      the current position to the curve end position. Pitch and yaw come from
      the Bézier tangent. The curve length becomes the number of segments times
      the segment length.

    In both cases the bank angle is interpolated from the bank angles of the
    curves i-2 to i+1, so that banking changes smoothly across curves.

    Direction deltas are the changes from each segment to the next one.

    A BEZIER curve shorter than half a segment has no segment: it only
    changes the direction of the walk.

    When all the curves are valid, the walk updates their derived values:
    `length` of BEZIER curves and `end_position` of ARC curves. Nothing is
    changed when a curve is invalid.
"""

__all__ = ["generate_segments"]

import numpy as np

from .constants import bfloat, ARC, BEZIER, EXTRAPOLATE
from .maths import (local_angle, forward_vector, direction_from_tangent,
                    get_curve1d, CubicBezier)
from .segment import SegmentArray

# ====================================================================================================
# Bank interpolation
# ====================================================================================================

def _bank_curve(curves, index, mode):
    """ Bank interpolator for the curve at `index`: from the bank of curve index-1 to its own bank. """
    def bank(i):
        return float(local_angle(curves[i].angles[2])) if 0 <= i < len(curves) else 0.0

    return get_curve1d(mode, bank(index - 2), bank(index - 1), bank(index), bank(index + 1))

# ====================================================================================================
# Arc
# ====================================================================================================

def _arc_segments(curve, pos, dir, bank_curve, seg_length):

    count = max(1, int(np.ceil(curve.length/seg_length - 1e-9)))

    # Constant pitch and yaw change per segment
    delta = np.array((
        local_angle(curve.angles[0] - dir[0]),
        curve.angles[1],
        0.0), dtype=bfloat)/curve.length*seg_length

    d = np.arange(count, dtype=bfloat)*seg_length
    banks = bank_curve(np.minimum(d/curve.length, 1.0))

    positions = np.empty((count, 3), dtype=bfloat)
    directions = np.empty((count, 3), dtype=bfloat)
    for i in range(count):
        positions[i] = pos
        directions[i] = (dir[0], dir[1], banks[i])

        # Bank doesn't change the forward axis
        pos = pos + forward_vector(dir)*seg_length
        dir = dir + delta

    dir[2] = bank_curve(1.0)

    return positions, directions, pos, dir

# ====================================================================================================
# Bézier
# ====================================================================================================

def _bezier_segments(curve, pos, dir, bank_curve, seg_length, tolerance):

    end_dir = np.array((
        curve.angles[0],
        dir[1] + curve.angles[1],
        bank_curve(1.0)), dtype=bfloat)

    p3 = curve.end_position
    dist = np.linalg.norm(p3 - pos)

    bezier = CubicBezier(
        pos,
        pos + forward_vector(dir)*(dist*curve.start_control_pt_dist),
        p3 - forward_vector(end_dir)*(dist*curve.end_control_pt_dist),
        p3)

    # Regular distances along the curve
    table = bezier.arc_length_table(tolerance)
    count = int(round(table.length/seg_length))

    # Shorter than half a segment: the curve is only a change of direction
    if count == 0:
        return np.empty((0, 3), dtype=bfloat), np.empty((0, 3), dtype=bfloat), p3.copy(), end_dir

    t = table.parameters(np.arange(count, dtype=bfloat)*(table.length/count))

    positions = bezier.evaluate(t)
    pitch, yaw = direction_from_tangent(bezier.tangent(t))

    # Keep yaw continuous with the walk rather than wrapped in [-180, 180[
    prev = dir[1]
    for i in range(count):
        yaw[i] = prev + local_angle(yaw[i] - prev)
        prev = yaw[i]

    directions = np.stack((pitch, yaw, bank_curve(np.arange(count, dtype=bfloat)/count)), axis=-1)

    return positions, directions, p3.copy(), end_dir

# ====================================================================================================
# Main
# ====================================================================================================

def generate_segments(curves, segment_length, bank_mode=BEZIER, overrun=EXTRAPOLATE,
                      seam_offset=0.001, tolerance=1e-4):
    """
    Break the curves into segments.

    Parameters
    ----------
    curves : list of Curve
        Curves in track order. Their `index` must be their position in the list.
    segment_length : float
        Length of the segments.
    bank_mode : str, default 'BEZIER'
        Bank interpolation: 'LINEAR' or 'BEZIER'.
    overrun : str, default 'EXTRAPOLATE'
        Overrun policy of the returned array.
    seam_offset : float, default 0.001
        Vertical offset of looped segments.
    tolerance : float, default 1e-4
        Bézier arc-length tolerance.

    Returns
    -------
    SegmentArray
    """
    if not segment_length > 0:
        raise ValueError(f"Segment length must be positive, not {segment_length}")

    for i, curve in enumerate(curves):
        if curve.index != i:
            raise ValueError(f"Curve '{curve.name}' has index {curve.index} at position {i}")
        if curve.curve_type == ARC and not curve.length > 0:
            raise ValueError(f"Arc curve {curve.index} must have a positive length, not {curve.length}")

    pos = np.zeros(3, dtype=bfloat)
    dir = np.zeros(3, dtype=bfloat)

    all_positions = []
    all_directions = []
    all_owners = []
    ends = []

    for i, curve in enumerate(curves):

        bank_curve = _bank_curve(curves, i, bank_mode)

        if curve.curve_type == ARC:
            positions, directions, pos, dir = _arc_segments(curve, pos, dir, bank_curve, segment_length)
        else:
            positions, directions, pos, dir = _bezier_segments(curve, pos, dir, bank_curve, segment_length, tolerance)

        all_positions.append(positions)
        all_directions.append(directions)
        all_owners.append(np.full(len(positions), i))
        ends.append(pos)

    # Terminal segment
    all_positions.append(pos[None])
    all_directions.append(dir[None])
    all_owners.append(np.array([max(0, len(curves) - 1)]))

    positions = np.concatenate(all_positions)
    directions = np.concatenate(all_directions)
    owners = np.concatenate(all_owners)

    deltas = np.zeros_like(directions)
    deltas[:-1] = local_angle(directions[1:] - directions[:-1])

    # Derived values, once all the curves are known to be valid
    for curve, curve_positions, end in zip(curves, all_positions, ends):
        if curve.curve_type == ARC:
            curve.end_position = end
        else:
            curve.length = len(curve_positions)*segment_length

    return SegmentArray(positions, directions, deltas, owners, curves, segment_length,
                        overrun=overrun, seam_offset=seam_offset)
