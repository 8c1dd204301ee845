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
Module Name: segment
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-23
Last updated: 2025-10-02

Summary:
    Track curves are broken down into small segments of a fixed length.

    `SegmentArray` stores the segments as numpy arrays and resolves any
    segment index, including indices past the end of the path ("overrun"):

    - negative indices give the first segment
    - EXTRAPOLATE: the last segment is extended straight ahead
    - LOOP: index `path_count + k` gives segment k, moved down by a small
      offset and belonging to the last curve

Usage example:
    >>> segs = generate_segments(curves, settings)
    >>> seg = segs.get(1000)
    >>> seg.matrix(0.1).apply((0, 0, 0))
"""

__all__ = ["Segment", "SegmentArray", "segment_matrices"]

import numpy as np

from .constants import bfloat, bint, EXTRAPOLATE, LOOP, OVERRUN_POLICIES
from .maths import Transformation, forward_vector

# ====================================================================================================
# Segment to track transformation
# ====================================================================================================

def segment_matrices(positions, directions, deltas, seg_z, length):
    """
    Segment to track transformations.

    The bank angle is interpolated along the segment with the direction delta:
    `bank = direction.z + delta.z*seg_z/length`.

    Parameters
    ----------
    positions, directions, deltas : array_like (..., 3)
    seg_z : float or array_like (...)
        Distance along the segment, in [0, length].
    length : float
        Segment length.

    Returns
    -------
    Transformation
    """
    directions = np.array(directions, dtype=bfloat)
    deltas = np.asarray(deltas, dtype=bfloat)
    f = np.asarray(seg_z, dtype=bfloat)/length

    directions[..., 2] += deltas[..., 2]*f
    return Transformation.from_components(translation=positions, euler=directions)

# ====================================================================================================
# A single segment
# ====================================================================================================

class Segment:

    __slots__ = ("position", "direction", "direction_delta", "length", "curve")

    def __init__(self, position, direction, direction_delta, length, curve):
        self.position = np.asarray(position, dtype=bfloat)
        self.direction = np.asarray(direction, dtype=bfloat)
        self.direction_delta = np.asarray(direction_delta, dtype=bfloat)
        self.length = float(length)
        self.curve = curve

    def __repr__(self):
        index = None if self.curve is None else self.curve.index
        return f"<Segment pos: {np.round(self.position, 3)}, dir: {np.round(self.direction, 2)}, curve: {index}>"

    def matrix(self, seg_z=0.0):
        """ Segment to track transformation at distance `seg_z` along the segment. """
        return segment_matrices(self.position, self.direction, self.direction_delta, seg_z, self.length)

# ====================================================================================================
# Array of segments
# ====================================================================================================

class SegmentArray:
    """
    Ordered segments of a track.

    The last stored segment is the terminal segment: it marks the end of the
    path and belongs to the last curve.

    Attributes
    ----------
    positions, directions, deltas : ndarray (n, 3)
    curve_indices : ndarray (n,) of ints
    curves : list of Curve
    length : float
        Segment length.
    overrun : str
        'EXTRAPOLATE' or 'LOOP'.
    seam_offset : float
        Vertical offset of the looped segments.
    """

    def __init__(self, positions, directions, deltas, curve_indices, curves, length,
                 overrun=EXTRAPOLATE, seam_offset=0.001):

        if overrun not in OVERRUN_POLICIES:
            raise ValueError(f"SegmentArray> invalid overrun policy '{overrun}', valid policies are {OVERRUN_POLICIES}")

        self.positions = np.asarray(positions, dtype=bfloat).reshape(-1, 3)
        self.directions = np.asarray(directions, dtype=bfloat).reshape(-1, 3)
        self.deltas = np.asarray(deltas, dtype=bfloat).reshape(-1, 3)
        self.curve_indices = np.asarray(curve_indices, dtype=bint)
        self.curves = list(curves)
        self.length = float(length)
        self.overrun = overrun
        self.seam_offset = float(seam_offset)

    def __len__(self):
        return len(self.positions)

    def __str__(self):
        return f"<SegmentArray: {self.path_count} segments + terminal, length: {self.path_length:.2f}, overrun: {self.overrun}>"

    def __getitem__(self, index):
        return self.get(index)

    def __iter__(self):
        return (self.get(i) for i in range(len(self)))

    @property
    def path_count(self):
        """ Number of segments, terminal segment excluded. """
        return max(0, len(self) - 1)

    @property
    def path_length(self):
        return self.path_count*self.length

    # ====================================================================================================
    # Locator
    # ====================================================================================================

    def gather(self, indices):
        """
        Segments data for any segment indices.

        Parameters
        ----------
        indices : array_like of ints

        Returns
        -------
        positions, directions, deltas : ndarrays (..., 3)
        curve_indices : ndarray (...) of ints
        """
        n = len(self)
        if n == 0:
            raise IndexError("SegmentArray> no segment to locate")

        idx = np.maximum(np.asarray(indices, dtype=bint), 0)
        shape = idx.shape
        idx = idx.reshape(-1)

        inside = idx < n
        safe = np.where(inside, idx, 0)

        pos = self.positions[safe]
        dirs = self.directions[safe]
        deltas = self.deltas[safe]
        owner = self.curve_indices[safe]

        over = ~inside
        if np.any(over):
            last = n - 1
            if self.overrun == EXTRAPOLATE:
                steps = (idx[over] - last).astype(bfloat)*self.length
                fwd = forward_vector(self.directions[last])
                pos[over] = self.positions[last] + steps[:, None]*fwd
                dirs[over] = self.directions[last]
                deltas[over] = 0.0
                owner[over] = self.curve_indices[last]

            else:
                # The terminal segment is the start of the next lap
                wrapped = idx[over] % max(1, last)
                pos[over] = self.positions[wrapped] - (0., self.seam_offset, 0.)
                dirs[over] = self.directions[wrapped]
                deltas[over] = self.deltas[wrapped]
                owner[over] = self.curve_indices[last]

        return (pos.reshape(shape + (3,)), dirs.reshape(shape + (3,)),
                deltas.reshape(shape + (3,)), owner.reshape(shape))

    def get(self, index):
        """ Segment at any index, real or virtual. """
        pos, dirs, deltas, owner = self.gather([int(index)])
        curve = self.curves[owner[0]] if self.curves else None
        return Segment(pos[0], dirs[0], deltas[0], self.length, curve)

    def locate(self, z):
        """
        Segment indices and distances within the segments for distances along the path.

        Returns
        -------
        indices : ndarray of ints
        seg_z : ndarray of floats
        """
        z = np.asarray(z, dtype=bfloat)
        indices = np.floor(z/self.length).astype(bint)
        return indices, z - indices*self.length

    def matrices(self, z):
        """ Segment to track transformations at distances `z` along the path. """
        indices, seg_z = self.locate(z)
        pos, dirs, deltas, _ = self.gather(indices)
        return segment_matrices(pos, dirs, deltas, seg_z, self.length)

    # ====================================================================================================
    # Curves
    # ====================================================================================================

    def curve_range(self, curve_index):
        """ Slice of the segments of a curve, terminal segment excluded. """
        owners = self.curve_indices[:self.path_count]
        start = int(np.searchsorted(owners, curve_index, side='left'))
        stop = int(np.searchsorted(owners, curve_index, side='right'))
        return slice(start, stop)

    def curve_segments(self, curve_index):
        return [self.get(i) for i in range(*self.curve_range(curve_index).indices(len(self)))]
