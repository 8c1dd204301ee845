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
Module Name: spacing
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-25
Last updated: 2025-10-02

Summary:
    Objects placed at regular intervals along the track.

    The objects of a spacing group are placed every `spacing` along the path.
    The phase of a group is anchored where the group first becomes active and
    is kept from template copy to template copy while the group stays active.

    A template copy pass goes as follows:
    - `begin_template`: all the groups are inactive for this template
    - `activate`: for each spaced part, the group becomes active and its
      working cursor is moved to the template start
    - `spaced_placements`: placements until the end of the template
    - `end_template`: active flags and cursors are kept for the next template

Usage example:
    >>> groups = SpacingGroupStates(16)
    >>> groups.begin_template()
    >>> state = groups[part.spacing_group.index]
    >>> state.activate(part.spacing_group, mesh_z)
    >>> for z, matrix in spaced_placements(part, state, segments, mesh_z, length, template_from_part):
    ...     pass
    >>> groups.end_template()
"""

__all__ = [
    "SpacingGroupState", "SpacingGroupStates",
    "validate_spacing_group", "spaced_placements", "verticalize",
]

import logging

import numpy as np

from .constants import ZERO, UP
from .maths import Transformation, local_angle
from .segment import segment_matrices

logger = logging.getLogger(__name__)

# ====================================================================================================
# State of a group
# ====================================================================================================

class SpacingGroupState:
    """
    Phase of a spacing group.

    Attributes
    ----------
    is_active : bool
        The group was active in the previous template copy.
    z_offset : float
        Phase anchor along the path.
    is_active_this_template : bool
        Working flag of the current template copy.
    z_offset_this_template : float
        Working cursor of the current template copy.
    """

    __slots__ = ("is_active", "z_offset", "is_active_this_template", "z_offset_this_template")

    def __init__(self, is_active=False, z_offset=0.0):
        self.is_active = bool(is_active)
        self.z_offset = float(z_offset)
        self.is_active_this_template = False
        self.z_offset_this_template = self.z_offset

    def __repr__(self):
        return f"<SpacingGroupState active: {self.is_active}, z_offset: {self.z_offset:.3f}>"

    def activate(self, group, mesh_z):
        """
        The group is used by the template copy starting at `mesh_z`.

        The anchor is set to `mesh_z` if the group wasn't active. The working
        cursor is moved forward by steps of `spacing` until it reaches the template start.
        """
        self.is_active_this_template = True
        if not self.is_active:
            self.z_offset = mesh_z

        z = self.z_offset
        while z + group.spacing_before < mesh_z:
            z += group.spacing
        self.z_offset_this_template = z

    def end_template(self):
        self.is_active = self.is_active_this_template
        if self.is_active:
            self.z_offset = self.z_offset_this_template

# ====================================================================================================
# All the groups
# ====================================================================================================

class SpacingGroupStates:
    """ Fixed capacity list of spacing group states. """

    def __init__(self, capacity=16, snapshot=None):
        self.states = [SpacingGroupState() for _ in range(capacity)]
        if snapshot is not None:
            self.restore(snapshot)

    def __len__(self):
        return len(self.states)

    def __getitem__(self, index):
        return self.states[index]

    def __iter__(self):
        return iter(self.states)

    def begin_template(self):
        for state in self.states:
            state.is_active_this_template = False

    def end_template(self):
        for state in self.states:
            state.end_template()

    def snapshot(self):
        """ Persistent part of the states as a tuple of (is_active, z_offset). """
        return tuple((s.is_active, s.z_offset) for s in self.states)

    def restore(self, snapshot):
        if len(snapshot) != len(self.states):
            raise ValueError(f"SpacingGroupStates> snapshot of {len(snapshot)} groups, {len(self.states)} expected")
        for state, (is_active, z_offset) in zip(self.states, snapshot):
            state.is_active = bool(is_active)
            state.z_offset = float(z_offset)
            state.is_active_this_template = False
            state.z_offset_this_template = state.z_offset

# ====================================================================================================
# Validation
# ====================================================================================================

def validate_spacing_group(part, template_name, segment_length, capacity):
    """
    Check the spacing group of a spaced part.

    Errors are logged, the part must then be skipped.

    Returns
    -------
    bool
    """
    group = part.spacing_group
    if group is None:
        logger.error("Cannot find spacing group for spaced part '%s' in template '%s'", part.name, template_name)
        return False

    if group.index < 0 or group.index >= capacity:
        logger.error("Invalid spacing group %d for spaced part '%s' in template '%s' (%d groups available)",
                     group.index, part.name, template_name, capacity)
        return False

    if group.spacing < segment_length:
        logger.error("Spacing %g of group %d is smaller than the segment length %g, in template '%s'",
                     group.spacing, group.index, segment_length, template_name)
        return False

    return True

# ====================================================================================================
# Vertical objects
# ====================================================================================================

def verticalize(matrix):
    """
    Rotate the basis so that the Y axis is vertical.

    The lengths of the axes are kept. The Z axis stays in the plane of the
    original Z axis and the vertical.

    Parameters
    ----------
    matrix : Transformation

    Returns
    -------
    Transformation
    """
    mat = np.array(matrix, dtype=float)
    bx, by, bz = mat[:3, 0], mat[:3, 1], mat[:3, 2]
    sx, sy, sz = np.linalg.norm(bx), np.linalg.norm(by), np.linalg.norm(bz)

    def normalized(v):
        n = np.linalg.norm(v)
        return v/n if n > ZERO else v

    new_y = UP*sy
    new_x = normalized(np.cross(new_y, bz))*sx
    new_z = normalized(np.cross(new_x, new_y))*sz

    mat[:3, 0] = new_x
    mat[:3, 1] = new_y
    mat[:3, 2] = new_z

    return Transformation(mat, copy=False)

# ====================================================================================================
# Placements
# ====================================================================================================

def spaced_placements(part, state, segments, mesh_z, length, template_from_part):
    """
    Placements of a spaced part in a template copy.

    The working cursor of the group state is moved past the end of the
    template copy. Placements where the track pitch or bank exceeds the part
    limits are skipped.

    Parameters
    ----------
    part : SpacedPart
    state : SpacingGroupState
        Activated state of the part group.
    segments : SegmentArray
    mesh_z : float
        Path distance of the template copy start.
    length : float
        Length of the template copy main surface.
    template_from_part : Transformation

    Returns
    -------
    list of (float, Transformation)
        Path distance and track from part transformation of each placement.
    """
    group = part.spacing_group
    placements = []

    while state.z_offset_this_template + group.spacing_before < mesh_z + length:
        z = state.z_offset_this_template + group.spacing_before
        state.z_offset_this_template += group.spacing

        index, seg_z = segments.locate(z)
        pos, dirs, deltas, _ = segments.gather(index)

        # Angle limits
        if (abs(local_angle(dirs[0])) > part.max_x_angle or
            abs(local_angle(dirs[2])) > part.max_z_angle):
            continue

        track_from_part = segment_matrices(pos, dirs, deltas, seg_z, segments.length) @ template_from_part
        if part.is_vertical:
            track_from_part = verticalize(track_from_part)

        placements.append((float(z), track_from_part))

    return placements
