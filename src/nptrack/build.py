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
Module Name: build
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-26
Last updated: 2025-10-02

Summary:
    Generation of the track geometry, curve range by curve range.

    The builder walks the path from template copy to template copy. Each copy
    starts at the current path distance `mesh_z`, uses the template of the
    curve owning the segment at `mesh_z` (or the last template met) and moves
    `mesh_z` forward by the length of its main surface.

    When the walk enters a new curve, the state of the walk is saved in the
    `BuildState` of the previous curves. A later build of the curves [start, end)
    resumes from the state saved for curve start - 1 and produces the same
    geometry as a full build.

Usage example:
    >>> builder = MeshBuilder(segments, curves, track_node)
    >>> builder.build(build_states, 0, len(curves))
    >>> builder.build(build_states, 3, 5)
"""

__all__ = ["BuildState", "MeshBuilder", "segment_placement"]

import logging

import numpy as np

from .constants import MAX_SPACING_GROUPS
from .host import NullHostServices
from .maths import Transformation, look_rotation
from .scene import SceneNode, TEMPLATE_COPY, CONTINUOUS, MESH, SPACED
from .spacing import SpacingGroupStates, validate_spacing_group, spaced_placements
from .warp import warp_mesh

logger = logging.getLogger(__name__)

# ====================================================================================================
# Build state
# ====================================================================================================

class BuildState:
    """
    State of the walk when it enters the curve following a given curve.

    Attributes
    ----------
    spacing_groups : tuple of (bool, float)
        (is_active, z_offset) of each spacing group.
    mesh_z_offset : float
        Path distance of the next template copy.
    template : Template or None
        Template in effect.
    """

    __slots__ = ("spacing_groups", "mesh_z_offset", "template")

    def __init__(self, spacing_groups=None, mesh_z_offset=0.0, template=None):
        self.spacing_groups = None if spacing_groups is None else tuple(spacing_groups)
        self.mesh_z_offset = float(mesh_z_offset)
        self.template = template

    def __repr__(self):
        name = None if self.template is None else self.template.name
        return f"<BuildState mesh_z: {self.mesh_z_offset:.3f}, template: {name}>"

    def __eq__(self, other):
        if not isinstance(other, BuildState):
            return NotImplemented
        return (self.spacing_groups == other.spacing_groups and
                self.mesh_z_offset == other.mesh_z_offset and
                self.template is other.template)

# ====================================================================================================
# Node placement
# ====================================================================================================

def segment_placement(segment, world_from_track):
    """
    World transformation of an object placed at the start of a segment.

    The object is oriented along the segment forward axis, without bank.

    Returns
    -------
    Transformation
    """
    track_from_seg = segment.matrix(0.0)
    position = world_from_track.apply(track_from_seg.position)
    forward = world_from_track.apply_vector(track_from_seg.basis[:, 2])
    return Transformation.from_components(translation=position, rotation=look_rotation(forward))

# ====================================================================================================
# Builder
# ====================================================================================================

class MeshBuilder:
    """
    Generate the template copies of the curves.

    Parameters
    ----------
    segments : SegmentArray
    curves : list of Curve
        Curves with their scene node.
    root : SceneNode
        Track node, giving the world from track transformation.
    host : HostServices, optional
        Notified of the created nodes.
    capacity : int, default 16
        Number of spacing groups.
    """

    def __init__(self, segments, curves, root, host=None, capacity=MAX_SPACING_GROUPS):
        self.segments = segments
        self.curves = curves
        self.root = root
        self.host = NullHostServices() if host is None else host
        self.capacity = capacity

    def _create_node(self, name, kind, parent, matrix=None, mesh=None, **info):
        node = SceneNode(name, kind, matrix=matrix, mesh=mesh, **info)
        self.host.object_created(node)
        self.host.reparent(node, parent)
        node.set_parent(parent)
        return node

    # ====================================================================================================
    # Walk
    # ====================================================================================================

    def build(self, build_states, start=0, end=None):
        """
        Build the template copies of the curves [start, end).

        The generated nodes of these curves must have been deleted before.

        Parameters
        ----------
        build_states : list of BuildState or None
            One entry per curve, updated during the walk.
        start : int, default 0
            First curve, inclusive.
        end : int, optional
            Last curve, exclusive. All the curves by default.

        Returns
        -------
        list of SceneNode
            The created template copies.
        """
        curves = self.curves
        segs = self.segments
        n = len(curves)

        if len(build_states) != n:
            raise ValueError(f"MeshBuilder> {len(build_states)} build states for {n} curves")

        start = max(0, start)
        end = n if end is None else min(end, n)
        if segs.path_count == 0 or start >= end:
            return []

        # Nothing is emitted before the requested range
        emit_from = start
        if start > 0 and build_states[start - 1] is None:
            logger.debug("No build state before curve %d: walking from curve 0", start)
            start = 0

        seed = build_states[start - 1] if start > 0 else BuildState()
        groups = SpacingGroupStates(self.capacity, seed.spacing_groups)
        mesh_z = seed.mesh_z_offset
        template = seed.template

        logger.debug("Building curves [%d, %d) from z=%.3f", emit_from, end, mesh_z)

        path_length = segs.path_length
        curve_index = start
        copies = []

        while mesh_z < path_length:

            seg_index = int(np.floor(mesh_z/segs.length))
            owner = int(segs.curve_indices[seg_index])

            # Entering a new curve
            while owner > curve_index:
                build_states[curve_index] = BuildState(groups.snapshot(), mesh_z, template)
                curve_index += 1

            if owner >= end:
                break

            curve = curves[owner]
            if curve.template is not None:
                template = curve.template

            groups.begin_template()

            if not curve.is_jump and template is not None:
                copy, length = self._template_copy(curve, template, seg_index, mesh_z, groups, emit=owner >= emit_from)
                if copy is not None:
                    copies.append(copy)
                mesh_z += length

            groups.end_template()

            # Zero length templates still move forward
            mesh_z = max(mesh_z, (seg_index + 1)*segs.length)

        if mesh_z >= path_length:
            for i in range(curve_index, n):
                build_states[i] = BuildState(groups.snapshot(), mesh_z, template)

        logger.debug("%d template copies built", len(copies))

        return copies

    # ====================================================================================================
    # One template copy
    # ====================================================================================================

    def _template_copy(self, curve, template, seg_index, mesh_z, groups, emit=True):
        """
        Copy of a template starting at path distance `mesh_z`.

        When `emit` is False, no node is created: only the length is computed
        and the spacing groups are moved forward.

        Returns
        -------
        SceneNode or None, float
            Template copy and length of its main surface.
        """
        segs = self.segments
        world_from_track = self.root.world_matrix

        copy_node = None
        if emit:
            copy_node = self._create_node(f"{curve.name} > {template.name}", TEMPLATE_COPY, curve.node, template=template)
            copy_node.set_world_matrix(segment_placement(segs.get(seg_index), world_from_track))

        # ----------------------------------------------------------------------------------------------------
        # Pass 1 : continuous meshes
        # ----------------------------------------------------------------------------------------------------

        if emit:
            main_length = None
            for part in template.continuous:
                part_node = self._create_node(f"{part.name} Continuous", CONTINUOUS, copy_node)

                for item in part.items:
                    mesh = item.mesh.clone()
                    mesh_node = self._create_node(mesh.name, MESH, part_node, mesh=mesh, is_collider=item.is_collider)

                    length = warp_mesh(mesh, mesh_z, template.template_from_mesh(part, item),
                                       mesh_node.world_matrix.inverse(), segs, world_from_track)

                    # Main surface
                    if main_length is None and not item.is_collider:
                        end_index = int(np.floor((mesh_z + length)/segs.length - 1e-5))
                        mesh_node.info.update(
                            is_surface = True,
                            start_curve_index = curve.index,
                            end_curve_index = int(segs.gather(end_index)[3]),
                        )
                        main_length = length

            if main_length is None:
                main_length = 0.0
        else:
            main_length = template.length()

        # ----------------------------------------------------------------------------------------------------
        # Pass 2 : spaced objects
        # ----------------------------------------------------------------------------------------------------

        copy_from_track = None if copy_node is None else copy_node.world_matrix.inverse() @ world_from_track

        for part in template.spaced:
            if not validate_spacing_group(part, template.name, segs.length, len(groups)):
                continue

            group = part.spacing_group
            state = groups[group.index]
            state.activate(group, mesh_z)

            placements = spaced_placements(part, state, segs, mesh_z, main_length, template.template_from_part(part))
            if not emit:
                continue

            for z, track_from_part in placements:
                self._create_node(f"{part.name} Spacing group {group.index}", SPACED, copy_node,
                                  matrix=copy_from_track @ track_from_part, mesh=part.mesh,
                                  z=z, spacing_group=group.index)

        return copy_node, main_length
