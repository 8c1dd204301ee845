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
Module Name: track
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-22
Last updated: 2025-10-02

Summary:
    The racetrack: an ordered list of curves, the segments they are broken
    into, and the geometry generated along them.

    The track owns its curves, its segments, the build states of the curves
    and the scene nodes it generates. Segments are computed explicitly with
    `update_segments` after each change; reading them while they are out of
    date is an error.

    Geometry is rebuilt either immediately with `rebuild_all` / `rebuild_range`,
    or later: `schedule_rebuild` merges the requested curve ranges until
    `apply_scheduled_rebuild` is called.

Usage example:
    >>> track = Track(TrackSettings(segment_length=0.5))
    >>> c = track.add_curve(length=100, template=road)
    >>> track.add_curve(angles=(0, 90, 0))
    >>> track.update_curve(c, angles=(0, 0, 15))
    >>> track.apply_scheduled_rebuild()
"""

__all__ = ["Track", "TrackError"]

import logging

import numpy as np

from .constants import BEZIER, LOOP
from .settings import TrackSettings
from .host import NullHostServices
from .scene import SceneNode, TRACK, CURVE, TEMPLATE_COPY
from .curve import Curve
from .segmenter import generate_segments
from .build import MeshBuilder, segment_placement
from .runtime import compute_curve_infos

logger = logging.getLogger(__name__)

# Curve attributes which can be changed with update_curve
CURVE_ATTRIBUTES = (
    'name', 'curve_type', 'length', 'angles', 'start_control_pt_dist', 'end_control_pt_dist',
    'end_position', 'template', 'is_jump', 'can_respawn',
)

class TrackError(RuntimeError):
    pass

# ====================================================================================================
# Track
# ====================================================================================================

class Track:
    """
    Racetrack made of curves.

    Parameters
    ----------
    settings : TrackSettings, optional
    host : HostServices, optional
        Notified of the changes in the scene. No-op by default.
    name : str, default 'Track'
    matrix : array_like (4, 4), optional
        World transformation of the track.

    Attributes
    ----------
    node : SceneNode
        Root of the generated scene.
    curve_infos : list of CurveRuntimeInfo
    build_states : list of BuildState or None
        Walk state saved for each curve.
    """

    def __init__(self, settings=None, host=None, name="Track", matrix=None):
        self.settings = TrackSettings() if settings is None else settings
        self.host = NullHostServices() if host is None else host
        self.node = SceneNode(name, TRACK, matrix=matrix)

        self._curves = []
        self._segments = None
        self._dirty = True
        self._pending = None
        self._rebuilding = False

        self.curve_infos = []
        self.build_states = []

    def __str__(self):
        return f"<Track '{self.name}': {len(self._curves)} curves{' (dirty)' if self._dirty else ''}>"

    def __repr__(self):
        return str(self)

    @property
    def name(self):
        return self.node.name

    # ====================================================================================================
    # Curves
    # ====================================================================================================

    @property
    def curves(self):
        return tuple(self._curves)

    def _check_curve(self, curve):
        if curve.index >= len(self._curves) or self._curves[curve.index] is not curve:
            raise TrackError(f"Track '{self.name}'> curve '{curve.name}' doesn't belong to the track")

    def _renumber(self):
        for i, curve in enumerate(self._curves):
            curve.index = i
            curve.node.info['index'] = i

    def _attach_curve(self, index, curve):

        node = SceneNode(curve.name, CURVE, curve=curve)
        self.host.object_created(node)
        self.host.reparent(node, self.node)
        node.set_parent(self.node)
        curve.node = node

        self._curves.insert(index, curve)
        self.build_states.insert(index, None)
        self._renumber()
        self.invalidate()

        return curve

    def add_curve(self, **params):
        """
        Append a curve.

        Length, angles and flags are copied from the last curve unless they
        are given. The geometry of the new curve and of the previous one is built.

        Returns
        -------
        Curve
        """
        if self._curves:
            last = self._curves[-1]
            params = {
                'length'      : last.length,
                'angles'      : last.angles,
                'is_jump'     : last.is_jump,
                'can_respawn' : last.can_respawn,
                **params}

        curve = self._attach_curve(len(self._curves), Curve(**params))
        self.rebuild_range(curve.index - 1, curve.index + 1)

        return curve

    def insert_curve(self, index, **params):
        """ Insert a curve at the given index and rebuild from the previous curve to the end. """
        if index < 0 or index > len(self._curves):
            raise IndexError(f"Track '{self.name}'> insertion index {index} out of range [0, {len(self._curves)}]")

        curve = self._attach_curve(index, Curve(**params))
        self.rebuild_range(index - 1, len(self._curves))

        return curve

    def remove_curve(self, curve):
        """ Remove a curve with its geometry and rebuild from the previous curve to the end. """
        self._check_curve(curve)

        index = curve.index
        self.delete_meshes(index, index + 1)

        self.host.object_destroyed(curve.node)
        curve.node.detach()
        curve.node = None

        del self._curves[index]
        del self.build_states[index]
        self._renumber()
        self.invalidate()

        if self._curves:
            self.rebuild_range(index - 1, len(self._curves))
        else:
            self.curve_infos = []

    def update_curve(self, curve, **changes):
        """
        Change curve parameters.

        Segments and runtime infos are updated at once, the geometry rebuild
        is scheduled from the curve to the end of the track.
        """
        self._check_curve(curve)

        unknown = set(changes) - set(CURVE_ATTRIBUTES)
        if unknown:
            raise ValueError(f"Track '{self.name}'> unknown curve attributes: {sorted(unknown)}")

        self.host.object_changing(curve.node)
        for name, value in changes.items():
            setattr(curve, name, value)
        if 'name' in changes:
            curve.node.name = curve.name

        self.invalidate()
        self.update_segments()
        self.position_curves()

        self.schedule_rebuild(curve)

    def create_circuit(self):
        """
        Close the track.

        A Bézier curve is appended from the end of the track back to its start,
        arriving level and facing the start direction. The segments past the end
        then loop.

        Raises
        ------
        TrackError
            If the track has no curve.
        """
        if not self._curves:
            raise TrackError(f"Track '{self.name}'> can't create a circuit without curves")

        if self._dirty:
            self.update_segments()

        yaw = float(self._segments.directions[-1, 1])
        target = 360.0*round(yaw/360.0)

        last = self._curves[-1]
        curve = self._attach_curve(len(self._curves), Curve(
            curve_type   = BEZIER,
            angles       = (0., target - yaw, 0.),
            end_position = (0., 0., 0.),
            is_jump      = last.is_jump,
            can_respawn  = last.can_respawn,
            name         = "Closing curve",
        ))
        self.settings.overrun = LOOP

        self.rebuild_all()

        return curve

    # ====================================================================================================
    # Segments
    # ====================================================================================================

    def invalidate(self):
        """ Segments must be computed again. """
        self._dirty = True

    @property
    def is_dirty(self):
        return self._dirty

    def _generate_segments(self):
        s = self.settings
        return generate_segments(
            self._curves, s.segment_length,
            bank_mode   = s.bank_mode,
            overrun     = s.overrun,
            seam_offset = s.loop_seam_offset,
            tolerance   = s.bezier_tolerance)

    def update_segments(self):
        """ Break the curves into segments. """
        self._segments = self._generate_segments()
        self._dirty = False

        return self._segments

    @property
    def segments(self):
        if self._dirty:
            raise TrackError(f"Track '{self.name}'> segments are out of date, call update_segments()")
        return self._segments

    def get_segment(self, index):
        """ Segment at any index, past the end included. """
        return self.segments.get(index)

    def curve_segments(self, curve):
        """ Segments of a curve, terminal segment excluded. """
        self._check_curve(curve)
        return self.segments.curve_segments(curve.index)

    def position_curves(self):
        """ Place the curve nodes at their first segment and compute the runtime infos. """
        segs = self.segments
        world_from_track = self.node.world_matrix

        for curve in self._curves:
            seg = segs.get(segs.curve_range(curve.index).start)
            curve.node.set_world_matrix(segment_placement(seg, world_from_track))

        self.curve_infos = compute_curve_infos(
            self._curves, segs,
            respawn_height   = self.settings.respawn_height,
            respawn_distance = self.settings.respawn_distance)

    # ====================================================================================================
    # Generated objects
    # ====================================================================================================

    def _destroy(self, node):
        self.host.object_destroyed(node)
        node.detach()

    def delete_meshes(self, start=0, end=None):
        """
        Delete the generated objects of the curves [start, end).

        Returns
        -------
        int
            Number of template copies deleted.
        """
        end = len(self._curves) if end is None else end
        count = 0
        for curve in self._curves[max(0, start):end]:
            for node in [child for child in curve.node.children if child.kind == TEMPLATE_COPY]:
                self._destroy(node)
                count += 1
        return count

    def remove_templates(self):
        """ Clear the templates of all the curves and delete all the generated objects. """
        for curve in self._curves:
            if curve.template is not None:
                self.host.object_changing(curve.node)
                curve.template = None
        self.delete_meshes()
        self.build_states = [None]*len(self._curves)

    # ====================================================================================================
    # Rebuild
    # ====================================================================================================

    def rebuild_all(self):
        return self.rebuild_range(0, len(self._curves))

    def rebuild_range(self, start, end):
        """
        Rebuild the geometry of the curves [start, end).

        Segments and curve positions are updated first. If a curve is invalid,
        the error is raised before the existing geometry is deleted.

        Returns
        -------
        list of SceneNode
            The template copies created.
        """
        if self._rebuilding:
            raise TrackError(f"Track '{self.name}'> rebuild already in progress")

        self._rebuilding = True
        try:
            start = max(0, start)
            end = min(len(self._curves), end)

            logger.debug("Track '%s': rebuild curves [%d, %d)", self.name, start, end)

            if not self._curves:
                return []

            segments = self._generate_segments()

            self.delete_meshes(start, end)
            self._segments = segments
            self._dirty = False
            self.position_curves()

            builder = MeshBuilder(self._segments, self._curves, self.node, host=self.host,
                                  capacity=self.settings.max_spacing_groups)
            return builder.build(self.build_states, start, end)

        finally:
            self._rebuilding = False

    def schedule_rebuild(self, curve, single_curve_only=False):
        """
        Request the rebuild of a curve, merged with the pending requests.

        The range starts at the previous curve. It goes to the end of the track,
        or, with `single_curve_only`, stops after the curves whose banking
        depends on this one.
        """
        self._check_curve(curve)

        n = len(self._curves)
        start = max(0, curve.index - 1)
        end = min(n, curve.index + 3) if single_curve_only else n

        if self._pending is not None:
            start = min(start, self._pending[0])
            end = max(end, self._pending[1])
        self._pending = (start, end)

    @property
    def pending_range(self):
        """ (start, end) of the scheduled rebuild or None. """
        return self._pending

    def apply_scheduled_rebuild(self):
        """ Run the scheduled rebuild, if any. The request is cleared even on failure. """
        if self._pending is None:
            return []

        start, end = self._pending
        try:
            return self.rebuild_range(start, end)
        finally:
            self._pending = None

    # ====================================================================================================
    # Serialization
    # ====================================================================================================

    def to_dict(self):
        return {
            'name'     : self.name,
            'matrix'   : np.asarray(self.node.matrix).tolist(),
            'settings' : self.settings.to_dict(),
            'curves'   : [curve.to_dict() for curve in self._curves],
        }

    @classmethod
    def from_dict(cls, d, templates=None, host=None):
        """
        Track from a dict produced by `to_dict`.

        Curves are created and positioned, the geometry is not built.

        Parameters
        ----------
        d : dict
        templates : dict, optional
            Templates by name.
        host : HostServices, optional
        """
        track = cls(TrackSettings.from_dict(d['settings']), host=host, name=d.get('name', "Track"), matrix=d.get('matrix'))
        for cd in d['curves']:
            track._attach_curve(len(track._curves), Curve.from_dict(cd, templates))

        if track._curves:
            track.update_segments()
            track.position_curves()

        return track
