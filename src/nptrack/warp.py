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
Module Name: warp
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-25
Last updated: 2025-10-02

Summary:
    Bend a template mesh along the track.

    The template z axis is mapped onto the path: a vertex at template space
    (x, y, z) goes to the point (x, y, seg_z) of the segment found at the path
    distance z - min_z + z_offset.

Usage example:
    >>> mesh = source.clone()
    >>> length = warp_mesh(mesh, z_offset, template_from_mesh, mesh_from_world, segments, world_from_track)
"""

__all__ = ["warp_mesh"]

import numpy as np

from .constants import bfloat, ZERO

# ====================================================================================================
# Warp
# ====================================================================================================

def warp_mesh(mesh, z_offset, template_from_mesh, mesh_from_world, segments, world_from_track):
    """
    Warp a mesh in place along the segments.

    Vertices and normals are replaced, tangents and bounds are recomputed.

    Parameters
    ----------
    mesh : Mesh
        The mesh to warp, in mesh space.
    z_offset : float
        Distance along the path where the mesh starts.
    template_from_mesh : Transformation
        Mesh to template space.
    mesh_from_world : Transformation
        World to mesh space.
    segments : SegmentArray
        Track segments.
    world_from_track : Transformation
        Track to world space.

    Returns
    -------
    float
        Template space length of the mesh (max z - min z).
    """
    if len(mesh.vertices) == 0:
        return 0.0

    verts = template_from_mesh.apply(mesh.vertices)
    norms = template_from_mesh.apply_vector(mesh.normals)

    min_z = verts[:, 2].min()
    max_z = verts[:, 2].max()

    # Path distance and segment to track matrices per vertex
    z = verts[:, 2] - min_z + z_offset
    _, seg_z = segments.locate(z)
    track_from_seg = segments.matrices(z)

    local = np.empty_like(verts)
    local[:, :2] = verts[:, :2]
    local[:, 2] = seg_z

    mesh_from_track = mesh_from_world @ world_from_track

    mesh.vertices = mesh_from_track.apply(track_from_seg.apply(local)).astype(bfloat)

    norms = mesh_from_track.apply_vector(track_from_seg.apply_vector(norms))
    lengths = np.linalg.norm(norms, axis=-1, keepdims=True)
    mesh.normals = np.where(lengths > ZERO, norms/np.maximum(lengths, ZERO), norms)

    mesh.recalculate_tangents()
    mesh.recalculate_bounds()

    return float(max_z - min_z)
