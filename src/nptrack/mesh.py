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
Module Name: mesh
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-24
Last updated: 2025-10-02

Summary:
    Triangle mesh with per vertex normals, uvs and tangents.

    Tangents depend on the uv winding: after the vertices are moved they are
    recomputed from the geometry rather than transformed.

Usage example:
    >>> mesh = Mesh.grid(size_x=4, size_z=10, vertices_x=3, vertices_z=11)
    >>> mesh.recalculate_tangents()
"""

__all__ = ["Mesh"]

import numpy as np
from numba import njit

from .constants import bfloat, bint

# ====================================================================================================
# numba optimized calls
# ====================================================================================================

# ----------------------------------------------------------------------------------------------------
# Tangents
#
# Per triangle directions of increasing u and v are accumulated on the vertices,
# then orthogonalized against the normals. w is the handedness of the uv space.
# ----------------------------------------------------------------------------------------------------

@njit(cache=True)
def compute_tangents(vertices, normals, uvs, triangles):

    n = vertices.shape[0]
    tan1 = np.zeros((n, 3), dtype=np.float64)
    tan2 = np.zeros((n, 3), dtype=np.float64)

    for f in range(triangles.shape[0]):
        i1 = triangles[f, 0]
        i2 = triangles[f, 1]
        i3 = triangles[f, 2]

        x1 = vertices[i2, 0] - vertices[i1, 0]
        x2 = vertices[i3, 0] - vertices[i1, 0]
        y1 = vertices[i2, 1] - vertices[i1, 1]
        y2 = vertices[i3, 1] - vertices[i1, 1]
        z1 = vertices[i2, 2] - vertices[i1, 2]
        z2 = vertices[i3, 2] - vertices[i1, 2]

        s1 = uvs[i2, 0] - uvs[i1, 0]
        s2 = uvs[i3, 0] - uvs[i1, 0]
        t1 = uvs[i2, 1] - uvs[i1, 1]
        t2 = uvs[i3, 1] - uvs[i1, 1]

        den = s1*t2 - s2*t1
        if abs(den) < 1e-12:
            continue
        r = 1.0/den

        sx = (t2*x1 - t1*x2)*r
        sy = (t2*y1 - t1*y2)*r
        sz = (t2*z1 - t1*z2)*r

        tx = (s1*x2 - s2*x1)*r
        ty = (s1*y2 - s2*y1)*r
        tz = (s1*z2 - s2*z1)*r

        for i in (i1, i2, i3):
            tan1[i, 0] += sx
            tan1[i, 1] += sy
            tan1[i, 2] += sz
            tan2[i, 0] += tx
            tan2[i, 1] += ty
            tan2[i, 2] += tz

    tangents = np.zeros((n, 4), dtype=np.float64)
    for i in range(n):
        nx = normals[i, 0]
        ny = normals[i, 1]
        nz = normals[i, 2]

        # Gram-Schmidt
        d = nx*tan1[i, 0] + ny*tan1[i, 1] + nz*tan1[i, 2]
        ox = tan1[i, 0] - nx*d
        oy = tan1[i, 1] - ny*d
        oz = tan1[i, 2] - nz*d
        length = np.sqrt(ox*ox + oy*oy + oz*oz)
        if length < 1e-12:
            ox, oy, oz = 1.0, 0.0, 0.0
        else:
            ox /= length
            oy /= length
            oz /= length

        # Handedness
        cx = ny*tan1[i, 2] - nz*tan1[i, 1]
        cy = nz*tan1[i, 0] - nx*tan1[i, 2]
        cz = nx*tan1[i, 1] - ny*tan1[i, 0]
        w = 1.0
        if cx*tan2[i, 0] + cy*tan2[i, 1] + cz*tan2[i, 2] < 0.0:
            w = -1.0

        tangents[i, 0] = ox
        tangents[i, 1] = oy
        tangents[i, 2] = oz
        tangents[i, 3] = w

    return tangents

# ====================================================================================================
# Mesh
# ====================================================================================================

class Mesh:
    """
    Triangle mesh.

    Attributes
    ----------
    vertices : ndarray (n, 3)
    normals : ndarray (n, 3)
    uvs : ndarray (n, 2) or None
    triangles : ndarray (m, 3) of ints
    tangents : ndarray (n, 4) or None
    bounds : tuple (min, max) of ndarrays (3,)
    """

    def __init__(self, vertices=None, triangles=None, normals=None, uvs=None, name="Mesh"):

        self.name = name
        self.vertices = np.zeros((0, 3), dtype=bfloat) if vertices is None else np.array(vertices, dtype=bfloat).reshape(-1, 3)
        self.triangles = np.zeros((0, 3), dtype=bint) if triangles is None else np.array(triangles, dtype=bint).reshape(-1, 3)

        n = len(self.vertices)
        if normals is None:
            self.normals = np.zeros((n, 3), dtype=bfloat)
            self.normals[:, 1] = 1.0
        else:
            self.normals = np.array(normals, dtype=bfloat).reshape(-1, 3)
        self.uvs = None if uvs is None else np.array(uvs, dtype=bfloat).reshape(-1, 2)

        if len(self.normals) != n:
            raise ValueError(f"Mesh '{name}'> {len(self.normals)} normals for {n} vertices")
        if self.uvs is not None and len(self.uvs) != n:
            raise ValueError(f"Mesh '{name}'> {len(self.uvs)} uvs for {n} vertices")
        if len(self.triangles) and (self.triangles.min() < 0 or self.triangles.max() >= n):
            raise ValueError(f"Mesh '{name}'> triangle indices out of range [0, {n}[")

        self.tangents = None
        self.bounds = None
        self.recalculate_bounds()

    def __str__(self):
        return f"<Mesh '{self.name}': {len(self.vertices)} vertices, {len(self.triangles)} triangles>"

    def __repr__(self):
        return str(self)

    def __len__(self):
        return len(self.vertices)

    def clone(self, name=None):
        """ Copy of the mesh, named '<name> clone' by default. """
        mesh = Mesh(self.vertices, self.triangles, self.normals, self.uvs,
                    name=f"{self.name} clone" if name is None else name)
        if self.tangents is not None:
            mesh.tangents = self.tangents.copy()
        return mesh

    # ====================================================================================================
    # Derived data
    # ====================================================================================================

    def recalculate_bounds(self):
        if len(self.vertices):
            self.bounds = (self.vertices.min(axis=0), self.vertices.max(axis=0))
        else:
            self.bounds = (np.zeros(3, dtype=bfloat), np.zeros(3, dtype=bfloat))
        return self.bounds

    def recalculate_tangents(self):
        """ Tangents from the uvs; None when the mesh has no uvs. """
        if self.uvs is None or len(self.vertices) == 0:
            self.tangents = None
        else:
            self.tangents = compute_tangents(self.vertices, self.normals, self.uvs, self.triangles)
        return self.tangents

    def z_extent(self, matrix=None):
        """
        Min and max z of the vertices, optionally after a transformation.

        Returns
        -------
        (float, float)
        """
        if len(self.vertices) == 0:
            return 0.0, 0.0
        v = self.vertices if matrix is None else matrix.apply(self.vertices)
        return float(v[:, 2].min()), float(v[:, 2].max())

    # ====================================================================================================
    # Constructors
    # ====================================================================================================

    @classmethod
    def grid(cls, size_x=1., size_z=1., vertices_x=2, vertices_z=2, name="Grid"):
        """
        Flat grid in the XZ plane, facing +Y, starting at z=0.

        Parameters
        ----------
        size_x : float
            Width, centered on x=0.
        size_z : float
            Length, from z=0 to z=size_z.
        vertices_x, vertices_z : int
            Number of vertices along each axis (at least 2).
        """
        if vertices_x < 2 or vertices_z < 2:
            raise ValueError(f"Mesh.grid> at least 2 vertices per axis are required")

        xs = np.linspace(-size_x/2, size_x/2, vertices_x)
        zs = np.linspace(0., size_z, vertices_z)
        gx, gz = np.meshgrid(xs, zs, indexing='xy')

        vertices = np.stack((gx.ravel(), np.zeros(gx.size), gz.ravel()), axis=-1)
        uvs = np.stack(((gx.ravel() + size_x/2)/size_x, gz.ravel()/size_z), axis=-1)

        tris = []
        for j in range(vertices_z - 1):
            for i in range(vertices_x - 1):
                a = j*vertices_x + i
                b = a + 1
                c = a + vertices_x
                d = c + 1
                tris.append((a, c, b))
                tris.append((b, c, d))

        return cls(vertices, tris, uvs=uvs, name=name)

    @classmethod
    def box(cls, size=(1., 1., 1.), name="Box"):
        """ Axis aligned box centered on the origin, 8 shared vertices. """
        sx, sy, sz = np.asarray(size, dtype=bfloat)/2
        vertices = np.array([
            (-sx, -sy, -sz), (sx, -sy, -sz), (sx, sy, -sz), (-sx, sy, -sz),
            (-sx, -sy,  sz), (sx, -sy,  sz), (sx, sy,  sz), (-sx, sy,  sz),
        ])
        tris = [
            (0, 2, 1), (0, 3, 2), (4, 5, 6), (4, 6, 7),
            (0, 1, 5), (0, 5, 4), (3, 7, 6), (3, 6, 2),
            (0, 4, 7), (0, 7, 3), (1, 2, 6), (1, 6, 5),
        ]
        normals = vertices/np.linalg.norm(vertices, axis=-1, keepdims=True)
        return cls(vertices, tris, normals=normals, name=name)
