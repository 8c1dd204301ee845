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
Module Name: scene
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-22
Last updated: 2025-10-02

Summary:
    Tree of the objects produced by the track: the track root, one node per
    curve, and below the curves the copies of the templates with their warped
    meshes and spaced objects.
"""

__all__ = [
    "SceneNode",
    "TRACK", "CURVE", "TEMPLATE_COPY", "CONTINUOUS", "MESH", "SPACED",
]

import numpy as np

from .maths import Transformation

# Node kinds
TRACK         = 'TRACK'
CURVE         = 'CURVE'
TEMPLATE_COPY = 'TEMPLATE_COPY'
CONTINUOUS    = 'CONTINUOUS'
MESH          = 'MESH'
SPACED        = 'SPACED'

# ====================================================================================================
# Scene node
# ====================================================================================================

class SceneNode:
    """
    Named node with a local transformation.

    Attributes
    ----------
    name : str
    kind : str
        One of TRACK, CURVE, TEMPLATE_COPY, CONTINUOUS, MESH, SPACED.
    matrix : Transformation
        Parent from node transformation.
    mesh : Mesh or None
        Mesh carried by MESH nodes.
    info : dict
        Free properties (surface curve range, spacing group, source part...).
    """

    def __init__(self, name, kind, matrix=None, mesh=None, **info):
        self.name = name
        self.kind = kind
        self.matrix = Transformation.identity() if matrix is None else Transformation(matrix)
        self.mesh = mesh
        self.info = dict(info)
        self.parent = None
        self.children = []

    def __repr__(self):
        return f"<SceneNode {self.kind} '{self.name}', {len(self.children)} children>"

    # ====================================================================================================
    # Hierarchy
    # ====================================================================================================

    def set_parent(self, parent):
        if self.parent is not None:
            self.parent.children.remove(self)
        self.parent = parent
        if parent is not None:
            parent.children.append(self)

    def detach(self):
        self.set_parent(None)

    def walk(self, kind=None):
        """ Iterate on the node and its descendants, depth first. """
        if kind is None or self.kind == kind:
            yield self
        for child in self.children:
            yield from child.walk(kind)

    def descendants(self, kind=None):
        return [node for child in self.children for node in child.walk(kind)]

    # ====================================================================================================
    # World transformation
    # ====================================================================================================

    @property
    def world_matrix(self):
        """ World from node transformation. """
        if self.parent is None:
            return self.matrix
        return self.parent.world_matrix @ self.matrix

    def set_world_matrix(self, matrix):
        """ Set the local matrix so that the node gets the given world transformation. """
        matrix = Transformation(np.asarray(matrix))
        if self.parent is None:
            self.matrix = matrix
        else:
            self.matrix = self.parent.world_matrix.inverse() @ matrix
