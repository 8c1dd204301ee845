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
Module Name: template
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-24
Last updated: 2025-10-02

Summary:
    Authored geometry repeated along the track.

    A template is laid out along its +Z axis. It holds:
    - continuous parts: meshes warped to follow the track. The first visual mesh
      of the first part is the main surface and gives the template its length.
    - spaced parts: objects copied at regular intervals, in a spacing group.

Usage example:
    >>> posts = SpacingGroup(index=0, spacing=5.0)
    >>> road = Template("Road", continuous=[ContinuousPart([MeshItem(Mesh.grid(8, 10))])],
    ...                 spaced=[SpacedPart("Post", posts, matrix=...)])
"""

__all__ = ["Template", "ContinuousPart", "MeshItem", "SpacedPart", "SpacingGroup"]

import numpy as np

from .maths import Transformation

def _matrix(matrix):
    return Transformation.identity() if matrix is None else Transformation(np.asarray(matrix))

# ====================================================================================================
# Spacing group
# ====================================================================================================

class SpacingGroup:
    """
    Periodic placement channel.

    Attributes
    ----------
    index : int
        Group number, from 0 to the number of spacing groups - 1.
    spacing : float
        Distance between two copies.
    spacing_before : float
        Offset of the copies from the group phase anchor.
    """

    def __init__(self, index=0, spacing=10.0, spacing_before=0.0):
        self.index = int(index)
        self.spacing = float(spacing)
        self.spacing_before = float(spacing_before)

    def __repr__(self):
        return f"<SpacingGroup {self.index}: spacing {self.spacing}, before {self.spacing_before}>"

# ====================================================================================================
# Parts
# ====================================================================================================

class MeshItem:
    """ Mesh with its placement in its part. Colliders are warped but don't define the length. """

    def __init__(self, mesh, matrix=None, is_collider=False):
        self.mesh = mesh
        self.matrix = _matrix(matrix)
        self.is_collider = bool(is_collider)

    def __repr__(self):
        return f"<MeshItem {self.mesh.name}{' (collider)' if self.is_collider else ''}>"

class ContinuousPart:
    """ Meshes warped along the track. `matrix` places the part in the template. """

    def __init__(self, items, matrix=None, name="Continuous"):
        self.name = name
        self.items = list(items)
        self.matrix = _matrix(matrix)

class SpacedPart:
    """
    Object copied at regular intervals.

    Attributes
    ----------
    name : str
    spacing_group : SpacingGroup or None
        Group the copies belong to. None is an authoring error: the part is skipped.
    matrix : Transformation
        Placement of the object in the template.
    mesh : Mesh or None
        Geometry of the object (not warped).
    max_x_angle, max_z_angle : float
        Copies are skipped where the track pitch / bank exceeds these angles (degrees).
    is_vertical : bool
        Keep the object up axis vertical.
    """

    def __init__(self, name, spacing_group, matrix=None, mesh=None,
                 max_x_angle=90.0, max_z_angle=90.0, is_vertical=False):
        self.name = name
        self.spacing_group = spacing_group
        self.matrix = _matrix(matrix)
        self.mesh = mesh
        self.max_x_angle = float(max_x_angle)
        self.max_z_angle = float(max_z_angle)
        self.is_vertical = bool(is_vertical)

    def __repr__(self):
        return f"<SpacedPart '{self.name}', group: {self.spacing_group}>"

# ====================================================================================================
# Template
# ====================================================================================================

class Template:

    def __init__(self, name, continuous=None, spaced=None, scale=(1., 1., 1.)):
        self.name = name
        self.continuous = list(continuous or [])
        self.spaced = list(spaced or [])
        self.scale = np.array(scale, dtype=float)

    def __repr__(self):
        return f"<Template '{self.name}': {len(self.continuous)} continuous, {len(self.spaced)} spaced>"

    @property
    def scale_matrix(self):
        return Transformation.from_components(scale=self.scale)

    def template_from_part(self, part):
        """ Part to template space, template scale included. """
        return self.scale_matrix @ part.matrix

    def template_from_mesh(self, part, item):
        return self.template_from_part(part) @ item.matrix

    def main_item(self):
        """ The first visual mesh of the continuous parts as a (part, item) couple, or None. """
        for part in self.continuous:
            for item in part.items:
                if not item.is_collider:
                    return part, item
        return None

    def length(self):
        """ Template space length of the main surface. """
        main = self.main_item()
        if main is None:
            return 0.0
        z0, z1 = main[1].mesh.z_extent(self.template_from_mesh(*main))
        return z1 - z0
