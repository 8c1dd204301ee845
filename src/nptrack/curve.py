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
Module Name: curve
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-22
Last updated: 2025-10-02

Summary:
    One shape unit of a track.

    An ARC curve turns from the current orientation by constant steps over its
    `length`. A BEZIER curve joins the current position to `end_position`; its
    length is computed when the track segments are generated.

    `angles` is (pitch, yaw, bank) in degrees: target pitch, yaw change over
    the curve, target bank.
"""

__all__ = ["Curve"]

import numpy as np

from .constants import ARC, BEZIER, CURVE_TYPES, bfloat

# ====================================================================================================
# Curve
# ====================================================================================================

class Curve:

    def __init__(self, curve_type=ARC, length=50.0, angles=(0., 0., 0.),
                 start_control_pt_dist=0.5, end_control_pt_dist=0.5,
                 end_position=(0., 0., 50.), template=None,
                 is_jump=False, can_respawn=True, name="Curve"):

        self.index = 0
        self.name = name
        self.node = None

        self.curve_type = curve_type
        self.length = length
        self.angles = angles
        self.start_control_pt_dist = float(start_control_pt_dist)
        self.end_control_pt_dist = float(end_control_pt_dist)
        self.end_position = end_position
        self.template = template
        self.is_jump = bool(is_jump)
        self.can_respawn = bool(can_respawn)

    def __str__(self):
        return f"<Curve {self.index} '{self.name}' {self.curve_type}, length: {self.length:.2f}, angles: {self.angles}>"

    def __repr__(self):
        return str(self)

    # ====================================================================================================
    # Validated properties
    # ====================================================================================================

    @property
    def curve_type(self):
        return self._curve_type

    @curve_type.setter
    def curve_type(self, value):
        if value not in CURVE_TYPES:
            raise ValueError(f"Curve> invalid curve type '{value}', valid types are {CURVE_TYPES}")
        self._curve_type = value

    @property
    def is_arc(self):
        return self._curve_type == ARC

    @property
    def is_bezier(self):
        return self._curve_type == BEZIER

    @property
    def length(self):
        return self._length

    @length.setter
    def length(self, value):
        value = float(value)
        if value < 0:
            raise ValueError(f"Curve> length can't be negative: {value}")
        self._length = value

    @property
    def angles(self):
        return self._angles

    @angles.setter
    def angles(self, value):
        a = np.array(value, dtype=bfloat)
        if a.shape != (3,):
            raise ValueError(f"Curve> angles must be (pitch, yaw, bank), not {value}")
        self._angles = a

    @property
    def end_position(self):
        return self._end_position

    @end_position.setter
    def end_position(self, value):
        p = np.array(value, dtype=bfloat)
        if p.shape != (3,):
            raise ValueError(f"Curve> end position must be a 3D vector, not {value}")
        self._end_position = p

    # ====================================================================================================
    # Serialization
    # ====================================================================================================

    def to_dict(self):
        return {
            'name'                  : self.name,
            'curve_type'            : self.curve_type,
            'length'                : self.length,
            'angles'                : self.angles.tolist(),
            'start_control_pt_dist' : self.start_control_pt_dist,
            'end_control_pt_dist'   : self.end_control_pt_dist,
            'end_position'          : self.end_position.tolist(),
            'template'              : None if self.template is None else self.template.name,
            'is_jump'               : self.is_jump,
            'can_respawn'           : self.can_respawn,
        }

    @classmethod
    def from_dict(cls, d, templates=None):
        """
        Build a curve from a dict produced by `to_dict`.

        Parameters
        ----------
        d : dict
        templates : dict, optional
            Templates by name, used to resolve the template reference.

        Raises
        ------
        KeyError
            If the template name can't be resolved.
        """
        d = dict(d)
        name = d.pop('template', None)
        template = None
        if name is not None:
            if templates is None or name not in templates:
                raise KeyError(f"Curve> template '{name}' not found")
            template = templates[name]
        return cls(template=template, **d)
