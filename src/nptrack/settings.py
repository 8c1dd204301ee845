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
Module Name: settings
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-22
Last updated: 2025-10-02

Summary:
    Track configuration.

Usage example:
    >>> settings = TrackSettings(segment_length=0.5, overrun=LOOP)
    >>> TrackSettings.from_dict(settings.to_dict()) == settings
    True
"""

__all__ = ["TrackSettings"]

from dataclasses import dataclass, asdict, fields

from .constants import (BEZIER, BANK_MODES, EXTRAPOLATE, OVERRUN_POLICIES,
                        MAX_SPACING_GROUPS)

@dataclass
class TrackSettings:
    """
    Parameters shared by all the curves of a track.

    Attributes
    ----------
    segment_length : float, default 0.25
        Length of the small segments the curves are broken into.
    bank_mode : str, default 'BEZIER'
        Bank interpolation between curves: 'LINEAR' or 'BEZIER'.
    respawn_height : float, default 0.75
        Height of the respawn point above the track surface.
    respawn_distance : float, default 2.0
        Distance of the respawn point from the start of its curve.
    overrun : str, default 'EXTRAPOLATE'
        How segments past the end are built: 'EXTRAPOLATE' or 'LOOP'.
    loop_seam_offset : float, default 0.001
        Vertical offset applied to looped segments.
    bezier_tolerance : float, default 1e-4
        Subdivision tolerance of the Bézier arc-length tables.
    max_spacing_groups : int, default 16
        Number of spacing groups.
    """

    segment_length: float = 0.25
    bank_mode: str = BEZIER
    respawn_height: float = 0.75
    respawn_distance: float = 2.0
    overrun: str = EXTRAPOLATE
    loop_seam_offset: float = 0.001
    bezier_tolerance: float = 1e-4
    max_spacing_groups: int = MAX_SPACING_GROUPS

    def __post_init__(self):
        if not self.segment_length > 0:
            raise ValueError(f"TrackSettings> segment_length must be positive, not {self.segment_length}")
        if self.bank_mode not in BANK_MODES:
            raise ValueError(f"TrackSettings> invalid bank mode '{self.bank_mode}', valid modes are {BANK_MODES}")
        if self.overrun not in OVERRUN_POLICIES:
            raise ValueError(f"TrackSettings> invalid overrun policy '{self.overrun}', valid policies are {OVERRUN_POLICIES}")
        if self.loop_seam_offset < 0:
            raise ValueError(f"TrackSettings> loop_seam_offset can't be negative: {self.loop_seam_offset}")
        if not self.bezier_tolerance > 0:
            raise ValueError(f"TrackSettings> bezier_tolerance must be positive, not {self.bezier_tolerance}")
        if self.max_spacing_groups < 1:
            raise ValueError(f"TrackSettings> max_spacing_groups must be at least 1, not {self.max_spacing_groups}")

    # ====================================================================================================
    # Serialization
    # ====================================================================================================

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, d):
        names = {f.name for f in fields(cls)}
        unknown = set(d) - names
        if unknown:
            raise ValueError(f"TrackSettings> unknown settings: {sorted(unknown)}")
        return cls(**d)
