from .settings import TrackSettings
from .host import HostServices, NullHostServices, RecordingHostServices
from .scene import SceneNode
from .curve import Curve
from .segment import Segment, SegmentArray
from .segmenter import generate_segments
from .mesh import Mesh
from .template import Template, ContinuousPart, MeshItem, SpacedPart, SpacingGroup
from .warp import warp_mesh
from .spacing import SpacingGroupState, SpacingGroupStates, verticalize
from .build import BuildState, MeshBuilder
from .runtime import CurveRuntimeInfo, compute_curve_infos, next_curve_index, respawn_curve_index
from .track import Track, TrackError

from . import constants
from . import maths

from .maths import Transformation

VERSION = (0, 1, 0)

__version__ = ".".join(map(str, VERSION))

__all__ = [
    "VERSION",
    "TrackSettings",
    "HostServices", "NullHostServices", "RecordingHostServices",
    "SceneNode",
    "Curve",
    "Segment", "SegmentArray", "generate_segments",
    "Mesh",
    "Template", "ContinuousPart", "MeshItem", "SpacedPart", "SpacingGroup",
    "warp_mesh",
    "SpacingGroupState", "SpacingGroupStates", "verticalize",
    "BuildState", "MeshBuilder",
    "CurveRuntimeInfo", "compute_curve_infos", "next_curve_index", "respawn_curve_index",
    "Track", "TrackError",
    "constants",
    "maths",
    "Transformation",
]

# ---------------------------------------------------------------------------
# Add from all

from .constants import *
__all__.extend(list(constants.__all__))
