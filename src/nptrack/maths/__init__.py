from .euler import (local_angle, euler_to_matrix, forward_vector,
                    direction_from_tangent, look_rotation, matrix_to_quaternion)
from .transformation import Transformation
from .curve1d import Curve1D, LinearCurve1D, BezierCurve1D, get_curve1d
from .bezier import CubicBezier, ArcLengthTable

__all__ = [
    "local_angle", "euler_to_matrix", "forward_vector",
    "direction_from_tangent", "look_rotation", "matrix_to_quaternion",
    "Transformation",
    "Curve1D", "LinearCurve1D", "BezierCurve1D", "get_curve1d",
    "CubicBezier", "ArcLengthTable",
]
