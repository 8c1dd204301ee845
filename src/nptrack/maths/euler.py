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
Module Name: euler
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-20
Last updated: 2025-10-02

Summary:
    Track orientations are stored as euler angles in degrees: (pitch, yaw, bank),
    i.e. rotations around the X, Y and Z axes of a Y-up, Z-forward space.

    The rotation is built by applying bank first, then pitch, then yaw:
    `R = Ry(yaw) @ Rx(pitch) @ Rz(bank)`. With this order the forward axis
    doesn't depend on the bank angle.
"""

__all__ = [
    "local_angle", "euler_to_matrix", "forward_vector",
    "direction_from_tangent", "look_rotation", "matrix_to_quaternion",
]

import numpy as np
from scipy.spatial.transform import Rotation

from ..constants import bfloat, ZERO

# ====================================================================================================
# Angles
# ====================================================================================================

def local_angle(angle):
    """ Wrap angle(s) in degrees into [-180, 180[.

    Arguments
    ---------
        - angle (float or array of floats) : angle in degrees

    Returns
    -------
        - float or array of floats
    """
    return np.mod(np.asarray(angle, dtype=bfloat) + 180., 360.) - 180.

# ====================================================================================================
# Euler to matrices
# ====================================================================================================

def euler_to_matrix(angles):
    """
    Rotation matrices from (pitch, yaw, bank) euler angles in degrees.

    Parameters
    ----------
    angles : array_like (..., 3)
        Pitch, yaw and bank in degrees.

    Returns
    -------
    ndarray (..., 3, 3)
        Rotation matrices `Ry @ Rx @ Rz`.
    """
    angles = np.asarray(angles, dtype=bfloat)
    if angles.shape[-1] != 3:
        raise ValueError(f"Euler angles must have shape (..., 3), not {angles.shape}")

    batch_shape = angles.shape[:-1]
    flat = angles.reshape(-1, 3)
    if len(flat) == 0:
        return np.zeros(batch_shape + (3, 3), dtype=bfloat)

    # Extrinsic z, x, y : bank first, yaw last
    mat = Rotation.from_euler('zxy', flat[:, [2, 0, 1]], degrees=True).as_matrix()
    return mat.reshape(batch_shape + (3, 3))

def forward_vector(angles):
    """ Forward (+Z) axis of the orientation(s). """
    return euler_to_matrix(angles)[..., :, 2]

# ====================================================================================================
# Tangent to angles
# ====================================================================================================

def direction_from_tangent(tangent):
    """
    Pitch and yaw (degrees) of a tangent vector.

    `yaw = atan2(dx, dz)` and `pitch = -atan2(dy, sqrt(dx² + dz²))`.

    Parameters
    ----------
    tangent : array_like (..., 3)

    Returns
    -------
    pitch, yaw : ndarrays (...)
    """
    t = np.asarray(tangent, dtype=bfloat)
    dx, dy, dz = t[..., 0], t[..., 1], t[..., 2]
    yaw = np.degrees(np.arctan2(dx, dz))
    pitch = -np.degrees(np.arctan2(dy, np.sqrt(dx*dx + dz*dz)))
    return pitch, yaw

# ====================================================================================================
# Look rotation
# ====================================================================================================

def look_rotation(forward, up=(0., 1., 0.)):
    """
    Rotation matrix whose Z axis points along `forward` and whose Y axis is as
    close as possible to `up`.

    Parameters
    ----------
    forward : array_like (3,)
    up : array_like (3,), default (0, 1, 0)

    Returns
    -------
    ndarray (3, 3)
    """
    z = np.asarray(forward, dtype=bfloat)
    n = np.linalg.norm(z)
    if n < ZERO:
        return np.eye(3, dtype=bfloat)
    z = z/n

    x = np.cross(np.asarray(up, dtype=bfloat), z)
    n = np.linalg.norm(x)
    if n < ZERO:
        # Forward is vertical
        x = np.array((1., 0., 0.), dtype=bfloat)
    else:
        x = x/n
    y = np.cross(z, x)

    return np.stack((x, y, z), axis=-1)

def matrix_to_quaternion(matrix):
    """ Quaternion(s) (x, y, z, w) of rotation matrices (..., 3, 3). """
    m = np.asarray(matrix, dtype=bfloat)
    q = Rotation.from_matrix(m.reshape(-1, 3, 3)).as_quat()
    return q.reshape(m.shape[:-2] + (4,))
