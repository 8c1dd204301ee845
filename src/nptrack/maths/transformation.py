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
Module Name: transformation
Author: Alain Bernard
Version: 0.1.0
Created: 2022-11-11
Last updated: 2025-10-02

Batch of 4×4 homogeneous transformation matrices (column vectors convention).
Inherits from `ItemsArray` with `_item_shape = (4, 4)`. Provides:

- Construction from translation, euler rotation (pitch, yaw, bank) and scale
- Composition (`@` operator) and inversion (`~`)
- Application to points (with translation) and to vectors (without)
- Access to the basis columns and the translation

Example:
    >>> T = Transformation.from_components(translation=[1, 2, 3], euler=[0, 90, 0])
    >>> points = T @ vectors
"""

__all__ = ['Transformation']

import numpy as np

from .itemsarray import ItemsArray
from .euler import euler_to_matrix

class Transformation(ItemsArray):

    _item_shape = (4, 4)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, shape=()):
        mat = np.zeros(tuple(shape) + (4, 4), dtype=cls.FLOAT)
        mat[..., :, :] = np.eye(4, dtype=cls.FLOAT)
        return cls(mat, copy=False)

    @classmethod
    def from_components(cls, translation=None, rotation=None, euler=None, scale=None) -> "Transformation":
        """Build a *Transformation* as `T @ R @ S`.

        Parameters
        ----------
        translation : array_like (..., 3), optional
            Translation vector(s). Default is ``[0, 0, 0]``.
        rotation : array_like (..., 3, 3), optional
            Rotation matrices. Exclusive with `euler`.
        euler : array_like (..., 3), optional
            Pitch, yaw, bank in degrees.
        scale : array_like (..., 3), optional
            Per‑axis scale vector(s). Default is ``[1, 1, 1]``.

        Notes
        -----
        The three components are broadcasted together.
        """
        if rotation is not None and euler is not None:
            raise ValueError("Transformation> 'rotation' and 'euler' can't be both specified")

        t = np.zeros(3, dtype=cls.FLOAT) if translation is None else np.asarray(translation, dtype=cls.FLOAT)
        s = np.ones(3, dtype=cls.FLOAT) if scale is None else np.asarray(scale, dtype=cls.FLOAT)

        if euler is not None:
            r = euler_to_matrix(euler)
        elif rotation is not None:
            r = np.asarray(rotation, dtype=cls.FLOAT)
        else:
            r = np.eye(3, dtype=cls.FLOAT)

        if t.shape[-1] != 3 or s.shape[-1] != 3:
            raise ValueError("Transformation> translation and scale must end with 3 components")
        if r.shape[-2:] != (3, 3):
            raise ValueError("Transformation> rotation must end with (3, 3)")

        batch_shape = np.broadcast_shapes(t.shape[:-1], s.shape[:-1], r.shape[:-2])

        t_b = np.broadcast_to(t, batch_shape + (3,))
        s_b = np.broadcast_to(s, batch_shape + (3,))
        r_b = np.broadcast_to(r, batch_shape + (3, 3))

        mat = np.zeros(batch_shape + (4, 4), dtype=cls.FLOAT)
        mat[..., :3, :3] = r_b * s_b[..., None, :]
        mat[..., :3, 3] = t_b
        mat[..., 3, 3] = 1.0

        return cls(mat, copy=False)

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        """Translation component (view)."""
        return self._mat[..., :3, 3]

    @property
    def basis(self) -> np.ndarray:
        """Rotation-scale block (view). Columns are the transformed X, Y, Z axes."""
        return self._mat[..., :3, :3]

    @property
    def scale(self) -> np.ndarray:
        """Length of the basis columns."""
        return np.linalg.norm(self._mat[..., :3, :3], axis=-2)

    # ------------------------------------------------------------------
    # Inversion
    # ------------------------------------------------------------------

    def inverse(self) -> "Transformation":
        """General inverse (the basis can hold non uniform scale)."""
        return Transformation(np.linalg.inv(self._mat), copy=False)

    def __invert__(self) -> "Transformation":
        return self.inverse()

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self, points) -> np.ndarray:
        """Transform points (translation included).

        Parameters
        ----------
        points : array_like (..., 3)

        Returns
        -------
        ndarray (..., 3)
        """
        points = np.asarray(points, dtype=self.FLOAT)
        if points.shape[-1] != 3:
            raise ValueError("Transformation> points must have shape (..., 3)")
        return np.einsum('...ij,...j->...i', self._mat[..., :3, :3], points) + self._mat[..., :3, 3]

    def apply_vector(self, vectors) -> np.ndarray:
        """Transform vectors (no translation)."""
        vectors = np.asarray(vectors, dtype=self.FLOAT)
        if vectors.shape[-1] != 3:
            raise ValueError("Transformation> vectors must have shape (..., 3)")
        return np.einsum('...ij,...j->...i', self._mat[..., :3, :3], vectors)

    def __matmul__(self, other):
        """Composition if `other` is a Transformation, point transformation otherwise."""
        if isinstance(other, Transformation):
            return Transformation(np.matmul(self._mat, other._mat), copy=False)
        return self.apply(other)

