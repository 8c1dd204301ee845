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
Module Name: itemsarray
Author: Alain Bernard
Version: 0.1.0
Created: 2022-11-11
Last updated: 2025-10-02

Base class for a batch of fixed-shape items (vectors, 4x4 matrices) backed by a
numpy array. Subclasses only declare `_item_shape`.

Typical usage:

    >>> class Vectors(ItemsArray):
    ...     _item_shape = (3,)
    >>> V = Vectors([[1, 2, 3], [4, 5, 6]])
    >>> V.shape
    (2,)
"""

__all__ = ['ItemsArray']

import numpy as np

from ..constants import bfloat

# ====================================================================================================
# ItemsArray
# ====================================================================================================

class ItemsArray:

    FLOAT = bfloat
    __array_priority__ = 10.0
    __slots__ = ("_mat",)
    _item_shape = (3,)

    def __init__(self, mat, *, copy: bool = True):
        """
        Wrap an array-like whose trailing dimensions match `_item_shape`.

        Parameters
        ----------
        mat : array_like
            Input data, shape (..., *_item_shape).
        copy : bool, default True
            Copy the input rather than keeping a view.

        Raises
        ------
        ValueError
            If the trailing dimensions don't match the item shape.
        """
        mat = np.asarray(mat, dtype=self.FLOAT)

        item_ndim = len(self._item_shape)
        if mat.shape[mat.ndim - item_ndim:] != self._item_shape:
            raise ValueError(f"{type(self).__name__}> Input shape {mat.shape} doesn't end with item shape {self._item_shape}")

        self._mat = mat.copy() if copy else mat

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self):
        if self.is_scalar:
            raise TypeError(f"{type(self).__name__}> len() of a single item")
        return self._mat.shape[0]

    def __repr__(self):
        return f"<{type(self).__name__}(shape={self.shape}, dtype={self._mat.dtype})>"

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self._mat, dtype=dtype)

    def __getitem__(self, key):
        if self.is_scalar:
            raise TypeError(f"{type(self).__name__}> a single item is not subscriptable")
        return type(self)(self._mat[key], copy=False)

    def __setitem__(self, key, value):
        self._mat[key] = np.asarray(value, dtype=self._mat.dtype)

    def __iter__(self):
        return (type(self)(x, copy=False) for x in self._mat)

    # ------------------------------------------------------------------
    # Shaping helpers
    # ------------------------------------------------------------------

    @property
    def is_scalar(self):
        return self._mat.shape == self._item_shape

    @property
    def shape(self) -> tuple:
        """Batch shape (everything *except* the item shape)."""
        return self._mat.shape[:self._mat.ndim - len(self._item_shape)]

    def copy(self):
        return type(self)(self._mat.copy(), copy=False)
