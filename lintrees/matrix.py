"""
This module defines the column-oriented matrix that model trees operate on, together with the column statistics
used for normalization and impurity computation.
"""

#  Copyright 2019 SCHUFA Holding AG
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

from typing import NamedTuple

import numpy as np

from .exceptions import EmptyColumnError, RaggedColumnsError, RowCountMismatchError, RowIndexError


class ColumnMatrix:
    """
    An ordered collection of numeric columns of equal length.

    Column matrices are values: the data is copied on construction and cannot be modified afterwards.
    Selecting rows always produces a new, independent matrix.

    Parameters
    ----------
    columns : iterable of array-like
        The columns of the matrix. All columns must have the same length.

    Raises
    ------
    RaggedColumnsError
        If the columns differ in length

    Examples
    --------
    >>> M = ColumnMatrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    >>> M.shape
    (3, 2)
    >>> M.select_rows([2, 0]).column(1)
    array([6., 4.])
    """

    def __init__(self, columns=()):
        columns = [np.array(c, dtype=float).reshape(-1) for c in columns]

        lengths = [len(c) for c in columns]
        if len(set(lengths)) > 1:
            raise RaggedColumnsError(lengths)

        n_rows = lengths[0] if lengths else 0
        data = np.array(columns, dtype=float).reshape(len(columns), n_rows)
        self._set_data(data)

    @classmethod
    def from_rows(cls, X):
        """
        Creates a column matrix from row-major data, e.g. a scikit-learn style feature matrix.

        Parameters
        ----------
        X : array-like, shape = [n_samples, n_features] or [n_samples]
            Input data. One-dimensional input is interpreted as a single column.

        Returns
        -------
        matrix : ColumnMatrix
            Matrix with ``n_features`` columns and ``n_samples`` rows
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2:
            raise ValueError(f"Expected a one- or two-dimensional array, got {X.ndim} dimensions.")

        return cls._from_array(X.T.copy())

    @classmethod
    def _from_array(cls, data):
        # `data` has shape (n_columns, n_rows) and must not be shared with anybody else
        matrix = cls.__new__(cls)
        matrix._set_data(data)
        return matrix

    def _set_data(self, data):
        data.flags.writeable = False
        self._data = data

    @property
    def n_rows(self):
        """Number of rows"""
        return self._data.shape[1]

    @property
    def n_columns(self):
        """Number of columns"""
        return self._data.shape[0]

    @property
    def columns(self):
        """Read-only array of shape ``(n_columns, n_rows)``"""
        return self._data

    @property
    def shape(self):
        """Shape as ``(n_rows, n_columns)``, following the row-major convention of scikit-learn."""
        return self.n_rows, self.n_columns

    def column(self, j):
        """
        Returns a read-only view on column `j`.
        """
        return self._data[j]

    def to_rows(self):
        """
        Converts the matrix to a (writeable) row-major array of shape ``[n_rows, n_columns]``.
        """
        return self._data.T.copy()

    def select_rows(self, indices):
        """
        Creates a new matrix from a subset of rows. See :func:`select_rows`.
        """
        return select_rows(self, indices)

    def __iter__(self):
        return iter(self._data)

    def __eq__(self, other):
        if not isinstance(other, ColumnMatrix):
            return NotImplemented
        return self._data.shape == other._data.shape and np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self):
        return f"ColumnMatrix(n_rows={self.n_rows}, n_columns={self.n_columns})"


class MinMax(NamedTuple):
    """
    The observed range of one variable. Used to scale values into [0, 1] and back.
    """
    min: float
    max: float

    @property
    def width(self):
        """
        Width of the range. Degenerate ranges (``max == min``) have width 1 to avoid divisions by zero.
        """
        width = self.max - self.min
        if width == 0:
            return 1.0
        return width

    def normalize(self, values):
        return (np.asarray(values, dtype=float) - self.min) / self.width

    def denormalize(self, values):
        return np.asarray(values, dtype=float) * self.width + self.min


def select_rows(matrix, indices):
    """
    Copies the given rows of a matrix into a new matrix.

    Parameters
    ----------
    matrix : ColumnMatrix
        The source matrix
    indices : array-like of int
        Zero-based row indices. Rows are copied in the given order; indices may repeat.

    Returns
    -------
    matrix : ColumnMatrix
        New matrix with the same number of columns and ``len(indices)`` rows

    Raises
    ------
    RowIndexError
        If any index is negative or not smaller than the number of rows
    """
    indices = np.asarray(indices)
    if indices.size == 0:
        indices = indices.astype(np.intp).reshape(0)
    elif not np.issubdtype(indices.dtype, np.integer):
        raise ValueError(f"Row indices must be integers, got dtype {indices.dtype}.")
    indices = indices.reshape(-1)

    n_rows = matrix.n_rows
    invalid = indices[(indices < 0) | (indices >= n_rows)]
    if invalid.size > 0:
        raise RowIndexError(int(invalid[0]), n_rows)

    return ColumnMatrix._from_array(matrix._data[:, indices])


def as_column_matrix(data):
    """
    Converts scikit-learn style row-major data to a :class:`ColumnMatrix`. Column matrices are passed through.
    """
    if isinstance(data, ColumnMatrix):
        return data
    return ColumnMatrix.from_rows(data)


def check_row_alignment(X, Y):
    """
    Checks that two matrices have the same number of rows.

    Raises
    ------
    RowCountMismatchError
        If the number of rows differs
    """
    if X.n_rows != Y.n_rows:
        raise RowCountMismatchError(X.n_rows, Y.n_rows)


def _non_empty_column(column, operation):
    column = np.asarray(column, dtype=float).reshape(-1)
    if column.size == 0:
        raise EmptyColumnError(operation)
    return column


def _is_constant(column):
    # Constant columns have an exact mean and no deviation
    return column.min() == column.max()


def mean(column):
    """
    Arithmetic mean of a non-empty column.

    Raises
    ------
    EmptyColumnError
        If the column is empty
    """
    column = _non_empty_column(column, "mean")
    if _is_constant(column):
        return float(column[0])
    return float(column.sum() / column.size)


def min_max(column):
    """
    Minimal and maximal value of a non-empty column.

    Raises
    ------
    EmptyColumnError
        If the column is empty
    """
    column = _non_empty_column(column, "min_max")
    return MinMax(float(column.min()), float(column.max()))


def standard_deviation(column):
    """
    Population standard deviation, i.e. the square root of the mean squared deviation from the mean.

    Raises
    ------
    EmptyColumnError
        If the column is empty
    """
    column = _non_empty_column(column, "standard_deviation")
    if _is_constant(column):
        return 0.0
    deviations = column - mean(column)
    return float(np.sqrt(np.sum(deviations * deviations) / column.size))
