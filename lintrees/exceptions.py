"""
Exceptions raised by model trees and their building blocks.

All precondition violations subclass :class:`ValueError` (following the scikit-learn convention), grouped as

* Shape errors (:class:`ShapeError`): mismatched row counts, out-of-range row indices, wrong feature counts and
  ragged column collections.
* Degenerate input (:class:`EmptyColumnError`): statistics requested on an empty column.
* Fit errors (:class:`FitError`): no training samples or a target with the wrong number of columns.

Using an estimator before it was fitted raises :class:`sklearn.exceptions.NotFittedError`.
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


class ShapeError(ValueError):
    """
    Base class for all errors caused by inconsistent matrix shapes.
    """


class RowCountMismatchError(ShapeError):
    """
    Raised when two row-aligned matrices (e.g. features and targets) have different row counts.

    Attributes
    ----------
    n_rows_X : int
        Number of rows of the feature matrix
    n_rows_Y : int
        Number of rows of the target matrix
    """

    def __init__(self, n_rows_X, n_rows_Y):
        super().__init__(f"Features and targets must have the same number of rows. Got {n_rows_X} and {n_rows_Y}.")
        self.n_rows_X = n_rows_X
        self.n_rows_Y = n_rows_Y


class RowIndexError(ShapeError, IndexError):
    """
    Raised when a row index does not address a row of the matrix.

    Attributes
    ----------
    index : int
        The offending index
    n_rows : int
        Number of rows of the matrix
    """

    def __init__(self, index, n_rows):
        super().__init__(f"Row index {index} is out of bounds for a matrix with {n_rows} rows.")
        self.index = index
        self.n_rows = n_rows


class FeatureCountError(ShapeError):
    """
    Raised when the number of feature columns does not match what a (fitted) model expects.

    Attributes
    ----------
    expected : int or str
        Expected number of features (or a description such as ``"> 3"``)
    got : int
        Number of features that were provided
    """

    def __init__(self, expected, got):
        super().__init__(f"Wrong number of features. Expected {expected}, got {got}.")
        self.expected = expected
        self.got = got


class RaggedColumnsError(ShapeError):
    """
    Raised when the columns of a matrix do not share the same length.

    Attributes
    ----------
    lengths : list of int
        The length of every column
    """

    def __init__(self, lengths):
        super().__init__(f"All columns of a matrix must have the same length. Got lengths {lengths}.")
        self.lengths = lengths


class EmptyColumnError(ValueError):
    """
    Raised when a statistic (mean, min-max range, standard deviation, ...) is requested for an empty column.

    Attributes
    ----------
    operation : str
        Name of the statistic that was requested
    """

    def __init__(self, operation):
        super().__init__(f"Cannot compute '{operation}' of an empty column.")
        self.operation = operation


class FitError(ValueError):
    """
    Base class for errors caused by training data that a model cannot be fitted on.
    """


class NoSamplesError(FitError):
    """
    Raised when a model is fitted on zero training rows.
    """

    def __init__(self):
        super().__init__("Cannot fit a model on zero samples.")


class TargetColumnsError(FitError):
    """
    Raised when a regression target does not consist of exactly one column.

    Attributes
    ----------
    n_columns : int
        Number of target columns that were provided
    """

    def __init__(self, n_columns):
        super().__init__(f"Regression requires exactly one target column. Got {n_columns}.")
        self.n_columns = n_columns
