"""
This module defines impurity metrics and the exhaustive split criterion used to grow model trees.
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

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator

from ._nodes import Split, make_split
from .exceptions import EmptyColumnError, TargetColumnsError
from .matrix import standard_deviation

# Parameter Constants
_METRIC_DEVIATION = "deviation"
_METRIC_GINI = "gini"


def deviation(Y):
    """
    Impurity of a regression target: the standard deviation of the (single) target column.

    Parameters
    ----------
    Y : ColumnMatrix
        Target variable with exactly one column

    Returns
    -------
    impurity : float
    """
    if Y.n_columns != 1:
        raise TargetColumnsError(Y.n_columns)
    return standard_deviation(Y.column(0))


def gini(Y):
    """
    Gini impurity ``1 - sum_c p_c^2`` of a categorical target.

    Parameters
    ----------
    Y : ColumnMatrix
        Target variable with one column per category. Each row holds the probabilities (e.g. a one-hot encoding) of
        the categories, so that ``p_c`` is the mean of column ``c``.

    Returns
    -------
    impurity : float
    """
    if Y.n_rows == 0:
        raise EmptyColumnError("gini")
    p = Y.columns.sum(axis=1) / Y.n_rows
    return float(1.0 - np.sum(p * p))


IMPURITY_METRICS = {
    _METRIC_DEVIATION: deviation,
    _METRIC_GINI: gini,
}


def split_loss(Y_left, Y_right, metric=deviation):
    """
    Computes the loss of a split as the weighted average of the impurities of both sides.
    Each side is weighted by its fraction of samples.

    Parameters
    ----------
    Y_left : ColumnMatrix
        Targets of the samples on the left side
    Y_right : ColumnMatrix
        Targets of the samples on the right side
    metric : callable
        Impurity metric, see :data:`IMPURITY_METRICS`

    Returns
    -------
    loss : float
        The loss, or ``inf`` if one of the sides is empty
    """
    n_left = Y_left.n_rows
    n_right = Y_right.n_rows

    if n_left == 0 or n_right == 0:
        return np.inf

    n_total = n_left + n_right
    return metric(Y_left) * (n_left / n_total) + metric(Y_right) * (n_right / n_total)


class WithParamsMixin:
    """
    A mixin that that adds scikit-learn parameters to a non-estimator class.
    This is helpful for nested objects, e.g. split criteria with hyper-parameters.
    """
    def _get_param_names(self):
        return []

    def get_params(self, deep=True):
        """
        List of parameters of the object.

        Parameters
        ----------
        deep: bool
            If true, the parameters of nested objects will also be added.

        Returns
        -------
        dict
            Dictionary of parameter-value pairs.
        """
        return {name: getattr(self, name) for name in self._get_param_names()}

    # Copying the set_parameter behaviour of sklearn estimators.
    set_params = BaseEstimator.set_params


class ExhaustiveSplitCriterion(WithParamsMixin):
    """
    Split criterion that evaluates every observed feature value as threshold.

    Features are visited in column order and thresholds in row order. The first candidate with the minimal loss (see
    :func:`split_loss`) wins, later candidates with the same loss are ignored.

    Parameters
    ----------
    metric : str or callable (default = "deviation")
        Impurity metric. Supported values are `"deviation"` and `"gini"`.
        It is also possible to provide a function that takes a target ColumnMatrix and returns a float.
    """

    def __init__(self, metric=_METRIC_DEVIATION):
        self.metric = metric

    def __call__(self, X, Y):
        """
        Finds the best split. See :meth:`find_best_split`.
        """
        return self.find_best_split(X, Y)

    def validate_parameters(self):
        """
        Validates the provided criterion parameters.

        Raises
        ------
        ValueError
            If the metric is neither callable nor one of the supported names
        """
        if callable(self.metric):
            self.metric_ = self.metric
        elif isinstance(self.metric, str) and self.metric in IMPURITY_METRICS:
            self.metric_ = IMPURITY_METRICS[self.metric]
        else:
            msg = f"Invalid impurity metric. Got '{self.metric}'. Valid values are {set(IMPURITY_METRICS)} and functions"
            raise ValueError(msg)

    def find_best_split(self, X, Y):
        """
        Finds the split with the minimal loss.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------
        split : Split
            The best split. If no candidate has a finite loss, the split sends all samples to the left side
            (feature 0, threshold ``inf``, score ``inf``).
        left : array of int
            Ascending indices of the samples on the left side
        right : array of int
            Ascending indices of the samples on the right side
        """
        self.validate_parameters()

        best_split = Split(split_feature=0, split_threshold=np.inf, score=np.inf)
        left = np.arange(X.n_rows)
        right = np.empty(0, dtype=left.dtype)

        for i in range(X.n_columns):
            feature = X.column(i)

            # Repeated values yield the same partition, so only their first occurrence is evaluated
            seen = set()
            for threshold in feature:
                if threshold in seen:
                    continue
                seen.add(threshold)

                l, r = make_split(feature, threshold)
                loss = split_loss(Y.select_rows(l), Y.select_rows(r), self.metric_)

                if loss < best_split.score:
                    best_split = Split(split_feature=i, split_threshold=float(threshold), score=float(loss))
                    left, right = l, r

            logger.trace("Feature {}: {} candidates, best score so far {}", i, len(seen), best_split.score)

        return best_split, left, right

    def _get_param_names(self):
        return ["metric"]
