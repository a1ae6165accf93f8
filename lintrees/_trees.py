"""
This module defines the model tree estimator for regression.
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

import numbers

from loguru import logger
from sklearn.base import MetaEstimatorMixin, BaseEstimator, RegressorMixin, clone
from sklearn.utils.validation import check_is_fitted

from ._nodes import TreeNode
from . import criteria
from .exceptions import FeatureCountError, NoSamplesError
from .linear import SGDLinearRegression
from .matrix import as_column_matrix, check_row_alignment


class ModelTreeRegressor(RegressorMixin, MetaEstimatorMixin, BaseEstimator):
    """
    Model Tree implementation for regression problems.

    The tree is grown by an exhaustive search over all observed feature values (see
    :class:`lintrees.criteria.ExhaustiveSplitCriterion`) up to the maximal depth. The leafs contain linear models
    that are trained on the samples reaching them.

    Parameters
    ----------
    base_estimator
        Base estimator to be used in the leafs. This should be an scikit-learn compatible regressor.
    criterion : str, callable or ExhaustiveSplitCriterion (default = "deviation")
        Impurity metric used to evaluate splits. Supported values are `"deviation"` and `"gini"`.
        It is also possible to provide a function that takes a target ColumnMatrix and returns the impurity, or a
        configured criterion object.
    max_depth : int (default = 3)
        Maximal depth of the interior nodes. With ``max_depth = 0`` the tree consists of a root node with two leafs.

    Attributes
    ----------
    root_ : TreeNode
        Root Node of the tree structure
    n_features_in_ : int
        Number of features seen during `fit`
    n_outputs_ : int
        Number of target columns seen during `fit`

    Examples
    --------
    >>> X = [[1.0], [2.0], [3.0], [4.0]]
    >>> tree = ModelTreeRegressor(max_depth=1).fit(X, [1.0, 2.0, 3.0, 4.0])
    >>> tree.export_tree()["threshold"]
    3.0
    """
    root_: TreeNode
    n_features_in_: int
    n_outputs_: int

    def __init__(self,
                 base_estimator=SGDLinearRegression(),
                 criterion="deviation",
                 max_depth=3):
        self.base_estimator = base_estimator
        self.criterion = criterion
        self.max_depth = max_depth

    def fit(self, X, y):
        """
        Train a model tree on the provided training data

        Parameters
        ----------
        X : ColumnMatrix or array-like, shape = [n_samples, n_features]
            Input Features of the training data
        y : ColumnMatrix or array-like, shape = [n_samples] or [n_samples, n_outputs]
            Target variable.

        Returns
        -------
        self : object
        """
        # Check model parameters
        self._validate_parameters()

        # Check input data
        X = as_column_matrix(X)
        Y = as_column_matrix(y)
        self._validate_training_data(X, Y)

        logger.info("Fitting model tree with max_depth={} on {} samples and {} features", self.max_depth, *X.shape)

        # Create the tree structure. Attributes are only set once the whole tree is fitted.
        root = self._create_tree_structure(X, Y)
        self.root_ = root
        self.n_features_in_ = X.n_columns
        self.n_outputs_ = Y.n_columns

        logger.info("Fitted model tree with depth {} and {} leafs", self.get_depth(), self.get_n_leaves())

        return self

    def _validate_parameters(self):
        """
        Validates the provided model parameters.

        Returns
        -------

        """
        if not isinstance(self.max_depth, numbers.Integral) or isinstance(self.max_depth, bool) or self.max_depth < 0:
            msg = f"`max_depth` should be a non-negative int. Got '{self.max_depth}'."
            raise ValueError(msg)

        # Check criterion
        if isinstance(self.criterion, criteria.ExhaustiveSplitCriterion):
            self.criterion_ = clone(self.criterion)
        elif callable(self.criterion) or \
                (isinstance(self.criterion, str) and self.criterion in criteria.IMPURITY_METRICS):
            # Impurity metrics can be given by name or as function
            self.criterion_ = criteria.ExhaustiveSplitCriterion(metric=self.criterion)
        else:
            msg = f"Invalid Split Criterion. Got '{self.criterion}'. " \
                  f"Valid values are {set(criteria.IMPURITY_METRICS)}, functions and split criterion objects"
            raise ValueError(msg)

        self.criterion_.validate_parameters()

    def _validate_training_data(self, X, Y):
        """
        Validates the training data

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------

        """
        check_row_alignment(X, Y)
        if X.n_rows == 0:
            raise NoSamplesError()

    def _create_tree_structure(self, X, Y):
        """
        Creates the model tree structure with respect to the provided training data.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------
        root : TreeNode
            Root node of the created tree
        """
        root = TreeNode(
            depth=0,
            max_depth=self.max_depth,
            base_estimator=self.base_estimator,
            criterion=self.criterion_
        )
        return root.fit(X, Y)

    def predict(self, X):
        """
        Predict the target for samples in X.

        Parameters
        ----------
        X : ColumnMatrix or array-like, shape = [n_samples, n_features]
            Input Features of the samples

        Returns
        -------
        O : array, shape = [n_samples] or [n_samples, n_outputs]
            Prediction per sample
        """
        check_is_fitted(self, "root_")

        X = as_column_matrix(X)
        if X.n_columns != self.n_features_in_:
            raise FeatureCountError(self.n_features_in_, X.n_columns)

        logger.info("Predicting {} samples", X.n_rows)

        return self.root_.predict(X)

    def export_tree(self):
        """
        Describes the fitted tree structure as plain python data.

        Returns
        -------
        tree : dict
            Nested dictionaries, see :meth:`lintrees._nodes.TreeNode.to_dict`
        """
        check_is_fitted(self, "root_")
        return self.root_.to_dict()

    def get_depth(self):
        """
        Returns the depth of the deepest fitted leaf, i.e. the maximal number of splits on the way to a prediction.
        """
        check_is_fitted(self, "root_")
        return max(leaf.depth for leaf in self.root_.iter_leaves() if leaf.is_fitted())

    def get_n_leaves(self):
        """
        Returns the number of fitted leafs.
        """
        check_is_fitted(self, "root_")
        return sum(1 for leaf in self.root_.iter_leaves() if leaf.is_fitted())
