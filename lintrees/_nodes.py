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
from sklearn.base import clone
from sklearn.exceptions import NotFittedError

from .exceptions import FeatureCountError


def make_split(feature, threshold):
    """
    Partitions samples by comparing one feature against a threshold.

    Parameters
    ----------
    feature : array-like, shape = [n_samples]
        Values of the split feature
    threshold : float
        Samples with a value strictly less than the threshold go to the left side, all others to the right side.

    Returns
    -------
    left : array of int
        Ascending indices of the samples on the left side
    right : array of int
        Ascending indices of the samples on the right side
    """
    is_left = np.asarray(feature, dtype=float) < threshold
    return np.flatnonzero(is_left), np.flatnonzero(~is_left)


class Split:
    """
    Defines a splitting of a model tree node, i.e. the mapping of samples to the child nodes.

    This class supports splits based on one feature and threshold.
    All samples with a feature value (in the given feature) strictly less than the threshold are mapped to the left
    child (0). All others are mapped to the right child (1).

    Parameters
    ----------
    split_feature : int
        Index of the feature that is used for the split
    split_threshold : float
        Threshold for the split.
    score : float
        Loss of the split on the training data

    Attributes
    ----------
    split_feature : int
        Index of the feature that is used for the split
    split_threshold : float
        Threshold for the split.
    score : float
        Loss of the split on the training data
    """
    def __init__(self, split_feature, split_threshold, score=np.nan):
        self.split_feature = split_feature
        self.split_threshold = split_threshold
        self.score = score

    def apply(self, X):
        """
        Splits a set of samples according to the split rule.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the samples

        Returns
        -------
        left : array of int
            Ascending indices of the samples for the left subtree
        right : array of int
            Ascending indices of the samples for the right subtree

        Raises
        ------
        FeatureCountError
            If `X` has no column `split_feature`
        """
        return make_split(self._feature(X), self.split_threshold)

    def map_to_children(self, X):
        """
        Maps samples to child nodes. This is done based on the split feature and threshold

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the samples

        Returns
        -------
        child_idx: array-like, shape = [n_samples]
            For each sample an index (0 for left child, 1 for right child).
        """
        return 1 - (self._feature(X) < self.split_threshold).astype(int)

    def _feature(self, X):
        if self.split_feature >= X.n_columns:
            raise FeatureCountError(f"> {self.split_feature}", X.n_columns)
        return X.column(self.split_feature)

    def __repr__(self):
        return f"Split(split_feature={self.split_feature}, split_threshold={self.split_threshold}, score={self.score})"


def _as_estimator_target(Y):
    # Single targets are passed as vector, just like scikit-learn regressors expect them
    if Y.n_columns == 1:
        return Y.column(0).copy()
    return Y.to_rows()


class LeafNode:
    """
    A leaf of a model tree. Predictions are made by the estimator of the leaf.

    Parameters
    ----------
    estimator : object
        An unfitted scikit-learn compatible regressor
    depth : int
        Zero-based depth of the leaf in the tree

    Attributes
    ----------
    n_samples : int or None
        Number of training samples, or None if no training sample reached this leaf
    """

    def __init__(self, estimator, depth=0):
        self.estimator = estimator
        self.depth = depth
        self.n_samples = None

    def is_leaf(self):
        return True

    def is_fitted(self):
        return self.n_samples is not None

    def fit(self, X, Y):
        """
        Trains the estimator of the leaf.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------
        self : LeafNode
        """
        logger.debug("Fitting leaf at depth {} on {} samples", self.depth, X.n_rows)
        self.estimator.fit(X.to_rows(), _as_estimator_target(Y))
        self.n_samples = X.n_rows
        return self

    def predict(self, X):
        if not self.is_fitted():
            raise NotFittedError(f"The leaf at depth {self.depth} did not receive any training samples.")
        return np.asarray(self.estimator.predict(X.to_rows()))

    def iter_leaves(self):
        yield self

    def to_dict(self):
        """
        Describes the leaf as plain python data.
        """
        info = {
            "leaf": True,
            "depth": self.depth,
            "fitted": self.is_fitted(),
            "n_samples": self.n_samples,
        }
        if self.is_fitted() and hasattr(self.estimator, "get_state"):
            info["model"] = self.estimator.get_state()
        return info


class TreeNode:
    """
    An interior node of a model tree. Each of the two children is either another TreeNode or a LeafNode.

    Do not instantiate this class directly, but use the model tree classes

    Parameters
    ----------
    depth : int, (default=0)
        Zero-based depth of the node in the tree
    max_depth : int, (default=3)
        Maximal depth of interior nodes. Children of nodes at this depth are always leafs.
    base_estimator : object
        Estimator that is cloned for every leaf
    criterion : callable
        Split criterion, see :class:`lintrees.criteria.ExhaustiveSplitCriterion`

    Attributes
    ----------
    split : Split or None
        Defines, how samples are mapped to the child nodes. None, as long as the node is not fitted.
    left : TreeNode or LeafNode
        Child for samples with a feature value below the threshold
    right : TreeNode or LeafNode
        Child for all other samples

    See Also
    --------
    lintrees.ModelTreeRegressor : Model Tree implementation
    Split : Class that defines how split / mapping to the child nodes
    """

    def __init__(self, depth=0, max_depth=3, base_estimator=None, criterion=None):
        self.depth = depth
        self.max_depth = max_depth
        self.base_estimator = base_estimator
        self.criterion = criterion
        self._reset()

    def _reset(self):
        self.split = None
        self.left = self._create_leaf()
        self.right = self._create_leaf()

    def _create_leaf(self):
        return LeafNode(estimator=clone(self.base_estimator), depth=self.depth + 1)

    def _create_child(self):
        return TreeNode(
            depth=self.depth + 1,
            max_depth=self.max_depth,
            base_estimator=self.base_estimator,
            criterion=self.criterion
        )

    def is_leaf(self):
        return False

    def is_fitted(self):
        return self.split is not None

    def split_tree(self, X, Y):
        """
        Searches for the best split and stores it in this node.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------
        left : array of int
            Indices of the samples for the left subtree
        right : array of int
            Indices of the samples for the right subtree
        """
        self.split, left, right = self.criterion(X, Y)
        return left, right

    def fit(self, X, Y):
        """
        Recursively fits the (sub-)tree.

        The node is split and every non-empty side is trained on its samples. As long as the maximal depth is not
        reached, non-empty sides become interior nodes themselves. Empty sides remain unfitted leafs.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.

        Returns
        -------
        self : TreeNode
        """
        self._reset()
        left, right = self.split_tree(X, Y)

        logger.debug(
            "Node at depth {}: feature {} < {} (score {}) sends {} samples left and {} right",
            self.depth, self.split.split_feature, self.split.split_threshold, self.split.score, len(left), len(right)
        )

        if self.depth < self.max_depth:
            if len(left) > 0:
                self.left = self._create_child()
            if len(right) > 0:
                self.right = self._create_child()

        if len(left) > 0:
            self.left.fit(X.select_rows(left), Y.select_rows(left))
        if len(right) > 0:
            self.right.fit(X.select_rows(right), Y.select_rows(right))

        return self

    def predict(self, X):
        """
        Predicts the target for samples in X by routing them to the leafs.

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the samples

        Returns
        -------
        z : array
            Prediction per sample, in the order of `X`
        """
        if not self.is_fitted():
            raise NotFittedError(f"The node at depth {self.depth} is not fitted yet.")

        left, right = self.split.apply(X)

        if len(left) > 0 and len(right) > 0:
            z_left = self.left.predict(X.select_rows(left))
            z_right = self.right.predict(X.select_rows(right))

            # Write the predictions back to the original sample positions
            shape = (X.n_rows,) + np.shape(z_left)[1:]
            z = np.zeros(shape, dtype=np.result_type(z_left, z_right))
            z[left] = z_left
            z[right] = z_right
            return z
        elif len(left) > 0:
            return self.left.predict(X)
        elif len(right) > 0:
            return self.right.predict(X)
        else:
            return np.zeros(0)

    def iter_leaves(self):
        """
        Iterates over all leafs of the sub-tree, from left to right.
        """
        yield from self.left.iter_leaves()
        yield from self.right.iter_leaves()

    def to_dict(self):
        """
        Describes the sub-tree as plain python data (e.g. for reporting).

        Returns
        -------
        info : dict
            Split feature, threshold, score and depth of this node, as well as the description of both children
            under the keys ``"left"`` and ``"right"``.
        """
        split = self.split
        return {
            "leaf": False,
            "feature_index": None if split is None else split.split_feature,
            "threshold": None if split is None else split.split_threshold,
            "score": None if split is None else split.score,
            "depth": self.depth,
            "max_depth": self.max_depth,
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
        }
