"""
This module defines the linear regression model that is used in the leafs of model trees.
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
import warnings

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils.validation import check_is_fitted

from ._gradients import linear_predictor, gradient_square_loss_sample
from .exceptions import FeatureCountError, NoSamplesError, TargetColumnsError
from .matrix import ColumnMatrix, as_column_matrix, check_row_alignment, min_max


class SGDLinearRegression(RegressorMixin, BaseEstimator):
    """
    Linear regression trained by online stochastic gradient descent on min-max normalized data.

    During `fit`, the observed range of the target and of every feature is stored. All variables are scaled into
    [0, 1] with these ranges, and the coefficients are updated after every single sample, always visiting the samples
    in their original order. Predictions are computed in normalized space and scaled back to the target range.

    Parameters
    ----------
    epochs : int (default = 20)
        Number of passes over the training data
    learning_rate : float (default = 0.01)
        Step size of the gradient descent

    Attributes
    ----------
    beta_ : array, shape = [n_features + 1]
        Coefficients in normalized space. ``beta_[0]`` is the intercept, ``beta_[1:]`` are the feature weights.
    norm_ : list of MinMax
        Observed ranges. ``norm_[0]`` is the range of the target, ``norm_[1:]`` are the ranges of the features.
    n_features_in_ : int
        Number of features seen during `fit`

    Examples
    --------
    >>> reg = SGDLinearRegression(epochs=100).fit([[1.0], [2.0], [3.0]], [2.0, 4.0, 6.0])
    >>> reg.predict([[2.0]]).shape
    (1,)
    """

    def __init__(self, epochs=20, learning_rate=0.01):
        self.epochs = epochs
        self.learning_rate = learning_rate

    def fit(self, X, y):
        """
        Fits the coefficients to the provided training data

        Parameters
        ----------
        X : ColumnMatrix or array-like, shape = [n_samples, n_features]
            Input Features of the training data
        y : ColumnMatrix or array-like, shape = [n_samples] or [n_samples, 1]
            Target variable

        Returns
        -------
        self : object
        """
        X = as_column_matrix(X)
        Y = as_column_matrix(y)

        self._validate_training_data(X, Y)
        self._validate_parameters()

        # Freeze the ranges used for normalization
        self.norm_ = [min_max(Y.column(0))] + [min_max(column) for column in X]
        nX, nY = self.normalize(X, Y)

        features = nX.to_rows()
        targets = nY.column(0)

        beta = np.zeros(X.n_columns + 1)
        for epoch in range(self.epochs):
            # Online updates in the original sample order
            for i in range(X.n_rows):
                beta -= gradient_square_loss_sample(beta, features[i], targets[i], self.learning_rate)
            logger.trace("Epoch {}/{}: beta = {}", epoch + 1, self.epochs, beta)

        if not np.all(np.isfinite(beta)):
            warnings.warn(
                "Gradient descent diverged and produced non-finite coefficients. Consider a smaller learning_rate.",
                ConvergenceWarning
            )

        self.beta_ = beta
        self.n_features_in_ = X.n_columns

        return self

    def predict(self, X, normalized=False):
        """
        Predicts the target for samples in X.

        Parameters
        ----------
        X : ColumnMatrix or array-like, shape = [n_samples, n_features]
            Input Features of the samples
        normalized : bool (default = False)
            If true, `X` is expected to be normalized already and the prediction is returned in normalized space.
            Otherwise `X` is normalized with the feature ranges observed during `fit` and the prediction is returned
            in the original scale of the target.

        Returns
        -------
        z : array, shape = [n_samples]
            Prediction per sample
        """
        check_is_fitted(self, ["beta_", "norm_"])
        X = as_column_matrix(X)

        if X.n_columns != len(self.beta_) - 1:
            raise FeatureCountError(len(self.beta_) - 1, X.n_columns)

        if not normalized:
            X, _ = self.normalize(X)

        z = linear_predictor(self.beta_, X.columns)

        if not normalized:
            z = self.denormalize(z)

        return z

    def normalize(self, X, Y=None):
        """
        Scales features (and targets) into [0, 1] using the ranges observed during `fit`.

        Parameters
        ----------
        X : ColumnMatrix
            Input features
        Y : ColumnMatrix or None
            Target variable. Only the first column is normalized.

        Returns
        -------
        nX : ColumnMatrix
            Normalized features
        nY : ColumnMatrix or None
            Normalized target (or None if no target was provided)
        """
        nX = ColumnMatrix([r.normalize(column) for r, column in zip(self.norm_[1:], X)])

        nY = None
        if Y is not None:
            nY = ColumnMatrix([self.norm_[0].normalize(Y.column(0))])

        return nX, nY

    def denormalize(self, z):
        """
        Scales normalized predictions back to the original range of the target.
        """
        return self.norm_[0].denormalize(z)

    @property
    def intercept_(self):
        """Intercept in normalized space"""
        check_is_fitted(self, "beta_")
        return self.beta_[0]

    @property
    def coef_(self):
        """Feature weights in normalized space"""
        check_is_fitted(self, "beta_")
        return self.beta_[1:]

    def get_state(self):
        """
        Returns the fitted state as plain python data, e.g. for reporting.

        Returns
        -------
        state : dict
            Hyperparameters, coefficients and normalization ranges
        """
        check_is_fitted(self, ["beta_", "norm_"])
        return {
            "epochs": self.epochs,
            "learning_rate": self.learning_rate,
            "beta": [float(b) for b in self.beta_],
            "norm": [{"min": r.min, "max": r.max} for r in self.norm_],
        }

    def _validate_training_data(self, X, Y):
        """
        Validates the training data

        Parameters
        ----------
        X : ColumnMatrix
            Input Features of the training data
        Y : ColumnMatrix
            Target variable.
        """
        if Y.n_columns != 1:
            raise TargetColumnsError(Y.n_columns)
        check_row_alignment(X, Y)
        if X.n_rows == 0:
            raise NoSamplesError()
        if X.n_columns == 0:
            raise FeatureCountError("> 0", 0)

    def _validate_parameters(self):
        """
        Validates the provided model parameters.
        """
        if not isinstance(self.epochs, numbers.Integral) or isinstance(self.epochs, bool) or self.epochs < 0:
            msg = f"`epochs` should be a non-negative int. Got '{self.epochs}'."
            raise ValueError(msg)
        if not isinstance(self.learning_rate, numbers.Real) or not np.isfinite(self.learning_rate) \
                or self.learning_rate <= 0:
            msg = f"`learning_rate` should be a positive number. Got '{self.learning_rate}'."
            raise ValueError(msg)
