"""
This module contains the linear predictor and the square loss gradient that are used to train
:class:`lintrees.linear.SGDLinearRegression` by stochastic gradient descent.

All computations work on normalized data and on a coefficient vector ``beta`` where ``beta[0]`` is the intercept and
``beta[1:]`` are the feature weights.
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


def linear_predictor(beta, columns):
    """
    Evaluates the linear model ``beta[0] + sum_i beta[i + 1] * x_i`` for a set of samples.

    Parameters
    ----------
    beta : array-like, shape = [n_features + 1]
        Intercept followed by the feature weights
    columns : array-like, shape = [n_features, n_samples]
        Input features in column order

    Returns
    -------
    z : array, shape = [n_samples]
        Linear predictor for each sample

    Notes
    -----
    The terms are accumulated feature by feature, starting with the intercept. This fixes the floating point
    summation order and keeps the training trajectory reproducible.
    """
    n_samples = np.shape(columns)[1]
    z = np.full(n_samples, beta[0], dtype=float)
    for i in range(len(beta) - 1):
        z = z + columns[i] * beta[i + 1]
    return z


def gradient_square_loss_sample(beta, x, y, learning_rate):
    """
    Computes the scaled gradient of the (halved) square loss of a linear model with respect to its coefficients
    at a single sample.

    Parameters
    ----------
    beta : array-like, shape = [n_features + 1]
        Current coefficients
    x : array-like, shape = [n_features]
        Normalized features of the sample
    y : float
        Normalized target of the sample
    learning_rate : float
        Step size. The gradient is already multiplied by it.

    Returns
    -------
    step : array, shape = [n_features + 1]
        Update that has to be subtracted from `beta`
    """
    z = linear_predictor(beta, np.reshape(x, (-1, 1)))[0]

    # Residual times learning rate; the intercept gradient equals the residual
    err = (z - y) * learning_rate

    step = np.empty(len(beta), dtype=float)
    step[0] = err
    step[1:] = np.asarray(x, dtype=float) * err
    return step
