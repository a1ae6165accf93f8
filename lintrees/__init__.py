"""
This package defines model trees as scikit-learn compatible estimators for regression.

A model tree is a decision tree whose leafs contain linear models instead of constants.
The tree structure is found by an exhaustive search over all observed feature values, and the leafs are linear
regressions that are trained by stochastic gradient descent on min-max normalized data.
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

from loguru import logger

from ._trees import ModelTreeRegressor
from .linear import SGDLinearRegression
from .logging import PACKAGE_NAME, enable_logging
from .matrix import ColumnMatrix

logger.disable(PACKAGE_NAME)

__all__ = ["ModelTreeRegressor", "SGDLinearRegression", "ColumnMatrix", "enable_logging"]
