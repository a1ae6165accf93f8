"""
Logging utilities for lintrees.

lintrees logs with loguru and is silent by default (``logger.disable("lintrees")`` is called on import).
Use :func:`enable_logging` to print the progress of tree fitting:

* ``INFO``: fitting and prediction calls with data shapes and the size of the fitted tree
* ``DEBUG``: every split and every leaf that is fitted
* ``TRACE``: the split search per feature and the coefficients after every gradient descent epoch
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

import contextlib
import sys
import threading

from loguru import logger

PACKAGE_NAME = __name__.split(".")[0]

_FORMATS = {
    "short": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{function}</cyan> - "
        "<level>{message}</level>"
    ),
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    ),
}


class LoggingHandle:
    """
    Handle for an enabled lintrees log handler.

    The handler is removed by :meth:`disable` or when leaving the ``with`` block. Once the last active handle is
    disabled, lintrees logging is switched off again.

    Parameters
    ----------
    handler_id : int
        The loguru handler ID from ``logger.add()``
    """

    _active_ids = set()
    _lock = threading.Lock()

    def __init__(self, handler_id):
        self.handler_id = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self):
        """
        Removes the handler of this handle.
        """
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disable()

    @classmethod
    def get_active_handle_count(cls):
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(level="INFO", log_format="short", sink=sys.stderr):
    """
    Enables lintrees logging.

    Parameters
    ----------
    level : str (default = "INFO")
        Minimal level of the records that are shown, e.g. `"INFO"`, `"DEBUG"` or `"TRACE"`
    log_format : str (default = "short")
        `"short"` only shows the function name, `"full"` also shows module and line
    sink : object (default = sys.stderr)
        Any sink accepted by ``loguru.logger.add``

    Returns
    -------
    handle : LoggingHandle
        Handle to remove the handler again. It can also be used as context manager.

    Examples
    --------
    >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
    ...     ModelTreeRegressor().fit(X, y)
    """
    if log_format not in _FORMATS:
        msg = f"Invalid log format. Got '{log_format}'. Valid values are {set(_FORMATS)}"
        raise ValueError(msg)

    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(sink, level=level, filter=_is_lintrees_record, format=_FORMATS[log_format])

    return LoggingHandle(handler_id)


def _is_lintrees_record(record):
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
