import pytest
from loguru import logger

from lintrees import ModelTreeRegressor, enable_logging
from lintrees.logging import LoggingHandle


def _fit_small_tree():
    ModelTreeRegressor(max_depth=1).fit([[1.0], [2.0], [3.0], [4.0]], [1.0, 2.0, 3.0, 4.0])


def test_silent_by_default():
    messages = []
    handler_id = logger.add(messages.append, level="TRACE")
    try:
        logger.info("outside of lintrees")
        _fit_small_tree()
    finally:
        logger.remove(handler_id)

    assert any("outside of lintrees" in m for m in messages)
    assert not any(m.record["name"].startswith("lintrees") for m in messages)


def test_enable_logging_captures_fit_messages():
    messages = []
    with enable_logging(level="DEBUG", sink=messages.append) as handle:
        assert LoggingHandle.get_active_handle_count() == 1
        _fit_small_tree()

    assert handle.handler_id is None
    assert LoggingHandle.get_active_handle_count() == 0
    assert any("Fitting model tree with max_depth=1 on 4 samples and 1 features" in m for m in messages)
    assert any("Fitting leaf at depth 2" in m for m in messages)


def test_level_filters_messages():
    messages = []
    with enable_logging(level="INFO", sink=messages.append):
        _fit_small_tree()

    assert any("Fitted model tree with depth 2 and 4 leafs" in m for m in messages)
    assert not any("Fitting leaf" in m for m in messages)


def test_disable_is_idempotent():
    handle = enable_logging(sink=lambda m: None)
    handle.disable()
    handle.disable()
    assert LoggingHandle.get_active_handle_count() == 0


def test_invalid_format_raises():
    with pytest.raises(ValueError):
        enable_logging(log_format="verbose")


def test_repeated_values_are_evaluated_once():
    messages = []
    with enable_logging(level="TRACE", sink=messages.append):
        ModelTreeRegressor(max_depth=0).fit([[1.0], [1.0], [2.0], [1.0]], [1.0, 2.0, 3.0, 4.0])

    assert any("Feature 0: 2 candidates" in m for m in messages)
