import numpy as np
import pytest

from lintrees import ColumnMatrix
from lintrees.criteria import (
    IMPURITY_METRICS, ExhaustiveSplitCriterion, deviation, gini, make_split, split_loss
)
from lintrees.exceptions import TargetColumnsError


def _column(*values):
    return ColumnMatrix([values])


def test_make_split_partitions_all_rows():
    rng = np.random.RandomState(0)
    feature = rng.randint(0, 5, size=50).astype(float)

    for threshold in feature:
        left, right = make_split(feature, threshold)

        np.testing.assert_array_equal(np.sort(np.concatenate([left, right])), np.arange(len(feature)))
        assert np.all(np.diff(left) > 0)
        assert np.all(np.diff(right) > 0)
        assert np.all(feature[left] < threshold)
        assert np.all(feature[right] >= threshold)


def test_make_split_with_minimum_leaves_left_empty():
    left, right = make_split([3.0, 1.0, 2.0], 1.0)
    assert len(left) == 0
    np.testing.assert_array_equal(right, [0, 1, 2])


def test_split_loss_with_empty_side_is_infinite():
    empty = ColumnMatrix([[]])
    assert split_loss(empty, _column(1.0, 2.0)) == np.inf
    assert split_loss(_column(1.0, 2.0), empty) == np.inf


def test_split_loss_is_weighted_average():
    assert split_loss(_column(1.0, 2.0), _column(3.0, 4.0)) == pytest.approx(0.5)
    # 1/4 * 0 + 3/4 * std([2, 3, 4])
    assert split_loss(_column(1.0), _column(2.0, 3.0, 4.0)) == pytest.approx(0.75 * np.sqrt(2 / 3))


def test_deviation_requires_single_column():
    assert deviation(_column(1.0, 1.0)) == 0.0
    with pytest.raises(TargetColumnsError):
        deviation(ColumnMatrix([[1.0, 2.0], [3.0, 4.0]]))


def test_gini_of_pure_one_hot_target_is_zero():
    Y = ColumnMatrix([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
    assert gini(Y) == 0.0


def test_gini_of_balanced_target():
    Y = ColumnMatrix([[1.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 1.0]])
    assert gini(Y) == 0.5


def test_metric_registry():
    assert IMPURITY_METRICS == {"deviation": deviation, "gini": gini}


def test_best_split_on_linear_data():
    X = _column(1.0, 2.0, 3.0, 4.0)
    Y = _column(1.0, 2.0, 3.0, 4.0)

    split, left, right = ExhaustiveSplitCriterion()(X, Y)

    assert split.split_feature == 0
    assert split.split_threshold == 3.0
    assert split.score == pytest.approx(0.5)
    np.testing.assert_array_equal(left, [0, 1])
    np.testing.assert_array_equal(right, [2, 3])


def test_best_split_skips_constant_features():
    X = ColumnMatrix([[1.0, 1.0, 1.0, 1.0], [4.0, 3.0, 2.0, 1.0]])
    Y = _column(1.0, 1.0, 5.0, 5.0)

    split, left, right = ExhaustiveSplitCriterion().find_best_split(X, Y)

    assert split.split_feature == 1
    assert split.split_threshold == 3.0
    assert split.score == 0.0
    np.testing.assert_array_equal(left, [2, 3])
    np.testing.assert_array_equal(right, [0, 1])


def test_first_feature_wins_ties():
    X = ColumnMatrix([[1.0, 2.0, 3.0, 4.0], [1.0, 2.0, 3.0, 4.0]])
    Y = _column(0.0, 0.0, 1.0, 1.0)

    split, _, _ = ExhaustiveSplitCriterion()(X, Y)
    assert split.split_feature == 0


def test_first_threshold_wins_ties():
    # Thresholds 2 and 3 both have the loss 2/3 * 0.5
    X = _column(1.0, 2.0, 3.0)
    Y = _column(0.0, 1.0, 0.0)

    split, left, right = ExhaustiveSplitCriterion()(X, Y)
    assert split.split_threshold == 2.0
    np.testing.assert_array_equal(left, [0])


def test_thresholds_are_visited_in_row_order():
    # A constant metric makes every split with two non-empty sides equally good
    X = _column(3.0, 1.0, 2.0)
    Y = _column(1.0, 2.0, 3.0)

    split, left, right = ExhaustiveSplitCriterion(metric=lambda Y_: 1.0)(X, Y)
    assert split.split_threshold == 3.0
    np.testing.assert_array_equal(left, [1, 2])
    np.testing.assert_array_equal(right, [0])


def test_no_split_sends_all_rows_left():
    split, left, right = ExhaustiveSplitCriterion()(_column(2.0), _column(5.0))

    assert split.split_feature == 0
    assert split.split_threshold == np.inf
    assert split.score == np.inf
    np.testing.assert_array_equal(left, [0])
    assert len(right) == 0


def test_gini_criterion_on_one_hot_targets():
    X = _column(1.0, 2.0, 3.0, 4.0)
    Y = ColumnMatrix([[1.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 1.0]])

    split, left, right = ExhaustiveSplitCriterion(metric="gini")(X, Y)
    assert split.split_threshold == 3.0
    assert split.score == 0.0


def test_invalid_metric_raises():
    with pytest.raises(ValueError):
        ExhaustiveSplitCriterion(metric="entropy").validate_parameters()


def test_criterion_parameters():
    criterion = ExhaustiveSplitCriterion()
    assert criterion.get_params() == {"metric": "deviation"}
    criterion.set_params(metric="gini")
    assert criterion.metric == "gini"


def test_constant_target_keeps_first_two_sided_candidate():
    # The first candidate 4.0 already gives two non-empty sides
    X = _column(4.0, 3.0, 2.0, 1.0, 5.0, 6.0)
    Y = _column(*([0.1] * 6))

    split, left, right = ExhaustiveSplitCriterion()(X, Y)
    assert split.split_threshold == 4.0
    assert split.score == 0.0
    np.testing.assert_array_equal(left, [1, 2, 3])


def test_pure_sides_with_inexact_values_score_zero():
    X = _column(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    Y = _column(0.1, 0.1, 0.1, 0.7, 0.7, 0.7)

    split, _, _ = ExhaustiveSplitCriterion()(X, Y)
    assert split.split_threshold == 4.0
    assert split.score == 0.0
