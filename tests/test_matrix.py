import numpy as np
import pytest

from lintrees.exceptions import EmptyColumnError, RaggedColumnsError, RowCountMismatchError, RowIndexError
from lintrees.matrix import (
    ColumnMatrix, MinMax, as_column_matrix, check_row_alignment, mean, min_max, select_rows, standard_deviation
)


def _matrix():
    return ColumnMatrix([[1.0, 2.0, 3.0, 4.0], [10.0, 20.0, 30.0, 40.0]])


def test_shape_and_columns():
    M = _matrix()
    assert M.shape == (4, 2)
    assert M.n_rows == 4
    assert M.n_columns == 2
    np.testing.assert_array_equal(M.column(1), [10.0, 20.0, 30.0, 40.0])
    assert len(list(M)) == 2


def test_from_rows_matches_column_constructor():
    M = ColumnMatrix.from_rows([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0], [4.0, 40.0]])
    assert M == _matrix()
    np.testing.assert_array_equal(M.to_rows(), [[1.0, 10.0], [2.0, 20.0], [3.0, 30.0], [4.0, 40.0]])


def test_from_rows_one_dimensional_is_single_column():
    M = ColumnMatrix.from_rows([1.0, 2.0, 3.0])
    assert M.shape == (3, 1)


def test_as_column_matrix_passes_matrices_through():
    M = _matrix()
    assert as_column_matrix(M) is M
    assert as_column_matrix(M.to_rows()) == M


def test_ragged_columns_raise():
    with pytest.raises(RaggedColumnsError) as e:
        ColumnMatrix([[1.0, 2.0], [1.0]])
    assert e.value.lengths == [2, 1]


def test_matrix_is_immutable_copy():
    source = np.array([1.0, 2.0, 3.0])
    M = ColumnMatrix([source])
    source[0] = 100.0
    assert M.column(0)[0] == 1.0
    with pytest.raises(ValueError):
        M.column(0)[0] = 5.0


def test_select_all_rows_in_order_returns_equal_matrix():
    M = _matrix()
    assert select_rows(M, np.arange(M.n_rows)) == M


def test_select_rows_keeps_given_order_and_repeats():
    M = _matrix()
    S = M.select_rows([3, 0, 3])
    assert S.shape == (3, 2)
    np.testing.assert_array_equal(S.column(0), [4.0, 1.0, 4.0])
    np.testing.assert_array_equal(S.column(1), [40.0, 10.0, 40.0])


def test_select_rows_returns_independent_copy():
    M = _matrix()
    S = M.select_rows([0, 1])
    assert not np.shares_memory(S.columns, M.columns)


def test_select_no_rows():
    S = _matrix().select_rows([])
    assert S.shape == (0, 2)


@pytest.mark.parametrize("index", [4, -1, 100])
def test_select_rows_out_of_bounds(index):
    with pytest.raises(RowIndexError) as e:
        _matrix().select_rows([0, index])
    assert e.value.index == index
    assert e.value.n_rows == 4
    assert isinstance(e.value, IndexError)


def test_select_rows_rejects_non_integer_indices():
    with pytest.raises(ValueError):
        _matrix().select_rows([0.0, 1.0])


def test_check_row_alignment():
    check_row_alignment(_matrix(), ColumnMatrix([[1.0, 2.0, 3.0, 4.0]]))
    with pytest.raises(RowCountMismatchError):
        check_row_alignment(_matrix(), ColumnMatrix([[1.0, 2.0]]))


def test_statistics():
    column = [1.0, 2.0, 3.0, 4.0]
    assert mean(column) == 2.5
    assert min_max(column) == MinMax(1.0, 4.0)
    assert standard_deviation(column) == pytest.approx(np.sqrt(1.25))


def test_standard_deviation_of_constant_column_is_zero():
    assert standard_deviation([2.5, 2.5, 2.5, 2.5]) == 0.0


@pytest.mark.parametrize("value", [0.1, 0.7, 3.3, -1e-7])
def test_statistics_of_inexact_constant_column(value):
    column = [value] * 3
    assert mean(column) == value
    assert standard_deviation(column) == 0.0


@pytest.mark.parametrize("statistic", [mean, min_max, standard_deviation])
def test_statistics_of_empty_column_raise(statistic):
    with pytest.raises(EmptyColumnError):
        statistic([])


def test_min_max_degenerate_width():
    assert MinMax(3.0, 3.0).width == 1.0
    assert MinMax(1.0, 5.0).width == 4.0


@pytest.mark.parametrize("r", [MinMax(-2.0, 7.5), MinMax(3.0, 3.0), MinMax(0.1, 0.3)])
def test_denormalize_inverts_normalize(r):
    values = np.array([-10.0, 0.0, 0.1, 3.0, 7.5, 1e6])
    np.testing.assert_allclose(r.denormalize(r.normalize(values)), values, atol=1e-9)
