"""Tests for the equivalence comparator."""

import pyarrow as pa
import pytest

from conftest import make_batch
from table_diff_checker.comparator import EquivalenceComparator, compare, float_difference
from table_diff_checker.config import CompareConfig
from table_diff_checker.errors import UnsupportedColumnTypeError
from table_diff_checker.outcome import CellMismatch, CountMismatch, Match, RowShapeMismatch
from table_diff_checker.values import ScalarKind, ScalarValue


def rows_to_batch(rows, types=None):
    """Build one batch from row-major test data; column i is named c{i}."""
    width = len(rows[0]) if rows else 0
    columns = {f"c{i}": [row[i] for row in rows] for i in range(width)}
    type_map = {f"c{i}": t for i, t in enumerate(types or [])}
    return make_batch(columns, type_map)


class TestBasicScenarios:
    """The documented end-to-end scenarios."""

    def test_identical_rows_match(self):
        """[[1,"x"],[2,"y"]] against itself matches."""
        left = [rows_to_batch([[1, "x"], [2, "y"]])]
        right = [rows_to_batch([[1, "x"], [2, "y"]])]

        assert EquivalenceComparator().compare(left, right) == Match()

    def test_row_count_mismatch(self):
        """Two rows against three rows is a count mismatch."""
        left = [rows_to_batch([[1, "x"], [2, "y"]])]
        right = [rows_to_batch([[1, "x"], [2, "y"], [3, "z"]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert outcome == CountMismatch(2, 3)
        assert str(outcome) == "Files are different: row counts do not match: 2 != 3"

    def test_epsilon_accepts_small_difference(self):
        """1.0 vs 1.0001 matches with epsilon 0.01."""
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.0001]])]

        assert EquivalenceComparator(epsilon=0.01).compare(left, right) == Match()

    def test_epsilon_rejects_larger_difference(self):
        """1.0 vs 1.0001 mismatches with epsilon 0.00001."""
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.0001]])]

        outcome = EquivalenceComparator(epsilon=0.00001).compare(left, right)

        assert isinstance(outcome, CellMismatch)
        assert (outcome.row_index, outcome.column_index) == (0, 0)

    def test_row_shape_mismatch(self):
        """[[1,2]] against [[1,2,3]] is a row shape mismatch at row 0."""
        left = [rows_to_batch([[1, 2]])]
        right = [rows_to_batch([[1, 2, 3]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert isinstance(outcome, RowShapeMismatch)
        assert outcome.row_index == 0
        assert outcome.explanation == "row lengths do not match at index 0: 2 != 3"
        assert len(outcome.left_row) == 2
        assert len(outcome.right_row) == 3

    def test_null_against_null_matches(self):
        """Null cells in the same position agree."""
        left = [rows_to_batch([[1, None]], [pa.int64(), pa.float64()])]
        right = [rows_to_batch([[1, None]], [pa.int64(), pa.float64()])]

        assert EquivalenceComparator().compare(left, right) == Match()

    def test_null_against_value_mismatches_even_with_epsilon(self):
        """A null never agrees with a value, whatever the tolerance."""
        left = [rows_to_batch([[None]], [pa.float64()])]
        right = [rows_to_batch([[0.0]], [pa.float64()])]

        outcome = EquivalenceComparator(epsilon=1000.0).compare(left, right)

        assert isinstance(outcome, CellMismatch)
        assert outcome.column_index == 0


class TestComparatorProperties:
    """General properties of the comparison."""

    def test_dataset_matches_itself(self, people_batches):
        """Comparing a dataset with itself always matches."""
        assert EquivalenceComparator().compare(people_batches, people_batches) == Match()

    def test_batch_boundaries_do_not_matter(self, people_batches):
        """The same rows split differently still match."""
        table = pa.Table.from_batches(people_batches)
        regrouped = table.combine_chunks().to_batches(max_chunksize=2)

        assert len(regrouped) == 3
        assert EquivalenceComparator().compare(people_batches, regrouped) == Match()

    def test_both_empty_match(self):
        """Zero rows on both sides is trivially a match."""
        empty = make_batch({"x": []}, {"x": pa.int64()})

        assert EquivalenceComparator().compare([], []) == Match()
        assert EquivalenceComparator().compare([empty], []) == Match()

    def test_count_mismatch_reads_no_rows(self, people_batches, recording_factory):
        """Differing counts are reported without pulling a single row."""
        comparator = EquivalenceComparator(stream_factory=recording_factory)

        outcome = comparator.compare(people_batches, people_batches[:1])

        assert outcome == CountMismatch(5, 3)
        assert recording_factory.next_row_calls == 0
        assert recording_factory.streams == []

    def test_streams_pulled_in_lockstep(self, people_batches, recording_factory):
        """A full match pulls every row of both sides once."""
        comparator = EquivalenceComparator(stream_factory=recording_factory)

        comparator.compare(people_batches, people_batches)

        assert [stream.rows_read for stream in recording_factory.streams] == [5, 5]

    def test_stops_at_first_mismatch(self, recording_factory):
        """No rows after the first divergent one are read."""
        left = [rows_to_batch([[1], [2], [3], [4]])]
        right = [rows_to_batch([[1], [9], [3], [4]])]
        comparator = EquivalenceComparator(stream_factory=recording_factory)

        outcome = comparator.compare(left, right)

        assert outcome.row_index == 1
        assert [stream.rows_read for stream in recording_factory.streams] == [2, 2]

    def test_first_divergence_reported(self):
        """With two divergences, only the earlier one is reported."""
        left = [rows_to_batch([[1, "a"], [2, "b"], [3, "c"], [4, "d"]])]
        right = [rows_to_batch([[1, "a"], [2, "X"], [3, "c"], [9, "d"]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert isinstance(outcome, CellMismatch)
        assert (outcome.row_index, outcome.column_index) == (1, 1)

    def test_first_column_reported_within_row(self):
        """Within one row, the leftmost divergent column is reported."""
        left = [rows_to_batch([[1, 2, 3]])]
        right = [rows_to_batch([[1, 5, 6]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert outcome.column_index == 1

    def test_row_shape_mismatch_at_later_row(self):
        """A shape change in a later batch is reported at its row index."""
        types = [pa.int64(), pa.int64()]
        left = [rows_to_batch([[1, 2], [3, 4], [5, 6]], types)]
        right = [
            rows_to_batch([[1, 2], [3, 4]], types),
            rows_to_batch([[5, 6, 7]], types + [pa.int64()]),
        ]

        outcome = EquivalenceComparator().compare(left, right)

        assert isinstance(outcome, RowShapeMismatch)
        assert outcome.row_index == 2

    def test_row_shape_not_subject_to_epsilon(self):
        """Epsilon never hides a row length difference."""
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.0, 1.0]])]

        outcome = EquivalenceComparator(epsilon=10.0).compare(left, right)

        assert isinstance(outcome, RowShapeMismatch)

    def test_cell_mismatch_details(self):
        """The mismatch carries both full rows and a readable explanation."""
        left = [rows_to_batch([[1, "x"]])]
        right = [rows_to_batch([[1, "y"]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert outcome.left_row == [ScalarValue(ScalarKind.INT64, 1), ScalarValue(ScalarKind.UTF8, "x")]
        assert outcome.right_row == [ScalarValue(ScalarKind.INT64, 1), ScalarValue(ScalarKind.UTF8, "y")]
        assert outcome.explanation == "data does not match at row 0 column 1: Utf8('x') != Utf8('y')"
        assert str(outcome) == (
            "Row mismatch: data does not match at row 0 column 1: Utf8('x') != Utf8('y')\n"
            " left: [Int64(1), Utf8('x')]\n"
            "right: [Int64(1), Utf8('y')]"
        )

    def test_kind_mismatch_is_a_difference(self):
        """Int32 1 and Int64 1 differ; columns are compared by value and kind."""
        left = [rows_to_batch([[1]], [pa.int32()])]
        right = [rows_to_batch([[1]], [pa.int64()])]

        assert isinstance(EquivalenceComparator().compare(left, right), CellMismatch)

    def test_unsupported_type_raises_instead_of_outcome(self):
        """Engine faults propagate; they are never turned into outcomes."""
        left = [make_batch({"flag": [True]}, {"flag": pa.bool_()})]
        right = [make_batch({"flag": [True]}, {"flag": pa.bool_()})]

        with pytest.raises(UnsupportedColumnTypeError):
            EquivalenceComparator().compare(left, right)


class TestEpsilon:
    """Tests for float tolerance."""

    def test_no_epsilon_is_exact(self):
        """Without epsilon, any float difference is a mismatch."""
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.0000001]])]

        outcome = EquivalenceComparator().compare(left, right)

        assert isinstance(outcome, CellMismatch)

    def test_float32_within_epsilon(self):
        """Float32 columns are compared with tolerance too."""
        left = [rows_to_batch([[1.0]], [pa.float32()])]
        right = [rows_to_batch([[1.0001]], [pa.float32()])]

        assert EquivalenceComparator(epsilon=0.01).compare(left, right) == Match()

    def test_mixed_float_widths_never_tolerated(self):
        """Float32 against Float64 is a kind mismatch even within epsilon."""
        left = [rows_to_batch([[1.5]], [pa.float32()])]
        right = [rows_to_batch([[1.5]], [pa.float64()])]

        outcome = EquivalenceComparator(epsilon=1.0).compare(left, right)

        assert isinstance(outcome, CellMismatch)

    def test_integers_never_tolerated(self):
        """Epsilon only applies to floats."""
        left = [rows_to_batch([[1]])]
        right = [rows_to_batch([[2]])]

        assert isinstance(EquivalenceComparator(epsilon=10.0).compare(left, right), CellMismatch)

    def test_difference_is_symmetric_by_default(self):
        """The default rule uses |left - right| in both directions."""
        comparator = EquivalenceComparator(epsilon=0.5)
        low = [rows_to_batch([[1.0]])]
        high = [rows_to_batch([[3.0]])]

        assert isinstance(comparator.compare(low, high), CellMismatch)
        assert isinstance(comparator.compare(high, low), CellMismatch)

    def test_signed_tolerance(self):
        """With signed tolerance a left value far below the right one passes."""
        comparator = EquivalenceComparator(epsilon=0.5, signed_tolerance=True)
        low = [rows_to_batch([[1.0]])]
        high = [rows_to_batch([[3.0]])]

        assert comparator.compare(low, high) == Match()
        assert isinstance(comparator.compare(high, low), CellMismatch)

    def test_epsilon_is_strict(self):
        """A difference equal to epsilon is not accepted."""
        left = [rows_to_batch([[1.5]])]
        right = [rows_to_batch([[1.0]])]

        assert isinstance(EquivalenceComparator(epsilon=0.5).compare(left, right), CellMismatch)

    def test_zero_epsilon(self):
        """Zero epsilon accepts only exactly equal floats."""
        left = [rows_to_batch([[1.0]])]
        same = [rows_to_batch([[1.0]])]
        other = [rows_to_batch([[1.0000001]])]
        comparator = EquivalenceComparator(epsilon=0.0)

        assert comparator.compare(left, same) == Match()
        assert isinstance(comparator.compare(left, other), CellMismatch)

    @pytest.mark.parametrize("epsilon", [-0.1, float("nan"), float("inf")])
    def test_invalid_epsilon(self, epsilon):
        """Negative and non-finite tolerances are rejected."""
        with pytest.raises(ValueError):
            EquivalenceComparator(epsilon=epsilon)

    def test_float32_difference_in_single_precision(self):
        """Float32 differences are rounded to single precision."""
        left = ScalarValue(ScalarKind.FLOAT32, 16777216.0)
        right = ScalarValue(ScalarKind.FLOAT32, 0.5)

        assert float_difference(left, right) == 16777216.0

    def test_float32_difference_overflow(self):
        """A float32 difference beyond the float32 range becomes infinite."""
        left = ScalarValue(ScalarKind.FLOAT32, 3.0e38)
        right = ScalarValue(ScalarKind.FLOAT32, -3.0e38)

        assert float_difference(left, right) == float("inf")


class TestCompareFunction:
    """Tests for the module-level compare helper."""

    def test_uses_config(self):
        """compare() honours the epsilon in the configuration."""
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.0001]])]

        assert compare(left, right, CompareConfig(epsilon=0.01)) == Match()
        assert isinstance(compare(left, right, CompareConfig(epsilon=None)), CellMismatch)

    def test_default_is_exact_despite_local_config(self, local_config):
        """Without a config, compare() ignores tolerances from .table-diff.json."""
        local_config.update({"epsilon": 0.5, "signed_tolerance": True})
        left = [rows_to_batch([[1.0]])]
        right = [rows_to_batch([[1.3]])]

        assert isinstance(compare(left, right), CellMismatch)
        assert isinstance(compare(left, right, CompareConfig()), CellMismatch)
