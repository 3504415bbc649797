"""
Tests for column type inference.

Test name follows: test_unit_scenario_expectedBehavior
"""

from datetime import date, datetime

import pytest

from data_chat.core.column_inference import (
    coerce_number,
    infer_column,
    is_boolean_value,
    is_date_value,
    is_missing,
)


class TestCoerceNumber:
    """Test suite for the numeric coercion rule."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (12, 12.0),
            (-3.5, -3.5),
            ("12", 12.0),
            (" 7.25 ", 7.25),
            (".5", 0.5),
            ("1e3", 1000.0),
            ("+4", 4.0),
        ],
    )
    def test_coerce_number_decimal_literals_coerce(self, value, expected):
        """Test that numbers and complete decimal literals coerce."""
        # Act
        result = coerce_number(value)

        # Assert
        assert result == expected

    @pytest.mark.parametrize("value", ["12abc", "0x1F", "nan", "inf", "1,000", "n/a", "", None, True, False])
    def test_coerce_number_non_literals_return_none(self, value):
        """Test that partial parses, special floats, bools and missing values do not coerce."""
        # Act
        result = coerce_number(value)

        # Assert
        assert result is None

    def test_coerce_number_non_finite_float_returns_none(self):
        """Test that NaN and infinity are rejected even when already floats."""
        # Act & Assert
        assert coerce_number(float("nan")) is None
        assert coerce_number(float("inf")) is None


class TestValuePredicates:
    """Test suite for missing/boolean/date predicates."""

    def test_is_missing_none_and_empty_string(self):
        """Test that only None and the empty string are missing."""
        # Assert
        assert is_missing(None)
        assert is_missing("")
        assert not is_missing(0)
        assert not is_missing(" ")
        assert not is_missing(False)

    def test_is_boolean_value_case_insensitive_strings(self):
        """Test that boolean strings are recognised in any case."""
        # Assert
        assert is_boolean_value(True)
        assert is_boolean_value("TRUE")
        assert is_boolean_value("false")
        assert not is_boolean_value("yes")
        assert not is_boolean_value(1)

    def test_is_date_value_iso_and_common_formats(self):
        """Test that ISO-8601 and common formats are dates, prose is not."""
        # Assert
        assert is_date_value(date(2024, 1, 5))
        assert is_date_value(datetime(2024, 1, 5, 10, 30))
        assert is_date_value("2024-01-05")
        assert is_date_value("2024-01-05T10:30:00")
        assert is_date_value("01/05/2024")
        assert is_date_value("Jan 5, 2024")
        assert not is_date_value("next tuesday")
        assert not is_date_value(20240105)


class TestInferColumn:
    """Test suite for infer_column."""

    def test_infer_column_all_missing_is_unknown_without_statistics(self):
        """Test that a column with no non-null values is unknown and carries no statistics."""
        # Act
        profile = infer_column([None, "", None])

        # Assert
        assert profile.type == "unknown"
        assert profile.non_null_count == 0
        assert profile.null_count == 3
        assert profile.sample_values == ()
        assert profile.min is None
        assert profile.average is None
        assert profile.unique_value_count is None
        assert profile.value_counts is None

    def test_infer_column_empty_input_is_unknown(self):
        """Test that zero values are unknown."""
        # Act
        profile = infer_column([])

        # Assert
        assert profile.type == "unknown"
        assert profile.null_count == 0

    def test_infer_column_numeric_strings_are_number_not_boolean(self):
        """Test precedence: "1"/"0" coerce to numbers before the boolean check runs."""
        # Act
        profile = infer_column(["1", "0", "1"])

        # Assert
        assert profile.type == "number"

    def test_infer_column_boolean_strings_are_boolean(self):
        """Test that true/false strings in mixed case are boolean."""
        # Act
        profile = infer_column(["true", "FALSE", "True"])

        # Assert
        assert profile.type == "boolean"
        assert profile.min is None

    def test_infer_column_python_bools_are_boolean(self):
        """Test that pre-typed bools never count as numbers."""
        # Act
        profile = infer_column([True, False, None])

        # Assert
        assert profile.type == "boolean"
        assert profile.null_count == 1

    def test_infer_column_dates_are_date(self):
        """Test that uniformly parseable date strings are date."""
        # Act
        profile = infer_column(["2024-01-05", "2023-12-31", ""])

        # Assert
        assert profile.type == "date"
        assert profile.non_null_count == 2

    def test_infer_column_one_bad_value_falls_back_to_string(self):
        """Test that a single non-conforming value makes the column string."""
        # Act
        dates = infer_column(["2024-01-05", "hello"])
        numbers = infer_column([10, "n/a", 20])

        # Assert
        assert dates.type == "string"
        assert numbers.type == "string"
        assert numbers.unique_value_count == 3

    def test_infer_column_number_statistics(self):
        """Test min/max/average over non-null values only."""
        # Act
        profile = infer_column([10, "20", None, 30.0, ""])

        # Assert
        assert profile.type == "number"
        assert profile.min == 10.0
        assert profile.max == 30.0
        assert profile.average == pytest.approx(20.0)
        assert profile.non_null_count == 3
        assert profile.null_count == 2

    def test_infer_column_sample_values_first_five_non_null_in_order(self):
        """Test that samples are the first five non-null values in encounter order."""
        # Act
        profile = infer_column([None, "b", "a", "", "c", "d", "e", "f"])

        # Assert
        assert profile.sample_values == ("b", "a", "c", "d", "e")

    def test_infer_column_value_counts_in_encounter_order(self):
        """Test that value_counts preserves first-seen order."""
        # Act
        profile = infer_column(["Food", "Beverage", "Food", None, "Food"])

        # Assert
        assert profile.type == "string"
        assert profile.unique_value_count == 2
        assert list(profile.value_counts.items()) == [("Food", 3), ("Beverage", 1)]

    def test_infer_column_category_statistics_use_text_form(self):
        """Test that mixed-type string columns are counted by the text of each cell."""
        # Act
        profile = infer_column([1, "1", "x", None])

        # Assert
        assert profile.type == "string"
        assert profile.unique_value_count == 2
        assert profile.value_counts == {"1": 2, "x": 1}
        assert profile.sample_values == (1, "1", "x")

    def test_infer_column_fifty_distinct_values_keeps_value_counts(self):
        """Test that value_counts is present at exactly the category limit."""
        # Act
        profile = infer_column([f"v{i}" for i in range(50)])

        # Assert
        assert profile.unique_value_count == 50
        assert profile.value_counts is not None
        assert len(profile.value_counts) == 50

    def test_infer_column_fifty_one_distinct_values_drops_value_counts(self):
        """Test that value_counts is omitted above the category limit."""
        # Act
        profile = infer_column([f"v{i}" for i in range(51)])

        # Assert
        assert profile.unique_value_count == 51
        assert profile.value_counts is None

    def test_column_profile_to_dict_only_includes_applicable_statistics(self):
        """Test that to_dict emits number stats for numbers and category stats for strings."""
        # Act
        numeric = infer_column([1, 2]).to_dict()
        text = infer_column(["x", "y", "x"]).to_dict()

        # Assert
        assert numeric["average"] == 1.5
        assert "unique_value_count" not in numeric
        assert text["value_counts"] == {"x": 2, "y": 1}
        assert "min" not in text
