"""
Tests for the query intent classifier.

Test name follows: test_unit_scenario_expectedBehavior
"""

import pytest

from data_chat.core.profiling import build_profile
from data_chat.core.query_intent import QueryIntent, QueryIntentClassifier, classify_intent


class TestOperationAndGroupingDetection:
    """Test suite for keyword detection."""

    @pytest.mark.parametrize(
        "question,expected",
        [
            ("What is the mean spend?", ("average",)),
            ("total spend", ("sum",)),
            ("How many clients are there?", ("count",)),
            ("number of responses", ("count",)),
            ("lowest and highest spend", ("min", "max")),
            ("max spend and average spend", ("average", "max")),
        ],
    )
    def test_classify_detects_operations_in_canonical_order(self, survey_profile, question, expected):
        """Test that operations are detected and listed in canonical order."""
        # Act
        intent = classify_intent(question, survey_profile)

        # Assert
        assert intent.operations == expected
        assert intent.needs_full_analysis

    def test_classify_word_boundaries_avoid_false_operations(self, survey_profile):
        """Test that 'summarize' does not trigger sum and 'minimal' does not trigger min."""
        # Act
        intent = classify_intent("Summarize the minimal themes in the feedback", survey_profile)

        # Assert
        assert intent.kind == "PASS_THROUGH"
        assert intent.operations == ()

    def test_classify_plain_question_is_pass_through(self, survey_profile):
        """Test that a question with no operation or grouping needs no computation."""
        # Act
        intent = classify_intent("What do clients say about measurement?", survey_profile)

        # Assert
        assert intent == QueryIntent(kind="PASS_THROUGH")
        assert not intent.needs_full_analysis

    @pytest.mark.parametrize(
        "question",
        [
            "spend for each vertical",
            "spend per region",
            "spend grouped by vertical",
            "spend across regions",
            "segment clients",
            "give me a breakdown of spend",
            "spend broken down by vertical",
        ],
    )
    def test_classify_grouping_phrases_request_grouping(self, survey_profile, question):
        """Test that each grouping phrase requests a breakdown."""
        # Act
        intent = classify_intent(question, survey_profile)

        # Assert
        assert intent.grouping_requested
        assert intent.kind == "GROUPED_AGGREGATION"

    def test_classify_by_column_name_requests_grouping(self, survey_profile):
        """Test that 'by <string column>' requests grouping."""
        # Act
        intent = classify_intent("average spend by client", survey_profile)

        # Assert
        assert intent.grouping_requested
        assert intent.grouping_column == "client"

    def test_classify_by_unrelated_word_is_not_grouping(self, survey_profile):
        """Test that 'by' followed by an unrelated word does not request grouping."""
        # Act
        intent = classify_intent("average spend by far", survey_profile)

        # Assert
        assert not intent.grouping_requested
        assert intent.kind == "DIRECT_AGGREGATION"


class TestColumnResolution:
    """Test suite for grouping and target column resolution."""

    def test_classify_region_score_example(self, region_score_rows):
        """Test the minimal grouped-average example resolves region and score."""
        # Arrange
        profile = build_profile(region_score_rows)

        # Act
        intent = classify_intent("average score by region", profile)

        # Assert
        assert intent.kind == "GROUPED_AGGREGATION"
        assert intent.operations == ("average",)
        assert intent.grouping_column == "region"
        assert intent.target_columns == ("score",)

    def test_classify_mentioned_column_with_underscores_as_spaces(self, survey_profile):
        """Test that 'maturity score' matches the maturity_score column."""
        # Act
        intent = classify_intent("What is the average maturity score by vertical?", survey_profile)

        # Assert
        assert intent.grouping_column == "vertical"
        assert intent.target_columns == ("maturity_score",)

    def test_classify_score_vocabulary_selects_score_columns(self, survey_profile):
        """Test that 'score' selects score-like numeric columns when none is named."""
        # Act
        intent = classify_intent("average score per region", survey_profile)

        # Assert
        assert intent.grouping_column == "region"
        assert intent.target_columns == ("maturity_score",)

    def test_classify_synonym_table_maps_domain_term(self):
        """Test that a synonym maps 'account' onto a client-named column."""
        # Arrange
        profile = build_profile(
            [
                {"advertiser_name": "X", "score": 1},
                {"advertiser_name": "Y", "score": 2},
            ]
        )

        # Act
        intent = classify_intent("average score for each account", profile)

        # Assert
        assert intent.grouping_column == "advertiser_name"

    def test_classify_unresolvable_grouping_falls_back_to_first_candidate(self, survey_profile):
        """Test that an unknown breakdown term uses the first eligible string column."""
        # Act
        intent = classify_intent("how many responses per division", survey_profile)

        # Assert
        assert intent.kind == "GROUPED_AGGREGATION"
        assert intent.grouping_column == "client"
        assert intent.target_columns == ("maturity_score", "spend")

    def test_classify_no_eligible_grouping_column_abandons_grouping(self):
        """Test that grouping is abandoned (not an error) when no string column qualifies."""
        # Arrange
        profile = build_profile([{"team": "only", "score": 1}, {"team": "only", "score": 3}])

        # Act
        intent = classify_intent("average score per team", profile)

        # Assert
        assert intent.grouping_requested
        assert intent.grouping_column is None
        assert intent.kind == "DIRECT_AGGREGATION"
        assert intent.target_columns == ("score",)

    def test_classify_targets_fall_back_to_all_numeric_columns(self, survey_profile):
        """Test that with nothing named, all numeric columns are targets."""
        # Act
        intent = classify_intent("what is the average?", survey_profile)

        # Assert
        assert intent.kind == "DIRECT_AGGREGATION"
        assert intent.target_columns == ("maturity_score", "spend")

    def test_classify_total_points_by_team(self):
        """Test that a plural mention ("points") resolves the target and "by team" the grouping."""
        # Arrange
        profile = build_profile(
            [
                {"team": "a", "points": 1},
                {"team": "b", "points": 2},
            ]
        )

        # Act
        intent = classify_intent("total points by team", profile)

        # Assert
        assert intent.grouping_column == "team"
        assert intent.target_columns == ("points",)


class TestClassifierContract:
    """Test suite for classifier edge cases."""

    @pytest.mark.parametrize("question", ["", "   "])
    def test_classify_empty_question_raises(self, survey_profile, question):
        """Test that an empty question is rejected."""
        # Act & Assert
        with pytest.raises(ValueError, match="empty"):
            classify_intent(question, survey_profile)

    def test_classify_no_profile_is_pass_through(self):
        """Test that an empty dataset (no profile) cannot be aggregated."""
        # Act
        intent = classify_intent("average spend per region", None)

        # Assert
        assert intent.kind == "PASS_THROUGH"
        assert intent.operations == ("average",)

    def test_classify_is_deterministic(self, survey_profile):
        """Test that identical inputs give equal intents."""
        # Arrange
        classifier = QueryIntentClassifier(survey_profile)

        # Act
        first = classifier.classify("Average maturity score per vertical")
        second = classify_intent("average   maturity score per vertical", survey_profile)

        # Assert
        assert first == second

    def test_query_intent_grouped_requires_grouping_column(self):
        """Test that a grouped intent without a grouping column is invalid."""
        # Act & Assert
        with pytest.raises(ValueError, match="grouping_column"):
            QueryIntent(kind="GROUPED_AGGREGATION", operations=("average",))

    def test_query_intent_rejects_unknown_kind_and_operation(self):
        """Test kind and operation validation."""
        # Act & Assert
        with pytest.raises(ValueError, match="Invalid intent kind"):
            QueryIntent(kind="SURVIVAL")
        with pytest.raises(ValueError, match="Invalid operations"):
            QueryIntent(kind="DIRECT_AGGREGATION", operations=("median",))
