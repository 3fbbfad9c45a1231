# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for grade computation."""

import pytest

from collegehub.domains.grade_card.grading import (
    card_number,
    cumulative_average,
    grade_for,
    grade_point_average,
    grade_subject,
    scale_external_marks,
)


class TestGradeBands:
    """Tests for grade_for."""

    @pytest.mark.parametrize(
        "total,expected",
        [
            (95, ("S", 10)),
            (90, ("S", 10)),
            (85, ("A", 9)),
            (70, ("B", 8)),
            (65, ("C", 7)),
            (50, ("D", 6)),
            (45, ("E", 5)),
            (39.5, ("F", 0)),
        ],
    )
    def test_theory_bands(self, total, expected) -> None:
        assert grade_for(total, "THEORY") == expected

    @pytest.mark.parametrize(
        "total,expected",
        [
            (90, ("S", 10)),
            (58, ("D", 6)),
            (55, ("D", 6)),
            (52, ("E", 5)),
            (50, ("E", 5)),
            (49, ("F", 0)),
        ],
    )
    def test_practical_bands(self, total, expected) -> None:
        assert grade_for(total, "PRACTICAL") == expected

    def test_practical_is_stricter_than_theory_at_45(self) -> None:
        assert grade_for(45, "THEORY") == ("E", 5)
        assert grade_for(45, "PRACTICAL") == ("F", 0)

    def test_other_class_type_fails(self) -> None:
        assert grade_for(99, "BOTH") == ("F", 0)


class TestGradeSubject:
    """Tests for grade_subject."""

    def test_quality_point_is_credit_times_grade_point(self) -> None:
        result = grade_subject(25, 60, credit=4, class_type="THEORY")

        assert result.total == 85
        assert result.grade == "A"
        assert result.grade_point == 9
        assert result.quality_point == 36

    def test_failing_subject_earns_no_quality_points(self) -> None:
        result = grade_subject(10, 20, credit=3, class_type="THEORY")

        assert result.grade == "F"
        assert result.quality_point == 0


class TestAverages:
    """Tests for GPA and CGPA."""

    def test_gpa_rounds_to_two_decimals(self) -> None:
        assert grade_point_average(73, 9) == 8.11

    def test_gpa_without_credits_is_zero(self) -> None:
        assert grade_point_average(10, 0) == 0

    def test_cgpa_combines_earlier_cards(self) -> None:
        # (80 + 70) / (10 + 10)
        assert cumulative_average((10, 80), [(10, 70)]) == 7.5

    def test_cgpa_without_earlier_cards_equals_gpa(self) -> None:
        assert cumulative_average((9, 73), []) == grade_point_average(73, 9)


class TestExternalMarks:
    """Tests for scale_external_marks."""

    def test_scales_to_seventy(self) -> None:
        assert scale_external_marks(80, 100) == 56

    def test_half_rounds_to_even(self) -> None:
        # 5 / 20 * 70 = 17.5
        assert scale_external_marks(5, 20) == 18
        # 3 / 4 * 70 = 52.5
        assert scale_external_marks(3, 4) == 52

    def test_zero_total_marks(self) -> None:
        assert scale_external_marks(10, 0) == 0


class TestCardNumber:
    """Tests for card_number."""

    def test_format(self) -> None:
        assert card_number("E21CS04001", 3, 7) == "GC21043007"

    def test_sequence_is_zero_padded(self) -> None:
        assert card_number("E22ME11045", 1, 125) == "GC22111125"
