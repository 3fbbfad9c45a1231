# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade computation.

Pure functions used by the grade card service. Totals are on a 100 scale
(internal out of 30 plus external out of 70).

Grade bands:

    THEORY     >=90 S/10  >=80 A/9  >=70 B/8  >=60 C/7  >=50 D/6  >=40 E/5  else F/0
    PRACTICAL  >=90 S/10  >=80 A/9  >=70 B/8  >=60 C/7  >=55 D/6  >=50 E/5  else F/0

Any other class type is graded F/0.
"""

from collections.abc import Iterable
from dataclasses import dataclass

THEORY_BANDS: tuple[tuple[float, str, int], ...] = (
    (90, "S", 10),
    (80, "A", 9),
    (70, "B", 8),
    (60, "C", 7),
    (50, "D", 6),
    (40, "E", 5),
)

PRACTICAL_BANDS: tuple[tuple[float, str, int], ...] = (
    (90, "S", 10),
    (80, "A", 9),
    (70, "B", 8),
    (60, "C", 7),
    (55, "D", 6),
    (50, "E", 5),
)

FAIL_GRADE = ("F", 0)


@dataclass(frozen=True)
class SubjectGrade:
    """Result of grading one subject.

    Attributes:
        total: Internal plus external marks.
        grade: Letter grade.
        grade_point: Points for the grade (0..10).
        quality_point: credit x grade_point.
    """

    total: float
    grade: str
    grade_point: int
    quality_point: float


def grade_for(total: float, class_type: str) -> tuple[str, int]:
    """Map a total to (grade, grade point) for a class type."""
    if class_type == "THEORY":
        bands = THEORY_BANDS
    elif class_type == "PRACTICAL":
        bands = PRACTICAL_BANDS
    else:
        return FAIL_GRADE

    for threshold, grade, point in bands:
        if total >= threshold:
            return grade, point
    return FAIL_GRADE


def grade_subject(
    internal_marks: float,
    external_marks: float,
    credit: float,
    class_type: str,
) -> SubjectGrade:
    total = internal_marks + external_marks
    grade, point = grade_for(total, class_type)
    return SubjectGrade(
        total=total,
        grade=grade,
        grade_point=point,
        quality_point=credit * point,
    )


def grade_point_average(total_quality_point: float, total_credit: float) -> float:
    """Quality points per credit rounded to 2 decimals, 0 without credits."""
    if total_credit <= 0:
        return 0
    return round(total_quality_point / total_credit, 2)


def cumulative_average(
    current: tuple[float, float],
    earlier: Iterable[tuple[float, float]],
) -> float:
    """CGPA over the current card and earlier cards.

    Args:
        current: (total credit, total quality point) of this card.
        earlier: The same pair for each earlier semester card that has totals.
    """
    credits, quality = current
    for past_credit, past_quality in earlier:
        credits += past_credit
        quality += past_quality
    return grade_point_average(quality, credits)


def scale_external_marks(achieved: float, total_marks: float, scale: int = 70) -> int:
    """Scale semester exam marks to the external component.

    Uses Python's round(), so exact halves go to the even neighbour.
    """
    if total_marks <= 0:
        return 0
    return round(achieved / total_marks * scale)


def card_number(enrollment_no: str, semester_numerical: int, sequence: int) -> str:
    """Grade card number: GC + admission year digits + branch digits + semester + sequence.

    >>> card_number("E21CS04001", 3, 7)
    'GC21043007'
    """
    return f"GC{enrollment_no[1:3]}{enrollment_no[5:7]}{semester_numerical}{sequence:03d}"
