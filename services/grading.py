"""
Grade, points and division rules for the two secondary tracks.

O-Level (CSEE) and A-Level (ACSEE) use different grade boundaries and
different division bands. Lower points always mean a better grade, so the
best subjects of a student are the ones with the lowest points.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

from models.enums import EducationLevel
from services.errors import ValidationError

# (min_marks, grade, points, remarks), ordered high to low
O_LEVEL_GRADES = [
    (75, "A", 1, "Excellent"),
    (65, "B", 2, "Very Good"),
    (50, "C", 3, "Good"),
    (30, "D", 4, "Pass"),
    (0, "F", 5, "Fail"),
]

A_LEVEL_GRADES = [
    (80, "A", 1, "Excellent"),
    (70, "B", 2, "Very Good"),
    (60, "C", 3, "Good"),
    (50, "D", 4, "Satisfactory"),
    (40, "E", 5, "Pass"),
    (35, "S", 6, "Subsidiary Pass"),
    (0, "F", 7, "Fail"),
]

# (min_points, max_points, division), inclusive
O_LEVEL_DIVISIONS = [
    (7, 17, "I"),
    (18, 21, "II"),
    (22, 25, "III"),
    (26, 33, "IV"),
]

A_LEVEL_DIVISIONS = [
    (3, 9, "I"),
    (10, 12, "II"),
    (13, 17, "III"),
    (18, 19, "IV"),
]

NO_DIVISION = "0"
DIVISIONS = ["I", "II", "III", "IV", NO_DIVISION]

O_LEVEL_BEST_SUBJECTS = 7
A_LEVEL_BEST_PRINCIPALS = 3

MIN_MARKS = 0
MAX_MARKS = 100


def _level(level):
    parsed = EducationLevel.parse(level)
    if parsed is None:
        raise ValidationError(f"Unsupported education level: {level}")
    return parsed


def grade_table(level):
    level = _level(level)
    if level is EducationLevel.O_LEVEL:
        return O_LEVEL_GRADES
    if level is EducationLevel.A_LEVEL:
        return A_LEVEL_GRADES
    raise ValidationError(f"Unsupported education level: {level}")


def division_table(level):
    level = _level(level)
    if level is EducationLevel.O_LEVEL:
        return O_LEVEL_DIVISIONS
    if level is EducationLevel.A_LEVEL:
        return A_LEVEL_DIVISIONS
    raise ValidationError(f"Unsupported education level: {level}")


def grade_letters(level):
    return [grade for _, grade, _, _ in grade_table(level)]


def validate_marks(marks):
    """Return ``marks`` as a float, raising ValidationError when not in 0-100."""
    if isinstance(marks, bool):
        raise ValidationError(f"Invalid marks: {marks}", fields=["marks_obtained"])
    try:
        value = float(marks)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid marks: {marks}", fields=["marks_obtained"])
    if math.isnan(value) or value < MIN_MARKS or value > MAX_MARKS:
        raise ValidationError(
            f"Invalid marks: {marks}. Marks must be between {MIN_MARKS} and {MAX_MARKS}.",
            fields=["marks_obtained"]
        )
    return value


def calculate_grade_and_points(marks, level):
    value = validate_marks(marks)
    # Tables run from the top band down to a 0 floor, so some row always matches
    grade, points = next(
        (grade, points) for min_marks, grade, points, _ in grade_table(level) if value >= min_marks
    )
    return {"grade": grade, "points": points}


def get_remarks(grade, level):
    for _, letter, _, remarks in grade_table(level):
        if letter == grade:
            return remarks
    return "-"


def calculate_division(points, level):
    if points is None:
        return None
    for low, high, division in division_table(level):
        if low <= points <= high:
            return division
    return NO_DIVISION


def calculate_o_level_division(points):
    return calculate_division(points, EducationLevel.O_LEVEL)


def calculate_a_level_division(points):
    return calculate_division(points, EducationLevel.A_LEVEL)


def select_best(results, count):
    """Return the ``count`` results with the lowest points.

    ``sorted`` is stable, so results with equal points keep their input order.
    """
    return sorted(results, key=lambda r: r.points)[:count]


def round_half_up(value, places=1):
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def average_marks(results):
    if not results:
        return 0.0
    total = sum(r.marks_obtained for r in results)
    return round_half_up(total / len(results))
