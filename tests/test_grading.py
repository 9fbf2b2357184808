"""
Tests for services/grading.py: grade tables, division bands and helpers.
"""

from types import SimpleNamespace

import pytest

from models.enums import EducationLevel
from services import grading
from services.errors import ValidationError


def _result(points, marks=50.0, name=""):
    return SimpleNamespace(points=points, marks_obtained=marks, name=name)


class TestOLevelGrades:

    @pytest.mark.parametrize("marks, grade, points", [
        (100, "A", 1), (75, "A", 1), (74.9, "B", 2), (65, "B", 2),
        (64, "C", 3), (50, "C", 3), (49, "D", 4), (30, "D", 4),
        (29.5, "F", 5), (0, "F", 5),
    ])
    def test_boundaries(self, marks, grade, points):
        assert grading.calculate_grade_and_points(marks, "O_LEVEL") == {"grade": grade, "points": points}

    def test_accepts_enum_level(self):
        assert grading.calculate_grade_and_points(80, EducationLevel.O_LEVEL)["grade"] == "A"

    def test_deterministic(self):
        first = grading.calculate_grade_and_points(67.5, "O_LEVEL")
        assert all(grading.calculate_grade_and_points(67.5, "O_LEVEL") == first for _ in range(5))


class TestALevelGrades:

    @pytest.mark.parametrize("marks, grade, points", [
        (80, "A", 1), (79, "B", 2), (70, "B", 2), (60, "C", 3),
        (50, "D", 4), (40, "E", 5), (35, "S", 6), (34, "F", 7),
    ])
    def test_boundaries(self, marks, grade, points):
        assert grading.calculate_grade_and_points(marks, "A_LEVEL") == {"grade": grade, "points": points}

    def test_tables_differ_from_o_level(self):
        assert grading.calculate_grade_and_points(75, "O_LEVEL")["grade"] == "A"
        assert grading.calculate_grade_and_points(75, "A_LEVEL")["grade"] == "B"


class TestPointsOrdering:

    @pytest.mark.parametrize("level", ["O_LEVEL", "A_LEVEL"])
    def test_points_never_increase_with_marks(self, level):
        points = [grading.calculate_grade_and_points(m, level)["points"] for m in range(0, 101)]
        assert points == sorted(points, reverse=True)


class TestValidateMarks:

    @pytest.mark.parametrize("marks", [-1, 101, "abc", None, True, float("nan")])
    def test_rejects(self, marks):
        with pytest.raises(ValidationError) as exc:
            grading.validate_marks(marks)
        assert exc.value.fields == ["marks_obtained"]

    @pytest.mark.parametrize("marks, expected", [(0, 0.0), (100, 100.0), ("55.5", 55.5)])
    def test_accepts(self, marks, expected):
        assert grading.validate_marks(marks) == expected

    def test_unknown_level(self):
        with pytest.raises(ValidationError):
            grading.calculate_grade_and_points(50, "PRIMARY")


class TestDivisions:

    @pytest.mark.parametrize("points, division", [
        (7, "I"), (17, "I"), (18, "II"), (21, "II"), (22, "III"),
        (25, "III"), (26, "IV"), (33, "IV"), (34, "0"), (6, "0"),
    ])
    def test_o_level_bands(self, points, division):
        assert grading.calculate_o_level_division(points) == division

    @pytest.mark.parametrize("points, division", [
        (3, "I"), (9, "I"), (10, "II"), (12, "II"), (13, "III"),
        (17, "III"), (18, "IV"), (19, "IV"), (20, "0"),
    ])
    def test_a_level_bands(self, points, division):
        assert grading.calculate_a_level_division(points) == division

    def test_missing_points(self):
        assert grading.calculate_division(None, "O_LEVEL") is None


class TestHelpers:

    def test_select_best_is_stable(self):
        results = [_result(2, name="x"), _result(1, name="y"), _result(2, name="z"), _result(3)]
        best = grading.select_best(results, 3)
        assert [r.name for r in best] == ["y", "x", "z"]

    @pytest.mark.parametrize("value, expected", [(2.25, 2.3), (2.35, 2.4), (66.65, 66.7), (1.04, 1.0)])
    def test_round_half_up(self, value, expected):
        assert grading.round_half_up(value) == expected

    def test_average_marks(self):
        results = [_result(1, 95), _result(2, 70), _result(4, 40)]
        assert grading.average_marks(results) == 68.3
        assert grading.average_marks([]) == 0.0

    def test_remarks(self):
        assert grading.get_remarks("S", "A_LEVEL") == "Subsidiary Pass"
        assert grading.get_remarks("Z", "O_LEVEL") == "-"

    def test_grade_letters(self):
        assert grading.grade_letters("O_LEVEL") == ["A", "B", "C", "D", "F"]
