from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from exams.scoring import grade_answers, is_exam_active, option_letter, to_option_index

START = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "now, expected",
    [
        (START - timedelta(seconds=1), False),
        (START, True),
        (datetime(2024, 1, 1, 10, 29, 59, tzinfo=timezone.utc), True),
        (datetime(2024, 1, 1, 10, 30, 0, tzinfo=timezone.utc), False),
        (START + timedelta(hours=2), False),
    ],
)
def test_exam_window_is_half_open(now, expected):
    assert is_exam_active(START, 30, now) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (3, 3),
        ("2", 2),
        ("A", 0),
        ("b", 1),
        (" D ", 3),
        (4, None),
        (-1, None),
        ("E", None),
        ("AB", None),
        (True, None),
        (None, None),
        (1.0, None),
    ],
)
def test_to_option_index(value, expected):
    assert to_option_index(value) == expected


def test_option_letter():
    assert [option_letter(i) for i in range(4)] == ["A", "B", "C", "D"]


def key(*correct):
    return [SimpleNamespace(pk=pk, correct_option=c) for pk, c in enumerate(correct, start=1)]


def test_grade_counts_matching_answers():
    score, graded = grade_answers(key(1, 2), [(1, 1), (2, 0)])

    assert score == 1
    assert [g.is_correct for g in graded] == [True, False]
    assert [g.question.pk for g in graded] == [1, 2]


def test_unanswered_questions_count_as_wrong():
    score, graded = grade_answers(key(1, 2, 3), [(2, 2)])

    assert score == 1
    assert len(graded) == 1


def test_grade_keeps_submission_order():
    score, graded = grade_answers(key(0, 0, 0), [(3, 0), (1, 1), (2, 0)])

    assert score == 2
    assert [g.question.pk for g in graded] == [3, 1, 2]
