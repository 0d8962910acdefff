"""
Exam window and answer grading.

Pure functions only; nothing here touches the database so the rules can be
exercised without fixtures.
"""
from collections import namedtuple
from datetime import timedelta

OPTION_COUNT = 4
OPTION_LETTERS = "ABCD"

GradedAnswer = namedtuple("GradedAnswer", ["question", "selected_option", "is_correct"])


def to_option_index(value):
    """
    Convert an incoming option reference to its index.

    Accepts an int (or digit string) in 0..3, or a letter "A".."D" in either
    case. Returns None when the value cannot be read as an option.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value < OPTION_COUNT else None
    if isinstance(value, str):
        value = value.strip()
        if value.isdigit():
            return to_option_index(int(value))
        if len(value) == 1 and value.upper() in OPTION_LETTERS:
            return OPTION_LETTERS.index(value.upper())
    return None


def option_letter(index):
    return OPTION_LETTERS[index]


def is_exam_active(start_time, duration_minutes, now):
    # half-open: a submission at exactly start + duration is late
    return start_time <= now < start_time + timedelta(minutes=duration_minutes)


def find_question(questions, question_id):
    for question in questions:
        if question.pk == question_id:
            return question
    return None


def grade_answers(questions, answers):
    """
    Grade ``answers`` against the answer key of ``questions``.

    ``answers`` is a sequence of (question_id, selected_option) pairs whose
    questions are all on the exam. Questions left unanswered simply add
    nothing to the score.

    Returns (score, graded) where graded is a list of GradedAnswer in
    submission order.
    """
    score = 0
    graded = []
    for question_id, selected in answers:
        question = find_question(questions, question_id)
        is_correct = question is not None and question.correct_option == selected
        if is_correct:
            score += 1
        graded.append(GradedAnswer(question, selected, is_correct))
    return score, graded
