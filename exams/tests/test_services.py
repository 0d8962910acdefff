from datetime import timedelta
from unittest import mock

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from exams import services
from exams.exceptions import AlreadySubmitted, InUse, InvalidInput, NotActive, NotFound, Unauthorized
from exams.models import Exam, ExamSession, Question, Result

from .conftest import caller_for, make_exam, make_question, make_user

pytestmark = pytest.mark.django_db


def answers(*pairs):
    return [{"question_id": q.pk, "selected_option": option} for q, option in pairs]


# -------------------
# Submission
# -------------------

def test_submit_grades_against_answer_key(exam, questions, student):
    first, second = questions

    result = services.submit_exam(caller_for(student), exam.pk, answers((first, 1), (second, 0)))

    assert result.score == 1
    stored = list(result.answers.all())
    assert [a.question_id for a in stored] == [first.pk, second.pk]
    assert [a.is_correct for a in stored] == [True, False]
    assert [a.selected_option for a in stored] == [1, 0]


def test_second_submission_is_rejected_and_first_kept(exam, questions, student):
    first, second = questions
    caller = caller_for(student)
    services.submit_exam(caller, exam.pk, answers((first, 0), (second, 0)))

    with pytest.raises(AlreadySubmitted):
        services.submit_exam(caller, exam.pk, answers((first, 1), (second, 2)))

    results = services.student_results(caller, student.pk)
    assert len(results) == 1
    assert results[0].score == 0


def test_racing_duplicate_is_caught_by_unique_constraint(exam, questions, student):
    first, _ = questions
    caller = caller_for(student)
    services.submit_exam(caller, exam.pk, answers((first, 1)))

    # the advisory check misses the earlier write
    with mock.patch.object(services, "_has_result", return_value=False):
        with pytest.raises(AlreadySubmitted):
            services.submit_exam(caller, exam.pk, answers((first, 0)))

    assert Result.objects.filter(exam=exam, student=student).count() == 1
    assert Result.objects.get(exam=exam, student=student).score == 1


def test_unanswered_questions_are_not_an_error(exam, questions, student):
    first, _ = questions

    result = services.submit_exam(caller_for(student), exam.pk, answers((first, 1)))

    assert result.score == 1
    assert result.answers.count() == 1


def test_missing_exam(student):
    with pytest.raises(NotFound):
        services.submit_exam(caller_for(student), 9999, [])


def test_already_submitted_is_reported_before_not_active(exam, questions, student):
    first, _ = questions
    caller = caller_for(student)
    services.submit_exam(caller, exam.pk, answers((first, 1)))

    later = exam.end_time + timedelta(minutes=1)
    with pytest.raises(AlreadySubmitted):
        services.submit_exam(caller, exam.pk, answers((first, 1)), now=later)


def test_submission_at_window_end_is_late(exam, questions, student):
    first, _ = questions
    with pytest.raises(NotActive):
        services.submit_exam(caller_for(student), exam.pk, answers((first, 1)), now=exam.end_time)


def test_submission_just_before_window_end_is_accepted(exam, questions, student):
    first, _ = questions
    now = exam.end_time - timedelta(seconds=1)

    result = services.submit_exam(caller_for(student), exam.pk, answers((first, 1)), now=now)

    assert result.submitted_at == now


def test_submission_before_start(teacher, questions, student):
    exam = make_exam(teacher, questions, start_time=timezone.now() + timedelta(hours=1))
    with pytest.raises(NotActive):
        services.submit_exam(caller_for(student), exam.pk, answers((questions[0], 1)))


def test_manual_flag_closes_exam(teacher, questions, student):
    exam = make_exam(teacher, questions, is_active=False)
    with pytest.raises(NotActive):
        services.submit_exam(caller_for(student), exam.pk, answers((questions[0], 1)))


def test_not_active_is_reported_before_invalid_answers(teacher, questions, student):
    exam = make_exam(teacher, questions, is_active=False)
    with pytest.raises(NotActive):
        services.submit_exam(caller_for(student), exam.pk, [])


def test_empty_answer_set(exam, student):
    with pytest.raises(InvalidInput):
        services.submit_exam(caller_for(student), exam.pk, [])


def test_answer_for_question_outside_exam(exam, teacher, student):
    stray = make_question(teacher, correct_option=0)
    with pytest.raises(InvalidInput):
        services.submit_exam(caller_for(student), exam.pk, answers((stray, 0)))
    assert not Result.objects.exists()


def test_question_answered_twice(exam, questions, student):
    first, _ = questions
    with pytest.raises(InvalidInput):
        services.submit_exam(caller_for(student), exam.pk, answers((first, 1), (first, 2)))


def test_option_out_of_range(exam, questions, student):
    first, _ = questions
    with pytest.raises(InvalidInput):
        services.submit_exam(caller_for(student), exam.pk, answers((first, 4)))


def test_only_students_submit(exam, questions, teacher):
    with pytest.raises(Unauthorized):
        services.submit_exam(caller_for(teacher), exam.pk, answers((questions[0], 1)))


def test_start_time_comes_from_session(exam, questions, student):
    caller = caller_for(student)
    opened = timezone.now() - timedelta(minutes=2)
    session = services.start_exam(caller, exam.pk, now=opened)

    # starting again keeps the first timestamp
    assert services.start_exam(caller, exam.pk).pk == session.pk

    result = services.submit_exam(caller, exam.pk, answers((questions[0], 1)))

    assert result.started_at == opened
    assert not ExamSession.objects.filter(exam=exam, student=student).exists()


def test_cannot_start_closed_exam(teacher, questions, student):
    exam = make_exam(teacher, questions, is_active=False)
    with pytest.raises(NotActive):
        services.start_exam(caller_for(student), exam.pk)


def test_active_exams(teacher, questions):
    now = timezone.now()
    running = make_exam(teacher, questions)
    make_exam(teacher, questions, start_time=now + timedelta(hours=1))
    make_exam(teacher, questions, start_time=now - timedelta(hours=2))
    make_exam(teacher, questions, is_active=False)

    assert [e.pk for e in services.active_exams(now)] == [running.pk]


# -------------------
# Deletion
# -------------------

def test_question_used_by_exam_cannot_be_deleted(exam, questions, teacher):
    with pytest.raises(InUse):
        services.delete_question(caller_for(teacher), questions[0].pk)
    assert Question.objects.filter(pk=questions[0].pk).exists()


def test_unused_question_is_deleted(teacher):
    question = make_question(teacher)
    services.delete_question(caller_for(teacher), question.pk)
    assert not Question.objects.filter(pk=question.pk).exists()


def test_only_owner_deletes_question(teacher, other_teacher):
    question = make_question(teacher)
    with pytest.raises(Unauthorized):
        services.delete_question(caller_for(other_teacher), question.pk)


def test_exam_with_results_cannot_be_deleted(exam, questions, teacher, student):
    services.submit_exam(caller_for(student), exam.pk, answers((questions[0], 1)))
    with pytest.raises(InUse):
        services.delete_exam(caller_for(teacher), exam.pk)
    assert Exam.objects.filter(pk=exam.pk).exists()


def test_exam_without_results_is_deleted(exam, teacher):
    services.delete_exam(caller_for(teacher), exam.pk)
    assert not Exam.objects.filter(pk=exam.pk).exists()


# -------------------
# Reporting
# -------------------

def test_student_cannot_read_other_students_results(student, other_student):
    with pytest.raises(Unauthorized):
        services.student_results(caller_for(student), other_student.pk)


def test_teacher_reads_any_students_results(exam, questions, teacher, student):
    services.submit_exam(caller_for(student), exam.pk, answers((questions[0], 1)))

    results = services.student_results(caller_for(teacher), student.pk)

    assert len(results) == 1
    assert results[0].total_questions == 2


def test_only_owning_teacher_reads_exam_results(exam, other_teacher, student):
    with pytest.raises(Unauthorized):
        services.exam_results(caller_for(other_teacher), exam.pk)
    with pytest.raises(Unauthorized):
        services.exam_results(caller_for(student), exam.pk)


def test_admin_reads_exam_results(exam, admin_user):
    report = services.exam_results(caller_for(admin_user), exam.pk)
    assert report.summary.count == 0


def test_exam_results_for_missing_exam(teacher):
    with pytest.raises(NotFound):
        services.exam_results(caller_for(teacher), 9999)


def test_top_scorer_is_first_to_reach_best_score(teacher, student, other_student):
    questions = [make_question(teacher, correct_option=0, text=f"Q{i}?") for i in range(5)]
    exam = make_exam(teacher, questions)
    four_right = [(q, 0) for q in questions[:4]] + [(questions[4], 1)]

    services.submit_exam(caller_for(student), exam.pk, answers(*four_right))
    services.submit_exam(caller_for(other_student), exam.pk, answers(*four_right))

    report = services.exam_results(caller_for(teacher), exam.pk)

    assert report.summary.maximum == 80
    assert report.summary.average == 80
    assert report.summary.top_result.student == student
    assert [r.student for r in report.results] == [student, other_student]


def test_exam_without_questions_reports_zero(teacher, student):
    exam = make_exam(teacher, [])
    now = timezone.now()
    Result.objects.create(exam=exam, student=student, score=0, started_at=now, submitted_at=now)

    report = services.exam_results(caller_for(teacher), exam.pk)

    assert report.total_questions == 0
    assert report.summary.average == 0
    assert report.summary.maximum == 0


def test_new_users_get_a_profile(db):
    user = User.objects.create_user(username="fresh", password="password123")
    superuser = User.objects.create_superuser(username="root", password="password123")

    assert user.userprofile.role == "STUDENT"
    assert superuser.userprofile.role == "ADMIN"
