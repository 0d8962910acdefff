"""
Exam lifecycle operations used by the API views and the admin.

Every function takes the caller identity explicitly and raises one of the
errors from ``exams.exceptions``; none of them touch the request.
"""
import logging
from collections import namedtuple

from django.db import IntegrityError, transaction
from django.db.models import Count, Prefetch, ProtectedError
from django.utils import timezone

from .exceptions import AlreadySubmitted, InUse, InvalidInput, NotActive, NotFound, Unauthorized
from .models import Exam, ExamQuestion, ExamSession, Question, Result, ResultAnswer, UserProfile
from .permissions import require_role
from .reporting import summarize
from .scoring import OPTION_COUNT, grade_answers

logger = logging.getLogger(__name__)

ExamReport = namedtuple("ExamReport", ["exam", "results", "total_questions", "summary"])

AUTHORS = (UserProfile.TEACHER, UserProfile.ADMIN)


# -------------------
# Lookups
# -------------------

def exam_queryset():
    return Exam.objects.select_related("teacher").prefetch_related(
        Prefetch("question_links", queryset=ExamQuestion.objects.select_related("question"))
    )


def get_exam(exam_id):
    try:
        return exam_queryset().get(pk=exam_id)
    except Exam.DoesNotExist:
        raise NotFound("Exam not found.")


def get_question(question_id):
    try:
        return Question.objects.select_related("teacher").get(pk=question_id)
    except Question.DoesNotExist:
        raise NotFound("Question not found.")


def check_owner(caller, obj):
    if caller.role == UserProfile.ADMIN:
        return
    if obj.teacher_id != caller.user_id:
        raise Unauthorized("Not authorized to access this resource.")


def get_owned_question(caller, question_id):
    require_role(caller, *AUTHORS)
    question = get_question(question_id)
    check_owner(caller, question)
    return question


def get_owned_exam(caller, exam_id):
    require_role(caller, *AUTHORS)
    exam = get_exam(exam_id)
    check_owner(caller, exam)
    return exam


def active_exams(now=None):
    """Exams with the manual flag on whose window contains ``now``."""
    now = now or timezone.now()
    candidates = exam_queryset().filter(is_active=True, start_time__lte=now)
    return [exam for exam in candidates if exam.is_currently_active(now)]


# -------------------
# Deletion
# -------------------

def delete_question(caller, question_id):
    question = get_owned_question(caller, question_id)
    try:
        question.delete()
    except ProtectedError:
        logger.info("Refused to delete question %s: still referenced", question_id)
        raise InUse("Question is used by an exam or a stored result.")
    logger.info("Question %s deleted by user %s", question_id, caller.user_id)


def delete_exam(caller, exam_id):
    exam = get_owned_exam(caller, exam_id)
    try:
        exam.delete()
    except ProtectedError:
        logger.info("Refused to delete exam %s: results exist", exam_id)
        raise InUse("Exam already has results.")
    logger.info("Exam %s deleted by user %s", exam_id, caller.user_id)


# -------------------
# Taking an exam
# -------------------

def _check_open(exam, student_id, now):
    if _has_result(exam, student_id):
        raise AlreadySubmitted("Exam already submitted.")
    if not exam.accepts_submissions(now):
        raise NotActive("Exam is not currently active.")


def _has_result(exam, student_id):
    return Result.objects.filter(exam=exam, student_id=student_id).exists()


def start_exam(caller, exam_id, now=None):
    require_role(caller, UserProfile.STUDENT)
    now = now or timezone.now()
    exam = get_exam(exam_id)
    _check_open(exam, caller.user_id, now)

    session, created = ExamSession.objects.get_or_create(
        exam=exam,
        student_id=caller.user_id,
        defaults={"started_at": now},
    )
    if created:
        logger.info("Student %s started exam %s", caller.user_id, exam.pk)
    return session


def _clean_answers(questions, answers):
    if not answers:
        raise InvalidInput("Answer set must not be empty.")

    exam_question_ids = {question.pk for question in questions}
    seen = set()
    pairs = []
    for answer in answers:
        question_id = answer["question_id"]
        selected = answer["selected_option"]
        if question_id not in exam_question_ids:
            raise InvalidInput(f"Question {question_id} is not part of this exam.")
        if question_id in seen:
            raise InvalidInput(f"Question {question_id} answered more than once.")
        if isinstance(selected, bool) or not isinstance(selected, int) or not 0 <= selected < OPTION_COUNT:
            raise InvalidInput(f"Selected option for question {question_id} must be between 0 and 3.")
        seen.add(question_id)
        pairs.append((question_id, selected))
    return pairs


def submit_exam(caller, exam_id, answers, now=None):
    """
    Grade and store one student's answer set for an exam.

    ``answers`` is a list of ``{"question_id": int, "selected_option": int}``.
    Checks run in a fixed order: the exam exists, the student has no result
    yet, the exam is open, the answers are valid. The (exam, student) unique
    constraint turns a concurrent duplicate into AlreadySubmitted.
    """
    require_role(caller, UserProfile.STUDENT)
    now = now or timezone.now()
    exam = get_exam(exam_id)
    _check_open(exam, caller.user_id, now)

    questions = exam.ordered_questions()
    score, graded = grade_answers(questions, _clean_answers(questions, answers))

    session = ExamSession.objects.filter(exam=exam, student_id=caller.user_id).first()
    started_at = session.started_at if session else now

    try:
        with transaction.atomic():
            result = Result.objects.create(
                exam=exam,
                student_id=caller.user_id,
                score=score,
                started_at=started_at,
                submitted_at=now,
            )
            ResultAnswer.objects.bulk_create([
                ResultAnswer(
                    result=result,
                    question=answer.question,
                    selected_option=answer.selected_option,
                    is_correct=answer.is_correct,
                    position=position,
                )
                for position, answer in enumerate(graded)
            ])
            if session:
                session.delete()
    except IntegrityError:
        logger.warning("Duplicate submission for exam %s by student %s", exam.pk, caller.user_id)
        raise AlreadySubmitted("Exam already submitted.")

    logger.info(
        "Student %s submitted exam %s: %s/%s correct",
        caller.user_id, exam.pk, score, len(questions),
    )
    return result


# -------------------
# Reporting
# -------------------

def student_results(caller, student_id):
    if caller.role is None:
        raise Unauthorized("Not authorized to view these results.")
    if caller.role == UserProfile.STUDENT and caller.user_id != student_id:
        raise Unauthorized("Not authorized to view these results.")

    return list(
        Result.objects.filter(student_id=student_id)
        .select_related("exam", "exam__teacher")
        .prefetch_related("answers")
        .annotate(total_questions=Count("exam__question_links", distinct=True))
        .order_by("-submitted_at", "-id")
    )


def exam_results(caller, exam_id):
    exam = get_owned_exam(caller, exam_id)
    results = list(
        exam.results.select_related("student", "student__userprofile")
        .prefetch_related("answers")
        .order_by("id")
    )
    total = len(exam.ordered_questions())
    return ExamReport(exam, results, total, summarize(results, total))
