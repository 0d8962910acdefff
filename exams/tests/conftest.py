from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.test import APIClient

from exams.models import Exam, ExamQuestion, Question, UserProfile
from exams.permissions import Caller


def make_user(username, role, student_class=""):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="password123",
        first_name=username.title(),
    )
    profile = user.userprofile
    profile.role = role
    profile.student_class = student_class
    profile.save()
    return user


def make_question(teacher, correct_option=0, text="What is the capital of France?"):
    question = Question(
        teacher=teacher,
        question_text=text,
        correct_option=correct_option,
        explanation="Because it is.",
    )
    question.set_options(["Paris", "Berlin", "Rome", "Madrid"])
    question.save()
    return question


def make_exam(teacher, questions, start_time=None, duration_minutes=30, is_active=True):
    exam = Exam.objects.create(
        teacher=teacher,
        title="Midterm",
        description="Chapter one to four",
        start_time=start_time or timezone.now() - timedelta(minutes=5),
        duration_minutes=duration_minutes,
        is_active=is_active,
    )
    for position, question in enumerate(questions):
        ExamQuestion.objects.create(exam=exam, question=question, position=position)
    return exam


def caller_for(user):
    return Caller(user.pk, user.userprofile.role)


@pytest.fixture
def teacher(db):
    return make_user("teacher", UserProfile.TEACHER)


@pytest.fixture
def other_teacher(db):
    return make_user("other_teacher", UserProfile.TEACHER)


@pytest.fixture
def student(db):
    return make_user("student", UserProfile.STUDENT, student_class="XII IPA 1")


@pytest.fixture
def other_student(db):
    return make_user("other_student", UserProfile.STUDENT, student_class="XII IPA 2")


@pytest.fixture
def admin_user(db):
    return make_user("admin", UserProfile.ADMIN)


@pytest.fixture
def questions(teacher):
    # answer key [1, 2]
    return [
        make_question(teacher, correct_option=1, text="First question?"),
        make_question(teacher, correct_option=2, text="Second question?"),
    ]


@pytest.fixture
def exam(teacher, questions):
    return make_exam(teacher, questions)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def authenticate(user):
        api_client.force_authenticate(user=user)
        return api_client
    return authenticate
