from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import *

urlpatterns = [
    path("api/auth/login/", LoginView.as_view(), name="login"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("api/auth/me/", MeView.as_view(), name="me"),
    path("api/auth/register/", RegisterView.as_view(), name="register"),

    path("api/questions/", QuestionListCreateView.as_view(), name="question-list"),
    path("api/questions/<int:pk>/", QuestionDetailView.as_view(), name="question-detail"),

    path("api/exams/", ExamListCreateView.as_view(), name="exam-list"),
    path("api/exams/active/", ActiveExamListView.as_view(), name="exam-active"),
    path("api/exams/teacher/<int:teacher_id>/", TeacherExamListView.as_view(), name="exam-teacher"),
    path("api/exams/<int:pk>/", ExamDetailView.as_view(), name="exam-detail"),
    path("api/exams/<int:pk>/start/", StartExamView.as_view(), name="exam-start"),
    path("api/exams/<int:pk>/time/", RemainingTimeView.as_view(), name="exam-time"),

    path("api/results/<int:exam_id>/submit/", SubmitExamView.as_view(), name="exam-submit"),
    path("api/results/student/<int:student_id>/", StudentResultsView.as_view(), name="results-student"),
    path("api/results/exam/<int:exam_id>/", ExamResultsView.as_view(), name="results-exam"),
    path("api/results/exam/<int:exam_id>/pdf/", ExamResultsPdfView.as_view(), name="results-exam-pdf"),
]
