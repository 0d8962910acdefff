import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from . import services
from .exceptions import InvalidInput
from .models import Question, UserProfile
from .permissions import IsAdmin, IsStudent, IsTeacher, caller_from_request
from .reports import render_results_pdf
from .serializers import (
    ExamResultSerializer,
    ExamSerializer,
    ExamSessionSerializer,
    QuestionSerializer,
    RegisterSerializer,
    ResultSerializer,
    StudentResultSerializer,
    SubmissionSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def is_author(request):
    return caller_from_request(request).role in services.AUTHORS


# -------------------
# Auth
# -------------------

class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        if not isinstance(request.data, dict):
            raise InvalidInput("Expected an object with username and password.")

        username = (request.data.get("username") or request.data.get("email") or "").strip()
        password = request.data.get("password")

        if not username or not password:
            raise InvalidInput("Username and password are required.")

        # allow logging in with the e-mail address as well
        if "@" in username:
            match = User.objects.filter(email__iexact=username).first()
            if match:
                username = match.username

        user = authenticate(username=username, password=password)
        if not user:
            logger.info("Failed login for %s", username)
            return Response(
                {"detail": "Invalid username or password.", "error_code": "not_authenticated"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        refresh = RefreshToken.for_user(user)
        return Response({
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": UserSerializer(user).data,
        })


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class RegisterView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s registered as %s", user.username, user.userprofile.role)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


# -------------------
# Question bank
# -------------------

class QuestionListCreateView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        questions = Question.objects.filter(teacher=request.user)
        return Response(QuestionSerializer(questions, many=True).data)

    def post(self, request):
        serializer = QuestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        question = serializer.save(teacher=request.user)
        logger.info("Question %s created by user %s", question.pk, request.user.pk)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class QuestionDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        question = services.get_owned_question(caller_from_request(request), pk)
        return Response(QuestionSerializer(question).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk):
        services.delete_question(caller_from_request(request), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _update(self, request, pk, partial):
        question = services.get_owned_question(caller_from_request(request), pk)
        serializer = QuestionSerializer(question, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Question %s updated by user %s", pk, request.user.pk)
        return Response(serializer.data)


# -------------------
# Exams
# -------------------

class ExamListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        exams = services.exam_queryset()
        context = {"show_answers": caller_from_request(request).role == UserProfile.ADMIN}
        return Response(ExamSerializer(exams, many=True, context=context).data)

    def post(self, request):
        if not is_author(request):
            self.permission_denied(request, message="Only teachers can create exams.")
        serializer = ExamSerializer(data=request.data, context={"owner": request.user})
        serializer.is_valid(raise_exception=True)
        exam = serializer.save()
        logger.info("Exam %s created by user %s", exam.pk, request.user.pk)
        exam = services.get_exam(exam.pk)
        return Response(
            ExamSerializer(exam, context={"show_answers": True}).data,
            status=status.HTTP_201_CREATED,
        )


class ActiveExamListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        exams = services.active_exams()
        context = {"show_answers": caller_from_request(request).role == UserProfile.ADMIN}
        return Response(ExamSerializer(exams, many=True, context=context).data)


class TeacherExamListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, teacher_id):
        exams = services.exam_queryset().filter(teacher_id=teacher_id)
        # answer keys only for the teacher's own exams
        context = {"show_answers": request.user.pk == teacher_id and is_author(request)}
        return Response(ExamSerializer(exams, many=True, context=context).data)


class ExamDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        exam = services.get_exam(pk)
        caller = caller_from_request(request)
        show_answers = caller.role == UserProfile.ADMIN or (
            caller.role == UserProfile.TEACHER and exam.teacher_id == caller.user_id
        )
        return Response(ExamSerializer(exam, context={"show_answers": show_answers}).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk):
        services.delete_exam(caller_from_request(request), pk)
        return Response({"detail": "Exam deleted successfully."})

    def _update(self, request, pk, partial):
        exam = services.get_owned_exam(caller_from_request(request), pk)
        serializer = ExamSerializer(
            exam,
            data=request.data,
            partial=partial,
            context={"owner": exam.teacher, "show_answers": True},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Exam %s updated by user %s", pk, request.user.pk)
        return Response(serializer.data)


class StartExamView(APIView):
    permission_classes = [IsStudent]

    def post(self, request, pk):
        session = services.start_exam(caller_from_request(request), pk)
        return Response(ExamSessionSerializer(session).data)


class RemainingTimeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        exam = services.get_exam(pk)
        return Response({"remaining_time": exam.remaining_seconds()})


# -------------------
# Results
# -------------------

class SubmitExamView(APIView):
    permission_classes = [IsStudent]

    def post(self, request, exam_id):
        serializer = SubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.submit_exam(
            caller_from_request(request),
            exam_id,
            serializer.validated_data["answers"],
        )
        return Response(ResultSerializer(result).data, status=status.HTTP_201_CREATED)


class StudentResultsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, student_id):
        results = services.student_results(caller_from_request(request), student_id)
        return Response(StudentResultSerializer(results, many=True).data)


class ExamResultsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, exam_id):
        report = services.exam_results(caller_from_request(request), exam_id)
        summary = report.summary
        top = summary.top_result
        results = ExamResultSerializer(
            report.results, many=True, context={"total_questions": report.total_questions}
        ).data
        return Response({
            "exam": ExamSerializer(report.exam, context={"show_answers": True}).data,
            "total_questions": report.total_questions,
            "results": results,
            "summary": {
                "count": summary.count,
                "average_percentage": summary.average,
                "max_percentage": summary.maximum,
                "top_scorer": UserSerializer(top.student).data if top else None,
                "top_result": top.pk if top else None,
            },
        })


class ExamResultsPdfView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, exam_id):
        report = services.exam_results(caller_from_request(request), exam_id)
        response = HttpResponse(content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="exam_{exam_id}_results.pdf"'
        render_results_pdf(report, response)
        return response
