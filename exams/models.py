from datetime import timedelta

from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .scoring import OPTION_COUNT, is_exam_active


class UserProfile(models.Model):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"
    ROLE_CHOICES = [
        (STUDENT, "Student"),
        (TEACHER, "Teacher"),
        (ADMIN, "Admin"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="userprofile")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=STUDENT)
    student_class = models.CharField(max_length=50, blank=True)

    def __str__(self):
        return f"{self.user.username} ({self.role})"


class Question(models.Model):
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name="questions")
    question_text = models.TextField()
    option_a = models.CharField(max_length=255)
    option_b = models.CharField(max_length=255)
    option_c = models.CharField(max_length=255)
    option_d = models.CharField(max_length=255)
    # 0 -> A, 3 -> D
    correct_option = models.PositiveSmallIntegerField(
        validators=[MaxValueValidator(OPTION_COUNT - 1)]
    )
    explanation = models.TextField()
    image_url = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(correct_option__lte=OPTION_COUNT - 1),
                name="question_correct_option_range",
            ),
        ]

    @property
    def options(self):
        return [self.option_a, self.option_b, self.option_c, self.option_d]

    def set_options(self, options):
        self.option_a, self.option_b, self.option_c, self.option_d = options

    def __str__(self):
        return f"Q{self.pk}: {self.question_text[:50]}"


class Exam(models.Model):
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name="exams")
    title = models.CharField(max_length=100)
    description = models.TextField()
    start_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    questions = models.ManyToManyField(Question, through="ExamQuestion", related_name="exams")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time", "id"]
        indexes = [
            models.Index(fields=["teacher"], name="exams_exam_teacher_0b6f4c_idx"),
            models.Index(fields=["start_time"], name="exams_exam_start_t_6a2d1e_idx"),
        ]

    def __str__(self):
        return self.title

    @property
    def end_time(self):
        return self.start_time + timedelta(minutes=self.duration_minutes)

    def ordered_questions(self):
        return [link.question for link in self.question_links.all()]

    def is_currently_active(self, now=None):
        """Whether ``now`` falls inside the exam window. Ignores ``is_active``."""
        return is_exam_active(self.start_time, self.duration_minutes, now or timezone.now())

    def accepts_submissions(self, now=None):
        return self.is_active and self.is_currently_active(now)

    def remaining_seconds(self, now=None):
        """Seconds left to answer; the full duration until the window opens."""
        remaining = (self.end_time - (now or timezone.now())).total_seconds()
        return max(0, min(int(remaining), self.duration_minutes * 60))


class ExamQuestion(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="question_links")
    # questions referenced by an exam cannot be deleted
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="exam_links")
    position = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        unique_together = ("exam", "question")

    def __str__(self):
        return f"{self.exam} #{self.position}"


class ExamSession(models.Model):
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="exam_sessions")
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="sessions")
    started_at = models.DateTimeField()

    class Meta:
        unique_together = ("student", "exam")

    def __str__(self):
        return f"{self.student.username} - {self.exam}"


class Result(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.PROTECT, related_name="results")
    student = models.ForeignKey(User, on_delete=models.PROTECT, related_name="results")
    # raw number of correct answers
    score = models.PositiveIntegerField()
    started_at = models.DateTimeField()
    submitted_at = models.DateTimeField()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["exam", "student"], name="unique_exam_student_result"),
        ]
        indexes = [
            models.Index(fields=["student", "-submitted_at"], name="exams_resul_student_3f9c2a_idx"),
        ]

    def __str__(self):
        return f"{self.student.username} - {self.exam}: {self.score}"

    @property
    def duration_minutes(self):
        return round((self.submitted_at - self.started_at).total_seconds() / 60)


class ResultAnswer(models.Model):
    result = models.ForeignKey(Result, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="result_answers")
    selected_option = models.PositiveSmallIntegerField(
        validators=[MaxValueValidator(OPTION_COUNT - 1)]
    )
    is_correct = models.BooleanField()
    position = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        unique_together = ("result", "question")

    def __str__(self):
        return f"{self.result} - Q{self.question_id} ({'correct' if self.is_correct else 'wrong'})"
