import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_text", models.TextField()),
                ("option_a", models.CharField(max_length=255)),
                ("option_b", models.CharField(max_length=255)),
                ("option_c", models.CharField(max_length=255)),
                ("option_d", models.CharField(max_length=255)),
                ("correct_option", models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(3)])),
                ("explanation", models.TextField()),
                ("image_url", models.URLField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("teacher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("correct_option__lte", 3)), name="question_correct_option_range"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("start_time", models.DateTimeField()),
                ("duration_minutes", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("teacher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exams", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["start_time", "id"],
                "indexes": [
                    models.Index(fields=["teacher"], name="exams_exam_teacher_0b6f4c_idx"),
                    models.Index(fields=["start_time"], name="exams_exam_start_t_6a2d1e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExamQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField()),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="question_links", to="exams.exam")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="exam_links", to="exams.question")),
            ],
            options={
                "ordering": ["position"],
                "unique_together": {("exam", "question")},
            },
        ),
        migrations.AddField(
            model_name="exam",
            name="questions",
            field=models.ManyToManyField(related_name="exams", through="exams.ExamQuestion", to="exams.question"),
        ),
        migrations.CreateModel(
            name="ExamSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("started_at", models.DateTimeField()),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sessions", to="exams.exam")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exam_sessions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("student", "exam")},
            },
        ),
        migrations.CreateModel(
            name="Result",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("score", models.PositiveIntegerField()),
                ("started_at", models.DateTimeField()),
                ("submitted_at", models.DateTimeField()),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="results", to="exams.exam")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="results", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["student", "-submitted_at"], name="exams_resul_student_3f9c2a_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("exam", "student"), name="unique_exam_student_result"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ResultAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("selected_option", models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(3)])),
                ("is_correct", models.BooleanField()),
                ("position", models.PositiveIntegerField()),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="result_answers", to="exams.question")),
                ("result", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="exams.result")),
            ],
            options={
                "ordering": ["position"],
                "unique_together": {("result", "question")},
            },
        ),
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("STUDENT", "Student"), ("TEACHER", "Teacher"), ("ADMIN", "Admin")], default="STUDENT", max_length=10)),
                ("student_class", models.CharField(blank=True, max_length=50)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="userprofile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
