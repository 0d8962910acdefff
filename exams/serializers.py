from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import serializers

from .models import Exam, ExamQuestion, ExamSession, Question, Result, ResultAnswer, UserProfile
from .permissions import role_of
from .reporting import percentage
from .scoring import OPTION_COUNT, to_option_index


class OptionIndexField(serializers.Field):
    """Answer option as 0..3 or "A".."D"; always stored as the index."""

    default_error_messages = {
        "invalid": "Option must be an index between 0 and 3 or a letter A-D.",
    }

    def to_internal_value(self, data):
        index = to_option_index(data)
        if index is None:
            self.fail("invalid")
        return index

    def to_representation(self, value):
        return value


class UserSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()
    student_class = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "role", "student_class"]

    def get_role(self, obj):
        return role_of(obj)

    def get_student_class(self, obj):
        profile = getattr(obj, "userprofile", None)
        return profile.student_class if profile else ""


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.ChoiceField(choices=UserProfile.ROLE_CHOICES)
    student_class = serializers.CharField(max_length=50, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "password", "role", "student_class"]

    def validate(self, attrs):
        if attrs["role"] == UserProfile.STUDENT and not attrs.get("student_class"):
            raise serializers.ValidationError({"student_class": "Class is required for students."})
        return attrs

    def create(self, validated_data):
        role = validated_data.pop("role")
        student_class = validated_data.pop("student_class", "")
        with transaction.atomic():
            user = User.objects.create_user(**validated_data)
            # the post_save signal has already created a default profile
            profile = user.userprofile
            profile.role = role
            profile.student_class = student_class
            profile.save()
        return user

    def to_representation(self, instance):
        return UserSerializer(instance).data


class QuestionSerializer(serializers.ModelSerializer):
    options = serializers.ListField(
        child=serializers.CharField(max_length=255),
        min_length=OPTION_COUNT,
        max_length=OPTION_COUNT,
    )
    correct_option = OptionIndexField()
    teacher = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Question
        fields = [
            "id",
            "question_text",
            "options",
            "correct_option",
            "explanation",
            "image_url",
            "teacher",
            "created_at",
        ]

    def validate_question_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Question text is required.")
        return value

    def validate_explanation(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Explanation is required.")
        return value

    def validate_options(self, value):
        options = [option.strip() for option in value]
        if not all(options):
            raise serializers.ValidationError("Options must not be blank.")
        return options

    def create(self, validated_data):
        options = validated_data.pop("options")
        question = Question(**validated_data)
        question.set_options(options)
        question.save()
        return question

    def update(self, instance, validated_data):
        options = validated_data.pop("options", None)
        if options is not None:
            instance.set_options(options)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class StudentQuestionSerializer(serializers.ModelSerializer):
    """Question as shown while taking an exam: no answer key."""

    class Meta:
        model = Question
        fields = ["id", "question_text", "options", "image_url"]


class ExamSerializer(serializers.ModelSerializer):
    question_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        write_only=True,
        allow_empty=False,
    )
    questions = serializers.SerializerMethodField()
    teacher = UserSerializer(read_only=True)
    end_time = serializers.DateTimeField(read_only=True)
    is_currently_active = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = [
            "id",
            "title",
            "description",
            "start_time",
            "end_time",
            "duration_minutes",
            "is_active",
            "is_currently_active",
            "teacher",
            "question_ids",
            "questions",
            "created_at",
            "updated_at",
        ]

    def get_questions(self, obj):
        questions = obj.ordered_questions()
        if self.context.get("show_answers"):
            return QuestionSerializer(questions, many=True).data
        return StudentQuestionSerializer(questions, many=True).data

    def get_is_currently_active(self, obj):
        return obj.is_currently_active()

    def validate_title(self, value):
        value = value.strip()
        if len(value) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters.")
        return value

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Description is required.")
        return value

    def validate_duration_minutes(self, value):
        limit = settings.EXAM_MAX_DURATION_MINUTES
        if not 1 <= value <= limit:
            raise serializers.ValidationError(f"Duration must be between 1 and {limit} minutes.")
        return value

    def validate_question_ids(self, value):
        if len(set(value)) != len(value):
            raise serializers.ValidationError("Each question may appear only once.")

        owner = self.context["owner"]
        owned = set(
            Question.objects.filter(pk__in=value, teacher=owner).values_list("pk", flat=True)
        )
        missing = [pk for pk in value if pk not in owned]
        if missing:
            raise serializers.ValidationError(f"Unknown questions: {missing}.")
        return value

    def _set_questions(self, exam, question_ids):
        exam.question_links.all().delete()
        ExamQuestion.objects.bulk_create([
            ExamQuestion(exam=exam, question_id=question_id, position=position)
            for position, question_id in enumerate(question_ids)
        ])

    @transaction.atomic
    def create(self, validated_data):
        question_ids = validated_data.pop("question_ids")
        exam = Exam.objects.create(teacher=self.context["owner"], **validated_data)
        self._set_questions(exam, question_ids)
        return exam

    @transaction.atomic
    def update(self, instance, validated_data):
        question_ids = validated_data.pop("question_ids", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if question_ids is not None:
            self._set_questions(instance, question_ids)
        # drop the prefetched links so the response shows the new list
        if hasattr(instance, "_prefetched_objects_cache"):
            instance._prefetched_objects_cache.clear()
        return instance


class ExamSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Exam
        fields = ["id", "title", "description", "start_time", "duration_minutes"]


class ExamSessionSerializer(serializers.ModelSerializer):
    remaining_time = serializers.SerializerMethodField()

    class Meta:
        model = ExamSession
        fields = ["id", "exam", "student", "started_at", "remaining_time"]

    def get_remaining_time(self, obj):
        return obj.exam.remaining_seconds()


class AnswerInputSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    selected_option = OptionIndexField()


class SubmissionSerializer(serializers.Serializer):
    # emptiness is checked by the submission service, after the exam checks
    answers = AnswerInputSerializer(many=True, allow_empty=True)


class ResultAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResultAnswer
        fields = ["question", "selected_option", "is_correct"]


class ResultSerializer(serializers.ModelSerializer):
    answers = ResultAnswerSerializer(many=True, read_only=True)
    total_questions = serializers.SerializerMethodField()
    percentage = serializers.SerializerMethodField()

    class Meta:
        model = Result
        fields = [
            "id",
            "exam",
            "student",
            "score",
            "total_questions",
            "percentage",
            "answers",
            "started_at",
            "submitted_at",
        ]

    def get_total_questions(self, obj):
        total = getattr(obj, "total_questions", None)
        if total is None:
            total = self.context.get("total_questions")
        if total is None:
            total = obj.exam.question_links.count()
        return total

    def get_percentage(self, obj):
        return percentage(obj.score, self.get_total_questions(obj))


class StudentResultSerializer(ResultSerializer):
    exam = ExamSummarySerializer(read_only=True)


class ExamResultSerializer(ResultSerializer):
    student = UserSerializer(read_only=True)
