from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.db.models import Count
from django.forms.models import BaseInlineFormSet
from django.http import HttpResponse

from . import services
from .admin_base import TeacherScopedAdmin, is_admin
from .exceptions import ExamError
from .models import Exam, ExamQuestion, Question, Result, ResultAnswer, UserProfile
from .permissions import caller_from_request
from .reporting import percentage
from .reports import render_results_pdf


# -----------------
# Question bank
# -----------------
class QuestionAdmin(TeacherScopedAdmin):
    list_display = ("id", "short_text", "correct_letter", "teacher", "created_at")
    search_fields = ("question_text",)

    def short_text(self, obj):
        return obj.question_text[:60]
    short_text.short_description = "Question"

    def correct_letter(self, obj):
        return "ABCD"[obj.correct_option]
    correct_letter.short_description = "Answer"


# -----------------
# Exam and its ordered questions
# -----------------
class ExamQuestionFormSet(BaseInlineFormSet):
    def clean(self):
        super().clean()
        owner_id = self.instance.teacher_id
        for form in self.forms:
            data = getattr(form, "cleaned_data", None)
            if not data or data.get("DELETE"):
                continue
            question = data.get("question")
            if question and owner_id and question.teacher_id != owner_id:
                raise ValidationError("An exam can only use questions written by its teacher.")


class ExamQuestionInline(admin.TabularInline):
    model = ExamQuestion
    formset = ExamQuestionFormSet
    extra = 5  # show 5 empty rows by default
    min_num = 1
    validate_min = True
    ordering = ("position",)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if db_field.name == "question" and not is_admin(request.user):
            kwargs["queryset"] = Question.objects.filter(teacher=request.user)
        return super().formfield_for_foreignkey(db_field, request, **kwargs)


class ExamAdmin(TeacherScopedAdmin):
    list_display = ("title", "teacher", "start_time", "duration_minutes", "is_active", "window_open")
    list_filter = ("is_active",)
    search_fields = ("title", "description")
    inlines = [ExamQuestionInline]
    actions = ["download_results_sheet"]

    def window_open(self, obj):
        return obj.is_currently_active()
    window_open.boolean = True
    window_open.short_description = "In window"

    def download_results_sheet(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, "Select exactly one exam.", messages.WARNING)
            return None

        exam = queryset.first()
        try:
            report = services.exam_results(caller_from_request(request), exam.pk)
        except ExamError as exc:
            self.message_user(request, str(exc.detail), messages.ERROR)
            return None

        response = HttpResponse(content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="exam_{exam.pk}_results.pdf"'
        return render_results_pdf(report, response)
    download_results_sheet.short_description = "Download results sheet (PDF)"


# -----------------
# Results are read-only
# -----------------
class ResultAnswerInline(admin.TabularInline):
    model = ResultAnswer
    extra = 0
    can_delete = False
    readonly_fields = ("question", "selected_option", "is_correct", "position")

    def has_add_permission(self, request, obj=None):
        return False


class ResultAdmin(admin.ModelAdmin):
    list_display = ("student", "exam", "score", "percent", "submitted_at")
    list_filter = ("exam",)
    search_fields = ("student__username", "exam__title")
    readonly_fields = ("exam", "student", "score", "started_at", "submitted_at")
    inlines = [ResultAnswerInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request).select_related("exam", "student").annotate(
            total_questions=Count("exam__question_links", distinct=True)
        )
        if is_admin(request.user):
            return qs
        return qs.filter(exam__teacher=request.user)

    def percent(self, obj):
        return f"{percentage(obj.score, obj.total_questions)}%"
    percent.short_description = "Percentage"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "student_class")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email", "student_class")


# -----------------
# Register everything
# -----------------
admin.site.register(Question, QuestionAdmin)
admin.site.register(Exam, ExamAdmin)
admin.site.register(Result, ResultAdmin)
admin.site.register(UserProfile, UserProfileAdmin)
