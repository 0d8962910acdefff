#admin_base.py
from django.contrib import admin

from .models import UserProfile
from .permissions import role_of

admin.site.site_header = "ExamHub Administration"
admin.site.site_title = "ExamHub Admin Portal"
admin.site.index_title = "Welcome to ExamHub Management"


# --- Helper Functions ---
def is_admin(user):
    return user.is_superuser or role_of(user) == UserProfile.ADMIN


def is_teacher(user):
    return role_of(user) == UserProfile.TEACHER


# --- Base Admin Mixin for Owner Filtering ---
class TeacherScopedAdmin(admin.ModelAdmin):
    """Teachers only see and edit the objects they own."""

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if is_admin(request.user):
            return qs
        if is_teacher(request.user):
            return qs.filter(teacher=request.user)
        return qs.none()

    def get_exclude(self, request, obj=None):
        exclude = list(super().get_exclude(request, obj) or [])
        if not is_admin(request.user):
            exclude.append("teacher")
        return exclude

    def save_form(self, request, form, change):
        # runs before inline formsets are validated, so they see the owner
        obj = super().save_form(request, form, change)
        if not change and not is_admin(request.user):
            obj.teacher = request.user
        return obj
