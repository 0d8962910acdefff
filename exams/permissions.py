from collections import namedtuple

from rest_framework.permissions import BasePermission

from .exceptions import Unauthorized
from .models import UserProfile

# Identity handed from the views to the service layer.
Caller = namedtuple("Caller", ["user_id", "role"])


def role_of(user):
    if not user or not user.is_authenticated:
        return None
    profile = getattr(user, "userprofile", None)
    if profile is not None:
        return profile.role
    return UserProfile.ADMIN if user.is_superuser else None


def caller_from_request(request):
    return Caller(request.user.pk, role_of(request.user))


def require_role(caller, *roles):
    if caller.role not in roles:
        raise Unauthorized("Insufficient permissions.")


class HasRole(BasePermission):
    roles = ()

    def has_permission(self, request, view):
        return role_of(request.user) in self.roles


class IsStudent(HasRole):
    roles = (UserProfile.STUDENT,)


class IsTeacher(HasRole):
    roles = (UserProfile.TEACHER, UserProfile.ADMIN)


class IsAdmin(HasRole):
    roles = (UserProfile.ADMIN,)
