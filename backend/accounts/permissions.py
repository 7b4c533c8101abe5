from rest_framework.permissions import BasePermission

from .models import Role, role_of


class HasRole(BasePermission):
    """Allow authenticated users whose profile role is in ``allowed_roles``."""

    allowed_roles = ()
    message = 'FORBIDDEN'

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and role_of(request.user) in self.allowed_roles
        )


class IsTeacher(HasRole):
    allowed_roles = (Role.TEACHER,)


class IsStudent(HasRole):
    allowed_roles = (Role.STUDENT,)


class IsAdminRole(HasRole):
    allowed_roles = (Role.ADMIN,)
