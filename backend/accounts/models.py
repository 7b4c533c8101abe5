import secrets

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import models


class Role(models.TextChoices):
    STUDENT = 'STUDENT', 'Student'
    TEACHER = 'TEACHER', 'Teacher'
    ADMIN = 'ADMIN', 'Administrator'


class Profile(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    full_name = models.CharField(max_length=255, blank=True)
    bio = models.TextField(blank=True)
    avatar_url = models.CharField(max_length=500, blank=True)
    settings = models.JSONField(null=True, blank=True)

    def __str__(self) -> str:
        return self.user.get_username()

    @property
    def username(self) -> str:
        return self.user.get_username()

    @property
    def display_name(self) -> str:
        return self.full_name.strip() or self.username


User = get_user_model()


def ensure_profile(user: User) -> 'Profile':
    defaults = {'role': Role.ADMIN} if user.is_superuser else {}
    profile, _ = Profile.objects.get_or_create(user=user, defaults=defaults)
    return profile


def role_of(user) -> str:
    """Role of an authenticated user; superusers without a profile act as admins."""
    if user is None or not user.is_authenticated:
        return ''
    profile = getattr(user, 'profile', None)
    if profile is not None:
        return profile.role
    if user.is_superuser:
        return Role.ADMIN
    return ''


def display_name_of(user) -> str:
    profile = getattr(user, 'profile', None)
    if profile is not None:
        return profile.display_name
    return user.get_username()


def generate_invite_code() -> str:
    return secrets.token_hex(4).upper()


class TeacherInvite(models.Model):
    code = models.CharField(max_length=16, unique=True, default=generate_invite_code)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_invites',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    used_by = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='redeemed_invite',
    )
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.code

    @property
    def is_used(self) -> bool:
        return self.used_by_id is not None
