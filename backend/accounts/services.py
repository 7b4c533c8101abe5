import logging

from django.contrib.auth import get_user_model, password_validation
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from coursehub.exceptions import Conflict, Forbidden, Invalid, NotFound
from .models import Profile, Role, TeacherInvite, role_of

logger = logging.getLogger(__name__)

UserModel = get_user_model()


def normalize_username(username) -> str:
    return str(username or '').strip().lower()


def _create_user(username, password, name, role):
    username = normalize_username(username)
    name = str(name or '').strip()
    if not username or not str(password or '').strip() or not name:
        raise Invalid('FIELDS_REQUIRED', 'Username, password and name are required.')
    if UserModel.objects.filter(username=username).exists():
        raise Invalid('USERNAME_TAKEN', 'This username is already taken.')
    try:
        password_validation.validate_password(password, UserModel(username=username))
    except ValidationError as exc:
        raise Invalid('INVALID_PASSWORD', ' '.join(exc.messages)) from exc
    try:
        with transaction.atomic():
            user = UserModel.objects.create_user(username=username, password=password)
    except IntegrityError as exc:
        raise Invalid('USERNAME_TAKEN', 'This username is already taken.') from exc
    Profile.objects.create(user=user, role=role, full_name=name)
    return user


@transaction.atomic
def register_student(username, password, name):
    user = _create_user(username, password, name, Role.STUDENT)
    logger.info('Registered student %s', user.username)
    return user


@transaction.atomic
def register_teacher(username, password, name, invite_code):
    code = str(invite_code or '').strip().upper()
    if not code:
        raise Invalid('INVITE_REQUIRED', 'A teacher invite code is required.')
    if not TeacherInvite.objects.filter(code=code, used_by__isnull=True).exists():
        raise Invalid('INVITE_INVALID', 'The invite code is invalid or already used.')
    user = _create_user(username, password, name, Role.TEACHER)
    redeemed = TeacherInvite.objects.filter(code=code, used_by__isnull=True).update(
        used_by=user, used_at=timezone.now()
    )
    if redeemed != 1:
        # Another registration consumed the code between the check and the update.
        logger.warning('Invite %s was redeemed concurrently; rejecting %s', code, user.username)
        raise Invalid('INVITE_INVALID', 'The invite code is invalid or already used.')
    logger.info('Registered teacher %s with invite %s', user.username, code)
    return user


def _require_admin(actor):
    if role_of(actor) != Role.ADMIN:
        raise Forbidden()


def create_teacher_invite(actor):
    _require_admin(actor)
    for _ in range(5):
        try:
            with transaction.atomic():
                invite = TeacherInvite.objects.create(created_by=actor)
        except IntegrityError:
            continue
        logger.info('Admin %s created teacher invite %s', actor.get_username(), invite.code)
        return invite
    raise Conflict('CODE_CONFLICT', 'Could not generate a unique invite code.')


def list_teacher_invites(actor):
    _require_admin(actor)
    return TeacherInvite.objects.select_related('used_by__profile', 'created_by').all()


def update_user(actor, username, name=None, role=None):
    """Admin edit of another account's display name or role."""
    _require_admin(actor)
    username = normalize_username(username)
    if not username:
        raise Invalid('USERNAME_REQUIRED', 'Username is required.')
    user = UserModel.objects.filter(username=username).first()
    if user is None:
        raise NotFound('USER_NOT_FOUND', f'User {username} not found.')
    profile, _ = Profile.objects.get_or_create(user=user)
    update_fields = []
    if name and str(name).strip():
        profile.full_name = str(name).strip()
        update_fields.append('full_name')
    if role:
        if role not in Role.values:
            raise Invalid('INVALID_ROLE', f'Unknown role {role}.')
        profile.role = role
        update_fields.append('role')
    if update_fields:
        profile.save(update_fields=update_fields)
        logger.info('Admin %s updated %s: %s', actor.get_username(), username, ', '.join(update_fields))
    return profile, bool(update_fields)
