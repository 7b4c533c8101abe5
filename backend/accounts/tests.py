from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from coursehub.exceptions import Forbidden, Invalid
from .models import Profile, Role, TeacherInvite, ensure_profile, role_of
from . import services
from .services import create_teacher_invite, register_student, register_teacher, update_user

User = get_user_model()


class ProfileModelTests(TestCase):
    def test_display_name_falls_back_to_username(self):
        user = User.objects.create_user(username='testuser', password='password')
        profile = Profile.objects.create(user=user)
        self.assertEqual(str(profile), 'testuser')
        self.assertEqual(profile.display_name, 'testuser')
        profile.full_name = 'Jane Doe'
        self.assertEqual(profile.display_name, 'Jane Doe')

    def test_ensure_profile_makes_superuser_admin(self):
        user = User.objects.create_superuser(username='root', password='password', email='root@example.com')
        self.assertEqual(role_of(user), Role.ADMIN)
        profile = ensure_profile(user)
        self.assertEqual(profile.role, Role.ADMIN)
        self.assertEqual(ensure_profile(user).pk, profile.pk)

    def test_user_without_profile_has_no_role(self):
        user = User.objects.create_user(username='plain', password='password')
        self.assertEqual(role_of(user), '')


class RegistrationTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='password')
        Profile.objects.create(user=self.admin, role=Role.ADMIN)

    def test_register_student_normalises_username(self):
        user = register_student('  Alice ', 'secret1', 'Alice A')
        self.assertEqual(user.username, 'alice')
        self.assertEqual(user.profile.role, Role.STUDENT)
        self.assertEqual(user.profile.full_name, 'Alice A')

    def test_register_duplicate_username(self):
        register_student('alice', 'secret1', 'Alice')
        with self.assertRaises(Invalid) as ctx:
            register_student('ALICE', 'secret2', 'Other Alice')
        self.assertEqual(ctx.exception.code, 'USERNAME_TAKEN')

    def test_register_teacher_requires_invite(self):
        with self.assertRaises(Invalid) as ctx:
            register_teacher('bob', 'secret1', 'Bob', '')
        self.assertEqual(ctx.exception.code, 'INVITE_REQUIRED')

    def test_register_teacher_consumes_invite_once(self):
        invite = create_teacher_invite(self.admin)
        teacher = register_teacher('bob', 'secret1', 'Bob', invite.code.lower())
        invite.refresh_from_db()
        self.assertEqual(invite.used_by, teacher)
        self.assertIsNotNone(invite.used_at)
        self.assertEqual(teacher.profile.role, Role.TEACHER)

        with self.assertRaises(Invalid) as ctx:
            register_teacher('carol', 'secret1', 'Carol', invite.code)
        self.assertEqual(ctx.exception.code, 'INVITE_INVALID')
        self.assertFalse(User.objects.filter(username='carol').exists())

    def test_unknown_invite_is_invalid(self):
        with self.assertRaises(Invalid) as ctx:
            register_teacher('dave', 'secret1', 'Dave', 'NOPE1234')
        self.assertEqual(ctx.exception.code, 'INVITE_INVALID')

    def test_invite_taken_during_registration(self):
        invite = create_teacher_invite(self.admin)
        rival = User.objects.create_user(username='rival', password='password')
        create_user = services._create_user

        def create_then_lose_invite(*args, **kwargs):
            user = create_user(*args, **kwargs)
            TeacherInvite.objects.filter(pk=invite.pk).update(used_by=rival)
            return user

        with mock.patch.object(services, '_create_user', side_effect=create_then_lose_invite):
            with self.assertRaises(Invalid) as ctx:
                register_teacher('erin', 'secret1', 'Erin', invite.code)
        self.assertEqual(ctx.exception.code, 'INVITE_INVALID')
        self.assertFalse(User.objects.filter(username='erin').exists())

    def test_password_validators_apply(self):
        with self.assertRaises(Invalid) as ctx:
            register_student('frank', 'abc', 'Frank')
        self.assertEqual(ctx.exception.code, 'INVALID_PASSWORD')
        self.assertFalse(User.objects.filter(username='frank').exists())

    def test_only_admin_creates_invites(self):
        student = register_student('erin', 'secret1', 'Erin')
        with self.assertRaises(Forbidden):
            create_teacher_invite(student)
        self.assertEqual(TeacherInvite.objects.count(), 0)


class UpdateUserTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='password')
        Profile.objects.create(user=self.admin, role=Role.ADMIN)
        self.student = register_student('frank', 'secret1', 'Frank')

    def test_update_name_and_role(self):
        profile, changed = update_user(self.admin, 'Frank', name='Franklin', role=Role.TEACHER)
        self.assertTrue(changed)
        profile.refresh_from_db()
        self.assertEqual(profile.full_name, 'Franklin')
        self.assertEqual(profile.role, Role.TEACHER)

    def test_no_changes(self):
        _, changed = update_user(self.admin, 'frank')
        self.assertFalse(changed)

    def test_invalid_role(self):
        with self.assertRaises(Invalid) as ctx:
            update_user(self.admin, 'frank', role='OWNER')
        self.assertEqual(ctx.exception.code, 'INVALID_ROLE')
