from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Profile, Role, TeacherInvite

User = get_user_model()


class AuthTests(APITestCase):
    def setUp(self):
        self.username = 'testuser'
        self.password = 'testpass123'
        self.user = User.objects.create_user(username=self.username, password=self.password)
        Profile.objects.create(user=self.user, role=Role.STUDENT, full_name='Test User')
        self.login_url = reverse('api-login')
        self.logout_url = reverse('api-logout')
        self.csrf_url = reverse('api-csrf')
        self.me_url = reverse('api-me')
        self.register_url = reverse('api-register')

    def test_csrf_token(self):
        response = self.client.get(self.csrf_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('csrfToken', response.data)

    def test_login_success(self):
        data = {'username': 'TestUser', 'password': self.password}
        response = self.client.post(self.login_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], self.username)
        self.assertEqual(response.data['role'], Role.STUDENT)
        self.assertEqual(self.client.get(self.me_url).data['name'], 'Test User')

    def test_login_failure(self):
        data = {'username': self.username, 'password': 'wrongpassword'}
        response = self.client.post(self.login_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_CREDENTIALS')

    def test_logout(self):
        self.client.login(username=self.username, password=self.password)
        response = self.client.post(self.logout_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['detail'], 'Logged out')
        self.assertEqual(self.client.get(self.me_url).status_code, status.HTTP_403_FORBIDDEN)

    def test_me_requires_login(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'FORBIDDEN')

    def test_register_student_logs_in(self):
        data = {'username': 'NewKid', 'password': 'secret12', 'name': 'New Kid'}
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['username'], 'newkid')
        self.assertEqual(response.data['role'], Role.STUDENT)
        self.assertEqual(self.client.get(self.me_url).data['username'], 'newkid')

    def test_register_teacher_with_invite(self):
        invite = TeacherInvite.objects.create()
        data = {'username': 'prof', 'password': 'secret12', 'name': 'Prof', 'role': 'TEACHER'}
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVITE_REQUIRED')

        data['invite_code'] = invite.code
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], Role.TEACHER)

    def test_register_duplicate_username(self):
        data = {'username': self.username, 'password': 'secret12', 'name': 'Again'}
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'USERNAME_TAKEN')

    def test_register_short_password(self):
        data = {'username': 'shorty', 'password': 'abc', 'name': 'Shorty'}
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_PASSWORD')
        self.assertFalse(User.objects.filter(username='shorty').exists())


class ProfileTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='someone', password='oldpass1')
        Profile.objects.create(user=self.user, role=Role.STUDENT)
        self.client.force_authenticate(user=self.user)
        self.url = reverse('profile')

    def test_update_profile(self):
        data = {'full_name': 'Some One', 'bio': 'Hi', 'settings': {'theme': 'dark'}, 'role': Role.ADMIN}
        response = self.client.patch(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Some One')
        self.assertEqual(response.data['role'], Role.STUDENT)
        self.assertEqual(response.data['settings'], {'theme': 'dark'})

    def test_change_password(self):
        response = self.client.patch(self.url, {'password': 'newpass1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('password', response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass1'))

    def test_short_password_is_rejected(self):
        response = self.client.patch(self.url, {'password': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('oldpass1'))


class PasswordSessionTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='someone', password='oldpass1')
        Profile.objects.create(user=self.user, role=Role.STUDENT)
        self.client.login(username='someone', password='oldpass1')

    def test_session_survives_password_change(self):
        response = self.client.patch(reverse('profile'), {'password': 'newpass1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(reverse('api-me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'someone')
