import json
from unittest import mock

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role, TeacherInvite
from .helpers import make_user


class AdminApiTests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin', Role.ADMIN)
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.teacher)
        for name in ('admin-teachers', 'admin-students', 'admin-teacher-invites'):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_lists(self):
        self.client.force_authenticate(user=self.admin)
        teachers = self.client.get(reverse('admin-teachers')).data
        self.assertEqual([row['username'] for row in teachers], ['teacher'])
        self.assertEqual(teachers[0]['test_count'], 0)
        students = self.client.get(reverse('admin-students')).data
        self.assertEqual([row['username'] for row in students], ['student'])

    def test_invites(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('admin-teacher-invites'))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], 'admin')
        self.assertIsNone(response.data['used_by'])
        self.assertTrue(TeacherInvite.objects.filter(code=response.data['code']).exists())
        self.assertEqual(len(self.client.get(reverse('admin-teacher-invites')).data), 1)

    @override_settings(OLLAMA_BASE_URL='http://ollama.test')
    @mock.patch('assistant.planner.requests.post')
    def test_assistant(self, post):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('admin-ai'), {'message': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'MESSAGE_REQUIRED')

        plan = {'actions': [{'type': 'update_student', 'username': 'student', 'name': 'Renamed'}]}
        post.return_value.json.return_value = {'message': {'content': json.dumps(plan)}}
        post.return_value.text = ''
        response = self.client.post(reverse('admin-ai'), {'message': 'rename student'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.assertEqual(response.data['results'][0]['data']['name'], 'Renamed')
