from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from assessments import services
from .helpers import make_user


class TeacherAnalyticsTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT)
        self.url = reverse('teacher-analytics')

    def test_empty_dashboard(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['tests_total'], 0)
        self.assertEqual(response.data['summary']['completion_rate'], 0)
        self.assertIsNone(response.data['summary']['avg_guest_score'])
        self.assertEqual(response.data['recent_tests'], [])

    def test_dashboard_counts(self):
        test = services.create_test(self.teacher, 'Quiz')
        services.add_question(self.teacher, test.id, 'Q1', ['a', 'b'], 0)
        services.assign_test(self.teacher, test.id, self.student.id, '2999-01-01')
        self.client.force_authenticate(user=self.teacher)
        data = self.client.get(self.url).data
        self.assertEqual(data['summary']['upcoming_due'], 1)
        self.assertEqual(data['status']['assigned'], 1)
        self.assertEqual(data['recent_tests'][0]['question_count'], 1)

    def test_student_forbidden(self):
        self.client.force_authenticate(user=self.student)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)
