from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from assessments.models import TestAssignment
from .helpers import make_user


class AssignmentFlowTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu Dent')
        self.other_student = make_user('other', Role.STUDENT)
        self.client.force_authenticate(user=self.teacher)
        self.test_id = self.client.post(reverse('tests'), {'title': 'Quiz'}, format='json').data['id']
        questions_url = reverse('test-questions', args=[self.test_id])
        self.q1 = self.client.post(
            questions_url, {'text': 'Q1', 'options': ['a', 'b'], 'correct_index': 0}, format='json'
        ).data['id']
        self.q2 = self.client.post(
            questions_url, {'text': 'Q2', 'options': ['a', 'b'], 'correct_index': 1}, format='json'
        ).data['id']

    def assign(self, **extra):
        data = {'test_id': self.test_id, 'student_id': self.student.id}
        data.update(extra)
        return self.client.post(reverse('assignments'), data, format='json')

    def test_assignment_round_trip(self):
        response = self.assign(due_at='2030-06-01T12:00:00Z')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], TestAssignment.Status.ASSIGNED)
        assignment_id = response.data['id']

        self.client.force_authenticate(user=self.student)
        listing = self.client.get(reverse('student-assignments'))
        self.assertEqual([row['id'] for row in listing.data], [assignment_id])
        self.assertEqual(listing.data[0]['question_count'], 2)

        detail = self.client.get(reverse('student-assignment-detail', args=[assignment_id]))
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(len(detail.data['questions']), 2)
        for question in detail.data['questions']:
            self.assertNotIn('correct_index', question)

        started = self.client.post(reverse('student-assignment-start', args=[assignment_id]))
        self.assertEqual(started.data['status'], TestAssignment.Status.IN_PROGRESS)

        submit_url = reverse('student-assignment-submit', args=[assignment_id])
        response = self.client.post(submit_url, {'answers': {str(self.q1): 0, str(self.q2): 1}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual((response.data['score'], response.data['total']), (2, 2))

        again = self.client.post(submit_url, {'answers': {}}, format='json')
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data['error'], 'ALREADY_SUBMITTED')

        self.client.force_authenticate(user=self.teacher)
        statuses = self.client.get(reverse('test-status', args=[self.test_id]))
        self.assertEqual(statuses.data[0]['name'], 'Stu Dent')
        self.assertEqual(statuses.data[0]['status'], TestAssignment.Status.COMPLETED)
        self.assertEqual(statuses.data[0]['score'], 2)

    def test_invalid_due_and_student(self):
        response = self.assign(due_at='someday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_DUE')
        response = self.assign(student_id=self.teacher.id)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'STUDENT_NOT_FOUND')


    def test_non_numeric_ids_are_not_found(self):
        response = self.assign(test_id='abc')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'TEST_NOT_FOUND')
        response = self.assign(student_id='abc')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'STUDENT_NOT_FOUND')
        response = self.assign(student_id=str(self.student.id))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(TestAssignment.objects.filter(student=self.other_student).exists())

    def test_other_student_cannot_open(self):
        assignment_id = self.assign().data['id']
        self.client.force_authenticate(user=self.other_student)
        response = self.client.get(reverse('student-assignment-detail', args=[assignment_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('student-assignment-detail', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'ASSIGNMENT_NOT_FOUND')
