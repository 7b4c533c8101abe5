from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from assessments.models import Question, Test
from .helpers import make_user


class TestAuthoringTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.other_teacher = make_user('other', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT)
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(reverse('tests'), {'title': 'Quiz 1', 'description': 'Intro'}, format='json')
        self.test_id = response.data['id']
        self.questions_url = reverse('test-questions', args=[self.test_id])

    def add_question(self, **data):
        return self.client.post(self.questions_url, data, format='json')

    def test_create_and_list(self):
        self.add_question(text='Q1', options=['a', 'b'], correct_index=0)
        response = self.client.get(reverse('tests'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['question_count'], 1)
        self.assertFalse(response.data[0]['is_published'])

    def test_title_required(self):
        response = self.client.post(reverse('tests'), {'title': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'TITLE_REQUIRED')

    def test_students_cannot_author(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(reverse('tests'), {'title': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'FORBIDDEN')

    def test_owner_sees_answer_key(self):
        self.add_question(text='Q1', options=['a', 'b'], correct_index=1)
        response = self.client.get(self.questions_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['test']['title'], 'Quiz 1')
        self.assertEqual(response.data['questions'][0]['correct_index'], 1)

    def test_other_teacher_forbidden(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(self.questions_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_test(self):
        response = self.client.get(reverse('test-questions', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'TEST_NOT_FOUND')

    def test_update_and_delete_question(self):
        question_id = self.add_question(text='Q1', options=['a', 'b'], correct_index=0).data['id']
        url = reverse('test-question-detail', args=[self.test_id, question_id])
        response = self.client.patch(url, {'correct_index': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['text'], 'Q1')
        self.assertEqual(response.data['correct_index'], 1)

        response = self.client.patch(url, {'options': 'not a list'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_OPTIONS')

        response = self.client.patch(url, {'options': [1, {'a': 1}, None]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_OPTIONS')
        response = self.client.patch(url, {'correct_index': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_OPTIONS')
        listing = self.client.get(reverse('test-questions', args=[self.test_id]))
        self.assertEqual(listing.data['questions'][0]['options'], ['a', 'b'])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'QUESTION_NOT_FOUND')

    def test_publish_freezes_test(self):
        self.add_question(text='Q1', options=['a', 'b'], correct_index=0)
        publish_url = reverse('test-publish', args=[self.test_id])
        first = self.client.post(publish_url)
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertTrue(first.data['is_published'])
        second = self.client.post(publish_url)
        self.assertEqual(second.data['public_code'], first.data['public_code'])

        response = self.add_question(text='Late')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'PUBLISHED')
        self.assertEqual(Question.objects.filter(test_id=self.test_id).count(), 1)
        self.assertIsNotNone(Test.objects.get(id=self.test_id).public_code)
