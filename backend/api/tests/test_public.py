from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from assessments import services
from .helpers import make_user


class PublicTestTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.test = services.create_test(self.teacher, 'Public Quiz', 'Open to all')
        self.scored = services.add_question(self.teacher, self.test.id, 'Q1', ['a', 'b', 'c'], 2)
        self.open = services.add_question(self.teacher, self.test.id, 'Tell us more')

    def test_draft_is_hidden(self):
        response = self.client.get(reverse('public-test', args=['ABC123']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'NOT_FOUND')

    def test_guest_scenario(self):
        code = services.publish_test(self.teacher, self.test.id).public_code

        response = self.client.get(reverse('public-test', args=[code.lower()]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['test']['title'], 'Public Quiz')
        self.assertEqual(len(response.data['questions']), 2)
        for question in response.data['questions']:
            self.assertNotIn('correct_index', question)

        submit_url = reverse('public-test-submit', args=[code])
        response = self.client.post(submit_url, {'name': '', 'answers': {}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'NAME_REQUIRED')

        answers = {str(self.scored.id): 2, str(self.open.id): 'free text'}
        response = self.client.post(submit_url, {'name': 'Guest', 'answers': answers}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual((response.data['score'], response.data['total']), (1, 1))

        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(reverse('test-guests', args=[self.test.id]))
        self.assertEqual(response.data[0]['name'], 'Guest')
        self.assertEqual(response.data[0]['score'], 1)
