from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from courses.models import Course
from .helpers import make_user


class CourseApiTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER, 'Dr. T')
        self.student = make_user('student', Role.STUDENT)
        self.course = Course.objects.create(code='CS101', title='Algorithms', org_tag='UNI', teacher=self.teacher)

    def test_catalog_is_public(self):
        response = self.client.get(reverse('courses'), {'q': 'cs1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['teacher_name'], 'Dr. T')
        self.assertFalse(response.data[0]['is_enrolled'])
        response = self.client.get(reverse('course-detail', args=[9999]))
        self.assertEqual(response.data['error'], 'COURSE_NOT_FOUND')

    def test_enroll_toggle(self):
        self.client.force_authenticate(user=self.student)
        url = reverse('course-enroll', args=[self.course.id])
        response = self.client.post(url)
        self.assertTrue(response.data['is_enrolled'])
        self.assertEqual(response.data['enrolled_count'], 1)
        self.assertFalse(self.client.post(url).data['is_enrolled'])

    def test_teacher_cannot_enroll(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(reverse('course-enroll', args=[self.course.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_teacher_courses(self):
        self.client.force_authenticate(user=self.teacher)
        data = {'title': 'Databases', 'code': 'db200', 'org_tag': 'LAB'}
        response = self.client.post(reverse('teacher-courses'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'DB200')
        response = self.client.post(reverse('teacher-courses'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'CODE_CONFLICT')
        codes = [row['code'] for row in self.client.get(reverse('teacher-courses')).data]
        self.assertEqual(codes, ['CS101', 'DB200'])

    def test_course_students_and_picker(self):
        self.client.force_authenticate(user=self.student)
        self.client.post(reverse('course-enroll', args=[self.course.id]))
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(reverse('teacher-course-students', args=[self.course.id]))
        self.assertEqual([row['username'] for row in response.data], ['student'])
        response = self.client.get(reverse('teacher-students'))
        self.assertEqual(response.data[0]['course_count'], 1)

    def test_course_materials(self):
        url = reverse('course-materials', args=[self.course.id])
        self.client.force_authenticate(user=self.student)
        response = self.client.post(url, {'title': 'Slides'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.teacher)
        response = self.client.post(url, {'title': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'TITLE_REQUIRED')
        response = self.client.post(
            url, {'title': 'Slides', 'description': 'Week 1', 'url': 'https://example.com/w1.pdf'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['course_id'], self.course.id)
        self.assertEqual(response.data['teacher_id'], self.teacher.id)

        self.client.force_authenticate(user=None)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['title'] for item in response.data['items']], ['Slides'])
        response = self.client.get(reverse('course-materials', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'COURSE_NOT_FOUND')

    def test_other_teacher_cannot_add_material(self):
        other = make_user('other', Role.TEACHER)
        self.client.force_authenticate(user=other)
        response = self.client.post(reverse('course-materials', args=[self.course.id]), {'title': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'FORBIDDEN')
