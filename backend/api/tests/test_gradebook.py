from io import BytesIO

import openpyxl
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from courses.models import Course, Enrollment
from gradebook.models import WeeklyScore
from .helpers import make_user


class WeeklyScoreApiTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.other_teacher = make_user('other', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu')
        self.outsider = make_user('outsider', Role.STUDENT)
        self.course = Course.objects.create(code='CS101', title='Algorithms', org_tag='UNI', teacher=self.teacher)
        Enrollment.objects.create(student=self.student, course=self.course)
        self.url = reverse('weekly-scores')

    def post_score(self, **extra):
        data = {'course_id': self.course.id, 'student_id': self.student.id, 'week': 4}
        data.update(extra)
        return self.client.post(self.url, data, format='json')

    def test_upsert(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.post_score(lecture_score=150, practice_score=-5, individual_work_score=57.6)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['lecture_score'], 100)
        self.assertEqual(response.data['practice_score'], 0)
        self.assertEqual(response.data['individual_work_score'], 58)
        self.assertEqual(response.data['course_code'], 'CS101')

        response = self.post_score(exam_score=91)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lecture_score'], 100)
        self.assertEqual(response.data['exam_score'], 91)

    def test_rejections(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.post_score(week=15)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_WEEK')
        response = self.post_score(student_id=self.outsider.id, lecture_score=50)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'NOT_ENROLLED')
        self.assertFalse(WeeklyScore.objects.exists())

        self.client.force_authenticate(user=self.other_teacher)
        response = self.post_score()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_non_numeric_ids_are_not_found(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.post_score(course_id='abc')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'COURSE_NOT_FOUND')
        response = self.post_score(student_id='abc')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'STUDENT_NOT_FOUND')
        self.assertFalse(WeeklyScore.objects.exists())

    def test_course_gradebook_and_export(self):
        self.client.force_authenticate(user=self.teacher)
        self.post_score(lecture_score=70)
        response = self.client.get(reverse('course-weekly-scores', args=[self.course.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['course']['code'], 'CS101')
        self.assertEqual(response.data['rows'][0]['student_name'], 'Stu')

        response = self.client.get(reverse('course-weekly-scores-export', args=[self.course.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('CS101-weekly-scores.xlsx', response['Content-Disposition'])
        sheet = openpyxl.load_workbook(BytesIO(response.content)).active
        self.assertEqual(sheet.cell(row=2, column=5).value, 70)

    def test_student_sees_own_scores(self):
        self.client.force_authenticate(user=self.teacher)
        self.post_score(lecture_score=70)
        self.client.force_authenticate(user=self.student)
        response = self.client.get(reverse('student-weekly-scores'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['week'], 4)
        self.assertEqual(response.data[0]['course_title'], 'Algorithms')
        self.client.force_authenticate(user=self.outsider)
        self.assertEqual(self.client.get(reverse('student-weekly-scores')).data, [])
