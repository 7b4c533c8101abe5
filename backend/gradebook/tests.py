from io import BytesIO

import openpyxl
from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import Profile, Role
from courses.models import Course, Enrollment
from coursehub.exceptions import Forbidden, Invalid, NotFound
from .models import WeeklyScore
from .services import clamp_score, export_course_scores, list_student_scores, set_weekly_score

User = get_user_model()


def make_user(username, role, name=''):
    user = User.objects.create_user(username=username, password='password')
    Profile.objects.create(user=user, role=role, full_name=name)
    return user


class ClampScoreTests(TestCase):
    def test_clamp_and_round(self):
        self.assertEqual(clamp_score(150), 100)
        self.assertEqual(clamp_score(-5), 0)
        self.assertEqual(clamp_score(57.6), 58)
        self.assertEqual(clamp_score(57.5), 58)
        self.assertEqual(clamp_score('42'), 42)

    def test_unusable_values(self):
        for value in (None, '', 'abc', float('nan'), float('inf'), True):
            self.assertIsNone(clamp_score(value))


class WeeklyScoreTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.other_teacher = make_user('other', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu')
        self.outsider = make_user('outsider', Role.STUDENT)
        self.course = Course.objects.create(code='CS101', title='Algorithms', org_tag='UNI', teacher=self.teacher)
        Enrollment.objects.create(student=self.student, course=self.course)

    def test_create_clamps_scores_and_derives_part(self):
        row, created = set_weekly_score(
            self.teacher.id,
            self.course.id,
            self.student.id,
            9,
            lecture_score=150,
            practice_score=-5,
            individual_work_score=57.6,
        )
        self.assertTrue(created)
        self.assertEqual((row.lecture_score, row.practice_score, row.individual_work_score), (100, 0, 58))
        self.assertEqual(row.part, 2)
        self.assertIsNone(row.exam_score)

    def test_missing_required_scores_default_to_zero(self):
        row, _ = set_weekly_score(self.teacher.id, self.course.id, self.student.id, 1, exam_score=77)
        self.assertEqual((row.lecture_score, row.practice_score, row.exam_score), (0, 0, 77))
        self.assertEqual(row.part, 1)

    def test_update_keeps_omitted_scores(self):
        set_weekly_score(self.teacher.id, self.course.id, self.student.id, 3, lecture_score=80, practice_score=70)
        row, created = set_weekly_score(self.teacher.id, self.course.id, self.student.id, '3', practice_score=90)
        self.assertFalse(created)
        self.assertEqual((row.lecture_score, row.practice_score), (80, 90))
        self.assertEqual(WeeklyScore.objects.count(), 1)

    def test_explicit_part_wins(self):
        row, _ = set_weekly_score(self.teacher.id, self.course.id, self.student.id, 2, part=2)
        self.assertEqual(row.part, 2)
        row, _ = set_weekly_score(self.teacher.id, self.course.id, self.student.id, 2, part=5)
        self.assertEqual(row.part, 1)

    def test_invalid_week(self):
        for week in (0, 15, 'x', 2.5, None):
            with self.assertRaises(Invalid) as ctx:
                set_weekly_score(self.teacher.id, self.course.id, self.student.id, week)
            self.assertEqual(ctx.exception.code, 'INVALID_WEEK')

    def test_enrollment_gate(self):
        with self.assertRaises(Invalid) as ctx:
            set_weekly_score(self.teacher.id, self.course.id, self.outsider.id, 1, lecture_score=90)
        self.assertEqual(ctx.exception.code, 'NOT_ENROLLED')
        self.assertFalse(WeeklyScore.objects.exists())

    def test_only_course_teacher_writes(self):
        with self.assertRaises(Forbidden):
            set_weekly_score(self.other_teacher.id, self.course.id, self.student.id, 1)
        with self.assertRaises(NotFound) as ctx:
            set_weekly_score(self.teacher.id, 9999, self.student.id, 1)
        self.assertEqual(ctx.exception.code, 'COURSE_NOT_FOUND')
        with self.assertRaises(NotFound) as ctx:
            set_weekly_score(self.teacher.id, self.course.id, self.teacher.id, 1)
        self.assertEqual(ctx.exception.code, 'STUDENT_NOT_FOUND')

    def test_student_listing_and_export(self):
        set_weekly_score(self.teacher.id, self.course.id, self.student.id, 2, lecture_score=60)
        set_weekly_score(self.teacher.id, self.course.id, self.student.id, 1, lecture_score=50)
        self.assertEqual([row.week for row in list_student_scores(self.student.id)], [1, 2])

        course, content = export_course_scores(self.teacher, self.course.id)
        self.assertEqual(course, self.course)
        sheet = openpyxl.load_workbook(BytesIO(content)).active
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(rows[0][0], 'Username')
        self.assertEqual(rows[1][:5], ('student', 'Stu', 1, 1, 50))
        self.assertEqual(len(rows), 3)

        with self.assertRaises(Forbidden):
            export_course_scores(self.other_teacher, self.course.id)
