from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import Profile, Role
from coursehub.exceptions import Conflict, Forbidden, Invalid, NotFound
from .models import Enrollment, Material
from .services import (
    add_material,
    create_course,
    list_catalog,
    list_course_students,
    list_materials,
    toggle_enrollment,
)

User = get_user_model()


def make_user(username, role, name=''):
    user = User.objects.create_user(username=username, password='password')
    Profile.objects.create(user=user, role=role, full_name=name)
    return user


class CourseServiceTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER, 'Dr. T')
        self.other_teacher = make_user('other', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT)

    def test_create_course_uppercases_code(self):
        course = create_course(self.teacher, 'Algorithms', ' cs101 ', 'UNI')
        self.assertEqual(course.code, 'CS101')
        self.assertEqual(course.teacher, self.teacher)

    def test_create_course_validation(self):
        with self.assertRaises(Invalid) as ctx:
            create_course(self.teacher, 'Algorithms', '', 'UNI')
        self.assertEqual(ctx.exception.code, 'CODE_REQUIRED')
        with self.assertRaises(Invalid) as ctx:
            create_course(self.teacher, 'Algorithms', 'CS1', '')
        self.assertEqual(ctx.exception.code, 'ORG_REQUIRED')
        with self.assertRaises(Forbidden):
            create_course(self.student, 'Algorithms', 'CS1', 'UNI')

    def test_duplicate_code_conflicts(self):
        create_course(self.teacher, 'Algorithms', 'CS101', 'UNI')
        with self.assertRaises(Conflict) as ctx:
            create_course(self.other_teacher, 'Other', 'cs101', 'UNI')
        self.assertEqual(ctx.exception.code, 'CODE_CONFLICT')

    def test_toggle_enrollment(self):
        course = create_course(self.teacher, 'Algorithms', 'CS101', 'UNI')
        enrolled = toggle_enrollment(self.student, course.id)
        self.assertTrue(enrolled.is_enrolled)
        self.assertEqual(enrolled.enrolled_count, 1)
        left = toggle_enrollment(self.student, course.id)
        self.assertFalse(left.is_enrolled)
        self.assertFalse(Enrollment.objects.exists())

    def test_catalog_search_and_flags(self):
        course = create_course(self.teacher, 'Algorithms', 'CS101', 'UNI')
        create_course(self.teacher, 'Databases', 'DB200', 'LAB')
        toggle_enrollment(self.student, course.id)
        results = list_catalog(self.student, 'algo')
        self.assertEqual([c.code for c in results], ['CS101'])
        self.assertTrue(results[0].is_enrolled)
        self.assertEqual([c.code for c in list_catalog(self.student, mine=True)], ['CS101'])

    def test_course_students_only_for_owner(self):
        course = create_course(self.teacher, 'Algorithms', 'CS101', 'UNI')
        toggle_enrollment(self.student, course.id)
        self.assertEqual(list(list_course_students(self.teacher, course.id)), [self.student])
        with self.assertRaises(Forbidden):
            list_course_students(self.other_teacher, course.id)


class MaterialServiceTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.other_teacher = make_user('other', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT)
        self.course = create_course(self.teacher, 'Algorithms', 'CS101', 'UNI')

    def test_owner_adds_materials(self):
        first = add_material(self.teacher, self.course.id, ' Week 1 slides ', url='https://example.com/w1.pdf')
        second = add_material(self.teacher, str(self.course.id), 'Reading list', 'Chapters 1-3')
        self.assertEqual(first.title, 'Week 1 slides')
        self.assertEqual(first.teacher, self.teacher)
        self.assertEqual(second.url, '')
        self.assertEqual(list(list_materials(self.course.id)), [second, first])

    def test_add_material_rejections(self):
        with self.assertRaises(Forbidden):
            add_material(self.student, self.course.id, 'Notes')
        with self.assertRaises(Forbidden):
            add_material(self.other_teacher, self.course.id, 'Notes')
        with self.assertRaises(NotFound) as ctx:
            add_material(self.teacher, 'abc', 'Notes')
        self.assertEqual(ctx.exception.code, 'COURSE_NOT_FOUND')
        with self.assertRaises(Invalid) as ctx:
            add_material(self.teacher, self.course.id, '   ')
        self.assertEqual(ctx.exception.code, 'TITLE_REQUIRED')
        self.assertFalse(Material.objects.exists())

    def test_list_materials_unknown_course(self):
        with self.assertRaises(NotFound):
            list_materials(9999)
