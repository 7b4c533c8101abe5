from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import Profile, Role
from coursehub.exceptions import Conflict, Forbidden, Invalid, NotFound, Unavailable
from . import services
from .analytics import teacher_dashboard
from .grading import evaluate_answers
from .models import Test, TestAssignment

User = get_user_model()


def make_user(username, role, name=''):
    user = User.objects.create_user(username=username, password='password')
    Profile.objects.create(user=user, role=role, full_name=name)
    return user


class EvaluateAnswersTests(TestCase):
    questions = [
        {'id': 1, 'options': ['a', 'b', 'c'], 'correct_index': 2},
        {'id': 2, 'options': ['x', 'y'], 'correct_index': 0},
        {'id': 3, 'options': None, 'correct_index': None},
        {'id': 4, 'options': ['p', 'q'], 'correct_index': None},
    ]

    def test_open_questions_do_not_count(self):
        self.assertEqual(evaluate_answers(self.questions, {}), (0, 2))

    def test_correct_answers_score(self):
        self.assertEqual(evaluate_answers(self.questions, {'1': 2, '2': 0, '3': 'essay'}), (2, 2))
        self.assertEqual(evaluate_answers(self.questions, {1: 2, 2: 1}), (1, 2))

    def test_non_numeric_answers_are_wrong(self):
        self.assertEqual(evaluate_answers(self.questions, {'1': '2', '2': False}), (0, 2))
        self.assertEqual(evaluate_answers(self.questions, {'1': None}), (0, 2))

    def test_no_questions(self):
        self.assertEqual(evaluate_answers([], {'1': 0}), (0, 0))


class TestLifecycleTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.other_teacher = make_user('other', Role.TEACHER)
        self.test = services.create_test(self.teacher, 'Quiz 1', 'Warm-up')
        self.question = services.add_question(self.teacher, self.test.id, 'Q1', ['a', 'b'], 1)

    def test_create_test_requires_title(self):
        with self.assertRaises(Invalid) as ctx:
            services.create_test(self.teacher, '   ')
        self.assertEqual(ctx.exception.code, 'TITLE_REQUIRED')

    def test_question_order_is_assigned(self):
        second = services.add_question(self.teacher, self.test.id, 'Q2')
        self.assertEqual([self.question.order, second.order], [1, 2])
        self.assertIsNone(second.options)

    def test_add_question_validation(self):
        with self.assertRaises(Invalid) as ctx:
            services.add_question(self.teacher, self.test.id, '')
        self.assertEqual(ctx.exception.code, 'TEXT_REQUIRED')
        with self.assertRaises(Invalid) as ctx:
            services.add_question(self.teacher, self.test.id, 'Q', 'a,b', 0)
        self.assertEqual(ctx.exception.code, 'INVALID_OPTIONS')
        with self.assertRaises(Invalid):
            services.add_question(self.teacher, self.test.id, 'Q', ['a'], 3)
        with self.assertRaises(Invalid) as ctx:
            services.add_question(self.teacher, self.test.id, 'Q', [1, {'a': 1}, None])
        self.assertEqual(ctx.exception.code, 'INVALID_OPTIONS')
        with self.assertRaises(Invalid) as ctx:
            services.add_question(self.teacher, self.test.id, 'Q', ['a', 'b'], '0')
        self.assertEqual(ctx.exception.code, 'INVALID_OPTIONS')
        question = services.add_question(self.teacher, self.test.id, 'Q', ['a', 'b'], 1.0)
        self.assertEqual(question.correct_index, 1)

    def test_other_teacher_cannot_edit(self):
        with self.assertRaises(Forbidden):
            services.add_question(self.other_teacher, self.test.id, 'Q')
        with self.assertRaises(NotFound) as ctx:
            services.add_question(self.teacher, 9999, 'Q')
        self.assertEqual(ctx.exception.code, 'TEST_NOT_FOUND')

    def test_partial_update_keeps_omitted_fields(self):
        updated = services.update_question(self.teacher, self.test.id, self.question.id, text='Q1 edited')
        self.assertEqual(updated.text, 'Q1 edited')
        self.assertEqual(updated.options, ['a', 'b'])
        self.assertEqual(updated.correct_index, 1)
        cleared = services.update_question(self.teacher, self.test.id, self.question.id, correct_index=None)
        self.assertIsNone(cleared.correct_index)

    def test_publish_is_idempotent(self):
        first = services.publish_test(self.teacher, self.test.id)
        self.assertEqual(len(first.public_code), 6)
        self.assertIsNotNone(first.published_at)
        second = services.publish_test(self.teacher, self.test.id)
        self.assertEqual(second.public_code, first.public_code)
        self.assertEqual(second.published_at, first.published_at)

    def test_published_test_is_frozen(self):
        services.publish_test(self.teacher, self.test.id)
        for call in (
            lambda: services.add_question(self.teacher, self.test.id, 'Late'),
            lambda: services.update_question(self.teacher, self.test.id, self.question.id, text='Changed'),
            lambda: services.delete_question(self.teacher, self.test.id, self.question.id),
        ):
            with self.assertRaises(Conflict) as ctx:
                call()
            self.assertEqual(ctx.exception.code, 'PUBLISHED')
        self.assertEqual(list(self.test.questions.values_list('text', flat=True)), ['Q1'])

    def test_publish_retries_taken_codes(self):
        other = services.create_test(self.other_teacher, 'Other')
        Test.objects.filter(id=other.id).update(public_code='ABC123')
        with mock.patch.object(services, 'generate_public_code', side_effect=['ABC123', 'DEF456']):
            test = services.publish_test(self.teacher, self.test.id)
        self.assertEqual(test.public_code, 'DEF456')

    def test_publish_gives_up_after_repeated_collisions(self):
        other = services.create_test(self.other_teacher, 'Other')
        Test.objects.filter(id=other.id).update(public_code='ABC123')
        with mock.patch.object(services, 'generate_public_code', return_value='ABC123'):
            with self.assertRaises(Unavailable) as ctx:
                services.publish_test(self.teacher, self.test.id)
        self.assertEqual(ctx.exception.code, 'CODE_UNAVAILABLE')
        self.test.refresh_from_db()
        self.assertIsNone(self.test.published_at)


class AssignmentTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu Dent')
        self.other_student = make_user('other', Role.STUDENT)
        self.test = services.create_test(self.teacher, 'Quiz')
        self.q1 = services.add_question(self.teacher, self.test.id, 'Q1', ['a', 'b'], 0)
        self.q2 = services.add_question(self.teacher, self.test.id, 'Q2', ['a', 'b'], 1)
        self.assignment = services.assign_test(self.teacher, self.test.id, self.student.id, '2030-01-15')

    def test_assign_validates_student_and_due(self):
        self.assertEqual(self.assignment.due_at.year, 2030)
        with self.assertRaises(NotFound) as ctx:
            services.assign_test(self.teacher, self.test.id, self.teacher.id)
        self.assertEqual(ctx.exception.code, 'STUDENT_NOT_FOUND')
        with self.assertRaises(Invalid) as ctx:
            services.assign_test(self.teacher, self.test.id, self.student.id, 'next tuesday')
        self.assertEqual(ctx.exception.code, 'INVALID_DUE')

    def test_start_then_submit(self):
        started = services.start_assignment(self.student, self.assignment.id)
        self.assertEqual(started.status, TestAssignment.Status.IN_PROGRESS)
        self.assertIsNotNone(started.started_at)
        score, total = services.submit_assignment(
            self.student, self.assignment.id, {str(self.q1.id): 0, str(self.q2.id): 0}
        )
        self.assertEqual((score, total), (1, 2))
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, TestAssignment.Status.COMPLETED)
        self.assertEqual(self.assignment.started_at, started.started_at)

    def test_submit_at_most_once(self):
        services.submit_assignment(self.student, self.assignment.id, {str(self.q1.id): 0, str(self.q2.id): 1})
        with self.assertRaises(Conflict) as ctx:
            services.submit_assignment(self.student, self.assignment.id, {})
        self.assertEqual(ctx.exception.code, 'ALREADY_SUBMITTED')
        self.assignment.refresh_from_db()
        self.assertEqual((self.assignment.score, self.assignment.total), (2, 2))
        self.assertIsNotNone(self.assignment.started_at)

    def test_submit_loses_to_concurrent_submission(self):
        stale = services._student_assignment(self.student, self.assignment.id)
        TestAssignment.objects.filter(id=self.assignment.id).update(
            status=TestAssignment.Status.COMPLETED, score=1, total=2
        )
        with mock.patch.object(services, '_student_assignment', return_value=stale):
            with self.assertRaises(Conflict) as ctx:
                services.submit_assignment(self.student, self.assignment.id, {str(self.q1.id): 0, str(self.q2.id): 1})
        self.assertEqual(ctx.exception.code, 'ALREADY_SUBMITTED')
        self.assignment.refresh_from_db()
        self.assertEqual((self.assignment.score, self.assignment.total), (1, 2))

    def test_other_student_is_forbidden(self):
        with self.assertRaises(Forbidden):
            services.get_assignment_for_student(self.other_student, self.assignment.id)
        with self.assertRaises(NotFound) as ctx:
            services.submit_assignment(self.student, 9999, {})
        self.assertEqual(ctx.exception.code, 'ASSIGNMENT_NOT_FOUND')

    def test_status_listing(self):
        services.submit_assignment(self.student, self.assignment.id, {})
        rows = services.list_assignment_statuses(self.teacher, self.test.id)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].status, TestAssignment.Status.COMPLETED)
        self.assertEqual(rows[0].last_activity_at, rows[0].completed_at)


class GuestAttemptTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.test = services.create_test(self.teacher, 'Open quiz')
        self.question = services.add_question(self.teacher, self.test.id, 'Q1', ['a', 'b'], 1)

    def test_draft_is_not_public(self):
        with self.assertRaises(NotFound):
            services.get_published_test('ABC123')

    def test_guest_attempt(self):
        code = services.publish_test(self.teacher, self.test.id).public_code
        test, questions = services.get_published_test(code.lower())
        self.assertEqual(test.id, self.test.id)
        with self.assertRaises(Invalid) as ctx:
            services.submit_guest_attempt(code, '  ', {})
        self.assertEqual(ctx.exception.code, 'NAME_REQUIRED')
        attempt = services.submit_guest_attempt(code, 'Guest', {str(questions[0].id): 1})
        self.assertEqual((attempt.score, attempt.total), (1, 1))
        self.assertEqual(services.list_guest_attempts(self.teacher, self.test.id), [attempt])


class DashboardTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu')
        self.test = services.create_test(self.teacher, 'Quiz')
        question = services.add_question(self.teacher, self.test.id, 'Q1', ['a', 'b'], 0)
        services.add_question(self.teacher, self.test.id, 'Essay')
        services.create_test(self.teacher, 'Empty')
        done = services.assign_test(self.teacher, self.test.id, self.student.id)
        services.assign_test(self.teacher, self.test.id, self.student.id)
        services.submit_assignment(self.student, done.id, {str(question.id): 0})
        code = services.publish_test(self.teacher, self.test.id).public_code
        services.submit_guest_attempt(code, 'Guest', {str(question.id): 1})

    def test_summary(self):
        data = teacher_dashboard(self.teacher)
        summary = data['summary']
        self.assertEqual(summary['tests_total'], 2)
        self.assertEqual(summary['published_tests'], 1)
        self.assertEqual(summary['questions_total'], 2)
        self.assertEqual(summary['avg_questions_per_test'], 1.0)
        self.assertEqual(summary['assignments_total'], 2)
        self.assertEqual(summary['completion_rate'], 0.5)
        self.assertEqual(summary['unique_students'], 1)
        self.assertEqual(summary['avg_guest_score'], 0.0)
        self.assertEqual(data['status'], {'assigned': 1, 'in_progress': 0, 'completed': 1})
        self.assertEqual(data['top_students'][0]['username'], 'student')
        self.assertEqual(data['top_students'][0]['avg_score'], 1.0)
        self.assertEqual(len(data['recent_tests']), 2)

    def test_students_cannot_view(self):
        with self.assertRaises(Forbidden):
            teacher_dashboard(self.student)
