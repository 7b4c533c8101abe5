import json
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from accounts.models import Profile, Role
from assessments.models import Test
from courses.models import Course, Enrollment
from coursehub.exceptions import Forbidden, Invalid
from gradebook.models import WeeklyScore
from .planner import parse_plan
from .services import execute_actions, run_admin_request

User = get_user_model()


def make_user(username, role, name=''):
    user = User.objects.create_user(username=username, password='password')
    Profile.objects.create(user=user, role=role, full_name=name)
    return user


def chat_response(content):
    response = mock.Mock()
    response.raise_for_status.return_value = None
    body = {'model': 'gpt-oss:20b', 'message': {'role': 'assistant', 'content': content}, 'done': True}
    response.json.return_value = body
    response.text = json.dumps(body)
    return response


class ParsePlanTests(TestCase):
    def test_plain_object(self):
        self.assertEqual(parse_plan('{"actions": [], "reason": "nothing"}'), {'actions': [], 'reason': 'nothing'})

    def test_fenced_and_wrapped(self):
        raw = 'Sure!\n```json\n{"plan": {"actions": [{"type": "create_test"}]}}\n```'
        self.assertEqual(parse_plan(raw), {'actions': [{'type': 'create_test'}]})

    def test_bare_list(self):
        self.assertEqual(parse_plan('[{"type": "update_student"}]'), {'actions': [{'type': 'update_student'}]})

    def test_garbage(self):
        self.assertIsNone(parse_plan('no plan here'))
        self.assertIsNone(parse_plan(''))


@override_settings(OLLAMA_BASE_URL='http://ollama.test', OLLAMA_ACTION_MODEL='gpt-oss:20b')
class AdminRequestTests(TestCase):
    def setUp(self):
        self.admin = make_user('admin', Role.ADMIN)
        self.teacher = make_user('teacher', Role.TEACHER)
        self.student = make_user('student', Role.STUDENT, 'Stu')
        self.course = Course.objects.create(code='CS101', title='Algorithms', org_tag='UNI', teacher=self.teacher)
        Enrollment.objects.create(student=self.student, course=self.course)

    def test_requires_admin_and_message(self):
        with self.assertRaises(Forbidden):
            run_admin_request(self.teacher, 'hello')
        with self.assertRaises(Invalid) as ctx:
            run_admin_request(self.admin, '   ')
        self.assertEqual(ctx.exception.code, 'MESSAGE_REQUIRED')

    @mock.patch('assistant.planner.requests.post')
    def test_model_failure(self, post):
        post.side_effect = requests.ConnectionError('refused')
        self.assertEqual(run_admin_request(self.admin, 'do things'), {'ok': False, 'error': 'MODEL_PLAN_FAILED'})

    @mock.patch('assistant.planner.requests.post')
    def test_runs_planned_actions(self, post):
        plan = {
            'actions': [
                {'type': 'update_student', 'username': 'Student', 'name': 'Stuart'},
                {
                    'type': 'upsert_weekly_score',
                    'studentUsername': 'student',
                    'courseCode': 'cs101',
                    'week': 3,
                    'lectureScore': 120,
                },
                {
                    'type': 'create_test',
                    'teacherUsername': 'teacher',
                    'title': 'Generated quiz',
                    'questions': [
                        {'text': '2 + 2?', 'options': ['3', '4'], 'correctIndex': 1},
                        {'text': 'Explain recursion'},
                        {'text': ''},
                    ],
                },
                {'type': 'delete_everything'},
            ],
            'reason': 'as asked',
        }
        post.return_value = chat_response(json.dumps(plan))

        result = run_admin_request(self.admin, 'please do it')

        self.assertTrue(result['ok'])
        self.assertEqual(result['model'], 'gpt-oss:20b')
        self.assertEqual(result['actions'], 4)
        self.assertEqual(result['reason'], 'as asked')
        self.assertEqual([r['ok'] for r in result['results']], [True, True, True, False])
        self.assertEqual(result['results'][3]['error'], 'UNSUPPORTED_ACTION')
        self.assertEqual(result['results'][2]['data']['questions_added'], 2)

        self.student.profile.refresh_from_db()
        self.assertEqual(self.student.profile.full_name, 'Stuart')
        self.assertEqual(WeeklyScore.objects.get(student=self.student, week=3).lecture_score, 100)
        self.assertEqual(Test.objects.get(title='Generated quiz').teacher, self.teacher)

        url = post.call_args[0][0]
        payload = post.call_args[1]['json']
        self.assertEqual(url, 'http://ollama.test/api/chat')
        self.assertEqual(payload['format'], 'json')
        self.assertFalse(payload['stream'])

    def test_action_errors_are_reported_per_action(self):
        outsider = make_user('outsider', Role.STUDENT)
        results = execute_actions(
            self.admin,
            [
                {'type': 'upsert_weekly_score', 'studentUsername': outsider.username, 'courseCode': 'CS101', 'week': 1},
                {'type': 'upsert_weekly_score', 'studentUsername': 'student', 'courseCode': 'NOPE', 'week': 1},
                {'type': 'update_student', 'username': 'ghost'},
                {'type': 'create_test', 'teacherUsername': 'student', 'title': 'Nope'},
            ],
        )
        self.assertEqual(
            [r['error'] for r in results],
            ['NOT_ENROLLED', 'COURSE_NOT_FOUND', 'USER_NOT_FOUND', 'TEACHER_NOT_FOUND'],
        )
        self.assertFalse(WeeklyScore.objects.exists())

    def test_caps_action_count(self):
        actions = [{'type': 'update_student', 'username': 'student'}] * 12
        self.assertEqual(len(execute_actions(self.admin, actions)), 10)
