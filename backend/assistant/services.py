"""Execute a planned list of admin actions through the regular domain operations."""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model

from accounts.models import Role, role_of
from accounts.services import normalize_username, update_user
from assessments.services import add_question, create_test
from courses.models import Course
from coursehub.exceptions import DomainError, Forbidden, Invalid
from gradebook.services import set_weekly_score, to_number
from .planner import MAX_ACTIONS, PlannerError, request_plan

logger = logging.getLogger(__name__)

UserModel = get_user_model()

# planner field name -> set_weekly_score keyword
SCORE_KEYS = {
    'lectureScore': 'lecture_score',
    'practiceScore': 'practice_score',
    'individualWorkScore': 'individual_work_score',
    'ratingScore': 'rating_score',
    'midtermScore': 'midterm_score',
    'examScore': 'exam_score',
}


def _text(value):
    return value.strip() if isinstance(value, str) else ''


def _result(action_type, ok, detail, data=None, error=None):
    result = {'type': action_type, 'ok': ok, 'detail': detail}
    if data is not None:
        result['data'] = data
    if error is not None:
        result['error'] = error
    return result


def _failed(action_type, exc):
    return _result(action_type, False, str(exc.detail), error=exc.code)


def run_update_student(actor, action):
    profile, changed = update_user(actor, action.get('username'), name=_text(action.get('name')), role=action.get('role'))
    data = {'id': profile.user_id, 'username': profile.username, 'role': profile.role, 'name': profile.display_name}
    detail = f'Updated {profile.username}' if changed else 'No changes to apply'
    return _result('update_student', True, detail, data)


def run_upsert_weekly_score(actor, action):
    username = normalize_username(action.get('studentUsername'))
    course_code = _text(action.get('courseCode'))
    week = action.get('week')
    if not username or not course_code or week is None:
        raise Invalid('MISSING_FIELDS', 'studentUsername, courseCode and week are required.')
    student = UserModel.objects.filter(username=username, profile__role=Role.STUDENT).first()
    if student is None:
        return _result('upsert_weekly_score', False, f'Student {username} not found', error='STUDENT_NOT_FOUND')
    course = Course.objects.filter(code__iexact=course_code).first()
    if course is None:
        return _result('upsert_weekly_score', False, f'Course {course_code} not found', error='COURSE_NOT_FOUND')
    scores = {}
    for key, field in SCORE_KEYS.items():
        value = to_number(action.get(key))
        if value is not None:
            scores[field] = value
    # Written on behalf of the teacher who owns the course.
    row, _ = set_weekly_score(course.teacher_id, course.id, student.id, week, part=action.get('part'), **scores)
    return _result(
        'upsert_weekly_score',
        True,
        f'Updated scores for {username} in {course.code} (week {row.week})',
        {'student_id': student.id, 'course_id': course.id, 'week': row.week},
    )


def run_create_test(actor, action):
    teacher_username = normalize_username(action.get('teacherUsername'))
    title = _text(action.get('title'))
    if not teacher_username or not title:
        raise Invalid('MISSING_FIELDS', 'teacherUsername and title are required.')
    teacher = UserModel.objects.filter(username=teacher_username).select_related('profile').first()
    if teacher is None or role_of(teacher) != Role.TEACHER:
        return _result('create_test', False, f'Teacher {teacher_username} not found', error='TEACHER_NOT_FOUND')
    test = create_test(teacher, title, _text(action.get('description')))
    added = 0
    questions = action.get('questions')
    for question in questions if isinstance(questions, list) else []:
        if not isinstance(question, dict) or not _text(question.get('text')):
            continue
        options = question.get('options')
        if isinstance(options, list):
            options = [_text(option) for option in options if _text(option)] or None
        else:
            options = None
        try:
            add_question(teacher, test.id, question['text'], options, question.get('correctIndex'))
        except Invalid as exc:
            logger.info('Skipped planned question for test %s: %s', test.id, exc.code)
            continue
        added += 1
    detail = f'Created test "{test.title}" for {teacher_username}'
    if added:
        detail += f' ({added} questions)'
    return _result('create_test', True, detail, {'test_id': test.id, 'questions_added': added})


ACTION_HANDLERS = {
    'update_student': run_update_student,
    'upsert_weekly_score': run_upsert_weekly_score,
    'create_test': run_create_test,
}


def execute_actions(actor, actions):
    results = []
    for action in actions[:MAX_ACTIONS]:
        action_type = action.get('type') if isinstance(action, dict) else None
        handler = ACTION_HANDLERS.get(action_type)
        if handler is None:
            results.append(_result(action_type, False, 'Unsupported action', error='UNSUPPORTED_ACTION'))
            continue
        try:
            results.append(handler(actor, action))
        except DomainError as exc:
            results.append(_failed(action_type, exc))
    return results


def run_admin_request(actor, message):
    """Plan the admin's request with the model and carry out each action."""
    if role_of(actor) != Role.ADMIN:
        raise Forbidden()
    message = _text(message)
    if not message:
        raise Invalid('MESSAGE_REQUIRED', 'Message is required.')
    try:
        plan = request_plan(message)
    except PlannerError:
        return {'ok': False, 'error': 'MODEL_PLAN_FAILED'}
    actions = plan.get('actions')
    actions = actions[:MAX_ACTIONS] if isinstance(actions, list) else []
    results = execute_actions(actor, actions)
    logger.info(
        'Admin %s ran %s planned actions (%s succeeded)',
        actor.get_username(),
        len(actions),
        sum(1 for result in results if result['ok']),
    )
    return {
        'ok': True,
        'model': settings.OLLAMA_ACTION_MODEL,
        'actions': len(actions),
        'results': results,
        'reason': plan.get('reason'),
    }
