"""Test authoring, assignment and guest submission workflows.

Every operation receives the acting user explicitly and re-checks role and
ownership on each call. Errors are raised as typed ``DomainError`` codes
before anything is written.
"""
import logging
from datetime import datetime, time

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from accounts.models import Role, role_of
from coursehub.exceptions import Conflict, Forbidden, Invalid, NotFound, Unavailable
from coursehub.utils import to_int
from .grading import evaluate_answers
from .models import GuestTestAttempt, Question, Test, TestAssignment, generate_public_code

logger = logging.getLogger(__name__)

UserModel = get_user_model()

PUBLIC_CODE_ATTEMPTS = 5
OPEN_STATUSES = (TestAssignment.Status.ASSIGNED, TestAssignment.Status.IN_PROGRESS)
_UNSET = object()


def _require_role(actor, role):
    if role_of(actor) != role:
        raise Forbidden()


def _owned_test(actor, test_id, lock=False):
    _require_role(actor, Role.TEACHER)
    queryset = Test.objects.select_for_update() if lock else Test.objects.all()
    test = queryset.filter(id=to_int(test_id)).first()
    if test is None:
        raise NotFound('TEST_NOT_FOUND', 'Test not found.')
    if test.teacher_id != actor.id:
        raise Forbidden()
    return test


def _ensure_draft(test):
    if test.published_at is not None:
        raise Conflict('PUBLISHED', 'Published tests can no longer be edited.')


def _clean_text(text):
    text = str(text or '').strip()
    if not text:
        raise Invalid('TEXT_REQUIRED', 'Question text is required.')
    return text


def _clean_options(options):
    if options is None:
        return None
    if not isinstance(options, (list, tuple)) or not all(isinstance(value, str) for value in options):
        raise Invalid('INVALID_OPTIONS', 'Options must be a list of strings.')
    return list(options) or None


def _clean_correct_index(correct_index, options):
    if correct_index is None:
        return None
    if isinstance(correct_index, float) and correct_index.is_integer():
        correct_index = int(correct_index)
    if isinstance(correct_index, bool) or not isinstance(correct_index, int):
        raise Invalid('INVALID_OPTIONS', 'The correct answer must be an option index.')
    if not options or not 0 <= correct_index < len(options):
        raise Invalid('INVALID_OPTIONS', 'The correct answer index is out of range.')
    return correct_index


# Test lifecycle


def create_test(actor, title, description=None):
    _require_role(actor, Role.TEACHER)
    title = str(title or '').strip()
    if not title:
        raise Invalid('TITLE_REQUIRED', 'Test title is required.')
    test = Test.objects.create(teacher=actor, title=title, description=str(description or '').strip())
    logger.info('Teacher %s created test %s', actor.get_username(), test.id)
    return test


def list_teacher_tests(actor):
    _require_role(actor, Role.TEACHER)
    return Test.objects.filter(teacher=actor).annotate(
        question_count=Count('questions', distinct=True),
        assignment_count=Count('assignments', distinct=True),
        guest_attempt_count=Count('guest_attempts', distinct=True),
    )


def list_questions(actor, test_id):
    test = _owned_test(actor, test_id)
    return test, list(test.questions.all())


@transaction.atomic
def add_question(actor, test_id, text, options=None, correct_index=None):
    test = _owned_test(actor, test_id, lock=True)
    _ensure_draft(test)
    text = _clean_text(text)
    options = _clean_options(options)
    correct_index = _clean_correct_index(correct_index, options)
    question = Question.objects.create(test=test, text=text, options=options, correct_index=correct_index)
    logger.info('Added question %s to test %s', question.id, test.id)
    return question


@transaction.atomic
def update_question(actor, test_id, question_id, text=_UNSET, options=_UNSET, correct_index=_UNSET):
    """Apply a partial update; omitted fields keep their stored value.

    Passing ``None`` for ``options`` or ``correct_index`` clears them.
    """
    test = _owned_test(actor, test_id, lock=True)
    _ensure_draft(test)
    question = test.questions.filter(id=question_id).first()
    if question is None:
        raise NotFound('QUESTION_NOT_FOUND', 'Question not found.')
    if text is not _UNSET:
        question.text = _clean_text(text)
    if options is not _UNSET:
        question.options = _clean_options(options)
    if correct_index is not _UNSET:
        question.correct_index = correct_index
    question.correct_index = _clean_correct_index(question.correct_index, question.options)
    question.save(update_fields=['text', 'options', 'correct_index'])
    return question


@transaction.atomic
def delete_question(actor, test_id, question_id):
    test = _owned_test(actor, test_id, lock=True)
    _ensure_draft(test)
    question = test.questions.filter(id=question_id).first()
    if question is None:
        raise NotFound('QUESTION_NOT_FOUND', 'Question not found.')
    question.delete()
    logger.info('Deleted question %s from test %s', question_id, test.id)


def publish_test(actor, test_id):
    """Freeze the test and mint its public code; publishing again is a no-op."""
    test = _owned_test(actor, test_id)
    if test.published_at is not None:
        return test
    for _ in range(PUBLIC_CODE_ATTEMPTS):
        code = generate_public_code()
        if Test.objects.filter(public_code=code).exists():
            continue
        try:
            with transaction.atomic():
                updated = Test.objects.filter(id=test.id, published_at__isnull=True).update(
                    public_code=code, published_at=timezone.now()
                )
        except IntegrityError:
            logger.warning('Public code %s collided while publishing test %s', code, test.id)
            continue
        test.refresh_from_db(fields=['public_code', 'published_at'])
        if updated:
            logger.info('Published test %s with code %s', test.id, test.public_code)
        return test
    raise Unavailable('CODE_UNAVAILABLE', 'Could not generate a unique public code, try again.')


def list_assignment_statuses(actor, test_id):
    test = _owned_test(actor, test_id)
    return list(test.assignments.select_related('student__profile').order_by('student__username', 'assigned_at'))


def list_guest_attempts(actor, test_id):
    test = _owned_test(actor, test_id)
    return list(test.guest_attempts.all())


# Assignments


def parse_due(value):
    """Parse an optional due date; ``None`` or blank means no deadline."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if not raw:
            return None
        try:
            parsed = parse_datetime(raw)
            if parsed is None:
                day = parse_date(raw)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise Invalid('INVALID_DUE', 'Due date is not a valid date.')
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_default_timezone())
    return parsed


def assign_test(actor, test_id, student_id, due_at=None):
    test = _owned_test(actor, test_id)
    student = UserModel.objects.filter(id=to_int(student_id), profile__role=Role.STUDENT).first()
    if student is None:
        raise NotFound('STUDENT_NOT_FOUND', 'Student not found.')
    due = parse_due(due_at)
    assignment = TestAssignment.objects.create(test=test, student=student, due_at=due)
    logger.info('Assigned test %s to %s (assignment %s)', test.id, student.get_username(), assignment.id)
    return assignment


def list_student_assignments(actor):
    _require_role(actor, Role.STUDENT)
    return (
        TestAssignment.objects.filter(student=actor)
        .select_related('test')
        .annotate(question_count=Count('test__questions'))
    )


def _student_assignment(actor, assignment_id):
    _require_role(actor, Role.STUDENT)
    assignment = TestAssignment.objects.select_related('test').filter(id=to_int(assignment_id)).first()
    if assignment is None:
        raise NotFound('ASSIGNMENT_NOT_FOUND', 'Assignment not found.')
    if assignment.student_id != actor.id:
        raise Forbidden()
    return assignment


def get_assignment_for_student(actor, assignment_id):
    assignment = _student_assignment(actor, assignment_id)
    return assignment, list(assignment.test.questions.all())


def start_assignment(actor, assignment_id):
    """Move ASSIGNED to IN_PROGRESS; starting an in-progress assignment is a no-op."""
    assignment = _student_assignment(actor, assignment_id)
    if assignment.status == TestAssignment.Status.COMPLETED:
        raise Conflict('ALREADY_SUBMITTED', 'This assignment has already been submitted.')
    TestAssignment.objects.filter(id=assignment.id, status=TestAssignment.Status.ASSIGNED).update(
        status=TestAssignment.Status.IN_PROGRESS, started_at=timezone.now()
    )
    assignment.refresh_from_db()
    if assignment.status == TestAssignment.Status.COMPLETED:
        raise Conflict('ALREADY_SUBMITTED', 'This assignment has already been submitted.')
    return assignment


def submit_assignment(actor, assignment_id, answers):
    """Score and complete the assignment at most once."""
    assignment = _student_assignment(actor, assignment_id)
    if assignment.status == TestAssignment.Status.COMPLETED:
        raise Conflict('ALREADY_SUBMITTED', 'This assignment has already been submitted.')
    answers = answers if isinstance(answers, dict) else {}
    score, total = evaluate_answers(assignment.test.questions.all(), answers)
    now = timezone.now()
    completed = TestAssignment.objects.filter(id=assignment.id, status__in=OPEN_STATUSES).update(
        status=TestAssignment.Status.COMPLETED,
        completed_at=now,
        started_at=Coalesce('started_at', Value(now)),
        score=score,
        total=total,
        answers=answers,
    )
    if completed != 1:
        logger.warning('Rejected concurrent submission for assignment %s', assignment.id)
        raise Conflict('ALREADY_SUBMITTED', 'This assignment has already been submitted.')
    logger.info('Assignment %s completed with %s/%s', assignment.id, score, total)
    return score, total


# Guest attempts


def _published_test(code):
    code = str(code or '').strip().upper()
    test = None
    if code:
        test = Test.objects.filter(public_code=code, published_at__isnull=False).first()
    if test is None:
        raise NotFound('NOT_FOUND', 'Test not found.')
    return test


def get_published_test(code):
    test = _published_test(code)
    return test, list(test.questions.all())


def submit_guest_attempt(code, name, answers):
    test = _published_test(code)
    name = str(name or '').strip()
    if not name:
        raise Invalid('NAME_REQUIRED', 'Please enter your name.')
    answers = answers if isinstance(answers, dict) else {}
    score, total = evaluate_answers(test.questions.all(), answers)
    attempt = GuestTestAttempt.objects.create(test=test, name=name, score=score, total=total, answers=answers)
    logger.info('Guest attempt %s on test %s scored %s/%s', attempt.id, test.id, score, total)
    return attempt
