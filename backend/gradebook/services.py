"""Weekly score ledger: per course, student and week marks kept by teachers."""
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO

import openpyxl
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from accounts.models import Role, role_of
from courses.models import Course, Enrollment
from coursehub.exceptions import Forbidden, Invalid, NotFound
from coursehub.utils import to_int
from .models import MAX_WEEK, MIN_WEEK, WeeklyScore, part_for_week

logger = logging.getLogger(__name__)

UserModel = get_user_model()

REQUIRED_SCORE_FIELDS = ('lecture_score', 'practice_score', 'individual_work_score')
OPTIONAL_SCORE_FIELDS = ('rating_score', 'midterm_score', 'exam_score')
SCORE_FIELDS = REQUIRED_SCORE_FIELDS + OPTIONAL_SCORE_FIELDS


def to_number(value):
    """Coerce a submitted score to a finite float, or ``None`` when unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clamp_score(value):
    """Clamp to [0, 100] and round half up; ``None`` for missing input."""
    number = to_number(value)
    if number is None:
        return None
    number = min(100.0, max(0.0, number))
    return int(Decimal(str(number)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def set_weekly_score(teacher_id, course_id, student_id, week, part=None, **scores):
    """Create or update one weekly row.

    Omitted scores default to 0 (required) or ``None`` (optional) on create,
    and keep their stored value on update.
    """
    unknown = set(scores) - set(SCORE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown score fields: {', '.join(sorted(unknown))}")
    week = to_int(week)
    if week is None or not MIN_WEEK <= week <= MAX_WEEK:
        raise Invalid('INVALID_WEEK', f'Week must be an integer from {MIN_WEEK} to {MAX_WEEK}.')
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    if course.teacher_id != teacher_id:
        raise Forbidden()
    student = UserModel.objects.filter(id=to_int(student_id), profile__role=Role.STUDENT).first()
    if student is None:
        raise NotFound('STUDENT_NOT_FOUND', 'Student not found.')
    if not Enrollment.objects.filter(student=student, course=course).exists():
        raise Invalid('NOT_ENROLLED', 'The student is not enrolled in this course.')

    part = to_int(part)
    if part not in (1, 2):
        part = part_for_week(week)
    values = {field: clamp_score(scores.get(field)) for field in SCORE_FIELDS}
    provided = {field: value for field, value in values.items() if value is not None}

    with transaction.atomic():
        row = WeeklyScore.objects.select_for_update().filter(course=course, student=student, week=week).first()
        created = row is None
        if created:
            defaults = {field: 0 for field in REQUIRED_SCORE_FIELDS}
            defaults.update(provided)
            try:
                with transaction.atomic():
                    row = WeeklyScore.objects.create(course=course, student=student, week=week, part=part, **defaults)
            except IntegrityError:
                # Lost an insert race; fall through to update the winner's row.
                row = WeeklyScore.objects.select_for_update().get(course=course, student=student, week=week)
                created = False
        if not created:
            row.part = part
            for field, value in provided.items():
                setattr(row, field, value)
            row.save()
    logger.info(
        '%s weekly score for student %s in %s week %s',
        'Created' if created else 'Updated',
        student.get_username(),
        course.code,
        week,
    )
    return row, created


def list_student_scores(student_id):
    return (
        WeeklyScore.objects.filter(student_id=student_id)
        .select_related('course')
        .order_by('course__code', 'course_id', 'week')
    )


def _owned_course(actor, course_id):
    if role_of(actor) != Role.TEACHER:
        raise Forbidden()
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    if course.teacher_id != actor.id:
        raise Forbidden()
    return course


def list_course_scores(actor, course_id):
    course = _owned_course(actor, course_id)
    rows = (
        WeeklyScore.objects.filter(course=course)
        .select_related('student__profile')
        .order_by('student__username', 'week')
    )
    return course, rows


EXPORT_HEADERS = [
    'Username',
    'Student',
    'Week',
    'Part',
    'Lecture',
    'Practice',
    'Individual work',
    'Rating',
    'Midterm',
    'Exam',
]


def export_course_scores(actor, course_id):
    """Build the course gradebook as an ``.xlsx`` workbook; returns (course, bytes)."""
    course, rows = list_course_scores(actor, course_id)
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = 'Weekly scores'
    sheet.append(EXPORT_HEADERS)
    for row in rows:
        profile = getattr(row.student, 'profile', None)
        sheet.append(
            [
                row.student.get_username(),
                profile.display_name if profile else row.student.get_username(),
                row.week,
                row.part,
                row.lecture_score,
                row.practice_score,
                row.individual_work_score,
                row.rating_score,
                row.midterm_score,
                row.exam_score,
            ]
        )
    buffer = BytesIO()
    workbook.save(buffer)
    return course, buffer.getvalue()
