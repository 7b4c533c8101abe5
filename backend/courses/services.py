import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, models, transaction
from django.db.models import Count

from accounts.models import Role, role_of
from coursehub.exceptions import Conflict, Forbidden, Invalid, NotFound
from coursehub.utils import to_int
from .models import Course, Enrollment, Material

logger = logging.getLogger(__name__)

UserModel = get_user_model()


def _require_teacher(actor):
    if role_of(actor) != Role.TEACHER:
        raise Forbidden()


def list_catalog(actor=None, query=None, mine=False):
    courses = Course.objects.select_related('teacher__profile').annotate(enrolled_count=Count('enrollments'))
    query = (query or '').strip()
    if query:
        courses = courses.filter(
            models.Q(title__icontains=query) | models.Q(code__icontains=query) | models.Q(org_tag__icontains=query)
        )
    enrolled_ids = set()
    if actor is not None and actor.is_authenticated:
        enrolled_ids = set(Enrollment.objects.filter(student=actor).values_list('course_id', flat=True))
        if mine:
            courses = courses.filter(id__in=enrolled_ids)
    elif mine:
        return []
    items = list(courses)
    for course in items:
        course.is_enrolled = course.id in enrolled_ids
    return items


def get_course(actor, course_id):
    course = (
        Course.objects.select_related('teacher__profile')
        .annotate(enrolled_count=Count('enrollments'))
        .filter(id=course_id)
        .first()
    )
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    course.is_enrolled = bool(
        actor is not None
        and actor.is_authenticated
        and Enrollment.objects.filter(student=actor, course=course).exists()
    )
    return course


@transaction.atomic
def toggle_enrollment(actor, course_id):
    """Enroll the student, or drop the enrollment if it already exists."""
    if role_of(actor) != Role.STUDENT:
        raise Forbidden()
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    deleted, _ = Enrollment.objects.filter(student=actor, course=course).delete()
    if not deleted:
        Enrollment.objects.get_or_create(student=actor, course=course)
        logger.info('%s enrolled in %s', actor.get_username(), course.code)
    else:
        logger.info('%s left %s', actor.get_username(), course.code)
    return get_course(actor, course.id)


def create_course(actor, title, code, org_tag, description=None):
    _require_teacher(actor)
    title = str(title or '').strip()
    code = str(code or '').strip().upper()
    org_tag = str(org_tag or '').strip()
    if not title:
        raise Invalid('TITLE_REQUIRED', 'Course title is required.')
    if not code:
        raise Invalid('CODE_REQUIRED', 'Course code is required.')
    if not org_tag:
        raise Invalid('ORG_REQUIRED', 'Organisation tag is required.')
    if Course.objects.filter(code=code).exists():
        raise Conflict('CODE_CONFLICT', 'A course with this code already exists.')
    try:
        with transaction.atomic():
            course = Course.objects.create(
                teacher=actor,
                title=title,
                code=code,
                org_tag=org_tag,
                description=str(description or '').strip(),
            )
    except IntegrityError as exc:
        raise Conflict('CODE_CONFLICT', 'A course with this code already exists.') from exc
    logger.info('Teacher %s created course %s', actor.get_username(), code)
    course.enrolled_count = 0
    return course


def list_teacher_courses(actor):
    _require_teacher(actor)
    return Course.objects.filter(teacher=actor).annotate(enrolled_count=Count('enrollments'))


def list_course_students(actor, course_id):
    _require_teacher(actor)
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    if course.teacher_id != actor.id:
        raise Forbidden()
    return (
        UserModel.objects.filter(enrollments__course=course, profile__role=Role.STUDENT)
        .select_related('profile')
        .order_by('profile__full_name', 'username')
    )


def list_materials(course_id):
    """Course materials, newest first. Readable without an account."""
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    return course.materials.all()


def add_material(actor, course_id, title, description=None, url=None):
    _require_teacher(actor)
    course = Course.objects.filter(id=to_int(course_id)).first()
    if course is None:
        raise NotFound('COURSE_NOT_FOUND', 'Course not found.')
    if course.teacher_id != actor.id:
        raise Forbidden()
    title = str(title or '').strip()
    if not title:
        raise Invalid('TITLE_REQUIRED', 'Material title is required.')
    material = Material.objects.create(
        course=course,
        teacher=actor,
        title=title,
        description=str(description or '').strip(),
        url=str(url or '').strip(),
    )
    logger.info('Teacher %s added material %s to %s', actor.get_username(), material.id, course.code)
    return material


def list_students(actor):
    """Every student account; used by teachers to pick an assignee."""
    if role_of(actor) not in (Role.TEACHER, Role.ADMIN):
        raise Forbidden()
    return (
        UserModel.objects.filter(profile__role=Role.STUDENT)
        .select_related('profile')
        .annotate(course_count=Count('enrollments', distinct=True))
        .order_by('profile__full_name', 'username')
    )


def list_teachers(actor):
    if role_of(actor) != Role.ADMIN:
        raise Forbidden()
    return (
        UserModel.objects.filter(profile__role=Role.TEACHER)
        .select_related('profile')
        .annotate(
            course_count=Count('taught_courses', distinct=True),
            test_count=Count('authored_tests', distinct=True),
        )
        .order_by('profile__full_name', 'username')
    )
