"""Teacher dashboard numbers over the teacher's own tests."""
import numpy as np
from django.db.models import Count, Q
from django.utils import timezone

from accounts.models import Role, role_of
from coursehub.exceptions import Forbidden
from .models import GuestTestAttempt, Test, TestAssignment

RECENT_TESTS = 5
TOP_STUDENTS = 5


def _mean(values):
    if not values:
        return None
    return round(float(np.mean(np.array(values, dtype=float))), 4)


def _ratios(rows):
    # rows of (score, total); attempts with nothing gradable carry no ratio
    return [score / total for score, total in rows if score is not None and total]


def teacher_dashboard(actor):
    if role_of(actor) != Role.TEACHER:
        raise Forbidden()
    now = timezone.now()
    tests = list(
        Test.objects.filter(teacher=actor).annotate(
            question_count=Count('questions', distinct=True),
            assignment_count=Count('assignments', distinct=True),
            completed_count=Count(
                'assignments',
                filter=Q(assignments__status=TestAssignment.Status.COMPLETED),
                distinct=True,
            ),
            guest_attempt_count=Count('guest_attempts', distinct=True),
        )
    )
    assignments = TestAssignment.objects.filter(test__teacher=actor)
    status_counts = dict(assignments.order_by().values_list('status').annotate(total=Count('id')))
    assigned = status_counts.get(TestAssignment.Status.ASSIGNED, 0)
    in_progress = status_counts.get(TestAssignment.Status.IN_PROGRESS, 0)
    completed = status_counts.get(TestAssignment.Status.COMPLETED, 0)
    assignments_total = assigned + in_progress + completed

    guest_rows = list(GuestTestAttempt.objects.filter(test__teacher=actor).values_list('score', 'total'))
    question_counts = [test.question_count for test in tests]

    summary = {
        'tests_total': len(tests),
        'published_tests': sum(1 for test in tests if test.is_published),
        'questions_total': int(np.sum(question_counts)) if question_counts else 0,
        'avg_questions_per_test': _mean(question_counts) or 0,
        'assignments_total': assignments_total,
        'completed_assignments': completed,
        'completion_rate': round(completed / assignments_total, 4) if assignments_total else 0,
        'unique_students': assignments.order_by().values('student_id').distinct().count(),
        'upcoming_due': assignments.filter(due_at__gte=now).exclude(
            status=TestAssignment.Status.COMPLETED
        ).count(),
        'guest_attempts_total': len(guest_rows),
        'avg_guest_score': _mean(_ratios(guest_rows)),
    }

    completed_rows = assignments.filter(status=TestAssignment.Status.COMPLETED)
    recent_tests = []
    for test in tests[:RECENT_TESTS]:
        rows = list(completed_rows.filter(test=test).values_list('score', 'total'))
        rows += list(test.guest_attempts.values_list('score', 'total'))
        recent_tests.append(
            {
                'id': test.id,
                'title': test.title,
                'is_published': test.is_published,
                'public_code': test.public_code,
                'created_at': test.created_at,
                'question_count': test.question_count,
                'assignment_count': test.assignment_count,
                'completed_count': test.completed_count,
                'guest_attempt_count': test.guest_attempt_count,
                'avg_score': _mean(_ratios(rows)),
            }
        )

    per_student = {}
    for student_id, username, full_name, score, total in completed_rows.values_list(
        'student_id', 'student__username', 'student__profile__full_name', 'score', 'total'
    ):
        entry = per_student.setdefault(
            student_id,
            {'id': student_id, 'username': username, 'name': full_name or username, 'rows': []},
        )
        entry['rows'].append((score, total))
    top_students = []
    for entry in per_student.values():
        rows = entry.pop('rows')
        entry['completed'] = len(rows)
        entry['avg_score'] = _mean(_ratios(rows))
        top_students.append(entry)
    top_students.sort(key=lambda item: (-item['completed'], -(item['avg_score'] or 0), item['username']))

    return {
        'summary': summary,
        'status': {'assigned': assigned, 'in_progress': in_progress, 'completed': completed},
        'recent_tests': recent_tests,
        'top_students': top_students[:TOP_STUDENTS],
    }
