from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from courses.models import Course

MIN_WEEK = 1
MAX_WEEK = 14
WEEKS_PER_PART = 7
SCORE_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]


class WeeklyScore(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='weekly_scores')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='weekly_scores')
    week = models.PositiveSmallIntegerField(validators=[MinValueValidator(MIN_WEEK), MaxValueValidator(MAX_WEEK)])
    part = models.PositiveSmallIntegerField(default=1)
    lecture_score = models.PositiveSmallIntegerField(default=0, validators=SCORE_VALIDATORS)
    practice_score = models.PositiveSmallIntegerField(default=0, validators=SCORE_VALIDATORS)
    individual_work_score = models.PositiveSmallIntegerField(default=0, validators=SCORE_VALIDATORS)
    rating_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=SCORE_VALIDATORS)
    midterm_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=SCORE_VALIDATORS)
    exam_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=SCORE_VALIDATORS)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['course__code', 'week']
        constraints = [
            models.UniqueConstraint(fields=['course', 'student', 'week'], name='unique_weekly_score')
        ]

    def __str__(self) -> str:
        return f"{self.course.code} / {self.student} / week {self.week}"


def part_for_week(week: int) -> int:
    return 1 if week <= WEEKS_PER_PART else 2
