import secrets

from django.conf import settings
from django.db import models


def generate_public_code() -> str:
    return secrets.token_hex(3).upper()


class Test(models.Model):
    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='authored_tests')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    public_code = models.CharField(max_length=6, unique=True, null=True, blank=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return self.title

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


class Question(models.Model):
    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name='questions')
    text = models.TextField()
    options = models.JSONField(null=True, blank=True)
    correct_index = models.IntegerField(null=True, blank=True)
    order = models.IntegerField()

    class Meta:
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['test', 'order'], name='unique_test_question_order')
        ]

    def __str__(self) -> str:
        return f"{self.test.title}: {self.text[:40]}"

    @property
    def is_scored(self) -> bool:
        return bool(self.options) and self.correct_index is not None

    def save(self, *args, **kwargs):
        if self.order is None:
            last_order = (
                self.__class__.objects.filter(test=self.test).aggregate(models.Max('order'))['order__max'] or 0
            )
            self.order = last_order + 1
        return super().save(*args, **kwargs)


class TestAssignment(models.Model):
    class Status(models.TextChoices):
        ASSIGNED = 'ASSIGNED', 'Assigned'
        IN_PROGRESS = 'IN_PROGRESS', 'In progress'
        COMPLETED = 'COMPLETED', 'Completed'

    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name='assignments')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='test_assignments')
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ASSIGNED)
    due_at = models.DateTimeField(null=True, blank=True)
    assigned_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    score = models.PositiveIntegerField(null=True, blank=True)
    total = models.PositiveIntegerField(null=True, blank=True)
    answers = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ['-assigned_at', '-id']

    def __str__(self) -> str:
        return f"{self.test.title} -> {self.student} ({self.status})"

    @property
    def last_activity_at(self):
        return self.completed_at or self.started_at or self.assigned_at


class GuestTestAttempt(models.Model):
    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name='guest_attempts')
    name = models.CharField(max_length=255)
    score = models.PositiveIntegerField()
    total = models.PositiveIntegerField()
    answers = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"Guest {self.name} on {self.test.title}"
