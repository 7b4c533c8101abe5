from django.contrib import admin

from .models import GuestTestAttempt, Question, Test, TestAssignment


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0


@admin.register(Test)
class TestAdmin(admin.ModelAdmin):
    list_display = ('title', 'teacher', 'public_code', 'published_at', 'created_at')
    search_fields = ('title', 'public_code')
    inlines = [QuestionInline]


@admin.register(TestAssignment)
class TestAssignmentAdmin(admin.ModelAdmin):
    list_display = ('test', 'student', 'status', 'due_at', 'score', 'total')
    list_filter = ('status',)


@admin.register(GuestTestAttempt)
class GuestTestAttemptAdmin(admin.ModelAdmin):
    list_display = ('test', 'name', 'score', 'total', 'created_at')
