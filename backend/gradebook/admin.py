from django.contrib import admin

from .models import WeeklyScore


@admin.register(WeeklyScore)
class WeeklyScoreAdmin(admin.ModelAdmin):
    list_display = ('course', 'student', 'week', 'part', 'lecture_score', 'practice_score', 'individual_work_score')
    list_filter = ('course', 'part')
    search_fields = ('student__username', 'course__code')
