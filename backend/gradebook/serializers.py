from rest_framework import serializers

from .models import WeeklyScore

SCORE_COLUMNS = [
    'lecture_score',
    'practice_score',
    'individual_work_score',
    'rating_score',
    'midterm_score',
    'exam_score',
]


class WeeklyScoreSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)

    class Meta:
        model = WeeklyScore
        fields = ['id', 'course', 'course_code', 'course_title', 'student', 'week', 'part', *SCORE_COLUMNS, 'updated_at']
        read_only_fields = fields


class CourseWeeklyScoreSerializer(serializers.ModelSerializer):
    student_name = serializers.SerializerMethodField()
    student_username = serializers.CharField(source='student.username', read_only=True)

    class Meta:
        model = WeeklyScore
        fields = ['id', 'student', 'student_username', 'student_name', 'week', 'part', *SCORE_COLUMNS, 'updated_at']
        read_only_fields = fields

    def get_student_name(self, obj):
        profile = getattr(obj.student, 'profile', None)
        return profile.display_name if profile else obj.student.get_username()
