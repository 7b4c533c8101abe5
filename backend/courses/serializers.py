from rest_framework import serializers

from .models import Course, Material


class CourseSerializer(serializers.ModelSerializer):
    teacher_id = serializers.IntegerField(read_only=True)
    teacher_name = serializers.SerializerMethodField()
    enrolled_count = serializers.IntegerField(read_only=True, default=0)
    is_enrolled = serializers.BooleanField(read_only=True, default=False)

    class Meta:
        model = Course
        fields = [
            'id',
            'code',
            'title',
            'org_tag',
            'description',
            'teacher_id',
            'teacher_name',
            'enrolled_count',
            'is_enrolled',
            'created_at',
        ]

    def get_teacher_name(self, obj):
        profile = getattr(obj.teacher, 'profile', None)
        return profile.display_name if profile else obj.teacher.get_username()


class CourseCreateSerializer(serializers.Serializer):
    title = serializers.CharField(allow_blank=True, default='')
    code = serializers.CharField(allow_blank=True, default='')
    org_tag = serializers.CharField(allow_blank=True, default='')
    description = serializers.CharField(allow_blank=True, required=False, default='')


class MaterialSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    teacher_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Material
        fields = ['id', 'course_id', 'teacher_id', 'title', 'description', 'url', 'created_at']


class MaterialCreateSerializer(serializers.Serializer):
    title = serializers.CharField(allow_blank=True, default='')
    description = serializers.CharField(allow_blank=True, required=False, default='')
    url = serializers.URLField(allow_blank=True, required=False, default='', max_length=500)


class StudentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    name = serializers.SerializerMethodField()
    course_count = serializers.IntegerField(read_only=True, required=False)

    def get_name(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.display_name if profile else obj.get_username()


class TeacherSummarySerializer(StudentSerializer):
    test_count = serializers.IntegerField(read_only=True, required=False)
