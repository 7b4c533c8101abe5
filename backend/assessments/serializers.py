from rest_framework import serializers

from .models import GuestTestAttempt, Question, Test, TestAssignment


class TestSerializer(serializers.ModelSerializer):
    is_published = serializers.BooleanField(read_only=True)
    question_count = serializers.IntegerField(read_only=True, required=False)
    assignment_count = serializers.IntegerField(read_only=True, required=False)
    guest_attempt_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Test
        fields = [
            'id',
            'title',
            'description',
            'public_code',
            'published_at',
            'is_published',
            'created_at',
            'question_count',
            'assignment_count',
            'guest_attempt_count',
        ]
        read_only_fields = fields


class QuestionSerializer(serializers.ModelSerializer):
    """Owner view of a question, answer key included."""

    class Meta:
        model = Question
        fields = ['id', 'test', 'order', 'text', 'options', 'correct_index']
        read_only_fields = fields


class StudentQuestionSerializer(serializers.ModelSerializer):
    """Question as shown to whoever answers it; never carries the answer key."""

    class Meta:
        model = Question
        fields = ['id', 'order', 'text', 'options']
        read_only_fields = fields


class PublicTestSerializer(serializers.ModelSerializer):
    class Meta:
        model = Test
        fields = ['id', 'title', 'description', 'public_code', 'published_at']
        read_only_fields = fields


class AssignmentSerializer(serializers.ModelSerializer):
    test_title = serializers.CharField(source='test.title', read_only=True)
    test_description = serializers.CharField(source='test.description', read_only=True)
    question_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = TestAssignment
        fields = [
            'id',
            'test',
            'test_title',
            'test_description',
            'student',
            'status',
            'due_at',
            'assigned_at',
            'started_at',
            'completed_at',
            'score',
            'total',
            'question_count',
        ]
        read_only_fields = fields


class AssignmentStatusSerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(read_only=True)
    name = serializers.SerializerMethodField()
    timestamp = serializers.DateTimeField(source='last_activity_at', read_only=True)

    class Meta:
        model = TestAssignment
        fields = ['id', 'student_id', 'name', 'status', 'due_at', 'score', 'total', 'timestamp']
        read_only_fields = fields

    def get_name(self, obj):
        profile = getattr(obj.student, 'profile', None)
        return profile.display_name if profile else obj.student.get_username()


class GuestAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = GuestTestAttempt
        fields = ['id', 'name', 'score', 'total', 'created_at']
        read_only_fields = fields
