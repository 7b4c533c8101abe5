from django.contrib.auth import password_validation
from rest_framework import serializers

from .models import Profile, TeacherInvite


class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    name = serializers.CharField(source='display_name', read_only=True)
    password = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = Profile
        fields = [
            'id',
            'username',
            'name',
            'role',
            'full_name',
            'bio',
            'avatar_url',
            'settings',
            'password',
        ]
        read_only_fields = ['role']

    def validate_password(self, value):
        user = self.instance.user if self.instance is not None else None
        password_validation.validate_password(value, user)
        return value

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        if password:
            instance.user.set_password(password)
            instance.user.save(update_fields=['password'])
        return super().update(instance, validated_data)


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(trim_whitespace=True)
    password = serializers.CharField()
    name = serializers.CharField(trim_whitespace=True)
    role = serializers.ChoiceField(choices=['STUDENT', 'TEACHER'], default='STUDENT')
    invite_code = serializers.CharField(required=False, allow_blank=True, default='')


class UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    name = serializers.SerializerMethodField()

    def get_name(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.display_name if profile else obj.get_username()


class TeacherInviteSerializer(serializers.ModelSerializer):
    created_by = serializers.CharField(source='created_by.username', read_only=True, default=None)
    used_by = serializers.SerializerMethodField()

    class Meta:
        model = TeacherInvite
        fields = ['id', 'code', 'created_by', 'created_at', 'used_at', 'used_by']

    def get_used_by(self, obj):
        if obj.used_by is None:
            return None
        return UserSummarySerializer(obj.used_by).data
