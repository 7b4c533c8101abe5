from django.contrib import admin
from .models import Profile, TeacherInvite


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'full_name', 'role')
    search_fields = ('user__username', 'full_name')
    list_filter = ('role',)


@admin.register(TeacherInvite)
class TeacherInviteAdmin(admin.ModelAdmin):
    list_display = ('code', 'created_by', 'created_at', 'used_by', 'used_at')
    search_fields = ('code', 'used_by__username')
    readonly_fields = ('created_at',)
