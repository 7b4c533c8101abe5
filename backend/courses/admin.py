from django.contrib import admin

from .models import Course, Enrollment, Material


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0


class MaterialInline(admin.TabularInline):
    model = Material
    extra = 0


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'org_tag', 'teacher')
    search_fields = ('code', 'title', 'org_tag')
    inlines = [EnrollmentInline, MaterialInline]


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('course', 'student', 'created_at')


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ('title', 'course', 'teacher', 'created_at')
    search_fields = ('title', 'course__code')
