from django.urls import path

from .views import (
    AdminAssistantView,
    AdminStudentList,
    AdminTeacherInviteListCreate,
    AdminTeacherList,
    AssignmentCreate,
    CourseDetail,
    CourseEnroll,
    CourseList,
    CourseMaterialListCreate,
    CourseWeeklyScoreExport,
    CourseWeeklyScoreList,
    CSRFTokenView,
    LoginView,
    LogoutView,
    MeView,
    ProfileView,
    PublicTestDetail,
    PublicTestSubmit,
    RegisterView,
    StudentAssignmentDetail,
    StudentAssignmentList,
    StudentAssignmentStart,
    StudentAssignmentSubmit,
    StudentWeeklyScoreList,
    TeacherAnalyticsView,
    TeacherCourseListCreate,
    TeacherCourseStudentList,
    TeacherStudentList,
    TestGuestAttemptList,
    TestListCreate,
    TestPublish,
    TestQuestionDetail,
    TestQuestionListCreate,
    TestStatusList,
    WeeklyScoreUpsert,
)

urlpatterns = [
    path('auth/csrf/', CSRFTokenView.as_view(), name='api-csrf'),
    path('auth/login/', LoginView.as_view(), name='api-login'),
    path('auth/logout/', LogoutView.as_view(), name='api-logout'),
    path('auth/me/', MeView.as_view(), name='api-me'),
    path('auth/register/', RegisterView.as_view(), name='api-register'),
    path('profile/', ProfileView.as_view(), name='profile'),
    # Authoring
    path('tests/', TestListCreate.as_view(), name='tests'),
    path('tests/<int:test_id>/questions/', TestQuestionListCreate.as_view(), name='test-questions'),
    path(
        'tests/<int:test_id>/questions/<int:question_id>/',
        TestQuestionDetail.as_view(),
        name='test-question-detail',
    ),
    path('tests/<int:test_id>/publish/', TestPublish.as_view(), name='test-publish'),
    path('tests/<int:test_id>/status/', TestStatusList.as_view(), name='test-status'),
    path('tests/<int:test_id>/guests/', TestGuestAttemptList.as_view(), name='test-guests'),
    path('assignments/', AssignmentCreate.as_view(), name='assignments'),
    # Guests
    path('tests/public/<str:code>/', PublicTestDetail.as_view(), name='public-test'),
    path('tests/public/<str:code>/submit/', PublicTestSubmit.as_view(), name='public-test-submit'),
    # Students
    path('student/assignments/', StudentAssignmentList.as_view(), name='student-assignments'),
    path(
        'student/assignments/<int:assignment_id>/',
        StudentAssignmentDetail.as_view(),
        name='student-assignment-detail',
    ),
    path(
        'student/assignments/<int:assignment_id>/start/',
        StudentAssignmentStart.as_view(),
        name='student-assignment-start',
    ),
    path(
        'student/assignments/<int:assignment_id>/submit/',
        StudentAssignmentSubmit.as_view(),
        name='student-assignment-submit',
    ),
    path('student/weekly-scores/', StudentWeeklyScoreList.as_view(), name='student-weekly-scores'),
    # Courses
    path('courses/', CourseList.as_view(), name='courses'),
    path('courses/<int:course_id>/', CourseDetail.as_view(), name='course-detail'),
    path('courses/<int:course_id>/enroll/', CourseEnroll.as_view(), name='course-enroll'),
    path('courses/<int:course_id>/materials/', CourseMaterialListCreate.as_view(), name='course-materials'),
    # Teachers
    path('teacher/courses/', TeacherCourseListCreate.as_view(), name='teacher-courses'),
    path(
        'teacher/courses/<int:course_id>/students/',
        TeacherCourseStudentList.as_view(),
        name='teacher-course-students',
    ),
    path(
        'teacher/courses/<int:course_id>/weekly-scores/',
        CourseWeeklyScoreList.as_view(),
        name='course-weekly-scores',
    ),
    path(
        'teacher/courses/<int:course_id>/weekly-scores/export/',
        CourseWeeklyScoreExport.as_view(),
        name='course-weekly-scores-export',
    ),
    path('teacher/weekly-scores/', WeeklyScoreUpsert.as_view(), name='weekly-scores'),
    path('teacher/students/', TeacherStudentList.as_view(), name='teacher-students'),
    path('teacher/analytics/', TeacherAnalyticsView.as_view(), name='teacher-analytics'),
    # Admin
    path('admin/teachers/', AdminTeacherList.as_view(), name='admin-teachers'),
    path('admin/students/', AdminStudentList.as_view(), name='admin-students'),
    path('admin/teacher-invites/', AdminTeacherInviteListCreate.as_view(), name='admin-teacher-invites'),
    path('admin/ai/', AdminAssistantView.as_view(), name='admin-ai'),
]
