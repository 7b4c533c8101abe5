from .auth import CSRFTokenView, LoginView, LogoutView, MeView, ProfileView, RegisterView
from .authoring import (
    AssignmentCreate,
    TestGuestAttemptList,
    TestListCreate,
    TestPublish,
    TestQuestionDetail,
    TestQuestionListCreate,
    TestStatusList,
)
from .assignments import (
    StudentAssignmentDetail,
    StudentAssignmentList,
    StudentAssignmentStart,
    StudentAssignmentSubmit,
)
from .public import PublicTestDetail, PublicTestSubmit
from .gradebook import (
    CourseWeeklyScoreExport,
    CourseWeeklyScoreList,
    StudentWeeklyScoreList,
    WeeklyScoreUpsert,
)
from .courses import (
    CourseDetail,
    CourseEnroll,
    CourseList,
    CourseMaterialListCreate,
    TeacherCourseListCreate,
    TeacherCourseStudentList,
    TeacherStudentList,
)
from .admin import AdminAssistantView, AdminStudentList, AdminTeacherInviteListCreate, AdminTeacherList
from .dashboard import TeacherAnalyticsView
