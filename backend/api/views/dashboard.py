from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsTeacher
from assessments.analytics import teacher_dashboard


class TeacherAnalyticsView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        return Response(teacher_dashboard(request.user))
