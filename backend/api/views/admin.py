from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from accounts.serializers import TeacherInviteSerializer
from accounts.services import create_teacher_invite, list_teacher_invites
from assistant.services import run_admin_request
from courses.serializers import StudentSerializer, TeacherSummarySerializer
from courses.services import list_students, list_teachers


class AdminTeacherList(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(TeacherSummarySerializer(list_teachers(request.user), many=True).data)


class AdminStudentList(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(StudentSerializer(list_students(request.user), many=True).data)


class AdminTeacherInviteListCreate(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(TeacherInviteSerializer(list_teacher_invites(request.user), many=True).data)

    def post(self, request):
        invite = create_teacher_invite(request.user)
        return Response(TeacherInviteSerializer(invite).data, status=status.HTTP_201_CREATED)


class AdminAssistantView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request):
        return Response(run_admin_request(request.user, request.data.get('message')))
