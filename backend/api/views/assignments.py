from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsStudent
from assessments import services
from assessments.serializers import AssignmentSerializer, StudentQuestionSerializer


class StudentAssignmentList(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        assignments = services.list_student_assignments(request.user)
        return Response(AssignmentSerializer(assignments, many=True).data)


class StudentAssignmentDetail(APIView):
    permission_classes = [IsStudent]

    def get(self, request, assignment_id):
        assignment, questions = services.get_assignment_for_student(request.user, assignment_id)
        return Response(
            {
                'assignment': AssignmentSerializer(assignment).data,
                'questions': StudentQuestionSerializer(questions, many=True).data,
            }
        )


class StudentAssignmentStart(APIView):
    permission_classes = [IsStudent]

    def post(self, request, assignment_id):
        assignment = services.start_assignment(request.user, assignment_id)
        return Response(AssignmentSerializer(assignment).data)


class StudentAssignmentSubmit(APIView):
    permission_classes = [IsStudent]

    def post(self, request, assignment_id):
        score, total = services.submit_assignment(request.user, assignment_id, request.data.get('answers'))
        return Response({'ok': True, 'score': score, 'total': total})
