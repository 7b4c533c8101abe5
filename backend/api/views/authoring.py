from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsTeacher
from assessments import services
from assessments.serializers import (
    AssignmentSerializer,
    AssignmentStatusSerializer,
    GuestAttemptSerializer,
    QuestionSerializer,
    TestSerializer,
)

QUESTION_FIELDS = ('text', 'options', 'correct_index')


class TestListCreate(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        tests = services.list_teacher_tests(request.user)
        return Response(TestSerializer(tests, many=True).data)

    def post(self, request):
        test = services.create_test(request.user, request.data.get('title'), request.data.get('description'))
        return Response(TestSerializer(test).data, status=status.HTTP_201_CREATED)


class TestQuestionListCreate(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, test_id):
        test, questions = services.list_questions(request.user, test_id)
        return Response(
            {
                'test': TestSerializer(test).data,
                'questions': QuestionSerializer(questions, many=True).data,
            }
        )

    def post(self, request, test_id):
        question = services.add_question(
            request.user,
            test_id,
            request.data.get('text'),
            request.data.get('options'),
            request.data.get('correct_index'),
        )
        return Response(QuestionSerializer(question).data, status=status.HTTP_201_CREATED)


class TestQuestionDetail(APIView):
    permission_classes = [IsTeacher]

    def patch(self, request, test_id, question_id):
        changes = {field: request.data[field] for field in QUESTION_FIELDS if field in request.data}
        question = services.update_question(request.user, test_id, question_id, **changes)
        return Response(QuestionSerializer(question).data)

    def delete(self, request, test_id, question_id):
        services.delete_question(request.user, test_id, question_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TestPublish(APIView):
    permission_classes = [IsTeacher]

    def post(self, request, test_id):
        test = services.publish_test(request.user, test_id)
        return Response(TestSerializer(test).data)


class TestStatusList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, test_id):
        rows = services.list_assignment_statuses(request.user, test_id)
        return Response(AssignmentStatusSerializer(rows, many=True).data)


class TestGuestAttemptList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, test_id):
        attempts = services.list_guest_attempts(request.user, test_id)
        return Response(GuestAttemptSerializer(attempts, many=True).data)


class AssignmentCreate(APIView):
    permission_classes = [IsTeacher]

    def post(self, request):
        assignment = services.assign_test(
            request.user,
            request.data.get('test_id'),
            request.data.get('student_id'),
            request.data.get('due_at'),
        )
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)
