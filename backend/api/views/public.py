from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from assessments import services
from assessments.serializers import PublicTestSerializer, StudentQuestionSerializer


class PublicTestDetail(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, code):
        test, questions = services.get_published_test(code)
        return Response(
            {
                'test': PublicTestSerializer(test).data,
                'questions': StudentQuestionSerializer(questions, many=True).data,
            }
        )


class PublicTestSubmit(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, code):
        attempt = services.submit_guest_attempt(code, request.data.get('name'), request.data.get('answers'))
        return Response(
            {'ok': True, 'id': attempt.id, 'score': attempt.score, 'total': attempt.total},
            status=status.HTTP_201_CREATED,
        )
