from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsStudent, IsTeacher
from courses.serializers import CourseSerializer
from gradebook import services
from gradebook.serializers import CourseWeeklyScoreSerializer, WeeklyScoreSerializer

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class WeeklyScoreUpsert(APIView):
    permission_classes = [IsTeacher]

    def post(self, request):
        data = request.data
        scores = {field: data[field] for field in services.SCORE_FIELDS if field in data}
        row, created = services.set_weekly_score(
            request.user.id,
            data.get('course_id'),
            data.get('student_id'),
            data.get('week'),
            part=data.get('part'),
            **scores,
        )
        return Response(
            WeeklyScoreSerializer(row).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CourseWeeklyScoreList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, course_id):
        course, rows = services.list_course_scores(request.user, course_id)
        return Response(
            {
                'course': CourseSerializer(course).data,
                'rows': CourseWeeklyScoreSerializer(rows, many=True).data,
            }
        )


class CourseWeeklyScoreExport(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, course_id):
        course, content = services.export_course_scores(request.user, course_id)
        response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{course.code}-weekly-scores.xlsx"'
        return response


class StudentWeeklyScoreList(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        rows = services.list_student_scores(request.user.id)
        return Response(WeeklyScoreSerializer(rows, many=True).data)
