from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsStudent, IsTeacher
from courses import services
from courses.serializers import (
    CourseCreateSerializer,
    CourseSerializer,
    MaterialCreateSerializer,
    MaterialSerializer,
    StudentSerializer,
)


class CourseList(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        mine = request.query_params.get('mine') in ('1', 'true', 'yes')
        courses = services.list_catalog(request.user, request.query_params.get('q'), mine=mine)
        return Response(CourseSerializer(courses, many=True).data)


class CourseDetail(APIView):
    permission_classes = [AllowAny]

    def get(self, request, course_id):
        course = services.get_course(request.user, course_id)
        return Response(CourseSerializer(course).data)


class CourseEnroll(APIView):
    permission_classes = [IsStudent]

    def post(self, request, course_id):
        course = services.toggle_enrollment(request.user, course_id)
        return Response(CourseSerializer(course).data)


class CourseMaterialListCreate(APIView):
    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsTeacher()]

    def get(self, request, course_id):
        materials = services.list_materials(course_id)
        return Response({'items': MaterialSerializer(materials, many=True).data})

    def post(self, request, course_id):
        serializer = MaterialCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        material = services.add_material(request.user, course_id, **serializer.validated_data)
        return Response(MaterialSerializer(material).data, status=status.HTTP_201_CREATED)


class TeacherCourseListCreate(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        courses = services.list_teacher_courses(request.user)
        return Response(CourseSerializer(courses, many=True).data)

    def post(self, request):
        serializer = CourseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = services.create_course(request.user, **serializer.validated_data)
        return Response(CourseSerializer(course).data, status=status.HTTP_201_CREATED)


class TeacherCourseStudentList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, course_id):
        students = services.list_course_students(request.user, course_id)
        return Response(StudentSerializer(students, many=True).data)


class TeacherStudentList(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        students = services.list_students(request.user)
        return Response(StudentSerializer(students, many=True).data)
