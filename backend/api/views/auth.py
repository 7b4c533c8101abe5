from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.middleware.csrf import get_token
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import Role, ensure_profile
from accounts.serializers import ProfileSerializer, RegisterSerializer
from accounts.services import normalize_username, register_student, register_teacher
from coursehub.exceptions import Invalid


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        username = normalize_username(request.data.get('username'))
        password = request.data.get('password')
        user = authenticate(request, username=username, password=password)
        if user is None:
            raise Invalid('INVALID_CREDENTIALS', 'Invalid credentials')
        login(request, user)
        profile = ensure_profile(user)
        return Response(ProfileSerializer(profile).data)


class LogoutView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        logout(request)
        return Response({'detail': 'Logged out'})


class CSRFTokenView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({'csrfToken': get_token(request)})


class MeView(APIView):
    def get(self, request):
        return Response(ProfileSerializer(ensure_profile(request.user)).data)


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if data['role'] == Role.TEACHER:
            user = register_teacher(data['username'], data['password'], data['name'], data['invite_code'])
        else:
            user = register_student(data['username'], data['password'], data['name'])
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        return Response(ProfileSerializer(user.profile).data, status=status.HTTP_201_CREATED)


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(ProfileSerializer(ensure_profile(request.user)).data)

    def patch(self, request):
        serializer = ProfileSerializer(ensure_profile(request.user), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        profile = serializer.save()
        if serializer.validated_data.get('password'):
            update_session_auth_hash(request, profile.user)
        return Response(serializer.data)
