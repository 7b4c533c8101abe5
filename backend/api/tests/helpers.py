from django.contrib.auth import get_user_model

from accounts.models import Profile, Role

User = get_user_model()


def make_user(username, role=Role.STUDENT, name=''):
    user = User.objects.create_user(username=username, password='password')
    Profile.objects.create(user=user, role=role, full_name=name)
    return user
