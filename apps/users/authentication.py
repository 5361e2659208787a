from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


class EmailOrUsernameBackend(ModelBackend):
    """Lets customers sign in with either their email address or their username."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        User = get_user_model()  # pylint: disable=C0103

        if username is None:
            username = kwargs.get(User.USERNAME_FIELD) or kwargs.get("email_or_username")
        if not username or password is None:
            return None

        try:
            user = User.objects.get(email=username.strip().lower())
        except User.DoesNotExist:
            try:
                user = User.objects.get(username=username)
            except User.DoesNotExist:
                return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
