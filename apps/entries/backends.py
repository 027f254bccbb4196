from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


class EmailBackend(ModelBackend):
    """Sign admins in with their email address instead of a username."""

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        email = (email or username or '').strip()
        if not email or password is None:
            return None
        user_model = get_user_model()
        candidates = list(user_model._default_manager.filter(email__iexact=email))
        if not candidates:
            # Keep the timing close to a real password check.
            user_model().set_password(password)
            return None
        for user in candidates:
            if user.check_password(password) and self.user_can_authenticate(user):
                return user
        return None
