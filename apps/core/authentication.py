# apps/core/authentication.py

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


def access_cookie_name() -> str:
    return getattr(settings, "JWT_AUTH_COOKIE", "access_token")


class CookieJWTAuthentication(JWTAuthentication):
    """
    Bearer header first, then the access token cookie set at login.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.COOKIES.get(access_cookie_name())
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
