from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that reads the access token from the auth cookie
    first and falls back to the ``Authorization: Bearer`` header.
    """

    def authenticate(self, request):
        access_token = request.COOKIES.get(settings.JWT_AUTH_COOKIE)

        if access_token:
            validated_token = self.get_validated_token(access_token)
            return self.get_user(validated_token), validated_token

        return super().authenticate(request)
