# bb_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from django.middleware.csrf import CsrfViewMiddleware
from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication


class _CSRFCheck(CsrfViewMiddleware):
    def _reject(self, request, reason):
        return reason


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>   (API clients, mobile)
      2) HttpOnly `bb_access` cookie      (browser dashboard)

    The cookie is sent by the browser on its own, so unsafe methods carrying
    only the cookie must also pass Django's CSRF check.
    """

    def authenticate(self, request):
        if self.get_header(request):
            return super().authenticate(request)

        raw_token = request.COOKIES.get(settings.SIMPLE_JWT.get("AUTH_COOKIE", "bb_access"))
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)
        self._enforce_csrf(request)
        return user, validated_token

    def _enforce_csrf(self, request) -> None:
        check = _CSRFCheck(lambda req: None)
        check.process_request(request)
        reason = check.process_view(request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f"CSRF Failed: {reason}")
