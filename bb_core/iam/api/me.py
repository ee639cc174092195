# bb_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bb_core.common.permissions import ROLE_ADMIN, user_roles
from bb_core.iam.api.schema_serializers import MeResponseSerializer
from bb_core.iam.models import UserProfile


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["Auth"])
    def get(self, request):
        """
        Returns the authenticated principal plus its donor counters (when a profile exists).
        """
        user = request.user
        roles = sorted(user_roles(user))
        profile = UserProfile.objects.filter(user_id=user.id).first()

        return Response(
            {
                "user": {
                    "id": user.id,
                    "username": getattr(user, "username", None),
                    "email": getattr(user, "email", None),
                    "is_admin": ROLE_ADMIN in roles,
                    "roles": roles,
                },
                "profile": None
                if profile is None
                else {
                    "phone": profile.phone,
                    "blood_group": profile.blood_group,
                    "district": profile.district,
                    "blood_given": profile.blood_given,
                    "blood_taken": profile.blood_taken,
                    "last_donate_date": profile.last_donate_date,
                    "available": profile.available,
                },
            },
            status=status.HTTP_200_OK,
        )
