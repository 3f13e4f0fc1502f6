import logging

from django.contrib.auth import get_user_model
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.views import BaseResponseMixin

from .schema import ME_RESPONSE_SCHEMA, USER_LIST_RESPONSE_SCHEMA
from .serializers import PublicUserSerializer, UserSerializer

User = get_user_model()

logger = logging.getLogger("users_performance")


class UserViewSet(mixins.ListModelMixin, viewsets.GenericViewSet, BaseResponseMixin):
    """
    - List: GET /users/ (everyone but the caller, for choosing a chat partner)
    - Me: GET/PUT/PATCH /users/me/
    """

    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return User.objects.filter(is_active=True).exclude(id=self.request.user.id)

    def get_serializer_class(self):
        if self.action == "me":
            return UserSerializer
        return PublicUserSerializer

    @extend_schema(responses=USER_LIST_RESPONSE_SCHEMA)
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(methods=["GET", "PUT", "PATCH"], responses=ME_RESPONSE_SCHEMA)
    @action(detail=False, methods=["get", "put", "patch"])
    def me(self, request):
        """Read or update the authenticated user's profile."""
        user = request.user

        if request.method == "GET":
            return self.success_response(
                data=UserSerializer(user).data,
                message="Profile retrieved successfully",
            )

        start_time = timezone.now()
        serializer = UserSerializer(
            user, data=request.data, partial=request.method == "PATCH"
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Profile of user {user.id} updated in {duration:.2f}ms")

        return self.success_response(
            data=serializer.data, message="Profile updated successfully"
        )
