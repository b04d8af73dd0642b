"""Administrator endpoints: users, platform stats, enrollment extension, feature flags."""
from __future__ import annotations

import logging

import django_filters
from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import Role
from courses import enrollment as lifecycle
from courses.models import Course, Enrollment
from lessons.models import AssignmentSubmission, Lesson, Submission
from system.flags import flags_for, update_flags
from .exceptions import Forbidden
from .pagination import DefaultPagination
from .permissions import IsAdmin
from .serializers import (
    AdminUserSerializer,
    AdminUserUpdateSerializer,
    ExtendEnrollmentSerializer,
    FeatureFlagsUpdateSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class UserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="profile__role", choices=Role.choices)
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = User
        fields = ["role", "is_active"]


class AdminUserViewSet(mixins.ListModelMixin, mixins.UpdateModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.select_related("profile").order_by("id")
    permission_classes = [IsAuthenticated, IsAdmin]
    pagination_class = DefaultPagination
    filterset_class = UserFilter
    search_fields = ["email", "username", "profile__full_name"]
    ordering_fields = ["id", "email", "date_joined"]

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return AdminUserUpdateSerializer
        return AdminUserSerializer

    def update(self, request, *args, **kwargs):
        user = self.get_object()
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Admin %s updated user %s: %s", request.user.pk, user.pk, sorted(serializer.validated_data))
        return Response(AdminUserSerializer(user).data)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise Forbidden("You cannot delete your own account.")
        logger.info("Admin %s deleted user %s", self.request.user.pk, instance.pk)
        instance.delete()

    @action(detail=True, methods=["put"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise Forbidden("You cannot deactivate your own account.")
        user.is_active = not user.is_active
        user.save(update_fields=["is_active"])
        logger.info("Admin %s set user %s is_active=%s", request.user.pk, user.pk, user.is_active)
        return Response({"id": user.pk, "is_active": user.is_active})


class AdminEnrollmentViewSet(viewsets.GenericViewSet):
    queryset = Enrollment.objects.select_related("course", "user")
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = ExtendEnrollmentSerializer

    @action(detail=True, methods=["put"])
    def extend(self, request, pk=None):
        enrollment = self.get_object()
        serializer = ExtendEnrollmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enrollment = lifecycle.extend(enrollment, serializer.validated_data["days"])
        return Response({"id": enrollment.pk, "expires_at": enrollment.expires_at})


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsAdmin])
def stats(request):
    by_role = dict(User.objects.values_list("profile__role").annotate(n=Count("id")))
    enrollments = Enrollment.objects.aggregate(total=Count("id"), active=Count("id", filter=Q(is_active=True)))
    return Response(
        {
            "users": {
                "total": sum(by_role.values()),
                "students": by_role.get(Role.STUDENT, 0),
                "teachers": by_role.get(Role.TEACHER, 0),
                "admins": by_role.get(Role.ADMIN, 0),
                "inactive": User.objects.filter(is_active=False).count(),
            },
            "courses": Course.objects.count(),
            "lessons": Lesson.objects.count(),
            "enrollments": enrollments,
            "submissions": Submission.objects.count() + AssignmentSubmission.objects.count(),
        }
    )


class SettingsView(APIView):
    """Global feature flags: anyone may read, only admins may write."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsAdmin()]

    def get(self, request):
        return Response(flags_for(request).as_dict())

    def put(self, request):
        serializer = FeatureFlagsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        flags = update_flags(serializer.validated_data)
        return Response(flags.as_dict(), status=status.HTTP_200_OK)
