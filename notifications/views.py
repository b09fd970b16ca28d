"""Notification inbox endpoints for the signed-in user."""

from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import MarkReadSerializer, NotificationSerializer
from .services import mark_read, visible_to


class NotificationListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    filterset_fields = ["is_read", "type"]

    @extend_schema(
        tags=["Notification Endpoints"],
        summary="List notifications",
        description="Own notifications, newest first. Staff also see broadcast notifications.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return visible_to(self.request.user).order_by("-created_at", "-id")


class NotificationMarkReadView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Notification Endpoints"],
        summary="Mark notifications read",
        description="Marks the listed notification ids as read, or all unread ones when `ids` is omitted.",
        request=MarkReadSerializer,
        responses={200: inline_serializer(name="MarkReadResponse", fields={"updated": rf_serializers.IntegerField()})},
        examples=[OpenApiExample("Marked", value={"updated": 3})],
    )
    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = mark_read(user=request.user, notification_ids=serializer.validated_data.get("ids"))
        return Response({"updated": updated}, status=status.HTTP_200_OK)
