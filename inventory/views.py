"""Admin inventory endpoints: ledger listing and manual stock adjustments."""

from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import InventoryMovement
from .serializers import InventoryMovementSerializer, StockAdjustmentSerializer
from .services import adjust


class MovementListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = InventoryMovementSerializer
    filter_backends = []

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List inventory movements",
        description=(
            "Ledger entries, newest first. "
            "Filters: variant_id, sku, movement_type, order_code, created_after (ISO)."
        ),
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = InventoryMovement.objects.select_related("variant", "order").order_by("-created_at", "-id")
        params = self.request.query_params
        if params.get("variant_id"):
            qs = qs.filter(variant_id=params["variant_id"])
        if params.get("sku"):
            qs = qs.filter(variant__sku__iexact=params["sku"])
        if params.get("movement_type"):
            qs = qs.filter(movement_type=params["movement_type"])
        if params.get("order_code"):
            qs = qs.filter(order__order_code=params["order_code"])
        created_after = params.get("created_after")
        if created_after:
            dt = parse_datetime(created_after)
            if dt:
                qs = qs.filter(created_at__gte=dt)
        return qs


class StockAdjustmentView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust stock",
        description="Positive delta adds stock, negative delta removes it. Removal beyond current stock is rejected.",
        request=StockAdjustmentSerializer,
        responses={201: InventoryMovementSerializer},
        examples=[OpenApiExample("Restock", value={"variant_id": 10, "delta": 25, "note": "Supplier delivery"})],
    )
    def post(self, request):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        movement = adjust(
            data["variant_id"],
            data["delta"],
            note=data.get("note", ""),
            reference=f"admin:{request.user.id}",
        )
        return Response(InventoryMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
