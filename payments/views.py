"""Bank transfer webhook."""

import logging

from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .services import process_bank_transactions

logger = logging.getLogger("storefront.payments")


class BankWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    # Unthrottled: every delivery gets a 200.
    throttle_classes = []

    @extend_schema(
        tags=["Payment Endpoints"],
        summary="Bank transfer webhook",
        description=(
            "Receives transfers from the bank. Order codes are read from each transfer's description; "
            "an open order whose total is covered becomes processing and its payments paid. "
            "Always answers 200 so the sender does not retry."
        ),
        request=inline_serializer(
            name="BankWebhookRequest",
            fields={"data": rf_serializers.ListField(child=rf_serializers.DictField())},
        ),
        responses={
            200: inline_serializer(
                name="BankWebhookResponse",
                fields={
                    "success": rf_serializers.BooleanField(),
                    "processed": rf_serializers.ListField(child=rf_serializers.CharField()),
                },
            )
        },
        examples=[
            OpenApiExample(
                "Transfer",
                value={"data": [{"tid": "FT2401", "description": "THANH TOAN ORD20240115000042", "amount": 600000}]},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        try:
            processed = process_bank_transactions(request.data)
        except Exception:
            logger.exception("payment.webhook_failed", extra={"event": "payment.webhook_failed"})
            return Response({"success": False, "processed": []}, status=status.HTTP_200_OK)
        return Response({"success": True, "processed": processed}, status=status.HTTP_200_OK)
