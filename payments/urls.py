from django.urls import path

from .views import BankWebhookView

urlpatterns = [
    path("webhooks/bank/", BankWebhookView.as_view(), name="payments-bank-webhook"),
]
