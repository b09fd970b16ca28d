from decimal import Decimal

import pytest
from django.core import mail
from django.core.cache import cache
from notifications.models import Notification
from orders.models import Order
from orders.tests.factories import OrderFactory, PaymentFactory
from payments import views
from payments.matchers import OrderCodeMatcher, RegexOrderCodeMatcher, get_matcher
from payments.models import Payment
from payments.services import extract_transactions, process_bank_transactions
from rest_framework.test import APIClient
from rest_framework.throttling import SimpleRateThrottle

URL = "/api/v1/payments/webhooks/bank/"


class FirstWordMatcher(OrderCodeMatcher):
    def match(self, text):
        return [text.split()[0].upper()] if text.strip() else []


@pytest.fixture
def bank_order():
    order = OrderFactory(
        order_code="ORD2024001",
        payment_method="bank_transfer",
        grand_total=Decimal("500000.00"),
        email="buyer@example.com",
    )
    PaymentFactory(order=order)
    return order


@pytest.mark.django_db
def test_overpaid_transfer_marks_order_paid(bank_order, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        resp = APIClient().post(
            URL,
            {"tid": "FT123", "description": "THANH TOAN ORD2024001", "amount": 600000},
            format="json",
        )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "processed": ["ORD2024001"]}
    bank_order.refresh_from_db()
    assert bank_order.status == Order.STATUS_PROCESSING
    payment = Payment.objects.get(order=bank_order)
    assert payment.status == Payment.STATUS_PAID
    assert payment.transaction_ref == "FT123"
    assert payment.paid_at is not None
    assert Notification.objects.filter(user__isnull=True, title="Payment received").exists()
    assert Notification.objects.filter(user=bank_order.user, title="Payment received").exists()
    assert len(mail.outbox) == 1
    assert "ORD2024001" in mail.outbox[0].subject


@pytest.mark.django_db
def test_underpayment_leaves_order_untouched(bank_order):
    resp = APIClient().post(URL, {"description": "ORD2024001", "amount": 499999}, format="json")

    assert resp.json() == {"success": True, "processed": []}
    bank_order.refresh_from_db()
    assert bank_order.status == Order.STATUS_PENDING
    assert Payment.objects.get(order=bank_order).status == Payment.STATUS_PENDING


@pytest.mark.django_db
def test_batch_payload_with_alternate_keys(bank_order):
    other = OrderFactory(order_code="ORD2024002", grand_total=Decimal("100000.00"))
    PaymentFactory(order=other, method="bank_transfer")
    payload = {
        "data": [
            {"id": 1, "content": "ck ord2024002 cam on", "transferAmount": "100000"},
            {"id": 2, "content": "no code here", "transferAmount": "100"},
            {"id": 3, "description": "ORD2024001", "amount": "500000.00"},
        ]
    }

    resp = APIClient().post(URL, payload, format="json")

    assert resp.json() == {"success": True, "processed": ["ORD2024002", "ORD2024001"]}
    assert Payment.objects.get(order=other).transaction_ref == "1"


@pytest.mark.django_db
def test_repeated_delivery_is_skipped(bank_order):
    payload = [{"tid": "FT1", "description": "ORD2024001", "amount": 500000}]
    assert process_bank_transactions(payload) == ["ORD2024001"]
    assert process_bank_transactions(payload) == []
    assert Payment.objects.get(order=bank_order).transaction_ref == "FT1"


@pytest.mark.django_db
def test_processing_order_with_pending_payment_is_accepted(bank_order):
    Order.objects.filter(pk=bank_order.pk).update(status=Order.STATUS_PROCESSING)
    assert process_bank_transactions({"description": "ORD2024001", "amount": 500000}) == ["ORD2024001"]
    bank_order.refresh_from_db()
    assert bank_order.status == Order.STATUS_PROCESSING


@pytest.mark.django_db
def test_closed_orders_are_ignored(bank_order):
    Order.objects.filter(pk=bank_order.pk).update(status=Order.STATUS_CANCELLED)
    assert process_bank_transactions({"description": "ORD2024001", "amount": 500000}) == []
    assert Payment.objects.get(order=bank_order).status == Payment.STATUS_PENDING


@pytest.mark.django_db
def test_internal_error_reports_failure_with_200(monkeypatch):
    def explode(payload):
        raise RuntimeError("db down")

    monkeypatch.setattr(views, "process_bank_transactions", explode)
    resp = APIClient().post(URL, {"description": "ORD2024001", "amount": 1}, format="json")
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "processed": []}


def test_regex_matcher_upper_cases_and_dedupes():
    matcher = RegexOrderCodeMatcher()
    assert matcher.match("ck ord2024001 ORD2024001 ok") == ["ORD2024001"]
    assert matcher.match("thanh toan ord2024001") == ["THANH", "TOAN", "ORD2024001"]
    assert matcher.match("") == []


def test_extract_transactions_accepts_all_shapes():
    tx = {"description": "x", "amount": 1}
    assert extract_transactions({"data": [tx]}) == [tx]
    assert extract_transactions([tx, "junk"]) == [tx]
    assert extract_transactions(tx) == [tx]
    assert extract_transactions(None) == []


@pytest.mark.django_db
def test_matcher_is_configurable(settings, bank_order):
    settings.PAYMENTS_ORDER_CODE_MATCHER = "payments.tests.test_webhook.FirstWordMatcher"
    assert isinstance(get_matcher(), FirstWordMatcher)
    assert process_bank_transactions({"description": "ord2024001 thanks", "amount": 500000}) == ["ORD2024001"]


@pytest.mark.django_db
def test_webhook_is_never_throttled(monkeypatch):
    monkeypatch.setattr(SimpleRateThrottle, "THROTTLE_RATES", {"anon": "2/min", "user": "2/min"})
    cache.clear()
    client = APIClient()
    codes = {client.post(URL, {"data": []}, format="json").status_code for _ in range(5)}
    assert codes == {200}
