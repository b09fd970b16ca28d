from decimal import Decimal

from common.exceptions import ConflictError, InsufficientStock, InvalidTransition, NotFound, api_exception_handler
from common.money import round_whole, to_money
from rest_framework.exceptions import NotAuthenticated, ValidationError


def test_domain_errors_map_to_status_and_envelope():
    resp = api_exception_handler(NotFound("Order not found."), {})
    assert resp.status_code == 404
    assert resp.data == {"success": False, "error": {"message": "Order not found."}}

    assert api_exception_handler(ConflictError(), {}).status_code == 409


def test_insufficient_stock_lists_every_line():
    lines = [
        {"variant_id": 1, "sku": "A", "requested": 3, "available": 1},
        {"variant_id": 2, "sku": "B", "requested": 1, "available": 0},
    ]
    resp = api_exception_handler(InsufficientStock(lines), {})
    assert resp.status_code == 400
    assert resp.data["error"]["lines"] == lines
    assert resp.data["error"]["message"] == "Insufficient stock for: A, B"


def test_invalid_transition_is_a_conflict():
    exc = InvalidTransition("completed", "pending")
    resp = api_exception_handler(exc, {})
    assert resp.status_code == 409
    assert "completed" in resp.data["error"]["message"]


def test_validation_errors_keep_field_details():
    resp = api_exception_handler(ValidationError({"quantity": ["Must be positive."]}), {})
    assert resp.status_code == 400
    assert resp.data["error"]["message"] == "quantity: Must be positive."
    assert resp.data["error"]["fields"] == {"quantity": ["Must be positive."]}


def test_drf_errors_use_the_same_envelope():
    resp = api_exception_handler(NotAuthenticated(), {})
    assert resp.status_code == 401
    assert resp.data["success"] is False


def test_money_helpers_round_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(None) == Decimal("0.00")
    assert round_whole(Decimal("32500.50")) == Decimal("32501.00")
