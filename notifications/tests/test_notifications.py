from unittest import mock

import pytest
from notifications.models import Notification
from notifications.services import create_notification, mark_read, notify, notify_on_commit
from notifications.signals import notification_created
from rest_framework.test import APIClient
from users.tests.factories import StaffUserFactory, UserFactory


@pytest.mark.django_db
def test_create_notification_emits_signal():
    user = UserFactory()
    received = []

    def _handler(sender, notification, **kwargs):
        received.append(notification)

    notification_created.connect(_handler)
    try:
        n = create_notification(user_id=user.id, type="order", title="Hello", message="World", link="/orders")
    finally:
        notification_created.disconnect(_handler)

    assert received == [n]
    assert n.user_id == user.id
    assert not n.is_broadcast


@pytest.mark.django_db
def test_notify_swallows_failures():
    with mock.patch("notifications.services.create_notification", side_effect=RuntimeError("boom")):
        assert notify(user_id=None, type="system", title="x") is None
    assert Notification.objects.count() == 0


@pytest.mark.django_db
def test_notify_on_commit_runs_after_commit(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        notify_on_commit(user_id=None, type="system", title="Later")
    assert Notification.objects.count() == 0
    assert len(callbacks) == 1

    callbacks[0]()
    assert Notification.objects.filter(title="Later", user__isnull=True).exists()


@pytest.mark.django_db
def test_customer_sees_only_own_notifications():
    user = UserFactory()
    other = UserFactory()
    create_notification(user_id=user.id, type="order", title="mine")
    create_notification(user_id=other.id, type="order", title="theirs")
    create_notification(user_id=None, type="product_low_stock", title="broadcast")

    client = APIClient()
    client.force_authenticate(user=user)
    resp = client.get("/api/v1/notifications/")
    assert resp.status_code == 200
    titles = [n["title"] for n in resp.json()["results"]]
    assert titles == ["mine"]


@pytest.mark.django_db
def test_staff_sees_broadcasts():
    staff = StaffUserFactory()
    create_notification(user_id=None, type="product_out_of_stock", title="broadcast")

    client = APIClient()
    client.force_authenticate(user=staff)
    resp = client.get("/api/v1/notifications/")
    assert [n["title"] for n in resp.json()["results"]] == ["broadcast"]


@pytest.mark.django_db
def test_mark_read_selected_and_all():
    user = UserFactory()
    a = create_notification(user_id=user.id, type="order", title="a")
    create_notification(user_id=user.id, type="order", title="b")

    assert mark_read(user=user, notification_ids=[a.id]) == 1
    a.refresh_from_db()
    assert a.is_read

    client = APIClient()
    client.force_authenticate(user=user)
    resp = client.post("/api/v1/notifications/mark-read/", {}, format="json")
    assert resp.status_code == 200
    assert resp.json() == {"updated": 1}
    assert not Notification.objects.filter(user=user, is_read=False).exists()


@pytest.mark.django_db
def test_list_requires_authentication():
    resp = APIClient().get("/api/v1/notifications/")
    assert resp.status_code == 401
    assert resp.json()["success"] is False
