from datetime import timedelta

import pytest

from eduglobal.config import settings
from eduglobal.core.clock import utc_now
from eduglobal.models import Notification


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def seed(db):
    def _seed(user_id, count=1, **fields):
        base = utc_now()
        rows = []
        for i in range(count):
            row = Notification(
                user_id=user_id,
                type=fields.get("type", "application_status_update"),
                title=f"Update {i}",
                message="Your application status has been updated",
                is_read=fields.get("is_read", False),
                created_at=base - timedelta(minutes=i),
                expires_at=fields.get("expires_at", base + timedelta(days=90)),
            )
            db.add(row)
            rows.append(row)
        db.commit()
        return [r.id for r in rows]

    return _seed


def test_pagination_envelope(client, user, auth_headers, seed):
    seed(user.id, count=25)
    r = client.get("/api/notifications", params={"page": 2, "limit": 10}, headers=auth_headers(user))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["total"] == 25
    assert body["totalPages"] == 3
    assert body["currentPage"] == 2
    assert [n["title"] for n in body["notifications"]] == [f"Update {i}" for i in range(10, 20)]


def test_expired_notifications_are_not_listed(client, user, auth_headers, seed):
    seed(user.id, count=2)
    seed(user.id, expires_at=utc_now() - timedelta(minutes=1))
    headers = auth_headers(user)
    assert client.get("/api/notifications", headers=headers).json()["total"] == 2
    assert client.get("/api/notifications/unread-count", headers=headers).json()["unreadCount"] == 2


def test_filter_by_type_and_read(client, user, auth_headers, seed):
    seed(user.id, type="acceptance")
    seed(user.id, is_read=True)
    headers = auth_headers(user)
    r = client.get("/api/notifications", params={"type": "acceptance"}, headers=headers)
    assert r.json()["total"] == 1
    r = client.get("/api/notifications", params={"read": "true"}, headers=headers)
    assert r.json()["total"] == 1


def test_unknown_type_filter_is_rejected(client, user, auth_headers):
    r = client.get("/api/notifications", params={"type": "spam"}, headers=auth_headers(user))
    assert r.status_code == 400
    assert "type" in r.json()["errors"]


def test_stats(client, user, auth_headers, seed):
    seed(user.id, count=2)
    seed(user.id, type="waitlist", is_read=True)
    stats = client.get("/api/notifications/stats", headers=auth_headers(user)).json()["stats"]
    assert stats["total"] == 3
    assert stats["unread"] == 2
    assert stats["read"] == 1
    assert stats["typeBreakdown"] == {"application_status_update": 2, "waitlist": 1}


def test_mark_one_read_and_unknown_id(client, user, auth_headers, seed):
    [nid] = seed(user.id)
    headers = auth_headers(user)
    r = client.patch(f"/api/notifications/{nid}/read", headers=headers)
    assert r.status_code == 200
    assert r.json()["notification"]["read"] is True
    assert r.json()["notification"]["read_at"] is not None
    assert client.patch("/api/notifications/9999/read", headers=headers).status_code == 404


def test_cannot_touch_another_users_notification(client, make_user, auth_headers, seed):
    owner, other = make_user(), make_user()
    [nid] = seed(owner.id)
    assert client.patch(f"/api/notifications/{nid}/read", headers=auth_headers(other)).status_code == 404
    assert client.delete(f"/api/notifications/{nid}", headers=auth_headers(other)).status_code == 404


def test_mark_many_and_all_read(client, user, auth_headers, seed):
    ids = seed(user.id, count=4)
    headers = auth_headers(user)
    r = client.patch("/api/notifications/mark-read", json={"notificationIds": ids[:2]}, headers=headers)
    assert r.json()["modifiedCount"] == 2
    r = client.patch("/api/notifications/mark-all-read", headers=headers)
    assert r.json()["modifiedCount"] == 2
    assert client.get("/api/notifications/unread-count", headers=headers).json()["unreadCount"] == 0


def test_notification_ids_must_be_a_list(client, user, auth_headers):
    headers = auth_headers(user)
    r = client.patch("/api/notifications/mark-read", json={"notificationIds": 5}, headers=headers)
    assert r.status_code == 400
    r = client.request("DELETE", "/api/notifications", json={}, headers=headers)
    assert r.status_code == 400


def test_delete_one_many_and_read(client, user, auth_headers, seed):
    ids = seed(user.id, count=4)
    read_ids = seed(user.id, count=2, is_read=True)
    headers = auth_headers(user)

    assert client.delete(f"/api/notifications/{ids[0]}", headers=headers).status_code == 200
    r = client.request("DELETE", "/api/notifications", json={"notificationIds": ids[1:3]}, headers=headers)
    assert r.json()["deletedCount"] == 2
    r = client.delete("/api/notifications/read", headers=headers)
    assert r.status_code == 200
    assert r.json()["deletedCount"] == len(read_ids)
    assert client.get("/api/notifications", headers=headers).json()["total"] == 1


def test_test_notification_expires_in_a_day(client, user, auth_headers):
    r = client.post("/api/notifications/test", json={"type": "system_announcement"}, headers=auth_headers(user))
    assert r.status_code == 200
    n = r.json()["notification"]
    assert n["type"] == "system_announcement"
    assert n["title"] == "Test Notification"
    assert n["data"] == {"test": True}
    assert n["expires_at"] is not None


def test_test_notification_forbidden_in_production(client, user, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "env", "production")
    r = client.post("/api/notifications/test", headers=auth_headers(user))
    assert r.status_code == 403
