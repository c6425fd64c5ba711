from datetime import date

import pytest

from src.daycare_system.daycare_system.main import create_app
from tests.fakes import make_record


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=services)
    return app.test_client()


def _login(client, username, password="secret123"):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def test_login_and_me(client):
    data = _login(client, "parent")
    assert data["role"] == "parent"

    me = client.get("/api/auth/me").get_json()
    assert me["success"] is True
    assert me["data"]["username"] == "parent"
    assert "password_hash" not in me["data"]


def test_bad_credentials_are_401(client):
    resp = client.post("/api/auth/login", json={"username": "parent", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Invalid username or password"}


def test_anonymous_requests_are_401(client):
    resp = client.get("/api/children")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_forbidden_is_403_with_reason(client):
    _login(client, "parent")
    resp = client.get("/api/classrooms")
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Parents are not authorized to access classroom data"


def test_logout_clears_session(client):
    _login(client, "parent")
    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_checkin_checkout_flow(client, world):
    _login(client, "teacher")

    resp = client.post("/api/attendance/checkin", json={"child_id": 10, "notes": "happy"})
    assert resp.status_code == 201
    attendance_id = resp.get_json()["data"]["attendance_id"]

    again = client.post("/api/attendance/checkin", json={"child_id": 10})
    assert again.status_code == 400

    out = client.put(f"/api/attendance/{attendance_id}/checkout", json={})
    assert out.status_code == 200
    assert out.get_json()["data"]["check_out"] is not None

    today = client.get("/api/attendance/today").get_json()
    assert today["count"] == 1


def test_generate_and_pay_invoice(client, world):
    world.attendance.add(make_record(1, child_id=10, day=date(2026, 3, 2), minutes=480))
    world.attendance.add(make_record(2, child_id=10, day=date(2026, 3, 3), minutes=300))

    _login(client, "admin")
    resp = client.post(
        "/api/payments/generate",
        json={"period_start": "2026-03-01", "period_end": "2026-03-31", "due_date": "2026-04-15"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["count"] == 1
    invoice = body["data"][0]
    assert invoice["invoice_number"] == "INV-000001"
    assert invoice["total_amount"] == "192.50"
    assert invoice["billing_period"] == {"start_date": "2026-03-01", "end_date": "2026-03-31", "month": 3, "year": 2026}

    _login(client, "parent")
    paid = client.post(f"/api/payments/{invoice['invoice_id']}/pay", json={"payment_method": "card"})
    assert paid.status_code == 200
    assert paid.get_json()["data"]["status"] == "paid"

    twice = client.post(f"/api/payments/{invoice['invoice_id']}/pay", json={"payment_method": "card"})
    assert twice.status_code == 409

    unread = client.get("/api/notifications/unread-count").get_json()["data"]["unread"]
    assert unread == 1


def test_invalid_period_is_400(client):
    _login(client, "admin")
    resp = client.post("/api/payments/generate", json={"period_start": "2026-03-31", "period_end": "2026-03-01"})
    assert resp.status_code == 400


def test_csv_export(client, world):
    world.attendance.add(make_record(1, child_id=11, day=date(2026, 3, 2), minutes=60))
    _login(client, "admin")
    client.post("/api/payments/generate", json={"period_start": "2026-03-01", "period_end": "2026-03-31"})

    resp = client.get("/api/payments/export.csv?start=2026-03-01&end=2026-03-31")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "INV-000001" in resp.get_data(as_text=True)


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_unexpected_errors_are_500(client, world, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(world.children, "list", boom)
    _login(client, "admin")

    resp = client.get("/api/children")
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Internal server error"}


def test_malformed_child_id_is_400(client):
    _login(client, "admin")
    resp = client.post(
        "/api/payments/generate",
        json={"period_start": "2026-03-01", "period_end": "2026-03-31", "child_id": "abc"},
    )
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "child_id must be an integer"}

    _login(client, "teacher")
    missing = client.post("/api/attendance/checkin", json={})
    assert missing.status_code == 400
    assert missing.get_json()["message"] == "child_id is required"


def test_activity_flow_over_http(client, world):
    _login(client, "teacher")
    resp = client.post(
        "/api/activities",
        json={
            "title": "Sing-along",
            "type": "musical",
            "date": "2026-03-02",
            "participants": [{"child_id": 10, "mood": "excited"}],
        },
    )
    assert resp.status_code == 201, resp.get_json()
    activity = resp.get_json()["data"]
    assert activity["classroom_id"] == 1
    assert activity["participants"] == [{"child_id": 10, "observations": None, "mood": "excited"}]

    observed = client.post(
        f"/api/activities/{activity['activity_id']}/observations",
        json={"child_id": 10, "observations": "Knew every word"},
    )
    assert observed.status_code == 200
    assert observed.get_json()["data"]["participants"][0]["observations"] == "Knew every word"

    _login(client, "parent")
    mine = client.get("/api/children/10/activities").get_json()
    assert mine["count"] == 1
    assert client.get(f"/api/activities/{activity['activity_id']}").status_code == 403

    _login(client, "teacher")
    deleted = client.delete(f"/api/activities/{activity['activity_id']}")
    assert deleted.get_json() == {"success": True, "message": "Activity deleted"}


def test_child_notes_over_http(client):
    _login(client, "teacher")
    resp = client.post("/api/employee/child-notes", json={"child_id": 12, "note": "Not in my class"})
    assert resp.status_code == 403

    resp = client.post("/api/employee/child-notes", json={"child_id": 10, "note": "Shared toys", "category": "social"})
    assert resp.status_code == 201
    notes = client.get("/api/employee/child-notes?child_id=10").get_json()
    assert notes["count"] == 1
    assert notes["data"][0]["category"] == "social"


def test_dashboard_and_reports(client, world):
    world.attendance.add(make_record(1, child_id=10, day=date(2026, 3, 2), minutes=240))
    _login(client, "admin")

    stats = client.get("/api/admin/dashboard").get_json()["data"]
    assert stats["total_children"] == 3
    assert stats["total_parents"] == 2

    report = client.get("/api/admin/reports/attendance?start=2026-03-01&end=2026-03-31").get_json()
    assert report["report_type"] == "attendance"
    assert report["data"] == [{"child_id": 10, "child_name": "Kid10 Nguyen", "total_days": 1, "average_duration": 240}]

    unknown = client.get("/api/admin/reports/weather?start=2026-03-01&end=2026-03-31")
    assert unknown.status_code == 400
    assert unknown.get_json()["success"] is False

    _login(client, "parent")
    assert client.get("/api/admin/dashboard").status_code == 403
