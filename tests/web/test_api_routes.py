from __future__ import annotations

import base64

import pytest

from src.face_access.face_access.core.enums import ActionKind
from src.face_access.face_access.main import create_app


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def _image(raw: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(raw).decode()


def test_login_me_logout(client):
    resp = _login(client, "ADMIN@demo.local", "admin123")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "admin"

    assert client.get("/api/auth/me").get_json()["user"]["email"] == "admin@demo.local"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


@pytest.mark.parametrize("email, password", [("admin@demo.local", "wrong"), ("nobody@demo.local", "x"), ("off@demo.local", "off12345")])
def test_login_rejects_bad_credentials(client, email, password):
    resp = _login(client, email, password)
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_register_then_duplicate(client, ledger):
    _login(client, "kiosk@demo.local", "kiosk123")

    first = client.post("/api/access/register", json={"imageData": _image(b"ana-face"), "type": "check_in"})
    assert first.status_code == 200
    body = first.get_json()
    assert body["employee"]["employee_id"] == 10
    assert body["auto_close_generated"] is False

    second = client.post("/api/access/register", json={"imageData": _image(b"ana-face"), "type": "check_in"})
    assert second.status_code == 409
    assert second.get_json()["last_action"] == "check_in"
    assert len(ledger.entries_for(10)) == 1


def test_register_validates_input(client):
    _login(client, "kiosk@demo.local", "kiosk123")

    assert client.post("/api/access/register", json={"imageData": _image(b"ana-face"), "type": "lunch"}).status_code == 400
    assert client.post("/api/access/register", json={"imageData": "", "type": "check_in"}).status_code == 400
    assert client.post("/api/access/register", json={"imageData": _image(b"nobody"), "type": "check_in"}).status_code == 404


def test_register_requires_login(client):
    resp = client.post("/api/access/register", json={"imageData": _image(b"ana-face"), "type": "check_in"})
    assert resp.status_code == 401


def test_admin_routes_forbid_kiosk(client):
    _login(client, "kiosk@demo.local", "kiosk123")

    assert client.patch("/api/access/update-time", json={}).status_code == 403
    assert client.get("/api/access/edit-history?accessLogId=1").status_code == 403
    assert client.get("/api/reports/employees").status_code == 403


def test_update_time_and_history(client, ledger, at):
    entry = ledger.seed(10, ActionKind.CHECK_IN, at(2024, 1, 2, 9, 0))
    _login(client, "admin@demo.local", "admin123")

    resp = client.patch(
        "/api/access/update-time",
        json={"logId": entry.entry_id, "newTime": "08:45", "reason": "Kiosk offline during the morning shift"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["new_timestamp"] == at(2024, 1, 2, 8, 45).isoformat()

    history = client.get(f"/api/access/edit-history?accessLogId={entry.entry_id}").get_json()["history"]
    assert len(history) == 1
    assert history[0]["admin_name"] == "Admin Demo"


def test_update_time_reports_field_errors(client, ledger, at):
    entry = ledger.seed(10, ActionKind.CHECK_IN, at(2024, 1, 2, 9, 0))
    _login(client, "admin@demo.local", "admin123")

    resp = client.patch("/api/access/update-time", json={"logId": entry.entry_id, "newTime": "9", "reason": "short"})

    assert resp.status_code == 400
    assert set(resp.get_json()["errors"]) == {"new_time", "reason"}


def test_update_time_other_org_is_404(client, ledger, at):
    entry = ledger.seed(20, ActionKind.CHECK_IN, at(2024, 1, 2, 9, 0))
    _login(client, "admin@demo.local", "admin123")

    resp = client.patch(
        "/api/access/update-time",
        json={"logId": entry.entry_id, "newTime": "08:45", "reason": "Kiosk offline during the morning shift"},
    )
    assert resp.status_code == 404


def test_update_time_storage_error_is_generic_500(client, ledger, audit, at):
    entry = ledger.seed(10, ActionKind.CHECK_IN, at(2024, 1, 2, 9, 0))
    audit.fail_update = True
    _login(client, "admin@demo.local", "admin123")

    resp = client.patch(
        "/api/access/update-time",
        json={"logId": entry.entry_id, "newTime": "08:45", "reason": "Kiosk offline during the morning shift"},
    )
    assert resp.status_code == 500
    assert "affected no rows" not in resp.get_json()["message"]


def test_reports_endpoints(client, ledger, at):
    ledger.seed(10, ActionKind.CHECK_IN, at(2024, 1, 2, 8, 0))
    ledger.seed(10, ActionKind.CHECK_OUT, at(2024, 1, 2, 16, 0))
    _login(client, "admin@demo.local", "admin123")

    report = client.get("/api/reports/access-logs?startDate=2024-01-02&endDate=2024-01-02").get_json()
    assert report["stats"]["total"] == 2
    assert report["summary"][0]["total_hours"] == "08:00"

    assert client.get("/api/reports/access-logs?startDate=2024-01-02").status_code == 400
    assert client.get("/api/reports/access-logs?startDate=2024-01-03&endDate=2024-01-02").status_code == 400

    employees = client.get("/api/reports/employees").get_json()["employees"]
    assert [e["employee_id"] for e in employees] == [10, 11]


def test_last_logs(client, ledger, at):
    for hour in range(8, 16):
        ledger.seed(11, ActionKind.CHECK_IN if hour % 2 == 0 else ActionKind.CHECK_OUT, at(2024, 1, 2, hour, 0))
    _login(client, "kiosk@demo.local", "kiosk123")

    assert len(client.get("/api/access/last-logs").get_json()["logs"]) == 5
    assert len(client.get("/api/access/last-logs?limit=2").get_json()["logs"]) == 2


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"newTime": 845, "reason": "Kiosk offline during the morning shift"}, "newTime"),
        ({"newTime": "08:45", "reason": 1234567890123}, "reason"),
    ],
)
def test_update_time_rejects_non_string_fields(client, ledger, audit, at, payload, field):
    entry = ledger.seed(10, ActionKind.CHECK_IN, at(2024, 1, 2, 9, 0))
    _login(client, "admin@demo.local", "admin123")

    resp = client.patch("/api/access/update-time", json={"logId": entry.entry_id, **payload})

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == {"new_time" if field == "newTime" else "reason": "type:string"}
    assert audit.records == []


def test_register_rejects_non_string_image(client, ledger):
    _login(client, "kiosk@demo.local", "kiosk123")

    resp = client.post("/api/access/register", json={"imageData": 123, "type": "check_in"})

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == {"imageData": "type:string"}
    assert ledger.entries == {}


def test_login_rejects_non_string_email(client):
    resp = client.post("/api/auth/login", json={"email": 12345, "password": "admin123"})
    assert resp.status_code == 400
