from datetime import date

import pytest

from maintrack.core.security import create_access_token
from tests.conftest import TODAY

MACHINE = {"MachineCode": "M-100", "Name": "Pres", "Type": "press", "Location": "A-1"}


@pytest.fixture
def machine_id(client):
    r = client.post("/machines", json=MACHINE)
    assert r.status_code == 201, r.text
    return r.json()["data"]["MachineID"]


@pytest.fixture
def schedule_id(client, machine_id):
    r = client.post("/schedules", json={
        "ScheduleCode": "S-100", "MachineID": machine_id, "Type": "preventive",
        "IntervalDays": 30, "StartDate": "2025-01-01",
    })
    assert r.status_code == 201, r.text
    return r.json()["data"]["ScheduleID"]


@pytest.fixture
def record_id(client, machine_id, schedule_id):
    r = client.post("/records", json={
        "RecordCode": "R-100", "MachineID": machine_id, "ScheduleID": schedule_id,
        "MaintenanceDate": TODAY.isoformat(), "Type": "preventive", "WorkDescription": "Yağlama",
        "Cost": 125.5,
    })
    assert r.status_code == 201, r.text
    return r.json()["data"]["RecordID"]


# ---- Sağlık ----
def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")
    assert "charset=utf-8" in r.headers["content-type"]
    assert r.json()["ok"] is True


def test_db_ping(client):
    assert client.get("/db-ping").json()["data"] == {"db": "ok", "select1": 1}


# ---- Kimlik ----
def test_missing_token_is_401_envelope(raw_client, users):
    r = raw_client.get("/machines")
    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "Authentication required"}


def test_bearer_token_resolves_user(raw_client, users):
    token = create_access_token(users["tech"].Username, users["tech"].Role)
    r = raw_client.get("/machines", headers={"Authorization": f"Bearer  {token}"})
    assert r.status_code == 200
    assert r.json()["meta"]["count"] == 0


def test_viewer_cannot_write(client, acting, users):
    acting.user = users["viewer"]
    r = client.post("/machines", json=MACHINE)
    assert r.status_code == 403
    assert r.json()["ok"] is False


# ---- Makine ----
def test_machine_roundtrip_and_history(client, machine_id):
    r = client.get(f"/machines/{machine_id}")
    assert r.json()["data"]["Status_s"] == "operational"
    assert r.json()["data"]["Version"] == 1

    r = client.put(f"/machines/{machine_id}", json={"Location": "B-2"})
    body = r.json()
    assert body["data"]["Location"] == "B-2"
    assert body["meta"] == {"changed": True, "changedFields": ["Location"]}

    r = client.get(f"/machines/{machine_id}/history")
    types = [h["ChangeType"] for h in r.json()["data"]]
    assert types == ["location_changed", "created"]


def test_noop_put_reports_unchanged(client, machine_id):
    r = client.put(f"/machines/{machine_id}", json={"Status_s": "operational", "Location": "A-1"})
    assert r.status_code == 200
    assert r.json()["meta"] == {"changed": False, "changedFields": []}
    history = client.get(f"/machines/{machine_id}/history").json()["data"]
    assert [h["ChangeType"] for h in history] == ["created"]


def test_stale_version_is_409(client, machine_id):
    client.put(f"/machines/{machine_id}", json={"Location": "B-2"})
    r = client.put(f"/machines/{machine_id}?expectedVersion=1", json={"Location": "C-3"})
    assert r.status_code == 409
    assert r.json()["meta"]["expectedVersion"] == 1


def test_machine_code_is_immutable(client, machine_id):
    r = client.put(f"/machines/{machine_id}", json={"MachineCode": "M-999"})
    assert r.status_code == 422


def test_resubmitted_form_is_unchanged(client, machine_id):
    r = client.put(f"/machines/{machine_id}", json=MACHINE)
    assert r.status_code == 200
    assert r.json()["meta"] == {"changed": False, "changedFields": []}


def test_update_of_unknown_machine_is_404_even_with_bad_fields(client, users):
    r = client.put("/machines/9999", json={"MachineCode": "M-999"})
    assert r.status_code == 404


def test_duplicate_machine_code(client, machine_id):
    r = client.post("/machines", json=MACHINE)
    assert r.status_code == 409


def test_unknown_machine_is_404(client, users):
    r = client.get("/machines/77")
    assert r.status_code == 404
    assert r.json() == {"ok": False, "error": "Machine not found", "meta": {"entity": "Machine", "id": 77}}


def test_delete_machine(client, machine_id, record_id):
    assert client.delete(f"/machines/{machine_id}").json()["data"]["deleted"] is True
    assert client.get(f"/records/{record_id}").status_code == 404


# ---- Plan ----
def test_upcoming_and_overdue_carry_state(client, machine_id, schedule_id):
    # 2025-01-01 vadeli plan bugüne (2025-03-10) göre gecikmiş
    overdue = client.get("/schedules/overdue").json()
    assert [s["ScheduleID"] for s in overdue["data"]] == [schedule_id]
    assert overdue["data"][0]["state"] == "overdue"
    assert overdue["data"][0]["machine"]["MachineCode"] == "M-100"

    upcoming = client.get("/schedules/upcoming", params={"days": 30}).json()
    assert upcoming["data"] == []
    assert upcoming["meta"]["days"] == 30


@pytest.mark.parametrize("days", [0, 366])
def test_upcoming_horizon_validation(client, users, days):
    r = client.get("/schedules/upcoming", params={"days": days})
    assert r.status_code == 422
    assert r.json()["ok"] is False


def test_next_date_not_writable(client, schedule_id):
    r = client.put(f"/schedules/{schedule_id}", json={"NextMaintenanceDate": "2025-05-01"})
    assert r.status_code == 422


def test_deactivate_schedule(client, schedule_id):
    r = client.post(f"/schedules/{schedule_id}/deactivate")
    assert r.json()["data"]["IsActive"] is False
    assert client.get("/schedules").json()["data"] == []


# ---- Kayıt + iş akışı ----
def test_record_defaults_to_acting_technician(client, acting, users, machine_id):
    acting.user = users["tech"]
    r = client.post("/records", json={
        "RecordCode": "R-1", "MachineID": machine_id, "MaintenanceDate": "2025-03-10",
        "Type": "repair", "WorkDescription": "Kayış değişimi",
    })
    data = r.json()["data"]
    assert data["TechnicianID"] == users["tech"].UserID
    assert data["Status_s"] == "pending"
    mine = client.get("/records/mine").json()
    assert [x["RecordID"] for x in mine["data"]] == [data["RecordID"]]


def test_cost_is_plain_number(client, record_id):
    assert client.get(f"/records/{record_id}").json()["data"]["Cost"] == 125.5


def test_full_workflow_over_http(client, acting, users, record_id, schedule_id):
    acting.user = users["tech"]
    r = client.post(f"/records/{record_id}/start")
    assert r.json()["meta"]["action"] == "start_work"

    r = client.post(f"/records/{record_id}/complete")
    body = r.json()
    assert body["data"]["Status_s"] == "completed"
    assert body["meta"]["previousStatus"] == "in_progress"
    assert body["meta"]["technicianId"] == users["tech"].UserID
    assert body["meta"]["timestamp"] == "2025-03-10T09:00:00"
    assert body["meta"]["nextMaintenanceDate"] == "2025-01-31"
    assert body["data"]["CompletedAt"] == "2025-03-10T09:00:00"

    schedule = client.get(f"/schedules/{schedule_id}").json()["data"]
    assert schedule["NextMaintenanceDate"] == "2025-01-31"


def test_invalid_transition_is_409(client, record_id):
    r = client.post(f"/records/{record_id}/complete")
    assert r.status_code == 409
    body = r.json()
    assert body["ok"] is False
    assert body["meta"]["from"] == "pending"
    assert body["meta"]["event"] == "complete"


def test_patch_status_goes_through_table(client, record_id):
    r = client.patch(f"/records/{record_id}/status", json={"status": "completed"})
    assert r.status_code == 409

    r = client.patch(f"/records/{record_id}/status", json={"status": "cancelled"})
    assert r.status_code == 200
    assert r.json()["meta"]["action"] == "cancel_work"

    r = client.patch(f"/records/{record_id}/status", json={"status": "cancelled"})
    assert r.status_code == 200
    assert r.json()["meta"]["changed"] is False


def test_record_status_not_updatable_via_put(client, record_id):
    r = client.put(f"/records/{record_id}", json={"Status_s": "completed"})
    assert r.status_code == 422


# ---- Pano ----
def test_dashboard_stats_empty(client, users):
    r = client.get("/dashboard/stats")
    assert r.json()["data"] == {
        "totalMachines": 0, "pendingMaintenance": 0, "completedThisMonth": 0, "overdue": 0,
    }


def test_dashboard_calendar(client, schedule_id):
    r = client.get("/dashboard/calendar/2025/1")
    assert r.json()["data"] == [{"date": "2025-01-01", "maintenanceCount": 1, "status": "overdue"}]
    assert client.get("/dashboard/calendar/2025/13").status_code == 422
