from datetime import date, timedelta
from decimal import Decimal

import pytest

from maintrack.domain.errors import ConflictError, NotFound, ValidationError
from maintrack.services import machine_service, record_service, schedule_service
from maintrack.services.update_guard import TrackedField, as_money, diff, money_eq, normalize
from tests.conftest import NOW

LATER = NOW + timedelta(hours=1)


@pytest.fixture
def entities(make_machine, make_schedule, make_record):
    machine = make_machine()
    schedule = make_schedule(machine)
    record = make_record(machine, schedule, Cost=Decimal("12.50"), PartsUsed=["Rulman"])
    return {
        "machine": (machine_service.update_machine, machine.MachineID),
        "schedule": (schedule_service.update_schedule, schedule.ScheduleID),
        "record": (record_service.update_record, record.RecordID),
    }


# Her varlık için mevcut değerlerle aynı alanlar
SAME_FIELDS = {
    "machine": {"Location": "A-1", "Status_s": "operational", "Name": "Pres 1"},
    "schedule": {"IntervalDays": 30, "StartDate": "2025-01-01", "Priority_s": "medium"},
    "record": {"Cost": 12.5, "PartsUsed": ["Rulman"], "Type": "preventive"},
}

CHANGED_FIELDS = {
    "machine": {"Location": "B-2"},
    "schedule": {"Priority_s": "high"},
    "record": {"Notes": "Keçe değişti"},
}


@pytest.mark.parametrize("kind", ["machine", "schedule", "record"])
def test_empty_update_returns_entity_without_write(db, entities, writes, kind):
    update, pk = entities[kind]
    writes.reset()
    result = update(db, pk, {}, now=LATER)
    assert not result.changed
    assert result.entity.UpdatedAt == NOW
    assert writes.count == 0


@pytest.mark.parametrize("kind", ["machine", "schedule", "record"])
def test_equal_fields_issue_no_write(db, entities, writes, kind):
    update, pk = entities[kind]
    writes.reset()
    result = update(db, pk, SAME_FIELDS[kind], now=LATER)
    assert not result.changed
    assert result.changes == {}
    assert result.entity.UpdatedAt == NOW
    assert result.entity.Version == 1
    assert writes.count == 0


@pytest.mark.parametrize("kind", ["machine", "schedule", "record"])
@pytest.mark.parametrize("with_fields", [False, True])
def test_missing_entity_is_not_found(db, entities, kind, with_fields):
    update, _pk = entities[kind]
    fields = CHANGED_FIELDS[kind] if with_fields else {}
    with pytest.raises(NotFound):
        update(db, 9999, fields, now=LATER)


# Kayıt yoksa alanlar geçersiz olsa bile önce NotFound
@pytest.mark.parametrize("kind,fields", [
    ("machine", {"Colour": "red"}),
    ("machine", {"MachineCode": "M-001"}),
    ("machine", {"Location": None}),
    ("schedule", {"NextMaintenanceDate": "2025-06-01"}),
    ("schedule", {"IntervalDays": 0}),
    ("record", {"Status_s": "completed"}),
    ("record", {"Cost": -1}),
    ("record", {"TechnicianID": 2}),
])
def test_missing_entity_wins_over_invalid_fields(db, entities, kind, fields):
    update, _pk = entities[kind]
    with pytest.raises(NotFound):
        update(db, 9999, fields, now=LATER)


# Form yeniden gönderimi: değişmez alanlar mevcut değerle gelirse yazma yok
def test_unchanged_immutable_fields_are_a_noop(db, users, make_machine, make_schedule, make_record, writes):
    machine = make_machine()
    schedule = make_schedule(machine)
    record = make_record(machine, schedule)
    writes.reset()

    m = machine_service.update_machine(
        db, machine.MachineID, {"MachineCode": machine.MachineCode, "Location": "A-1"}, now=LATER
    )
    s = schedule_service.update_schedule(db, schedule.ScheduleID, {
        "ScheduleCode": schedule.ScheduleCode,
        "MachineID": machine.MachineID,
        "NextMaintenanceDate": schedule.NextMaintenanceDate.isoformat(),
    }, now=LATER)
    r = record_service.update_record(db, record.RecordID, {
        "RecordCode": record.RecordCode,
        "MachineID": machine.MachineID,
        "ScheduleID": schedule.ScheduleID,
        "TechnicianID": users["tech"].UserID,
        "Status_s": "pending",
        "CompletedAt": None,
    }, now=LATER)

    for result in (m, s, r):
        assert not result.changed
        assert result.entity.Version == 1
        assert result.entity.UpdatedAt == NOW
    assert writes.count == 0


def test_unchanged_immutable_field_with_real_change(db, make_machine):
    machine = make_machine()
    result = machine_service.update_machine(
        db, machine.MachineID, {"MachineCode": machine.MachineCode, "Location": "B-2"}, now=LATER
    )
    assert set(result.changes) == {"Location"}
    assert result.entity.MachineCode == machine.MachineCode


@pytest.mark.parametrize("kind", ["machine", "schedule", "record"])
def test_changed_field_is_written_with_fresh_timestamp(db, entities, writes, kind):
    update, pk = entities[kind]
    writes.reset()
    result = update(db, pk, CHANGED_FIELDS[kind], now=LATER)
    assert result.changed
    assert set(result.changes) == set(CHANGED_FIELDS[kind])
    assert result.entity.UpdatedAt == LATER
    assert result.entity.Version == 2
    assert any(s.lstrip().upper().startswith("UPDATE") for s in writes.statements)


@pytest.mark.parametrize("kind", ["machine", "schedule", "record"])
def test_stale_expected_version_conflicts(db, entities, kind):
    update, pk = entities[kind]
    update(db, pk, CHANGED_FIELDS[kind], now=LATER)
    with pytest.raises(ConflictError) as ei:
        update(db, pk, CHANGED_FIELDS[kind], now=LATER, expected_version=1)
    assert ei.value.meta == {"version": 2, "expectedVersion": 1}


def test_matching_expected_version_passes(db, entities):
    update, pk = entities["machine"]
    result = update(db, pk, {"Location": "C-3"}, now=LATER, expected_version=1)
    assert result.entity.Version == 2


# ---- Alan listesi dışındakiler reddedilir ----
@pytest.mark.parametrize("kind,fields", [
    ("machine", {"MachineCode": "X"}),
    ("machine", {"Colour": "red"}),
    ("machine", {"Location": None}),
    ("machine", {"Status_s": "broken"}),
    ("schedule", {"NextMaintenanceDate": "2025-06-01"}),
    ("schedule", {"MachineID": 2}),
    ("schedule", {"IntervalDays": 0}),
    ("record", {"Status_s": "completed"}),
    ("record", {"CompletedAt": "2025-03-10T10:00:00"}),
    ("record", {"TechnicianID": 2}),
    ("record", {"Cost": -1}),
    ("record", {"Duration": "long"}),
])
def test_invalid_fields_are_rejected(db, entities, writes, kind, fields):
    update, pk = entities[kind]
    writes.reset()
    with pytest.raises(ValidationError):
        update(db, pk, fields, now=LATER)
    assert writes.count == 0


# ---- Plan ızgarası ----
def test_interval_change_realigns_next_date_on_grid(db, make_machine, make_schedule):
    schedule = make_schedule(make_machine(), NextMaintenanceDate=date(2025, 1, 31))
    result = schedule_service.update_schedule(db, schedule.ScheduleID, {"IntervalDays": 14}, now=LATER)
    s = result.entity
    assert s.NextMaintenanceDate == date(2025, 2, 12)
    assert (s.NextMaintenanceDate - s.StartDate).days % s.IntervalDays == 0
    assert result.changes["NextMaintenanceDate"] == (date(2025, 1, 31), date(2025, 2, 12))


def test_start_change_realigns_next_date(db, make_machine, make_schedule):
    schedule = make_schedule(make_machine())
    result = schedule_service.update_schedule(
        db, schedule.ScheduleID, {"StartDate": date(2025, 2, 1)}, now=LATER
    )
    assert result.entity.NextMaintenanceDate == date(2025, 2, 1)


# ---- Saf yardımcılar ----
def test_money_equality_ignores_representation():
    assert money_eq(Decimal("12.50"), 12.5)
    assert money_eq(Decimal("12.5"), "12.50")
    assert not money_eq(None, Decimal("0"))
    assert as_money("3.005") == Decimal("3.01")


def test_diff_is_one_level_per_field():
    class Row:
        Tags = ["a", "b"]
        Name = "x"

    fields = [TrackedField("Tags"), TrackedField("Name")]
    assert diff(Row, {"Tags": ["a", "b"], "Name": "x"}, fields) == {}
    assert diff(Row, {"Tags": ["b", "a"]}, fields) == {"Tags": (["a", "b"], ["b", "a"])}


def test_normalize_rejects_unknown_and_wrong_types():
    fields = [TrackedField("Name", nullable=False)]
    with pytest.raises(ValidationError):
        normalize({"Other": 1}, fields)
    with pytest.raises(ValidationError):
        normalize({"Name": 5}, fields)
    assert normalize({"Name": "ok"}, fields) == {"Name": "ok"}
