from __future__ import annotations

import io
import json

import pandas as pd
import pytest

from tests.fakes import InMemoryAttendance, InMemoryVolunteers
from volunteer_attendance.attendance.service import AttendanceLedger
from volunteer_attendance.core.enums import VolunteerStatus
from volunteer_attendance.core.exceptions import NotFoundError, ValidationError
from volunteer_attendance.volunteers import qr as qr_module
from volunteer_attendance.volunteers.model import VolunteerChanges
from volunteer_attendance.volunteers.service import VolunteerService


@pytest.fixture
def service(store, clock) -> VolunteerService:
    return VolunteerService(InMemoryVolunteers(store), InMemoryAttendance(store), clock=clock, qr_box_size=4)


def test_create_volunteer_defaults_to_active(service, store, fixed_now):
    v = service.create_volunteer(name="  Ada Lovelace ", email="Ada@Example.org", skills="math", acting_user_id="U1")

    assert v.name == "Ada Lovelace"
    assert v.email == "ada@example.org"
    assert v.status == VolunteerStatus.ACTIVE
    assert v.created_at == fixed_now
    assert v.created_by_id == "U1"
    assert store.volunteers[v.volunteer_id] == v


def test_create_requires_name_and_unique_email(service):
    with pytest.raises(ValidationError, match="Name is required"):
        service.create_volunteer(name=" ", email="a@example.org")

    service.create_volunteer(name="Ada", email="a@example.org")
    with pytest.raises(ValidationError, match="Email already in use"):
        service.create_volunteer(name="Other Ada", email="A@example.org")


def test_create_rejects_unknown_status(service):
    with pytest.raises(ValidationError, match="Status must be one of"):
        service.create_volunteer(name="Ada", email="a@example.org", status="retired")


def test_update_is_partial(service, clock):
    v = service.create_volunteer(name="Ada", email="a@example.org", phone="123")
    clock.advance(hours=1)

    updated = service.update_volunteer(
        v.volunteer_id,
        VolunteerChanges(status=VolunteerStatus.INACTIVE, address="1 Main St"),
        acting_user_id="U2",
    )

    assert updated.name == "Ada"
    assert updated.phone == "123"
    assert updated.address == "1 Main St"
    assert updated.status == VolunteerStatus.INACTIVE
    assert updated.updated_at > v.updated_at
    assert updated.updated_by_id == "U2"


def test_update_rejects_email_taken_by_someone_else(service):
    service.create_volunteer(name="Ada", email="a@example.org")
    grace = service.create_volunteer(name="Grace", email="g@example.org")

    with pytest.raises(ValidationError, match="Email already in use"):
        service.update_volunteer(grace.volunteer_id, VolunteerChanges(email="a@example.org"))

    # keeping one's own email is fine
    service.update_volunteer(grace.volunteer_id, VolunteerChanges(email="G@example.org"))


def test_missing_volunteer_is_not_found(service):
    with pytest.raises(NotFoundError, match="Volunteer not found"):
        service.get_volunteer("nope")
    with pytest.raises(NotFoundError):
        service.update_volunteer("nope", VolunteerChanges(name="x"))
    with pytest.raises(NotFoundError):
        service.delete_volunteer("nope")
    with pytest.raises(NotFoundError):
        service.generate_qr("nope")


def test_detail_includes_recent_attendance(service, store, clock):
    v = service.create_volunteer(name="Ada", email="a@example.org")
    ledger = AttendanceLedger(InMemoryAttendance(store), clock=clock)
    for _ in range(24):
        ledger.record_scan(json.dumps({"id": v.volunteer_id}), "U1")
        clock.advance(minutes=30)

    detail = service.get_volunteer_detail(v.volunteer_id)

    assert detail["id"] == v.volunteer_id
    assert len(detail["attendances"]) == 10
    assert detail["attendances"][0]["volunteerName"] == "Ada"


def test_delete_removes_attendance_but_keeps_activity(service, store, clock):
    v = service.create_volunteer(name="Ada", email="a@example.org")
    AttendanceLedger(InMemoryAttendance(store), clock=clock).record_scan(json.dumps({"id": v.volunteer_id}), "U1")

    service.delete_volunteer(v.volunteer_id)

    assert v.volunteer_id not in store.volunteers
    assert store.records_for(v.volunteer_id) == []
    assert len(store.activity) == 1


def test_generate_qr_stores_payload(service, store, fixed_now):
    v = service.create_volunteer(name="Ada", email="a@example.org")

    qr = service.generate_qr(v.volunteer_id)

    payload = json.loads(qr["qrData"])
    assert payload == {"id": v.volunteer_id, "name": "Ada", "timestamp": "2026-03-10T09:00:00.000Z"}
    assert qr["qrCode"].startswith("data:image/png;base64,")
    assert store.volunteers[v.volunteer_id].qr_code_data == qr["qrData"]


def test_qr_png_reuses_stored_payload(service, monkeypatch):
    v = service.create_volunteer(name="Ada", email="a@example.org")
    issued = service.generate_qr(v.volunteer_id)["qrData"]

    seen = []

    monkeypatch.setattr(qr_module, "render_png", lambda data, **kw: seen.append(data) or b"\x89PNG")

    assert service.qr_png(v.volunteer_id) == b"\x89PNG"
    assert seen == [issued]


def test_qr_png_is_a_png(service):
    v = service.create_volunteer(name="Ada", email="a@example.org")
    assert service.qr_png(v.volunteer_id).startswith(b"\x89PNG\r\n\x1a\n")


def test_import_csv_reports_created_skipped_and_errors(service, store):
    service.create_volunteer(name="Existing", email="taken@example.org")
    csv_bytes = (
        "Name,Email,Phone,Skills,Status\n"
        "Ada,ada@example.org,123,math,active\n"
        "Dup,taken@example.org,,,\n"
        ",nobody@example.org,,,\n"
        "Grace,grace@example.org,,,pending\n"
        "Bad,not-an-email,,,\n"
        "Eve,eve@example.org,,,retired\n"
    ).encode("utf-8")

    result = service.import_volunteers(io.BytesIO(csv_bytes), "volunteers.csv", acting_user_id="U1")

    assert result.created == 2
    assert result.skipped == 1
    assert [e["row"] for e in result.errors] == [4, 6, 7]
    assert result.errors[0]["message"] == "Name is required"

    by_email = {v.email: v for v in store.volunteers.values()}
    assert by_email["ada@example.org"].phone == "123"
    assert by_email["grace@example.org"].status == VolunteerStatus.PENDING
    assert by_email["ada@example.org"].created_by_id == "U1"


def test_import_xlsx(service, store):
    frame = pd.DataFrame(
        [
            {"name": "Ada", "email": "ada@example.org", "availability": "weekends"},
            {"name": "Grace", "email": "grace@example.org", "availability": None},
        ]
    )
    buf = io.BytesIO()
    frame.to_excel(buf, index=False, engine="openpyxl")
    buf.seek(0)

    result = service.import_volunteers(buf, "people.xlsx")

    assert result.to_dict() == {"created": 2, "skipped": 0, "errors": []}
    by_email = {v.email: v for v in store.volunteers.values()}
    assert by_email["ada@example.org"].availability == "weekends"
    assert by_email["grace@example.org"].availability is None


def test_import_requires_name_and_email_columns(service):
    with pytest.raises(ValidationError, match="Missing required column"):
        service.import_volunteers(io.BytesIO(b"name,phone\nAda,1\n"), "x.csv")


def test_import_rejects_other_file_types(service):
    with pytest.raises(ValidationError, match="Unsupported file type"):
        service.import_volunteers(io.BytesIO(b"{}"), "x.json")


def test_import_of_csv_named_xlsx_is_a_validation_error(service, store):
    with pytest.raises(ValidationError, match="Could not read spreadsheet"):
        service.import_volunteers(io.BytesIO(b"name,email\nAda,ada@example.org\n"), "people.xlsx")
    assert store.volunteers == {}


def test_import_rejects_legacy_xls(service):
    ole2_header = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504
    with pytest.raises(ValidationError, match="Unsupported file type"):
        service.import_volunteers(io.BytesIO(ole2_header), "people.xls")
