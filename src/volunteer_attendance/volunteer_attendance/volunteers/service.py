from __future__ import annotations

import logging
import uuid
import zipfile
from dataclasses import replace
from pathlib import PurePath
from typing import IO, Callable, Optional, Sequence

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_email, require_enum, require_non_empty
from ..core.constants import QR_DEFAULT_BORDER, QR_DEFAULT_BOX_SIZE, VOLUNTEER_RECENT_ATTENDANCE
from ..core.enums import VolunteerStatus
from ..core.exceptions import NotFoundError, ValidationError
from . import qr
from .model import ImportResult, Volunteer, VolunteerChanges
from .repository import VolunteerRepository

logger = logging.getLogger(__name__)

IMPORT_REQUIRED_COLUMNS = ("name", "email")
IMPORT_OPTIONAL_COLUMNS = ("phone", "address", "skills", "availability", "status")

EMAIL_IN_USE = "Email already in use"


class VolunteerService:
    """Use case: manage the volunteer directory and their QR badges."""

    def __init__(
        self,
        volunteers: VolunteerRepository,
        attendance=None,
        *,
        clock: Callable[[], object] = now_utc,
        qr_box_size: int = QR_DEFAULT_BOX_SIZE,
        qr_border: int = QR_DEFAULT_BORDER,
    ):
        self._volunteers = volunteers
        self._attendance = attendance
        self._clock = clock
        self._qr_box_size = int(qr_box_size)
        self._qr_border = int(qr_border)

    def list_volunteers(self) -> Sequence[Volunteer]:
        return self._volunteers.list_all()

    def get_volunteer(self, volunteer_id: str) -> Volunteer:
        volunteer = self._volunteers.get_by_id(volunteer_id)
        if not volunteer:
            raise NotFoundError("Volunteer not found")
        return volunteer

    def get_volunteer_detail(self, volunteer_id: str) -> dict:
        """Volunteer plus their most recent attendance records."""
        volunteer = self.get_volunteer(volunteer_id)
        data = volunteer.to_dict()
        records = []
        if self._attendance is not None:
            records = self._attendance.list_records(volunteer_id=volunteer_id, limit=VOLUNTEER_RECENT_ATTENDANCE)
        data["attendances"] = [r.to_dict() for r in records]
        return data

    def create_volunteer(
        self,
        *,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        skills: Optional[str] = None,
        availability: Optional[str] = None,
        status: Optional[str] = None,
        acting_user_id: Optional[str] = None,
    ) -> Volunteer:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        volunteer_status = require_enum(VolunteerStatus, status or VolunteerStatus.ACTIVE.value, "Status")

        if self._volunteers.get_by_email(email):
            raise ValidationError(EMAIL_IN_USE)

        now = self._clock()
        volunteer = Volunteer(
            volunteer_id=str(uuid.uuid4()),
            name=name,
            email=email,
            status=volunteer_status,
            phone=optional_text(phone),
            address=optional_text(address),
            skills=optional_text(skills),
            availability=optional_text(availability),
            created_at=now,
            updated_at=now,
            created_by_id=acting_user_id,
            updated_by_id=acting_user_id,
        )
        self._volunteers.create(volunteer)
        logger.info("volunteer created: %s (%s)", volunteer.volunteer_id, email)
        return volunteer

    def update_volunteer(
        self,
        volunteer_id: str,
        changes: VolunteerChanges,
        *,
        acting_user_id: Optional[str] = None,
    ) -> Volunteer:
        current = self.get_volunteer(volunteer_id)

        name = require_non_empty(changes.name, "Name") if changes.name is not None else current.name
        email = require_email(changes.email) if changes.email is not None else current.email

        if email != current.email:
            other = self._volunteers.get_by_email(email)
            if other and other.volunteer_id != volunteer_id:
                raise ValidationError(EMAIL_IN_USE)

        def pick(new: Optional[str], old: Optional[str]) -> Optional[str]:
            return optional_text(new) if new is not None else old

        updated = replace(
            current,
            name=name,
            email=email,
            phone=pick(changes.phone, current.phone),
            address=pick(changes.address, current.address),
            skills=pick(changes.skills, current.skills),
            availability=pick(changes.availability, current.availability),
            status=changes.status or current.status,
            updated_at=self._clock(),
            updated_by_id=acting_user_id,
        )
        if not self._volunteers.update(updated):
            raise NotFoundError("Volunteer not found")
        return updated

    def delete_volunteer(self, volunteer_id: str) -> None:
        self.get_volunteer(volunteer_id)
        if not self._volunteers.delete_by_id(volunteer_id):
            raise NotFoundError("Volunteer not found")
        logger.info("volunteer deleted: %s", volunteer_id)

    def generate_qr(self, volunteer_id: str) -> dict:
        """Issue a fresh QR payload, remember it on the volunteer, return payload + image."""
        volunteer = self.get_volunteer(volunteer_id)
        payload = qr.build_payload(volunteer_id=volunteer.volunteer_id, name=volunteer.name, issued_at=self._clock())
        png = qr.render_png(payload, box_size=self._qr_box_size, border=self._qr_border)
        self._volunteers.set_qr_code_data(volunteer_id, payload)
        return {"qrCode": qr.to_data_url(png), "qrData": payload}

    def qr_png(self, volunteer_id: str) -> bytes:
        volunteer = self.get_volunteer(volunteer_id)
        payload = volunteer.qr_code_data or qr.build_payload(
            volunteer_id=volunteer.volunteer_id, name=volunteer.name, issued_at=self._clock()
        )
        return qr.render_png(payload, box_size=self._qr_box_size, border=self._qr_border)

    def import_volunteers(self, stream: IO[bytes], filename: str, *, acting_user_id: Optional[str] = None) -> ImportResult:
        """Bulk-create volunteers from a CSV or Excel sheet.

        Rows whose email already exists are skipped; other invalid rows are
        reported with their 1-based sheet row number (header is row 1).
        """
        frame = _read_sheet(stream, filename)

        created = 0
        skipped = 0
        errors: list[dict] = []
        for index, row in enumerate(frame.to_dict(orient="records"), start=2):
            try:
                self.create_volunteer(
                    name=row.get("name", ""),
                    email=row.get("email", ""),
                    phone=row.get("phone"),
                    address=row.get("address"),
                    skills=row.get("skills"),
                    availability=row.get("availability"),
                    status=optional_text(row.get("status")),
                    acting_user_id=acting_user_id,
                )
                created += 1
            except ValidationError as e:
                if str(e) == EMAIL_IN_USE:
                    skipped += 1
                else:
                    errors.append({"row": index, "message": str(e)})

        logger.info("volunteer import %s: created=%s skipped=%s errors=%s", filename, created, skipped, len(errors))
        return ImportResult(created=created, skipped=skipped, errors=errors)


def _read_sheet(stream: IO[bytes], filename: str) -> pd.DataFrame:
    suffix = PurePath(filename or "").suffix.lower()
    try:
        if suffix == ".csv":
            frame = pd.read_csv(stream, dtype=str)
        elif suffix == ".xlsx":
            frame = pd.read_excel(stream, dtype=str, engine="openpyxl")
        else:
            raise ValidationError("Unsupported file type (expected .csv or .xlsx)")
    except ValidationError:
        raise
    except (ValueError, pd.errors.ParserError, zipfile.BadZipFile, InvalidFileException) as e:
        raise ValidationError(f"Could not read spreadsheet: {e}")

    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in IMPORT_REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValidationError(f"Missing required column(s): {', '.join(missing)}")

    keep = [c for c in IMPORT_REQUIRED_COLUMNS + IMPORT_OPTIONAL_COLUMNS if c in frame.columns]
    return frame[keep].fillna("")
