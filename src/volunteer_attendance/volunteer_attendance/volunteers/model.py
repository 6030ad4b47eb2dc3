from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import VolunteerStatus


@dataclass(frozen=True)
class Volunteer:
    """Domain entity: a volunteer in the directory.

    Note: plain data object; the attendance ledger only reads it.
    """

    volunteer_id: str
    name: str
    email: str
    status: VolunteerStatus
    phone: Optional[str] = None
    address: Optional[str] = None
    skills: Optional[str] = None
    availability: Optional[str] = None
    qr_code_data: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by_id: Optional[str] = None
    updated_by_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.volunteer_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "skills": self.skills,
            "availability": self.availability,
            "status": self.status.value,
            "qrCodeData": self.qr_code_data,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class VolunteerChanges:
    """Partial update; ``None`` means "leave unchanged"."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    skills: Optional[str] = None
    availability: Optional[str] = None
    status: Optional[VolunteerStatus] = None


@dataclass(frozen=True)
class ImportResult:
    created: int
    skipped: int
    errors: list[dict]

    def to_dict(self) -> dict:
        return {"created": self.created, "skipped": self.skipped, "errors": list(self.errors)}
