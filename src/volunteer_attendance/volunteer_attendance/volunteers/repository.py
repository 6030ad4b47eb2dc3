from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import VolunteerStatus
from .model import Volunteer


class VolunteerRepository(Protocol):
    """Directory interface.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, volunteer_id: str) -> Optional[Volunteer]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Volunteer]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Volunteer]:
        raise NotImplementedError

    def create(self, volunteer: Volunteer) -> None:
        raise NotImplementedError

    def update(self, volunteer: Volunteer) -> bool:
        raise NotImplementedError

    def set_qr_code_data(self, volunteer_id: str, qr_code_data: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, volunteer_id: str) -> bool:
        """Delete the volunteer and their attendance records; activity rows are kept."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def count_by_status(self, status: VolunteerStatus) -> int:
        raise NotImplementedError
