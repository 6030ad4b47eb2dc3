from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an operator account (admin, manager or scanner).

    Note: plain data object (no DB access code).
    """

    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        # password_hash never leaves the service
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
