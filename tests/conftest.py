from __future__ import annotations

from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from tests.fakes import (
    FakeClock,
    InMemoryAttendance,
    InMemoryDashboard,
    InMemoryStore,
    InMemoryUsers,
    InMemoryVolunteers,
)
from volunteer_attendance.container import wire_services
from volunteer_attendance.core.enums import Role
from volunteer_attendance.users.model import User


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(store, clock):
    return wire_services(
        conn=None,
        users_repo=InMemoryUsers(store),
        volunteers_repo=InMemoryVolunteers(store),
        attendance_repo=InMemoryAttendance(store),
        dashboard_repo=InMemoryDashboard(store),
        clock=clock,
        qr_box_size=4,
        qr_border=1,
    )


@pytest.fixture
def make_user(store, fixed_now):
    def _make(user_id: str, role: Role, *, email=None, password="secret123") -> User:
        user = User(
            user_id=user_id,
            name=f"User {user_id}",
            email=email or f"{user_id.lower()}@example.org",
            password_hash=generate_password_hash(password),
            role=role,
            created_at=fixed_now,
            updated_at=fixed_now,
        )
        store.users[user_id] = user
        return user

    return _make
