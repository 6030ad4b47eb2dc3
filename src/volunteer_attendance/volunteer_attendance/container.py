from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLedger
from .core.constants import QR_DEFAULT_BORDER, QR_DEFAULT_BOX_SIZE
from .dashboard.mysql_dashboard_repository import MySQLDashboardRepository
from .dashboard.repository import DashboardRepository
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .volunteers.mysql_volunteer_repository import MySQLVolunteerRepository
from .volunteers.repository import VolunteerRepository
from .volunteers.service import VolunteerService


@dataclass(frozen=True)
class Container:
    # None when repositories are not MySQL-backed (tests)
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    volunteers_repo: VolunteerRepository
    attendance_repo: AttendanceRepository
    dashboard_repo: DashboardRepository

    auth_service: AuthService
    user_service: UserService
    volunteer_service: VolunteerService
    attendance_ledger: AttendanceLedger
    dashboard_service: DashboardService

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    volunteers_repo: VolunteerRepository,
    attendance_repo: AttendanceRepository,
    dashboard_repo: DashboardRepository,
    clock=None,
    qr_box_size: int = QR_DEFAULT_BOX_SIZE,
    qr_border: int = QR_DEFAULT_BORDER,
) -> Container:
    clock_kw = {"clock": clock} if clock is not None else {}

    return Container(
        conn=conn,
        users_repo=users_repo,
        volunteers_repo=volunteers_repo,
        attendance_repo=attendance_repo,
        dashboard_repo=dashboard_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, **clock_kw),
        volunteer_service=VolunteerService(
            volunteers_repo,
            attendance_repo,
            qr_box_size=qr_box_size,
            qr_border=qr_border,
            **clock_kw,
        ),
        attendance_ledger=AttendanceLedger(attendance_repo, **clock_kw),
        dashboard_service=DashboardService(volunteers_repo, dashboard_repo, **clock_kw),
    )


def build_container(
    *,
    db_config: dict,
    pool_size: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    qr_box_size: int = QR_DEFAULT_BOX_SIZE,
    qr_border: int = QR_DEFAULT_BORDER,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config, pool_size=pool_size, timeout_ms=timeout_ms))

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        volunteers_repo=MySQLVolunteerRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        dashboard_repo=MySQLDashboardRepository(conn),
        qr_box_size=qr_box_size,
        qr_border=qr_border,
    )
