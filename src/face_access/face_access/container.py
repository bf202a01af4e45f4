from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceLedger
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditTrailService
from .common.clock import OrgClock
from .core.constants import DEFAULT_AUTO_CLOSE_TIME, DEFAULT_ORG_UTC_OFFSET_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeDirectory
from .identity.provider import FaceIdentityProvider
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    clock: OrgClock

    users_repo: UserRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceLedger
    audit_repo: AuditRepository

    auth_service: AuthService
    employee_directory: EmployeeDirectory
    attendance_service: AttendanceService
    audit_service: AuditTrailService
    report_service: ReportService


def wire_container(
    *,
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceLedger,
    audit_repo: AuditRepository,
    clock: Optional[OrgClock] = None,
    auto_close_time: time = DEFAULT_AUTO_CLOSE_TIME,
    edit_auto_generated_only: bool = False,
    face_provider: Optional[FaceIdentityProvider] = None,
) -> Container:
    """Build services on top of the given repositories (MySQL or in-memory)."""
    clock = clock or OrgClock()

    employee_directory = EmployeeDirectory(employees_repo, face_provider)
    attendance_service = AttendanceService(
        attendance_repo,
        employee_directory,
        clock=clock,
        auto_close_time=auto_close_time,
    )
    audit_service = AuditTrailService(
        attendance_repo,
        audit_repo,
        clock=clock,
        edit_auto_generated_only=edit_auto_generated_only,
    )

    return Container(
        clock=clock,
        users_repo=users_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        auth_service=AuthService(users_repo),
        employee_directory=employee_directory,
        attendance_service=attendance_service,
        audit_service=audit_service,
        report_service=ReportService(attendance_repo, employee_directory, clock=clock),
    )


def build_container(
    *,
    db_config: dict,
    org_utc_offset_hours: float = DEFAULT_ORG_UTC_OFFSET_HOURS,
    auto_close_time: time = DEFAULT_AUTO_CLOSE_TIME,
    edit_auto_generated_only: bool = False,
    face_provider: Optional[FaceIdentityProvider] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        clock=OrgClock(org_utc_offset_hours),
        auto_close_time=auto_close_time,
        edit_auto_generated_only=edit_auto_generated_only,
        face_provider=face_provider,
    )
