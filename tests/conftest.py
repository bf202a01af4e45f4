from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.face_access.face_access.attendance.model import AccessLogEntry, AccessLogRow
from src.face_access.face_access.audit.model import AuditEntry, AuditEntryView
from src.face_access.face_access.common.clock import OrgClock
from src.face_access.face_access.container import wire_container
from src.face_access.face_access.core.enums import ActionKind, Role
from src.face_access.face_access.core.exceptions import EmployeeNotFoundError, StorageError
from src.face_access.face_access.employees.model import Employee
from src.face_access.face_access.identity.provider import FaceMatch
from src.face_access.face_access.users.model import Actor
from src.face_access.face_access.users.service import SessionActor

ORG = 1
OTHER_ORG = 2


def local(clock: OrgClock, y: int, m: int, d: int, hh: int = 0, mm: int = 0, ss: int = 0) -> datetime:
    """UTC instant of an organization-local wall clock time."""
    return datetime(y, m, d, hh, mm, ss, tzinfo=clock.tz).astimezone(timezone.utc)


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee] = field(default_factory=dict)

    def add(self, employee: Employee) -> Employee:
        self.employees[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def find_by_face_token(self, face_token: str, organization_id: int) -> Optional[Employee]:
        for e in self.employees.values():
            if e.face_token == face_token and e.organization_id == organization_id:
                return e
        return None

    def list_for_organization(self, organization_id: int):
        return [e for e in self.employees.values() if e.organization_id == organization_id]


class _StagedTransaction:
    def __init__(self, ledger: "InMemoryLedger", employee_id: int):
        self._ledger = ledger
        self._employee_id = employee_id
        self.staged: list[AccessLogEntry] = []

    def last_entry(self) -> Optional[AccessLogEntry]:
        items = self._ledger.entries_for(self._employee_id) + self.staged
        if not items:
            return None
        return max(items, key=lambda e: (e.timestamp, e.entry_id))

    def append(self, *, action: ActionKind, timestamp: datetime, auto_generated: bool) -> AccessLogEntry:
        if self._ledger.fail_on_append is not None and len(self.staged) + 1 >= self._ledger.fail_on_append:
            raise StorageError("insert failed")
        entry = AccessLogEntry(
            entry_id=self._ledger.next_id(),
            employee_id=self._employee_id,
            timestamp=timestamp,
            action=action,
            auto_generated=auto_generated,
        )
        self.staged.append(entry)
        return entry


class InMemoryLedger:
    """Ledger whose transactions hold a per-employee lock and publish writes only on success."""

    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.entries: dict[int, AccessLogEntry] = {}
        self.fail_on_append: Optional[int] = None
        self._id = 0
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def next_id(self) -> int:
        with self._guard:
            self._id += 1
            return self._id

    def seed(self, employee_id: int, action: ActionKind, timestamp: datetime, *, auto_generated: bool = False) -> AccessLogEntry:
        entry = AccessLogEntry(
            entry_id=self.next_id(),
            employee_id=employee_id,
            timestamp=timestamp,
            action=action,
            auto_generated=auto_generated,
        )
        self.entries[entry.entry_id] = entry
        return entry

    def entries_for(self, employee_id: int) -> list[AccessLogEntry]:
        items = [e for e in self.entries.values() if e.employee_id == employee_id]
        items.sort(key=lambda e: (e.timestamp, e.entry_id))
        return items

    @contextmanager
    def locked_for_employee(self, employee_id: int):
        if self._employees.get_by_id(employee_id) is None:
            raise EmployeeNotFoundError("Employee not found")
        with self._guard:
            lock = self._locks.setdefault(employee_id, threading.Lock())
        with lock:
            txn = _StagedTransaction(self, employee_id)
            yield txn
            for entry in txn.staged:
                self.entries[entry.entry_id] = entry

    def _row(self, entry: AccessLogEntry) -> AccessLogRow:
        employee = self._employees.get_by_id(entry.employee_id)
        return AccessLogRow(
            entry=entry,
            organization_id=employee.organization_id,
            employee_name=employee.name,
            employee_code=employee.employee_code,
        )

    def get_row(self, access_log_id: int) -> Optional[AccessLogRow]:
        entry = self.entries.get(access_log_id)
        return self._row(entry) if entry else None

    def _newest_first(self, organization_id: int):
        rows = [self._row(e) for e in self.entries.values()]
        rows = [r for r in rows if r.organization_id == organization_id]
        rows.sort(key=lambda r: (r.entry.timestamp, r.entry.entry_id), reverse=True)
        return rows

    def list_in_range(self, *, organization_id: int, start: datetime, end: datetime, employee_id: Optional[int] = None):
        rows = [r for r in self._newest_first(organization_id) if start <= r.entry.timestamp <= end]
        if employee_id is not None:
            rows = [r for r in rows if r.entry.employee_id == employee_id]
        return rows

    def list_recent(self, *, organization_id: int, limit: int):
        return self._newest_first(organization_id)[:limit]


class _StagedEditSession:
    def __init__(self, audit: "InMemoryAudit", access_log_id: int):
        self._audit = audit
        self._access_log_id = access_log_id
        self.entry = audit.ledger.entries.get(access_log_id)
        self.calls: list[str] = []
        self.staged_audit: Optional[AuditEntry] = None
        self.staged_entry: Optional[AccessLogEntry] = None

    def insert_audit(self, *, admin_id, previous_timestamp, new_timestamp, reason, evidence_url, created_at) -> AuditEntry:
        self.calls.append("insert_audit")
        if self._audit.fail_insert:
            raise StorageError("audit insert failed")
        self.staged_audit = AuditEntry(
            audit_id=len(self._audit.records) + 1,
            access_log_id=self._access_log_id,
            admin_id=admin_id,
            previous_timestamp=previous_timestamp,
            new_timestamp=new_timestamp,
            reason=reason,
            created_at=created_at,
            evidence_url=evidence_url,
        )
        return self.staged_audit

    def apply_edit(self, *, new_timestamp, edited_at, edited_by) -> None:
        self.calls.append("apply_edit")
        if self._audit.fail_update:
            raise StorageError("Access log update affected no rows")
        self.staged_entry = replace(
            self.entry,
            timestamp=new_timestamp,
            edited_by_admin=True,
            edited_at=edited_at,
            edited_by=edited_by,
        )


class InMemoryAudit:
    def __init__(self, ledger: InMemoryLedger, users: "InMemoryUsers"):
        self.ledger = ledger
        self._users = users
        self.records: list[AuditEntry] = []
        self.sessions: list[_StagedEditSession] = []
        self.fail_insert = False
        self.fail_update = False

    @contextmanager
    def edit_session(self, access_log_id: int):
        session = _StagedEditSession(self, access_log_id)
        self.sessions.append(session)
        yield session
        if session.staged_audit is not None:
            self.records.append(session.staged_audit)
        if session.staged_entry is not None:
            self.ledger.entries[access_log_id] = session.staged_entry

    def list_for_entry(self, access_log_id: int):
        out = []
        for r in sorted(self.records, key=lambda r: (r.created_at, r.audit_id)):
            if r.access_log_id != access_log_id:
                continue
            admin = self._users.by_id(r.admin_id)
            name = (admin.full_name or admin.email) if admin else "Admin"
            out.append(AuditEntryView(audit=r, admin_name=name))
        return out


@dataclass
class InMemoryUsers:
    users: dict[int, Actor] = field(default_factory=dict)

    def add(self, actor: Actor) -> Actor:
        self.users[actor.user_id] = actor
        return actor

    def by_id(self, user_id: int) -> Optional[Actor]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[Actor]:
        for u in self.users.values():
            if u.email == email:
                return u
        return None


@dataclass
class FakeFaces:
    """Face provider that recognizes images by their exact bytes."""

    known: dict[bytes, str] = field(default_factory=dict)
    seen: list[bytes] = field(default_factory=list)

    def identify(self, image: bytes) -> Optional[FaceMatch]:
        self.seen.append(image)
        token = self.known.get(image)
        return FaceMatch(face_token=token, similarity=99.5) if token else None


def session_actor(actor: Actor) -> SessionActor:
    return SessionActor(
        user_id=actor.user_id,
        organization_id=actor.organization_id,
        role=actor.role,
        full_name=actor.full_name,
        email=actor.email,
    )


@pytest.fixture
def clock() -> OrgClock:
    return OrgClock(-5)


@pytest.fixture
def at(clock):
    """at(2024, 1, 2, 9, 0) -> UTC instant of 09:00 org time on 2024-01-02."""

    def _at(*parts: int) -> datetime:
        return local(clock, *parts)

    return _at


@pytest.fixture
def employees() -> InMemoryEmployees:
    repo = InMemoryEmployees()
    repo.add(Employee(employee_id=10, organization_id=ORG, employee_code="E-010", name="Ana Torres", face_token="face-ana"))
    repo.add(Employee(employee_id=11, organization_id=ORG, employee_code="E-011", name="Luis Gomez", face_token="face-luis"))
    repo.add(Employee(employee_id=20, organization_id=OTHER_ORG, employee_code="E-010", name="Other Org", face_token="face-other"))
    return repo


@pytest.fixture
def ledger(employees) -> InMemoryLedger:
    return InMemoryLedger(employees)


@pytest.fixture
def users() -> InMemoryUsers:
    repo = InMemoryUsers()
    repo.add(Actor(1, ORG, "admin@demo.local", "Admin Demo", generate_password_hash("admin123"), Role.ADMIN))
    repo.add(Actor(2, ORG, "kiosk@demo.local", "Lobby Kiosk", generate_password_hash("kiosk123"), Role.KIOSK))
    repo.add(Actor(3, OTHER_ORG, "admin@other.local", None, generate_password_hash("other123"), Role.ADMIN))
    repo.add(Actor(4, ORG, "off@demo.local", "Former Admin", generate_password_hash("off12345"), Role.ADMIN, is_active=False))
    return repo


@pytest.fixture
def audit(ledger, users) -> InMemoryAudit:
    return InMemoryAudit(ledger, users)


@pytest.fixture
def faces() -> FakeFaces:
    return FakeFaces(known={b"ana-face": "face-ana", b"other-face": "face-other", b"ghost-face": "face-ghost"})


@pytest.fixture
def container(users, employees, ledger, audit, faces, clock):
    return wire_container(
        users_repo=users,
        employees_repo=employees,
        attendance_repo=ledger,
        audit_repo=audit,
        clock=clock,
        face_provider=faces,
    )


@pytest.fixture
def admin(users) -> SessionActor:
    return session_actor(users.by_id(1))


@pytest.fixture
def kiosk(users) -> SessionActor:
    return session_actor(users.by_id(2))


@pytest.fixture
def other_admin(users) -> SessionActor:
    return session_actor(users.by_id(3))
