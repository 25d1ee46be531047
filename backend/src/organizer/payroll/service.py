"""Payroll service: employees, profiles and the change log.

Every profile write is diffed against the stored profile (or a blank one)
and recorded in payroll_change_logs with human-readable field labels and a
change type bucket.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..models.payroll import Employee, PayrollChangeLog, PayrollProfileRecord
from .schemas import DepartmentRate, PayrollProfile

# Diff order and labels
PROFILE_FIELD_LABELS = [
    ("pay_type", "Pay type"),
    ("hourly_rate", "Hourly rate"),
    ("salary_amount", "Salary amount"),
    ("pto_accrual_rate", "PTO accrual rate"),
    ("stipend", "Stipend"),
    ("notes", "Notes"),
    ("pay_periods_per_year", "Pay periods per year"),
    ("is_active", "Employment status"),
    ("department_rates", "Department rates"),
    ("effective_date", "Effective date"),
]

CHANGE_TYPE_BUCKETS = [
    ("Compensation", {"Pay type", "Hourly rate", "Salary amount"}),
    ("PTO", {"PTO accrual rate"}),
    ("Stipend", {"Stipend"}),
    ("General", {"Notes", "Effective date"}),
]

DEFAULT_CHANGE_LOG_LIMIT = 10


class PayrollError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def diff_profile_fields(prev: PayrollProfile, new: PayrollProfile) -> List[str]:
    """Labels of the fields that differ, in display order.

    Example:
        >>> diff_profile_fields(blank_profile(), blank_profile().model_copy(update={"stipend": 100}))
        ['Stipend']
    """
    return [
        label
        for field, label in PROFILE_FIELD_LABELS
        if getattr(prev, field) != getattr(new, field)
    ]


def change_type_for(fields: List[str]) -> Optional[str]:
    """Bucket a list of changed-field labels.

    Returns None when no bucket applies (pay periods, employment status and
    department rates alone), the bucket name when exactly one applies, and
    "Multiple" otherwise.
    """
    changed = set(fields)
    buckets = [name for name, labels in CHANGE_TYPE_BUCKETS if changed & labels]
    if not buckets:
        return None
    if len(buckets) == 1:
        return buckets[0]
    return "Multiple"


def blank_profile() -> PayrollProfile:
    """Profile shown for an employee with no stored profile."""
    return PayrollProfile()


def profile_from_record(record: PayrollProfileRecord) -> PayrollProfile:
    return PayrollProfile(
        pay_type="Salary" if record.pay_type == "Salary" else "Hourly",
        hourly_rate=float(record.hourly_rate or 0),
        salary_amount=float(record.salary_amount or 0),
        pto_accrual_rate=float(record.pto_accrual_rate or 0),
        stipend=float(record.stipend or 0),
        notes=record.notes or "",
        pay_periods_per_year=record.pay_periods_per_year or 26,
        is_active=record.is_active if record.is_active is not None else True,
        department_rates=[DepartmentRate(**item) for item in (record.department_rates or []) if item],
        effective_date=record.effective_date,
    )


def _apply_profile(record: PayrollProfileRecord, profile: PayrollProfile) -> None:
    record.pay_type = profile.pay_type
    record.hourly_rate = profile.hourly_rate
    record.salary_amount = profile.salary_amount
    record.pto_accrual_rate = profile.pto_accrual_rate
    record.stipend = profile.stipend
    record.notes = profile.notes
    record.pay_periods_per_year = profile.pay_periods_per_year
    record.is_active = profile.is_active
    record.department_rates = [rate.model_dump() for rate in profile.department_rates]
    record.effective_date = profile.effective_date


def list_employees(db: Session, org_id: UUID) -> List[Employee]:
    return (
        db.query(Employee)
        .filter(Employee.org_id == org_id)
        .order_by(Employee.created_at)
        .all()
    )


def get_employee(db: Session, org_id: UUID, employee_id: UUID) -> Employee:
    """Load an employee of the organization.

    Raises:
        PayrollError: 404 if the employee is unknown or belongs to another org
    """
    employee = db.query(Employee).filter(Employee.id == employee_id, Employee.org_id == org_id).first()
    if not employee:
        raise PayrollError("Employee not found.", 404)
    return employee


def create_employee(
    db: Session,
    org_id: UUID,
    actor_name: str,
    name: str,
    role: str,
    department: str,
    profile: PayrollProfile,
) -> Employee:
    """Create an employee with a profile and log "Profile created".

    Raises:
        PayrollError: If the name is empty after trimming
    """
    name = name.strip()
    if not name:
        raise PayrollError("Employee name is required.")

    employee = Employee(org_id=org_id, name=name, role=role.strip(), department=department.strip())
    db.add(employee)
    db.flush()

    record = PayrollProfileRecord(employee_id=employee.id, org_id=org_id)
    _apply_profile(record, profile)
    db.add(record)

    note_text = profile.notes.strip()
    db.add(PayrollChangeLog(
        org_id=org_id,
        employee_id=employee.id,
        employee_name=employee.name,
        actor_name=actor_name,
        summary="Profile created",
        fields_changed=["Profile created", "Notes"] if note_text else ["Profile created"],
        change_type="General",
        note_before="" if note_text else None,
        note_after=profile.notes if note_text else None,
    ))
    db.flush()
    return employee


def get_profile(db: Session, org_id: UUID, employee_id: UUID) -> PayrollProfile:
    """Stored profile of an employee, or a blank profile when none exists."""
    employee = get_employee(db, org_id, employee_id)
    if employee.profile is None:
        return blank_profile()
    return profile_from_record(employee.profile)


def update_profile(
    db: Session,
    org_id: UUID,
    employee_id: UUID,
    new_profile: PayrollProfile,
    actor_name: str,
) -> List[str]:
    """Upsert an employee's profile and log what changed.

    The previous state comes from the database, never from the client.

    Returns:
        Labels of the changed fields (empty when nothing changed; no log is
        written in that case)
    """
    employee = get_employee(db, org_id, employee_id)
    record = employee.profile
    prev_profile = profile_from_record(record) if record is not None else blank_profile()

    if record is None:
        record = PayrollProfileRecord(employee_id=employee.id, org_id=org_id)
        db.add(record)
        employee.profile = record
    _apply_profile(record, new_profile)

    fields_changed = diff_profile_fields(prev_profile, new_profile)
    if fields_changed:
        notes_changed = prev_profile.notes != new_profile.notes
        db.add(PayrollChangeLog(
            org_id=org_id,
            employee_id=employee.id,
            employee_name=employee.name,
            actor_name=actor_name,
            summary="Updated payroll fields",
            fields_changed=fields_changed,
            change_type=change_type_for(fields_changed),
            note_before=prev_profile.notes if notes_changed else None,
            note_after=new_profile.notes if notes_changed else None,
        ))

    db.flush()
    return fields_changed


def delete_employee(db: Session, org_id: UUID, employee_id: UUID) -> None:
    """Delete an employee and profile; change logs keep employee_name."""
    employee = get_employee(db, org_id, employee_id)
    (
        db.query(PayrollChangeLog)
        .filter(PayrollChangeLog.org_id == org_id, PayrollChangeLog.employee_id == employee.id)
        .update({PayrollChangeLog.employee_id: None}, synchronize_session=False)
    )
    db.delete(employee)
    db.flush()


def list_change_logs(
    db: Session,
    org_id: UUID,
    limit: int = DEFAULT_CHANGE_LOG_LIMIT,
    since: Optional[datetime] = None,
) -> List[PayrollChangeLog]:
    """Change log entries, newest first.

    When since is given every entry at or after it is returned and limit is
    ignored.
    """
    query = db.query(PayrollChangeLog).filter(PayrollChangeLog.org_id == org_id)
    if since is not None:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        query = query.filter(PayrollChangeLog.created_at >= since)
    query = query.order_by(PayrollChangeLog.created_at.desc())
    if since is None:
        query = query.limit(limit)
    return query.all()
