"""Payroll endpoints: employees, profiles and the change log.

Any member of the active organization may use these endpoints. Change log
entries record the caller's email as the actor.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import ActiveOrg, require_active_org
from ..observability.logging_config import get_logger
from ..observability.metrics import payroll_changes_total
from .schemas import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    PayrollChangeLogListResponse,
    PayrollChangeLogResponse,
    PayrollProfile,
    ProfileUpdateResponse,
)
from .service import (
    DEFAULT_CHANGE_LOG_LIMIT,
    PayrollError,
    change_type_for,
    create_employee,
    delete_employee,
    get_profile,
    list_change_logs,
    list_employees,
    update_profile,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/payroll", tags=["Payroll"])


@router.get("/employees", response_model=EmployeeListResponse)
def get_employees(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> EmployeeListResponse:
    """Employees of the active organization, oldest first."""
    return EmployeeListResponse(
        employees=[EmployeeResponse.model_validate(e) for e in list_employees(db, active.org.id)]
    )


@router.post("/employees", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def add_employee(
    body: EmployeeCreate,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> EmployeeResponse:
    """Create an employee with a payroll profile.

    Raises:
        HTTPException 400: If the name is empty
    """
    try:
        employee = create_employee(
            db,
            active.org.id,
            active.user.actor_name,
            body.name,
            body.role,
            body.department,
            body.profile,
        )
    except PayrollError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    db.commit()
    payroll_changes_total.labels(change_type="General").inc()
    logger.info("Employee created", extra={"employee_id": str(employee.id)})
    return EmployeeResponse.model_validate(employee)


@router.get("/employees/{employee_id}/profile", response_model=PayrollProfile)
def get_employee_profile(
    employee_id: UUID,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> PayrollProfile:
    """Stored profile, or a blank profile when the employee has none.

    Raises:
        HTTPException 404: If the employee is not in the active organization
    """
    try:
        return get_profile(db, active.org.id, employee_id)
    except PayrollError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/employees/{employee_id}/profile", response_model=ProfileUpdateResponse)
def put_employee_profile(
    employee_id: UUID,
    body: PayrollProfile,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> ProfileUpdateResponse:
    """Save a profile and log the fields that changed.

    Raises:
        HTTPException 404: If the employee is not in the active organization
    """
    try:
        fields_changed = update_profile(db, active.org.id, employee_id, body, active.user.actor_name)
    except PayrollError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    db.commit()
    if fields_changed:
        payroll_changes_total.labels(change_type=change_type_for(fields_changed) or "none").inc()
    return ProfileUpdateResponse(fields_changed=fields_changed)


@router.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_employee(
    employee_id: UUID,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> None:
    """Delete an employee and their profile. Change log entries are kept.

    Raises:
        HTTPException 404: If the employee is not in the active organization
    """
    try:
        delete_employee(db, active.org.id, employee_id)
    except PayrollError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    db.commit()
    logger.info("Employee deleted", extra={"employee_id": str(employee_id)})


@router.get("/change-logs", response_model=PayrollChangeLogListResponse)
def get_change_logs(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
    limit: int = Query(DEFAULT_CHANGE_LOG_LIMIT, ge=1, le=500),
    since: Optional[datetime] = Query(None, description="Only entries at or after this time (disables limit)"),
) -> PayrollChangeLogListResponse:
    """Change log of the active organization, newest first."""
    logs = list_change_logs(db, active.org.id, limit=limit, since=since)
    return PayrollChangeLogListResponse(logs=[PayrollChangeLogResponse.model_validate(log) for log in logs])
