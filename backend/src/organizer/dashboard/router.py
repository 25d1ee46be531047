"""Dashboard summary for the active organization."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import ActiveOrg, require_active_org
from ..models.payroll import Employee
from ..models.secure_access import Vendor
from ..payroll.schemas import PayrollChangeLogResponse
from ..payroll.service import list_change_logs

RECENT_CHANGES_LIMIT = 5

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


class DashboardOrg(BaseModel):
    id: UUID
    name: str


class DashboardResponse(BaseModel):
    email: str
    org: DashboardOrg
    role: str
    recent_payroll_changes: List[PayrollChangeLogResponse]
    employee_count: int
    vendor_count: int


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> DashboardResponse:
    """Signed-in email, active organization, role and activity counts."""
    org_id = active.org.id
    return DashboardResponse(
        email=active.user.email,
        org=DashboardOrg(id=org_id, name=active.org.name),
        role=active.role,
        recent_payroll_changes=[
            PayrollChangeLogResponse.model_validate(log)
            for log in list_change_logs(db, org_id, limit=RECENT_CHANGES_LIMIT)
        ],
        employee_count=db.query(Employee).filter(Employee.org_id == org_id).count(),
        vendor_count=db.query(Vendor).filter(Vendor.org_id == org_id).count(),
    )
