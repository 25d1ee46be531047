"""Pydantic schemas for payroll endpoints"""

from datetime import date, datetime, timezone
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def _today() -> date:
    return datetime.now(timezone.utc).date()


class DepartmentRate(BaseModel):
    """Hourly rate an employee earns when working in another department."""
    department: str = ""
    hourly_rate: float = Field(0, ge=0)

    @field_validator('hourly_rate')
    @classmethod
    def round_money(cls, v: float) -> float:
        return round(v, 2)


class PayrollProfile(BaseModel):
    """Compensation fields for one employee.

    Money values are rounded to cents so stored and submitted values compare
    equal when nothing changed.
    """
    pay_type: Literal["Hourly", "Salary"] = "Hourly"
    hourly_rate: float = Field(0, ge=0)
    salary_amount: float = Field(0, ge=0)
    pto_accrual_rate: float = Field(0, ge=0)
    stipend: float = Field(0, ge=0)
    notes: str = ""
    pay_periods_per_year: int = Field(26, ge=1, le=365)
    is_active: bool = True
    department_rates: List[DepartmentRate] = Field(default_factory=list)
    effective_date: date = Field(default_factory=_today)

    @field_validator('hourly_rate', 'salary_amount', 'pto_accrual_rate', 'stipend')
    @classmethod
    def round_money(cls, v: float) -> float:
        return round(v, 2)


class EmployeeCreate(BaseModel):
    """Schema for creating an employee together with their payroll profile"""
    name: str = Field(..., max_length=200)
    role: str = Field("", max_length=200)
    department: str = Field("", max_length=200)
    profile: PayrollProfile = Field(default_factory=PayrollProfile)


class EmployeeResponse(BaseModel):
    id: UUID
    name: str
    role: str
    department: str
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    employees: List[EmployeeResponse]


class ProfileUpdateResponse(BaseModel):
    """Labels of the fields that differed from the stored profile."""
    fields_changed: List[str]


class PayrollChangeLogResponse(BaseModel):
    id: UUID
    employee_id: Optional[UUID]
    employee_name: str
    actor_name: str
    created_at: datetime
    summary: str
    fields_changed: List[str]
    change_type: Optional[str]
    note_before: Optional[str]
    note_after: Optional[str]

    class Config:
        from_attributes = True


class PayrollChangeLogListResponse(BaseModel):
    logs: List[PayrollChangeLogResponse]
