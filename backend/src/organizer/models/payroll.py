"""Payroll SQLAlchemy models: employees, compensation profiles and the change log"""

import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, ForeignKey, Index, Integer, Numeric, Text, Uuid,
)
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, UTCDateTime, utcnow


class Employee(Base):
    """An employee tracked by an organization's payroll."""
    __tablename__ = "payroll_employees"
    __table_args__ = (
        Index("ix_payroll_employees_org_id_created_at", "org_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False, default="")
    role = Column(Text, nullable=False, default="")
    department = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    profile = relationship(
        "PayrollProfileRecord",
        back_populates="employee",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PayrollProfileRecord(Base):
    """Compensation fields for one employee (one row per employee)."""
    __tablename__ = "payroll_profiles"
    __table_args__ = (
        CheckConstraint("pay_type IN ('Hourly', 'Salary')", name="ck_payroll_profiles_pay_type"),
        Index("ix_payroll_profiles_org_id", "org_id"),
    )

    employee_id = Column(Uuid, ForeignKey("payroll_employees.id", ondelete="CASCADE"), primary_key=True)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    pay_type = Column(Text, nullable=False, default="Hourly")
    hourly_rate = Column(Numeric(12, 2), nullable=False, default=0)
    salary_amount = Column(Numeric(12, 2), nullable=False, default=0)
    pto_accrual_rate = Column(Numeric(8, 2), nullable=False, default=0)
    stipend = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")
    pay_periods_per_year = Column(Integer, nullable=False, default=26)
    is_active = Column(Boolean, nullable=False, default=True)
    department_rates = Column(PortableJSONB, nullable=False, default=list)
    effective_date = Column(Date, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee", back_populates="profile")


class PayrollChangeLog(Base):
    """Append-only record of a payroll edit.

    employee_name is denormalized so entries stay readable after the
    employee is deleted (employee_id is cleared).
    """
    __tablename__ = "payroll_change_logs"
    __table_args__ = (
        Index("ix_payroll_change_logs_org_id_created_at", "org_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(Uuid, ForeignKey("payroll_employees.id", ondelete="SET NULL"), nullable=True)
    employee_name = Column(Text, nullable=False, default="")
    actor_name = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    summary = Column(Text, nullable=False, default="")
    fields_changed = Column(PortableJSONB, nullable=False, default=list)
    change_type = Column(Text, nullable=True)
    note_before = Column(Text, nullable=True)
    note_after = Column(Text, nullable=True)
