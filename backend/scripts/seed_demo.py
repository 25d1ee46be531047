#!/usr/bin/env python
"""Seed script to create a demo organization.

Creates an organization owned by the given email (the account is created if
needed), then adds sample payroll employees and secure access vendors. Run
once against a fresh database; the owner signs in with a login link as usual.

Usage:
    python backend/scripts/seed_demo.py owner@example.com --org-name "Demo Co"

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    SECRET_PEPPER: Key material for vendor password encryption (required)
"""

import argparse
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from organizer.auth.service import get_or_create_user
from organizer.database import get_db_session
from organizer.payroll.schemas import PayrollProfile
from organizer.payroll.service import create_employee
from organizer.secure_access.schemas import VendorCreate
from organizer.secure_access.service import create_vendor
from organizer.tenancy.service import OrgError, create_organization


SAMPLE_EMPLOYEES = [
    ("Ava Morales", "HR Manager", "People"),
    ("Ethan Park", "Staff Engineer", "Product"),
    ("Maya Singh", "Operations Lead", "Operations"),
    ("Jordan Blake", "Finance Analyst", "Finance"),
]

SAMPLE_VENDORS = [
    VendorCreate(
        name="Northwind Facilities",
        website="https://northwindfacilities.com",
        password="BlueRiver-2025",
        account_number="NW-30219",
        contact_phone="+1 (212) 555-0144",
        contact_email="ops@northwindfacilities.com",
    ),
    VendorCreate(
        name="Atlas Security",
        website="https://atlas-security.co",
        password="Atlas#Vault9",
        account_number="AT-88420",
        contact_phone="+1 (646) 555-0191",
        contact_email="support@atlas-security.co",
    ),
    VendorCreate(
        name="Cedar HR Services",
        website="https://cedarhr.com",
        password="CedarAccess!",
        account_number="CH-11002",
        contact_phone="+1 (718) 555-0139",
        contact_email="team@cedarhr.com",
    ),
]


def sample_profile(role: str) -> PayrollProfile:
    """Engineers are salaried; everyone else is hourly."""
    if "Engineer" in role:
        return PayrollProfile(
            pay_type="Salary",
            salary_amount=135000,
            pto_accrual_rate=6,
            stipend=150,
        )
    return PayrollProfile(
        pay_type="Hourly",
        hourly_rate=42,
        pto_accrual_rate=4,
        stipend=100,
    )


def main():
    parser = argparse.ArgumentParser(description="Create a demo ORGanizer organization")
    parser.add_argument("email", help="Email of the organization owner")
    parser.add_argument("--org-name", default="Demo Organization", help="Organization name")
    args = parser.parse_args()

    try:
        with get_db_session() as session:
            owner = get_or_create_user(session, args.email)
            org = create_organization(session, owner, args.org_name)

            for name, role, department in SAMPLE_EMPLOYEES:
                create_employee(
                    session,
                    org.id,
                    owner.actor_name,
                    name=name,
                    role=role,
                    department=department,
                    profile=sample_profile(role),
                )

            for vendor in SAMPLE_VENDORS:
                create_vendor(session, org.id, vendor, owner.actor_name)

            print("SUCCESS: Demo organization created")
            print(f"  ID:        {org.id}")
            print(f"  Name:      {org.name}")
            print(f"  Owner:     {owner.email}")
            print(f"  Employees: {len(SAMPLE_EMPLOYEES)}")
            print(f"  Vendors:   {len(SAMPLE_VENDORS)}")

    except OrgError as e:
        print(f"ERROR: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
