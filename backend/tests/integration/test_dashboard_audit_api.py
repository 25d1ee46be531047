"""Integration tests for the dashboard and the audit log"""

import pytest


pytestmark = pytest.mark.integration


class TestDashboard:

    def test_dashboard_summary(self, owner_client, test_org):
        for name in ["Ava Morales", "Ethan Park", "Maya Singh", "Jordan Blake", "Lee Chen", "Sam Ortiz"]:
            owner_client.post("/api/v1/payroll/employees", json={"name": name})
        owner_client.post("/api/v1/secure-access/vendors", json={
            "name": "Atlas Security",
            "website": "https://atlas-security.co",
            "password": "Atlas#Vault9",
            "account_number": "AT-88420",
            "contact_phone": "+1 (646) 555-0191",
            "contact_email": "support@atlas-security.co",
        })

        response = owner_client.get("/api/v1/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "owner@example.com"
        assert data["org"] == {"id": str(test_org.id), "name": "Acme HQ"}
        assert data["role"] == "owner"
        assert data["employee_count"] == 6
        assert data["vendor_count"] == 1
        assert len(data["recent_payroll_changes"]) == 5
        assert data["recent_payroll_changes"][0]["employee_name"] == "Sam Ortiz"

    def test_requires_active_org(self, client_for, make_user):
        response = client_for(make_user("lonely@example.com")).get("/api/v1/dashboard")

        assert response.status_code == 409


class TestAuditLog:

    def test_admin_reads_audit_log(self, owner_client):
        owner_client.post("/api/v1/members/invites", json={"email": "first@example.com"})
        owner_client.post("/api/v1/members/invites", json={"email": "second@example.com"})

        response = owner_client.get("/api/v1/audit", params={"action": "INVITE_CREATED", "per_page": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert len(data["entries"]) == 1
        assert data["entries"][0]["metadata"]["email"] == "second@example.com"
        assert data["entries"][0]["user_agent"] == "testclient"

    def test_member_cannot_read_audit_log(self, client_for, make_user, add_member, test_org):
        member = make_user("member@example.com")
        add_member(test_org, member)

        assert client_for(member).get("/api/v1/audit").status_code == 403
