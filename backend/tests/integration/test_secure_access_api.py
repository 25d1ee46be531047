"""Integration tests for the secure access vendor directory"""

import pytest
from sqlalchemy.orm import Session

from organizer.models import Vendor


pytestmark = pytest.mark.integration

NORTHWIND = {
    "name": "Northwind Facilities",
    "website": "https://northwindfacilities.com",
    "password": "BlueRiver-2025",
    "account_number": "NW-30219",
    "contact_phone": "+1 (212) 555-0144",
    "contact_email": "ops@northwindfacilities.com",
}


def _create_vendor(client, **overrides):
    response = client.post("/api/v1/secure-access/vendors", json={**NORTHWIND, **overrides})
    assert response.status_code == 201
    return response.json()


class TestVendors:

    def test_create_masks_password(self, owner_client, db_session: Session):
        vendor = _create_vendor(owner_client)

        assert vendor["id"].startswith("v-")
        assert vendor["website_domain"] == "northwindfacilities.com"
        assert vendor["masked_password"] == "•" * len("BlueRiver-2025")
        assert vendor["last_updated_by"] == "owner@example.com"
        assert "password" not in vendor

        stored = db_session.get(Vendor, vendor["id"])
        assert "BlueRiver-2025" not in stored.password_encrypted

    def test_list_newest_first_without_passwords(self, owner_client):
        _create_vendor(owner_client)
        _create_vendor(owner_client, name="Atlas Security", website="atlas-security.co")

        vendors = owner_client.get("/api/v1/secure-access/vendors").json()["vendors"]

        assert [v["name"] for v in vendors] == ["Atlas Security", "Northwind Facilities"]
        assert vendors[0]["website_domain"] == "atlas-security.co"
        assert all("masked_password" not in v and "password" not in v for v in vendors)

    @pytest.mark.parametrize("field", list(NORTHWIND))
    def test_every_field_required(self, owner_client, db_session: Session, field):
        response = owner_client.post("/api/v1/secure-access/vendors", json={**NORTHWIND, field: "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Please fill out all required fields."
        assert db_session.query(Vendor).count() == 0

    def test_name_only_rejected(self, owner_client):
        response = owner_client.post("/api/v1/secure-access/vendors", json={"name": "Only Name"})

        assert response.status_code == 400

    def test_fields_trimmed_on_create(self, owner_client, db_session: Session):
        vendor = _create_vendor(owner_client, name="  Northwind Facilities ", password=" BlueRiver-2025 ")

        assert vendor["name"] == "Northwind Facilities"
        assert vendor["masked_password"] == "•" * len("BlueRiver-2025")
        reveal = owner_client.post(f"/api/v1/secure-access/vendors/{vendor['id']}/reveal")
        assert reveal.json()["password"] == "BlueRiver-2025"

    def test_unknown_vendor(self, owner_client):
        assert owner_client.get("/api/v1/secure-access/vendors/v-missing").status_code == 404


class TestUpdateVendor:

    def test_only_differing_fields_are_logged(self, owner_client):
        vendor = _create_vendor(owner_client)

        response = owner_client.patch(
            f"/api/v1/secure-access/vendors/{vendor['id']}",
            json={
                "name": " Northwind Facilities ",
                "contact_phone": "+1 (212) 555-0100",
                "password": "NewSecret-2026",
            },
        )

        assert response.status_code == 200
        assert response.json()["fields_changed"] == ["Contact Phone", "Password updated"]
        assert response.json()["vendor"]["contact_phone"] == "+1 (212) 555-0100"

        events = owner_client.get(f"/api/v1/secure-access/vendors/{vendor['id']}/activity").json()["events"]
        assert events[0]["action"] == "Vendor updated"
        assert events[0]["fields_changed"] == ["Contact Phone", "Password updated"]

        revealed = owner_client.post(f"/api/v1/secure-access/vendors/{vendor['id']}/reveal")
        assert revealed.json()["password"] == "NewSecret-2026"

    def test_no_changes_writes_nothing(self, owner_client):
        vendor = _create_vendor(owner_client)

        response = owner_client.patch(f"/api/v1/secure-access/vendors/{vendor['id']}", json={"website": NORTHWIND["website"]})

        assert response.json()["fields_changed"] == []
        assert response.json()["vendor"]["last_updated_at"] == vendor["last_updated_at"]
        events = owner_client.get(f"/api/v1/secure-access/vendors/{vendor['id']}/activity").json()["events"]
        assert [e["action"] for e in events] == ["Vendor created"]


class TestPasswordDisclosure:

    def test_reveal_and_copy_are_logged(self, owner_client):
        vendor = _create_vendor(owner_client)

        revealed = owner_client.post(f"/api/v1/secure-access/vendors/{vendor['id']}/reveal")
        copied = owner_client.post(f"/api/v1/secure-access/vendors/{vendor['id']}/copy")

        assert revealed.json()["password"] == "BlueRiver-2025"
        assert copied.json()["password"] == "BlueRiver-2025"
        events = owner_client.get(f"/api/v1/secure-access/vendors/{vendor['id']}/activity").json()["events"]
        assert [e["action"] for e in events] == ["Password copied", "Password revealed", "Vendor created"]
        assert all(e["actor_name"] == "owner@example.com" for e in events)


class TestDeleteVendor:

    def test_activity_survives_deletion(self, owner_client):
        vendor = _create_vendor(owner_client)

        response = owner_client.delete(f"/api/v1/secure-access/vendors/{vendor['id']}")

        assert response.status_code == 204
        assert owner_client.get(f"/api/v1/secure-access/vendors/{vendor['id']}").status_code == 404
        events = owner_client.get(f"/api/v1/secure-access/vendors/{vendor['id']}/activity").json()["events"]
        assert [e["action"] for e in events] == ["Vendor deleted", "Vendor created"]

    def test_activity_of_unknown_vendor(self, owner_client):
        assert owner_client.get("/api/v1/secure-access/vendors/v-missing/activity").status_code == 404
