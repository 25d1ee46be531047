"""Integration tests for invites, member listing and ownership transfer"""

from datetime import timedelta
from urllib.parse import parse_qs, urlsplit

import pytest
from sqlalchemy.orm import Session

from organizer.models import AuditLog, OrgInvite, OrgMember
from organizer.models.base import utcnow


pytestmark = pytest.mark.integration


def _token_from(invite_link: str) -> str:
    return parse_qs(urlsplit(invite_link).query)["token"][0]


class TestCreateInvite:
    """Test POST /api/v1/members/invites"""

    def test_owner_creates_invite(self, owner_client, db_session: Session):
        response = owner_client.post(
            "/api/v1/members/invites",
            json={"email": " New.Hire@Example.com ", "role": "admin"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.hire@example.com"
        assert data["invite_link"].startswith("https://testserver/invite?token=")

        invite = db_session.query(OrgInvite).one()
        assert invite.role == "admin"
        assert invite.token_hash != _token_from(data["invite_link"])
        assert db_session.query(AuditLog).filter(AuditLog.action == "INVITE_CREATED").count() == 1

    def test_invalid_email(self, owner_client):
        response = owner_client.post("/api/v1/members/invites", json={"email": "nope", "role": "member"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Enter a valid email address."

    def test_invalid_role(self, owner_client):
        response = owner_client.post("/api/v1/members/invites", json={"email": "a@example.com", "role": "owner"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Role must be member or admin."

    def test_member_cannot_invite(self, client_for, make_user, add_member, test_org):
        member = make_user("member@example.com")
        add_member(test_org, member)

        response = client_for(member).post("/api/v1/members/invites", json={"email": "a@example.com"})

        assert response.status_code == 403
        assert response.json()["detail"] == "You don't have permission to invite members."

    def test_no_active_org(self, client_for, make_user):
        response = client_for(make_user("lonely@example.com")).post(
            "/api/v1/members/invites", json={"email": "a@example.com"}
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Select an organization before inviting."


class TestListAndRevokeInvites:

    def test_list_pending_newest_first(self, owner_client):
        owner_client.post("/api/v1/members/invites", json={"email": "first@example.com"})
        owner_client.post("/api/v1/members/invites", json={"email": "second@example.com"})

        response = owner_client.get("/api/v1/members/invites")

        assert response.status_code == 200
        emails = [i["email"] for i in response.json()["invites"]]
        assert emails == ["second@example.com", "first@example.com"]
        assert all(i["is_expired"] is False for i in response.json()["invites"])

    def test_expired_invite_still_listed(self, owner_client, db_session: Session):
        owner_client.post("/api/v1/members/invites", json={"email": "late@example.com"})
        invite = db_session.query(OrgInvite).one()
        invite.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = owner_client.get("/api/v1/members/invites")

        assert response.status_code == 200
        [item] = response.json()["invites"]
        assert item["email"] == "late@example.com"
        assert item["is_expired"] is True

    def test_revoke(self, owner_client, db_session: Session):
        owner_client.post("/api/v1/members/invites", json={"email": "first@example.com"})
        invite_id = owner_client.get("/api/v1/members/invites").json()["invites"][0]["id"]

        response = owner_client.delete(f"/api/v1/members/invites/{invite_id}")

        assert response.status_code == 204
        assert owner_client.get("/api/v1/members/invites").json()["invites"] == []
        assert owner_client.delete(f"/api/v1/members/invites/{invite_id}").status_code == 404


class TestAcceptInvite:
    """Test POST /api/v1/invites/accept"""

    def test_accept_joins_org(self, owner_client, client_for, make_user, db_session: Session, test_org):
        link = owner_client.post(
            "/api/v1/members/invites", json={"email": "new.hire@example.com", "role": "member"}
        ).json()["invite_link"]
        invitee = make_user("new.hire@example.com")
        invitee_client = client_for(invitee)

        response = invitee_client.post("/api/v1/invites/accept", json={"token": _token_from(link)})

        assert response.status_code == 200
        assert response.json() == {"org_id": str(test_org.id), "redirect": "/dashboard"}
        assert response.cookies["org_id"] == str(test_org.id)

        member = db_session.query(OrgMember).filter_by(org_id=test_org.id, user_id=invitee.id).one()
        assert member.role == "member"
        assert invitee_client.get("/api/v1/orgs/active").json()["role"] == "member"

    def test_signed_out(self, client):
        response = client.post("/api/v1/invites/accept", json={"token": "anything"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Please sign in to accept your invite."

    def test_empty_token(self, client):
        response = client.post("/api/v1/invites/accept", json={"token": "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid invite link."

    def test_wrong_account(self, owner_client, client_for, make_user):
        link = owner_client.post("/api/v1/members/invites", json={"email": "new.hire@example.com"}).json()["invite_link"]

        response = client_for(make_user("someone.else@example.com")).post(
            "/api/v1/invites/accept", json={"token": _token_from(link)}
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "This invite link was sent to a different email."

    def test_reinvite_invalidates_old_link(self, owner_client, client_for, make_user):
        old_link = owner_client.post("/api/v1/members/invites", json={"email": "new.hire@example.com"}).json()["invite_link"]
        owner_client.post("/api/v1/members/invites", json={"email": "new.hire@example.com"})

        response = client_for(make_user("new.hire@example.com")).post(
            "/api/v1/invites/accept", json={"token": _token_from(old_link)}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "This invite link is invalid."


class TestMembersAndOwnership:

    def test_list_members(self, owner_client, make_user, add_member, test_org):
        add_member(test_org, make_user("member@example.com"))

        response = owner_client.get("/api/v1/members")

        assert response.status_code == 200
        assert [(m["email"], m["role"]) for m in response.json()["members"]] == [
            ("owner@example.com", "owner"),
            ("member@example.com", "member"),
        ]

    def test_member_cannot_list_members(self, client_for, make_user, add_member, test_org):
        member = make_user("member@example.com")
        add_member(test_org, member)

        assert client_for(member).get("/api/v1/members").status_code == 403

    def test_transfer_ownership(self, owner_client, client_for, make_user, add_member, test_org, db_session: Session):
        admin = make_user("admin@example.com")
        add_member(test_org, admin, role="admin")

        response = owner_client.post(
            "/api/v1/members/transfer-ownership", json={"new_owner_user_id": str(admin.id)}
        )

        assert response.status_code == 200
        assert response.json()["success"] == "Ownership transferred successfully."
        assert client_for(admin).get("/api/v1/orgs/active").json()["role"] == "owner"
        assert owner_client.get("/api/v1/orgs/active").json()["role"] == "admin"
        assert db_session.query(AuditLog).filter(AuditLog.action == "OWNERSHIP_TRANSFERRED").count() == 1

    def test_transfer_requires_selection(self, owner_client):
        response = owner_client.post("/api/v1/members/transfer-ownership", json={"new_owner_user_id": ""})

        assert response.status_code == 400
        assert response.json()["detail"] == "Select a member to transfer ownership."

    def test_admin_cannot_transfer(self, client_for, make_user, add_member, test_org, owner):
        admin = make_user("admin@example.com")
        add_member(test_org, admin, role="admin")

        response = client_for(admin).post(
            "/api/v1/members/transfer-ownership", json={"new_owner_user_id": str(owner.id)}
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Only the current owner can transfer ownership."
