"""Unit tests for invites and ownership transfer"""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from organizer.auth.otp import hash_token
from organizer.models import LegacyOrganizationMember, OrgInvite, OrgMember, UserSettings
from organizer.models.base import utcnow
from organizer.members.service import (
    DEFAULT_INVITE_ERROR,
    InviteError,
    OwnershipTransferError,
    accept_invite,
    create_invite,
    invite_error_message,
    normalize_invite_email,
    transfer_ownership,
)
from organizer.tenancy.service import get_org_role


class TestInviteMessages:

    @pytest.mark.parametrize("code,expected", [
        ("invalid", "This invite link is invalid."),
        ("expired", "This invite link has expired."),
        ("email", "This invite link was sent to a different email."),
        ("accepted", "This invite link has already been used."),
    ])
    def test_known_codes(self, code, expected):
        assert invite_error_message(code) == expected

    def test_unknown_code(self):
        assert invite_error_message("something-else") == DEFAULT_INVITE_ERROR
        assert invite_error_message(None) == DEFAULT_INVITE_ERROR


class TestNormalizeInviteEmail:

    def test_trims_and_lowercases(self):
        assert normalize_invite_email("  New.Hire@Example.COM ") == "new.hire@example.com"

    @pytest.mark.parametrize("email", ["", "   ", "no-at-sign", "user@localhost"])
    def test_invalid(self, email):
        with pytest.raises(InviteError) as exc_info:
            normalize_invite_email(email)
        assert exc_info.value.message == "Enter a valid email address."


class TestCreateInvite:

    def test_rejects_owner_role(self, db_session: Session, owner, test_org):
        with pytest.raises(InviteError) as exc_info:
            create_invite(db_session, test_org.id, owner, "new@example.com", "owner")
        assert exc_info.value.message == "Role must be member or admin."

    def test_rejects_existing_member(self, db_session: Session, owner, test_org):
        with pytest.raises(InviteError) as exc_info:
            create_invite(db_session, test_org.id, owner, "OWNER@example.com", "member")
        assert exc_info.value.status_code == 409

    def test_reinvite_revokes_previous(self, db_session: Session, owner, test_org):
        first, _ = create_invite(db_session, test_org.id, owner, "new@example.com", "member")
        second, token = create_invite(db_session, test_org.id, owner, "new@example.com", "admin")
        db_session.commit()

        db_session.refresh(first)
        assert first.revoked_at is not None
        assert second.revoked_at is None
        assert second.token_hash == hash_token(token)


class TestAcceptInvite:

    def test_accept_creates_membership_and_activates(self, db_session: Session, owner, test_org, make_user):
        invitee = make_user("new@example.com")
        invite, token = create_invite(db_session, test_org.id, owner, "new@example.com", "admin")
        db_session.commit()

        accepted = accept_invite(db_session, invitee, token)
        db_session.commit()

        assert accepted.id == invite.id
        assert accepted.accepted_by == invitee.id
        member = db_session.query(OrgMember).filter_by(org_id=test_org.id, user_id=invitee.id).one()
        assert member.role == "admin"
        assert db_session.get(UserSettings, invitee.id).active_organization_id == test_org.id

    def test_accept_never_demotes(self, db_session: Session, owner, test_org, make_user):
        admin = make_user("admin@example.com")
        db_session.add(OrgMember(org_id=test_org.id, user_id=admin.id, role="admin"))
        db_session.commit()
        invite = OrgInvite(
            org_id=test_org.id,
            email="admin@example.com",
            role="member",
            token_hash=hash_token("raw-token"),
            expires_at=utcnow() + timedelta(days=1),
        )
        db_session.add(invite)
        db_session.commit()

        accept_invite(db_session, admin, "raw-token")

        member = db_session.query(OrgMember).filter_by(org_id=test_org.id, user_id=admin.id).one()
        assert member.role == "admin"

    def test_legacy_row_upgraded(self, db_session: Session, owner, test_org, make_user):
        legacy_user = make_user("legacy@example.com")
        db_session.add(LegacyOrganizationMember(organization_id=test_org.id, user_id=legacy_user.id, role="staff"))
        db_session.commit()
        _, token = create_invite(db_session, test_org.id, owner, "other@example.com", "admin")
        # Re-address the invite so the legacy member can accept it
        invite = db_session.query(OrgInvite).one()
        invite.email = "legacy@example.com"
        db_session.commit()

        accept_invite(db_session, legacy_user, token)

        legacy = db_session.query(LegacyOrganizationMember).filter_by(user_id=legacy_user.id).one()
        assert legacy.role == "admin"

    def test_legacy_admin_keeps_role_in_new_row(self, db_session: Session, owner, test_org, make_user):
        legacy_admin = make_user("legacy.admin@example.com")
        db_session.add(LegacyOrganizationMember(organization_id=test_org.id, user_id=legacy_admin.id, role="admin"))
        db_session.add(OrgInvite(
            org_id=test_org.id,
            email="legacy.admin@example.com",
            role="member",
            token_hash=hash_token("legacy-token"),
            expires_at=utcnow() + timedelta(days=1),
        ))
        db_session.commit()

        accept_invite(db_session, legacy_admin, "legacy-token")

        member = db_session.query(OrgMember).filter_by(org_id=test_org.id, user_id=legacy_admin.id).one()
        assert member.role == "admin"
        assert get_org_role(db_session, test_org.id, legacy_admin.id) == "admin"
        legacy = db_session.query(LegacyOrganizationMember).filter_by(user_id=legacy_admin.id).one()
        assert legacy.role == "admin"

    def test_unknown_token(self, db_session: Session, make_user, test_org):
        with pytest.raises(InviteError) as exc_info:
            accept_invite(db_session, make_user("x@example.com"), "unknown")
        assert exc_info.value.code == "invalid"

    def test_revoked_invite_is_invalid(self, db_session: Session, owner, test_org, make_user):
        invitee = make_user("new@example.com")
        invite, token = create_invite(db_session, test_org.id, owner, "new@example.com", "member")
        invite.revoked_at = utcnow()
        db_session.commit()

        with pytest.raises(InviteError) as exc_info:
            accept_invite(db_session, invitee, token)
        assert exc_info.value.code == "invalid"

    def test_expired_checked_before_email(self, db_session: Session, owner, test_org, make_user):
        stranger = make_user("stranger@example.com")
        invite, token = create_invite(db_session, test_org.id, owner, "new@example.com", "member")
        invite.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        with pytest.raises(InviteError) as exc_info:
            accept_invite(db_session, stranger, token)
        assert exc_info.value.code == "expired"

    def test_wrong_email(self, db_session: Session, owner, test_org, make_user):
        stranger = make_user("stranger@example.com")
        _, token = create_invite(db_session, test_org.id, owner, "new@example.com", "member")
        db_session.commit()

        with pytest.raises(InviteError) as exc_info:
            accept_invite(db_session, stranger, token)
        assert exc_info.value.code == "email"
        assert exc_info.value.status_code == 403

    def test_already_accepted(self, db_session: Session, owner, test_org, make_user):
        invitee = make_user("new@example.com")
        _, token = create_invite(db_session, test_org.id, owner, "new@example.com", "member")
        accept_invite(db_session, invitee, token)
        db_session.commit()

        with pytest.raises(InviteError) as exc_info:
            accept_invite(db_session, invitee, token)
        assert exc_info.value.code == "accepted"
        assert exc_info.value.status_code == 409


class TestTransferOwnership:

    def test_transfer_swaps_roles_in_both_schemas(self, db_session: Session, owner, test_org, make_user):
        admin = make_user("admin@example.com")
        db_session.add(OrgMember(org_id=test_org.id, user_id=admin.id, role="admin"))
        db_session.commit()

        transfer_ownership(db_session, test_org.id, owner, admin.id)
        db_session.commit()

        roles = {m.user_id: m.role for m in db_session.query(OrgMember).filter_by(org_id=test_org.id)}
        assert roles == {admin.id: "owner", owner.id: "admin"}
        legacy = db_session.query(LegacyOrganizationMember).filter_by(organization_id=test_org.id).all()
        assert [(r.user_id, r.role) for r in legacy] == [(owner.id, "admin")]

    def test_self_transfer_rejected(self, db_session: Session, owner, test_org):
        with pytest.raises(OwnershipTransferError) as exc_info:
            transfer_ownership(db_session, test_org.id, owner, owner.id)
        assert exc_info.value.status_code == 400

    def test_non_member_target_rejected(self, db_session: Session, owner, test_org, make_user):
        outsider = make_user("outsider@example.com")

        with pytest.raises(OwnershipTransferError) as exc_info:
            transfer_ownership(db_session, test_org.id, owner, outsider.id)
        assert exc_info.value.message == "Select a member of this organization."

    def test_only_owner_may_transfer(self, db_session: Session, owner, test_org, make_user):
        admin = make_user("admin@example.com")
        db_session.add(OrgMember(org_id=test_org.id, user_id=admin.id, role="admin"))
        db_session.commit()

        with pytest.raises(OwnershipTransferError) as exc_info:
            transfer_ownership(db_session, test_org.id, admin, owner.id)
        assert exc_info.value.status_code == 403
