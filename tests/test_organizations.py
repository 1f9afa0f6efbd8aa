"""Tests for organization lookups and user syncing."""
import pytest

from trackflow_core.actions import organizations as org_actions
from trackflow_core.errors import ForbiddenError, NotFoundError, UnauthorizedError
from trackflow_core.identity import AuthContext, ProviderUser
from trackflow_core.models import Organization, User


class TestGetOrganization:
    """Test resolving organizations by slug."""

    def test_member_gets_local_mirror(self, db, identity, bob_auth):
        org = org_actions.get_organization(db, bob_auth, identity, "acme")

        assert org.id == "org_acme"
        assert org.name == "Acme Corp"
        assert db.get(Organization, "org_acme") is not None

    def test_lookup_refreshes_mirror(self, db, identity, bob_auth):
        db.add(Organization(id="org_acme", slug="acme", name="Old Name"))
        db.commit()

        org = org_actions.get_organization(db, bob_auth, identity, "acme")

        assert org.name == "Acme Corp"
        assert db.query(Organization).count() == 1

    def test_member_of_inactive_org(self, db, identity, bob_auth):
        identity.add_member("org_globex", "user_bob")

        org = org_actions.get_organization(db, bob_auth, identity, "globex")

        assert org.id == "org_globex"
        assert identity.membership_calls == ["org_globex"]

    def test_non_member_gets_none(self, db, identity, carol_auth):
        assert org_actions.get_organization(db, carol_auth, identity, "acme") is None
        assert db.query(Organization).count() == 0

    def test_unknown_slug_gets_none(self, db, identity, bob_auth):
        assert org_actions.get_organization(db, bob_auth, identity, "initech") is None

    def test_no_session(self, exploding_db, identity):
        with pytest.raises(UnauthorizedError):
            org_actions.get_organization(exploding_db, AuthContext(), identity, "acme")


class TestOrganizationUsers:
    """Test listing an organization's mirrored users."""

    def test_lists_mirrored_members_only(self, db, identity, users, bob_auth):
        identity.add_member("org_acme", "user_not_synced")

        result = org_actions.get_organization_users(db, bob_auth, identity, "org_acme")

        assert [user.name for user in result] == ["Alice", "Bob", "Dave"]

    def test_outsider_is_forbidden(self, db, identity, users, carol_auth):
        with pytest.raises(ForbiddenError):
            org_actions.get_organization_users(db, carol_auth, identity, "org_acme")

    def test_cross_org_member_fetches_membership_list_once(self, db, identity, users):
        auth = AuthContext(user_id="user_dave", org_id="org_globex", org_role="org:member")

        result = org_actions.get_organization_users(db, auth, identity, "org_acme")

        assert [user.name for user in result] == ["Alice", "Bob", "Dave"]
        assert identity.membership_calls == ["org_acme"]


class TestSyncUser:
    """Test mirroring the caller's provider account."""

    def test_creates_user(self, db, identity, alice_auth):
        user = org_actions.sync_user(db, alice_auth, identity)

        assert user.clerk_user_id == "user_alice"
        assert user.email == "alice@acme.test"
        assert user.name == "Alice Admin"

    def test_updates_existing_user(self, db, identity, users, alice_auth):
        identity.users["user_alice"] = ProviderUser(
            id="user_alice", email="alice@new.test", name="Alice A.", image_url="https://img.test/a.png"
        )

        user = org_actions.sync_user(db, alice_auth, identity)

        assert user.id == users["alice"].id
        assert user.email == "alice@new.test"
        assert user.image_url == "https://img.test/a.png"
        assert db.query(User).count() == 4

    def test_unknown_provider_user(self, db, identity, bob_auth):
        with pytest.raises(NotFoundError, match="User not found"):
            org_actions.sync_user(db, bob_auth, identity)
