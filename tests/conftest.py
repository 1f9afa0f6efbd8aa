"""
Shared pytest fixtures for all tests.

Provides an in-memory SQLite database, a fake identity provider and seeded
organizations, users, projects and sprints.
"""
from datetime import datetime, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from trackflow_core import models
from trackflow_core.identity import (
    AuthContext,
    OrganizationMembership,
    ProviderOrganization,
    ProviderUser,
)

ACME_ORG = "org_acme"
GLOBEX_ORG = "org_globex"


class FakeIdentityClient:
    """In-memory stand-in for the identity provider's backend API.

    Records every membership lookup so tests can assert on provider round trips.
    """

    def __init__(self):
        self.memberships: dict[str, list[OrganizationMembership]] = {}
        self.organizations: dict[str, ProviderOrganization] = {}
        self.users: dict[str, ProviderUser] = {}
        self.membership_calls: list[str] = []

    def add_member(self, organization_id: str, user_id: str, role: str = "org:member") -> None:
        self.memberships.setdefault(organization_id, []).append(
            OrganizationMembership(user_id=user_id, role=role)
        )

    def get_organization_membership_list(self, organization_id: str) -> list[OrganizationMembership]:
        self.membership_calls.append(organization_id)
        return list(self.memberships.get(organization_id, []))

    def get_organization(self, slug_or_id: str) -> Optional[ProviderOrganization]:
        for organization in self.organizations.values():
            if slug_or_id in (organization.id, organization.slug):
                return organization
        return None

    def get_user(self, user_id: str) -> Optional[ProviderUser]:
        return self.users.get(user_id)


class ExplodingSession:
    """Session double that fails the test on any use."""

    def __getattr__(self, name):
        raise AssertionError(f"database accessed: Session.{name}")


@pytest.fixture()
def engine():
    """SQLite engine shared across threads (for TestClient) with a fresh schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def identity():
    """Identity provider with two organizations.

    acme: alice (admin), bob (member), dave (member)
    globex: carol (admin)
    """
    client = FakeIdentityClient()
    client.organizations[ACME_ORG] = ProviderOrganization(id=ACME_ORG, slug="acme", name="Acme Corp")
    client.organizations[GLOBEX_ORG] = ProviderOrganization(id=GLOBEX_ORG, slug="globex", name="Globex")
    client.add_member(ACME_ORG, "user_alice", "org:admin")
    client.add_member(ACME_ORG, "user_bob", "org:member")
    client.add_member(ACME_ORG, "user_dave", "org:member")
    client.add_member(GLOBEX_ORG, "user_carol", "org:admin")
    client.users["user_alice"] = ProviderUser(id="user_alice", email="alice@acme.test", name="Alice Admin")
    return client


def _user(db, clerk_user_id: str, name: str) -> models.User:
    user = models.User(clerk_user_id=clerk_user_id, email=f"{name.lower()}@example.test", name=name)
    db.add(user)
    return user


@pytest.fixture()
def users(db):
    """Locally mirrored users keyed by first name."""
    seeded = {
        "alice": _user(db, "user_alice", "Alice"),
        "bob": _user(db, "user_bob", "Bob"),
        "carol": _user(db, "user_carol", "Carol"),
        "dave": _user(db, "user_dave", "Dave"),
    }
    db.commit()
    return seeded


@pytest.fixture()
def project(db, users):
    """An Acme project administered by alice."""
    db_project = models.Project(
        name="Web Platform",
        key="WEB",
        description="Customer-facing site",
        organization_id=ACME_ORG,
        admin_ids=[str(users["alice"].id)],
    )
    db.add(db_project)
    db.commit()
    return db_project


@pytest.fixture()
def other_project(db, users):
    """A Globex project administered by carol."""
    db_project = models.Project(
        name="Globex Ops",
        key="OPS",
        organization_id=GLOBEX_ORG,
        admin_ids=[str(users["carol"].id)],
    )
    db.add(db_project)
    db.commit()
    return db_project


@pytest.fixture()
def sprint(db, project):
    start = datetime(2026, 10, 1)
    db_sprint = models.Sprint(
        name="WEB Sprint 1",
        start_date=start,
        end_date=start + timedelta(days=14),
        project_id=project.id,
    )
    db.add(db_sprint)
    db.commit()
    return db_sprint


def make_issue(
    db,
    project: models.Project,
    reporter: models.User,
    title: str,
    status: models.IssueStatus = models.IssueStatus.TODO,
    order: int = 0,
    sprint: Optional[models.Sprint] = None,
    assignee: Optional[models.User] = None,
) -> models.Issue:
    issue = models.Issue(
        title=title,
        status=status,
        order=order,
        priority=models.IssuePriority.MEDIUM,
        project_id=project.id,
        reporter_id=reporter.id,
        sprint_id=sprint.id if sprint else None,
        assignee_id=assignee.id if assignee else None,
    )
    db.add(issue)
    db.commit()
    return issue


@pytest.fixture()
def alice_auth():
    """Acme admin with Acme active in the session."""
    return AuthContext(user_id="user_alice", org_id=ACME_ORG, org_role="org:admin")


@pytest.fixture()
def bob_auth():
    """Acme member with Acme active in the session."""
    return AuthContext(user_id="user_bob", org_id=ACME_ORG, org_role="org:member")


@pytest.fixture()
def carol_auth():
    """Globex admin with Globex active in the session (outsider to Acme)."""
    return AuthContext(user_id="user_carol", org_id=GLOBEX_ORG, org_role="org:admin")


@pytest.fixture()
def issue_factory(db):
    """Insert issues directly, bypassing the actions."""
    def factory(project, reporter, title, **kwargs):
        return make_issue(db, project, reporter, title, **kwargs)
    return factory


@pytest.fixture()
def exploding_db():
    return ExplodingSession()
