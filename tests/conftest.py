"""
Shared fixtures.

The environment is pointed at a throwaway SQLite file and storage folder
before anything under ``signage`` is imported, since settings are read at
import time.
"""
import os
import tempfile
from types import SimpleNamespace

_TMP_DIR = tempfile.mkdtemp(prefix="signage-tests-")
os.environ["SIGNAGE_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'signage-test.db')}"
os.environ["SIGNAGE_STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["SIGNAGE_PLAYER_STATUS_SWEEP"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from signage.db import Base, SessionLocal, engine, init_db  # noqa: E402
from signage.main import app  # noqa: E402
from signage.models.customer import Customer, Site  # noqa: E402
from signage.models.player import Player  # noqa: E402
from signage.models.user import User  # noqa: E402
from signage.services.auth import hash_password, issue_player_access_token, issue_user_tokens  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_user(db, customer, role="Admin", email=None, site=None) -> User:
    user = User(
        customer_id=customer.id,
        email=email or f"{role.lower()}@{customer.subdomain}.test",
        password_hash=hash_password("secret-pass-1"),
        role=role,
        assigned_site_id=site.id if site else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def user_headers(user) -> dict:
    return bearer(issue_user_tokens(user)["access_token"])


def player_headers(player) -> dict:
    return bearer(issue_player_access_token(player))


@pytest.fixture
def tenant(db):
    """One customer with a site, an admin, an editor, a viewer and a player."""
    customer = Customer(name="Acme", subdomain="acme", contact_email="ops@acme.test")
    db.add(customer)
    db.commit()
    db.refresh(customer)

    site = Site(customer_id=customer.id, name="HQ", site_code="HQ", time_zone="UTC")
    db.add(site)
    db.commit()
    db.refresh(site)

    player = Player(site_id=site.id, customer_id=customer.id, name="Lobby", player_code="HQ-LOBBY")
    db.add(player)
    db.commit()
    db.refresh(player)

    admin = make_user(db, customer, "Admin")
    editor = make_user(db, customer, "Editor")
    viewer = make_user(db, customer, "Viewer")
    return SimpleNamespace(
        customer=customer,
        site=site,
        player=player,
        admin=admin,
        editor=editor,
        viewer=viewer,
        admin_headers=user_headers(admin),
        editor_headers=user_headers(editor),
        viewer_headers=user_headers(viewer),
        player_headers=player_headers(player),
    )


@pytest.fixture
def other_tenant(db):
    customer = Customer(name="Globex", subdomain="globex", contact_email="ops@globex.test")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    site = Site(customer_id=customer.id, name="Plant", site_code="PLANT")
    db.add(site)
    db.commit()
    db.refresh(site)
    player = Player(site_id=site.id, customer_id=customer.id, name="Gate", player_code="PLANT-GATE")
    db.add(player)
    db.commit()
    db.refresh(player)
    admin = make_user(db, customer, "Admin")
    return SimpleNamespace(
        customer=customer,
        site=site,
        player=player,
        admin=admin,
        admin_headers=user_headers(admin),
        player_headers=player_headers(player),
    )
