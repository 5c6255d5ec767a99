import pytest
from sqlalchemy.orm import sessionmaker

import manage_admins
from bakery.models.profile import Profile


@pytest.fixture
def admin_db(engine, monkeypatch):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(manage_admins, "SessionLocal", TestingSession)
    monkeypatch.setattr(manage_admins, "init_db", lambda: None)
    return TestingSession


def role_of(session_factory, user_id):
    db = session_factory()
    try:
        return db.get(Profile, user_id).role
    finally:
        db.close()


def test_add_creates_admin_profile(admin_db, capsys):
    assert manage_admins.main(["add", "admin-9", "--email", "owner@example.com"]) == 0
    assert role_of(admin_db, "admin-9") == "admin"
    assert "✓" in capsys.readouterr().out


def test_remove_demotes_to_customer(admin_db):
    manage_admins.main(["add", "admin-9"])
    assert manage_admins.main(["remove", "admin-9"]) == 0
    assert role_of(admin_db, "admin-9") == "customer"


def test_check_exit_codes(admin_db):
    assert manage_admins.main(["check", "nobody"]) == 1
    manage_admins.main(["add", "admin-9"])
    assert manage_admins.main(["check", "admin-9"]) == 0
    manage_admins.main(["remove", "admin-9"])
    assert manage_admins.main(["check", "admin-9"]) == 2
