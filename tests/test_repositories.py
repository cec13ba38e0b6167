from datetime import timedelta

import pytest
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from app.core.exceptions import DuplicateEmailError
from app.db import mongo
from app.db.indexes import create_indexes
from app.db.repositories import SessionRepository, UserRepository
from app.models.session import DeviceInfo, SessionStatus
from app.models.user import UserRole, new_pending_user
from app.services.session_service import SessionRegistry
from utils.time_utils import utc_now

from conftest import run


@pytest.fixture
def mongo_db(monkeypatch):
    """Motor-compatible in-memory database with the production indexes."""
    monkeypatch.setattr(mongo, "_database", AsyncMongoMockClient()["mrcs_test"])
    run(create_indexes())
    return mongo.get_database()


@pytest.fixture
def users(mongo_db):
    return UserRepository(mongo.get_users_collection())


@pytest.fixture
def sessions(mongo_db):
    return SessionRepository(mongo.get_sessions_collection())


def _session_doc(user_id, device_name="Chrome on Mac", user_agent="UA", last_seen=None):
    now = utc_now()
    return {
        "user_id": user_id,
        "device_name": device_name,
        "user_agent": user_agent,
        "ip_address": None,
        "status": SessionStatus.ACTIVE.value,
        "created_at": now,
        "last_seen_at": last_seen or now,
        "revoked_at": None,
    }


# ------------------------------------------------------------------ users

def test_create_returns_string_id(users):
    user = run(users.create(new_pending_user("jane@medmail.com")))

    assert isinstance(user.id, str)
    assert run(users.find_by_id(user.id)).email == "jane@medmail.com"
    assert run(users.find_by_email("jane@medmail.com")).id == user.id


def test_duplicate_email_is_domain_error(users):
    run(users.create(new_pending_user("jane@medmail.com")))

    with pytest.raises(DuplicateEmailError):
        run(users.create(new_pending_user("jane@medmail.com")))


def test_malformed_or_unknown_id_is_none(users):
    assert run(users.find_by_id("not-an-object-id")) is None
    assert run(users.update("not-an-object-id", {"first_name": "Jane"})) is None
    assert run(users.update(str(ObjectId()), {"first_name": "Jane"})) is None


def test_update_returns_new_state(users):
    user = run(users.create(new_pending_user("jane@medmail.com")))

    updated = run(users.update(user.id, {"first_name": "Jane", "is_email_verified": True}))

    assert updated.first_name == "Jane"
    assert updated.is_email_verified
    assert run(users.find_by_id(user.id)).first_name == "Jane"


def test_list_active_skips_deleted_and_admins(users):
    student = run(users.create(new_pending_user("student@medmail.com")))
    admin_doc = new_pending_user("admin@medmail.com")
    admin_doc["role"] = UserRole.ADMIN.value
    admin = run(users.create(admin_doc))
    deleted_doc = new_pending_user("gone@medmail.com")
    deleted_doc["is_deleted"] = True
    run(users.create(deleted_doc))

    assert [u.id for u in run(users.list_active())] == [student.id]
    assert {u.id for u in run(users.list_active(include_admins=True))} == {student.id, admin.id}


# --------------------------------------------------------------- sessions

def test_second_insert_for_same_device_returns_none(sessions):
    assert run(sessions.create(_session_doc("u1"))) is not None

    assert run(sessions.create(_session_doc("u1"))) is None
    assert len(run(sessions.find_for_user("u1"))) == 1


def test_find_active_newest_first(sessions):
    now = utc_now()
    older = run(sessions.create(_session_doc("u1", "Pixel 8", last_seen=now - timedelta(hours=1))))
    newer = run(sessions.create(_session_doc("u1", "Chrome on Mac", last_seen=now)))

    assert [s.id for s in run(sessions.find_active("u1"))] == [newer.id, older.id]


def test_terminate_one_is_scoped_to_owner(sessions):
    session = run(sessions.create(_session_doc("u1")))

    assert run(sessions.terminate_one("u2", session.id, utc_now())) is False
    assert run(sessions.terminate_one("u1", "not-an-object-id", utc_now())) is False
    assert run(sessions.find_active("u1"))[0].id == session.id

    assert run(sessions.terminate_one("u1", session.id, utc_now())) is True
    assert run(sessions.find_active("u1")) == []


def test_terminate_active_counts_only_active_rows(sessions):
    run(sessions.create(_session_doc("u1", "Chrome on Mac")))
    run(sessions.create(_session_doc("u1", "Pixel 8")))
    run(sessions.create(_session_doc("u2", "Chrome on Mac")))

    assert run(sessions.terminate_active("u1", utc_now())) == 2
    assert run(sessions.terminate_active("u1", utc_now())) == 0
    assert len(run(sessions.find_active("u2"))) == 1


def test_malformed_session_id_update_is_none(sessions):
    assert run(sessions.update("not-an-object-id", {"status": SessionStatus.ACTIVE.value})) is None


def test_registry_reactivates_row_in_mongo(sessions):
    registry = SessionRegistry(sessions)
    device = DeviceInfo(device_name="Chrome on Mac", user_agent="UA")

    first = run(registry.upsert_session("u1", device))
    run(registry.terminate_all("u1"))
    second = run(registry.upsert_session("u1", device))

    assert second.id == first.id
    assert second.status == SessionStatus.ACTIVE
    assert len(run(sessions.find_for_user("u1"))) == 1
