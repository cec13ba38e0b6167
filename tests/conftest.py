import asyncio
from datetime import timedelta
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.api import deps
from app.core.config import TokenConfig
from app.core.exceptions import DuplicateEmailError, ExternalServiceError
from app.core.security import PasswordHasher
from app.main import app
from app.models.session import DeviceInfo, Session, SessionStatus
from app.models.user import User, UserRole, new_pending_user
from app.services.auth_service import AuthService
from app.services.email_service import get_email_service
from app.services.session_service import SessionRegistry
from app.services.token_service import TokenService
from app.services.user_service import UserService
from utils.time_utils import utc_now

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PASSWORD = "correct-horse-battery"


class InMemoryUserRepository:
    """Stands in for UserRepository; same coroutine interface."""

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}

    def _model(self, user_id: str) -> User:
        return User(id=user_id, **self.docs[user_id])

    def add(self, email: str, **fields) -> User:
        doc = new_pending_user(email)
        doc.update(fields)
        if isinstance(doc.get("role"), UserRole):
            doc["role"] = doc["role"].value
        user_id = str(ObjectId())
        self.docs[user_id] = doc
        return self._model(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        for user_id, doc in self.docs.items():
            if doc["email"] == email:
                return self._model(user_id)
        return None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        if user_id not in self.docs:
            return None
        return self._model(user_id)

    async def create(self, document: Dict[str, Any]) -> User:
        if any(doc["email"] == document["email"] for doc in self.docs.values()):
            raise DuplicateEmailError("Email already registered")
        user_id = str(ObjectId())
        self.docs[user_id] = dict(document)
        return self._model(user_id)

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        if user_id not in self.docs:
            return None
        self.docs[user_id].update(changes, updated_at=utc_now())
        return self._model(user_id)

    async def list_active(self, include_admins: bool = False) -> List[User]:
        users = [
            self._model(user_id) for user_id, doc in self.docs.items()
            if not doc["is_deleted"] and (include_admins or doc["role"] != UserRole.ADMIN.value)
        ]
        return sorted(users, key=lambda u: u.created_at, reverse=True)


class InMemorySessionRepository:
    """Stands in for SessionRepository, including the unique device key."""

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}

    def _model(self, session_id: str) -> Session:
        return Session(id=session_id, **self.docs[session_id])

    def _ids(self, **match) -> List[str]:
        return [
            session_id for session_id, doc in self.docs.items()
            if all(doc.get(k) == v for k, v in match.items())
        ]

    async def find_active(self, user_id: str) -> List[Session]:
        return [self._model(i) for i in self._ids(user_id=user_id, status=SessionStatus.ACTIVE.value)]

    async def find_by_device(self, user_id: str, device_name: str, user_agent: Optional[str]) -> Optional[Session]:
        ids = self._ids(user_id=user_id, device_name=device_name, user_agent=user_agent)
        return self._model(ids[0]) if ids else None

    async def find_for_user(self, user_id: str) -> List[Session]:
        return [self._model(i) for i in self._ids(user_id=user_id)]

    async def create(self, document: Dict[str, Any]) -> Optional[Session]:
        if self._ids(
            user_id=document["user_id"],
            device_name=document["device_name"],
            user_agent=document.get("user_agent"),
        ):
            return None
        session_id = str(ObjectId())
        self.docs[session_id] = dict(document)
        return self._model(session_id)

    async def update(self, session_id: str, changes: Dict[str, Any]) -> Optional[Session]:
        if session_id not in self.docs:
            return None
        self.docs[session_id].update(changes)
        return self._model(session_id)

    async def terminate_one(self, user_id: str, session_id: str, now) -> bool:
        doc = self.docs.get(session_id)
        if doc is None or doc["user_id"] != user_id:
            return False
        doc.update(status=SessionStatus.TERMINATED.value, revoked_at=now)
        return True

    async def terminate_active(self, user_id: str, now) -> int:
        ids = self._ids(user_id=user_id, status=SessionStatus.ACTIVE.value)
        for session_id in ids:
            self.docs[session_id].update(status=SessionStatus.TERMINATED.value, revoked_at=now)
        return len(ids)


class RecordingEmailService:
    """Collects outgoing emails instead of talking to SMTP."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.failing_templates = set()
        self.connection_ok = True

    async def send_template(self, key: str, to: str, subject: Optional[str] = None, **params) -> None:
        if key in self.failing_templates:
            raise ExternalServiceError("Email sending failed")
        self.sent.append({"key": key, "to": to, **params})

    async def test_connection(self) -> bool:
        return self.connection_ok

    def sent_with(self, key: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m["key"] == key]


def run(coro):
    """Drive a service coroutine from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture
def token_config():
    return TokenConfig(
        secret=TEST_SECRET,
        algorithm="HS256",
        access_ttl=timedelta(hours=1),
        refresh_ttl=timedelta(days=14),
        verify_ttl=timedelta(days=1),
        reset_ttl=timedelta(hours=1),
    )


@pytest.fixture
def tokens(token_config):
    return TokenService(token_config)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def users_repo():
    return InMemoryUserRepository()


@pytest.fixture
def sessions_repo():
    return InMemorySessionRepository()


@pytest.fixture
def registry(sessions_repo):
    return SessionRegistry(sessions_repo)


@pytest.fixture
def email():
    return RecordingEmailService()


@pytest.fixture
def auth_service(users_repo, registry, tokens, hasher, email):
    return AuthService(users_repo, registry, tokens, hasher, email)


@pytest.fixture
def user_service(users_repo, registry):
    return UserService(users_repo, registry)


@pytest.fixture
def make_user(users_repo, hasher):
    """Seeds an account directly in the repository (Active by default)."""

    def _make(
        email: str = "student@medmail.com",
        role: UserRole = UserRole.STUDENT,
        password: Optional[str] = TEST_PASSWORD,
        **fields,
    ) -> User:
        defaults = {
            "first_name": "Jane",
            "last_name": "Doe",
            "medical_college_name": "Dhaka Medical College",
            "is_email_verified": True,
            "is_profile_completed": password is not None,
            "password": hasher.hash(password) if password else "",
        }
        defaults.update(fields)
        return users_repo.add(email, role=role, **defaults)

    return _make


@pytest.fixture
def device_a():
    return DeviceInfo(device_name="Chrome on Mac", user_agent="Mozilla/5.0 (Macintosh)")


@pytest.fixture
def device_b():
    return DeviceInfo(device_name="Pixel 8", user_agent="Mozilla/5.0 (Linux; Android 14)")


@pytest.fixture
def client(users_repo, registry, tokens, hasher, email):
    """TestClient wired to the in-memory collaborators (no lifespan, no Mongo)."""
    app.dependency_overrides[deps.get_user_repository] = lambda: users_repo
    app.dependency_overrides[deps.get_session_registry] = lambda: registry
    app.dependency_overrides[deps.get_token_service] = lambda: tokens
    app.dependency_overrides[deps.get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_email_service] = lambda: email
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def bearer(tokens):
    """Authorization header for a user, as the frontend sends it."""

    def _bearer(user: User) -> Dict[str, str]:
        token = tokens.issue_access_token(user.id, user.role, user.is_profile_completed)
        return {"Authorization": f"Bearer {token}"}

    return _bearer
