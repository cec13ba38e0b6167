"""
app/db/repositories.py

Purpose: Persistence gateway over the Motor collections

- Converts Mongo documents to User / Session models
- Stringifies ObjectIds at the boundary so ids stay opaque upstream
- Maps unique-key violations to domain errors
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import DuplicateEmailError
from app.core.logging import get_logger
from app.models.session import Session, SessionStatus
from app.models.user import User, UserRole
from utils.constants import DUPLICATE_EMAIL_ERROR
from utils.time_utils import utc_now

logger = get_logger(__name__)


def _object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _to_model(model, doc: Optional[Dict[str, Any]]):
    if doc is None:
        return None
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return model(**data)


class UserRepository:
    """CRUD on the users collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_by_email(self, email: str) -> Optional[User]:
        doc = await self.collection.find_one({"email": email})
        return _to_model(User, doc)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        return _to_model(User, doc)

    async def create(self, document: Dict[str, Any]) -> User:
        """
        Inserts a new user document.

        Raises:
            DuplicateEmailError: If the unique email index rejects the insert
        """
        document = dict(document)
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning("Duplicate email rejected by unique index", extra={"email": document.get("email")})
            raise DuplicateEmailError(DUPLICATE_EMAIL_ERROR) from e

        document["_id"] = result.inserted_id
        return _to_model(User, document)

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        """
        Applies `changes` to the user and returns the updated user,
        or None if no such user exists.
        """
        oid = _object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**changes, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return _to_model(User, doc)

    async def list_active(self, include_admins: bool = False) -> List[User]:
        query: Dict[str, Any] = {"is_deleted": False}
        if not include_admins:
            query["role"] = {"$ne": UserRole.ADMIN.value}
        cursor = self.collection.find(query).sort("created_at", DESCENDING)
        return [_to_model(User, doc) async for doc in cursor]


class SessionRepository:
    """CRUD on the sessions collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_active(self, user_id: str) -> List[Session]:
        cursor = self.collection.find(
            {"user_id": user_id, "status": SessionStatus.ACTIVE.value}
        ).sort("last_seen_at", DESCENDING)
        return [_to_model(Session, doc) async for doc in cursor]

    async def find_by_device(
        self,
        user_id: str,
        device_name: str,
        user_agent: Optional[str],
    ) -> Optional[Session]:
        doc = await self.collection.find_one(
            {"user_id": user_id, "device_name": device_name, "user_agent": user_agent}
        )
        return _to_model(Session, doc)

    async def find_for_user(self, user_id: str) -> List[Session]:
        cursor = self.collection.find({"user_id": user_id}).sort("last_seen_at", DESCENDING)
        return [_to_model(Session, doc) async for doc in cursor]

    async def create(self, document: Dict[str, Any]) -> Optional[Session]:
        """
        Inserts a session row. Returns None when a row for the same
        (user, device, user agent) was inserted concurrently.
        """
        document = dict(document)
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            logger.info("Session row already exists for device", extra={"user_id": document.get("user_id")})
            return None

        document["_id"] = result.inserted_id
        return _to_model(Session, document)

    async def update(self, session_id: str, changes: Dict[str, Any]) -> Optional[Session]:
        oid = _object_id(session_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return _to_model(Session, doc)

    async def terminate_one(self, user_id: str, session_id: str, now: datetime) -> bool:
        """
        Terminates one session owned by `user_id`. False if the user has no such session.
        """
        oid = _object_id(session_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid, "user_id": user_id},
            {"$set": {"status": SessionStatus.TERMINATED.value, "revoked_at": now}},
        )
        return result.matched_count > 0

    async def terminate_active(self, user_id: str, now: datetime) -> int:
        result = await self.collection.update_many(
            {"user_id": user_id, "status": SessionStatus.ACTIVE.value},
            {"$set": {"status": SessionStatus.TERMINATED.value, "revoked_at": now}},
        )
        return result.modified_count
