"""
Database abstraction for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import DuplicateKeyError, OperationFailure

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SUPPLIES_COLLECTION = "supplies"
VOLUNTEER_COLLECTION = "volunteer"
COMMUNITY_COLLECTION = "community"
COMMENT_COLLECTION = "comment"

SUPPLY_FIELDS = ("image", "title", "category", "amount", "description")


class InvalidIdError(ValueError):
    """Raised when a record id is not a well-formed ObjectId."""


def parse_object_id(value: str) -> ObjectId:
    # ObjectId(None) would mint a fresh id instead of failing.
    if not isinstance(value, str):
        raise InvalidIdError(f"'{value}' is not a valid record id")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise InvalidIdError(f"'{value}' is not a valid record id") from exc


@dataclass
class UserRecord:
    name: Optional[str]
    email: Optional[str]
    password: str
    id: Optional[str] = None

    def as_dict(self, *, include_password: bool = False) -> dict:
        data = {"_id": self.id, "name": self.name, "email": self.email}
        if include_password:
            data["password"] = self.password
        return data


@dataclass
class SupplyRecord:
    image: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    amount: Any = None
    description: Optional[str] = None
    id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "_id": self.id,
            "image": self.image,
            "title": self.title,
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
        }


@dataclass
class VolunteerRecord:
    image: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Any = None
    location: Optional[str] = None
    passion: Optional[str] = None
    id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "_id": self.id,
            "image": self.image,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "location": self.location,
            "passion": self.passion,
        }


@dataclass
class CommunityPostRecord:
    image: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "_id": self.id,
            "image": self.image,
            "title": self.title,
            "description": self.description,
            "createdAt": self.created_at,
        }


@dataclass
class CommentRecord:
    name: Optional[str] = None
    email: Optional[str] = None
    comment: Optional[str] = None
    time: Optional[str] = None
    # Community post the comment belongs to. Stored as given, never checked.
    post_id: Optional[str] = None
    id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "comment": self.comment,
            "time": self.time,
            "id": self.post_id,
        }


@dataclass
class InsertResult:
    inserted_id: str
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "insertedId": self.inserted_id}


@dataclass
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "deletedCount": self.deleted_count}


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(
        self, name: Optional[str], email: Optional[str], password_hash: str
    ) -> Optional[UserRecord]:
        ...

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def list_users(self) -> list[UserRecord]:
        ...

    def create_supply(self, supply: SupplyRecord) -> InsertResult:
        ...

    def list_supplies(self, limit: Optional[int] = None) -> list[SupplyRecord]:
        ...

    def get_supply(self, supply_id: str) -> Optional[SupplyRecord]:
        ...

    def update_supply(self, supply_id: str, fields: dict) -> int:
        ...

    def delete_supply(self, supply_id: str) -> DeleteResult:
        ...

    def create_volunteer(self, volunteer: VolunteerRecord) -> InsertResult:
        ...

    def list_volunteers(self, limit: Optional[int] = None) -> list[VolunteerRecord]:
        ...

    def create_community_post(self, post: CommunityPostRecord) -> InsertResult:
        ...

    def list_community_posts(
        self, limit: Optional[int] = None
    ) -> list[CommunityPostRecord]:
        ...

    def get_community_post(self, post_id: str) -> Optional[CommunityPostRecord]:
        ...

    def create_comment(self, comment: CommentRecord) -> InsertResult:
        ...

    def list_comments(self, post_id: Optional[str] = None) -> list[CommentRecord]:
        ...

    def close(self) -> None:
        ...


def _user_doc(doc: dict) -> UserRecord:
    return UserRecord(
        id=str(doc["_id"]),
        name=doc.get("name"),
        email=doc.get("email"),
        password=doc.get("password", ""),
    )


def _supply_doc(doc: dict) -> SupplyRecord:
    return SupplyRecord(id=str(doc["_id"]), **{k: doc.get(k) for k in SUPPLY_FIELDS})


def _volunteer_doc(doc: dict) -> VolunteerRecord:
    return VolunteerRecord(
        id=str(doc["_id"]),
        image=doc.get("image"),
        name=doc.get("name"),
        email=doc.get("email"),
        mobile=doc.get("mobile"),
        location=doc.get("location"),
        passion=doc.get("passion"),
    )


def _community_doc(doc: dict) -> CommunityPostRecord:
    return CommunityPostRecord(
        id=str(doc["_id"]),
        image=doc.get("image"),
        title=doc.get("title"),
        description=doc.get("description"),
        created_at=doc.get("createdAt"),
    )


def _comment_doc(doc: dict) -> CommentRecord:
    return CommentRecord(
        id=str(doc["_id"]),
        name=doc.get("name"),
        email=doc.get("email"),
        comment=doc.get("comment"),
        time=doc.get("time"),
        post_id=doc.get("id"),
    )


def _supply_fields(supply: SupplyRecord) -> dict:
    return {k: getattr(supply, k) for k in SUPPLY_FIELDS}


def _volunteer_fields(volunteer: VolunteerRecord) -> dict:
    data = volunteer.as_dict()
    data.pop("_id")
    return data


def _community_fields(post: CommunityPostRecord) -> dict:
    data = post.as_dict()
    data.pop("_id")
    return data


def _comment_fields(comment: CommentRecord) -> dict:
    data = comment.as_dict()
    data.pop("_id")
    return data


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[ObjectId, dict]] = {
            USERS_COLLECTION: {},
            SUPPLIES_COLLECTION: {},
            VOLUNTEER_COLLECTION: {},
            COMMUNITY_COLLECTION: {},
            COMMENT_COLLECTION: {},
        }
        # Request handlers run on a thread pool.
        self._lock = threading.RLock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            for docs in self.collections.values():
                docs.clear()

    def close(self) -> None:
        pass

    def _insert(self, collection: str, fields: dict) -> InsertResult:
        oid = ObjectId()
        with self._lock:
            self.collections[collection][oid] = {"_id": oid, **fields}
        return InsertResult(inserted_id=str(oid))

    def _list(self, collection: str, limit: Optional[int]) -> list[dict]:
        with self._lock:
            docs = list(self.collections[collection].values())
        if limit:
            docs = docs[:limit]
        return docs

    def create_user(
        self, name: Optional[str], email: Optional[str], password_hash: str
    ) -> Optional[UserRecord]:
        with self._lock:
            if self.get_user_by_email(email) is not None:
                return None
            result = self._insert(
                USERS_COLLECTION,
                {"name": name, "email": email, "password": password_hash},
            )
        return UserRecord(
            id=result.inserted_id, name=name, email=email, password=password_hash
        )

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            for doc in self.collections[USERS_COLLECTION].values():
                if doc.get("email") == email:
                    return _user_doc(doc)
        return None

    def list_users(self) -> list[UserRecord]:
        return [_user_doc(doc) for doc in self._list(USERS_COLLECTION, None)]

    def create_supply(self, supply: SupplyRecord) -> InsertResult:
        return self._insert(SUPPLIES_COLLECTION, _supply_fields(supply))

    def list_supplies(self, limit: Optional[int] = None) -> list[SupplyRecord]:
        return [_supply_doc(doc) for doc in self._list(SUPPLIES_COLLECTION, limit)]

    def get_supply(self, supply_id: str) -> Optional[SupplyRecord]:
        doc = self.collections[SUPPLIES_COLLECTION].get(parse_object_id(supply_id))
        return _supply_doc(doc) if doc else None

    def update_supply(self, supply_id: str, fields: dict) -> int:
        oid = parse_object_id(supply_id)
        with self._lock:
            doc = self.collections[SUPPLIES_COLLECTION].get(oid)
            if not doc:
                return 0
            doc.update({k: v for k, v in fields.items() if k in SUPPLY_FIELDS})
        return 1

    def delete_supply(self, supply_id: str) -> DeleteResult:
        oid = parse_object_id(supply_id)
        with self._lock:
            removed = self.collections[SUPPLIES_COLLECTION].pop(oid, None)
        return DeleteResult(deleted_count=1 if removed else 0)

    def create_volunteer(self, volunteer: VolunteerRecord) -> InsertResult:
        return self._insert(VOLUNTEER_COLLECTION, _volunteer_fields(volunteer))

    def list_volunteers(self, limit: Optional[int] = None) -> list[VolunteerRecord]:
        return [
            _volunteer_doc(doc) for doc in self._list(VOLUNTEER_COLLECTION, limit)
        ]

    def create_community_post(self, post: CommunityPostRecord) -> InsertResult:
        return self._insert(COMMUNITY_COLLECTION, _community_fields(post))

    def list_community_posts(
        self, limit: Optional[int] = None
    ) -> list[CommunityPostRecord]:
        return [
            _community_doc(doc) for doc in self._list(COMMUNITY_COLLECTION, limit)
        ]

    def get_community_post(self, post_id: str) -> Optional[CommunityPostRecord]:
        doc = self.collections[COMMUNITY_COLLECTION].get(parse_object_id(post_id))
        return _community_doc(doc) if doc else None

    def create_comment(self, comment: CommentRecord) -> InsertResult:
        return self._insert(COMMENT_COLLECTION, _comment_fields(comment))

    def list_comments(self, post_id: Optional[str] = None) -> list[CommentRecord]:
        return [
            _comment_doc(doc)
            for doc in self._list(COMMENT_COLLECTION, None)
            if not post_id or doc.get("id") == post_id
        ]


class MongoDbClient:
    """
    pymongo-backed implementation. Accepts a pre-built client so tests can
    hand in a mongomock instance.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database: str = "assignment-7-l2",
        *,
        client: Optional[MongoClient] = None,
    ):
        if client is None:
            if not uri:
                raise ValueError("MONGODB_URI is required for MongoDbClient")
            client = MongoClient(uri)
        self.client = client
        self.db = client[database]
        self.users = self.db[USERS_COLLECTION]
        self.supplies = self.db[SUPPLIES_COLLECTION]
        self.volunteers = self.db[VOLUNTEER_COLLECTION]
        self.community = self.db[COMMUNITY_COLLECTION]
        self.comments = self.db[COMMENT_COLLECTION]
        try:
            self.users.create_index("email", unique=True)
        except OperationFailure:
            # Existing duplicate emails block the index; the upsert in
            # create_user still guards new registrations.
            logger.warning("Could not create unique index on users.email")

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _find(collection, query: dict, limit: Optional[int] = None) -> list[dict]:
        cursor = collection.find(query)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def create_user(
        self, name: Optional[str], email: Optional[str], password_hash: str
    ) -> Optional[UserRecord]:
        try:
            result = self.users.update_one(
                {"email": email},
                {
                    "$setOnInsert": {
                        "name": name,
                        "email": email,
                        "password": password_hash,
                    }
                },
                upsert=True,
            )
        except DuplicateKeyError:
            return None
        if result.upserted_id is None:
            return None
        return UserRecord(
            id=str(result.upserted_id), name=name, email=email, password=password_hash
        )

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        doc = self.users.find_one({"email": email})
        return _user_doc(doc) if doc else None

    def list_users(self) -> list[UserRecord]:
        return [_user_doc(doc) for doc in self._find(self.users, {})]

    def create_supply(self, supply: SupplyRecord) -> InsertResult:
        result = self.supplies.insert_one(_supply_fields(supply))
        return InsertResult(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def list_supplies(self, limit: Optional[int] = None) -> list[SupplyRecord]:
        return [_supply_doc(doc) for doc in self._find(self.supplies, {}, limit)]

    def get_supply(self, supply_id: str) -> Optional[SupplyRecord]:
        doc = self.supplies.find_one({"_id": parse_object_id(supply_id)})
        return _supply_doc(doc) if doc else None

    def update_supply(self, supply_id: str, fields: dict) -> int:
        oid = parse_object_id(supply_id)
        updates = {k: v for k, v in fields.items() if k in SUPPLY_FIELDS}
        if not updates:
            return self.supplies.count_documents({"_id": oid}, limit=1)
        result = self.supplies.update_one({"_id": oid}, {"$set": updates})
        return result.matched_count

    def delete_supply(self, supply_id: str) -> DeleteResult:
        result = self.supplies.delete_one({"_id": parse_object_id(supply_id)})
        return DeleteResult(
            deleted_count=result.deleted_count, acknowledged=result.acknowledged
        )

    def create_volunteer(self, volunteer: VolunteerRecord) -> InsertResult:
        result = self.volunteers.insert_one(_volunteer_fields(volunteer))
        return InsertResult(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def list_volunteers(self, limit: Optional[int] = None) -> list[VolunteerRecord]:
        return [_volunteer_doc(doc) for doc in self._find(self.volunteers, {}, limit)]

    def create_community_post(self, post: CommunityPostRecord) -> InsertResult:
        result = self.community.insert_one(_community_fields(post))
        return InsertResult(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def list_community_posts(
        self, limit: Optional[int] = None
    ) -> list[CommunityPostRecord]:
        return [_community_doc(doc) for doc in self._find(self.community, {}, limit)]

    def get_community_post(self, post_id: str) -> Optional[CommunityPostRecord]:
        doc = self.community.find_one({"_id": parse_object_id(post_id)})
        return _community_doc(doc) if doc else None

    def create_comment(self, comment: CommentRecord) -> InsertResult:
        result = self.comments.insert_one(_comment_fields(comment))
        return InsertResult(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def list_comments(self, post_id: Optional[str] = None) -> list[CommentRecord]:
        query = {"id": post_id} if post_id else {}
        return [_comment_doc(doc) for doc in self._find(self.comments, query)]
