"""Document store wiring: MongoDB through motor, or mongomock-motor when no URI is set"""
from typing import Any, Optional, Protocol

from bson import ObjectId
from fastapi import Request
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.server_api import ServerApi

from studykit.config import Settings
from studykit.errors import ValidationError

USERS = "users"
DASHBOARD = "dashboard"
CLASSES = "classes"
BUDGET = "budget"
QUESTIONS = "questions"
PLANNER = "monthlyPlannerTasks"


class DocumentStore(Protocol):
    """Interface for the long-lived store handle shared by request handlers."""

    def collection(self, name: str) -> Any:
        ...

    async def ping(self) -> bool:
        ...

    def close(self) -> None:
        ...


class MongoDocumentStore:
    """MongoDB-backed store; collections are motor collections."""

    def __init__(self, uri: str, db_name: str):
        self.client = AsyncIOMotorClient(uri, server_api=ServerApi("1"))
        self.db = self.client[db_name]

    def collection(self, name: str):
        return self.db[name]

    async def ping(self) -> bool:
        await self.client.admin.command("ping")
        return True

    def close(self) -> None:
        self.client.close()


class MockDocumentStore(MongoDocumentStore):
    """Process-local store on mongomock-motor, used for development and tests."""

    def __init__(self, db_name: str = "student_life_toolkit"):
        self.client = AsyncMongoMockClient()
        self.db = self.client[db_name]

    async def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


def create_store(settings: Settings) -> DocumentStore:
    """Build the store handle for the process lifetime."""
    if settings.MONGODB_URI:
        return MongoDocumentStore(settings.MONGODB_URI, settings.DB_NAME)
    return MockDocumentStore(settings.DB_NAME)


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened by the app lifespan"""
    return request.app.state.store


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label}")
    return ObjectId(value)


def serialize_document(doc: Optional[dict]) -> Optional[dict]:
    """Make a stored document JSON-safe (ObjectId -> str)."""
    if doc is None:
        return None
    data = dict(doc)
    if isinstance(data.get("_id"), ObjectId):
        data["_id"] = str(data["_id"])
    return data
