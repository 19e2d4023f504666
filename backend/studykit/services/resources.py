"""Single-document CRUD services for users, dashboard, classes, budget and questions"""
from datetime import datetime, timezone
from typing import List, Optional

from pymongo import ReturnDocument

from studykit.database import (
    BUDGET,
    CLASSES,
    DASHBOARD,
    QUESTIONS,
    USERS,
    DocumentStore,
    parse_object_id,
    serialize_document,
)
from studykit.errors import NotFoundError, persistence_errors
from studykit.models.resources import BudgetSummary, UserUpsert


class DocumentResource:
    """
    Generic resource over one collection.

    Identifiers are validated as ObjectIds before any store call, and driver
    failures surface as PersistenceError.
    """

    def __init__(self, store: DocumentStore, collection_name: str, label: str):
        self.collection = store.collection(collection_name)
        self.label = label

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label.capitalize()} not found")

    async def list(self, query: Optional[dict] = None) -> List[dict]:
        with persistence_errors(f"fetch {self.label} records"):
            docs = await self.collection.find(query or {}).to_list(length=None)
        return [serialize_document(doc) for doc in docs]

    async def get(self, doc_id: str) -> dict:
        object_id = parse_object_id(doc_id, f"{self.label} ID")
        with persistence_errors(f"fetch {self.label}"):
            doc = await self.collection.find_one({"_id": object_id})
        if doc is None:
            raise self._not_found()
        return serialize_document(doc)

    async def create(self, data: dict) -> dict:
        document = dict(data)
        with persistence_errors(f"add {self.label}"):
            result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return serialize_document(document)

    async def update(self, doc_id: str, fields: dict) -> dict:
        """Set the given fields and return the updated document"""
        object_id = parse_object_id(doc_id, f"{self.label} ID")
        with persistence_errors(f"update {self.label}"):
            doc = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise self._not_found()
        return serialize_document(doc)

    async def replace(self, doc_id: str, document: dict) -> dict:
        """Replace the whole document and return the new version"""
        object_id = parse_object_id(doc_id, f"{self.label} ID")
        with persistence_errors(f"update {self.label}"):
            doc = await self.collection.find_one_and_replace(
                {"_id": object_id},
                document,
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise self._not_found()
        return serialize_document(doc)

    async def delete(self, doc_id: str) -> None:
        object_id = parse_object_id(doc_id, f"{self.label} ID")
        with persistence_errors(f"delete {self.label}"):
            result = await self.collection.delete_one({"_id": object_id})
        if result.deleted_count == 0:
            raise self._not_found()


class UserService:
    """Users keyed by email"""

    def __init__(self, store: DocumentStore):
        self.collection = store.collection(USERS)

    async def upsert(self, user: UserUpsert) -> dict:
        with persistence_errors("save user"):
            result = await self.collection.update_one(
                {"email": user.email},
                {
                    "$set": {
                        "displayName": user.displayName,
                        "email": user.email,
                        "photoURL": user.photoURL,
                        "createdAt": datetime.now(timezone.utc),
                    }
                },
                upsert=True,
            )
        return {
            "matchedCount": result.matched_count,
            "modifiedCount": result.modified_count,
            "upsertedId": str(result.upserted_id) if result.upserted_id is not None else None,
        }

    async def list(self) -> List[dict]:
        with persistence_errors("fetch users"):
            docs = await self.collection.find({}).to_list(length=None)
        return [serialize_document(doc) for doc in docs]


def dashboard_resource(store: DocumentStore) -> DocumentResource:
    return DocumentResource(store, DASHBOARD, "dashboard item")


def class_resource(store: DocumentStore) -> DocumentResource:
    return DocumentResource(store, CLASSES, "class")


def question_resource(store: DocumentStore) -> DocumentResource:
    return DocumentResource(store, QUESTIONS, "question")


class BudgetResource(DocumentResource):
    """Budget ledger; updates replace the whole entry"""

    def __init__(self, store: DocumentStore):
        super().__init__(store, BUDGET, "budget entry")

    async def summary(self) -> BudgetSummary:
        entries = await self.list()
        income = sum(float(e.get("amount") or 0) for e in entries if e.get("type") == "income")
        expense = sum(float(e.get("amount") or 0) for e in entries if e.get("type") == "expense")
        return BudgetSummary(
            income=round(income, 2),
            expense=round(expense, 2),
            balance=round(income - expense, 2),
            entries=len(entries),
        )
