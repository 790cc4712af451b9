"""
Pass Request Store
Motor access to the partitioned pass request collections
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.exceptions import (
    PassRequestNotFoundError,
    PassSourceReadError,
    PassSourceWriteError,
    UnknownPassSourceError,
)
from app.models.pass_request import PassRequest, PassStatus
from app.services.timestamps import utcnow

logger = logging.getLogger(__name__)


class PassRequestStore:
    """
    Reads and writes pass requests in the configured source collections.

    Every source has the same document shape; the collection a record was
    read from is reported back in `PassRequest.source_collection`.
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        sources: Sequence[str],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.sources = list(sources)
        self.clock = clock

    def _collection(self, source_id: str):
        if source_id not in self.sources:
            raise UnknownPassSourceError(source_id)
        return self.database[source_id]

    def _parse_documents(self, source_id: str, documents: List[Dict[str, Any]]) -> List[PassRequest]:
        requests = []
        for document in documents:
            try:
                request = PassRequest.model_validate(document)
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed pass request %s in %s (%d validation errors)",
                    document.get("_id"), source_id, exc.error_count()
                )
                continue
            request.source_collection = source_id
            requests.append(request)
        return requests

    async def _find(self, source_id: str, query: Dict[str, Any]) -> List[PassRequest]:
        collection = self._collection(source_id)
        try:
            documents = await collection.find(query).to_list(length=None)
        except PyMongoError as exc:
            raise PassSourceReadError(source_id, str(exc)) from exc
        return self._parse_documents(source_id, documents)

    async def _find_everywhere(self, query: Dict[str, Any]) -> List[PassRequest]:
        """
        Matching requests from every source.

        A source that cannot be read is logged and skipped; only when no
        source can be read is the first failure raised.
        """
        results = await asyncio.gather(
            *(self._find(source, query) for source in self.sources),
            return_exceptions=True
        )

        requests: List[PassRequest] = []
        failures: List[PassSourceReadError] = []
        for source, result in zip(self.sources, results):
            if isinstance(result, PassSourceReadError):
                logger.warning("Skipping pass source %s: %s", source, result.reason)
                failures.append(result)
                continue
            if isinstance(result, BaseException):
                raise result
            requests.extend(result)

        if failures and len(failures) == len(self.sources):
            raise failures[0]
        return requests

    async def query_approved_requests(self, source_id: str, student_id: str) -> List[PassRequest]:
        """Approved requests of one student in one source"""
        return await self._find(
            source_id,
            {"studentId": student_id, "status": PassStatus.APPROVED.value}
        )

    async def list_requests(self, source_id: str, status: Optional[PassStatus] = None) -> List[PassRequest]:
        query = {}
        if status:
            query["status"] = PassStatus(status).value
        return await self._find(source_id, query)

    async def list_student_requests(self, student_id: str) -> List[PassRequest]:
        """Every request of a student, across all sources"""
        return await self._find_everywhere({"studentId": student_id})

    async def list_all_requests(self, status: Optional[PassStatus] = None) -> List[PassRequest]:
        query = {}
        if status:
            query["status"] = PassStatus(status).value
        return await self._find_everywhere(query)

    async def insert_request(self, source_id: str, request: PassRequest) -> PassRequest:
        collection = self._collection(source_id)
        try:
            result = await collection.insert_one(request.to_document())
        except PyMongoError as exc:
            raise PassSourceWriteError(source_id, str(exc)) from exc
        return request.model_copy(
            update={"id": str(result.inserted_id), "source_collection": source_id}
        )

    async def get_request(self, source_id: str, request_id: str) -> PassRequest:
        collection = self._collection(source_id)
        if not ObjectId.is_valid(request_id):
            raise PassRequestNotFoundError(source_id, request_id)

        try:
            document = await collection.find_one({"_id": ObjectId(request_id)})
        except PyMongoError as exc:
            raise PassSourceReadError(source_id, str(exc)) from exc

        if document is None:
            raise PassRequestNotFoundError(source_id, request_id)

        request = PassRequest.model_validate(document)
        request.source_collection = source_id
        return request

    async def decide(
        self,
        source_id: str,
        request_id: str,
        status: PassStatus,
        decided_by: str,
        valid_until: Optional[datetime] = None,
        comment: Optional[str] = None,
    ) -> PassRequest:
        """
        Approve or reject a request.

        Approval stamps approvedAt with the current time and stores the
        approver's explicit validUntil, if any; without one the one-year
        fallback applies. Rejection clears both timestamps.
        """
        collection = self._collection(source_id)
        if not ObjectId.is_valid(request_id):
            raise PassRequestNotFoundError(source_id, request_id)

        status = PassStatus(status)
        to_set: Dict[str, Any] = {"status": status.value, "decidedBy": decided_by}
        to_unset: Dict[str, Any] = {}

        if status == PassStatus.APPROVED:
            to_set["approvedAt"] = self.clock()
            if valid_until is not None:
                to_set["validUntil"] = valid_until
            else:
                to_unset["validUntil"] = ""
        else:
            to_unset["approvedAt"] = ""
            to_unset["validUntil"] = ""

        if comment:
            to_set["adminComment"] = comment

        update: Dict[str, Any] = {"$set": to_set}
        if to_unset:
            update["$unset"] = to_unset

        try:
            document = await collection.find_one_and_update(
                {"_id": ObjectId(request_id)},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise PassSourceWriteError(source_id, str(exc)) from exc
        if document is None:
            raise PassRequestNotFoundError(source_id, request_id)

        request = PassRequest.model_validate(document)
        request.source_collection = source_id
        return request
