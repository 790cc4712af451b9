"""
Bus Pass Portal - Test Configuration and Fixtures
"""
import asyncio
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from app.config import settings
from app.exceptions import PassRequestNotFoundError, PassSourceReadError, UnknownPassSourceError
from app.models.pass_request import PassRequest, PassStatus


class FakePassStore:
    """In-memory stand-in for PassRequestStore"""

    def __init__(self, sources: Iterable[str]):
        self.sources = list(sources)
        self.records: Dict[str, List[PassRequest]] = {source: [] for source in self.sources}
        self.failing: set = set()
        self.delays: Dict[str, float] = {}
        self.queried: List[str] = []
        self.cancelled: List[str] = []

    def add(self, source_id: str, request: PassRequest) -> PassRequest:
        request = request.model_copy(update={
            "id": request.id or f"{source_id}-{len(self.records[source_id]) + 1}",
            "source_collection": source_id,
        })
        self.records[source_id].append(request)
        return request

    async def query_approved_requests(self, source_id: str, student_id: str) -> List[PassRequest]:
        self.queried.append(source_id)
        if source_id not in self.records:
            raise UnknownPassSourceError(source_id)
        if source_id in self.delays:
            try:
                await asyncio.sleep(self.delays[source_id])
            except asyncio.CancelledError:
                self.cancelled.append(source_id)
                raise
        if source_id in self.failing:
            raise PassSourceReadError(source_id, "connection reset")
        return [
            request for request in self.records[source_id]
            if request.student_id == student_id and request.status == PassStatus.APPROVED
        ]

    async def list_student_requests(self, student_id: str) -> List[PassRequest]:
        return [
            request
            for source in self.sources
            for request in self.records[source]
            if request.student_id == student_id
        ]

    async def list_all_requests(self, status: Optional[PassStatus] = None) -> List[PassRequest]:
        return [
            request
            for source in self.sources
            for request in self.records[source]
            if status is None or request.status == status
        ]

    async def insert_request(self, source_id: str, request: PassRequest) -> PassRequest:
        if source_id not in self.records:
            raise UnknownPassSourceError(source_id)
        return self.add(source_id, request)

    async def decide(self, source_id, request_id, status, decided_by, valid_until=None, comment=None):
        if source_id not in self.records:
            raise UnknownPassSourceError(source_id)
        for index, request in enumerate(self.records[source_id]):
            if request.id == request_id:
                approved = status == PassStatus.APPROVED
                updated = request.model_copy(update={
                    "status": PassStatus(status),
                    "decided_by": decided_by,
                    "approved_at": datetime.now(timezone.utc) if approved else None,
                    "valid_until": valid_until if approved else None,
                    "admin_comment": comment,
                })
                self.records[source_id][index] = updated
                return updated
        raise PassRequestNotFoundError(source_id, request_id)


@pytest.fixture
def sources() -> List[str]:
    """General pool plus the twelve route pools"""
    return settings.pass_sources


@pytest.fixture
def store(sources) -> FakePassStore:
    return FakePassStore(sources)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_request():
    """Build a pass request with sensible defaults"""
    def _make(student_id="student-1", status=PassStatus.APPROVED, **fields) -> PassRequest:
        return PassRequest(student_id=student_id, status=status, **fields)
    return _make
