"""
Unit Tests for the Motor-backed Pass Request Store
"""
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from app.exceptions import (
    PassRequestNotFoundError,
    PassSourceReadError,
    PassSourceWriteError,
    UnknownPassSourceError,
)
from app.models.pass_request import PassRequest, PassStatus
from app.services.pass_store import PassRequestStore

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_database(documents_by_source=None):
    """MagicMock database whose collections return canned documents"""
    documents_by_source = documents_by_source or {}
    collections = {}

    def get_collection(name):
        if name not in collections:
            collection = MagicMock(name=name)
            cursor = MagicMock()
            cursor.to_list = AsyncMock(return_value=documents_by_source.get(name, []))
            collection.find.return_value = cursor
            collections[name] = collection
        return collections[name]

    database = MagicMock()
    database.__getitem__.side_effect = get_collection
    return database, get_collection


@pytest.fixture
def sources():
    return ["busPassRequests", "route-1", "route-2"]


class TestQueries:
    """Test filtered reads"""

    @pytest.mark.asyncio
    async def test_query_approved_requests_filter(self, sources):
        database, collection = make_database({
            "route-1": [{"_id": ObjectId(), "studentId": "s-1", "status": "approved"}]
        })
        store = PassRequestStore(database, sources)

        requests = await store.query_approved_requests("route-1", "s-1")

        collection("route-1").find.assert_called_once_with({"studentId": "s-1", "status": "approved"})
        assert len(requests) == 1
        assert requests[0].source_collection == "route-1"

    @pytest.mark.asyncio
    async def test_unknown_source(self, sources):
        database, _ = make_database()
        store = PassRequestStore(database, sources)

        with pytest.raises(UnknownPassSourceError):
            await store.query_approved_requests("route-99", "s-1")

    @pytest.mark.asyncio
    async def test_driver_error_becomes_read_error(self, sources):
        database, collection = make_database()
        collection("route-2").find.return_value.to_list.side_effect = ServerSelectionTimeoutError("down")
        store = PassRequestStore(database, sources)

        with pytest.raises(PassSourceReadError) as exc_info:
            await store.query_approved_requests("route-2", "s-1")

        assert exc_info.value.source_id == "route-2"

    @pytest.mark.asyncio
    async def test_malformed_documents_skipped(self, sources):
        database, _ = make_database({
            "busPassRequests": [
                {"_id": ObjectId(), "status": "approved"},
                {"_id": ObjectId(), "studentId": "s-1", "status": "approved"},
            ]
        })
        store = PassRequestStore(database, sources)

        requests = await store.list_requests("busPassRequests")

        assert [request.student_id for request in requests] == ["s-1"]

    @pytest.mark.asyncio
    async def test_list_all_requests_tags_sources(self, sources):
        database, collection = make_database({
            "busPassRequests": [{"studentId": "a", "status": "pending"}],
            "route-2": [{"studentId": "b", "status": "pending"}],
        })
        store = PassRequestStore(database, sources)

        requests = await store.list_all_requests(PassStatus.PENDING)

        assert {(r.student_id, r.source_collection) for r in requests} == {
            ("a", "busPassRequests"),
            ("b", "route-2"),
        }
        for source in sources:
            collection(source).find.assert_called_once_with({"status": "pending"})

    @pytest.mark.asyncio
    async def test_list_student_requests_scans_every_source(self, sources):
        database, collection = make_database()
        store = PassRequestStore(database, sources)

        assert await store.list_student_requests("s-1") == []
        for source in sources:
            collection(source).find.assert_called_once_with({"studentId": "s-1"})


class TestWrites:
    """Test inserts and decisions"""

    @pytest.mark.asyncio
    async def test_insert_request(self, sources):
        database, collection = make_database()
        inserted_id = ObjectId()
        collection("route-1").insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted_id))
        store = PassRequestStore(database, sources)

        saved = await store.insert_request(
            "route-1",
            PassRequest(student_id="s-1", route_name="route-1", request_date=NOW)
        )

        collection("route-1").insert_one.assert_awaited_once_with({
            "studentId": "s-1",
            "status": "pending",
            "profileType": "student",
            "routeName": "route-1",
            "requestDate": NOW,
        })
        assert saved.id == str(inserted_id)
        assert saved.source_collection == "route-1"

    @pytest.mark.asyncio
    async def test_approve_stamps_approval_time(self, sources):
        database, collection = make_database()
        request_id = ObjectId()
        collection("route-2").find_one_and_update = AsyncMock(return_value={
            "_id": request_id, "studentId": "s-1", "status": "approved", "approvedAt": NOW,
        })
        store = PassRequestStore(database, sources, clock=lambda: NOW)

        updated = await store.decide("route-2", str(request_id), PassStatus.APPROVED, decided_by="admin-1")

        query, update = collection("route-2").find_one_and_update.call_args.args
        assert query == {"_id": request_id}
        assert update["$set"] == {"status": "approved", "decidedBy": "admin-1", "approvedAt": NOW}
        assert update["$unset"] == {"validUntil": ""}
        assert updated.status == PassStatus.APPROVED
        assert updated.source_collection == "route-2"

    @pytest.mark.asyncio
    async def test_approve_with_explicit_expiry(self, sources):
        database, collection = make_database()
        request_id = ObjectId()
        valid_until = datetime(2024, 12, 31, tzinfo=timezone.utc)
        collection("route-1").find_one_and_update = AsyncMock(return_value={
            "_id": request_id, "studentId": "s-1", "status": "approved",
        })
        store = PassRequestStore(database, sources, clock=lambda: NOW)

        await store.decide(
            "route-1", str(request_id), PassStatus.APPROVED,
            decided_by="admin-1", valid_until=valid_until, comment="ok"
        )

        _, update = collection("route-1").find_one_and_update.call_args.args
        assert update["$set"]["validUntil"] == valid_until
        assert update["$set"]["adminComment"] == "ok"
        assert "$unset" not in update

    @pytest.mark.asyncio
    async def test_reject_clears_timestamps(self, sources):
        database, collection = make_database()
        request_id = ObjectId()
        collection("route-1").find_one_and_update = AsyncMock(return_value={
            "_id": request_id, "studentId": "s-1", "status": "rejected",
        })
        store = PassRequestStore(database, sources)

        await store.decide("route-1", str(request_id), PassStatus.REJECTED, decided_by="admin-1")

        _, update = collection("route-1").find_one_and_update.call_args.args
        assert update["$set"]["status"] == "rejected"
        assert update["$unset"] == {"approvedAt": "", "validUntil": ""}

    @pytest.mark.asyncio
    async def test_decide_missing_request(self, sources):
        database, collection = make_database()
        collection("route-1").find_one_and_update = AsyncMock(return_value=None)
        store = PassRequestStore(database, sources)

        with pytest.raises(PassRequestNotFoundError):
            await store.decide("route-1", str(ObjectId()), PassStatus.REJECTED, decided_by="admin-1")

    @pytest.mark.asyncio
    async def test_invalid_object_id_is_not_found(self, sources):
        database, _ = make_database()
        store = PassRequestStore(database, sources)

        with pytest.raises(PassRequestNotFoundError):
            await store.get_request("route-1", "not-an-id")


class TestSourceIsolation:
    """Test driver failures on writes and partial outages on fan-out reads"""

    @pytest.mark.asyncio
    async def test_insert_driver_error(self, sources):
        database, collection = make_database()
        collection("route-1").insert_one = AsyncMock(side_effect=AutoReconnect("primary stepped down"))
        store = PassRequestStore(database, sources)

        with pytest.raises(PassSourceWriteError) as exc_info:
            await store.insert_request("route-1", PassRequest(student_id="s-1"))

        assert exc_info.value.source_id == "route-1"
        assert isinstance(exc_info.value, PassSourceReadError)

    @pytest.mark.asyncio
    async def test_decide_driver_error(self, sources):
        database, collection = make_database()
        collection("route-2").find_one_and_update = AsyncMock(side_effect=AutoReconnect("primary stepped down"))
        store = PassRequestStore(database, sources)

        with pytest.raises(PassSourceWriteError):
            await store.decide("route-2", str(ObjectId()), PassStatus.APPROVED, decided_by="admin-1")

    @pytest.mark.asyncio
    async def test_unreadable_source_skipped(self, sources, caplog):
        database, collection = make_database({
            "busPassRequests": [{"studentId": "s-1", "status": "pending"}],
            "route-2": [{"studentId": "s-1", "status": "rejected"}],
        })
        collection("route-1").find.return_value.to_list.side_effect = ServerSelectionTimeoutError("down")
        store = PassRequestStore(database, sources)

        with caplog.at_level(logging.WARNING, logger="app.services.pass_store"):
            requests = await store.list_student_requests("s-1")

        assert {request.source_collection for request in requests} == {"busPassRequests", "route-2"}
        assert "route-1" in caplog.text

    @pytest.mark.asyncio
    async def test_every_source_unreadable(self, sources):
        database, collection = make_database()
        for source in sources:
            collection(source).find.return_value.to_list.side_effect = ServerSelectionTimeoutError("down")
        store = PassRequestStore(database, sources)

        with pytest.raises(PassSourceReadError):
            await store.list_all_requests()
