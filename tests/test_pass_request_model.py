"""
Unit Tests for the Pass Request Model
"""
from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from app.models.pass_request import (
    PassDecision,
    PassRequest,
    PassStatus,
    ProfileType,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestFromDocument:
    """Test reading stored documents"""

    def test_reads_camel_case_document(self):
        object_id = ObjectId()
        request = PassRequest.model_validate({
            "_id": object_id,
            "studentId": "uid-1",
            "status": "approved",
            "studentName": "Asha",
            "pickupPoint": "Main Gate",
            "approvedAt": datetime(2024, 1, 1),
            "validUntil": None,
        })

        assert request.id == str(object_id)
        assert request.student_id == "uid-1"
        assert request.status == PassStatus.APPROVED
        assert request.pickup_point == "Main Gate"
        assert request.approved_at == JAN_1
        assert request.valid_until is None

    def test_malformed_timestamp_is_absent(self):
        request = PassRequest.model_validate({
            "studentId": "uid-1",
            "status": "approved",
            "approvedAt": "yesterday",
            "requestDate": {"seconds": 1704067200, "nanoseconds": 0},
        })

        assert request.approved_at is None
        assert request.request_date == JAN_1

    def test_missing_profile_type_defaults_to_student(self):
        request = PassRequest.model_validate({"studentId": "uid-1", "profileType": None})

        assert request.profile_type == ProfileType.STUDENT
        assert request.status == PassStatus.PENDING

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            PassRequest.model_validate({"studentId": "uid-1", "status": "maybe"})

    def test_student_id_required(self):
        with pytest.raises(ValidationError):
            PassRequest.model_validate({"status": "approved"})


class TestToDocument:
    """Test the stored shape"""

    def test_camel_case_keys_and_plain_values(self):
        request = PassRequest(
            id="abc",
            student_id="uid-1",
            status=PassStatus.PENDING,
            route_name="route-3",
            request_date=JAN_1,
            source_collection="route-3",
        )

        document = request.to_document()

        assert document == {
            "studentId": "uid-1",
            "status": "pending",
            "profileType": "student",
            "routeName": "route-3",
            "requestDate": JAN_1,
        }


class TestPassDecision:
    """Test admin decisions"""

    def test_pending_is_not_a_decision(self):
        with pytest.raises(ValidationError):
            PassDecision(status="pending")

    def test_approval_with_expiry(self):
        decision = PassDecision(status="approved", valid_until=JAN_1)

        assert decision.status == PassStatus.APPROVED
        assert decision.valid_until == JAN_1
