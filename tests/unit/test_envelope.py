from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from common.envelope import (
    FALLBACK_ERROR_MESSAGE,
    LinkRequestStatus,
    LinkStatus,
    UserInfo,
    decode_data,
    decode_error_message,
    decode_response,
)
from common.result import Failure, Success


CREATED = datetime(2024, 9, 3, 10, 0, tzinfo=timezone.utc)


def test_approved_status_survives_wire_round_trip():
    status = LinkRequestStatus(created_at=CREATED, status=LinkStatus.APPROVED, approved_user_id="u1")

    wire = status.to_wire()
    assert wire["status"] == "approved"
    assert wire["user_id"] == "u1"
    assert "creation_date" in wire

    back = LinkRequestStatus.model_validate(wire)
    assert back == status
    assert back.is_approved and back.is_resolved


def test_pending_status_omits_user_id_on_the_wire():
    status = LinkRequestStatus(created_at=CREATED, status=LinkStatus.PENDING)

    wire = status.to_wire()
    assert "user_id" not in wire

    back = LinkRequestStatus.model_validate(wire)
    assert back.approved_user_id is None
    assert back.status is LinkStatus.PENDING
    assert not back.is_resolved


@pytest.mark.parametrize(
    "payload",
    [
        {"creation_date": "2024-09-03T10:00:00Z", "status": "approved"},
        {"creation_date": "2024-09-03T10:00:00Z", "status": "denied", "user_id": "u1"},
    ],
)
def test_status_rejects_user_id_mismatch(payload):
    body = json.dumps({"message": "ok", "data": payload})
    # Invariant violation is treated like any other malformed payload
    assert decode_data(body, LinkRequestStatus) is None


def test_decode_data_parses_typed_payloads():
    assert decode_data('{"message": "ok", "data": "abc"}', str) == "abc"
    assert decode_data('{"message": "ok", "data": 15}', int) == 15
    info = decode_data('{"message": "ok", "data": {"username": "ann", "balance": 40}}', UserInfo)
    assert info == UserInfo(username="ann", balance=40)


@pytest.mark.parametrize("body", [None, "", "not json", "[]", '{"message": "ok"}', '{"data": "x"}'])
def test_decode_data_degrades_to_none(body):
    assert decode_data(body, int) is None


def test_decode_error_message_reads_message_field():
    assert decode_error_message('{"message": "bad token"}') == "bad token"


@pytest.mark.parametrize("body", [None, "", "<html>502</html>", "null", '{"detail": "x"}', '{"message": ""}'])
def test_decode_error_message_falls_back_on_malformed_body(body):
    assert decode_error_message(body) == FALLBACK_ERROR_MESSAGE


def test_decode_response_requires_exact_200():
    ok = decode_response(200, '{"message": "ok", "data": "abc"}', str)
    assert ok == Success("abc")

    created = decode_response(201, '{"message": "created", "data": "abc"}', str)
    assert created == Failure("created", status_code=201)

    missing = decode_response(404, '{"message": "bad token"}', str)
    assert isinstance(missing, Failure)
    assert missing.message == "bad token"
    assert missing.status_code == 404
    assert not missing.is_transport_error
