"""
Unit Tests for Exception Handlers.

Tests the exception handler functions in isolation.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError

from personal_notes.backend.core.exception_handlers import (
    EXCEPTION_STATUS_MAP,
    _get_request_id,
    application_error_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from personal_notes.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)


def _request(request_id: str = "req-1") -> MagicMock:
    request = MagicMock(spec=Request)
    request.state.request_id = request_id
    request.headers = {}
    request.url.path = "/api/v1/notes"
    request.method = "GET"
    return request


def _body(response) -> dict:
    return json.loads(response.body)


class TestExceptionStatusMapping:
    """Tests for exception to HTTP status code mapping."""

    @pytest.mark.parametrize("exc_type,status", [
        (NotFoundError, 404),
        (ValidationError, 400),
        (AuthenticationError, 401),
        (AuthorizationError, 403),
        (ConflictError, 409),
        (DatabaseError, 503),
    ])
    def test_status_mapping(self, exc_type, status):
        assert EXCEPTION_STATUS_MAP[exc_type] == status


class TestGetRequestId:
    """Tests for request ID extraction."""

    def test_extracts_from_request_state(self):
        request = MagicMock(spec=Request)
        request.state.request_id = "state-123"
        request.headers = {}

        assert _get_request_id(request) == "state-123"

    def test_extracts_from_header(self):
        request = MagicMock(spec=Request)
        del request.state.request_id
        request.headers = {"x-request-id": "header-456"}

        assert _get_request_id(request) == "header-456"


class TestApplicationErrorHandler:
    """Tests for ApplicationError conversion."""

    @pytest.mark.asyncio
    async def test_not_found_response(self):
        response = await application_error_handler(_request(), NotFoundError("Note not found"))

        body = _body(response)
        assert response.status_code == 404
        assert body["success"] is False
        assert body["error"]["code"] == "RES_NOT_FOUND"
        assert body["error"]["message"] == "Note not found"
        assert body["metadata"]["request_id"] == "req-1"

    @pytest.mark.asyncio
    async def test_forbidden_response(self):
        response = await application_error_handler(
            _request(),
            AuthorizationError("You can only update your own notes"),
        )

        body = _body(response)
        assert response.status_code == 403
        assert body["error"]["code"] == "AUTHZ_FORBIDDEN"

    @pytest.mark.asyncio
    async def test_unauthenticated_sets_challenge_header(self):
        response = await application_error_handler(_request(), AuthenticationError("Not authenticated"))

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_validation_details_included(self):
        exc = ValidationError("Required fields missing", details={"missing_fields": ["title"]})

        response = await application_error_handler(_request(), exc)

        body = _body(response)
        assert response.status_code == 400
        assert body["error"]["details"] == {"missing_fields": ["title"]}

    @pytest.mark.asyncio
    async def test_unmapped_application_error_is_500(self):
        response = await application_error_handler(_request(), ApplicationError("boom"))

        assert response.status_code == 500


class TestValidationErrorHandler:
    """Tests for request validation errors."""

    @pytest.mark.asyncio
    async def test_formats_field_errors(self):
        exc = RequestValidationError([
            {"loc": ("body", "title"), "msg": "String should have at least 1 character", "type": "string_too_short"},
        ])

        response = await validation_error_handler(_request(), exc)

        body = _body(response)
        assert response.status_code == 422
        assert body["error"]["code"] == "VAL_REQUEST_INVALID"
        errors = body["error"]["details"]["validation_errors"]
        assert errors[0]["field"] == "body.title"


class TestUnhandledExceptionHandler:
    """Tests for the catch-all handler."""

    @pytest.mark.asyncio
    async def test_hides_internal_details(self):
        response = await unhandled_exception_handler(_request(), RuntimeError("secret detail"))

        body = _body(response)
        assert response.status_code == 500
        assert body["error"]["code"] == "SYS_INTERNAL_ERROR"
        assert "secret detail" not in response.body.decode()
