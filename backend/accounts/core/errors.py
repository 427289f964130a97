"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from accounts.core.logger import ensure_request_id

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    The payload also carries the ``statusCode`` / ``message`` / ``success``
    members of the success envelope so clients can branch on one shape.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    instance = request.path if request else None
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": instance,
        "code": code,
        "statusCode": status,
        "message": message,
        "success": False,
        "data": None,
    }
    if details:
        problem["details"] = details
    # Always attach correlation id
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """
    Return a Flask response with ``application/problem+json`` media type.

    :param problem: Problem details payload.
    :returns: Flask JSON Response with proper MIME type.
    :rtype: flask.Response
    """
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case. Defaults to
        ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload (e.g., validation messages) included in the
        response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """
        Serialize error metadata into an RFC 7807 problem.

        :returns: Problem details dictionary.
        :rtype: dict
        """
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


# Domain conveniences
class BadRequest(APIError):
    """400 for missing or malformed input."""

    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code="bad_request", details=details)


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness/constraint collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class InternalError(APIError):
    """500 for failures the client cannot fix."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
        )


def unauthorized_response(message: str) -> tuple[Response, int]:
    """Render a 401 problem; used by the JWT extension callbacks."""
    problem = _as_problem(status=HTTPStatus.UNAUTHORIZED, code="unauthorized", message=message)
    log.warning("JWT rejected: msg=%s request_id=%s", message, problem.get("request_id"))
    return _problem_response(problem), HTTPStatus.UNAUTHORIZED


def _log_problem(kind: str, problem: dict[str, Any], *, exc_info: Any = None) -> None:
    """4xx as warnings; 5xx as errors with the traceback when one is given."""
    status = int(problem["status"])
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "%s: code=%s status=%s msg=%s request_id=%s",
        kind,
        problem.get("code"),
        status,
        problem.get("detail"),
        problem.get("request_id"),
        exc_info=exc_info if status >= 500 else None,
    )


# Exceptions rendered with a fixed, client-safe message: (status, code, message)
_FIXED_PROBLEMS: tuple[tuple[type[Exception], int, str, str], ...] = (
    (IntegrityError, HTTPStatus.CONFLICT, "conflict", "Resource conflict"),
    (
        OperationalError,
        HTTPStatus.SERVICE_UNAVAILABLE,
        "service_unavailable",
        "Service temporarily unavailable",
    ),
    (Exception, HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"),
)


def _fixed_handler(status: int, code: str, message: str):
    def handler(err: Exception):
        problem = _as_problem(status=status, code=code, message=message)
        # Never leak driver or internal details; the traceback goes to the log
        log.error(
            "%s: request_id=%s", type(err).__name__, problem.get("request_id"), exc_info=err
        )
        return _problem_response(problem), status

    return handler


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Every handled error is rendered as problem JSON with a ``request_id``.
    The JWT extension's rejections are routed through the same renderer.
    """
    from accounts.core.extensions import jwt

    jwt.unauthorized_loader(unauthorized_response)
    jwt.invalid_token_loader(unauthorized_response)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return unauthorized_response("Token has expired")

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        _log_problem("APIError", problem, exc_info=err.__cause__ or err)
        return _problem_response(problem), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _http_status_to_code(status)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        problem = _as_problem(status=status, code=code, message=message)
        _log_problem("HTTPException", problem)
        return _problem_response(problem), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message="Invalid request payload",
            details={"errors": err.messages},
        )
        _log_problem("ValidationError", problem)
        return _problem_response(problem), HTTPStatus.BAD_REQUEST

    for exc_type, status, code, message in _FIXED_PROBLEMS:
        app.register_error_handler(exc_type, _fixed_handler(status, code, message))
