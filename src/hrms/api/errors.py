from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyExistsError,
    AlreadyProcessedError,
    DatabaseError,
    DomainError,
    NoCheckInRecord,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching kind wins.
STATUS_BY_KIND: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (AlreadyProcessedError, 409),
    (NoCheckInRecord, 400),
    (DatabaseError, 500),
)


def status_for(error: DomainError) -> int:
    for kind, status in STATUS_BY_KIND:
        if isinstance(error, kind):
            return status
    return 400


def error_body(error: DomainError) -> dict:
    details = dict(error.details)
    if isinstance(error, DatabaseError):
        # The connector message may leak SQL; keep it in the logs only.
        details.pop("cause", None)
    return {"error": error.code, "message": error.message, "details": details}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("Request failed: %s", error, exc_info=error)
        else:
            logger.info("Request rejected (%s): %s", error.code, error.message)
        return jsonify(error_body(error)), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return (
            jsonify({"error": (error.name or "HTTP_ERROR").upper().replace(" ", "_"), "message": error.description, "details": {}}),
            error.code or 500,
        )
