"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Deux formes de réponse:
- `fail` (4xx): `data` décrit ce qui manque (ex: `{"jwt": "missing authorization"}`)
- `error` (5xx): `message` porte le message d'origine et `execution_time` la durée écoulée
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    status: str
    code: int
    message: str | None = None
    data: dict[str, Any] | None = None
    execution_time: float | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status, "code": self.code}
        if self.message is not None:
            body["message"] = self.message
        if self.data is not None:
            body["data"] = self.data
        if self.execution_time is not None:
            body["execution_time"] = round(self.execution_time, 3)
        return body


class APIError(HTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        data: dict[str, Any] | None = None,
        execution_time: float | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message or "")
        self.message = message
        self.data = data
        self.execution_time = execution_time

    @property
    def envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(
            status="error" if self.status_code >= 500 else "fail",
            code=self.status_code,
            message=self.message,
            data=self.data,
            execution_time=self.execution_time,
        )


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    log.error(
        "API error occurred",
        extra={
            "status_code": exc.status_code,
            "error_message": exc.message,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.envelope.to_dict())


def fail(status_code: int, data: dict[str, Any], execution_time: float | None = None) -> APIError:
    """Erreur client avec données explicatives."""
    return APIError(status_code, data=data, execution_time=execution_time)


def error(message: str, status_code: int = 500, execution_time: float | None = None) -> APIError:
    """Erreur serveur avec message et durée écoulée (ms)."""
    return APIError(status_code, message=message, execution_time=execution_time)
