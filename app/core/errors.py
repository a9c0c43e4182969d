"""Domain exceptions raised by the learning path services.

Each error carries a machine readable ``code`` and the HTTP status the API
layer should answer with. Routers translate them with :func:`to_http_exception`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException


@dataclass(eq=False)
class LearningPathError(Exception):
    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code

    def detail(self) -> Any:
        return self.code


@dataclass(eq=False)
class PathGenerationError(LearningPathError):
    """The outline could not be obtained or parsed; fatal for a generation."""

    code: str = "generation_failed"
    status_code: int = 502


@dataclass(eq=False)
class ResourceUnavailableError(LearningPathError):
    """A single resource lookup failed. Recovered with a placeholder."""

    code: str = "resource_unavailable"
    status_code: int = 503
    query: Optional[str] = None


@dataclass(eq=False)
class PathConflictError(LearningPathError):
    code: str = "path_already_exists"
    status_code: int = 409
    existing_path_id: Optional[int] = None

    def detail(self) -> Any:
        return {"code": self.code, "existing_path_id": self.existing_path_id}


@dataclass(eq=False)
class PathNotFoundError(LearningPathError):
    code: str = "path_not_found"
    status_code: int = 404


@dataclass(eq=False)
class PathValidationError(LearningPathError):
    code: str = "invalid_path_data"
    status_code: int = 422
    reason: Optional[str] = None

    def detail(self) -> Any:
        if self.reason:
            return {"code": self.code, "reason": self.reason}
        return self.code


@dataclass(eq=False)
class ItemLockedError(LearningPathError):
    code: str = "item_locked"
    status_code: int = 409


@dataclass(eq=False)
class PathArchivedError(LearningPathError):
    code: str = "path_archived"
    status_code: int = 409


def to_http_exception(exc: LearningPathError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail())
