"""Uniform success/error results for admin and ingestion operations."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable

from marshmallow import ValidationError

from ..gateway import DocumentNotFound, GatewayError, ObjectNotFound
from .csv_parser import CSVParseError

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """An operation failed with a message that is safe to show to users."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, *, data: Any = None):
        super().__init__(message)
        self.message = message
        self.data = data


class NotFoundError(ActionError):
    status = HTTPStatus.NOT_FOUND


@dataclass
class ActionResult:
    success: bool
    data: Any = None
    error: str | None = None
    status: int = HTTPStatus.OK

    @classmethod
    def ok(cls, data: Any = None, status: int = HTTPStatus.OK) -> "ActionResult":
        return cls(success=True, data=data, status=status)

    @classmethod
    def fail(
        cls, error: str, status: int = HTTPStatus.BAD_REQUEST, data: Any = None
    ) -> "ActionResult":
        return cls(success=False, error=error, status=status, data=data)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload


def action(
    name: str,
    *,
    status: int = HTTPStatus.OK,
    not_found: str = "Record not found",
) -> Callable:
    """Run an operation and normalize its outcome into an `ActionResult`.

    Schema validation errors are re-raised so that blueprints can render
    field-level messages.
    """

    def decorator(fn: Callable) -> Callable[..., ActionResult]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> ActionResult:
            try:
                value = fn(*args, **kwargs)
            except ValidationError:
                raise
            except ActionError as exc:
                level = logging.ERROR if exc.status >= 500 else logging.INFO
                logger.log(level, "%s rejected: %s", name, exc.message, extra={"action": name})
                return ActionResult.fail(exc.message, exc.status, exc.data)
            except CSVParseError as exc:
                logger.info("%s rejected: %s", name, exc, extra={"action": name})
                return ActionResult.fail(str(exc), HTTPStatus.BAD_REQUEST)
            except (DocumentNotFound, ObjectNotFound) as exc:
                logger.info("%s: %s", name, exc, extra={"action": name})
                return ActionResult.fail(not_found, HTTPStatus.NOT_FOUND)
            except GatewayError:
                logger.exception("%s failed against the storage backend", name, extra={"action": name})
                return ActionResult.fail("Storage backend request failed", HTTPStatus.BAD_GATEWAY)
            except Exception:
                logger.exception("%s failed", name, extra={"action": name})
                return ActionResult.fail("Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR)
            if isinstance(value, ActionResult):
                return value
            return ActionResult.ok(value, status)

        return wrapper

    return decorator


def paginated(documents: list[dict[str, Any]], total: int, page: int, page_size: int) -> dict:
    return {
        "documents": documents,
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size) if page_size else 0,
    }
