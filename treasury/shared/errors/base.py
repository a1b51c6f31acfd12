# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(slots=True)
class AppError(Exception):
    """Failure with a stable machine-readable code and its HTTP status.

    ``context`` is returned to the client, so it must never hold secrets or
    internal detail.
    """

    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    @property
    def is_server_fault(self) -> bool:
        return self.status >= HTTPStatus.INTERNAL_SERVER_ERROR

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    """A rule of the domain refused the operation.

    Subclasses only override the ``code`` and ``status`` class attributes.
    """

    code = "domain_error"
    status = HTTPStatus.BAD_REQUEST

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        cls = type(self)
        super().__init__(code=cls.code, status=cls.status, context=context)


class InfrastructureError(AppError):
    code = "infrastructure_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        cls = type(self)
        super().__init__(code=cls.code, status=cls.status, context=context)


class ValidationError(DomainError):
    code = "validation_error"
    status = HTTPStatus.UNPROCESSABLE_ENTITY


# Categories. Callers match on these; the concrete subclasses pick the code.


class AuthenticationError(DomainError):
    code = "unauthenticated"
    status = HTTPStatus.UNAUTHORIZED


class ConflictError(DomainError):
    code = "conflict"
    status = HTTPStatus.CONFLICT


class NotFoundError(DomainError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND


class CapacityError(DomainError):
    code = "capacity_exceeded"
    status = HTTPStatus.INSUFFICIENT_STORAGE


class StoreUnavailableError(InfrastructureError):
    """The persistent store is closed or unreachable.

    Fatal for the current operation only. The detail goes to the server log,
    the caller just sees ``store_unavailable``.
    """

    code = "store_unavailable"
    status = HTTPStatus.SERVICE_UNAVAILABLE
