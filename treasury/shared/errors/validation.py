# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError

BODY_FIELD = "body"


def _field_path(loc: Sequence[int | str]) -> str:
    return ".".join(str(part) for part in loc) or BODY_FIELD


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Field names and error types only; submitted values are never echoed."""
    errors = [
        {"field": _field_path(err["loc"]), "type": err["type"]}
        for err in exc.errors(include_url=False, include_input=False, include_context=False)
    ]
    return {
        "fields": sorted({err["field"] for err in errors}),
        "errors": errors,
    }


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = ["BODY_FIELD", "format_pydantic_errors", "raise_validation_error"]
