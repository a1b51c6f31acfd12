# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from treasury.shared.errors.base import AuthenticationError, ConflictError, DomainError


class InvalidClaimCodeError(DomainError):
    code = "invalid_claim_code"
    status = HTTPStatus.BAD_REQUEST


class ClaimCodeAlreadyUsedError(ConflictError):
    code = "claim_code_already_used"


class LoginAlreadyTakenError(ConflictError):
    code = "login_already_taken"


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"


class UnauthenticatedError(AuthenticationError):
    code = "unauthenticated"
