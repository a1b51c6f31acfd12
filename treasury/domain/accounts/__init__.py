# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    Account,
    ClaimCode,
    ClaimCodeStatus,
    CookiePolicy,
    SessionGrant,
    SessionInfo,
    normalize_login,
)
from .exceptions import (
    ClaimCodeAlreadyUsedError,
    InvalidClaimCodeError,
    InvalidCredentialsError,
    LoginAlreadyTakenError,
    UnauthenticatedError,
)
from .repositories import AccountRepository, ClaimCodeRepository, PasswordHasher

__all__ = [
    "Account",
    "AccountRepository",
    "ClaimCode",
    "ClaimCodeAlreadyUsedError",
    "ClaimCodeRepository",
    "ClaimCodeStatus",
    "CookiePolicy",
    "InvalidClaimCodeError",
    "InvalidCredentialsError",
    "LoginAlreadyTakenError",
    "PasswordHasher",
    "SessionGrant",
    "SessionInfo",
    "UnauthenticatedError",
    "normalize_login",
]
