# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .accounts.sqlalchemy_account_repository import (
    SqlAlchemyAccountRepository,
    SqlAlchemyClaimCodeRepository,
)
from .filesystem.sqlalchemy_entry_repository import SqlAlchemyEntryRepository

__all__ = [
    "SqlAlchemyAccountRepository",
    "SqlAlchemyClaimCodeRepository",
    "SqlAlchemyEntryRepository",
]
