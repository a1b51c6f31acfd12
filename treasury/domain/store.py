# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Capability the services use to reach the persistent store."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from treasury.domain.accounts.repositories import AccountRepository, ClaimCodeRepository
from treasury.domain.filesystem.repositories import EntryRepository


class UnitOfWork(Protocol):
    accounts: AccountRepository
    claim_codes: ClaimCodeRepository
    entries: EntryRepository


class TransactionalStore(Protocol):
    """Hands out units of work that commit as one transaction.

    Two units of work touching the same account or claim code never
    interleave: the second starts after the first has committed or rolled
    back.
    """

    def unit_of_work(self) -> AbstractContextManager[UnitOfWork]: ...
