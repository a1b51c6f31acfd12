# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .store import TransactionalStore, UnitOfWork

__all__ = ["TransactionalStore", "UnitOfWork"]
