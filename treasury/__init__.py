# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Treasury backend: claim-code accounts, sessions and filesystem metadata."""

__version__ = "0.1.0"
