# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Logging for treasury: one loguru pipeline with correlation ids and redaction.

Modules log through :data:`logger`; :func:`setup_logging` is called once by the
entry point. Without it, loguru's default stderr sink is used unchanged.
"""

from .logger import (
    clear_correlation_id,
    default_log_file,
    get_correlation_id,
    logger,
    set_correlation_id,
    setup_logging,
)
from .sensitive_filter import sanitize_message, sanitize_record

__all__ = [
    "clear_correlation_id",
    "default_log_file",
    "get_correlation_id",
    "logger",
    "sanitize_message",
    "sanitize_record",
    "set_correlation_id",
    "setup_logging",
]
