# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for Schoolbook.

This package contains cross-cutting utilities:
- logging: structlog configuration and request-scoped log context
- datetime: UTC timestamps
"""

from src.utils.datetime import utc_now
from src.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    "bind_context",
    "clear_context",
    "setup_logging",
    "utc_now",
]
