# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Schoolbook.

Timestamps are stored as TIMESTAMPTZ and handled as timezone-aware UTC
datetimes in Python.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime.

    Used for ORM column defaults and for enrollment start and end dates.
    """
    return datetime.now(timezone.utc)
