# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Schoolbook.

This package contains domain services that encapsulate business logic.

Domains:
    auth: Access token validation.
    enrollment: The enrollment ledger (enroll, transfer, end, queries).
    classroom: Classroom lookups, rosters and archiving.
    student: Student lookups and graduation.
"""
