# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API request and response models.

Modules:
    common: Enums shared with the ORM and the response envelopes.
    enrollment: Enrollment requests, records, history and roster.
    student: Student and graduation responses.
    classroom: Classroom responses.
"""
