"""Schoolbook Backend.

Multi-school enrollment service: students, classrooms and the enrollment
ledger that records who sits where.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
