# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- TenantMiddleware: Resolves the caller's school and binds logging context.
"""

from src.api.middleware.auth import AuthMiddleware
from src.api.middleware.tenant import TenantMiddleware

__all__ = [
    "AuthMiddleware",
    "TenantMiddleware",
]
