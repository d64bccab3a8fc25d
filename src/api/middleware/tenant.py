# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School (tenant) resolution middleware.

Resolves the school a request acts on:
1. A school admin's token carries its school; that school always wins.
2. A super admin names the school in the X-School-Id header.

The resolved id is stored in request.state.school_id, and the request id,
school id and user id are bound to the logging context for the duration
of the request.

Example:
    # Super admin acting on a school
    GET /api/v1/classrooms/{id}/roster
    Authorization: Bearer ...
    X-School-Id: 7f0c...
"""

import logging
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.auth import get_current_user
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

SCHOOL_HEADER = "X-School-Id"
REQUEST_ID_HEADER = "X-Request-ID"


class TenantMiddleware(BaseHTTPMiddleware):
    """Middleware resolving the caller's school.

    Must run after AuthMiddleware so request.state.user is populated.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Resolve the school and bind request-scoped logging context."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        request.state.school_id = self._resolve_school_id(request)

        user = get_current_user(request)
        bind_context(
            request_id=request_id,
            school_id=request.state.school_id,
            user_id=user.id if user else None,
        )
        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _resolve_school_id(self, request: Request) -> str | None:
        user = get_current_user(request)
        if user is None:
            return None
        if user.is_school_admin:
            return user.school_id
        if user.is_super_admin:
            header = request.headers.get(SCHOOL_HEADER)
            return header.strip() if header and header.strip() else None
        return None


def get_school_id_from_request(request: Request) -> str | None:
    """Get the resolved school id from request state, if any."""
    return getattr(request.state, "school_id", None)
