# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""HTTP middleware."""

import logging

from starlette.types import ASGIApp, Receive, Scope, Send

from src.rbac import context

logger = logging.getLogger(__name__)


class EffectiveFilterCleanupMiddleware:
    """Clear any authorization decision left behind once a request is done.

    Plain ASGI middleware, so it runs in the same task as async endpoints and
    sees a decision they set and never released. Sync endpoints run in a
    worker thread on a copy of the context; their leftovers never reach this
    task. Code paths are expected to use ``effective_filter_scope``; this
    is only the last line.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        finally:
            if context.has_context():
                logger.warning(
                    f"Authorization decision still set after {scope['method']} "
                    f"{scope['path']}, clearing"
                )
            context.clear()
