# -*- coding: utf-8 -*-
"""
Middleware ASGI de logging des requêtes HTTP.

Pile d'exécution :
    LoggingMiddleware → mcp.sse_app() (routes REST + transport SSE)
"""

import time
import logging

logger = logging.getLogger("live_mutex.http")


class LoggingMiddleware:
    """
    Middleware ASGI de logging des requêtes HTTP.

    Log sur stderr : méthode, path, status, durée.
    """

    # Routes non journalisées (sondes de supervision)
    QUIET_PATHS = {"/health", "/favicon.ico"}

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "")
        method = scope.get("method", "?")
        t0 = time.monotonic()
        status_code = 0

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = round((time.monotonic() - t0) * 1000, 1)
            if path not in self.QUIET_PATHS:
                logger.info("%s %s → %s (%.0fms)", method, path, status_code, elapsed)
