# -*- coding: utf-8 -*-
"""
Routes HTTP REST de Live Mutex.

Déclarées comme custom routes sur l'instance FastMCP : elles cohabitent
avec le transport SSE (/sse, /messages/) dans la même app Starlette.

    GET  /health  → "OK"
    GET  /new     → {"id": "..."}
    POST /status  → enregistrement ou {"error": ...}
    POST /lock    → enregistrement avec locked/success
    POST /unlock  → enregistrement avec locked/success
    POST /delete  → enregistrement avec locked/success ou {"error": ...}

Les erreurs logiques (mutex introuvable) restent en HTTP 200 ; seules
les requêtes invalides (400) et les échecs d'écriture (500) changent le
code de statut.
"""

import logging
from typing import Awaitable, Callable

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from .core.errors import MutexError
from .core.models import ERROR_FIELD
from .core.mutex import MutexService, decode_document

logger = logging.getLogger("live_mutex.http")

Operation = Callable[[dict], Awaitable[dict]]


async def _handle(request: Request, operation: Operation) -> Response:
    """Décode le corps, exécute l'opération et sérialise le résultat."""
    try:
        document = decode_document(await request.body())
        result = await operation(document)
    except MutexError as e:
        logger.error("Requête invalide sur %s : %s", request.url.path, e)
        return JSONResponse({ERROR_FIELD: str(e)}, status_code=400)
    except OSError as e:
        logger.error("Erreur de stockage sur %s : %s", request.url.path, e)
        return JSONResponse({ERROR_FIELD: f"Storage error: {e}"}, status_code=500)
    return JSONResponse(result)


def register(mcp: FastMCP, service: MutexService) -> int:
    """
    Enregistre les routes REST sur l'instance MCP.

    Args:
        mcp: Instance FastMCP
        service: MutexService partagé par toutes les requêtes

    Returns:
        Nombre de routes enregistrées (6)
    """

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> Response:
        return PlainTextResponse("OK")

    @mcp.custom_route("/new", methods=["GET"])
    async def new(request: Request) -> Response:
        return JSONResponse(service.new_id())

    @mcp.custom_route("/status", methods=["POST"])
    async def status(request: Request) -> Response:
        return await _handle(request, service.status)

    @mcp.custom_route("/lock", methods=["POST"])
    async def lock(request: Request) -> Response:
        return await _handle(request, service.lock)

    @mcp.custom_route("/unlock", methods=["POST"])
    async def unlock(request: Request) -> Response:
        return await _handle(request, service.unlock)

    @mcp.custom_route("/delete", methods=["POST"])
    async def delete(request: Request) -> Response:
        return await _handle(request, service.delete)

    return 6
