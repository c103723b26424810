# -*- coding: utf-8 -*-
"""
Serveur Live Mutex — Point d'entrée principal.

Ce fichier :
1. Construit le RecordStore et le MutexService (une seule fois)
2. Crée l'instance FastMCP et y enregistre les routes REST et les outils MCP
3. Assemble la chaîne de middlewares ASGI
4. Démarre le serveur Uvicorn

Architecture :
    routes.py       → /health, /new, /status, /lock, /unlock, /delete
    tools/system.py → system_health, system_about
    tools/mutex.py  → mutex_new, mutex_status, mutex_lock, ...

Usage :
    python -m live_mutex
"""

import sys
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import Settings, get_settings
from .core.mutex import MutexService
from .core.store import RecordStore

logger = logging.getLogger("live_mutex")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure le logging (stderr uniquement, jamais stdout).

    Format : timestamp level [module] message
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # Réduire le bruit des librairies tierces
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)


# =============================================================================
# Assemblage
# =============================================================================

def build_mcp(settings: Settings, service: MutexService) -> FastMCP:
    """
    Crée l'instance FastMCP avec les routes REST et les outils MCP.

    Args:
        settings: Configuration du service
        service: MutexService partagé par les routes et les outils
    """
    from .routes import register as register_routes
    from .tools import register_all_tools

    mcp = FastMCP(
        name=settings.mutex_server_name,
        host=settings.mutex_server_host,
        port=settings.mutex_server_port,
        debug=settings.mutex_server_debug,
    )

    routes_count = register_routes(mcp, service)
    tools_count = register_all_tools(mcp, service, settings)
    logger.debug("%d routes REST, %d outils MCP enregistrés", routes_count, tools_count)

    return mcp


def create_app(settings: Optional[Settings] = None):
    """
    Crée l'application ASGI complète avec les middlewares.

    Le store et le service sont construits ici, une seule fois, puis
    injectés dans les routes et les outils.

    Pile d'exécution :
        LoggingMiddleware → mcp.sse_app()

    Args:
        settings: Configuration explicite (défaut : get_settings())
    """
    from .middleware import LoggingMiddleware

    settings = settings or get_settings()

    store = RecordStore(settings.mutex_store_dir)
    service = MutexService(store)
    mcp = build_mcp(settings, service)

    app = mcp.sse_app()
    app.state.mutex_service = service
    app.state.mcp = mcp

    return LoggingMiddleware(app)


# =============================================================================
# Point d'entrée
# =============================================================================

def main():
    """Démarre le serveur Live Mutex."""
    import uvicorn
    from .tools.system import read_version

    settings = get_settings()
    setup_logging(settings.mutex_log_level)

    app = create_app(settings)

    host = settings.mutex_server_host
    port = settings.mutex_server_port
    sep = "═" * 50
    print(
        f"\n╔{sep}╗\n"
        f"  Live Mutex Server v{read_version()}\n"
        f"╠{sep}╣\n"
        f"  Stockage : {settings.mutex_store_dir}\n"
        f"  REST     : http://{host}:{port}/lock, /unlock, /status, ...\n"
        f"  MCP      : http://{host}:{port}/sse\n"
        f"╚{sep}╝\n",
        file=sys.stderr,
    )

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="warning",  # Uvicorn en mode silencieux (on log via middleware)
    )


if __name__ == "__main__":
    main()
