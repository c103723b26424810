# -*- coding: utf-8 -*-
"""
Outils MCP — Catégorie System (2 outils).

Outils :
    - system_health : vérifie le répertoire de stockage
    - system_about  : version, outils disponibles, infos système
"""

import time
import platform
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from ..config import Settings
from ..core.mutex import MutexService


def register(mcp: FastMCP, service: MutexService, settings: Settings) -> int:
    """
    Enregistre les outils system sur l'instance MCP.

    Args:
        mcp: Instance FastMCP
        service: MutexService (pour accéder au store)
        settings: Configuration du service

    Returns:
        Nombre d'outils enregistrés (2)
    """

    @mcp.tool()
    async def system_health() -> dict:
        """
        Vérifie l'état de santé du service Live Mutex.

        Teste l'accès au répertoire de stockage et compte les mutex présents.

        Returns:
            État global du système et détails du stockage
        """
        storage = await service.storage_health()

        return {
            "status": "ok" if storage.get("status") == "ok" else "degraded",
            "service_name": settings.mutex_server_name,
            "version": read_version(),
            "uptime_seconds": round(time.monotonic() - _start_time, 1),
            "services": {"storage": storage},
        }

    @mcp.tool()
    async def system_about() -> dict:
        """
        Informations sur le service Live Mutex.

        Retourne la version, les outils disponibles, et les infos système.

        Returns:
            Métadonnées du service
        """
        tools = []
        for tool in mcp._tool_manager.list_tools():
            tools.append({
                "name": tool.name,
                "description": (tool.description or "").strip()[:100],
            })

        return {
            "status": "ok",
            "name": settings.mutex_server_name,
            "version": read_version(),
            "description": "Mutex nommés persistés sur fichier, accessibles en HTTP et MCP",
            "python_version": platform.python_version(),
            "platform": platform.platform(),
            "tools_count": len(tools),
            "tools": tools,
        }

    return 2


# ─────────────────────────────────────────────────────────────
# Helpers internes au module
# ─────────────────────────────────────────────────────────────

# Temps de démarrage pour le calcul d'uptime
_start_time = time.monotonic()


def read_version() -> str:
    """Lit la version depuis le fichier VERSION à la racine du projet."""
    version_file = Path(__file__).parent.parent.parent.parent / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    return "dev"
