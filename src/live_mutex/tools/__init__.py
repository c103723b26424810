# -*- coding: utf-8 -*-
"""
Package tools — Enregistrement des outils MCP par catégorie.

Chaque module (system, mutex) expose une fonction `register(mcp, ...)`
qui déclare ses outils via @mcp.tool().

Usage dans server.py :
    from .tools import register_all_tools
    register_all_tools(mcp, service, settings)
"""

from mcp.server.fastmcp import FastMCP

from ..config import Settings
from ..core.mutex import MutexService


def register_all_tools(mcp: FastMCP, service: MutexService, settings: Settings) -> int:
    """
    Enregistre tous les outils MCP depuis les modules de catégorie.

    Args:
        mcp: Instance FastMCP sur laquelle enregistrer les outils
        service: MutexService partagé avec les routes REST
        settings: Configuration du service

    Returns:
        Nombre total d'outils enregistrés
    """
    from .system import register as register_system
    from .mutex import register as register_mutex

    count = 0
    count += register_system(mcp, service, settings)
    count += register_mutex(mcp, service)

    return count
