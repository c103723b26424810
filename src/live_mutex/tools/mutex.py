# -*- coding: utf-8 -*-
"""
Outils MCP — Catégorie Mutex (5 outils).

Mêmes opérations que les routes REST, pour les agents MCP :
    - mutex_new    : génère un identifiant
    - mutex_status : état d'un mutex
    - mutex_lock   : verrouille (crée si besoin)
    - mutex_unlock : déverrouille (crée si besoin)
    - mutex_delete : supprime

Chaque outil délègue au MutexService (core/mutex.py). Les erreurs
client et de stockage sont renvoyées sous forme {"error": "..."}.
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..core.errors import MutexError
from ..core.models import ID_FIELD, ERROR_FIELD
from ..core.mutex import MutexService


def _document(mutex_id: str, metadata: Optional[dict] = None) -> dict:
    """Document de requête : métadonnées + id (l'id gagne)."""
    document = dict(metadata or {})
    document[ID_FIELD] = mutex_id
    return document


def register(mcp: FastMCP, service: MutexService) -> int:
    """
    Enregistre les 5 outils mutex sur l'instance MCP.

    Args:
        mcp: Instance FastMCP
        service: MutexService partagé

    Returns:
        Nombre d'outils enregistrés (5)
    """

    @mcp.tool()
    async def mutex_new() -> dict:
        """
        Génère un nouvel identifiant de mutex.

        Rien n'est écrit : le mutex n'existe qu'après le premier lock/unlock.

        Returns:
            {"id": "..."}
        """
        return service.new_id()

    @mcp.tool()
    async def mutex_status(mutex_id: str) -> dict:
        """
        État courant d'un mutex.

        Args:
            mutex_id: Identifiant du mutex

        Returns:
            Enregistrement du mutex, ou {"error": ...} s'il est introuvable
        """
        try:
            return await service.status(_document(mutex_id))
        except (MutexError, OSError) as e:
            return {ERROR_FIELD: str(e)}

    @mcp.tool()
    async def mutex_lock(mutex_id: str, metadata: Optional[dict] = None) -> dict:
        """
        Verrouille un mutex (le crée s'il n'existe pas).

        success=true si le mutex était libre ou nouveau, false s'il
        était déjà verrouillé.

        Args:
            mutex_id: Identifiant du mutex
            metadata: Champs libres conservés dans l'enregistrement

        Returns:
            Enregistrement avec locked et success
        """
        try:
            return await service.lock(_document(mutex_id, metadata))
        except (MutexError, OSError) as e:
            return {ERROR_FIELD: str(e)}

    @mcp.tool()
    async def mutex_unlock(mutex_id: str, metadata: Optional[dict] = None) -> dict:
        """
        Déverrouille un mutex (le crée s'il n'existe pas).

        success=true uniquement si le mutex était verrouillé.

        Args:
            mutex_id: Identifiant du mutex
            metadata: Champs libres conservés dans l'enregistrement

        Returns:
            Enregistrement avec locked et success
        """
        try:
            return await service.unlock(_document(mutex_id, metadata))
        except (MutexError, OSError) as e:
            return {ERROR_FIELD: str(e)}

    @mcp.tool()
    async def mutex_delete(mutex_id: str) -> dict:
        """
        Supprime un mutex.

        Args:
            mutex_id: Identifiant du mutex

        Returns:
            Enregistrement avec locked=false et success, ou {"error": ...}
        """
        try:
            return await service.delete(_document(mutex_id))
        except (MutexError, OSError) as e:
            return {ERROR_FIELD: str(e)}

    return 5
