# -*- coding: utf-8 -*-
"""
Client HTTP pour communiquer avec le serveur Live Mutex (API REST).

Chaque méthode fait un appel HTTP et retourne le document JSON.
Les erreurs logiques ({"error": ...}, HTTP 200) sont retournées telles
quelles ; les erreurs HTTP (400, 500) lèvent httpx.HTTPStatusError.
"""

from typing import Optional

import httpx


class MutexClient:
    """Client REST Live Mutex."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Transport injectable (ex: httpx.ASGITransport pour les tests)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def health(self) -> str:
        """GET /health → "OK"."""
        async with self._client() as client:
            response = await client.get("/health")
            response.raise_for_status()
            return response.text

    async def new(self) -> dict:
        """GET /new → {"id": "..."}."""
        async with self._client() as client:
            response = await client.get("/new")
            response.raise_for_status()
            return response.json()

    async def call(self, operation: str, mutex_id: str, metadata: Optional[dict] = None) -> dict:
        """
        POST /<operation> avec {"id": mutex_id, ...metadata}.

        Args:
            operation: "status", "lock", "unlock" ou "delete"
            mutex_id: Identifiant du mutex
            metadata: Champs libres ajoutés au document

        Returns:
            Le document JSON de la réponse
        """
        document = dict(metadata or {})
        document["id"] = mutex_id
        async with self._client() as client:
            response = await client.post(f"/{operation}", json=document)
            response.raise_for_status()
            return response.json()

    async def status(self, mutex_id: str) -> dict:
        return await self.call("status", mutex_id)

    async def lock(self, mutex_id: str, metadata: Optional[dict] = None) -> dict:
        return await self.call("lock", mutex_id, metadata)

    async def unlock(self, mutex_id: str, metadata: Optional[dict] = None) -> dict:
        return await self.call("unlock", mutex_id, metadata)

    async def delete(self, mutex_id: str) -> dict:
        return await self.call("delete", mutex_id)
