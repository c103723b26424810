# -*- coding: utf-8 -*-
"""
Gestionnaire des locks internes — Live Mutex.

Le serveur est un processus unique (une seule instance Python).
Toutes les requêtes passent par le même event loop asyncio.
Les asyncio.Lock sont donc suffisants pour la concurrence.

Un lock par identifiant de mutex : la séquence lecture → fusion → écriture
d'un même mutex est sérialisée. Sans lui, deux "lock" simultanés
pourraient tous deux lire locked=false et répondre success=true.

Une entrée n'existe que tant qu'une requête tient ou attend son lock :
la table ne grossit pas avec les identifiants déjà vus.

Usage :
    locks = LockManager()

    async with locks.record("A1B2-..."):
        record = await read(...)
        record = modify(record)
        await write(record)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class LockManager:
    """Gestionnaire des asyncio.Lock par identifiant de mutex."""

    def __init__(self):
        # identifiant → (lock, nombre de coroutines qui le tiennent ou l'attendent).
        # Une entrée disparaît dès que son compteur retombe à zéro.
        self._record_locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def record(self, mutex_id: str) -> AsyncIterator[None]:
        """
        Tient le lock d'un mutex donné le temps du bloc `async with`.

        Deux identifiants différents ont des locks indépendants →
        leurs opérations s'exécutent en parallèle.
        """
        lock, holders = self._record_locks.get(mutex_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._record_locks[mutex_id] = (lock, holders + 1)
        try:
            async with lock:
                yield
        finally:
            lock, holders = self._record_locks[mutex_id]
            if holders <= 1:
                del self._record_locks[mutex_id]
            else:
                self._record_locks[mutex_id] = (lock, holders - 1)

    def __len__(self) -> int:
        return len(self._record_locks)
