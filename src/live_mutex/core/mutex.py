# -*- coding: utf-8 -*-
"""
Service Mutex — Transitions d'état des mutex nommés.

Quatre opérations, chacune prenant un document client contenant "id" :

    status  → renvoie l'enregistrement (rien n'est écrit)
    lock    → locked=true,  success = le mutex était libre (ou nouveau)
    unlock  → locked=false, success = le mutex était tenu (false si nouveau)
    delete  → supprime le fichier, success = résultat de la suppression

Chaque opération commence par une "résolution" : lecture de
l'enregistrement existant puis fusion du document entrant (les champs
entrants gagnent, sauf locked/success qui restent pilotés ici).

La séquence résolution → mutation → écriture d'un même mutex s'exécute
sous son lock (voir locks.py). Les I/O disque du RecordStore sont
exécutées dans le thread executor.

Usage :
    service = MutexService(RecordStore(settings.mutex_store_dir))
    result = await service.lock({"id": "A1B2", "owner": "job-42"})
    # → {"id": "A1B2", "owner": "job-42", "locked": True, "success": True}
"""

import json
import uuid
import asyncio
import logging
from typing import Optional
from functools import partial

from .errors import MalformedInputError, MissingIdentifierError, InvalidIdentifierError
from .locks import LockManager
from .models import (
    ID_FIELD, SUCCESS_FIELD, RESERVED_FIELDS, MUTEX_ID_REGEX,
    LockRecord, not_found_document,
)
from .store import RecordStore

logger = logging.getLogger("live_mutex.mutex")


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def decode_document(body: bytes) -> dict:
    """
    Décode un corps de requête en document.

    Raises:
        MalformedInputError: corps vide, JSON invalide (NaN/Infinity compris),
            imbrication trop profonde, ou pas un objet
    """
    if not body:
        raise MalformedInputError("Could not get data from request body")
    try:
        document = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        raise MalformedInputError(f"Could not parse the data from the request body: {e}") from e
    if not isinstance(document, dict):
        raise MalformedInputError("Could not parse the data from the request body: JSON object expected")
    return document


def generate_id() -> str:
    """Nouvel identifiant aléatoire (UUID v4, majuscules)."""
    return str(uuid.uuid4()).upper()


class MutexService:
    """
    Moteur des mutex nommés.

    Attributes:
        store: RecordStore partagé par toutes les requêtes
        locks: LockManager (un asyncio.Lock par identifiant)
    """

    def __init__(self, store: RecordStore, locks: Optional[LockManager] = None):
        self.store = store
        self.locks = locks or LockManager()

    # ─────────────────────────────────────────────────────────────
    # Helpers internes
    # ─────────────────────────────────────────────────────────────

    async def _run(self, func, *args, **kwargs):
        """Exécute une fonction synchrone du store dans un thread executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def extract_id(document: dict) -> str:
        """
        Extrait et valide l'identifiant d'un document.

        Raises:
            MissingIdentifierError: pas de champ "id" de type chaîne
            InvalidIdentifierError: identifiant inutilisable comme nom de fichier
        """
        mutex_id = document.get(ID_FIELD)
        if not isinstance(mutex_id, str):
            raise MissingIdentifierError("Could not get UUID from request body")
        if not MUTEX_ID_REGEX.fullmatch(mutex_id):
            raise InvalidIdentifierError(
                f"Invalid mutex id: '{mutex_id}'. "
                "Expected 1-128 chars: letters, digits, '_', '-', '.' (not leading)."
            )
        return mutex_id

    async def _resolve(self, mutex_id: str, document: dict) -> tuple[bool, LockRecord]:
        """
        Charge l'enregistrement existant et y fusionne le document entrant.

        Returns:
            (found, record) : record fusionné si trouvé, sinon le document entrant
        """
        logger.info("Données reçues : %s", document)

        stored = await self._run(self.store.read, mutex_id)
        if stored is not None:
            # Un fichier écrit à la main peut ne pas contenir l'id
            stored[ID_FIELD] = mutex_id
            stored.pop(SUCCESS_FIELD, None)
            return True, LockRecord.from_document(stored).merge(document)

        # locked/success fournis par le client sont de toute façon écrasés
        incoming = {k: v for k, v in document.items() if k not in RESERVED_FIELDS}
        return False, LockRecord.from_document(incoming)

    # ─────────────────────────────────────────────────────────────
    # Opérations
    # ─────────────────────────────────────────────────────────────

    async def storage_health(self) -> dict:
        """Rapport de santé du RecordStore (voir RecordStore.check)."""
        return await self._run(self.store.check)

    def new_id(self) -> dict:
        """Génère un identifiant (rien n'est écrit tant qu'il n'est pas verrouillé)."""
        return {ID_FIELD: generate_id()}

    async def status(self, document: dict) -> dict:
        """
        État courant d'un mutex.

        Returns:
            Enregistrement fusionné, ou document d'erreur si introuvable
        """
        mutex_id = self.extract_id(document)
        async with self.locks.record(mutex_id):
            found, record = await self._resolve(mutex_id, document)
        if not found:
            return not_found_document(mutex_id)
        return record.to_document()

    async def lock(self, document: dict) -> dict:
        """
        Verrouille un mutex (le crée si besoin).

        success vaut True si le mutex est nouveau ou s'il était
        explicitement déverrouillé (locked == False).
        """
        mutex_id = self.extract_id(document)
        async with self.locks.record(mutex_id):
            found, record = await self._resolve(mutex_id, document)
            if not found:
                logger.info("Mutex %s introuvable, création", mutex_id)
                record.success = True
            else:
                record.success = record.is_unlocked
            record.locked = True
            await self._run(self.store.write, mutex_id, record.to_stored())
        return record.to_document()

    async def unlock(self, document: dict) -> dict:
        """
        Déverrouille un mutex (le crée si besoin).

        success vaut True uniquement si le mutex existait et était
        tenu (locked == True).
        """
        mutex_id = self.extract_id(document)
        async with self.locks.record(mutex_id):
            found, record = await self._resolve(mutex_id, document)
            if not found:
                logger.info("Mutex %s introuvable, création", mutex_id)
                record.success = False
            else:
                record.success = record.is_locked
            record.locked = False
            await self._run(self.store.write, mutex_id, record.to_stored())
        return record.to_document()

    async def delete(self, document: dict) -> dict:
        """
        Supprime un mutex.

        Returns:
            Enregistrement avec locked=False et success=résultat de la
            suppression, ou document d'erreur si introuvable
        """
        mutex_id = self.extract_id(document)
        async with self.locks.record(mutex_id):
            found, record = await self._resolve(mutex_id, document)
            if not found:
                return not_found_document(mutex_id)
            record.locked = False
            record.success = await self._run(self.store.delete, mutex_id)
        return record.to_document()
