# -*- coding: utf-8 -*-
"""
Modèles Pydantic — Structures de données de Live Mutex.

Un mutex est un document JSON ouvert : trois champs connus (id, locked,
success) plus n'importe quelles métadonnées fournies par le client, qui
sont conservées telles quelles d'une opération à l'autre.

Sur disque : un fichier {store_dir}/{id} contenant le document sans "success".
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


# ─────────────────────────────────────────────────────────────
# Constantes
# ─────────────────────────────────────────────────────────────

ID_FIELD = "id"
LOCKED_FIELD = "locked"
SUCCESS_FIELD = "success"
ERROR_FIELD = "error"

# Champs pilotés exclusivement par le moteur (jamais fusionnés depuis le client)
RESERVED_FIELDS = (LOCKED_FIELD, SUCCESS_FIELD)

# L'id devient un nom de fichier : pas de "/", pas de "." en tête.
# À appliquer avec fullmatch() (un "$" laisserait passer un "\n" final).
MUTEX_ID_REGEX = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]{0,127}")


class LockRecord(BaseModel):
    """
    Document d'un mutex (requête entrante, enregistrement stocké ou réponse).

    Les métadonnées client sont acceptées en champs "extra" et
    ressortent inchangées dans to_document().
    """
    model_config = ConfigDict(extra="allow")

    id: str
    locked: Optional[Any] = None            # bool attendu, mais un fichier peut contenir autre chose
    success: Optional[bool] = None          # transitoire, jamais persisté

    @classmethod
    def from_document(cls, document: dict) -> "LockRecord":
        """Construit un LockRecord depuis un dict JSON déjà validé (id présent)."""
        return cls.model_validate(document)

    @property
    def is_locked(self) -> bool:
        """True uniquement si locked vaut exactement le booléen True."""
        return self.locked is True

    @property
    def is_unlocked(self) -> bool:
        """True uniquement si locked vaut exactement le booléen False."""
        return self.locked is False

    def merge(self, incoming: dict) -> "LockRecord":
        """
        Fusionne un document entrant dans cet enregistrement.

        Les champs entrants écrasent les champs existants, sauf locked/success
        (ignorés) et l'id (immuable une fois l'enregistrement créé).
        """
        merged = self.to_document()
        for key, value in incoming.items():
            if key in RESERVED_FIELDS or key == ID_FIELD:
                continue
            merged[key] = value
        return LockRecord.from_document(merged)

    def to_document(self) -> dict:
        """Document de réponse (locked/success omis tant qu'ils ne sont pas positionnés)."""
        document = {ID_FIELD: self.id}
        for name in RESERVED_FIELDS:
            if name in self.model_fields_set:
                document[name] = getattr(self, name)
        document.update(self.model_extra or {})
        return document

    def to_stored(self) -> dict:
        """Forme persistée : sans le champ success."""
        document = self.to_document()
        document.pop(SUCCESS_FIELD, None)
        return document


def not_found_document(mutex_id: str) -> dict:
    """Document d'erreur logique (HTTP 200) pour un mutex introuvable."""
    return {ERROR_FIELD: f"Could not find mutex for UUID: {mutex_id}"}
