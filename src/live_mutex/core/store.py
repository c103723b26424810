# -*- coding: utf-8 -*-
"""
Record Store — Couche de persistance fichier pour Live Mutex.

Un fichier JSON par mutex dans un répertoire dédié :
    {store_dir}/{mutex_id}

Les opérations sont synchrones (I/O disque bloquantes). Le MutexService
les exécute dans le thread executor pour ne pas bloquer l'event loop.

L'écriture passe par un fichier temporaire dans le même répertoire puis
os.replace() : un crash en pleine écriture ne laisse jamais un
enregistrement à moitié écrit.

Usage :
    store = RecordStore("/var/lib/live-mutex")

    store.write("A1B2", {"id": "A1B2", "locked": True})
    record = store.read("A1B2")        # dict ou None
    store.delete("A1B2")               # True / False
"""

import os
import json
import time
import tempfile
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import CorruptRecordError
from .models import SUCCESS_FIELD

logger = logging.getLogger("live_mutex.store")

# Préfixe des fichiers temporaires (ignorés par list_ids)
TMP_PREFIX = ".tmp-"


class RecordStore:
    """
    Stockage d'un document JSON par identifiant de mutex.

    Attributes:
        directory: Répertoire des enregistrements (créé à la première écriture)
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        logger.info("RecordStore initialisé — directory=%s", self.directory)

    def path_for(self, mutex_id: str) -> Path:
        """Chemin du fichier d'un mutex."""
        return self.directory / mutex_id

    # ─────────────────────────────────────────────────────────────
    # EXISTS / READ
    # ─────────────────────────────────────────────────────────────

    def exists(self, mutex_id: str) -> bool:
        """True si un fichier existe pour cet identifiant."""
        return self.path_for(mutex_id).is_file()

    def read(self, mutex_id: str) -> Optional[dict]:
        """
        Lit l'enregistrement d'un mutex.

        Un fichier illisible ou corrompu est journalisé puis traité comme
        absent : le mutex repart alors sur un cycle de vie neuf.

        Args:
            mutex_id: Identifiant du mutex

        Returns:
            Document désérialisé, ou None si absent / illisible
        """
        path = self.path_for(mutex_id)
        logger.info("Recherche du mutex dans %s", path)

        if not path.is_file():
            return None

        try:
            return self._load(path)
        except CorruptRecordError as e:
            logger.error("Enregistrement corrompu %s : %s", path, e)
        except OSError as e:
            logger.error("Lecture impossible de %s : %s", path, e)
        return None

    def _load(self, path: Path) -> dict:
        """Parse le fichier ; lève CorruptRecordError si ce n'est pas un objet JSON."""
        content = path.read_text(encoding="utf-8")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptRecordError(f"JSON invalide ({e})") from e
        if not isinstance(data, dict):
            raise CorruptRecordError(f"objet JSON attendu, reçu {type(data).__name__}")
        return data

    # ─────────────────────────────────────────────────────────────
    # WRITE
    # ─────────────────────────────────────────────────────────────

    def write(self, mutex_id: str, document: dict) -> None:
        """
        Écrit (ou remplace) l'enregistrement d'un mutex.

        Le champ success n'est jamais persisté. Les erreurs d'I/O
        sont propagées à l'appelant.

        Args:
            mutex_id: Identifiant du mutex
            document: Document complet à persister
        """
        self._ensure_directory()

        stored = {k: v for k, v in document.items() if k != SUCCESS_FIELD}
        content = json.dumps(stored, ensure_ascii=False)

        fd, tmp_path = tempfile.mkstemp(prefix=TMP_PREFIX, dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path_for(mutex_id))
        except BaseException:
            # Ne pas laisser traîner le fichier temporaire
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _ensure_directory(self) -> None:
        """Crée le répertoire (non récursif) s'il n'existe pas encore."""
        if not self.directory.is_dir():
            self.directory.mkdir(exist_ok=True)
            logger.info("Répertoire de stockage créé : %s", self.directory)

    # ─────────────────────────────────────────────────────────────
    # DELETE
    # ─────────────────────────────────────────────────────────────

    def delete(self, mutex_id: str) -> bool:
        """
        Supprime l'enregistrement d'un mutex.

        Returns:
            True si le fichier a été supprimé, False sinon (absent, droits...)
        """
        try:
            self.path_for(mutex_id).unlink()
            return True
        except OSError as e:
            logger.warning("Suppression impossible du mutex %s : %s", mutex_id, e)
            return False

    # ─────────────────────────────────────────────────────────────
    # Inventaire & santé
    # ─────────────────────────────────────────────────────────────

    def list_ids(self) -> list[str]:
        """Identifiants présents dans le store (triés, sans les temporaires)."""
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name for p in self.directory.iterdir()
            if p.is_file() and not p.name.startswith(TMP_PREFIX)
        )

    def check(self) -> dict:
        """
        Teste l'accès au répertoire de stockage.

        Returns:
            {"status": "ok", "path": ..., "records": N, "latency_ms": ...} ou erreur
        """
        t0 = time.monotonic()
        try:
            records = len(self.list_ids())
            latency = round((time.monotonic() - t0) * 1000, 1)
            return {
                "status": "ok",
                "path": str(self.directory),
                "records": records,
                "latency_ms": latency,
            }
        except OSError as e:
            return {
                "status": "error",
                "path": str(self.directory),
                "message": str(e),
            }
