# -*- coding: utf-8 -*-
"""
Configuration du service Live Mutex via pydantic-settings.

Toutes les variables sont chargées depuis :
1. Variables d'environnement (priorité haute)
2. Fichier .env (priorité basse)

Usage :
    from .config import get_settings
    settings = get_settings()
    print(settings.mutex_store_dir)
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration chargée depuis les variables d'env / .env."""

    # ─── Serveur HTTP / MCP ────────────────────────────────────
    mutex_server_name: str = "Live Mutex"
    mutex_server_host: str = "0.0.0.0"
    mutex_server_port: int = 8003
    mutex_server_debug: bool = False

    # ─── Stockage ──────────────────────────────────────────────
    # Un fichier JSON par mutex dans ce répertoire.
    # Relatif au répertoire courant du processus si non absolu.
    mutex_store_dir: str = "mutex_logs"

    # ─── Logging ───────────────────────────────────────────────
    mutex_log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache()
def get_settings() -> Settings:
    """Settings (cached)."""
    return Settings()
