# -*- coding: utf-8 -*-
"""
Configuration globale du CLI.

Variables d'environnement :
    MUTEX_URL — URL du serveur Live Mutex (défaut: http://localhost:8003)

Priorité pour l'URL :
    1. Paramètre --url
    2. Variable MUTEX_URL
    3. Lecture depuis .env (MUTEX_SERVER_PORT=...) → http://localhost:<port>
"""

import os
from pathlib import Path

DEFAULT_URL = "http://localhost:8003"


def _resolve_url() -> str:
    """Résout l'URL du serveur par ordre de priorité."""
    # 1. Variable MUTEX_URL
    url = os.environ.get("MUTEX_URL", "")
    if url:
        return url

    # 2. Port lu depuis .env
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if line.startswith("MUTEX_SERVER_PORT=") and not line.startswith("#"):
                return f"http://localhost:{line.split('=', 1)[1].strip()}"

    return DEFAULT_URL


BASE_URL = _resolve_url()
