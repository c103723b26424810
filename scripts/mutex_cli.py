#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Point d'entrée CLI du service Live Mutex.

Usage :
    python scripts/mutex_cli.py --help
    python scripts/mutex_cli.py health
    python scripts/mutex_cli.py lock <id>

Variables d'environnement :
    MUTEX_URL — URL du serveur (défaut: http://localhost:8003)
"""

import sys
from pathlib import Path

# Ajouter le répertoire parent au path pour les imports relatifs
sys.path.insert(0, str(Path(__file__).parent))

from cli.commands import cli

if __name__ == "__main__":
    cli()
