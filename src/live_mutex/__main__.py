# -*- coding: utf-8 -*-
"""
Point d'entrée pour python -m live_mutex.

Permet de démarrer le serveur avec :
    python -m live_mutex
    # ou
    live-mutex
"""

from .server import main

if __name__ == "__main__":
    main()
