# -*- coding: utf-8 -*-
"""
Fonctions d'affichage Rich pour le CLI Live Mutex.

Chaque réponse du serveur a sa fonction show_xxx() pour un rendu coloré.
"""

import json
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

console = Console()

# Champs affichés en tête du panneau (le reste = métadonnées)
_KNOWN_FIELDS = ("id", "locked", "success")


# =============================================================================
# Utilitaires communs
# =============================================================================

def show_error(msg: str):
    """Affiche un message d'erreur."""
    console.print(f"[red]❌ {msg}[/red]")


def show_success(msg: str):
    """Affiche un message de succès."""
    console.print(f"[green]✅ {msg}[/green]")


def show_json(data: dict):
    """Affiche un dict en JSON coloré."""
    console.print(Syntax(
        json.dumps(data, indent=2, ensure_ascii=False), "json"
    ))


# =============================================================================
# Mutex
# =============================================================================

def show_new_id(result: dict):
    """Affiche un identifiant fraîchement généré."""
    console.print(f"[bold]ID :[/bold] [cyan]{result.get('id', '?')}[/cyan]")


def show_mutex(result: dict, title: str = "Mutex"):
    """Affiche un enregistrement de mutex (état + métadonnées)."""
    locked = result.get("locked")
    state = "🔒 verrouillé" if locked is True else "🔓 libre" if locked is False else "?"

    lines = [
        f"[bold]ID     :[/bold] [cyan]{result.get('id', '?')}[/cyan]",
        f"[bold]État   :[/bold] {state}",
    ]
    if "success" in result:
        ok = "[green]oui[/green]" if result["success"] else "[red]non[/red]"
        lines.append(f"[bold]Succès :[/bold] {ok}")

    border = "green" if result.get("success", True) else "yellow"
    console.print(Panel.fit("\n".join(lines), title=title, border_style=border))

    metadata = {k: v for k, v in result.items() if k not in _KNOWN_FIELDS}
    if metadata:
        table = Table(title="Métadonnées", show_header=True)
        table.add_column("Champ", style="cyan bold")
        table.add_column("Valeur")
        for key, value in metadata.items():
            table.add_row(key, json.dumps(value, ensure_ascii=False))
        console.print(table)
