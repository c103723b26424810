# -*- coding: utf-8 -*-
"""
CLI Click — Commandes scriptables pour Live Mutex.

Chaque commande appelle l'API REST via MutexClient puis affiche via display.py.

Usage :
    python scripts/mutex_cli.py health
    python scripts/mutex_cli.py new
    python scripts/mutex_cli.py lock <id> -m owner=job-42
    python scripts/mutex_cli.py status <id> --json
    python scripts/mutex_cli.py unlock <id>
    python scripts/mutex_cli.py delete <id>
"""

import asyncio
import click
import httpx
from . import BASE_URL
from .client import MutexClient
from .display import show_error, show_json, show_mutex, show_new_id, show_success


# ─────────────────────────────────────────────────────────────
# Helper pour exécuter les commandes async
# ─────────────────────────────────────────────────────────────

def _client(ctx) -> MutexClient:
    return MutexClient(ctx.obj["url"], transport=ctx.obj.get("transport"))


def _run(ctx, coro_factory, on_success, json_flag=False):
    """Helper commun : exécute un appel client et affiche le résultat."""
    async def _call():
        return await coro_factory(_client(ctx))

    try:
        result = asyncio.run(_call())
    except httpx.HTTPStatusError as e:
        try:
            message = e.response.json().get("error", e.response.text)
        except ValueError:
            message = e.response.text
        show_error(f"HTTP {e.response.status_code}: {message}")
        ctx.exit(1)
    except httpx.HTTPError as e:
        show_error(f"Connexion impossible: {e}")
        ctx.exit(1)

    if json_flag:
        show_json(result)
    elif "error" in result:
        show_error(result["error"])
        ctx.exit(1)
    else:
        on_success(result)


def _parse_metadata(pairs) -> dict:
    """Convertit des paires "clé=valeur" en dict."""
    metadata = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"'{pair}' : format clé=valeur attendu", param_hint="--meta")
        key, value = pair.split("=", 1)
        metadata[key] = value
    return metadata


# ─────────────────────────────────────────────────────────────
# Groupe racine
# ─────────────────────────────────────────────────────────────

@click.group()
@click.option("--url", "-u", envvar=["MUTEX_URL"], default=BASE_URL, help="URL du serveur Live Mutex")
@click.pass_context
def cli(ctx, url):
    """🔒 Live Mutex — CLI pour le serveur de mutex nommés."""
    ctx.ensure_object(dict)
    ctx.obj["url"] = url


# ─────────────────────────────────────────────────────────────
# System
# ─────────────────────────────────────────────────────────────

@cli.command("health")
@click.pass_context
def health_cmd(ctx):
    """❤️  État de santé du service."""
    async def _call():
        return await _client(ctx).health()

    try:
        text = asyncio.run(_call())
    except httpx.HTTPError as e:
        show_error(f"Connexion impossible: {e}")
        ctx.exit(1)
    show_success(f"Serveur {ctx.obj['url']} : {text}")


@cli.command("new")
@click.option("--json", "-j", "jflag", is_flag=True, help="JSON brut")
@click.pass_context
def new_cmd(ctx, jflag):
    """🆕 Générer un identifiant de mutex."""
    _run(ctx, lambda c: c.new(), show_new_id, jflag)


# ─────────────────────────────────────────────────────────────
# Mutex
# ─────────────────────────────────────────────────────────────

@cli.command("status")
@click.argument("mutex_id")
@click.option("--json", "-j", "jflag", is_flag=True, help="JSON brut")
@click.pass_context
def status_cmd(ctx, mutex_id, jflag):
    """🔎 État d'un mutex."""
    _run(ctx, lambda c: c.status(mutex_id), show_mutex, jflag)


@cli.command("lock")
@click.argument("mutex_id")
@click.option("--meta", "-m", multiple=True, help="Métadonnée clé=valeur (répétable)")
@click.option("--json", "-j", "jflag", is_flag=True, help="JSON brut")
@click.pass_context
def lock_cmd(ctx, mutex_id, meta, jflag):
    """🔒 Verrouiller un mutex."""
    metadata = _parse_metadata(meta)
    _run(ctx, lambda c: c.lock(mutex_id, metadata),
         lambda r: show_mutex(r, title="Lock"), jflag)


@cli.command("unlock")
@click.argument("mutex_id")
@click.option("--meta", "-m", multiple=True, help="Métadonnée clé=valeur (répétable)")
@click.option("--json", "-j", "jflag", is_flag=True, help="JSON brut")
@click.pass_context
def unlock_cmd(ctx, mutex_id, meta, jflag):
    """🔓 Déverrouiller un mutex."""
    metadata = _parse_metadata(meta)
    _run(ctx, lambda c: c.unlock(mutex_id, metadata),
         lambda r: show_mutex(r, title="Unlock"), jflag)


@cli.command("delete")
@click.argument("mutex_id")
@click.option("--json", "-j", "jflag", is_flag=True, help="JSON brut")
@click.pass_context
def delete_cmd(ctx, mutex_id, jflag):
    """🗑️  Supprimer un mutex."""
    _run(ctx, lambda c: c.delete(mutex_id),
         lambda r: show_mutex(r, title="Delete"), jflag)
