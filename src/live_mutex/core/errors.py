# -*- coding: utf-8 -*-
"""
Exceptions du cœur Live Mutex.

Levées par le RecordStore et le MutexService, traduites en documents
{"error": "..."} par les routes HTTP et les outils MCP.
"""


class MutexError(Exception):
    """Erreur de base de Live Mutex."""


class MalformedInputError(MutexError):
    """Le corps de la requête n'est pas un objet JSON."""


class MissingIdentifierError(MutexError):
    """Le document ne contient pas de champ "id" (chaîne)."""


class InvalidIdentifierError(MutexError):
    """L'identifiant ne peut pas servir de nom de fichier."""


class CorruptRecordError(MutexError):
    """Le fichier d'un mutex existe mais n'est pas un objet JSON valide."""
