"""Interfaces des collaborateurs externes du moteur d'images.

Ce module définit les contrats que doivent respecter la recherche de documents (base relationnelle),
l'outil de transcodage et l'autorisation. Toute implémentation qui respecte le contrat (locale, RPC,
bibliothèque) est substituable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from image_service.domain.entities import ImageOptions


@dataclass(frozen=True)
class LookupResult:
    """Ligne renvoyée par la recherche par clé métier."""

    identity: str
    verified: bool | None = None
    error: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class DocumentRecord:
    """Métadonnées d'un document connu par son identité."""

    identity: str
    mime_type: str | None = None
    company: str | None = None
    object_type: str | None = None
    document_type: str | None = None


class DocumentLookup(Protocol):
    """Protocole de recherche de documents."""

    def get_guid_by_params(
        self,
        company: str,
        objecttype: str,
        documenttype: str,
        itemnum: str,
        language: str,
        size: str,
        strict: bool = False,
    ) -> LookupResult | None:
        """Retourne la première ligne correspondant à la clé métier, ou None.

        `strict` est transmis tel quel; la décision de repli appartient au résolveur.
        """

    def find_one(self, identity: str) -> DocumentRecord | None:
        """Retourne l'enregistrement d'un document par identité, ou None."""


class ImageTools(Protocol):
    """Protocole de l'outil de transcodage.

    Les fichiers de variantes doivent être écrits de façon atomique (fichier temporaire puis
    renommage): deux requêtes concurrentes pour la même variante peuvent générer deux fois, jamais
    lire un fichier partiel.
    """

    def get_color(self, path: Path, options: ImageOptions) -> str:
        """Couleur dominante du master au format `#RRGGBB`."""

    def get_image(
        self, path: Path, variant_name: str, etag: str, options: ImageOptions
    ) -> bytes:
        """Octets de la variante demandée (générée et mise en cache si besoin)."""

    def sniff_media_type(self, path: Path) -> str | None:
        """Type de média natif du master."""


class Authorizer(Protocol):
    """Protocole d'autorisation consulté avant les opérations d'administration."""

    def has_permission(self, action: str, scope: str) -> bool:
        """Indique si le principal courant peut effectuer `action` sur `scope`."""
