"""Résolution d'une référence logique vers une identité d'asset.

Table de décision de la résolution par clé métier:

| résultat de la recherche | strict | issue                                   |
|--------------------------|--------|-----------------------------------------|
| trouvé                   | -      | FOUND (identité, métadonnées)           |
| rien                     | oui    | NOT_FOUND_HARD                          |
| rien                     | non    | NOT_FOUND_SOFT + identité de repli      |
"""

from __future__ import annotations

import structlog

from image_service.domain.constants import PLACEHOLDER_IDENTITY
from image_service.domain.entities import BusinessKey, ResolutionStatus, ResolvedDocument
from image_service.domain.locator import normalize_identity
from image_service.domain.ports import DocumentLookup

log = structlog.get_logger(__name__)


class IdentityResolver:
    """Résout identités brutes et clés métier via le collaborateur de recherche."""

    def __init__(self, lookup: DocumentLookup | None = None):
        self.lookup = lookup

    def resolve_by_identity(self, identity: str, with_metadata: bool = False) -> ResolvedDocument:
        """Une identité brute est déjà canonique; les métadonnées sont optionnelles."""
        ident = normalize_identity(identity)
        mime_type = None
        if with_metadata and self.lookup is not None:
            record = self.lookup.find_one(ident)
            if record is not None:
                mime_type = record.mime_type
        return ResolvedDocument(
            status=ResolutionStatus.FOUND, identity=ident, mime_type=mime_type
        )

    def resolve_by_business_key(self, key: BusinessKey) -> ResolvedDocument:
        """Résout une clé métier selon la table de décision du module."""
        params = key.model_dump()
        row = None
        if self.lookup is not None:
            row = self.lookup.get_guid_by_params(
                key.company,
                key.object_type,
                key.document_type,
                key.item_number,
                key.language,
                key.size_class,
                key.strict,
            )

        if row is not None and row.identity:
            resolved = ResolvedDocument(
                status=ResolutionStatus.FOUND,
                identity=normalize_identity(row.identity),
                mime_type=row.mime_type,
                verified=row.verified,
                error=row.error,
            )
        elif key.strict:
            resolved = ResolvedDocument(status=ResolutionStatus.NOT_FOUND_HARD)
        else:
            resolved = ResolvedDocument(
                status=ResolutionStatus.NOT_FOUND_SOFT, identity=PLACEHOLDER_IDENTITY
            )

        log.debug(
            "business_key_resolved",
            params=params,
            status=resolved.status.value,
            identity=resolved.identity,
        )
        return resolved
