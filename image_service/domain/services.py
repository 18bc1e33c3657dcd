"""
Service applicatif de livraison d'images.

Ce module enchaîne résolution, localisation, négociation et livraison pour les deux familles de
routes (identité brute et clé métier) et fixe les codes de réponse des cas « introuvable ».
"""

from __future__ import annotations

import structlog

from image_service.core.http_constants import HTTP_BAD_REQUEST, HTTP_NOT_FOUND
from image_service.domain.delivery import DeliveryPipeline, placeholder_response
from image_service.domain.entities import BusinessKey, ResolutionStatus, ResponseDescriptor
from image_service.domain.locator import ContentLocator
from image_service.domain.negotiator import VariantNegotiator
from image_service.domain.resolver import IdentityResolver

log = structlog.get_logger(__name__)


def not_found(status_code: int = HTTP_NOT_FOUND) -> ResponseDescriptor:
    """Réponse vide, sans en-têtes de cache."""
    return ResponseDescriptor(status_code=status_code, outcome="not_found")


class ImageService:
    """Point d'entrée du moteur pour la couche HTTP."""

    def __init__(
        self,
        locator: ContentLocator,
        resolver: IdentityResolver,
        negotiator: VariantNegotiator,
        pipeline: DeliveryPipeline,
    ):
        self.locator = locator
        self.resolver = resolver
        self.negotiator = negotiator
        self.pipeline = pipeline

    def serve_identity(
        self,
        identity: str,
        s: str | None = None,
        ext: str | None = None,
        accept: str | None = None,
        if_none_match: str | None = None,
    ) -> ResponseDescriptor:
        """Route `/{identity}`: 404 si le master est absent."""
        resolved = self.resolver.resolve_by_identity(identity, with_metadata=True)
        variant = self.negotiator.negotiate(s, ext, accept)
        asset = self.locator.locate(resolved.identity)
        response = self.pipeline.deliver(
            asset, variant, resolved.mime_type, if_none_match=if_none_match
        )
        if response is None:
            log.error("file_not_found", identity=resolved.identity)
            return not_found(HTTP_NOT_FOUND)
        return response

    def serve_business_key(
        self,
        key: BusinessKey,
        s: str | None = None,
        accept: str | None = None,
        if_none_match: str | None = None,
    ) -> ResponseDescriptor:
        """Routes par clé métier.

        - document trouvé mais master absent: 400
        - mode strict sans document: 404
        - mode non strict sans document: identité de repli, sinon GIF transparent
        """
        resolved = self.resolver.resolve_by_business_key(key)
        if resolved.status is ResolutionStatus.NOT_FOUND_HARD:
            return not_found(HTTP_NOT_FOUND)

        variant = self.negotiator.negotiate(s, None, accept)
        asset = self.locator.locate(resolved.identity)
        response = self.pipeline.deliver(
            asset, variant, resolved.mime_type, if_none_match=if_none_match
        )
        if response is not None:
            return response

        if resolved.status is ResolutionStatus.NOT_FOUND_SOFT:
            log.debug("no_file_for_params", params=key.model_dump())
            return placeholder_response(self.pipeline.max_age)

        log.error("file_not_found", identity=resolved.identity)
        return not_found(HTTP_BAD_REQUEST)
