"""Pipeline de livraison d'une variante d'image.

Déroulé pour une requête:

1. master absent -> None (l'appelant choisit 404 ou 400)
2. calcul des validateurs (ETag, Last-Modified, Expires, Cache-Control)
3. `If-None-Match` égal à l'ETag -> 304 sans corps, sans appel de l'outil
4. passthrough: `s=source` sans `ext` et encodage natif déjà acceptable -> master tel quel
5. sinon appel de l'outil de transcodage (variante + couleur dominante)
6. assemblage des en-têtes

Un fichier qui disparaît entre la localisation et la lecture est traité comme absent.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

import structlog

from image_service.core.http_constants import HTTP_NOT_MODIFIED, MEDIA_GIF, MEDIA_SVG
from image_service.domain.constants import (
    CACHE_CONTROL,
    MASTER_FILE_NAME,
    PLACEHOLDER_COLOR,
    PLACEHOLDER_GIF,
)
from image_service.domain.entities import (
    CacheValidators,
    ResponseDescriptor,
    StoredAsset,
    VariantRequest,
)
from image_service.domain.errors import DeliveryError
from image_service.domain.negotiator import resolve_mime_type
from image_service.domain.ports import ImageTools

log = structlog.get_logger(__name__)

HEADER_COLOR = "image-color"
HEADER_GUID = "image-guid"


def js_iso_timestamp(value: datetime) -> str:
    """Horodatage ISO en UTC à la milliseconde, suffixe `Z`."""
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def http_date(value: datetime) -> str:
    return format_datetime(value.astimezone(UTC), usegmt=True)


def compute_validators(
    asset: StoredAsset, max_age: int = 172800, now: datetime | None = None
) -> CacheValidators:
    """Validateurs dérivés de la date de modification du master."""
    now = now or datetime.now(UTC)
    etag = hashlib.sha1(js_iso_timestamp(asset.last_modified).encode("utf-8")).hexdigest()
    return CacheValidators(
        etag=etag,
        last_modified=asset.last_modified,
        expires_at=now + timedelta(seconds=max_age),
        cache_control=CACHE_CONTROL.format(max_age=max_age),
    )


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Vrai si `If-None-Match` désigne `etag` (liste, `*`, `W/` et guillemets admis)."""
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate.strip('"') == etag:
            return True
    return False


def placeholder_response(max_age: int = 172800) -> ResponseDescriptor:
    """GIF 1x1 transparent servi quand aucune image n'est configurée."""
    return ResponseDescriptor(
        media_type=MEDIA_GIF,
        headers={
            "Cache-Control": CACHE_CONTROL.format(max_age=max_age),
            HEADER_COLOR: PLACEHOLDER_COLOR,
        },
        body=PLACEHOLDER_GIF,
        outcome="placeholder",
    )


class DeliveryPipeline:
    """Assemble localisation, négociation et transcodage en une réponse."""

    def __init__(
        self,
        tools: ImageTools,
        size_file_map: Mapping[int, str],
        max_age: int = 172800,
    ):
        self.tools = tools
        self.size_file_map = dict(size_file_map)
        self.max_age = max_age

    def variant_name(self, variant: VariantRequest) -> str:
        """Nom du fichier de variante; le nom du master signifie « non persisté »."""
        return self.size_file_map.get(variant.target_size, MASTER_FILE_NAME)

    def native_media_type(self, asset: StoredAsset, mime_type: str | None = None) -> str | None:
        return mime_type or self.tools.sniff_media_type(asset.path)

    def is_passthrough(self, variant: VariantRequest, native: str | None) -> bool:
        """Le master peut-il être servi sans transformation ?"""
        if variant.size_class != "source" or variant.format or not native:
            return False
        if native == MEDIA_SVG:
            return variant.svg_accepted
        return native == resolve_mime_type(variant)

    def base_headers(self, asset: StoredAsset, validators: CacheValidators) -> dict[str, str]:
        return {
            "Cache-Control": validators.cache_control,
            "Expires": http_date(validators.expires_at),
            "Last-Modified": http_date(validators.last_modified),
            "ETag": validators.etag,
            HEADER_GUID: asset.identity,
        }

    def deliver(
        self,
        asset: StoredAsset | None,
        variant: VariantRequest,
        mime_type: str | None = None,
        if_none_match: str | None = None,
    ) -> ResponseDescriptor | None:
        """Produit la réponse pour `asset`, ou None si le master est introuvable.

        Raises:
            DeliveryError: échec inattendu d'un collaborateur ou du système de fichiers.
        """
        if asset is None:
            return None
        try:
            validators = compute_validators(asset, self.max_age)
            headers = self.base_headers(asset, validators)
            if etag_matches(if_none_match, validators.etag):
                return ResponseDescriptor(
                    status_code=HTTP_NOT_MODIFIED, headers=headers, outcome="not_modified"
                )
            native = None
            if variant.size_class == "source" and not variant.format:
                native = self.native_media_type(asset, mime_type)

            if self.is_passthrough(variant, native):
                body = asset.path.read_bytes()
                return ResponseDescriptor(
                    media_type=native, headers=headers, body=body, outcome="passthrough"
                )

            options = variant.to_options()
            headers[HEADER_COLOR] = self.tools.get_color(asset.path, options)
            body = self.tools.get_image(
                asset.path, self.variant_name(variant), validators.etag, options
            )
            return ResponseDescriptor(
                media_type=resolve_mime_type(variant),
                headers=headers,
                body=body,
                outcome="transcoded",
            )
        except FileNotFoundError:
            log.warning("file_vanished", identity=asset.identity, path=str(asset.path))
            return None
        except Exception as err:
            raise DeliveryError(str(err) or type(err).__name__) from err
