"""Négociation de la variante à produire.

Taille et qualité viennent des tables statiques de configuration; le support webp/svg est déduit
de l'en-tête Accept par simple recherche de sous-chaîne (`image/webp,*/*;q=0.8` est accepté).
"""

from __future__ import annotations

from collections.abc import Mapping

from image_service.core.http_constants import (
    ACCEPT_SVG_TOKEN,
    ACCEPT_WEBP_TOKEN,
    MEDIA_GIF,
    MEDIA_JPEG,
    MEDIA_PNG,
    MEDIA_WEBP,
)
from image_service.domain.entities import ImageOptions, VariantRequest

DEFAULT_SIZE_CLASS = "source"
DEFAULT_TARGET_SIZE = 800
MAX_QUALITY = 100

_FORMAT_MEDIA_TYPES = {
    "png": MEDIA_PNG,
    "gif": MEDIA_GIF,
    "jpg": MEDIA_JPEG,
    "jpeg": MEDIA_JPEG,
    "webp": MEDIA_WEBP,
}


def resolve_mime_type(options: ImageOptions | VariantRequest) -> str:
    """Type de contenu de la réponse: format explicite > webp négocié > jpeg."""
    fmt = options.format
    if fmt in _FORMAT_MEDIA_TYPES:
        return _FORMAT_MEDIA_TYPES[fmt]
    webp = options.webp if isinstance(options, ImageOptions) else options.webp_accepted
    return MEDIA_WEBP if webp else MEDIA_JPEG


class VariantNegotiator:
    """Construit une `VariantRequest` à partir des paramètres de requête."""

    def __init__(
        self,
        size_map: Mapping[str, int],
        quality_map: Mapping[str, int],
        default_quality: int,
        cache_enabled: bool = False,
    ):
        self.size_map = dict(size_map)
        self.quality_map = dict(quality_map)
        self.default_quality = default_quality
        self.cache_enabled = cache_enabled

    @classmethod
    def from_settings(cls, settings) -> VariantNegotiator:
        return cls(
            size_map=settings.IMAGE_SIZE_MAP,
            quality_map=settings.IMAGE_QUALITY_MAP,
            default_quality=settings.DEFAULT_IMAGE_QUALITY,
            cache_enabled=settings.CACHE_ENABLED,
        )

    def negotiate(
        self,
        size_class: str | None = None,
        ext: str | None = None,
        accept: str | None = None,
    ) -> VariantRequest:
        """Dérive la variante de `s`, `ext` et de l'en-tête Accept."""
        s = size_class or DEFAULT_SIZE_CLASS
        accept = accept or ""
        target_size = self.size_map.get(s, DEFAULT_TARGET_SIZE)
        quality = self.quality_map.get(s, self.default_quality)
        fmt = None

        if ext:
            quality = MAX_QUALITY
            fmt = ext.lower()

        if s == "original":
            target_size = 0

        return VariantRequest(
            size_class=s,
            target_size=target_size,
            quality=quality,
            format=fmt,
            caching_allowed=self.cache_enabled,
            webp_accepted=ACCEPT_WEBP_TOKEN in accept,
            svg_accepted=ACCEPT_SVG_TOKEN in accept,
        )
