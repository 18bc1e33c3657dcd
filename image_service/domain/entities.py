"""
Entités du domaine de livraison d'images.

Ce module définit les modèles de données échangés entre le résolveur, le localisateur, le
négociateur et le pipeline de livraison.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BusinessKey(BaseModel):
    """Clé métier d'une image (construite par requête, jamais persistée)."""

    model_config = ConfigDict(frozen=True)

    company: str
    object_type: str
    document_type: str
    item_number: str = "100"
    language: str = "nl"
    size_class: str = "any"
    strict: bool = False


class ResolutionStatus(str, Enum):
    """Issue d'une résolution d'identité."""

    FOUND = "found"
    NOT_FOUND_SOFT = "not_found_soft"
    NOT_FOUND_HARD = "not_found_hard"


class ResolvedDocument(BaseModel):
    """Résultat de résolution: exactement un des trois statuts est vrai."""

    model_config = ConfigDict(frozen=True)

    status: ResolutionStatus
    identity: str | None = None
    mime_type: str | None = None
    verified: bool | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND


class StoredAsset(BaseModel):
    """Master d'un asset présent sur disque."""

    model_config = ConfigDict(frozen=True)

    identity: str
    path: Path
    last_modified: datetime

    @property
    def directory(self) -> Path:
        return self.path.parent


class ImageOptions(BaseModel):
    """Options de l'outil de transcodage."""

    model_config = ConfigDict(frozen=True)

    size: int
    quality: int
    cache: bool = False
    webp: bool = False
    format: str | None = None


class VariantRequest(BaseModel):
    """Variante demandée, dérivée des paramètres et de l'en-tête Accept."""

    model_config = ConfigDict(frozen=True)

    size_class: str
    target_size: int
    quality: int
    format: str | None = None
    caching_allowed: bool = False
    webp_accepted: bool = False
    svg_accepted: bool = False

    def to_options(self) -> ImageOptions:
        """Options transmises à l'outil de transcodage."""
        return ImageOptions(
            size=self.target_size,
            quality=self.quality,
            cache=self.caching_allowed,
            webp=self.webp_accepted,
            format=self.format,
        )


class CacheValidators(BaseModel):
    """Validateurs HTTP recalculés à chaque requête."""

    model_config = ConfigDict(frozen=True)

    etag: str
    last_modified: datetime
    expires_at: datetime
    cache_control: str


class ResponseDescriptor(BaseModel):
    """Réponse normalisée produite par le pipeline."""

    status_code: int = 200
    media_type: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    outcome: str = "transcoded"


class SweepResult(BaseModel):
    """Résultat d'une purge des variantes générées."""

    paths: list[str] = Field(default_factory=list)
    deleted: int = 0
    failed: int = 0

    @property
    def count(self) -> int:
        return len(self.paths)
