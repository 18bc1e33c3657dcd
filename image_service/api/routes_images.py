"""
Routes de lecture d'images: par identité brute et par clé métier.

Ce module regroupe les endpoints `GET /{version}/{service}/...` qui renvoient les octets de la
variante demandée, ainsi que l'ancienne route `/thumbnails/{itemNum}` conservée en redirection.
"""

import time

import structlog
from fastapi import APIRouter, Header
from fastapi.responses import RedirectResponse, Response

from image_service.api.errors import error
from image_service.app.metrics import IMAGE_DELIVERIES
from image_service.core.container import container
from image_service.core.http_constants import (
    HTTP_MOVED_PERMANENTLY,
    HTTP_NOT_MODIFIED,
    HTTP_OK,
)
from image_service.domain.entities import BusinessKey, ResponseDescriptor

router = APIRouter(tags=["images"])
legacy_router = APIRouter(tags=["legacy"])

log = structlog.get_logger(__name__)

LEGACY_LARGE_PREFIX = "280-"


def to_response(desc: ResponseDescriptor) -> Response:
    """Convertit une réponse du moteur en réponse HTTP."""
    IMAGE_DELIVERIES.labels(desc.outcome).inc()
    if desc.status_code == HTTP_NOT_MODIFIED:
        return Response(status_code=HTTP_NOT_MODIFIED, headers=desc.headers)
    if desc.status_code != HTTP_OK:
        return Response(status_code=desc.status_code)
    return Response(content=desc.body, media_type=desc.media_type, headers=desc.headers)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@router.get("/{identity}")
def get_by_identity(
    identity: str,
    s: str | None = None,
    ext: str | None = None,
    accept: str | None = Header(None),
    if_none_match: str | None = Header(None),
):
    """Retourne la variante `s` (et format `ext`) de l'asset `identity`, ou 404."""
    start = time.perf_counter()
    try:
        desc = container.image_service.serve_identity(
            identity, s=s, ext=ext, accept=accept, if_none_match=if_none_match
        )
    except Exception as err:
        IMAGE_DELIVERIES.labels("error").inc()
        log.exception("image_delivery_failed", identity=identity)
        raise error(str(err), execution_time=_elapsed_ms(start)) from err
    return to_response(desc)


def _serve_business_key(
    company: str,
    objecttype: str,
    documenttype: str,
    itemnum: str | None,
    language: str | None,
    swp: str | None,
    size: str | None,
    s: str | None,
    accept: str | None,
    if_none_match: str | None = None,
) -> Response:
    start = time.perf_counter()
    key = BusinessKey(
        company=company,
        object_type=objecttype,
        document_type=documenttype,
        item_number=itemnum or "100",
        language=language or "nl",
        size_class=size or "any",
        strict=swp is not None,
    )
    try:
        desc = container.image_service.serve_business_key(
            key, s=s, accept=accept, if_none_match=if_none_match
        )
    except Exception as err:
        IMAGE_DELIVERIES.labels("error").inc()
        log.exception("image_delivery_failed", params=key.model_dump())
        raise error(str(err), execution_time=_elapsed_ms(start)) from err
    return to_response(desc)


@router.get("/{company}/{objecttype}/{documenttype}")
def get_by_type(
    company: str,
    objecttype: str,
    documenttype: str,
    swp: str | None = None,
    size: str | None = None,
    s: str | None = None,
    accept: str | None = Header(None),
    if_none_match: str | None = Header(None),
):
    """Image par clé métier, numéro d'article et langue par défaut."""
    return _serve_business_key(
        company, objecttype, documenttype, None, None, swp, size, s, accept, if_none_match
    )


@router.get("/{company}/{objecttype}/{documenttype}/{itemnum}")
def get_by_item(
    company: str,
    objecttype: str,
    documenttype: str,
    itemnum: str,
    swp: str | None = None,
    size: str | None = None,
    s: str | None = None,
    accept: str | None = Header(None),
    if_none_match: str | None = Header(None),
):
    """Image par clé métier et numéro d'article."""
    return _serve_business_key(
        company, objecttype, documenttype, itemnum, None, swp, size, s, accept, if_none_match
    )


@router.get("/{company}/{objecttype}/{documenttype}/{itemnum}/{language}")
def get_by_item_language(
    company: str,
    objecttype: str,
    documenttype: str,
    itemnum: str,
    language: str,
    swp: str | None = None,
    size: str | None = None,
    s: str | None = None,
    accept: str | None = Header(None),
    if_none_match: str | None = Header(None),
):
    """Image par clé métier complète."""
    return _serve_business_key(
        company, objecttype, documenttype, itemnum, language, swp, size, s, accept, if_none_match
    )


@legacy_router.get("/thumbnails/{item_num}")
def legacy_thumbnail(item_num: str):
    """Redirige les anciennes URLs de vignettes vers la route par clé métier."""
    item = item_num.split(".")[0]
    size = "small"
    if item.startswith(LEGACY_LARGE_PREFIX):
        size = "thumb_large"
        item = item[len(LEGACY_LARGE_PREFIX):]
    base = container.settings.LEGACY_THUMBNAIL_BASE_URL.rstrip("/")
    return RedirectResponse(f"{base}/{item}?s={size}", status_code=HTTP_MOVED_PERMANENTLY)
