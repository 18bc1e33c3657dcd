"""
Routes d'administration du magasin d'images.

Expose `POST /{version}/{service}/manage/flush-all` qui purge toutes les variantes générées.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from image_service.api.errors import error, fail
from image_service.api.routes_auth import get_optional_principal
from image_service.app.metrics import FLUSH_DELETED_FILES, FLUSH_RUNS
from image_service.core.container import container
from image_service.domain.auth import Principal
from image_service.domain.errors import AuthorizationDenied, SweepError

router = APIRouter(tags=["manage"])
principal_dep = Depends(get_optional_principal)

log = structlog.get_logger(__name__)


@router.post("/flush-all")
def flush_all(principal: Principal | None = principal_dep):
    """Supprime les variantes et sidecars générés de tous les assets.

    Retour: `{"paths": [...], "length": n}` où `n` compte les assets visités.
    """
    start = time.perf_counter()
    try:
        result = container.sweeper.flush_all(principal)
    except AuthorizationDenied as err:
        raise fail(err.status_code, err.data) from err
    except SweepError as err:
        FLUSH_RUNS.labels("error").inc()
        log.error("flush_all_failed", error=str(err))
        raise error(
            "failed to flush generated images",
            execution_time=(time.perf_counter() - start) * 1000,
        ) from err

    FLUSH_RUNS.labels("ok").inc()
    FLUSH_DELETED_FILES.inc(result.deleted)
    return {"paths": result.paths, "length": result.count}
