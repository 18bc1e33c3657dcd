"""
Endpoint de santé pour vérifier la disponibilité de l'API et du magasin de contenu.

Expose `/health` pour signaler l'état général de l'application.
"""


from fastapi import APIRouter

from image_service.core.container import container

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Vérifie la disponibilité de l'API, du magasin de contenu et de la recherche."""
    return {
        "status": "ok",
        "content_root": container.settings.content_root.is_dir(),
        "lookup": getattr(container, "storage_backend", "unknown"),
    }
