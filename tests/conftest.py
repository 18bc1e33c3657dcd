"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `image_service` et fournit un conteneur de
test branché sur un magasin de contenu temporaire.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Ensure project root is on sys.path so that
# imports like `from image_service...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from image_service.core.container import Container  # noqa: E402
from image_service.core.settings import Settings  # noqa: E402

from tests.fakes import TEST_JWT_SECRET  # noqa: E402


@pytest.fixture
def content_root(tmp_path):
    """Racine `{DATA_PATH}/content` vide."""
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path, content_root):
    """Paramètres de test (cache disque actif, pas de base)."""
    return Settings(
        DATA_PATH=str(tmp_path),
        DATABASE_URL=None,
        CACHE_ENABLED=True,
        JWT_SECRET=TEST_JWT_SECRET,
        JWT_ALG="HS256",
    )


@pytest.fixture
def make_container(settings):
    """Construit un conteneur de test et le substitue au singleton des routes."""
    patches = []

    def _make(image_tools=None, lookup=None) -> Container:
        c = Container(settings=settings, image_tools=image_tools, lookup=lookup)
        for target in (
            "image_service.api.routes_images.container",
            "image_service.api.routes_manage.container",
            "image_service.api.routes_auth.container",
            "image_service.api.routes_health.container",
        ):
            p = patch(target, c)
            p.start()
            patches.append(p)
        return c

    yield _make
    for p in reversed(patches):
        p.stop()
