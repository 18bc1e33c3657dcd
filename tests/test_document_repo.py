# ============================================================
# Tests : tests/test_document_repo.py
# Objet  : Recherche de documents via SQLAlchemy (sqlite mémoire).
# ============================================================
"""
Tests pour le dépôt de documents.

Ce module teste la recherche par clé métier et par identité via SQLAlchemy avec une base de données
SQLite en mémoire.
"""

from __future__ import annotations

from image_service.infra.repo.db import get_engine
from image_service.infra.repo.document_repo import SqlDocumentRepository
from image_service.infra.repo.models import Base


def _repo() -> SqlDocumentRepository:
    """Crée un dépôt sur une base SQLite en mémoire."""
    engine = get_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    return SqlDocumentRepository(engine)


def _add(repo, guid, language="nl", size="any", **kw):
    fields = {
        "guid": guid,
        "company": "dis",
        "object_type": "artikel",
        "document_type": "foto",
        "item_number": "1234",
        "language": language,
        "size": size,
        "verified": True,
    }
    fields.update(kw)
    repo.add(**fields)


def test_match_by_business_key() -> None:
    """Teste la correspondance exacte."""
    repo = _repo()
    _add(repo, "guid-nl", mime_type="image/webp")
    got = repo.get_guid_by_params("dis", "artikel", "foto", "1234", "nl", "any")
    assert got is not None
    assert got.identity == "guid-nl"
    assert got.mime_type == "image/webp"
    assert got.verified is True


def test_no_match_returns_none() -> None:
    """Teste l'absence de document."""
    repo = _repo()
    _add(repo, "guid-nl")
    assert repo.get_guid_by_params("dis", "artikel", "foto", "9999", "nl", "any") is None
    assert repo.get_guid_by_params("abc", "artikel", "foto", "1234", "nl", "any") is None


def test_strict_flag_does_not_change_the_query() -> None:
    """Teste que le mode strict est accepté et laisse le choix au résolveur."""
    repo = _repo()
    _add(repo, "guid-nl")
    got = repo.get_guid_by_params("dis", "artikel", "foto", "1234", "nl", "any", strict=True)
    assert got.identity == "guid-nl"
    assert repo.get_guid_by_params("dis", "artikel", "foto", "9999", "nl", "any", True) is None


def test_language_preference_with_fallback() -> None:
    """Teste la préférence de langue puis le repli sur une autre langue."""
    repo = _repo()
    _add(repo, "guid-nl", language="nl")
    _add(repo, "guid-fr", language="fr")
    assert repo.get_guid_by_params("dis", "artikel", "foto", "1234", "fr", "any").identity == "guid-fr"
    assert repo.get_guid_by_params("dis", "artikel", "foto", "1234", "de", "any").identity == "guid-nl"


def test_size_preference() -> None:
    """Teste la préférence de taille exacte sur `any`."""
    repo = _repo()
    _add(repo, "guid-any", size="any")
    _add(repo, "guid-large", size="large")
    _add(repo, "guid-small", size="small")
    assert repo.get_guid_by_params("dis", "artikel", "foto", "1234", "nl", "large").identity == "guid-large"
    assert repo.get_guid_by_params("dis", "artikel", "foto", "1234", "nl", "medium").identity == "guid-any"


def test_find_one() -> None:
    """Teste la recherche par identité, premier enregistrement si doublon."""
    repo = _repo()
    _add(repo, "guid-1", mime_type="image/png")
    _add(repo, "guid-1", language="fr", mime_type="image/gif")
    got = repo.find_one("guid-1")
    assert got is not None and got.mime_type == "image/png"
    assert repo.find_one("missing") is None
