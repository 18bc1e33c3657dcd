# ============================================================
# Module : image_service/infra/repo/document_repo.py
# Objet  : Recherche de documents par clé métier ou par identité.
# ============================================================

from __future__ import annotations

import structlog
from sqlalchemy import case, select
from sqlalchemy.engine import Engine

from ...domain.ports import DocumentRecord, LookupResult
from .db import session_scope
from .models import DocumentORM

log = structlog.get_logger(__name__)

ANY_SIZE = "any"


class SqlDocumentRepository:
    """Implémentation SQLAlchemy du collaborateur `DocumentLookup`."""

    def __init__(self, engine: Engine) -> None:
        """Construit le repo sur un moteur (pool de connexions partagé)."""
        self._engine = engine

    def get_guid_by_params(
        self,
        company: str,
        objecttype: str,
        documenttype: str,
        itemnum: str,
        language: str,
        size: str,
        strict: bool = False,
    ) -> LookupResult | None:
        """Retourne le meilleur document pour la clé métier, ou None.

        Préférence: langue exacte puis autres langues, taille exacte puis `any`.
        Le mode strict ne change pas la requête.
        """
        stmt = select(DocumentORM).where(
            DocumentORM.company == company,
            DocumentORM.object_type == objecttype,
            DocumentORM.document_type == documenttype,
            DocumentORM.item_number == itemnum,
        )
        if size and size != ANY_SIZE:
            stmt = stmt.where(DocumentORM.size.in_([size, ANY_SIZE]))
        stmt = stmt.order_by(
            case((DocumentORM.language == language, 0), else_=1),
            case((DocumentORM.size == size, 0), else_=1),
            DocumentORM.id,
        ).limit(1)

        with session_scope(self._engine) as session:
            row = session.execute(stmt).scalars().first()
            if row is None:
                return None
            return LookupResult(
                identity=row.guid,
                verified=row.verified,
                error=row.error,
                mime_type=row.mime_type,
            )

    def find_one(self, identity: str) -> DocumentRecord | None:
        """Retourne le document d'identité donnée; le premier si plusieurs."""
        stmt = select(DocumentORM).where(DocumentORM.guid == identity).order_by(DocumentORM.id)
        with session_scope(self._engine) as session:
            rows = session.execute(stmt).scalars().all()
            if not rows:
                return None
            if len(rows) > 1:
                log.warning("document_multiple_records", identity=identity, count=len(rows))
            row = rows[0]
            return DocumentRecord(
                identity=row.guid,
                mime_type=row.mime_type,
                company=row.company,
                object_type=row.object_type,
                document_type=row.document_type,
            )

    def add(self, **fields) -> None:
        """Insère un document (outillage et tests)."""
        with session_scope(self._engine) as session:
            session.add(DocumentORM(**fields))
