"""SQLAlchemy models for persistence layer (documents)."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Index, Integer, MetaData, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class DocumentORM(Base):
    """Document rattaché à un objet métier (article, catégorie, ...)."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    guid = Column(String(36), nullable=False, index=True)
    company = Column(String(8), nullable=False)
    object_type = Column(String(64), nullable=False)
    document_type = Column(String(64), nullable=False)
    item_number = Column(String(64), nullable=False, default="100")
    language = Column(String(8), nullable=True)
    size = Column(String(32), nullable=False, default="any")
    mime_type = Column(String(128), nullable=True)
    verified = Column(Boolean, nullable=False, default=False)
    error = Column(String(255), nullable=True)

    __table_args__ = (
        Index(
            "ix_documents_business_key",
            "company",
            "object_type",
            "document_type",
            "item_number",
        ),
    )
