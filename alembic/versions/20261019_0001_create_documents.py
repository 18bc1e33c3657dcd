# mypy: ignore-errors
"""
Migration Alembic pour créer la table documents.

La table associe une clé métier (société, type d'objet, type de document, article, langue, taille)
à l'identité du fichier stocké dans le magasin de contenu.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée la table documents et ses index."""
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(length=36), nullable=False),
        sa.Column("company", sa.String(length=8), nullable=False),
        sa.Column("object_type", sa.String(length=64), nullable=False),
        sa.Column("document_type", sa.String(length=64), nullable=False),
        sa.Column("item_number", sa.String(length=64), nullable=False),
        sa.Column("language", sa.String(length=8), nullable=True),
        sa.Column("size", sa.String(length=32), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("error", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_documents_guid", "documents", ["guid"])
    op.create_index(
        "ix_documents_business_key",
        "documents",
        ["company", "object_type", "document_type", "item_number"],
    )


def downgrade() -> None:
    """Supprime la table documents."""
    op.drop_index("ix_documents_business_key", table_name="documents")
    op.drop_index("ix_documents_guid", table_name="documents")
    op.drop_table("documents")
