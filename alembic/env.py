"""
Configuration de l'environnement Alembic pour les migrations de la base documentaire.

Ce module configure Alembic pour gérer les migrations de la table `documents`, en supportant à la
fois les modes offline et online.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool

from alembic import context  # type: ignore[attr-defined]

# Allow importing project modules when running via Alembic CLI
_this = Path(__file__).resolve()
for p in (_this.parent.parent, Path.cwd()):
    s = str(p)
    if s not in sys.path:
        sys.path.append(s)

from image_service.infra.repo.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
DEFAULT_URL = "sqlite:///./documents.db"


def run_migrations_offline() -> None:
    """Exécute les migrations sans connexion (SQL littéral)."""
    url = os.getenv("DATABASE_URL", DEFAULT_URL)
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Exécute les migrations sur une connexion active."""
    url = os.getenv("DATABASE_URL", DEFAULT_URL)
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
