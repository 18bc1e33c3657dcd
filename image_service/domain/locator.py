"""Localisation des masters dans le magasin de contenu partitionné.

Chemin d'un master: `{root}/{2 premiers caractères}/{identité}/file`, identité en minuscules.
Seules les identités de la forme `[0-9a-f-]` sont localisables; toute autre valeur (`..`,
séparateurs, caractères arbitraires) est traitée comme absente.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from image_service.domain.constants import MASTER_FILE_NAME
from image_service.domain.entities import StoredAsset

IDENTITY_PATTERN = re.compile(r"^[0-9a-f-]{2,64}$")


def normalize_identity(identity: str) -> str:
    """Forme canonique d'une identité."""
    return identity.strip().lower()


def is_valid_identity(identity: str) -> bool:
    return bool(IDENTITY_PATTERN.match(normalize_identity(identity)))


def shard_of(identity: str) -> str:
    """Préfixe de partition d'une identité canonique."""
    return identity[:2]


class ContentLocator:
    """Associe une identité à son master sur disque. Lecture seule."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path_for(self, identity: str) -> Path:
        """Chemin du master, qu'il existe ou non.

        Raises:
            ValueError: identité hors du format des jetons.
        """
        ident = normalize_identity(identity)
        if not IDENTITY_PATTERN.match(ident):
            raise ValueError(f"invalid identity {identity!r}")
        return self.root / shard_of(ident) / ident / MASTER_FILE_NAME

    def locate(self, identity: str) -> StoredAsset | None:
        """Retourne le master de l'identité, ou None s'il est absent.

        L'absence n'est pas une erreur: l'appelant décide du code de réponse.
        """
        ident = normalize_identity(identity)
        if not is_valid_identity(ident):
            return None
        path = self.path_for(ident)
        try:
            stat = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        if not path.is_file():
            return None
        return StoredAsset(
            identity=ident,
            path=path,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        )
