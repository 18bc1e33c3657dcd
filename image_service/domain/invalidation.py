"""Purge des variantes générées de tous les assets du magasin de contenu.

Parcours: `{root}/{partition de 2 caractères}/{identité}`; pour chaque asset, chaque nom de
l'énumération canonique présent sur disque est supprimé. Le master n'est jamais touché.

Une suppression qui échoue est journalisée sans interrompre la purge; l'outil de transcodage
régénère de toute façon la variante au prochain accès. Seule l'impossibilité de lister la racine
est une erreur pour l'appelant.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from image_service.domain.constants import FLUSH_PERMISSION, generated_file_names
from image_service.domain.entities import SweepResult
from image_service.domain.errors import AuthorizationDenied, SweepError
from image_service.domain.ports import Authorizer

log = structlog.get_logger(__name__)

SHARD_NAME_LENGTH = 2


def _directories(path: Path) -> list[str]:
    with os.scandir(path) as entries:
        return sorted(e.name for e in entries if e.is_dir())


class InvalidationSweeper:
    """Supprime les variantes et sidecars générés pour chaque asset."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.file_names = generated_file_names()

    def authorize(self, principal: Authorizer | None) -> None:
        """Vérifie la capacité de purge avant toute exécution."""
        if principal is None:
            raise AuthorizationDenied(401, {"jwt": "missing authorization"})
        if not principal.has_permission(*FLUSH_PERMISSION):
            raise AuthorizationDenied(403, {"role": "missing permission"})

    def asset_paths(self) -> list[str]:
        """Chemins relatifs `partition/identité` de tous les assets."""
        try:
            shards = _directories(self.root)
        except OSError as err:
            raise SweepError(f"cannot list content root {self.root}: {err}") from err

        paths: list[str] = []
        for shard in shards:
            if len(shard) != SHARD_NAME_LENGTH:
                continue
            try:
                subdirs = _directories(self.root / shard)
            except OSError as err:
                log.warning("shard_unreadable", shard=shard, error=str(err))
                continue
            paths.extend(f"{shard}/{subdir}" for subdir in subdirs)
        return paths

    def purge_asset(self, asset_dir: Path) -> tuple[int, int]:
        """Supprime les fichiers générés d'un asset; retourne (supprimés, échecs)."""
        deleted = failed = 0
        for name in self.file_names:
            target = asset_dir / name
            if not target.is_file():
                continue
            try:
                target.unlink()
                deleted += 1
            except FileNotFoundError:
                continue
            except OSError as err:
                failed += 1
                log.warning("variant_delete_failed", path=str(target), error=str(err))
        return deleted, failed

    def flush_all(self, principal: Authorizer | None) -> SweepResult:
        """Purge toutes les variantes générées.

        Le compte retourné est celui des assets visités, pas des fichiers supprimés.

        Raises:
            AuthorizationDenied: principal absent ou sans permission; rien n'est supprimé.
            SweepError: la racine du magasin ne peut pas être listée.
        """
        self.authorize(principal)

        result = SweepResult(paths=self.asset_paths())
        for rel in result.paths:
            deleted, failed = self.purge_asset(self.root / rel)
            result.deleted += deleted
            result.failed += failed

        log.info(
            "flush_all_done",
            assets=result.count,
            deleted=result.deleted,
            failed=result.failed,
        )
        return result
