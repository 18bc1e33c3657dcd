"""Tests pour la purge des variantes générées."""

from pathlib import Path
from unittest.mock import patch

import pytest

from image_service.domain.auth import Principal
from image_service.domain.errors import AuthorizationDenied, SweepError
from image_service.domain.invalidation import InvalidationSweeper

ASSET = "1111aaaa-0000-0000-0000-000000000000"
REL = f"ab/{ASSET}"
ADMIN = Principal(sub="u1", permissions=["delete:GroupClaes.PCM/document"])


def _asset_dir(root: Path, rel: str = REL) -> Path:
    d = root / rel
    d.mkdir(parents=True, exist_ok=True)
    (d / "file").write_bytes(b"master")
    return d


def test_sweep_removes_variant_and_sidecar(content_root):
    """Teste le scénario: une variante et son etag supprimés, un asset compté."""
    d = _asset_dir(content_root)
    (d / "thumb").write_bytes(b"v")
    (d / "thumb_etag").write_text("e")

    result = InvalidationSweeper(content_root).flush_all(ADMIN)

    assert result.paths == [REL]
    assert result.count == 1
    assert not (d / "thumb").exists()
    assert not (d / "thumb_etag").exists()
    assert (d / "file").read_bytes() == b"master"


def test_sweep_removes_all_known_names_and_keeps_others(content_root):
    """Teste l'énumération canonique, sidecars de couleur compris."""
    d = _asset_dir(content_root)
    names = ["small", "image_large_etag", "miniature", "color_code", "border-color_code",
             "background-color_code"]
    for name in names:
        (d / name).write_bytes(b"x")
    (d / "notes.txt").write_bytes(b"keep")

    result = InvalidationSweeper(content_root).flush_all(ADMIN)

    assert result.deleted == len(names)
    assert all(not (d / n).exists() for n in names)
    assert (d / "notes.txt").exists()


def test_count_reflects_assets_not_files(content_root):
    """Teste que le compte porte sur les assets visités."""
    _asset_dir(content_root, "ab/one")
    _asset_dir(content_root, "cd/two")
    (content_root / "cd" / "three").mkdir()
    result = InvalidationSweeper(content_root).flush_all(ADMIN)
    assert result.paths == ["ab/one", "cd/three", "cd/two"]
    assert result.count == 3
    assert result.deleted == 0


def test_only_two_char_shards_are_walked(content_root):
    """Teste que seuls les répertoires de partition de 2 caractères sont parcourus."""
    _asset_dir(content_root, "abc/one")
    (content_root / "zz.txt").write_text("x")
    result = InvalidationSweeper(content_root).flush_all(ADMIN)
    assert result.paths == []


def test_missing_root_is_hard_failure(tmp_path):
    """Teste qu'une racine illisible remonte une erreur."""
    with pytest.raises(SweepError):
        InvalidationSweeper(tmp_path / "missing").flush_all(ADMIN)


def test_delete_failure_is_not_fatal(content_root):
    """Teste qu'un échec de suppression n'interrompt pas la purge."""
    d1 = _asset_dir(content_root, "ab/one")
    d2 = _asset_dir(content_root, "cd/two")
    (d1 / "thumb").write_bytes(b"v")
    (d2 / "thumb").write_bytes(b"v")
    real_unlink = Path.unlink

    def flaky_unlink(self, *args, **kwargs):
        if self == d1 / "thumb":
            raise PermissionError("read-only")
        return real_unlink(self, *args, **kwargs)

    with patch.object(Path, "unlink", flaky_unlink):
        result = InvalidationSweeper(content_root).flush_all(ADMIN)

    assert result.count == 2
    assert result.failed == 1
    assert (d1 / "thumb").exists()
    assert not (d2 / "thumb").exists()


def test_missing_principal_is_401_and_nothing_deleted(content_root):
    """Teste qu'aucune purge n'a lieu sans principal."""
    d = _asset_dir(content_root)
    (d / "thumb").write_bytes(b"v")
    with pytest.raises(AuthorizationDenied) as exc:
        InvalidationSweeper(content_root).flush_all(None)
    assert exc.value.status_code == 401
    assert (d / "thumb").exists()


def test_missing_permission_is_403(content_root):
    """Teste qu'un principal sans permission est refusé."""
    with pytest.raises(AuthorizationDenied) as exc:
        InvalidationSweeper(content_root).flush_all(Principal(sub="u2", permissions=["read:x"]))
    assert exc.value.status_code == 403
    assert exc.value.data == {"role": "missing permission"}
