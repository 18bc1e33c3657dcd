"""Tests pour l'outil de transcodage Pillow et son cache disque."""

import io
from unittest.mock import patch

from PIL import Image

from image_service.domain.entities import ImageOptions
from image_service.infra.imaging import pillow_tools
from image_service.infra.imaging.pillow_tools import PillowImageTools, sniff_media_type
from tests.fakes import IDENTITY, write_master, write_raw_master

ETAG = "0123456789abcdef"


def _opts(**kw) -> ImageOptions:
    base = {"size": 100, "quality": 80, "cache": True, "webp": False}
    base.update(kw)
    return ImageOptions(**base)


def test_sniff_media_type(content_root):
    """Teste la détection du type natif par octets magiques."""
    cases = {"JPEG": "image/jpeg", "PNG": "image/png", "GIF": "image/gif", "WEBP": "image/webp"}
    for i, (fmt, expected) in enumerate(cases.items()):
        path = write_master(content_root, f"a{i}-asset", fmt=fmt)
        assert sniff_media_type(path) == expected
    svg = write_raw_master(content_root, "s1-asset", b'<?xml version="1.0"?><svg/>')
    assert sniff_media_type(svg) == "image/svg+xml"
    other = write_raw_master(content_root, "o1-asset", b"plain text")
    assert sniff_media_type(other) is None


def test_get_image_resizes_and_encodes(content_root):
    """Teste le redimensionnement dans la boîte cible et le format de sortie."""
    path = write_master(content_root, size=(400, 200))
    data = PillowImageTools().get_image(path, "thumb", ETAG, _opts(webp=True))
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "WEBP"
        assert img.size == (100, 50)


def test_size_zero_keeps_dimensions(content_root):
    """Teste qu'une taille nulle laisse l'image intacte."""
    path = write_master(content_root, size=(320, 240))
    data = PillowImageTools().get_image(path, "file", ETAG, _opts(size=0, format="png"))
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "PNG"
        assert img.size == (320, 240)


def test_variant_is_cached_with_etag_sidecar(content_root):
    """Teste la persistance de la variante et sa relecture depuis le cache."""
    path = write_master(content_root)
    tools = PillowImageTools()
    first = tools.get_image(path, "/thumb", ETAG, _opts())
    assert (path.parent / "thumb").read_bytes() == first
    assert (path.parent / "thumb_etag").read_text().startswith(ETAG)

    with patch.object(pillow_tools, "render") as render:
        second = tools.get_image(path, "thumb", ETAG, _opts())
    render.assert_not_called()
    assert second == first


def test_changed_etag_regenerates(content_root):
    """Teste qu'un master modifié invalide la variante en cache."""
    path = write_master(content_root)
    tools = PillowImageTools()
    tools.get_image(path, "thumb", ETAG, _opts())
    with patch.object(pillow_tools, "render", return_value=b"new") as render:
        data = tools.get_image(path, "thumb", "other-etag", _opts())
    render.assert_called_once()
    assert data == b"new"
    assert (path.parent / "thumb").read_bytes() == b"new"


def test_master_name_and_disabled_cache_are_not_persisted(content_root):
    """Teste qu'aucun fichier n'est écrit hors cache ou pour le nom du master."""
    path = write_master(content_root)
    before = path.read_bytes()
    tools = PillowImageTools()
    tools.get_image(path, "file", ETAG, _opts(size=50))
    tools.get_image(path, "thumb", ETAG, _opts(cache=False))
    assert path.read_bytes() == before
    assert sorted(p.name for p in path.parent.iterdir()) == ["file"]


def test_no_temporary_files_left_behind(content_root):
    """Teste que l'écriture atomique ne laisse pas de fichier temporaire."""
    path = write_master(content_root)
    PillowImageTools().get_image(path, "thumb", ETAG, _opts())
    assert sorted(p.name for p in path.parent.iterdir()) == ["file", "thumb", "thumb_etag"]


def test_get_color_dominant_and_cached(content_root):
    """Teste la couleur dominante et son sidecar `color_code`."""
    path = write_master(content_root, fmt="PNG", color=(16, 32, 48))
    tools = PillowImageTools()
    assert tools.get_color(path, _opts()) == "#102030"
    assert (path.parent / "color_code").read_text() == "#102030"

    (path.parent / "color_code").write_text("#FFFFFF")
    assert tools.get_color(path, _opts()) == "#FFFFFF"
    assert tools.get_color(path, _opts(cache=False)) == "#102030"


def test_svg_master(content_root):
    """Teste le comportement sur un master svg (non rastérisable)."""
    path = write_raw_master(content_root, IDENTITY, b"<svg xmlns='http://www.w3.org/2000/svg'/>")
    tools = PillowImageTools()
    assert tools.get_color(path, _opts(cache=False)) == "#FFFFFF"
    try:
        tools.get_image(path, "thumb", ETAG, _opts())
    except ValueError as err:
        assert "svg" in str(err)
    else:
        raise AssertionError("svg master should not be rasterized")


def test_interleaved_writers_never_pair_bytes_with_foreign_validator(content_root):
    """Teste qu'un sidecar webp posé après des octets jpeg force une régénération."""
    path = write_master(content_root)
    tools = PillowImageTools()
    real_write = pillow_tools.atomic_write
    pending = []
    with patch.object(
        pillow_tools, "atomic_write", side_effect=lambda t, d: pending.append((t, d))
    ):
        tools.get_image(path, "thumb", ETAG, _opts(webp=True))
        tools.get_image(path, "thumb", ETAG, _opts())
    webp_target, webp_sidecar, jpeg_target, jpeg_sidecar = pending
    for target, data in (webp_target, jpeg_target, jpeg_sidecar, webp_sidecar):
        real_write(target, data)

    assert (path.parent / "thumb_etag").read_text().startswith(f"{ETAG}:WEBP:")
    data = tools.get_image(path, "thumb", ETAG, _opts(webp=True))
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "WEBP"
    data = tools.get_image(path, "thumb", ETAG, _opts())
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"


def test_truncated_variant_is_regenerated(content_root):
    """Teste qu'une variante dont l'empreinte ne correspond plus est régénérée."""
    path = write_master(content_root)
    tools = PillowImageTools()
    first = tools.get_image(path, "thumb", ETAG, _opts())
    (path.parent / "thumb").write_bytes(first[:10])
    assert tools.get_image(path, "thumb", ETAG, _opts()) == first


def test_dominant_color_is_most_frequent_not_average(content_root):
    """Teste que la couleur dominante ignore un petit aplat d'une autre couleur."""
    path = write_master(content_root, fmt="PNG", size=(100, 100), color=(255, 0, 0))
    with Image.open(path) as img:
        img.load()
        img.paste((0, 0, 255), (0, 0, 100, 30))
        img.save(path, format="PNG")
    assert PillowImageTools().get_color(path, _opts(cache=False)) == "#FF0000"
