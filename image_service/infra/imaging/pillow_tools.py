"""Outil de transcodage basé sur Pillow.

Implémente le collaborateur `ImageTools`: couleur dominante, variantes redimensionnées et
réencodées, cache disque des variantes à côté du master.

Chaque fichier persisté est écrit dans un fichier temporaire du même répertoire puis renommé, si
bien qu'un lecteur concurrent voit l'ancienne version ou la nouvelle, jamais un fichier partiel.
"""

from __future__ import annotations

import hashlib
import io
import os
import tempfile
from pathlib import Path

import structlog
from PIL import Image

from image_service.core.http_constants import (
    MEDIA_GIF,
    MEDIA_JPEG,
    MEDIA_PNG,
    MEDIA_SVG,
    MEDIA_WEBP,
)
from image_service.domain.constants import MASTER_FILE_NAME, PLACEHOLDER_COLOR, etag_sidecar
from image_service.domain.entities import ImageOptions

log = structlog.get_logger(__name__)

COLOR_SIDECAR = "color_code"
SNIFF_BYTES = 512
COLOR_SAMPLE_SIZE = (64, 64)
BACKGROUND = (255, 255, 255)

_PIL_FORMATS = {
    "png": "PNG",
    "gif": "GIF",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "webp": "WEBP",
}


def sniff_media_type(path: Path) -> str | None:
    """Type de média d'après les premiers octets du fichier."""
    with open(path, "rb") as f:
        head = f.read(SNIFF_BYTES)
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return MEDIA_WEBP
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return MEDIA_PNG
    if head[:6] in (b"GIF87a", b"GIF89a"):
        return MEDIA_GIF
    if head.startswith(b"\xff\xd8\xff"):
        return MEDIA_JPEG
    text = head.lstrip().lower()
    if text.startswith(b"<svg") or (text.startswith(b"<?xml") and b"<svg" in text):
        return MEDIA_SVG
    return None


def atomic_write(target: Path, data: bytes) -> None:
    """Écrit `data` dans `target` via un fichier temporaire renommé."""
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def content_digest(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def _flatten(img: Image.Image) -> Image.Image:
    """Compose la transparence sur fond blanc et retourne une image RGB."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, BACKGROUND)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    return img.convert("RGB")


def output_format(options: ImageOptions) -> str:
    """Format Pillow de sortie: format explicite > webp > jpeg."""
    if options.format in _PIL_FORMATS:
        return _PIL_FORMATS[options.format]
    return "WEBP" if options.webp else "JPEG"


def render(path: Path, options: ImageOptions) -> bytes:
    """Redimensionne (taille 0 = intacte) et encode le master."""
    fmt = output_format(options)
    with Image.open(path) as img:
        img.load()
        if options.size > 0:
            img.thumbnail((options.size, options.size), Image.Resampling.LANCZOS)
        if fmt == "JPEG":
            img = _flatten(img)
        elif fmt == "GIF":
            img = img.convert("P") if img.mode != "P" else img
        elif img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")

        buf = io.BytesIO()
        save_kwargs = {}
        if fmt in ("JPEG", "WEBP"):
            save_kwargs["quality"] = options.quality
        if fmt == "PNG":
            save_kwargs["optimize"] = True
        img.save(buf, format=fmt, **save_kwargs)
        return buf.getvalue()


def dominant_color(path: Path) -> str:
    """Couleur la plus fréquente d'un échantillon réduit du master."""
    with Image.open(path) as img:
        img.load()
        sample = _flatten(img)
        sample.thumbnail(COLOR_SAMPLE_SIZE)
        colors = sample.getcolors(maxcolors=COLOR_SAMPLE_SIZE[0] * COLOR_SAMPLE_SIZE[1])
    _, (r, g, b) = max(colors, key=lambda c: c[0])
    return f"#{r:02X}{g:02X}{b:02X}"


class PillowImageTools:
    """Collaborateur de transcodage local (Pillow + cache disque)."""

    def sniff_media_type(self, path: Path) -> str | None:
        return sniff_media_type(path)

    def get_color(self, path: Path, options: ImageOptions) -> str:
        """Couleur dominante, mise en cache dans `color_code` si autorisé."""
        path = Path(path)
        sidecar = path.parent / COLOR_SIDECAR
        if options.cache:
            try:
                cached = sidecar.read_text(encoding="utf-8").strip()
                if cached:
                    return cached
            except FileNotFoundError:
                pass

        if sniff_media_type(path) == MEDIA_SVG:
            return PLACEHOLDER_COLOR

        color = dominant_color(path)
        if options.cache:
            atomic_write(sidecar, color.encode("utf-8"))
        return color

    def get_image(
        self, path: Path, variant_name: str, etag: str, options: ImageOptions
    ) -> bytes:
        """Variante demandée, relue du cache disque si son validateur correspond.

        Le sidecar `{variant}_etag` enregistre `etag:format:qualité:taille:sha1(octets)`. Le
        contrôle de l'empreinte après lecture écarte une variante et un sidecar issus de deux
        écritures concurrentes différentes; la variante est alors régénérée.
        """
        path = Path(path)
        variant_name = variant_name.lstrip("/")
        if sniff_media_type(path) == MEDIA_SVG:
            raise ValueError(f"cannot rasterize svg master {path}")

        persist = options.cache and variant_name != MASTER_FILE_NAME
        if not persist:
            return render(path, options)

        target = path.parent / variant_name
        sidecar = path.parent / etag_sidecar(variant_name)
        validator = f"{etag}:{output_format(options)}:{options.quality}:{options.size}"
        try:
            recorded = sidecar.read_text(encoding="utf-8")
            cached = target.read_bytes()
        except FileNotFoundError:
            pass
        else:
            if recorded == f"{validator}:{content_digest(cached)}":
                return cached

        data = render(path, options)
        atomic_write(target, data)
        atomic_write(sidecar, f"{validator}:{content_digest(data)}".encode("utf-8"))
        log.debug("variant_generated", path=str(target), validator=validator)
        return data
