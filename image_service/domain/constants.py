"""Constantes du moteur de livraison d'images.

Regroupe l'identité de repli, l'énumération canonique des variantes générées et le placeholder GIF,
partagés par la livraison et l'invalidation.
"""

import base64

# Identité renvoyée quand une clé métier bien formée n'a pas de document (mode non strict)
PLACEHOLDER_IDENTITY = "6258fae1-fbd0-45f1-8aef-68b76a30276e"

# Nom du fichier master dans le répertoire d'un asset
MASTER_FILE_NAME = "file"
ETAG_SUFFIX = "_etag"

# Variantes que l'outil de transcodage peut créer à côté du master
GENERATED_VARIANTS: tuple[str, ...] = (
    "small",
    "image_small",
    "thumb",
    "thumb_m",
    "thumb_l",
    "thumb_large",
    "miniature",
    "image",
    "image_large",
)

# Sidecars de couleur précalculés (sans sidecar etag)
COLOR_SIDECARS: tuple[str, ...] = (
    "border-color_code",
    "background-color_code",
    "color_code",
)

CACHE_CONTROL = "must-revalidate, max-age={max_age}, private"

# GIF 1x1 transparent
PLACEHOLDER_GIF = base64.b64decode("R0lGODlhAQABAIAAAP///wAAACwAAAAAAQABAAACAkQBADs=")
PLACEHOLDER_COLOR = "#FFFFFF"

# Permission exigée pour purger les variantes
FLUSH_PERMISSION = ("delete", "GroupClaes.PCM/document")


def etag_sidecar(variant: str) -> str:
    """Nom du sidecar etag d'une variante."""
    return f"{variant}{ETAG_SUFFIX}"


def generated_file_names() -> list[str]:
    """Liste ordonnée de tous les fichiers générés possibles pour un asset."""
    names: list[str] = []
    for variant in GENERATED_VARIANTS:
        names.append(variant)
        names.append(etag_sidecar(variant))
    names.extend(COLOR_SIDECARS)
    return names
