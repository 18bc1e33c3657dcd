"""Constantes HTTP pour éviter les valeurs magiques dans le code.

Ce module définit les codes de statut HTTP et les types de média utilisés par le service d'images
pour améliorer la lisibilité et éviter les valeurs magiques.
"""

# Codes de statut HTTP courants
HTTP_OK = 200
HTTP_MOVED_PERMANENTLY = 301
HTTP_NOT_MODIFIED = 304
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500

# Types de média image
MEDIA_JPEG = "image/jpeg"
MEDIA_PNG = "image/png"
MEDIA_GIF = "image/gif"
MEDIA_WEBP = "image/webp"
MEDIA_SVG = "image/svg+xml"

# Jetons recherchés (sous-chaîne) dans l'en-tête Accept
ACCEPT_WEBP_TOKEN = "image/webp"
ACCEPT_SVG_TOKEN = "image/svg"
