"""
Extraction du principal courant à partir du token d'autorisation.

Le principal sert uniquement aux vérifications de permission des routes d'administration; les
routes de lecture d'images sont publiques.
"""

from fastapi import Header

from image_service.core.container import container
from image_service.domain.auth import Principal, decode_token


def get_optional_principal(authorization: str = Header(None)) -> Principal | None:
    """Principal du token Bearer, ou None si absent ou invalide."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1]
    return decode_token(token, container.settings.JWT_SECRET, container.settings.JWT_ALG)
