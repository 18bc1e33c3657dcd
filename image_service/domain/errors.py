"""Exceptions du domaine de livraison d'images."""


class ImageServiceError(Exception):
    """Erreur de base du service d'images."""


class DeliveryError(ImageServiceError):
    """Échec inattendu pendant la production d'une variante."""


class SweepError(ImageServiceError):
    """La racine du magasin de contenu ne peut pas être parcourue."""


class AuthorizationDenied(ImageServiceError):
    """Principal absent (401) ou permission manquante (403)."""

    def __init__(self, status_code: int, data: dict[str, str]):
        super().__init__(next(iter(data.values()), "denied"))
        self.status_code = status_code
        self.data = data
