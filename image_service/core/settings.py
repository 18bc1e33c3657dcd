"""Définition et chargement des paramètres de configuration du service d'images.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
- Porter les tables statiques taille/qualité/fichier de variante
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "image-service"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 80
    # Préfixe de version des routes (ex: "v3"); vide = pas de préfixe
    APP_VERSION: str = ""
    SERVICE_NAME: str = "i"

    # Racine des données: le contenu vit sous {DATA_PATH}/content
    DATA_PATH: str = "/data"
    DATABASE_URL: str | None = None

    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"

    # Images
    CACHE_ENABLED: bool = False
    CACHE_MAX_AGE: int = 172800
    DEFAULT_IMAGE_QUALITY: int = 80
    IMAGE_SIZE_MAP: dict[str, int] = {
        "miniature": 50,
        "thumb": 100,
        "small": 200,
        "thumb_m": 300,
        "thumb_l": 400,
        "thumb_large": 500,
        "image": 800,
        "image_large": 1200,
        "source": 0,
        "original": 0,
    }
    IMAGE_QUALITY_MAP: dict[str, int] = {
        "miniature": 60,
        "thumb": 75,
        "small": 80,
        "thumb_m": 80,
        "thumb_l": 85,
        "thumb_large": 85,
        "image": 85,
        "image_large": 90,
    }
    # Taille (px) -> nom du fichier de variante généré à côté du master
    IMAGE_SIZE_FILE_MAP: dict[int, str] = {
        50: "miniature",
        100: "thumb",
        200: "small",
        300: "thumb_m",
        400: "thumb_l",
        500: "thumb_large",
        800: "image",
        1200: "image_large",
    }

    LEGACY_THUMBNAIL_BASE_URL: str = "https://pcm.groupclaes.be/v3/i/dis/artikel/foto"

    @property
    def content_root(self) -> Path:
        """Racine du magasin de contenu."""
        return Path(self.DATA_PATH) / "content"

    @property
    def route_prefix(self) -> str:
        """Préfixe des routes image, ex: `/v3/i`."""
        version = f"/{self.APP_VERSION}" if self.APP_VERSION else ""
        return f"{version}/{self.SERVICE_NAME}"


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
