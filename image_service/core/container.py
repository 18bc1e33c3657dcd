"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, localisateur, résolveur, négociateur, pipeline,
purge) et expose un singleton `container` utilisé par les routes.
"""

from image_service.core.settings import Settings, get_settings
from image_service.domain.delivery import DeliveryPipeline
from image_service.domain.invalidation import InvalidationSweeper
from image_service.domain.locator import ContentLocator
from image_service.domain.negotiator import VariantNegotiator
from image_service.domain.resolver import IdentityResolver
from image_service.domain.services import ImageService
from image_service.infra.imaging.pillow_tools import PillowImageTools
from image_service.infra.repo.db import get_engine
from image_service.infra.repo.document_repo import SqlDocumentRepository


class Container:
    def __init__(self, settings: Settings | None = None, image_tools=None, lookup=None):
        self.settings = settings or get_settings()
        root = self.settings.content_root

        # Sans DATABASE_URL, aucune recherche: les clés métier tombent sur le repli
        if lookup is None and self.settings.DATABASE_URL:
            self.engine = get_engine(self.settings.DATABASE_URL)
            lookup = SqlDocumentRepository(self.engine)
        self.lookup = lookup
        self.storage_backend = "sql" if lookup is not None else "none"

        self.image_tools = image_tools or PillowImageTools()
        self.locator = ContentLocator(root)
        self.resolver = IdentityResolver(self.lookup)
        self.negotiator = VariantNegotiator.from_settings(self.settings)
        self.pipeline = DeliveryPipeline(
            self.image_tools,
            size_file_map=self.settings.IMAGE_SIZE_FILE_MAP,
            max_age=self.settings.CACHE_MAX_AGE,
        )
        self.image_service = ImageService(
            self.locator, self.resolver, self.negotiator, self.pipeline
        )
        self.sweeper = InvalidationSweeper(root)


container = Container()
