"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.cache import CacheManager
from services.cache import NullCatalogSource


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Catalog read side for warm-up (database-backed source is wired by the host)
    catalog_source = providers.Singleton(
        NullCatalogSource,
    )

    # Process-wide cache: store, route policies and maintenance scheduler
    cache_manager = providers.Singleton(
        CacheManager.create,
        settings=settings,
        catalog_source=catalog_source,
    )


# Global container instance
container = Container()
