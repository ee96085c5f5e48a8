"""Upstream content catalog clients."""

from cinefeed.services.catalog.base import CatalogClient
from cinefeed.services.catalog.genres import GenreTable
from cinefeed.services.catalog.tmdb import TMDBCatalogClient

__all__ = ["CatalogClient", "GenreTable", "TMDBCatalogClient"]
