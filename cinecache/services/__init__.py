"""
Couche application (services).

- CachedMovieService: orchestre le cache local et le service reseau
"""

from cinecache.services.cached_movie_service import CachedMovieService

__all__ = ["CachedMovieService"]
