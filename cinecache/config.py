"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe
CINECACHE_, et peut optionnellement être fournie via un fichier .env.
"""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinecache.adapters.api.context import ApiEnvironment

# Fichier .env à la racine du projet (parent de cinecache/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class CacheBackend(str, Enum):
    """Stockage du cache local des films."""

    SQLITE = "sqlite"
    DISK = "disk"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe CINECACHE_.
    Exemple : CINECACHE_API_ENVIRONMENT=http://localhost:8000/api/

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="CINECACHE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API
    api_environment: ApiEnvironment = Field(default=ApiEnvironment.PRODUCTION)
    request_timeout: float = Field(default=30.0, gt=0)
    max_auth_retries: int = Field(default=1, ge=0)
    rate_limit_max_attempts: int = Field(default=3, ge=1)

    # Cache local
    cache_backend: CacheBackend = Field(default=CacheBackend.SQLITE)
    database_url: str = Field(default="sqlite:///cinecache.db")
    cache_dir: Path = Field(default=Path(".cache/movies"))

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/cinecache.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()
