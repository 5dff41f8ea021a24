"""
Configuration de loguru pour CineCache.

Deux sorties:
- console (stderr): une ligne par evenement, suivie du contexte structure
  passe au logger (url, status_code, pending...), dans un ordre fixe
- fichier: JSON avec rotation, tout le contexte dans "extra"

Les modules journalisent via `from loguru import logger` avec le contexte
en arguments nommes:
    logger.warning("Echec de l'autorisation", error=str(error))
"""

import sys

from loguru import logger

from cinecache.config import Settings

# Ordre d'affichage du contexte en console; les autres cles suivent
CONTEXT_KEYS = (
    "method",
    "url",
    "route",
    "status_code",
    "movie_id",
    "year",
    "pending",
    "retry",
    "replay",
    "count",
    "error",
)

_CONSOLE_PREFIX = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)


def console_format(record: dict) -> str:
    """
    Construit le format console d'un enregistrement.

    Les valeurs restent des champs {extra[...]} du format: loguru les
    substitue sans interpreter leurs accolades.
    """
    extra = record["extra"]
    keys = [key for key in CONTEXT_KEYS if key in extra]
    keys += sorted(key for key in extra if key not in CONTEXT_KEYS)
    context = " ".join(f"<dim>{key}</dim>={{extra[{key}]}}" for key in keys)
    line = f"{_CONSOLE_PREFIX} | {context}" if context else _CONSOLE_PREFIX
    return line + "\n{exception}"


def configure_logging(settings: Settings) -> None:
    """
    Remplace les handlers loguru par la console et le fichier JSON.

    Utilise settings.log_level (console), settings.log_file,
    settings.log_rotation_size et settings.log_retention_count.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=console_format,
        colorize=True,
    )

    log_file = settings.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=settings.log_rotation_size,
        retention=settings.log_retention_count,
        compression="zip",
        # Ecritures du cache depuis les threads de l'executeur
        enqueue=True,
    )

    logger.debug(
        "Logging configure",
        log_file=str(log_file),
        level=settings.log_level,
    )
