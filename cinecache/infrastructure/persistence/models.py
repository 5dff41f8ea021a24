"""
Modeles SQLModel du cache local.

Ces modeles sont distincts des entites de domaine (dataclass dans
core/entities/): les films recus du reseau sont copies dans ces
enregistrements au moment de la persistance.

Tables:
- movies: Films, cle primaire = id de l'API
- actors: Acteurs, cle primaire = nom
- movie_actors: Casting ordonne (position dans le casting)
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MovieModel(SQLModel, table=True):
    """
    Film en cache.

    L'id vient de l'API, il n'est jamais genere localement.
    """

    __tablename__ = "movies"

    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    name: str = ""
    year: int = Field(default=0, index=True)
    release_date: date = Field(default=date(1970, 1, 1))
    grossing: int = 0
    rating: float = 0.0
    updated_at: datetime = Field(default_factory=_utcnow)


class ActorModel(SQLModel, table=True):
    """Acteur en cache, identifie par son nom."""

    __tablename__ = "actors"

    name: str = Field(primary_key=True)


class MovieActorLink(SQLModel, table=True):
    """Entree du casting d'un film (ordre conserve via position)."""

    __tablename__ = "movie_actors"

    movie_id: int = Field(foreign_key="movies.id", primary_key=True)
    position: int = Field(primary_key=True)
    actor_name: str = Field(foreign_key="actors.name", index=True)
