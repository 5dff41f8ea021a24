"""
Decodage des reponses JSON de l'API en entites du domaine.

Format d'un film:
    {
        "id": 1,
        "name": "Captain America: Civil War",
        "year": 2016,
        "releaseDate": "2016-05-06",
        "grossing": 1153304495,
        "rating": 7.9,
        "cast": [{"name": "Chris Evans"}, ...]
    }

Les dates utilisent le format fixe yyyy-MM-dd (UTC). Seul "id" est
obligatoire, les autres champs prennent une valeur par defaut.
"""

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cinecache.core.entities.movie import Actor, Movie
from cinecache.core.errors import DecodeError

DATE_FORMAT = "%Y-%m-%d"


class ApiActor(BaseModel):
    """Acteur tel que retourne par l'API."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""

    def to_entity(self) -> Actor:
        return Actor(name=self.name)


class ApiMovie(BaseModel):
    """Film tel que retourne par l'API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    name: str = ""
    year: int = 0
    release_date: date = Field(
        default=date(1970, 1, 1), alias="releaseDate"
    )
    grossing: int = 0
    rating: float = 0.0
    cast: list[ApiActor] = Field(default_factory=list)

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v: Any) -> Any:
        """Parse une date yyyy-MM-dd en jour calendaire UTC."""
        if isinstance(v, str):
            parsed = datetime.strptime(v, DATE_FORMAT).replace(tzinfo=timezone.utc)
            return parsed.date()
        return v

    def to_entity(self) -> Movie:
        return Movie(
            id=self.id,
            name=self.name,
            year=self.year,
            release_date=self.release_date,
            grossing=self.grossing,
            rating=self.rating,
            cast=tuple(actor.to_entity() for actor in self.cast),
        )


def decode_movie(payload: Any) -> Movie:
    """
    Decode un film.

    Raises:
        DecodeError: Si le payload ne correspond pas au format attendu
    """
    try:
        return ApiMovie.model_validate(payload).to_entity()
    except ValidationError as e:
        raise DecodeError(f"Invalid movie payload: {e}") from e


def decode_movies(payload: Any) -> list[Movie]:
    """
    Decode une liste de films.

    Raises:
        DecodeError: Si le payload n'est pas une liste ou si un film est invalide
    """
    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected a list of movies, got {type(payload).__name__}"
        )
    return [decode_movie(item) for item in payload]
