"""Movie, genre, person and cast repositories."""

from sqlalchemy import delete, select

from cinecatalog.database.models import IdAlias, Movie, MovieCast, MovieGenre, Person
from cinecatalog.database.repositories.base import BaseRepository


class MovieRepository(BaseRepository[Movie]):
    """Repository for Movie entity operations."""

    model = Movie

    def get_by_provider_id(self, provider: str, provider_id: str) -> Movie | None:
        """Retrieve a movie by provider-native identity.

        Args:
            provider: Provider name.
            provider_id: Provider-native id.

        Returns:
            Movie instance or None.
        """
        stmt = select(Movie).where(
            Movie.provider == provider,
            Movie.provider_id == provider_id,
        )
        return self._session.scalars(stmt).first()

    def list_unaliased(self, provider: str | None = None) -> list[Movie]:
        """List movies that are not redirected to another entity.

        Args:
            provider: Restrict to one provider.

        Returns:
            Movies ordered by id.
        """
        aliased_ids = select(IdAlias.from_id)
        stmt = select(Movie).where(Movie.id.not_in(aliased_ids))
        if provider is not None:
            stmt = stmt.where(Movie.provider == provider)
        return list(self._session.scalars(stmt.order_by(Movie.id)).all())

    # -------------------------------------------------------------------------
    # Genres
    # -------------------------------------------------------------------------

    def get_genres(self, movie_id: str) -> list[str]:
        """Return genre names of a movie, sorted."""
        stmt = select(MovieGenre.genre).where(MovieGenre.movie_id == movie_id)
        return sorted(self._session.scalars(stmt).all())

    def replace_genres(self, movie_id: str, genres: list[str]) -> None:
        """Replace the genre set of a movie.

        Args:
            movie_id: Movie entity id.
            genres: New genre names (duplicates ignored).
        """
        self._session.execute(delete(MovieGenre).where(MovieGenre.movie_id == movie_id))
        for genre in dict.fromkeys(g.strip() for g in genres if g and g.strip()):
            self._session.add(MovieGenre(movie_id=movie_id, genre=genre))
        self._session.flush()

    # -------------------------------------------------------------------------
    # Cast
    # -------------------------------------------------------------------------

    def get_cast(self, movie_id: str) -> list[MovieCast]:
        """Return billed cast ordered by billing order."""
        stmt = (
            select(MovieCast)
            .where(MovieCast.movie_id == movie_id)
            .order_by(MovieCast.billing_order)
        )
        return list(self._session.scalars(stmt).all())

    def replace_cast(self, movie_id: str, cast: list[MovieCast]) -> None:
        """Replace the billed cast of a movie.

        Args:
            movie_id: Movie entity id.
            cast: New cast rows; later duplicates of a person are dropped.
        """
        self._session.execute(delete(MovieCast).where(MovieCast.movie_id == movie_id))
        self._session.flush()
        seen: set[str] = set()
        for credit in cast:
            if credit.person_id in seen:
                continue
            seen.add(credit.person_id)
            credit.movie_id = movie_id
            self._session.add(credit)
        self._session.flush()


class PersonRepository(BaseRepository[Person]):
    """Repository for Person entity operations."""

    model = Person

    def upsert(self, person_id: str, name: str, profile_image: str | None) -> tuple[Person, bool]:
        """Insert or update a person.

        An empty incoming profile image keeps the stored one.

        Args:
            person_id: Person entity id.
            name: Display name.
            profile_image: Profile image URL.

        Returns:
            Tuple of (person, created).
        """
        person = self.get_by_id(person_id)
        if person is None:
            person = Person(id=person_id, name=name, profile_image=profile_image or None)
            self.create(person)
            return person, True

        person.name = name or person.name
        if profile_image:
            person.profile_image = profile_image
        self._session.flush()
        return person, False
