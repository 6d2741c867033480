"""
Pull cast and director credits for a movie from TMDB.

Actors come from the top of the billed cast, directors from the crew.
People and credits are upserted, so running it twice is harmless.
"""

import logging

from movies.models import MovieCredit, Person
from movies.tmdb import fetch_movie_credits

logger = logging.getLogger(__name__)

MAX_CAST = 10


def _upsert_person(member):
    person, _ = Person.objects.update_or_create(
        tmdb_id=member["id"],
        defaults={
            "name": member["name"],
            "photo_path": member.get("profile_path"),
            "gender": member.get("gender"),
        },
    )
    return person


def ingest_credits_for_movie(movie):
    """Fetch and store credits for `movie`. Returns the number of credits written."""
    credits = fetch_movie_credits(movie.tmdb_id)
    written = 0

    for cast_member in credits.get("cast", [])[:MAX_CAST]:
        person = _upsert_person(cast_member)
        MovieCredit.objects.update_or_create(
            movie=movie,
            person=person,
            role=MovieCredit.ACTOR,
            defaults={
                "character": cast_member.get("character"),
                "billing_order": cast_member.get("order"),
            },
        )
        written += 1

    for crew_member in credits.get("crew", []):
        if crew_member.get("job") != "Director":
            continue
        person = _upsert_person(crew_member)
        MovieCredit.objects.get_or_create(
            movie=movie,
            person=person,
            role=MovieCredit.DIRECTOR,
        )
        written += 1

    logger.info("Ingested %d credits for %s", written, movie)
    return written
