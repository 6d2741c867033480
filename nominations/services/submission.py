"""
Validation of a user's ranked nominations for one category.

Every check runs before anything is written; the first failing check
raises and the stored set stays untouched. Only when the whole list is
valid does the store swap the old set for the new one.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from django.conf import settings
from django.db.models import Count

from movies.models import Movie, MovieCredit
from nominations.deadline import PERIOD_CLOSED, Deadline, get_deadline
from nominations.exceptions import Forbidden, InvalidArgument, NotFound
from nominations.models import Category
from nominations.services.eligibility import pools_compatible
from nominations.services.store import replace_nominations, require_principal
from nominations.targets import CreditTarget, FilmTarget, NominationEntry

logger = logging.getLogger(__name__)

MIN_RANK = 1
MAX_RANK = 5


def _check_structure(category: Category, proposed: Sequence[Mapping]):
    limit = settings.MAX_NOMINATIONS_PER_CATEGORY
    if len(proposed) > limit:
        raise InvalidArgument(
            f"Too many nominations: max {limit} per category"
        )

    ranks = [item.get("rank") for item in proposed]
    if any(rank is None or not MIN_RANK <= rank <= MAX_RANK for rank in ranks):
        raise InvalidArgument(
            f"Rank out of range: ranks must be {MIN_RANK}-{MAX_RANK}"
        )
    if len(set(ranks)) != len(ranks):
        raise InvalidArgument("Duplicate rank")


def _build_entries(
    category: Category, proposed: Sequence[Mapping]
) -> List[NominationEntry]:
    entries = []
    for item in proposed:
        movie_id = item.get("movie_id")
        movie_credit_id = item.get("movie_credit_id")
        if category.is_film:
            if movie_id is None or movie_credit_id is not None:
                raise InvalidArgument("FILM categories require movie_id only")
            target = FilmTarget(movie_id=movie_id)
        else:
            if movie_credit_id is None or movie_id is not None:
                raise InvalidArgument(
                    f"{category.type} categories require movie_credit_id only"
                )
            target = CreditTarget(movie_credit_id=movie_credit_id)
        entries.append(NominationEntry(rank=item["rank"], target=target))

    item_ids = [entry.target.item_id for entry in entries]
    if len(set(item_ids)) != len(item_ids):
        raise InvalidArgument("Duplicate item")
    return entries


def _check_movie_eligible(category: Category, movie: Movie, viewer_count: int):
    if not pools_compatible(category.pool, movie.pool):
        raise InvalidArgument(f'Movie "{movie.title}" pool mismatch')
    if viewer_count < settings.MIN_VIEWERS:
        raise InvalidArgument(
            f'Movie "{movie.title}" needs {settings.MIN_VIEWERS}+ viewers'
        )


def _check_films(category: Category, entries: List[NominationEntry]):
    ids = [entry.target.movie_id for entry in entries]
    movies: Dict[int, Movie] = Movie.objects.annotate(
        viewer_count=Count("views", distinct=True)
    ).in_bulk(ids)

    for movie_id in ids:
        movie = movies.get(movie_id)
        if movie is None:
            raise InvalidArgument(f"Movie {movie_id} not found")
        _check_movie_eligible(category, movie, movie.viewer_count)


def _check_credits(category: Category, entries: List[NominationEntry]):
    ids = [entry.target.movie_credit_id for entry in entries]
    credits: Dict[int, MovieCredit] = (
        MovieCredit.objects.select_related("movie", "person")
        .annotate(viewer_count=Count("movie__views", distinct=True))
        .in_bulk(ids)
    )

    for credit_id in ids:
        credit = credits.get(credit_id)
        if credit is None:
            raise InvalidArgument(f"Movie credit {credit_id} not found")
        if credit.role != category.credit_role:
            raise InvalidArgument(f"Movie credit {credit_id} role mismatch")
        _check_movie_eligible(category, credit.movie, credit.viewer_count)


def validate_and_save(
    principal_id: Optional[int],
    user_id: int,
    category_id: int,
    proposed: Sequence[Mapping],
    deadline: Optional[Deadline] = None,
):
    """
    Validate `proposed` and store it as the user's set for the category.

    `proposed` is a sequence of mappings with `rank` and either
    `movie_id` or `movie_credit_id`. Returns the stored nominations,
    ordered by rank and hydrated with their movie or credit.
    """
    deadline = deadline or get_deadline()
    # a closed period rejects every save, valid or not
    if deadline.is_passed():
        raise Forbidden(PERIOD_CLOSED)

    require_principal(principal_id, user_id)

    try:
        category = Category.objects.get(pk=category_id)
    except Category.DoesNotExist:
        raise NotFound(f"Category {category_id} not found")

    try:
        _check_structure(category, proposed)
        entries = _build_entries(category, proposed)
        if category.is_film:
            _check_films(category, entries)
        else:
            _check_credits(category, entries)
    except InvalidArgument as exc:
        logger.info(
            "Rejected nominations from user %s for category %s: %s",
            user_id,
            category_id,
            exc.message,
        )
        raise

    return replace_nominations(user_id, category, entries)
