"""
Eligibility rules for award categories.

A movie can be nominated (directly, or through one of its credits) when
its pool is compatible with the category's pool and at least
MIN_VIEWERS people in the group have logged it. Some categories narrow
the candidate set further:

- "foreign language" film categories drop English-language movies
- the four acting categories filter by gender and billing tier and keep
  at most a few credits per movie

Everything is recomputed from the database on each call.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, List, Optional

from django.conf import settings
from django.db.models import Count, F, Q, QuerySet

from movies.models import Movie, MovieCredit, Person
from nominations.exceptions import NotFound
from nominations.models import Category

logger = logging.getLogger(__name__)

FOREIGN_LANGUAGE_MARKER = "foreign language"
DEFAULT_LANGUAGE = "en"

LEAD = "lead"
SUPPORTING = "supporting"
# 0-indexed cast position splitting lead and supporting roles
BILLING_TIER_SPLIT = 2

MAX_CREDITS_PER_MOVIE = 5


@dataclass(frozen=True)
class ActingRule:
    gender: int
    tier: str

    def matches(self, credit: MovieCredit) -> bool:
        order = credit.billing_order
        if order is None or credit.person.gender != self.gender:
            return False
        if self.tier == LEAD:
            return order <= BILLING_TIER_SPLIT
        return order >= BILLING_TIER_SPLIT


ACTING_RULES = {
    "Best Actor": ActingRule(gender=Person.GENDER_MALE, tier=LEAD),
    "Best Actress": ActingRule(gender=Person.GENDER_FEMALE, tier=LEAD),
    "Best Supporting Actor": ActingRule(gender=Person.GENDER_MALE, tier=SUPPORTING),
    "Best Supporting Actress": ActingRule(gender=Person.GENDER_FEMALE, tier=SUPPORTING),
}


def pools_compatible(category_pool: str, movie_pool: str) -> bool:
    """ALL on either side matches anything."""
    return (
        category_pool == Movie.ALL
        or movie_pool == Movie.ALL
        or movie_pool == category_pool
    )


def pool_filter(category_pool: str) -> Q:
    """ORM version of pools_compatible."""
    if category_pool == Movie.ALL:
        return Q()
    return Q(pool=category_pool) | Q(pool=Movie.ALL)


def is_foreign_language_category(category: Category) -> bool:
    return FOREIGN_LANGUAGE_MARKER in category.name.lower()


def acting_rule_for(category: Category) -> Optional[ActingRule]:
    if category.type != Category.ACTOR:
        return None
    return ACTING_RULES.get(category.name)


def eligible_movies(category: Category) -> QuerySet:
    """Movies in a compatible pool with enough viewers, annotated with viewer_count."""
    return (
        Movie.objects.filter(pool_filter(category.pool))
        .annotate(viewer_count=Count("views", distinct=True))
        .filter(viewer_count__gte=settings.MIN_VIEWERS)
    )


def cap_credits_per_movie(
    credits: Iterable[MovieCredit],
    limit: int = MAX_CREDITS_PER_MOVIE,
) -> List[MovieCredit]:
    """
    Keep the first `limit` credits of each movie, preserving input order.
    """
    seen = defaultdict(int)
    kept = []
    for credit in credits:
        if seen[credit.movie_id] >= limit:
            continue
        seen[credit.movie_id] += 1
        kept.append(credit)
    return kept


def _eligible_films(category: Category) -> List[Movie]:
    movies = eligible_movies(category)
    if is_foreign_language_category(category):
        movies = movies.exclude(
            Q(original_language__isnull=True)
            | Q(original_language="")
            | Q(original_language__iexact=DEFAULT_LANGUAGE)
        )
    return list(movies.order_by("title"))


def _eligible_credits(category: Category) -> List[MovieCredit]:
    movie_ids = list(eligible_movies(category).values_list("id", flat=True))
    credits = (
        MovieCredit.objects.filter(
            role=category.credit_role,
            movie_id__in=movie_ids,
        )
        .select_related("person", "movie")
        .annotate(viewer_count=Count("movie__views", distinct=True))
        .order_by(F("billing_order").asc(nulls_last=True), "person__name", "id")
    )

    credits = list(credits)
    for credit in credits:
        # nested movie serializer reads this instead of re-counting
        credit.movie.viewer_count = credit.viewer_count

    rule = acting_rule_for(category)
    if rule is None:
        return credits

    matching = [credit for credit in credits if rule.matches(credit)]
    return cap_credits_per_movie(matching)


def resolve_eligible(category_id):
    """
    Return (category, candidates) for a category id.

    Candidates are movies for FILM categories and credits (with person
    and movie loaded) for ACTOR/DIRECTOR categories. Raises NotFound for
    an unknown category.
    """
    try:
        category = Category.objects.get(pk=category_id)
    except Category.DoesNotExist:
        raise NotFound(f"Category {category_id} not found")

    if category.is_film:
        eligible = _eligible_films(category)
    else:
        eligible = _eligible_credits(category)

    logger.debug(
        "Resolved %d eligible items for category %s", len(eligible), category.pk
    )
    return category, eligible
