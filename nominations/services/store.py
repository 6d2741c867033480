import logging
from typing import Iterable, Set

from django.db import transaction

from nominations.exceptions import Forbidden, Unauthenticated
from nominations.models import Category, Nomination
from nominations.targets import NominationEntry

logger = logging.getLogger(__name__)


def require_principal(principal_id, user_id):
    """The verified caller may only read or write their own nominations."""
    if principal_id is None:
        raise Unauthenticated("Not authenticated")
    if principal_id != user_id:
        raise Forbidden("Forbidden")


def hydrated(queryset):
    return queryset.select_related(
        "movie",
        "movie_credit__person",
        "movie_credit__movie",
    ).order_by("rank")


def fetch_nominations(user_id, category_id):
    return list(
        hydrated(Nomination.objects.filter(user_id=user_id, category_id=category_id))
    )


def get_nominations(principal_id, user_id, category_id):
    require_principal(principal_id, user_id)
    return fetch_nominations(user_id, category_id)


def replace_nominations(
    user_id,
    category: Category,
    entries: Iterable[NominationEntry],
):
    """
    Swap the stored set for (user, category) for `entries`.

    Delete and insert run in one transaction so readers only ever see the
    old set or the new one. The returned set is read back inside the same
    transaction. Concurrent saves are last-write-wins.
    """
    entries = list(entries)
    with transaction.atomic():
        deleted, _ = Nomination.objects.filter(
            user_id=user_id, category=category
        ).delete()
        Nomination.objects.bulk_create(
            [
                Nomination(
                    user_id=user_id,
                    category=category,
                    rank=entry.rank,
                    **entry.as_fields(),
                )
                for entry in entries
            ]
        )
        saved = fetch_nominations(user_id, category.pk)

    logger.info(
        "User %s saved %d nominations for category %s (replaced %d)",
        user_id,
        len(entries),
        category.pk,
        deleted,
    )
    return saved


def get_completed_category_ids(principal_id, user_id) -> Set[int]:
    """
    Categories the user has saved at least one nomination for.

    A category counts as complete after any save, not only a full top 5.
    """
    require_principal(principal_id, user_id)
    return set(
        Nomination.objects.filter(user_id=user_id)
        .order_by()
        .values_list("category_id", flat=True)
        .distinct()
    )
