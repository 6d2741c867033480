"""
What a nomination points at.

FILM categories nominate a movie, ACTOR/DIRECTOR categories nominate a
movie credit. A target is always exactly one of the two.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FilmTarget:
    movie_id: int

    @property
    def item_id(self) -> int:
        return self.movie_id


@dataclass(frozen=True)
class CreditTarget:
    movie_credit_id: int

    @property
    def item_id(self) -> int:
        return self.movie_credit_id


NominationTarget = Union[FilmTarget, CreditTarget]


@dataclass(frozen=True)
class NominationEntry:
    rank: int
    target: NominationTarget

    def as_fields(self):
        """Column values for a Nomination row."""
        if isinstance(self.target, FilmTarget):
            return {"movie_id": self.target.movie_id, "movie_credit_id": None}
        return {"movie_id": None, "movie_credit_id": self.target.movie_credit_id}
