from django.db import models
from django.db.models import Q
from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator, MaxValueValidator

from movies.models import Movie, MovieCredit

User = get_user_model()


class Category(models.Model):
    FILM = "FILM"
    ACTOR = "ACTOR"
    DIRECTOR = "DIRECTOR"
    TYPE_CHOICES = [
        (FILM, "Film"),
        (ACTOR, "Actor"),
        (DIRECTOR, "Director"),
    ]

    name = models.CharField(max_length=150)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    pool = models.CharField(
        max_length=20, choices=Movie.POOL_CHOICES, default=Movie.ALL
    )

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["pool", "type", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name", "pool"],
                name="unique_category_name_per_pool",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.pool})"

    @property
    def is_film(self):
        return self.type == self.FILM

    @property
    def credit_role(self):
        """MovieCredit role nominated in this category, None for FILM."""
        if self.type == self.ACTOR:
            return MovieCredit.ACTOR
        if self.type == self.DIRECTOR:
            return MovieCredit.DIRECTOR
        return None


class Nomination(models.Model):
    """
    One ranked slot in a user's top-5 for a category.

    The full set for a (user, category) pair is always replaced together,
    rows are never edited in place.
    """
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="nominations"
    )
    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="nominations"
    )
    rank = models.PositiveSmallIntegerField(
        validators=[
            MinValueValidator(1),
            MaxValueValidator(5),
        ]
    )
    movie = models.ForeignKey(
        Movie,
        on_delete=models.CASCADE,
        related_name="nominations",
        null=True,
        blank=True,
    )
    movie_credit = models.ForeignKey(
        MovieCredit,
        on_delete=models.CASCADE,
        related_name="nominations",
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["user", "category", "rank"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "category", "rank"],
                name="unique_rank_per_user_and_category",
            ),
            models.UniqueConstraint(
                fields=["user", "category", "movie"],
                name="unique_movie_per_user_and_category",
            ),
            models.UniqueConstraint(
                fields=["user", "category", "movie_credit"],
                name="unique_credit_per_user_and_category",
            ),
            models.CheckConstraint(
                condition=(
                    Q(movie__isnull=False, movie_credit__isnull=True)
                    | Q(movie__isnull=True, movie_credit__isnull=False)
                ),
                name="nomination_has_exactly_one_target",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "category"], name="nomination_user_cat_idx"),
        ]

    def __str__(self):
        return f"{self.user} #{self.rank} in {self.category}"
