from django.conf import settings
from django.db import models
from django.contrib.auth import get_user_model

User = get_user_model()


class Person(models.Model):
    # TMDB gender codes
    GENDER_UNKNOWN = 0
    GENDER_FEMALE = 1
    GENDER_MALE = 2
    GENDER_NON_BINARY = 3
    GENDER_CHOICES = [
        (GENDER_UNKNOWN, "Not specified"),
        (GENDER_FEMALE, "Female"),
        (GENDER_MALE, "Male"),
        (GENDER_NON_BINARY, "Non-binary"),
    ]

    tmdb_id = models.IntegerField(unique=True)
    name = models.CharField(max_length=200)
    photo_path = models.CharField(max_length=500, null=True, blank=True)
    gender = models.PositiveSmallIntegerField(
        choices=GENDER_CHOICES, null=True, blank=True
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Movie(models.Model):
    NEW_RELEASE = "NEW_RELEASE"
    CLASSIC = "CLASSIC"
    ALL = "ALL"
    POOL_CHOICES = [
        (NEW_RELEASE, "New release"),
        (CLASSIC, "Classic"),
        (ALL, "All"),
    ]

    tmdb_id = models.IntegerField(unique=True)
    title = models.CharField(max_length=255)
    year = models.PositiveIntegerField(null=True, blank=True)
    poster_path = models.CharField(max_length=500, null=True, blank=True)
    overview = models.TextField(null=True, blank=True)
    pool = models.CharField(max_length=20, choices=POOL_CHOICES, blank=True)
    original_language = models.CharField(max_length=10, null=True, blank=True)

    viewers = models.ManyToManyField(
        User,
        through="MovieView",
        related_name="viewed_movies",
        blank=True,
    )
    people = models.ManyToManyField(
        Person,
        through="MovieCredit",
        related_name="movies",
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["pool"], name="movie_pool_idx"),
            models.Index(fields=["title"], name="movie_title_idx"),
        ]

    def __str__(self):
        if self.year:
            return f"{self.title} ({self.year})"
        return self.title

    @staticmethod
    def pool_for_year(year):
        if year is None:
            return Movie.ALL
        if year >= settings.NEW_RELEASE_MIN_YEAR:
            return Movie.NEW_RELEASE
        return Movie.CLASSIC

    def save(self, *args, **kwargs):
        # pool is fixed when the movie is first stored
        if self._state.adding and not self.pool:
            self.pool = self.pool_for_year(self.year)
        super().save(*args, **kwargs)


class MovieView(models.Model):
    """
    One row = one user has logged one movie.

    The row itself is what counts towards a movie's viewer total;
    has_seen is only a display flag.
    """
    movie = models.ForeignKey(
        Movie, on_delete=models.CASCADE, related_name="views"
    )
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="movie_views"
    )
    has_seen = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["movie", "user"],
                name="unique_view_per_movie_and_user",
            ),
        ]

    def __str__(self):
        return f"{self.user} → {self.movie}"


class MovieCredit(models.Model):
    ACTOR = "ACTOR"
    DIRECTOR = "DIRECTOR"
    ROLE_CHOICES = [
        (ACTOR, "Actor"),
        (DIRECTOR, "Director"),
    ]

    movie = models.ForeignKey(
        Movie, on_delete=models.CASCADE, related_name="credits"
    )
    person = models.ForeignKey(
        Person, on_delete=models.CASCADE, related_name="credits"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    character = models.CharField(max_length=255, null=True, blank=True)
    # 0-indexed cast position, lower is more prominent
    billing_order = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        unique_together = ("movie", "person", "role")
        ordering = ["movie", "role", "billing_order"]
        indexes = [
            models.Index(fields=["person", "role"], name="credit_person_role_idx"),
            models.Index(fields=["movie"], name="credit_movie_idx"),
        ]

    def __str__(self):
        return f"{self.person} ({self.role}) – {self.movie}"
