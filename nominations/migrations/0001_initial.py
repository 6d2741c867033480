import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("movies", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                (
                    "type",
                    models.CharField(
                        choices=[("FILM", "Film"), ("ACTOR", "Actor"), ("DIRECTOR", "Director")],
                        max_length=20,
                    ),
                ),
                (
                    "pool",
                    models.CharField(
                        choices=[("NEW_RELEASE", "New release"), ("CLASSIC", "Classic"), ("ALL", "All")],
                        default="ALL",
                        max_length=20,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["pool", "type", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("name", "pool"),
                        name="unique_category_name_per_pool",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Nomination",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "rank",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nominations",
                        to="nominations.category",
                    ),
                ),
                (
                    "movie",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nominations",
                        to="movies.movie",
                    ),
                ),
                (
                    "movie_credit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nominations",
                        to="movies.moviecredit",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nominations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["user", "category", "rank"],
                "indexes": [
                    models.Index(fields=["user", "category"], name="nomination_user_cat_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "category", "rank"),
                        name="unique_rank_per_user_and_category",
                    ),
                    models.UniqueConstraint(
                        fields=("user", "category", "movie"),
                        name="unique_movie_per_user_and_category",
                    ),
                    models.UniqueConstraint(
                        fields=("user", "category", "movie_credit"),
                        name="unique_credit_per_user_and_category",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(movie__isnull=False, movie_credit__isnull=True),
                            models.Q(movie__isnull=True, movie_credit__isnull=False),
                            _connector="OR",
                        ),
                        name="nomination_has_exactly_one_target",
                    ),
                ],
            },
        ),
    ]
