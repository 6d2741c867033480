import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Person",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tmdb_id", models.IntegerField(unique=True)),
                ("name", models.CharField(max_length=200)),
                ("photo_path", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "gender",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        choices=[(0, "Not specified"), (1, "Female"), (2, "Male"), (3, "Non-binary")],
                        null=True,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Movie",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tmdb_id", models.IntegerField(unique=True)),
                ("title", models.CharField(max_length=255)),
                ("year", models.PositiveIntegerField(blank=True, null=True)),
                ("poster_path", models.CharField(blank=True, max_length=500, null=True)),
                ("overview", models.TextField(blank=True, null=True)),
                (
                    "pool",
                    models.CharField(
                        blank=True,
                        choices=[("NEW_RELEASE", "New release"), ("CLASSIC", "Classic"), ("ALL", "All")],
                        max_length=20,
                    ),
                ),
                ("original_language", models.CharField(blank=True, max_length=10, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["pool"], name="movie_pool_idx"),
                    models.Index(fields=["title"], name="movie_title_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MovieCredit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("ACTOR", "Actor"), ("DIRECTOR", "Director")], max_length=20)),
                ("character", models.CharField(blank=True, max_length=255, null=True)),
                ("billing_order", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "movie",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credits",
                        to="movies.movie",
                    ),
                ),
                (
                    "person",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credits",
                        to="movies.person",
                    ),
                ),
            ],
            options={
                "ordering": ["movie", "role", "billing_order"],
                "indexes": [
                    models.Index(fields=["person", "role"], name="credit_person_role_idx"),
                    models.Index(fields=["movie"], name="credit_movie_idx"),
                ],
                "unique_together": {("movie", "person", "role")},
            },
        ),
        migrations.AddField(
            model_name="movie",
            name="people",
            field=models.ManyToManyField(
                blank=True,
                related_name="movies",
                through="movies.MovieCredit",
                to="movies.person",
            ),
        ),
        migrations.CreateModel(
            name="MovieView",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("has_seen", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "movie",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="views",
                        to="movies.movie",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="movie_views",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("movie", "user"),
                        name="unique_view_per_movie_and_user",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="movie",
            name="viewers",
            field=models.ManyToManyField(
                blank=True,
                related_name="viewed_movies",
                through="movies.MovieView",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]
