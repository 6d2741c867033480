import requests
from django.core.management.base import BaseCommand, CommandError

from movies import tmdb
from movies.models import Movie
from movies.services.credits import ingest_credits_for_movie


class Command(BaseCommand):
    help = "Fetch cast and director credits from TMDB for movies that have none."

    def add_arguments(self, parser):
        parser.add_argument(
            "--all",
            action="store_true",
            help="Refresh credits for every movie, not only those without any.",
        )

    def handle(self, *args, **options):
        if not tmdb.is_configured():
            raise CommandError("TMDB_API_KEY is not configured.")

        movies = Movie.objects.all()
        if not options["all"]:
            movies = movies.filter(credits__isnull=True)

        movies = list(movies.distinct())
        self.stdout.write(f"Ingesting credits for {len(movies)} movies...")

        written = 0
        failed = 0
        for movie in movies:
            try:
                count = ingest_credits_for_movie(movie)
            except requests.RequestException as exc:
                failed += 1
                self.stderr.write(f"Failed for {movie} ({movie.tmdb_id}): {exc}")
                continue
            written += count
            self.stdout.write(f"{movie}: {count} credits")

        self.stdout.write(
            self.style.SUCCESS(
                f"Done. Wrote {written} credits, {failed} movies failed."
            )
        )
