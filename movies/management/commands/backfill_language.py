import requests
from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q

from movies import tmdb
from movies.models import Movie


class Command(BaseCommand):
    help = "Fill in original_language from TMDB for movies missing it."

    def handle(self, *args, **options):
        if not tmdb.is_configured():
            raise CommandError("TMDB_API_KEY is not configured.")

        movies = list(
            Movie.objects.filter(
                Q(original_language__isnull=True) | Q(original_language="")
            )
        )
        self.stdout.write(f"Backfilling {len(movies)} movies...")

        updated = 0
        for movie in movies:
            try:
                details = tmdb.fetch_movie_details(movie.tmdb_id)
            except requests.RequestException as exc:
                self.stderr.write(f"Failed for {movie} ({movie.tmdb_id}): {exc}")
                continue

            language = details.get("original_language")
            if not language:
                continue
            movie.original_language = language
            movie.save(update_fields=["original_language"])
            updated += 1
            self.stdout.write(f"{movie}: {language}")

        self.stdout.write(self.style.SUCCESS(f"Done. Updated {updated} movies."))
