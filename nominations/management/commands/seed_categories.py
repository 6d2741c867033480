from django.core.management.base import BaseCommand

from movies.models import Movie
from nominations.models import Category

CATEGORIES = [
    # Film categories
    ("Best Picture", Category.FILM),
    ("Best Screenplay", Category.FILM),
    ("Best Cinematography", Category.FILM),
    ("Best Score", Category.FILM),
    ("Best Editing", Category.FILM),
    ("Best Foreign Language Film", Category.FILM),
    # Acting categories
    ("Best Actor", Category.ACTOR),
    ("Best Actress", Category.ACTOR),
    ("Best Supporting Actor", Category.ACTOR),
    ("Best Supporting Actress", Category.ACTOR),
    # Directing
    ("Best Director", Category.DIRECTOR),
]


class Command(BaseCommand):
    help = "Create the award categories for a pool. Safe to run repeatedly."

    def add_arguments(self, parser):
        parser.add_argument(
            "--pool",
            choices=[value for value, _ in Movie.POOL_CHOICES],
            default=Movie.ALL,
            help="Pool the categories draw nominees from.",
        )

    def handle(self, *args, **options):
        pool = options["pool"]
        created_count = 0

        for name, category_type in CATEGORIES:
            _, created = Category.objects.get_or_create(
                name=name,
                pool=pool,
                defaults={"type": category_type},
            )
            if created:
                created_count += 1
                self.stdout.write(f"Created {name} ({pool})")

        self.stdout.write(
            self.style.SUCCESS(
                f"Done. Created {created_count} categories, "
                f"{len(CATEGORIES) - created_count} already existed."
            )
        )
