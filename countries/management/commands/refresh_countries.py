import random

from django.core.management.base import BaseCommand, CommandError

from countries.errors import SourceError
from countries.refresh import refresh_countries


class Command(BaseCommand):
    help = "Fetch countries and exchange rates and refresh the cached data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--seed",
            type=int,
            default=None,
            help="Seed for the GDP multiplier, for reproducible runs.",
        )

    def handle(self, *args, **options):
        rng = random.Random(options["seed"]) if options["seed"] is not None else None
        try:
            result = refresh_countries(rng=rng)
        except SourceError as exc:
            raise CommandError(f"External data source unavailable: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {result.refreshed} countries ({result.failed} skipped), "
            f"{result.total_countries} cached, last refreshed at {result.last_refreshed_at.isoformat()}"
        ))
