from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from dashboard.exceptions import BackendUnavailable
from dashboard.services import collections

# these need query parameters and are fetched on demand only
PARAMETRISED = {'branches', 'rooms-capacity'}


class Command(BaseCommand):
    help = "Invalidate cached care backend collections, optionally re-fetch them, and broadcast a refresh event."

    def add_arguments(self, parser):
        parser.add_argument('names', nargs='*', help='Collections to refresh (default: all).')
        parser.add_argument('--warm', action='store_true', help='Fetch each collection again after invalidating.')

    def handle(self, *args, **options):
        names = options['names'] or sorted(collections.COLLECTIONS)
        unknown = [n for n in names if n not in collections.COLLECTIONS]
        if unknown:
            raise CommandError(f"Unknown collections: {', '.join(unknown)}")

        collections.invalidate(*names)
        warmed = 0
        if options['warm']:
            for name in names:
                if name in PARAMETRISED:
                    continue
                try:
                    items = collections.load(name)
                except BackendUnavailable:
                    self.stderr.write(self.style.WARNING(f"could not fetch {name}"))
                    continue
                warmed += 1
                self.stdout.write(f"{name}: {len(items)} items")

        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {len(names)} collections ({warmed} warmed) at {timezone.now()}"))
