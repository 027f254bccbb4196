from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from ...models import Entry
from ...services.repository import clear_all_entries


class Command(BaseCommand):
    help = 'Delete every row from the entries table.'

    def add_arguments(self, parser):
        parser.add_argument('--yes', action='store_true', help='Confirm the unconditional delete')

    def handle(self, *args, **options):
        if not options.get('yes'):
            raise CommandError('Refusing to clear entries without --yes')

        existing = Entry.objects.count()
        clear_all_entries()
        self.stdout.write(self.style.SUCCESS(f'Cleared {existing} entries'))
