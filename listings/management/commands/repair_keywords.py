"""
Management command to re-encode stored optimization keywords.

Older rows may hold keywords as a bracketed but unquoted list, a bare
comma-separated string or a single word. Each value is passed through the
keyword recovery parser and written back as a canonical JSON array.

Usage:
    python manage.py repair_keywords
    python manage.py repair_keywords --dry-run
    python manage.py repair_keywords --verbose
"""

import logging

from django.core.management.base import BaseCommand
from django.db import transaction

from listings.models import Optimization
from listings.utils.keywords import encode_keywords, parse_keywords

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Rewrite generated_keywords into the canonical JSON encoding."""

    help = 'Re-encode stored optimization keywords as JSON arrays'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report rows that would change without saving them',
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Print each changed row',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        verbose = options['verbose']

        if dry_run:
            self.stdout.write(self.style.WARNING('Running in dry-run mode - no rows will be saved'))

        rows = Optimization.objects.only('id', 'asin', 'generated_keywords').order_by('id')
        total = 0
        changed = 0

        for opt in rows.iterator():
            total += 1
            canonical = encode_keywords(parse_keywords(opt.generated_keywords))
            if canonical == opt.generated_keywords:
                continue

            changed += 1
            if verbose:
                self.stdout.write(
                    f'  #{opt.id} {opt.asin}: {opt.generated_keywords!r} -> {canonical}'
                )
            if not dry_run:
                with transaction.atomic():
                    Optimization.objects.filter(pk=opt.pk).update(generated_keywords=canonical)

        logger.info(f"repair_keywords scanned {total} rows, {changed} non-canonical")

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f'Dry run: Would have repaired {changed} of {total} optimizations')
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Repaired {changed} of {total} optimizations')
            )
