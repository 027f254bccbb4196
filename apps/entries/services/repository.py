from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, List, Mapping, Optional

from dateutil import parser as date_parser
from django.db import DatabaseError, transaction
from django.utils import timezone

from ..models import Entry

logger = logging.getLogger('entries')

ALL_AMOUNTS = 'all'
WRITABLE_FIELDS = ('id', 'timestamp', 'username', 'amount', 'image', 'prize')


class InvalidEntry(ValueError):
    pass


@dataclass
class EntriesPage:
    data: List[Entry] = field(default_factory=list)
    total: int = 0


def parse_timestamp(value: Any) -> datetime:
    """Turn an ISO-ish string (or datetime) into an aware datetime.

    Naive values are read in the current time zone, so a bare
    ``2025-01-31`` means local midnight.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or '').strip()
        if not text:
            raise InvalidEntry('timestamp is required')
        try:
            parsed = date_parser.isoparse(text)
        except ValueError:
            try:
                parsed = date_parser.parse(text)
            except (ValueError, OverflowError) as exc:
                raise InvalidEntry(f'invalid timestamp: {text}') from exc
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_current_timezone())
    return parsed


def start_of_today() -> datetime:
    return timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)


def _entry_fields(entry: Mapping[str, Any]) -> dict:
    values = {key: entry[key] for key in WRITABLE_FIELDS if key in entry}
    if values.get('id'):
        values['id'] = str(values['id'])
        if '/' in values['id']:
            raise InvalidEntry('id must not contain "/"')
    else:
        values.pop('id', None)
    values['timestamp'] = parse_timestamp(values.get('timestamp'))
    for key in ('username', 'amount', 'image'):
        values[key] = str(values.get(key) or '')
    for key in ('id', 'amount'):
        limit = Entry._meta.get_field(key).max_length
        if key in values and len(values[key]) > limit:
            raise InvalidEntry(f'{key} longer than {limit} characters')
    try:
        values['prize'] = float(values.get('prize') or 0)
    except (TypeError, ValueError) as exc:
        raise InvalidEntry(f"invalid prize: {values.get('prize')}") from exc
    return values


def save_entry(entry: Mapping[str, Any]) -> List[Entry]:
    values = _entry_fields(entry)
    try:
        with transaction.atomic():
            created = Entry.objects.create(**values)
    except DatabaseError as exc:
        logger.error('Error saving entry: %s', exc)
        raise
    logger.info('Saved entry %s for %s', created.id, created.username)
    return [created]


def get_entries() -> List[Entry]:
    try:
        return list(Entry.objects.order_by('-timestamp'))
    except DatabaseError as exc:
        logger.error('Error fetching entries: %s', exc)
        raise


def get_entries_paged(
    page: int,
    page_size: int,
    search: Optional[str] = None,
    amount: Optional[str] = None,
    date_from: Any = None,
    date_to: Any = None,
) -> EntriesPage:
    start = max(0, (page - 1) * page_size)
    stop = start + max(page_size, 0)

    search_term = search.strip() if search else ''
    predicates = [
        ('username__icontains', search_term or None),
        ('amount', amount if amount and amount != ALL_AMOUNTS else None),
        ('timestamp__gte', parse_timestamp(date_from) if date_from else None),
        ('timestamp__lte', parse_timestamp(date_to) if date_to else None),
    ]

    try:
        qs = Entry.objects.order_by('-timestamp')
        for lookup, value in predicates:
            if value is not None:
                qs = qs.filter(**{lookup: value})
        total = qs.count()
        rows = list(qs[start:stop]) if stop > start else []
    except DatabaseError as exc:
        logger.error('Error fetching paged entries: %s', exc)
        raise
    return EntriesPage(data=rows, total=total or 0)


def get_amounts() -> List[str]:
    try:
        return list(Entry.objects.order_by('amount').values_list('amount', flat=True).distinct())
    except DatabaseError as exc:
        logger.error('Error fetching amounts: %s', exc)
        raise


def delete_entry(entry_id: str) -> bool:
    try:
        deleted, _ = Entry.objects.filter(pk=entry_id).delete()
    except DatabaseError as exc:
        logger.error('Error deleting entry: %s', exc)
        raise
    logger.info('Deleted entry %s (%s rows)', entry_id, deleted)
    return True


def clear_all_entries() -> bool:
    try:
        deleted, _ = Entry.objects.all().delete()
    except DatabaseError as exc:
        logger.error('Error clearing entries: %s', exc)
        raise
    logger.warning('Cleared all entries (%s rows)', deleted)
    return True


def get_today_entries() -> List[Entry]:
    try:
        return list(Entry.objects.filter(timestamp__gte=start_of_today()).order_by('-timestamp'))
    except DatabaseError as exc:
        logger.error('Error fetching today entries: %s', exc)
        raise


def get_today_count() -> int:
    # Display-only figure: a failing store reads as zero.
    try:
        return Entry.objects.filter(timestamp__gte=start_of_today()).count() or 0
    except DatabaseError as exc:
        logger.error('Error counting today entries: %s', exc)
        return 0
