from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.db import DatabaseError, IntegrityError
from django.test import TestCase

from apps.entries.models import Entry
from apps.entries.services.repository import (
    InvalidEntry,
    clear_all_entries,
    delete_entry,
    get_amounts,
    get_entries,
    get_entries_paged,
    get_today_count,
    get_today_entries,
    save_entry,
    start_of_today,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)


def make_entry(**overrides):
    values = {
        'timestamp': BASE_TIME,
        'username': 'player',
        'amount': '100',
        'image': '',
        'prize': 0,
    }
    values.update(overrides)
    return Entry.objects.create(**values)


class PagedEntriesTests(TestCase):
    def setUp(self):
        for idx in range(25):
            make_entry(
                timestamp=BASE_TIME - timedelta(hours=idx),
                username=f'user{idx:02d}',
                amount='100' if idx % 2 == 0 else '500',
                prize=idx,
            )

    def test_pages_follow_descending_timestamp(self):
        ordered = [entry.id for entry in get_entries()]
        first = get_entries_paged(page=1, page_size=10)
        second = get_entries_paged(page=2, page_size=10)
        assert [e.id for e in first.data] == ordered[0:10]
        assert [e.id for e in second.data] == ordered[10:20]
        assert first.total == 25
        assert first.data[0].timestamp == BASE_TIME

    def test_last_page_is_partial_and_past_end_is_empty(self):
        third = get_entries_paged(page=3, page_size=10)
        beyond = get_entries_paged(page=9, page_size=10)
        assert len(third.data) == 5
        assert beyond.data == []
        assert beyond.total == 25

    def test_non_positive_page_clamps_to_start(self):
        first = [e.id for e in get_entries_paged(page=1, page_size=5).data]
        assert [e.id for e in get_entries_paged(page=0, page_size=5).data] == first
        assert [e.id for e in get_entries_paged(page=-3, page_size=5).data] == first

    def test_amount_filter_is_exact(self):
        result = get_entries_paged(page=1, page_size=50, amount='500')
        assert result.total == 12
        assert all(entry.amount == '500' for entry in result.data)
        assert get_entries_paged(page=1, page_size=50, amount='50').total == 0

    def test_amount_all_applies_no_filter(self):
        assert get_entries_paged(page=1, page_size=50, amount='all').total == 25

    def test_date_bounds_are_inclusive(self):
        date_from = BASE_TIME - timedelta(hours=4)
        date_to = BASE_TIME - timedelta(hours=2)
        result = get_entries_paged(
            page=1,
            page_size=50,
            date_from=date_from.isoformat(),
            date_to=date_to.isoformat(),
        )
        assert result.total == 3
        stamps = [entry.timestamp for entry in result.data]
        assert stamps[0] == date_to
        assert stamps[-1] == date_from

    def test_total_counts_filtered_rows_not_page(self):
        result = get_entries_paged(page=1, page_size=3, amount='100')
        assert len(result.data) == 3
        assert result.total == 13


class SearchTests(TestCase):
    def setUp(self):
        make_entry(username='Anna', timestamp=BASE_TIME)
        make_entry(username='Joanna', timestamp=BASE_TIME - timedelta(minutes=1))
        make_entry(username='Bob', timestamp=BASE_TIME - timedelta(minutes=2))

    def test_search_is_case_insensitive_substring(self):
        result = get_entries_paged(page=1, page_size=10, search='ann')
        assert [entry.username for entry in result.data] == ['Anna', 'Joanna']
        assert result.total == 2

    def test_blank_search_is_ignored(self):
        assert get_entries_paged(page=1, page_size=10, search='   ').total == 3

    def test_amounts_are_distinct(self):
        make_entry(amount='500')
        assert get_amounts() == ['100', '500']


class WriteTests(TestCase):
    def test_save_entry_returns_inserted_row(self):
        created = save_entry({
            'timestamp': '2024-05-01T08:30:00Z',
            'username': 'lucky',
            'amount': '1000',
            'image': 'https://example.com/a.png',
            'prize': 88.5,
            'created_at': '1999-01-01T00:00:00Z',
        })
        assert len(created) == 1
        row = Entry.objects.get(pk=created[0].pk)
        assert row.id
        assert row.username == 'lucky'
        assert row.prize == 88.5
        assert row.timestamp == datetime(2024, 5, 1, 8, 30, tzinfo=dt_timezone.utc)
        assert row.created_at.year != 1999

    def test_save_entry_keeps_supplied_id(self):
        created = save_entry({'id': 'abc123', 'timestamp': '2024-05-01', 'username': 'x', 'amount': '1', 'prize': 1})
        assert created[0].id == 'abc123'

    def test_duplicate_id_raises_store_error(self):
        save_entry({'id': 'dup', 'timestamp': '2024-05-01', 'username': 'x', 'amount': '1', 'prize': 1})
        with self.assertRaises(IntegrityError):
            save_entry({'id': 'dup', 'timestamp': '2024-05-02', 'username': 'y', 'amount': '1', 'prize': 1})
        assert Entry.objects.count() == 1

    def test_missing_timestamp_is_rejected(self):
        with self.assertRaises(InvalidEntry):
            save_entry({'username': 'x', 'amount': '1', 'prize': 1})
        assert not Entry.objects.exists()

    def test_id_with_slash_is_rejected(self):
        with self.assertRaises(InvalidEntry):
            save_entry({'id': 'a/b', 'timestamp': '2024-05-01', 'username': 'x', 'amount': '1', 'prize': 1})
        assert not Entry.objects.exists()

    def test_long_username_is_kept(self):
        name = 'n' * 1000
        created = save_entry({'timestamp': '2024-05-01', 'username': name, 'amount': '1', 'prize': 1})
        assert Entry.objects.get(pk=created[0].pk).username == name

    def test_over_long_id_or_amount_is_rejected(self):
        with self.assertRaises(InvalidEntry):
            save_entry({'timestamp': '2024-05-01', 'username': 'x', 'amount': '9' * 65, 'prize': 1})
        with self.assertRaises(InvalidEntry):
            save_entry({'id': 'i' * 65, 'timestamp': '2024-05-01', 'username': 'x', 'amount': '1', 'prize': 1})
        assert not Entry.objects.exists()

    def test_delete_entry(self):
        keep = make_entry()
        gone = make_entry(timestamp=BASE_TIME - timedelta(days=1))
        assert delete_entry(gone.id) is True
        assert list(Entry.objects.values_list('id', flat=True)) == [keep.id]

    def test_delete_missing_entry_is_silent(self):
        make_entry()
        assert delete_entry('does-not-exist') is True
        assert Entry.objects.count() == 1

    def test_clear_all_entries(self):
        make_entry(username='')
        make_entry(amount='')
        make_entry(timestamp=BASE_TIME - timedelta(days=400))
        assert clear_all_entries() is True
        assert Entry.objects.count() == 0


class StoreErrorTests(TestCase):
    def _assert_logged_and_reraised(self, manager_method, call, message):
        error = DatabaseError('store down')
        with mock.patch.object(Entry.objects, manager_method, side_effect=error):
            with self.assertLogs('entries', level='ERROR') as logs:
                with self.assertRaises(DatabaseError) as ctx:
                    call()
        assert ctx.exception is error
        assert any(message in line and 'store down' in line for line in logs.output)

    def test_save_entry(self):
        self._assert_logged_and_reraised(
            'create',
            lambda: save_entry({'timestamp': '2024-05-01', 'username': 'x', 'amount': '1', 'prize': 1}),
            'Error saving entry',
        )

    def test_get_entries(self):
        self._assert_logged_and_reraised('order_by', get_entries, 'Error fetching entries')

    def test_get_entries_paged(self):
        self._assert_logged_and_reraised(
            'order_by',
            lambda: get_entries_paged(page=1, page_size=10, search='ann', amount='100'),
            'Error fetching paged entries',
        )

    def test_delete_entry(self):
        self._assert_logged_and_reraised('filter', lambda: delete_entry('abc'), 'Error deleting entry')

    def test_clear_all_entries(self):
        self._assert_logged_and_reraised('all', clear_all_entries, 'Error clearing entries')

    def test_get_today_entries(self):
        self._assert_logged_and_reraised('filter', get_today_entries, 'Error fetching today entries')

    def test_get_today_count_logs_and_returns_zero(self):
        with mock.patch.object(Entry.objects, 'filter', side_effect=DatabaseError('store down')):
            with self.assertLogs('entries', level='ERROR') as logs:
                assert get_today_count() == 0
        assert 'Error counting today entries' in logs.output[0]


class TodayTests(TestCase):
    def setUp(self):
        midnight = start_of_today()
        self.today = make_entry(username='today', timestamp=midnight)
        make_entry(username='yesterday', timestamp=midnight - timedelta(seconds=1))

    def test_today_entries_start_at_local_midnight(self):
        assert [entry.username for entry in get_today_entries()] == ['today']

    def test_today_count(self):
        assert get_today_count() == 1

    def test_today_count_degrades_to_zero(self):
        with mock.patch.object(Entry.objects, 'filter', side_effect=DatabaseError('boom')):
            assert get_today_count() == 0

    def test_today_entries_raise_on_store_error(self):
        with mock.patch.object(Entry.objects, 'filter', side_effect=DatabaseError('boom')):
            with self.assertRaises(DatabaseError):
                get_today_entries()
