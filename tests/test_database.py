import shutil
import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from transaction_vault.core.database import DatabaseManager
from transaction_vault.core.errors import EncodingError
from transaction_vault.core.models import Category, Transaction
from transaction_vault.core.sample_data import seed_transactions
from transaction_vault.utils.constants import SAMPLE_EXPENSES, SAMPLE_INCOME


class TestTransactionStore(unittest.TestCase):
    """Test the SQLite transaction store used by export/import"""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.db_path = self.tmpdir / 'transactions.db'
        self.db = DatabaseManager(self.db_path)

    def tearDown(self):
        self.db.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _record(self, name, date, amount=10.0, category=Category.EXPENSE):
        return Transaction(name=name, date=date, amount=amount, category=category)

    def test_get_all_sorted_newest_first(self):
        base = datetime(2025, 1, 1)
        for name, offset in [('middle', 5), ('oldest', 0), ('newest', 30)]:
            self.db.insert(self._record(name, base + timedelta(days=offset)))

        names = [t.name for t in self.db.get_all()]
        self.assertEqual(names, ['newest', 'middle', 'oldest'])

    def test_insert_assigns_fresh_id(self):
        record = self._record('Desk', datetime(2025, 1, 1))
        stored = self.db.insert(record)

        self.assertNotEqual(stored.id, record.id)
        self.assertEqual(stored.name, record.name)
        self.assertEqual(self.db.get_all(), [stored])

    def test_same_record_can_be_inserted_twice(self):
        """Re-importing a file must not collide on ids"""
        record = self._record('Desk', datetime(2025, 1, 1))
        self.db.insert(record)
        self.db.insert(record)
        self.assertEqual(self.db.count(), 2)

    def test_values_round_trip_through_storage(self):
        record = Transaction(
            name='Café ☕',
            date=datetime(2024, 12, 24, 8, 30, 15, 123456, tzinfo=timezone.utc),
            amount=0.1,
            category=Category.INCOME,
        )
        stored = self.db.insert(record)
        loaded = self.db.get_all()[0]

        self.assertEqual(loaded, stored)
        self.assertIs(loaded.category, Category.INCOME)
        self.assertEqual(loaded.date, record.date)

    def test_insert_many_is_atomic(self):
        self.db.conn.execute(
            "CREATE TRIGGER reject_boom BEFORE INSERT ON transactions "
            "WHEN NEW.name = 'BOOM' BEGIN SELECT RAISE(ABORT, 'boom'); END"
        )
        records = [
            self._record('ok-1', datetime(2025, 1, 1)),
            self._record('BOOM', datetime(2025, 1, 2)),
            self._record('ok-2', datetime(2025, 1, 3)),
        ]
        with self.assertRaises(sqlite3.DatabaseError):
            self.db.insert_many(records)

        self.assertEqual(self.db.count(), 0)

    def test_dates_at_the_ends_of_the_range(self):
        """Sorting must not go through local time, which overflows at year 1 and 9999"""
        west = timezone(timedelta(hours=-5))
        self.db.insert_many([
            self._record('first', datetime(1, 1, 1)),
            self._record('last', datetime(9999, 12, 31, 23, 0)),
            self._record('last-aware', datetime(9999, 12, 31, 23, 0, tzinfo=west)),
            self._record('first-aware', datetime(1, 1, 1, 12, 0, tzinfo=timezone.utc)),
        ])

        names = [t.name for t in self.db.get_all()]
        self.assertEqual(names, ['last-aware', 'last', 'first-aware', 'first'])
        self.assertEqual(self.db.get_all()[-1].date, datetime(1, 1, 1))

    def test_non_finite_amount_is_rejected(self):
        for amount in (float('inf'), float('-inf'), float('nan')):
            with self.assertRaises(EncodingError):
                self.db.insert(self._record('Bad', datetime(2025, 1, 1), amount=amount))
        self.assertEqual(self.db.count(), 0)

    def test_non_finite_amount_rolls_back_batch(self):
        records = [
            self._record('ok', datetime(2025, 1, 1)),
            self._record('bad', datetime(2025, 1, 2), amount=float('inf')),
        ]
        with self.assertRaises(EncodingError):
            self.db.insert_many(records)
        self.assertEqual(self.db.count(), 0)

    def test_delete(self):
        stored = self.db.insert(self._record('Desk', datetime(2025, 1, 1)))
        self.assertTrue(self.db.delete(stored.id))
        self.assertFalse(self.db.delete(stored.id))
        self.assertEqual(self.db.count(), 0)

    def test_get_frame(self):
        self.db.insert(self._record('Desk', datetime(2025, 1, 1), amount=199.0))
        df = self.db.get_frame()
        self.assertEqual(list(df.columns), ['id', 'name', 'date', 'amount', 'category'])
        self.assertEqual(df.iloc[0]['name'], 'Desk')
        self.assertEqual(df.iloc[0]['category'], 'expense')

    def test_data_persists_across_connections(self):
        self.db.insert(self._record('Desk', datetime(2025, 1, 1)))
        self.db.close()

        self.db = DatabaseManager(self.db_path)
        self.assertEqual(self.db.count(), 1)

    def test_corrupted_database_is_moved_aside(self):
        self.db.close()
        self.db_path.write_bytes(b'this is not a sqlite database' * 100)

        self.db = DatabaseManager(self.db_path)

        self.assertEqual(self.db.count(), 0)
        corrupt = list(self.tmpdir.glob('CORRUPT_*'))
        self.assertEqual(len(corrupt), 1)

    def test_lock_path_sits_next_to_database(self):
        self.assertEqual(self.db.lock_path, self.tmpdir / 'transactions.db.lock')


class TestSampleData(unittest.TestCase):

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.db = DatabaseManager(self.tmpdir / 'transactions.db')

    def tearDown(self):
        self.db.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_empty_store_gets_sample_expenses(self):
        stored = seed_transactions(self.db, now=datetime(2025, 1, 1))

        self.assertEqual([(t.name, t.amount) for t in stored], SAMPLE_EXPENSES)
        self.assertTrue(all(t.category is Category.EXPENSE for t in stored))
        self.assertEqual(self.db.count(), 4)

    def test_non_empty_store_gets_one_income(self):
        seed_transactions(self.db)
        stored = seed_transactions(self.db)

        self.assertEqual(len(stored), 1)
        self.assertEqual((stored[0].name, stored[0].amount), SAMPLE_INCOME)
        self.assertIs(stored[0].category, Category.INCOME)
        self.assertEqual(self.db.count(), 5)


if __name__ == '__main__':
    unittest.main()
