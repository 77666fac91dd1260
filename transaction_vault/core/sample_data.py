"""Sample transactions for trying out export/import on an empty store."""

from datetime import datetime
from typing import List, Optional

from transaction_vault.core.models import Category, Transaction
from transaction_vault.utils.constants import SAMPLE_EXPENSES, SAMPLE_INCOME


def seed_transactions(store, now: Optional[datetime] = None) -> List[Transaction]:
    """
    Add demo data to a store.

    An empty store gets the four sample expenses; otherwise a single
    income entry is added.

    Returns:
        The stored records
    """
    now = now or datetime.now()
    if store.count() == 0:
        records = [
            Transaction(name=name, date=now, amount=amount, category=Category.EXPENSE)
            for name, amount in SAMPLE_EXPENSES
        ]
    else:
        name, amount = SAMPLE_INCOME
        records = [Transaction(name=name, date=now, amount=amount, category=Category.INCOME)]
    return store.insert_many(records)
