"""
Transaction record model.

A transaction is a plain value: name, date, amount and a two-variant
category. The id is only an identity handle for storage; a store assigns
its own id when a record is inserted.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class Category(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


def new_transaction_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Transaction:
    name: str
    date: datetime
    amount: float
    category: Category
    id: str = field(default_factory=new_transaction_id)

    def with_new_id(self) -> "Transaction":
        """Copy of this record carrying a freshly generated id."""
        return replace(self, id=new_transaction_id())

    @property
    def is_expense(self) -> bool:
        return self.category is Category.EXPENSE
