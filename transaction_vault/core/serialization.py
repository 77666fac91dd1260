"""
================================================================================
SERIALIZATION - Canonical Transaction Encoding
================================================================================

Turns an ordered sequence of transactions into bytes and back.

Format:
    UTF-8 JSON array, one object per transaction:
        {"amount": 199.0, "category": "expense",
         "date": "2025-01-01T00:00:00", "id": "...", "name": "Desk"}

    - Keys sorted, compact separators: equal input gives identical bytes
    - date: datetime.isoformat(), microseconds and UTC offset preserved
    - amount: JSON number, always decoded as float
    - category: "expense" or "income"
    - id: optional on decode, a fresh one is generated when missing

Errors:
    encode_transactions raises EncodingError for values JSON cannot carry
    (non-finite amounts, non-datetime dates).
    decode_transactions raises MalformedDataError for anything that is not
    a valid encoding of this schema.

================================================================================
"""

import json
import math
from datetime import datetime
from typing import Iterable, List

from transaction_vault.core.errors import EncodingError, MalformedDataError
from transaction_vault.core.models import Category, Transaction, new_transaction_id
from transaction_vault.utils.constants import PLAINTEXT_ENCODING

REQUIRED_FIELDS = ('name', 'date', 'amount', 'category')


def _transaction_to_dict(record: Transaction) -> dict:
    if not isinstance(record.date, datetime):
        raise EncodingError(f"Transaction date must be a datetime, got {type(record.date).__name__}")
    try:
        category = Category(record.category).value
    except ValueError:
        raise EncodingError(f"Unknown category {record.category!r}") from None
    return {
        'id': str(record.id),
        'name': str(record.name),
        'date': record.date.isoformat(),
        'amount': float(record.amount),
        'category': category,
    }


def encode_transactions(records: Iterable[Transaction]) -> bytes:
    """
    Serialize transactions to canonical UTF-8 JSON bytes.

    Args:
        records: Transactions in the order they should be restored

    Returns:
        Encoded bytes
    """
    payload = [_transaction_to_dict(r) for r in records]
    try:
        text = json.dumps(payload, sort_keys=True, separators=(',', ':'), allow_nan=False)
    except ValueError as e:
        raise EncodingError(f"Transaction cannot be encoded: {e}") from e
    return text.encode(PLAINTEXT_ENCODING)


def _parse_amount(value, index):
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDataError(f"Transaction {index}: amount must be a number")
    amount = float(value)
    if not math.isfinite(amount):
        raise MalformedDataError(f"Transaction {index}: amount must be finite")
    return amount


def _parse_date(value, index):
    if not isinstance(value, str):
        raise MalformedDataError(f"Transaction {index}: date must be an ISO-8601 string")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise MalformedDataError(f"Transaction {index}: invalid date {value!r}") from e


def _parse_category(value, index):
    if not isinstance(value, str):
        raise MalformedDataError(f"Transaction {index}: category must be a string")
    try:
        return Category(value)
    except ValueError as e:
        raise MalformedDataError(f"Transaction {index}: unknown category {value!r}") from e


def _dict_to_transaction(item, index) -> Transaction:
    if not isinstance(item, dict):
        raise MalformedDataError(f"Transaction {index}: expected an object")

    missing = [f for f in REQUIRED_FIELDS if f not in item]
    if missing:
        raise MalformedDataError(f"Transaction {index}: missing fields {', '.join(missing)}")

    name = item['name']
    if not isinstance(name, str):
        raise MalformedDataError(f"Transaction {index}: name must be a string")

    record_id = item.get('id')
    if record_id is None:
        record_id = new_transaction_id()
    elif not isinstance(record_id, str):
        raise MalformedDataError(f"Transaction {index}: id must be a string")

    return Transaction(
        name=name,
        date=_parse_date(item['date'], index),
        amount=_parse_amount(item['amount'], index),
        category=_parse_category(item['category'], index),
        id=record_id,
    )


def decode_transactions(data: bytes) -> List[Transaction]:
    """
    Parse canonical bytes back into transactions.

    Args:
        data: Bytes produced by encode_transactions

    Returns:
        Transactions in their original order

    Raises:
        MalformedDataError: data is not a valid encoding
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedDataError(f"Expected bytes, got {type(data).__name__}")
    try:
        text = bytes(data).decode(PLAINTEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise MalformedDataError(f"Plaintext is not valid {PLAINTEXT_ENCODING}") from e
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise MalformedDataError(f"Plaintext is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise MalformedDataError("Expected a JSON array of transactions")

    return [_dict_to_transaction(item, i) for i, item in enumerate(payload)]
