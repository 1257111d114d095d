"""Payment and subscription records kept in an SQL table."""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

TABLE_NAME = "subscriptions"
KEY_NAME = "id"
ORDER = "id desc"

_ALLOWED_PARAMS = (
    "txn_id", "txn_type", "transaction_subject", "business", "custom", "invoice", "receipt_ID",
    "first_name", "handling_amount", "item_number", "item_name", "last_name", "mc_currency",
    "mc_fee", "mc_gross", "payer_email", "payer_id", "payer_status", "payment_date", "payment_fee",
    "payment_gross", "payment_status", "payment_type", "protection_eligibility", "quantity",
    "receiver_id", "receiver_email", "residence_country", "shipping", "tax", "address_country",
    "test_ipn", "address_status", "address_street", "notify_version", "address_city", "verify_sign",
    "address_state", "charset", "address_name", "address_country_code", "address_zip", "subscr_id",
    "user_id",
)

_DATA_COLUMNS = sorted({name.lower() for name in _ALLOWED_PARAMS} | {"test_pdt"})
_WRITABLE = set(_DATA_COLUMNS) | {"created_at", "updated_at"}
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def allowed_params() -> list:
    """The columns that may be set when recording a transaction."""
    return list(_ALLOWED_PARAMS)


def _now_string() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        try:
            return int(float(str(value).strip()))
        except ValueError:
            return 0


def _to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _to_time(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        moment = value
    elif value:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass
class Subscription:
    """A recorded payment or subscription."""

    id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created: Optional[datetime] = None
    amount: float = 0.0
    currency: str = ""
    customer_id: str = ""
    customer_email: str = ""
    subscription_id: str = ""
    user_id: int = 0
    plan: str = ""
    product_id: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Subscription":
        return cls(
            id=_to_int(row.get("id")),
            created_at=_to_time(row.get("created_at")),
            updated_at=_to_time(row.get("updated_at")),
            created=_to_time(row.get("payment_date")),
            amount=_to_float(row.get("payment_gross")),
            currency=_to_str(row.get("mc_currency")),
            customer_id=_to_str(row.get("payer_id")),
            customer_email=_to_str(row.get("payer_email")),
            subscription_id=_to_str(row.get("subscr_id")),
            user_id=_to_int(row.get("user_id")),
            plan=_to_str(row.get("transaction_subject")),
            product_id=_to_int(row.get("item_number")),
        )


class SubscriptionStore:
    """Reads and writes subscription records through a DB-API connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        columns = ", ".join(f"{name} TEXT" for name in _DATA_COLUMNS)
        with self.connection:
            self.connection.execute(
                f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} ("
                f"{KEY_NAME} INTEGER PRIMARY KEY AUTOINCREMENT, "
                f"created_at TEXT, updated_at TEXT, {columns})"
            )

    def create(self, params: Mapping[str, Any]) -> int:
        """Insert a record and return its id."""
        values = {}
        for key, value in params.items():
            column = key.lower()
            if not _IDENTIFIER.match(key) or column not in _WRITABLE:
                raise ValueError(f"unknown subscription column: {key!r}")
            values[column] = None if value is None else str(value)
        now = _now_string()
        values.setdefault("created_at", now)
        values.setdefault("updated_at", now)
        names = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self.connection:
            cursor = self.connection.execute(
                f"INSERT INTO {TABLE_NAME} ({names}) VALUES ({marks})",
                tuple(values.values()),
            )
        return cursor.lastrowid

    def _select(self, where: str, args: tuple, limit: Optional[int] = None) -> list:
        sql = f"SELECT * FROM {TABLE_NAME}"
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {ORDER}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        cursor = self.connection.execute(sql, args)
        names = [description[0] for description in cursor.description]
        return [Subscription.from_row(dict(zip(names, row))) for row in cursor.fetchall()]

    def find_all(self, where: str = "", *args: Any) -> list:
        """All records matching the where clause, newest first."""
        return self._select(where, args)

    def find_first(self, where: str, *args: Any) -> Subscription:
        """The first record matching the where clause; LookupError if none."""
        results = self._select(where, args, limit=1)
        if not results:
            raise LookupError(f"no subscription matches {where!r}")
        return results[0]

    def find(self, subscriber_id: str) -> Subscription:
        return self.find_first("subscr_id=?", subscriber_id)

    def find_payment(self, txn_id: str) -> Optional[Subscription]:
        """The record for a payment id, or None for an empty id."""
        if txn_id == "":
            return None
        return self.find_first("txn_id=?", txn_id)

    def find_subscription(self, subscriber_id: str) -> Optional[Subscription]:
        """The record for a subscriber id, or None for an empty id."""
        if subscriber_id == "":
            return None
        return self.find_first("subscr_id=?", subscriber_id)

    def find_customer_id(self, user_id: int) -> Optional[Subscription]:
        """The latest record of a user, or None when the user has none."""
        results = self._select("user_id=?", (str(user_id),), limit=1)
        return results[0] if results else None