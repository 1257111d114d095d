"""Products offered for sale and the SQL table that holds them."""

from __future__ import annotations

import json
import re
import sqlite3
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Mapping, Optional

from .subscriptions import SubscriptionStore, _to_int, _to_str, _to_time

TABLE_NAME = "products"
KEY_NAME = "id"
ORDER = "name asc, id desc"
SUBSCRIBER_COLUMN_NAME = "subscribers"

_ALLOWED_PARAMS = ("name", "summary", "url", "mailchimp_token", "mailchimp_list_id")

_ALLOWED_PARAMS_ADMIN = (
    "status", "comment_count", "name", "points", "rank", "summary", "description", "url",
    "s3_bucket", "s3_key", "user_id", "user_name", "mailchimp_audience_id", "stripe_price",
    "square_price", "schedule", "square_subscription_plan_Id",
)

_INTEGER_COLUMNS = (
    "status", "comment_count", "points", "rank", "user_id", "all_time_page_views",
    "seven_days_page_views", "thirty_days_page_views", "shared",
)

_TEXT_COLUMNS = (
    "name", "summary", "description", "featured_image", "url", "s3_bucket", "s3_key",
    "user_name", "all_time_top3_countries", "seven_days_top3_countries",
    "thirty_days_top3_countries", "insights_updated", "subscribers",
    "mailchimp_audience_id", "mailchimp_token", "mailchimp_list_id", "stripe_price",
    "square_price", "schedule", "square_subscription_plan_Id", "tweeted_at",
)

_WRITABLE = {
    name.lower(): name
    for name in (*_INTEGER_COLUMNS, *_TEXT_COLUMNS, "created_at", "updated_at")
}

_HASHTAG = re.compile(r"#\w*", re.ASCII)
_INTEGER = re.compile(r"-?\d+")


class Status(IntEnum):
    """Publication state of a product."""

    NONE = 0
    DRAFT = 1
    SUSPENDED = 50
    PUBLISHED = 100


def allowed_params() -> list:
    """The columns anyone may edit."""
    return list(_ALLOWED_PARAMS)


def allowed_params_admin() -> list:
    """The columns administrators may edit."""
    return list(_ALLOWED_PARAMS_ADMIN)


def sanitize_name(name: str) -> str:
    """A lower-case, file and URL friendly form of a name."""
    text = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9._-]+", "-", text.lower())
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-.")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _now_string() -> str:
    return _now().strftime("%Y-%m-%d %H:%M:%S")


def _decode_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", "replace")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value


def _to_map(value: Any) -> dict:
    data = _decode_json(value)
    if not isinstance(data, Mapping):
        return {}
    return {str(k): _to_str(v) for k, v in data.items()}


def _to_nested_map(value: Any) -> dict:
    data = _decode_json(value)
    if not isinstance(data, Mapping):
        return {}
    return {str(k): dict(v) for k, v in data.items() if isinstance(v, Mapping)}


def _to_int_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return [_to_int(v) for v in value]
    if isinstance(value, str):
        return [int(number) for number in _INTEGER.findall(value)]
    return []


@dataclass
class Story:
    """A product listed on the site."""

    id: int = 0
    created_at: Optional[datetime] = field(default_factory=_now)
    updated_at: Optional[datetime] = field(default_factory=_now)
    status: int = Status.DRAFT
    name: str = ""
    summary: str = ""
    description: str = ""
    featured_image: str = ""
    url: str = ""
    s3_bucket: str = ""
    s3_key: str = ""
    user_id: int = 0
    points: int = 0
    rank: int = 0
    comment_count: int = 0
    user_name: str = ""
    all_time_page_views: int = 0
    all_time_top3_countries: str = ""
    seven_days_page_views: int = 0
    seven_days_top3_countries: str = ""
    thirty_days_page_views: int = 0
    thirty_days_top3_countries: str = ""
    insights_updated_time: Optional[datetime] = None
    flair: str = ""
    subscribers: list = field(default_factory=list)
    stripe_price: dict = field(default_factory=dict)
    mailchimp_audience_id: str = ""
    square_price: dict = field(default_factory=dict)
    schedule: str = ""
    square_subscription_plan_id: dict = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Story":
        get = row.get
        return cls(
            id=_to_int(get("id")),
            created_at=_to_time(get("created_at")),
            updated_at=_to_time(get("updated_at")),
            status=_to_int(get("status")),
            comment_count=_to_int(get("comment_count")),
            name=_to_str(get("name")),
            points=_to_int(get("points")),
            rank=_to_int(get("rank")),
            summary=_to_str(get("summary")),
            description=_to_str(get("description")),
            featured_image=_to_str(get("featured_image")),
            url=_to_str(get("url")),
            s3_bucket=_to_str(get("s3_bucket")),
            s3_key=_to_str(get("s3_key")),
            user_id=_to_int(get("user_id")),
            user_name=_to_str(get("user_name")),
            all_time_page_views=_to_int(get("all_time_page_views")),
            all_time_top3_countries=_to_str(get("all_time_top3_countries")),
            seven_days_page_views=_to_int(get("seven_days_page_views")),
            seven_days_top3_countries=_to_str(get("seven_days_top3_countries")),
            thirty_days_page_views=_to_int(get("thirty_days_page_views")),
            thirty_days_top3_countries=_to_str(get("thirty_days_top3_countries")),
            insights_updated_time=_to_time(get("insights_updated")),
            subscribers=_to_int_list(get("subscribers")),
            mailchimp_audience_id=_to_str(get("mailchimp_audience_id")),
            stripe_price=_to_map(get("stripe_price")),
            square_price=_to_nested_map(get("square_price")),
            schedule=_to_str(get("schedule")),
            square_subscription_plan_id=_to_map(get("square_subscription_plan_Id")),
        )

    def domain(self, default_domain: str = "") -> str:
        """The host of the product URL without a leading www."""
        parts = self.url.split("/")
        if len(parts) > 2:
            return parts[2].replace("www.", "", 1)
        if self.url:
            return self.url
        return default_domain

    def show_ask(self) -> bool:
        return self.name.startswith("Show:") or self.name.startswith("Ask:")

    def destination_url(self) -> str:
        """The external URL, the product page if none, or nothing if downvoted."""
        if self.points < 0:
            return ""
        if self.url:
            return self.url
        return self.canonical_url()

    def complete_url(self, root_url: str) -> str:
        return root_url + self.destination_url()

    def perma_url(self, root_url: str) -> str:
        return root_url + self.show_url()

    def primary_url(self) -> str:
        """The URL used in lists: the product page for videos, Show/Ask and bare items."""
        if self.youtube() or self.show_ask() or self.url == "":
            return self.canonical_url()
        return self.destination_url()

    def canonical_url(self) -> str:
        return f"/products/{self.file_name()}"

    def show_url(self) -> str:
        return f"/{TABLE_NAME}/{self.id}"

    def file_name(self) -> str:
        return f"{self.id}-{sanitize_name(self.name)}"

    def hashtags(self) -> list:
        return _HASHTAG.findall(self.name)

    def code(self) -> bool:
        """True if the URL points at a GitHub repository."""
        if "https://github.com" not in self.url:
            return False
        if "/commit/" in self.url or "/releases/" in self.url or self.url.endswith(".md"):
            return False
        return True

    def godoc_url(self) -> str:
        if self.code():
            return self.url.replace("https://github.com", "https://godoc.org/github.com", 1)
        return ""

    def vet_url(self) -> str:
        if self.code():
            return self.url.replace("https://github.com/", "http://goreportcard.com/report/", 1)
        return ""

    def youtube(self) -> bool:
        return "youtube.com/watch?v=" in self.url

    def youtube_url(self) -> str:
        """The embeddable form of a YouTube watch URL."""
        url = self.url.replace("https://s.youtube.com", "https://www.youtube.com", 1)
        return url.replace("watch?v=", "embed/", 1)

    def comment_count_display(self) -> str:
        if self.comment_count > 0:
            return str(self.comment_count)
        return "…"

    def name_display(self) -> str:
        """The name cut off at the first hashtag."""
        index = self.name.find("#")
        return self.name if index < 0 else self.name[:index]

    def tags(self) -> list:
        if "#" not in self.name:
            return []
        return self.name.split(" #")[1:]

    def editable(self, now: Optional[datetime] = None) -> bool:
        """True while the product is less than an hour old."""
        if self.created_at is None:
            return False
        moment = now if now is not None else _now()
        return moment - self.created_at < timedelta(hours=1)

    def owned_by(self, uid: int) -> bool:
        return uid == self.user_id

    def negative_points(self) -> int:
        return 0 if self.points > 0 else -self.points


class ProductStore:
    """Reads and writes products through a DB-API connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        columns = ", ".join(
            [f"{name} INTEGER" for name in _INTEGER_COLUMNS]
            + [f"{name} TEXT" for name in _TEXT_COLUMNS]
        )
        with self.connection:
            self.connection.execute(
                f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} ("
                f"{KEY_NAME} INTEGER PRIMARY KEY AUTOINCREMENT, "
                f"created_at TEXT, updated_at TEXT, {columns})"
            )

    @staticmethod
    def _columns(params: Mapping[str, Any]) -> dict:
        values = {}
        for key, value in params.items():
            column = _WRITABLE.get(str(key).lower())
            if column is None:
                raise ValueError(f"unknown product column: {key!r}")
            if isinstance(value, (Mapping, list, tuple)):
                value = json.dumps(value)
            values[column] = value
        return values

    def create(self, params: Mapping[str, Any]) -> int:
        """Insert a product and return its id."""
        values = self._columns(params)
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

    def update(self, story_id: int, params: Mapping[str, Any]) -> None:
        """Change the given columns of a product; LookupError if it is missing."""
        values = self._columns(params)
        values.setdefault("updated_at", _now_string())
        assignments = ", ".join(f"{name}=?" for name in values)
        with self.connection:
            cursor = self.connection.execute(
                f"UPDATE {TABLE_NAME} SET {assignments} WHERE {KEY_NAME}=?",
                (*values.values(), story_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"no product with id {story_id}")

    def destroy(self, story_id: int) -> None:
        """Delete a product; LookupError if it is missing."""
        with self.connection:
            cursor = self.connection.execute(
                f"DELETE FROM {TABLE_NAME} WHERE {KEY_NAME}=?", (story_id,)
            )
        if cursor.rowcount == 0:
            raise LookupError(f"no product with id {story_id}")

    def find_all(
        self,
        where: str = "",
        *args: Any,
        order: str = ORDER,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list:
        """Products matching the where clause in the given order."""
        sql = f"SELECT * FROM {TABLE_NAME}"
        if where:
            sql += f" WHERE {where}"
        if order:
            sql += f" ORDER BY {order}"
        if limit is not None or offset is not None:
            sql += f" LIMIT {int(limit) if limit is not None else -1}"
            if offset is not None:
                sql += f" OFFSET {int(offset)}"
        cursor = self.connection.execute(sql, args)
        names = [description[0] for description in cursor.description]
        return [Story.from_row(dict(zip(names, row))) for row in cursor.fetchall()]

    def find_first(self, where: str, *args: Any) -> Story:
        """The first product matching the where clause; LookupError if none."""
        results = self.find_all(where, *args, limit=1)
        if not results:
            raise LookupError(f"no product matches {where!r}")
        return results[0]

    def find(self, story_id: int) -> Story:
        return self.find_first(f"{KEY_NAME}=?", story_id)

    def published(self) -> list:
        return self.find_all("status>=?", int(Status.PUBLISHED))

    def popular(self) -> list:
        """Published or unset-status products with more than two points."""
        return self.find_all("(status is NULL OR status=100) AND points > 2")

    def trending(self) -> Optional[Story]:
        """The product with most views in the last thirty days, skipping the first five."""
        results = self.find_all(
            "thirty_days_page_views IS NOT NULL AND id NOT IN (1,2,3,4,5)",
            order="thirty_days_page_views desc",
            limit=1,
        )
        return results[0] if results else None

    def count_subscribers(self, story: Story, subscriptions: SubscriptionStore) -> int:
        """Active Square subscriptions plus payment records for this product."""
        count = 0
        for plan_id in story.square_subscription_plan_id.values():
            try:
                count += len(
                    subscriptions.find_all(
                        "txn_id = ? and payment_status = ?", plan_id, "ACTIVE"
                    )
                )
            except sqlite3.Error:
                pass
        try:
            count += len(subscriptions.find_all("item_number = ?", str(story.id)))
        except sqlite3.Error:
            pass
        return count