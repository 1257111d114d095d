"""Typed views of the JSON documents returned by the Square API."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

_TIME_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})(?P<frac>\.\d+)?(?P<zone>.*)$"
)


def _mapping(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise TypeError(f"field {key!r} is not a number")
    return int(value)


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field {key!r} is not a boolean")
    return value


def _list(data: Mapping[str, Any], key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"field {key!r} is not a list")
    return value


def _time(data: Mapping[str, Any], key: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; a missing value gives None."""
    value = data.get(key)
    if not value:
        return None
    match = _TIME_PATTERN.match(str(value))
    if match is None:
        raise ValueError(f"field {key!r} is not an RFC 3339 time: {value!r}")
    frac = match.group("frac") or ""
    if frac:
        frac = "." + frac[1:7].ljust(6, "0")
    zone = match.group("zone")
    if zone in ("Z", "z"):
        zone = "+00:00"
    return datetime.fromisoformat(match.group("base") + frac + zone)


@dataclass
class _Money:
    amount: int = 0
    currency: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_Money":
        d = _mapping(data)
        return cls(amount=_int(d, "amount"), currency=_str(d, "currency"))


@dataclass
class _Address:
    address_line_1: str = ""
    address_line_2: str = ""
    locality: str = ""
    administrative_district_level_1: str = ""
    postal_code: str = ""
    country: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_Address":
        d = _mapping(data)
        return cls(
            address_line_1=_str(d, "address_line_1"),
            address_line_2=_str(d, "address_line_2"),
            locality=_str(d, "locality"),
            administrative_district_level_1=_str(d, "administrative_district_level_1"),
            postal_code=_str(d, "postal_code"),
            country=_str(d, "country"),
        )


# --- Errors -----------------------------------------------------------------


@dataclass
class _ErrorEntry:
    code: str = ""
    detail: str = ""
    field: str = ""
    category: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_ErrorEntry":
        d = _mapping(data)
        return cls(
            code=_str(d, "code"),
            detail=_str(d, "detail"),
            field=_str(d, "field"),
            category=_str(d, "category"),
        )


@dataclass
class ErrorModel:
    """An error response: a list of coded errors."""

    errors: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ErrorModel":
        d = _mapping(data)
        return cls(errors=[_ErrorEntry._load(e) for e in _list(d, "errors")])

    def first_detail(self) -> str:
        """The detail text of the first error reported."""
        if not self.errors:
            raise ValueError("the error response lists no errors")
        return self.errors[0].detail


# --- Cards ------------------------------------------------------------------


@dataclass
class _Card:
    id: str = ""
    billing_address: _Address = field(default_factory=_Address)
    fingerprint: str = ""
    bin: str = ""
    card_brand: str = ""
    card_type: str = ""
    cardholder_name: str = ""
    customer_id: str = ""
    enabled: bool = False
    exp_month: int = 0
    exp_year: int = 0
    last_4: str = ""
    merchant_id: str = ""
    prepaid_type: str = ""
    reference_id: str = ""
    version: int = 0

    @classmethod
    def _load(cls, data: Any) -> "_Card":
        d = _mapping(data)
        return cls(
            id=_str(d, "id"),
            billing_address=_Address._load(d.get("billing_address")),
            fingerprint=_str(d, "fingerprint"),
            bin=_str(d, "bin"),
            card_brand=_str(d, "card_brand"),
            card_type=_str(d, "card_type"),
            cardholder_name=_str(d, "cardholder_name"),
            customer_id=_str(d, "customer_id"),
            enabled=_bool(d, "enabled"),
            exp_month=_int(d, "exp_month"),
            exp_year=_int(d, "exp_year"),
            last_4=_str(d, "last_4"),
            merchant_id=_str(d, "merchant_id"),
            prepaid_type=_str(d, "prepaid_type"),
            reference_id=_str(d, "reference_id"),
            version=_int(d, "version"),
        )


@dataclass
class CardModel:
    """The response to creating a card on file."""

    card: _Card = field(default_factory=_Card)

    @classmethod
    def from_dict(cls, data: Any) -> "CardModel":
        d = _mapping(data)
        return cls(card=_Card._load(d.get("card")))


# --- Catalog ----------------------------------------------------------------


@dataclass
class _Phase:
    uid: str = ""
    cadence: str = ""
    recurring_price_money: _Money = field(default_factory=_Money)
    ordinal: int = 0

    @classmethod
    def _load(cls, data: Any) -> "_Phase":
        d = _mapping(data)
        return cls(
            uid=_str(d, "uid"),
            cadence=_str(d, "cadence"),
            recurring_price_money=_Money._load(d.get("recurring_price_money")),
            ordinal=_int(d, "ordinal"),
        )


@dataclass
class _SubscriptionPlanData:
    name: str = ""
    phases: list = field(default_factory=list)

    @classmethod
    def _load(cls, data: Any) -> "_SubscriptionPlanData":
        d = _mapping(data)
        return cls(
            name=_str(d, "name"),
            phases=[_Phase._load(p) for p in _list(d, "phases")],
        )


@dataclass
class _CatalogObject:
    type: str = ""
    id: str = ""
    updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    version: int = 0
    is_deleted: bool = False
    present_at_all_locations: bool = False
    subscription_plan_data: _SubscriptionPlanData = field(
        default_factory=_SubscriptionPlanData
    )

    @classmethod
    def _load(cls, data: Any) -> "_CatalogObject":
        d = _mapping(data)
        return cls(
            type=_str(d, "type"),
            id=_str(d, "id"),
            updated_at=_time(d, "updated_at"),
            created_at=_time(d, "created_at"),
            version=_int(d, "version"),
            is_deleted=_bool(d, "is_deleted"),
            present_at_all_locations=_bool(d, "present_at_all_locations"),
            subscription_plan_data=_SubscriptionPlanData._load(
                d.get("subscription_plan_data")
            ),
        )


@dataclass
class _IdMapping:
    client_object_id: str = ""
    object_id: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_IdMapping":
        d = _mapping(data)
        return cls(
            client_object_id=_str(d, "client_object_id"),
            object_id=_str(d, "object_id"),
        )


@dataclass
class CatalogModel:
    """The response to upserting a catalog object such as a subscription plan."""

    catalog_object: _CatalogObject = field(default_factory=_CatalogObject)
    id_mappings: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "CatalogModel":
        d = _mapping(data)
        return cls(
            catalog_object=_CatalogObject._load(d.get("catalog_object")),
            id_mappings=[_IdMapping._load(m) for m in _list(d, "id_mappings")],
        )


# --- Payments ---------------------------------------------------------------


@dataclass
class _PaymentCard:
    card_brand: str = ""
    last_4: str = ""
    exp_month: int = 0
    exp_year: int = 0
    fingerprint: str = ""
    card_type: str = ""
    prepaid_type: str = ""
    bin: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_PaymentCard":
        d = _mapping(data)
        return cls(
            card_brand=_str(d, "card_brand"),
            last_4=_str(d, "last_4"),
            exp_month=_int(d, "exp_month"),
            exp_year=_int(d, "exp_year"),
            fingerprint=_str(d, "fingerprint"),
            card_type=_str(d, "card_type"),
            prepaid_type=_str(d, "prepaid_type"),
            bin=_str(d, "bin"),
        )


@dataclass
class _CardPaymentTimeline:
    authorized_at: Optional[datetime] = None
    captured_at: Optional[datetime] = None

    @classmethod
    def _load(cls, data: Any) -> "_CardPaymentTimeline":
        d = _mapping(data)
        return cls(
            authorized_at=_time(d, "authorized_at"),
            captured_at=_time(d, "captured_at"),
        )


@dataclass
class _CardDetails:
    status: str = ""
    card: _PaymentCard = field(default_factory=_PaymentCard)
    entry_method: str = ""
    cvv_status: str = ""
    avs_status: str = ""
    statement_description: str = ""
    card_payment_timeline: _CardPaymentTimeline = field(
        default_factory=_CardPaymentTimeline
    )

    @classmethod
    def _load(cls, data: Any) -> "_CardDetails":
        d = _mapping(data)
        return cls(
            status=_str(d, "status"),
            card=_PaymentCard._load(d.get("card")),
            entry_method=_str(d, "entry_method"),
            cvv_status=_str(d, "cvv_status"),
            avs_status=_str(d, "avs_status"),
            statement_description=_str(d, "statement_description"),
            card_payment_timeline=_CardPaymentTimeline._load(
                d.get("card_payment_timeline")
            ),
        )


@dataclass
class _ApplicationDetails:
    square_product: str = ""
    application_id: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_ApplicationDetails":
        d = _mapping(data)
        return cls(
            square_product=_str(d, "square_product"),
            application_id=_str(d, "application_id"),
        )


@dataclass
class _Payment:
    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    amount_money: _Money = field(default_factory=_Money)
    status: str = ""
    delay_duration: str = ""
    source_type: str = ""
    card_details: _CardDetails = field(default_factory=_CardDetails)
    location_id: str = ""
    order_id: str = ""
    total_money: _Money = field(default_factory=_Money)
    approved_money: _Money = field(default_factory=_Money)
    receipt_number: str = ""
    receipt_url: str = ""
    delay_action: str = ""
    delayed_until: Optional[datetime] = None
    application_details: _ApplicationDetails = field(
        default_factory=_ApplicationDetails
    )
    version_token: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_Payment":
        d = _mapping(data)
        return cls(
            id=_str(d, "id"),
            created_at=_time(d, "created_at"),
            updated_at=_time(d, "updated_at"),
            amount_money=_Money._load(d.get("amount_money")),
            status=_str(d, "status"),
            delay_duration=_str(d, "delay_duration"),
            source_type=_str(d, "source_type"),
            card_details=_CardDetails._load(d.get("card_details")),
            location_id=_str(d, "location_id"),
            order_id=_str(d, "order_id"),
            total_money=_Money._load(d.get("total_money")),
            approved_money=_Money._load(d.get("approved_money")),
            receipt_number=_str(d, "receipt_number"),
            receipt_url=_str(d, "receipt_url"),
            delay_action=_str(d, "delay_action"),
            delayed_until=_time(d, "delayed_until"),
            application_details=_ApplicationDetails._load(
                d.get("application_details")
            ),
            version_token=_str(d, "version_token"),
        )


@dataclass
class Charge:
    """The response to creating a payment."""

    payment: _Payment = field(default_factory=_Payment)

    @classmethod
    def from_dict(cls, data: Any) -> "Charge":
        d = _mapping(data)
        return cls(payment=_Payment._load(d.get("payment")))


# --- Customers --------------------------------------------------------------


@dataclass
class _Preferences:
    email_unsubscribed: bool = False

    @classmethod
    def _load(cls, data: Any) -> "_Preferences":
        d = _mapping(data)
        return cls(email_unsubscribed=_bool(d, "email_unsubscribed"))


@dataclass
class _Customer:
    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    given_name: str = ""
    family_name: str = ""
    email_address: str = ""
    address: _Address = field(default_factory=_Address)
    phone_number: str = ""
    reference_id: str = ""
    note: str = ""
    preferences: _Preferences = field(default_factory=_Preferences)
    creation_source: str = ""
    version: int = 0

    @classmethod
    def _load(cls, data: Any) -> "_Customer":
        d = _mapping(data)
        return cls(
            id=_str(d, "id"),
            created_at=_time(d, "created_at"),
            updated_at=_time(d, "updated_at"),
            given_name=_str(d, "given_name"),
            family_name=_str(d, "family_name"),
            email_address=_str(d, "email_address"),
            address=_Address._load(d.get("address")),
            phone_number=_str(d, "phone_number"),
            reference_id=_str(d, "reference_id"),
            note=_str(d, "note"),
            preferences=_Preferences._load(d.get("preferences")),
            creation_source=_str(d, "creation_source"),
            version=_int(d, "version"),
        )


@dataclass
class CustomerModel:
    """The response to creating a customer."""

    customer: _Customer = field(default_factory=_Customer)

    @classmethod
    def from_dict(cls, data: Any) -> "CustomerModel":
        d = _mapping(data)
        return cls(customer=_Customer._load(d.get("customer")))


# --- Subscriptions ----------------------------------------------------------


@dataclass
class _SquareSubscription:
    id: str = ""
    location_id: str = ""
    plan_id: str = ""
    customer_id: str = ""
    start_date: str = ""
    status: str = ""
    version: int = 0
    created_at: Optional[datetime] = None
    card_id: str = ""
    timezone: str = ""

    @classmethod
    def _load(cls, data: Any) -> "_SquareSubscription":
        d = _mapping(data)
        return cls(
            id=_str(d, "id"),
            location_id=_str(d, "location_id"),
            plan_id=_str(d, "plan_id"),
            customer_id=_str(d, "customer_id"),
            start_date=_str(d, "start_date"),
            status=_str(d, "status"),
            version=_int(d, "version"),
            created_at=_time(d, "created_at"),
            card_id=_str(d, "card_id"),
            timezone=_str(d, "timezone"),
        )


@dataclass
class SubscriptionModel:
    """The response to creating a subscription."""

    subscription: _SquareSubscription = field(default_factory=_SquareSubscription)

    @classmethod
    def from_dict(cls, data: Any) -> "SubscriptionModel":
        d = _mapping(data)
        return cls(subscription=_SquareSubscription._load(d.get("subscription")))