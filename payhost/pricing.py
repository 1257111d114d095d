"""Per-country price tables entered on the product form, and their display."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Sequence, Tuple

_STRIPE_COUNTRY = re.compile(r"^stripe_country_(\d+)$")
_SQUARE_COUNTRY = re.compile(r"^square_country_(\d+)$")

_SCHEDULES = {
    "One Time": ("One Time", "onetime"),
    "Monthly Subscription": ("Monthly", "subscription"),
}


def _values(form: Mapping[str, Any], key: str) -> list:
    """The submitted values of a form field, as a list of strings."""
    value = form.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(v) for v in value]
    return [str(value)]


def _parse_amount(text: str) -> Optional[float]:
    if text != text.strip() or "_" in text or not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_stripe_prices(form: Mapping[str, Any]) -> dict:
    """Map each country code on the form to its Stripe price id.

    Countries arrive as ``stripe_country_<n>`` and their price ids as
    ``stripe_plan_id_<n>``; a country without a price id is left out.
    """
    result = {}
    for key in form:
        match = _STRIPE_COUNTRY.match(key)
        if match is None:
            continue
        countries = _values(form, key)
        if not countries:
            continue
        plan_ids = _values(form, f"stripe_plan_id_{match.group(1)}")
        if plan_ids:
            result[countries[0]] = plan_ids[0]
    return result


def parse_square_prices(form: Mapping[str, Any]) -> dict:
    """Map each country code on the form to its Square amount and currency.

    Countries arrive as ``square_country_<n>``, with ``square_amount_<n>`` and
    ``square_currency_<n>`` beside them. An amount that is not a number is
    left out of that country's entry.
    """
    result = {}
    for key in form:
        match = _SQUARE_COUNTRY.match(key)
        if match is None:
            continue
        countries = _values(form, key)
        if not countries:
            continue
        index = match.group(1)
        entry = {}
        amounts = _values(form, f"square_amount_{index}")
        if amounts:
            amount = _parse_amount(amounts[0])
            if amount is not None:
                entry["amount"] = amount
        currencies = _values(form, f"square_currency_{index}")
        if currencies:
            entry["currency"] = currencies[0]
        result[countries[0]] = entry
    return result


def format_square_price(
    amount: float, currency: str, schedule: str
) -> Optional[Tuple[str, str]]:
    """The price label and payment type for a Square price.

    Amounts are stored in thousandths of the currency unit. Returns None for
    a schedule that is neither one-time nor monthly.
    """
    known = _SCHEDULES.get(schedule)
    if known is None:
        return None
    period, payment_type = known
    value = f"{float(amount) / 1000:.5g}"
    return f"{value} {currency}/{period}", payment_type


def square_price_for(prices: Mapping[str, Mapping[str, Any]], country: str) -> tuple:
    """The (amount, currency) to offer a visitor from country.

    When that country has no complete entry, the last entry of the table is
    used; with an empty table both are None.
    """
    entry = prices.get(country) or {}
    amount = entry.get("amount")
    currency = entry.get("currency")
    if amount is not None and currency is not None:
        return amount, currency
    for fallback in prices.values():
        amount = fallback.get("amount")
        currency = fallback.get("currency")
    return amount, currency