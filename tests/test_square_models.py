from datetime import datetime, timedelta, timezone

import pytest

from payhost.square_models import (
    CardModel,
    CatalogModel,
    Charge,
    CustomerModel,
    ErrorModel,
    SubscriptionModel,
)


def test_error_model_first_detail():
    model = ErrorModel.from_dict(
        {
            "errors": [
                {"code": "CARD_DECLINED", "detail": "Card declined.", "category": "PAYMENT_METHOD_ERROR"},
                {"code": "OTHER", "detail": "second"},
            ]
        }
    )
    assert model.first_detail() == "Card declined."
    assert model.errors[0].code == "CARD_DECLINED"
    assert len(model.errors) == 2


def test_error_model_without_errors_raises():
    with pytest.raises(ValueError):
        ErrorModel.from_dict({"errors": []}).first_detail()
    with pytest.raises(ValueError):
        ErrorModel.from_dict({}).first_detail()


def test_non_object_input_rejected():
    with pytest.raises(TypeError):
        ErrorModel.from_dict(["not", "an", "object"])


def test_card_model_fields():
    card = CardModel.from_dict(
        {
            "card": {
                "id": "ccof:placeholder",
                "billing_address": {"locality": "Springfield", "country": "US"},
                "customer_id": "cust-1",
                "enabled": True,
                "exp_month": 11,
                "exp_year": 2030,
                "last_4": "1111",
                "version": 1,
            }
        }
    ).card
    assert card.id == "ccof:placeholder"
    assert card.billing_address.locality == "Springfield"
    assert card.billing_address.country == "US"
    assert card.enabled is True
    assert (card.exp_month, card.exp_year) == (11, 2030)
    assert card.last_4 == "1111"
    assert card.cardholder_name == ""


def test_catalog_model_phases_and_times():
    catalog = CatalogModel.from_dict(
        {
            "catalog_object": {
                "type": "SUBSCRIPTION_PLAN",
                "id": "PLAN1",
                "created_at": "2023-04-19T10:20:30.123Z",
                "version": 7,
                "subscription_plan_data": {
                    "name": "Subscription for foo",
                    "phases": [
                        {
                            "uid": "p1",
                            "cadence": "MONTHLY",
                            "recurring_price_money": {"amount": 500, "currency": "USD"},
                            "ordinal": 0,
                        }
                    ],
                },
            },
            "id_mappings": [{"client_object_id": "#product3", "object_id": "PLAN1"}],
        }
    )
    obj = catalog.catalog_object
    assert obj.id == "PLAN1"
    assert obj.type == "SUBSCRIPTION_PLAN"
    assert obj.created_at == datetime(2023, 4, 19, 10, 20, 30, 123000, tzinfo=timezone.utc)
    assert obj.updated_at is None
    phase = obj.subscription_plan_data.phases[0]
    assert phase.cadence == "MONTHLY"
    assert phase.recurring_price_money.amount == 500
    assert phase.recurring_price_money.currency == "USD"
    assert catalog.id_mappings[0].client_object_id == "#product3"


def test_charge_nested_payment():
    charge = Charge.from_dict(
        {
            "payment": {
                "id": "pay-1",
                "status": "COMPLETED",
                "amount_money": {"amount": 1000, "currency": "USD"},
                "card_details": {
                    "status": "CAPTURED",
                    "card": {"card_brand": "VISA", "last_4": "1111"},
                    "card_payment_timeline": {"captured_at": "2023-05-01T08:00:00+05:30"},
                },
                "receipt_url": "https://example.com/receipt",
            }
        }
    )
    payment = charge.payment
    assert payment.status == "COMPLETED"
    assert payment.amount_money.amount == 1000
    assert payment.card_details.card.card_brand == "VISA"
    captured = payment.card_details.card_payment_timeline.captured_at
    assert captured.utcoffset() == timedelta(hours=5, minutes=30)
    assert payment.receipt_url == "https://example.com/receipt"
    assert payment.total_money.currency == ""


def test_customer_model():
    customer = CustomerModel.from_dict(
        {
            "customer": {
                "id": "CUST",
                "given_name": "Ada",
                "email_address": "ada@example.com",
                "address": {"postal_code": "12345"},
                "reference_id": "Product Id: 3",
                "preferences": {"email_unsubscribed": False},
                "version": 0,
            }
        }
    ).customer
    assert customer.id == "CUST"
    assert customer.email_address == "ada@example.com"
    assert customer.address.postal_code == "12345"
    assert customer.reference_id == "Product Id: 3"
    assert customer.preferences.email_unsubscribed is False


def test_subscription_model():
    sub = SubscriptionModel.from_dict(
        {
            "subscription": {
                "id": "SUB",
                "plan_id": "PLAN1",
                "status": "ACTIVE",
                "version": 2,
                "created_at": "2023-04-19T00:00:00Z",
            }
        }
    ).subscription
    assert sub.status == "ACTIVE"
    assert sub.plan_id == "PLAN1"
    assert sub.created_at.tzinfo is not None
    assert sub.created_at.year == 2023


def test_bad_time_raises():
    with pytest.raises(ValueError):
        SubscriptionModel.from_dict({"subscription": {"created_at": "yesterday"}})