import sqlite3

import pytest

from payhost.subscriptions import Subscription, SubscriptionStore, allowed_params


@pytest.fixture
def store():
    connection = sqlite3.connect(":memory:")
    yield SubscriptionStore(connection)
    connection.close()


def _record(store, **params):
    return store.create(params)


def test_allowed_params_lists_source_columns():
    params = allowed_params()
    assert "txn_id" in params
    assert "subscr_id" in params
    assert params[-1] == "user_id"
    assert len(params) == len(set(params))


def test_create_and_find_round_trip(store):
    new_id = _record(
        store,
        txn_id="TXN1",
        subscr_id="SUB1",
        payer_id="PAYER",
        payer_email="buyer@example.com",
        mc_currency="USD",
        payment_gross="12.5",
        transaction_subject="Gold",
        item_number="7",
        user_id="3",
        payment_date="2023-04-19 10:00:00",
    )
    found = store.find("SUB1")
    assert found.id == new_id
    assert found.customer_id == "PAYER"
    assert found.customer_email == "buyer@example.com"
    assert found.currency == "USD"
    assert found.amount == 12.5
    assert found.plan == "Gold"
    assert found.product_id == 7
    assert found.user_id == 3
    assert found.created.year == 2023
    assert found.created_at is not None


def test_find_payment_by_txn(store):
    _record(store, txn_id="TXN1", subscr_id="SUB1")
    _record(store, txn_id="TXN2", subscr_id="SUB2")
    assert store.find_payment("TXN2").subscription_id == "SUB2"


def test_empty_ids_return_none(store):
    _record(store, txn_id="", subscr_id="")
    assert store.find_payment("") is None
    assert store.find_subscription("") is None


def test_missing_record_raises_lookup_error(store):
    with pytest.raises(LookupError):
        store.find("nope")
    with pytest.raises(LookupError):
        store.find_subscription("nope")


def test_find_all_orders_newest_first(store):
    ids = [_record(store, item_number="5") for _ in range(3)]
    _record(store, item_number="6")
    results = store.find_all("item_number=?", "5")
    assert [s.id for s in results] == sorted(ids, reverse=True)


def test_find_all_without_filter(store):
    first = _record(store, txn_id="A")
    second = _record(store, txn_id="B")
    assert [s.id for s in store.find_all()] == [second, first]


def test_find_customer_id(store):
    _record(store, user_id="4", payer_id="OLD")
    _record(store, user_id="4", payer_id="NEW")
    _record(store, user_id="5", payer_id="OTHER")
    assert store.find_customer_id(4).customer_id == "NEW"
    assert store.find_customer_id(99) is None


def test_create_rejects_unknown_column(store):
    with pytest.raises(ValueError):
        store.create({"not_a_column": "x"})
    with pytest.raises(ValueError):
        store.create({"txn_id; DROP TABLE subscriptions": "x"})


def test_create_accepts_mixed_case_allowed_column(store):
    new_id = store.create({"receipt_ID": "R1", "test_pdt": "1"})
    assert store.find_first("receipt_id=?", "R1").id == new_id


def test_from_row_defaults_and_bad_values():
    sub = Subscription.from_row({"id": "9", "payment_gross": "junk", "item_number": None})
    assert sub.id == 9
    assert sub.amount == 0.0
    assert sub.product_id == 0
    assert sub.currency == ""
    assert sub.created is None