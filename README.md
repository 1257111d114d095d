# payhost

Building blocks for a small self-hosted shop that sells digital products
and subscriptions. It uses only the standard library and has these modules:

- `payhost.products`: the `Story` record for a product with its URL and
  name helpers, the `Status` enum, and a `ProductStore` that keeps products
  in an SQLite database.
- `payhost.subscriptions`: the `Subscription` record and a
  `SubscriptionStore` that records payments and looks them up.
- `payhost.square_models`: dataclasses for the JSON documents the Square
  API sends back: `Charge`, `CustomerModel`, `CardModel`, `CatalogModel`,
  `SubscriptionModel` and `ErrorModel`.
- `payhost.pricing`: reads per-country Stripe and Square prices from a
  submitted form and formats Square prices for display.
- `payhost.text`: hashtag handling, meta keywords, truncation, feed paths
  and escaping of `LIKE` wildcards.

## Installation

```
pip install .
```

With the test tools:

```
pip install ".[test]"
```

## Products

```python
import sqlite3
from payhost.products import ProductStore, Status

store = ProductStore(sqlite3.connect("shop.db"))
product_id = store.create({"name": "Field Guide #books #nature", "status": "100"})
story = store.find(product_id)

story.canonical_url()   # "/products/<id>-field-guide-books-nature"
story.show_url()        # "/products/<id>"
story.name_display()    # "Field Guide " (the name up to the first "#")
story.tags()            # ["books", "nature"]
story.hashtags()        # ["#books", "#nature"]

for product in store.find_all("points > ?", 0, order="id desc", limit=50, offset=0):
    print(product.name)
```

`ProductStore` creates the `products` table if it is missing. `create`
returns the new id, `update(story_id, params)` and `destroy(story_id)`
raise `LookupError` for an unknown id, and a column name the table does
not have raises `ValueError`. Dictionaries and lists given as values
(such as `stripe_price` or `square_price`) are stored as JSON and come
back as dictionaries on the `Story`.

`find` and `find_first` raise `LookupError` when nothing matches.
`published()` returns products with status `Status.PUBLISHED` or above,
`popular()` those with an unset or published status and more than two
points, and `trending()` the product with most views in the last thirty
days (ids 1 to 5 excluded), or `None`.

`count_subscribers(story, subscriptions)` adds up the `ACTIVE` records for
each of the product's Square subscription plan ids and the records whose
`item_number` is the product id, in a `SubscriptionStore`.

`allowed_params()` and `allowed_params_admin()` list the columns ordinary
users and administrators may edit; `sanitize_name(name)` gives the
lower-case, URL-friendly form used in product URLs and file names.

## Subscriptions

```python
from payhost.subscriptions import SubscriptionStore

subscriptions = SubscriptionStore(sqlite3.connect("shop.db"))
subscriptions.create({"txn_id": "txn-1", "payer_email": "buyer@example.com", "item_number": "7"})
record = subscriptions.find_payment("txn-1")
record.customer_email   # "buyer@example.com"
record.product_id       # 7
```

`create` accepts the keys listed by `payhost.subscriptions.allowed_params()`
(case-insensitively), plus `test_pdt`, `created_at` and `updated_at`; any
other key raises `ValueError`. `find_payment` and `find_subscription`
return `None` for an empty id and raise `LookupError` when no record
matches; `find_customer_id(user_id)` returns the user's latest record or
`None`.

## Square responses

```python
from payhost.square_models import Charge, ErrorModel

charge = Charge.from_dict(response_json)
charge.payment.status                  # e.g. "COMPLETED"
charge.payment.amount_money.amount

ErrorModel.from_dict(error_json).first_detail()
```

Missing fields take empty defaults; timestamps are parsed into
`datetime` objects. `first_detail()` raises `ValueError` when the error
response lists no errors.

## Pricing

```python
from payhost.pricing import parse_square_prices, format_square_price, square_price_for

prices = parse_square_prices({
    "square_country_1": "US", "square_amount_1": "15000", "square_currency_1": "USD",
})
amount, currency = square_price_for(prices, "GB")          # falls back to the last entry
format_square_price(amount, currency, "Monthly Subscription")  # ("15 USD/Monthly", "subscription")
```

Square amounts are in thousandths of the currency unit. `format_square_price`
returns `None` for a schedule other than `"One Time"` or
`"Monthly Subscription"`. `parse_stripe_prices(form)` maps each
`stripe_country_<n>` to its `stripe_plan_id_<n>`.

## What this package does not do

It does not talk to any payment provider, social network or text service
over the network, and it has no web server, page templates, sessions or
command-line program. It parses Square responses and prepares the data a
payment page needs; making the requests and serving pages is up to the
application that uses it.

## Running the tests

```
pytest
```