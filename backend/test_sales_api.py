"""
Sale creation through POST /api/sales.

Covers the checkout example, the all-or-nothing stock gate, the per-category
inventory movements, and the clamp-at-zero floor.
"""
from decimal import Decimal

from sqlalchemy import text

from conftest import add_product, inventory_of, product_stock
from gasledger.models import DailySales, Sale


def post_sale(client, customer_id, items, total=None, **extra):
    body = {
        "customer": customer_id,
        "items": items,
        "totalAmount": total if total is not None else sum(i["price"] * i["quantity"] for i in items),
    }
    body.update(extra)
    return client.post("/api/sales", json=body)


def test_gas_sale_with_cylinder_link(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [{
        "product": gas.id,
        "quantity": 2,
        "price": 50,
        "category": "gas",
        "cylinderProductId": cylinder.id,
    }])

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["message"] == "Sale created successfully"
    sale = body["data"]
    assert Decimal(sale["total_amount"]) == Decimal("100")
    assert sale["customer"]["name"] == "Al Noor Restaurant"
    assert sale["items"][0]["product"]["name"] == "Gas-5kg"
    assert Decimal(sale["items"][0]["total"]) == Decimal("100")
    assert sale["items"][0]["cylinder_product_id"] == cylinder.id

    assert inventory_of(db, gas.id).current_stock == 18
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (8, 5)
    assert product_stock(db, gas.id) == 18

    assert db.query(Sale).count() == 1
    rows = db.query(DailySales).all()
    assert len(rows) == 1
    assert rows[0].product_id == gas.id
    assert rows[0].gas_sales_quantity == 2
    assert rows[0].full_cylinder_sales_quantity == 2


def test_cylinder_count_conserved_on_gas_sale(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    post_sale(client, customer.id, [
        {"product": gas.id, "quantity": 7, "price": 30, "cylinderProductId": cylinder.id},
    ])

    cyl_inv = inventory_of(db, cylinder.id)
    assert cyl_inv.available_full + cyl_inv.available_empty == 13


def test_gas_sale_links_cylinder_by_name(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [{"product": gas.id, "quantity": 1, "price": 50}])

    assert resp.status_code == 200
    assert resp.json()["data"]["items"][0]["cylinder_product_id"] == cylinder.id
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (9, 4)


def test_gas_sale_without_matching_cylinder_skips_conversion(client, db, customer):
    gas = add_product(db, "Oxygen Refill", "gas", stock=5, gas_stock=5)
    cylinder = add_product(db, "Acetylene Cylinder", "cylinder", full=4, empty=1)

    resp = post_sale(client, customer.id, [{"product": gas.id, "quantity": 2, "price": 20}])

    assert resp.status_code == 200
    assert inventory_of(db, gas.id).current_stock == 3
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (4, 1)


def test_full_cylinder_sale_deducts_paired_gas(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [{
        "product": cylinder.id,
        "quantity": 3,
        "price": 200,
        "category": "cylinder",
        "cylinderStatus": "full",
        "gasProductId": gas.id,
    }])

    assert resp.status_code == 200, resp.text
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (7, 3)
    assert inventory_of(db, gas.id).current_stock == 17
    assert product_stock(db, gas.id) == 17

    item = resp.json()["data"]["items"][0]
    assert item["cylinder_size"] == "small"
    assert item["gas_product_id"] == gas.id


def test_empty_cylinder_sale_only_touches_empty_counter(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [{
        "product": cylinder.id, "quantity": 2, "price": 80, "cylinderStatus": "empty",
    }])

    assert resp.status_code == 200
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (10, 1)
    assert inventory_of(db, gas.id).current_stock == 20


def test_other_category_uses_product_stock(client, db, customer):
    regulator = add_product(db, "Regulator Valve", "accessory", stock=6)

    resp = post_sale(client, customer.id, [{"product": regulator.id, "quantity": 4, "price": 15}])

    assert resp.status_code == 200
    assert product_stock(db, regulator.id) == 2


def test_insufficient_stock_rejects_whole_cart(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [
        {"product": gas.id, "quantity": 1, "price": 50},
        {"product": cylinder.id, "quantity": 4, "price": 80, "cylinderStatus": "empty"},
    ])

    assert resp.status_code == 400
    assert resp.json()["error"] == "Insufficient Empty Cylinders for Cyl-5kg. Available: 3, Required: 4"
    assert db.query(Sale).count() == 0
    assert inventory_of(db, gas.id).current_stock == 20


def test_insufficient_full_cylinders_message(client, customer, catalog):
    resp = post_sale(client, customer.id, [{
        "product": catalog["cylinder"].id, "quantity": 11, "price": 200, "cylinderStatus": "full",
    }])

    assert resp.status_code == 400
    assert "Full Cylinders" in resp.json()["error"]
    assert "Available: 10, Required: 11" in resp.json()["error"]


def test_insufficient_gas_message(client, customer, catalog):
    resp = post_sale(client, customer.id, [{"product": catalog["gas"].id, "quantity": 21, "price": 50}])

    assert resp.status_code == 400
    assert resp.json()["error"] == "Insufficient Gas for Gas-5kg. Available: 20, Required: 21"


def test_gas_inventory_created_on_the_fly(client, db, customer):
    gas = add_product(db, "Butane 12kg", "gas", stock=10)
    assert inventory_of(db, gas.id) is None

    resp = post_sale(client, customer.id, [{"product": gas.id, "quantity": 4, "price": 25}])

    assert resp.status_code == 200
    assert inventory_of(db, gas.id).current_stock == 6
    assert product_stock(db, gas.id) == 6


def test_missing_fields_rejected(client, customer, catalog):
    resp = client.post("/api/sales", json={"customer": customer.id, "items": [], "totalAmount": 10})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"

    resp = client.post("/api/sales", json={
        "customer": customer.id,
        "items": [{"product": catalog["gas"].id, "quantity": 1, "price": 5}],
    })
    assert resp.status_code == 400


def test_unknown_enum_values_rejected(client, customer, catalog):
    gas = catalog["gas"]

    resp = post_sale(client, customer.id, [{"product": gas.id, "quantity": 1, "price": 5}], paymentMethod="barter")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid payment method: barter"

    resp = post_sale(client, customer.id, [
        {"product": catalog["cylinder"].id, "quantity": 1, "price": 5, "cylinderStatus": "half"},
    ])
    assert resp.status_code == 400


def test_unknown_customer_and_product(client, db, customer, catalog):
    resp = post_sale(client, 9999, [{"product": catalog["gas"].id, "quantity": 1, "price": 5}])
    assert resp.status_code == 404
    assert resp.json()["error"] == "Customer not found"

    resp = post_sale(client, customer.id, [{"product": 9999, "quantity": 1, "price": 5}])
    assert resp.status_code == 404
    assert db.query(Sale).count() == 0


def test_stock_never_goes_negative(client, db, customer):
    # InventoryItem and the legacy Product mirror have drifted apart
    gas = add_product(db, "Propane 45kg", "gas", stock=1, gas_stock=5)

    resp = post_sale(client, customer.id, [{"product": gas.id, "quantity": 3, "price": 100}])

    assert resp.status_code == 200
    assert inventory_of(db, gas.id).current_stock == 2
    assert product_stock(db, gas.id) == 0


def test_gas_sale_clamps_cylinder_full_counter(client, db, customer):
    gas = add_product(db, "Gas 45kg", "gas", gas_stock=10)
    cylinder = add_product(db, "Cylinder 45kg", "cylinder", full=1, empty=0)

    resp = post_sale(client, customer.id, [
        {"product": gas.id, "quantity": 4, "price": 100, "cylinderProductId": cylinder.id},
    ])

    assert resp.status_code == 200
    cyl_inv = inventory_of(db, cylinder.id)
    assert cyl_inv.available_full == 0
    assert cyl_inv.available_empty == 4


def test_list_sales_newest_first(client, customer, catalog):
    first = post_sale(client, customer.id, [{"product": catalog["gas"].id, "quantity": 1, "price": 50}])
    second = post_sale(client, customer.id, [{"product": catalog["gas"].id, "quantity": 1, "price": 50}])

    resp = client.get("/api/sales")

    assert resp.status_code == 200
    ids = [s["id"] for s in resp.json()["data"]]
    assert ids == [second.json()["data"]["id"], first.json()["data"]["id"]]


def test_get_sale_by_id(client, customer, catalog):
    created = post_sale(client, customer.id, [{"product": catalog["gas"].id, "quantity": 1, "price": 50}])
    sale_id = created.json()["data"]["id"]

    assert client.get(f"/api/sales/{sale_id}").json()["data"]["invoice_number"] == created.json()["data"]["invoice_number"]
    assert client.get("/api/sales/9999").status_code == 404


def test_defaults_applied(client, customer, catalog):
    resp = post_sale(client, customer.id, [{"product": catalog["gas"].id, "quantity": 1, "price": 50}])

    sale = resp.json()["data"]
    assert sale["payment_method"] == "cash"
    assert sale["payment_status"] == "cleared"
    assert Decimal(sale["received_amount"]) == 0
    assert sale["notes"] == ""


def test_foreign_keys_enforced(db):
    assert db.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_unknown_cylinder_id_falls_back_to_name_match(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [
        {"product": gas.id, "quantity": 2, "price": 50, "cylinderProductId": 9999},
    ])

    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["items"][0]["cylinder_product_id"] == cylinder.id
    cyl_inv = inventory_of(db, cylinder.id)
    assert (cyl_inv.available_full, cyl_inv.available_empty) == (8, 5)


def test_unknown_gas_id_falls_back_to_name_match(client, db, customer, catalog):
    gas, cylinder = catalog["gas"], catalog["cylinder"]

    resp = post_sale(client, customer.id, [{
        "product": cylinder.id, "quantity": 1, "price": 200,
        "cylinderStatus": "full", "gasProductId": 9999,
    }])

    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["items"][0]["gas_product_id"] == gas.id
    assert inventory_of(db, gas.id).current_stock == 19


def test_malformed_items_are_bad_requests(client, db, customer, catalog):
    gas = catalog["gas"]

    resp = client.post("/api/sales", json={
        "customer": customer.id, "items": [{"product": gas.id, "price": 50}], "totalAmount": 50,
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}

    resp = client.post("/api/sales", json={
        "customer": customer.id, "items": [{"product": gas.id, "quantity": "two", "price": 50}], "totalAmount": 50,
    })
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid value for items.0.quantity")
    assert db.query(Sale).count() == 0


def test_negative_line_total_rejected(client, db, customer, catalog):
    resp = post_sale(client, customer.id, [
        {"product": catalog["gas"].id, "quantity": 1, "price": 50, "total": -5},
    ], total=50)

    assert resp.status_code == 400
    assert resp.json()["error"] == f"Total cannot be negative for product {catalog['gas'].id}"
    assert db.query(Sale).count() == 0


def test_repeated_product_lines_checked_one_by_one(client, db, customer, catalog):
    # Each line fits the 20 in stock on its own; together they clamp at zero
    gas = catalog["gas"]

    resp = post_sale(client, customer.id, [
        {"product": gas.id, "quantity": 15, "price": 50},
        {"product": gas.id, "quantity": 10, "price": 50},
    ])

    assert resp.status_code == 200
    assert inventory_of(db, gas.id).current_stock == 0
    assert product_stock(db, gas.id) == 0
