"""Seed a starter catalog: gas and cylinder products with inventory, one customer, admin + employee."""
from decimal import Decimal

from gasledger.db.init_db import init_db
from gasledger.db.session import SessionLocal
from gasledger.models import Customer, InventoryItem, Product, User


def seed_catalog():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Product).count():
            print("Catalog already seeded, nothing to do.")
            return

        gases = [
            {"name": "LPG Gas 45kg", "size": "large", "cost": 180, "least": 220, "stock": 120},
            {"name": "LPG Gas 5kg", "size": "small", "cost": 25, "least": 35, "stock": 300},
        ]
        cylinders = [
            {"name": "45kg Cylinder", "size": "large", "cost": 900, "least": 1100, "full": 40, "empty": 15},
            {"name": "5kg Cylinder", "size": "small", "cost": 150, "least": 200, "full": 90, "empty": 30},
        ]

        for g in gases:
            product = Product(
                name=g["name"],
                category="gas",
                cylinder_size=g["size"],
                cost_price=Decimal(str(g["cost"])),
                least_price=Decimal(str(g["least"])),
                current_stock=g["stock"],
            )
            db.add(product)
            db.flush()
            db.add(InventoryItem(product_id=product.id, category="gas", current_stock=g["stock"]))

        for c in cylinders:
            product = Product(
                name=c["name"],
                category="cylinder",
                cylinder_size=c["size"],
                cost_price=Decimal(str(c["cost"])),
                least_price=Decimal(str(c["least"])),
                current_stock=c["full"] + c["empty"],
            )
            db.add(product)
            db.flush()
            db.add(
                InventoryItem(
                    product_id=product.id,
                    category="cylinder",
                    cylinder_size=c["size"],
                    available_full=c["full"],
                    available_empty=c["empty"],
                )
            )

        db.add(Customer(name="Walk-in Customer", serial_number="CU-0001"))
        db.add(User(name="Admin", email="admin@gasledger.local", role="admin"))
        db.add(User(name="Driver One", email="driver1@gasledger.local", role="employee"))
        db.commit()

        print(f"Seeded {len(gases)} gas and {len(cylinders)} cylinder products.")
        for g in gases:
            print(f"  {g['name']}: stock {g['stock']}")
        for c in cylinders:
            print(f"  {c['name']}: full {c['full']}, empty {c['empty']}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
