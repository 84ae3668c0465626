from gasledger.models.user import User
from gasledger.models.customer import Customer
from gasledger.models.product import Product
from gasledger.models.inventory_item import InventoryItem
from gasledger.models.sale import Sale, SaleItem
from gasledger.models.daily_sales import DailySales
from gasledger.models.counter import Counter
from gasledger.models.stock_assignment import StockAssignment
from gasledger.models.notification import Notification

__all__ = [
    "User", "Customer", "Product", "InventoryItem", "Sale", "SaleItem",
    "DailySales", "Counter", "StockAssignment", "Notification",
]
