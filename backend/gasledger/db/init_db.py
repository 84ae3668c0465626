"""Create all tables. Run on app startup."""
import logging

from gasledger.db.base import Base
from gasledger.db.session import engine
from gasledger.models import (  # noqa: F401 - register models
    counter, customer, daily_sales, inventory_item, notification,
    product, sale, stock_assignment, user,
)

logger = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
