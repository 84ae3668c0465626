"""
Gas distribution back office: sales and inventory API.

ARCHITECTURE:
- FastAPI routes under /api: thin request/response handling
- services/: stock checks, invoice numbering, inventory and daily rollups
- SQLAlchemy models: Sale, Product, InventoryItem, DailySales, ...

CONSISTENCY MODEL:
- A sale is all-or-nothing up to the moment it is committed
- Inventory, linkage and daily rollups run after commit, each in its own
  failure boundary; failures are logged to the "audit" logger
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from gasledger.api.routes import admin, daily_sales, sales, stock_assignments
from gasledger.core.config import settings
from gasledger.core.exceptions import http_exception_handler, validation_exception_handler
from gasledger.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    logger.info("Initializing database...")
    init_db()
    logger.info(f"Database initialized ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title="Gas Ledger API",
    description="Sales, stock checks and cylinder tracking for a gas distribution business.",
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(sales.router, prefix="/api/sales", tags=["sales"])
app.include_router(stock_assignments.router, prefix="/api/stock-assignments", tags=["stock-assignments"])
app.include_router(daily_sales.router, prefix="/api/daily-sales", tags=["daily-sales"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/health")
def health():
    return {"status": "ok"}
