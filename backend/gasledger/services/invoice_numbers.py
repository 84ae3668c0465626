"""
Invoice numbering shared by every sale.

The counter row for the current year holds the last number issued. Raising,
incrementing and reading it happen in one transaction, so the row stays
write-locked until commit and concurrent callers never see the same value.
"""
import logging
import time
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gasledger.core.config import settings
from gasledger.models.counter import Counter
from gasledger.models.sale import Sale

logger = logging.getLogger(__name__)

INVOICE_COUNTER_KEY = "unified_invoice_counter"
INVOICE_START_KEY = "invoice_start"
# The configured starting number is not tied to a year.
INVOICE_START_YEAR = 0


def _current_year() -> int:
    return datetime.now().year


def format_invoice_number(seq: int) -> str:
    return str(seq).zfill(4)


def get_starting_number(db: Session) -> int:
    """Configured starting number, else INVOICE_START_NUMBER."""
    row = db.execute(
        select(Counter.seq).where(
            Counter.key == INVOICE_START_KEY,
            Counter.year == INVOICE_START_YEAR,
        )
    ).scalar_one_or_none()
    if row:
        return row
    return settings.INVOICE_START_NUMBER


def _ensure_counter(db: Session, year: int, floor: int) -> None:
    exists = db.execute(
        select(Counter.id).where(Counter.key == INVOICE_COUNTER_KEY, Counter.year == year)
    ).scalar_one_or_none()
    if exists:
        return
    db.add(Counter(key=INVOICE_COUNTER_KEY, year=year, seq=floor))
    try:
        db.flush()
    except IntegrityError:
        # Another caller created it first
        db.rollback()


def next_invoice_number(db: Session) -> str:
    """Issue the next sequential invoice number, zero-padded to 4 digits."""
    year = _current_year()
    start = get_starting_number(db)
    floor = start - 1

    _ensure_counter(db, year, floor)
    counter_row = (Counter.key == INVOICE_COUNTER_KEY, Counter.year == year)

    raised = db.execute(
        update(Counter)
        .where(*counter_row, Counter.seq < floor)
        .values(seq=floor)
        .execution_options(synchronize_session=False)
    )
    if raised.rowcount:
        logger.info(f"[INVOICE] Counter for {year} was below starting number {start}, raised")

    db.execute(
        update(Counter)
        .where(*counter_row)
        .values(seq=Counter.seq + 1)
        .execution_options(synchronize_session=False)
    )
    seq = db.execute(select(Counter.seq).where(*counter_row)).scalar_one()
    db.commit()

    invoice_number = format_invoice_number(seq)
    logger.info(f"[INVOICE] Generated invoice number: {invoice_number} (year: {year}, starting: {start})")
    return invoice_number


def fallback_invoice_number(base: str, attempt: int) -> str:
    """Number used after a collision: next numeric value plus a timestamp suffix."""
    try:
        numeric = int(base.split("-")[0])
    except ValueError:
        numeric = 0
    suffix = str(int(time.time() * 1000))[-4:]
    return f"{format_invoice_number(numeric + attempt)}-{suffix}"


def _highest_numeric_invoice(db: Session) -> int | None:
    numbers = [
        int(value)
        for value in db.execute(select(Sale.invoice_number)).scalars()
        if value and value.isdigit()
    ]
    return max(numbers) if numbers else None


def initialize_invoice_counter(db: Session, starting_number: int | None = None) -> int:
    """
    Seed this year's counter and return the next number that will be issued.

    A given `starting_number` is stored as the configured start. Without a
    configured start the counter continues after the highest all-digit invoice
    already on record, never below INVOICE_START_NUMBER.
    """
    year = _current_year()

    if starting_number is not None:
        config_row = db.execute(
            select(Counter).where(
                Counter.key == INVOICE_START_KEY,
                Counter.year == INVOICE_START_YEAR,
            )
        ).scalar_one_or_none()
        if config_row:
            config_row.seq = starting_number
        else:
            db.add(Counter(key=INVOICE_START_KEY, year=INVOICE_START_YEAR, seq=starting_number))
        db.flush()
        logger.info(f"[INVOICE] Configured starting number: {starting_number}")

    configured = db.execute(
        select(Counter.seq).where(
            Counter.key == INVOICE_START_KEY,
            Counter.year == INVOICE_START_YEAR,
        )
    ).scalar_one_or_none()

    counter = db.execute(
        select(Counter).where(Counter.key == INVOICE_COUNTER_KEY, Counter.year == year)
    ).scalar_one_or_none()

    if counter:
        if configured and counter.seq < configured - 1:
            logger.info(
                f"[INVOICE] Counter exists ({counter.seq}) but is lower than configured "
                f"starting ({configured}), resetting..."
            )
            counter.seq = configured - 1
        db.commit()
        return counter.seq + 1

    if configured:
        seq = configured - 1
    else:
        highest = _highest_numeric_invoice(db)
        seq = max(settings.INVOICE_START_NUMBER - 1, highest or 0)
        logger.info(f"[INVOICE] No configured starting number, continuing after {seq}")

    db.add(Counter(key=INVOICE_COUNTER_KEY, year=year, seq=seq))
    db.commit()
    logger.info(f"[INVOICE] Initialized counter for {year}, next invoice {seq + 1}")
    return seq + 1
