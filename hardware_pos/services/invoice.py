"""
Daily invoice numbering: INV-YYYYMMDD-NNNN.

The sequence lives in one counter document per calendar day and is advanced
with a single atomic `$inc`, so concurrent sales never read the same value.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from pymongo import ReturnDocument

from hardware_pos.core.config import settings
from hardware_pos.models.invoice_counter import InvoiceCounter

logger = logging.getLogger(__name__)


def invoice_day(moment: datetime, tz: Optional[str] = None) -> date:
    """Calendar day of `moment` in the store timezone. Naive datetimes are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz or settings.STORE_TIMEZONE)).date()


def format_invoice_number(day: date, seq: int, prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.INVOICE_PREFIX}-{day:%Y%m%d}-{seq:04d}"


async def next_sequence(day: date) -> int:
    counter = await InvoiceCounter.get_motor_collection().find_one_and_update(
        {"_id": f"{day:%Y%m%d}"},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return counter["seq"]


async def allocate_invoice_number(moment: datetime) -> str:
    """
    Reserve the next invoice number for the day `moment` falls on.
    A first-of-day upsert race can raise DuplicateKeyError; callers retry.
    """
    day = invoice_day(moment)
    seq = await next_sequence(day)
    number = format_invoice_number(day, seq)
    logger.debug("Allocated invoice number %s", number)
    return number
