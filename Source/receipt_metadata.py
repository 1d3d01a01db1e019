"""
Receipt Metadata module for SplitSlip
Finds the printed total and the purchase date in receipt text
"""

import re
from decimal import Decimal
from typing import Optional, Sequence

from constants import PATTERNS, ZERO
from data_models import ReceiptItem, ReceiptMetadata
from utils import get_logger

logger = get_logger(__name__)

TOTAL_RE = re.compile(PATTERNS['total'], re.IGNORECASE)
DATE_RE = re.compile(PATTERNS['date'])


def find_total(text: str) -> Optional[Decimal]:
    """First 'total' amount in the text, if any"""
    match = TOTAL_RE.search(text)
    return Decimal(match.group(1)) if match else None


def find_date(text: str) -> Optional[str]:
    """First date-shaped token, returned verbatim and not validated"""
    match = DATE_RE.search(text)
    return match.group(1) if match else None


def extract_metadata(text: str, items: Sequence[ReceiptItem]) -> ReceiptMetadata:
    """Total and date of a receipt, both best-effort.

    Without a total line the total falls back to the sum of the parsed item
    prices, so no total line and no items gives 0.00.
    """
    total = find_total(text)
    if total is None:
        total = sum((item.price for item in items), ZERO)
        logger.debug("No total line found, using item sum %s", total)

    date = find_date(text)
    logger.debug("Receipt metadata: total=%s date=%s", total, date)
    return ReceiptMetadata(total=total, date=date)
