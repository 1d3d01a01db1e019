"""
Discount detection for SplitSlip
"""

import re
from decimal import Decimal

from constants import PATTERNS

DISCOUNT_NAME_RE = re.compile(PATTERNS['discount_name'], re.IGNORECASE)


def is_discount_item(name: str, price: Decimal) -> bool:
    """A line is a discount if its name looks like an offer or its price is negative"""
    return bool(DISCOUNT_NAME_RE.search(name or "")) or price < 0
