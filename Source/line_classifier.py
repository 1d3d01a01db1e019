"""
Line Classifier module for SplitSlip
Tags a single receipt line with the kind of content it carries
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from constants import PATTERNS

QUANTITY_WITH_PRICE_RE = re.compile(PATTERNS['quantity_with_price'], re.IGNORECASE)
QUANTITY_ONLY_RE = re.compile(PATTERNS['quantity_only'], re.IGNORECASE)
QUANTITY_TRAILING_PRICE_RE = re.compile(PATTERNS['quantity_trailing_price'])
BARE_PRICE_RE = re.compile(PATTERNS['bare_price'])
SINGLE_LINE_ITEM_RE = re.compile(PATTERNS['single_line_item'])
NUMERIC_FRAGMENT_RE = re.compile(PATTERNS['numeric_fragment'])


@dataclass(frozen=True)
class QuantityWithPrice:
    """Weighed item with an explicit total, e.g. '0.312 kg NET @ $3.906/kg 1.22'"""
    text: str
    quantity_text: str
    quantity: Decimal
    unit_price: Decimal
    price: Decimal


@dataclass(frozen=True)
class QuantityOnly:
    """Weighed item without a trailing total, price may follow in a later line"""
    text: str
    quantity_text: str
    quantity: Decimal
    unit_price: Decimal
    trailing_price: Optional[Decimal] = None


@dataclass(frozen=True)
class BarePrice:
    text: str
    price: Decimal


@dataclass(frozen=True)
class SingleLineItem:
    text: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class PlainText:
    """Anything else, most likely a product name"""
    text: str

    @property
    def is_numeric(self) -> bool:
        return bool(NUMERIC_FRAGMENT_RE.match(self.text))


LineKind = Union[QuantityWithPrice, QuantityOnly, BarePrice, SingleLineItem, PlainText]


def _quantity_only(line: str, match: re.Match) -> QuantityOnly:
    trailing = QUANTITY_TRAILING_PRICE_RE.search(line[match.end():])
    return QuantityOnly(
        text=line,
        quantity_text=line[:match.end()].strip(),
        quantity=Decimal(match.group(1)),
        unit_price=Decimal(match.group(2)),
        trailing_price=Decimal(trailing.group(1)) if trailing else None,
    )


def classify_line(line: str) -> LineKind:
    """Classify one trimmed receipt line, first matching kind wins"""
    line = line.strip()

    match = QUANTITY_WITH_PRICE_RE.search(line)
    if match:
        return QuantityWithPrice(
            text=line,
            quantity_text=line[:match.start(3)].strip(),
            quantity=Decimal(match.group(1)),
            unit_price=Decimal(match.group(2)),
            price=Decimal(match.group(3)),
        )

    match = QUANTITY_ONLY_RE.search(line)
    if match:
        return _quantity_only(line, match)

    match = BARE_PRICE_RE.match(line)
    if match:
        return BarePrice(text=line, price=Decimal(match.group(1)))

    match = SINGLE_LINE_ITEM_RE.match(line)
    if match:
        return SingleLineItem(text=line, name=match.group(1).strip(), price=Decimal(match.group(2)))

    return PlainText(text=line)
