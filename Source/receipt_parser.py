"""
Receipt Parser module for SplitSlip
Rebuilds priced items from OCR text, including names and weights split over several lines
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Set, Tuple

from config import TOTAL_MISMATCH_TOLERANCE
from constants import HEADER_DENYLIST
from data_models import Receipt, ReceiptItem, new_id
from line_classifier import (
    LineKind, QuantityWithPrice, QuantityOnly, BarePrice, SingleLineItem, PlainText, classify_line,
)
from receipt_metadata import extract_metadata
from utils import get_logger, to_money

logger = get_logger(__name__)


@dataclass(frozen=True)
class StitchMatch:
    """An item recovered by one rule, with the line indices it used up"""
    rule: str
    name: str
    price: Decimal
    consumed: Tuple[int, ...]


Rule = Callable[[Sequence[LineKind], int, Set[int]], Optional[StitchMatch]]


def normalize_lines(text: str) -> List[str]:
    """Split on newlines, trim and drop empty lines"""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _kind_at(kinds: Sequence[LineKind], index: int, consumed: Set[int]) -> Optional[LineKind]:
    if 0 <= index < len(kinds) and index not in consumed:
        return kinds[index]
    return None


def _name_at(kinds: Sequence[LineKind], index: int, consumed: Set[int]) -> Optional[PlainText]:
    kind = _kind_at(kinds, index, consumed)
    if isinstance(kind, PlainText) and not kind.is_numeric:
        return kind
    return None


def _combine(name: str, quantity_text: str) -> str:
    return f"{name} {quantity_text}"


def _weighed_price(kind: QuantityOnly) -> Decimal:
    if kind.trailing_price is not None:
        return kind.trailing_price
    return to_money(kind.quantity * kind.unit_price)


def name_before_quantity_total(kinds, index, consumed):
    """(a) plain name line followed by this weighed line with a total"""
    current = kinds[index]
    previous = _name_at(kinds, index - 1, consumed)
    if not isinstance(current, QuantityWithPrice) or previous is None:
        return None
    return StitchMatch('name_before_quantity_total', _combine(previous.text, current.quantity_text),
                       current.price, (index - 1, index))


def name_then_quantity_total(kinds, index, consumed):
    """(b) this line names the weighed line with a total that follows"""
    current = _name_at(kinds, index, consumed)
    following = _kind_at(kinds, index + 1, consumed)
    if current is None or not isinstance(following, QuantityWithPrice):
        return None
    return StitchMatch('name_then_quantity_total', _combine(current.text, following.quantity_text),
                       following.price, (index, index + 1))


def name_then_quantity(kinds, index, consumed):
    """(c) this line names a weighed line without a total.

    A price printed on the weighed line wins, then a bare price on the line
    after it, then weight x unit price.
    """
    current = _name_at(kinds, index, consumed)
    following = _kind_at(kinds, index + 1, consumed)
    if current is None or not isinstance(following, QuantityOnly):
        return None

    used = (index, index + 1)
    price_line = _kind_at(kinds, index + 2, consumed)
    if following.trailing_price is None and isinstance(price_line, BarePrice):
        price = price_line.price
        used = used + (index + 2,)
    else:
        price = _weighed_price(following)
    return StitchMatch('name_then_quantity', _combine(current.text, following.quantity_text), price, used)


def orphan_quantity(kinds, index, consumed):
    """(d) weighed line without an adjacent name, look around for one.

    Catches weighed lines with or without their own total. With no name
    nearby the weighed line names itself, minus any trailing total.
    """
    current = kinds[index]
    if isinstance(current, QuantityWithPrice):
        price, fallback_name = current.price, current.quantity_text
    elif isinstance(current, QuantityOnly):
        price, fallback_name = _weighed_price(current), current.text
    else:
        return None

    for candidate in (index - 1, index + 1, index + 2):
        name = _name_at(kinds, candidate, consumed)
        if name is not None:
            return StitchMatch('orphan_quantity', _combine(name.text, current.quantity_text), price,
                               tuple(sorted((candidate, index))))
    return StitchMatch('orphan_quantity', fallback_name, price, (index,))


def single_line_item(kinds, index, consumed):
    """(e) name and price on the same line"""
    current = kinds[index]
    if not isinstance(current, SingleLineItem):
        return None
    return StitchMatch('single_line_item', current.name, current.price, (index,))


def name_then_bare_price(kinds, index, consumed):
    """(f) price alone on a line, name on the line above"""
    current = kinds[index]
    previous = _name_at(kinds, index - 1, consumed)
    if not isinstance(current, BarePrice) or previous is None:
        return None
    return StitchMatch('name_then_bare_price', previous.text, current.price, (index - 1, index))


# Strict priority, the first rule that matches a line wins
STITCH_RULES: Tuple[Rule, ...] = (
    name_before_quantity_total,
    name_then_quantity_total,
    name_then_quantity,
    orphan_quantity,
    single_line_item,
    name_then_bare_price,
)


def stitch_lines(lines: Sequence[str]) -> List[StitchMatch]:
    """Single forward scan applying STITCH_RULES to every unused line"""
    kinds = [classify_line(line) for line in lines]
    consumed: Set[int] = set()
    matches = []

    for index in range(len(kinds)):
        if index in consumed:
            continue
        for rule in STITCH_RULES:
            match = rule(kinds, index, consumed)
            if match is not None:
                consumed.update(match.consumed)
                matches.append(match)
                logger.debug("%s: %r = %s (lines %s)", match.rule, match.name, match.price, match.consumed)
                break

    return matches


def _is_acceptable(match: StitchMatch) -> bool:
    if not match.price.is_finite() or match.price <= 0:
        logger.debug("Dropping non-positive price: %r = %s", match.name, match.price)
        return False
    if match.name in HEADER_DENYLIST:
        logger.debug("Dropping header artifact: %r", match.name)
        return False
    return True


def parse_receipt_items(text: str) -> List[ReceiptItem]:
    """Turn raw OCR text into receipt items with fresh ids and no payers"""
    items = [
        ReceiptItem(id=new_id(), name=match.name, price=match.price)
        for match in stitch_lines(normalize_lines(text))
        if _is_acceptable(match)
    ]
    logger.info("Parsed %d item(s) from receipt text", len(items))
    return items


class ReceiptParser:
    """Parses OCR text into a receipt with items, total and date"""

    def parse(self, ocr_text: str, session_id: Optional[str] = None,
              image_path: Optional[str] = None) -> Receipt:
        items = parse_receipt_items(ocr_text)
        metadata = extract_metadata(ocr_text, items)

        receipt = Receipt(
            items=items,
            raw_text=ocr_text,
            date=metadata.date,
            total=metadata.total,
            session_id=session_id,
            image_path=image_path,
        )

        if receipt.total is not None and abs(receipt.items_total() - receipt.total) > TOTAL_MISMATCH_TOLERANCE:
            logger.warning("Total mismatch: items sum to %s but receipt says %s",
                           receipt.items_total(), receipt.total)
        return receipt
