"""
Data models for SplitSlip - Receipt items, people and bill allocation results
"""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Set

from constants import ZERO


def new_id() -> str:
    """Generate a unique identifier"""
    return uuid.uuid4().hex


@dataclass
class ReceiptItem:
    """Represents a single item on a receipt"""
    id: str
    name: str
    price: Decimal = ZERO
    notes: str = ""
    payers: Set[str] = field(default_factory=set)


@dataclass
class Person:
    """Someone sharing the bill"""
    id: str
    name: str


@dataclass
class Receipt:
    """The whole receipt"""
    id: str = field(default_factory=new_id)
    items: List[ReceiptItem] = field(default_factory=list)
    raw_text: Optional[str] = None
    date: Optional[str] = None
    total: Optional[Decimal] = None
    session_id: Optional[str] = None
    image_path: Optional[str] = None

    def items_total(self) -> Decimal:
        """Sum of item prices, the authoritative grand total"""
        return sum((item.price for item in self.items), ZERO)


@dataclass
class ReceiptMetadata:
    """Best-effort total and date found in receipt text"""
    total: Optional[Decimal] = None
    date: Optional[str] = None


@dataclass
class LineShare:
    """One line of a person's breakdown"""
    item_name: str
    price: Decimal
    share: Decimal
    is_discount: bool = False


@dataclass
class PersonTotal:
    """What one person owes, derived on demand and never stored"""
    person_id: str
    person_name: str
    total: Decimal = ZERO
    regular_total: Decimal = ZERO
    discount_total: Decimal = ZERO
    spending_proportion: Decimal = ZERO
    line_breakdown: List[LineShare] = field(default_factory=list)


@dataclass
class Allocation:
    """Result of splitting a bill between people"""
    person_totals: List[PersonTotal] = field(default_factory=list)
    grand_total: Decimal = ZERO
    unassigned_amount: Decimal = ZERO
    regular_total: Decimal = ZERO
    discount_total: Decimal = ZERO

    @property
    def is_reconciled(self) -> bool:
        return self.unassigned_amount == ZERO


@dataclass
class ProcessingMetrics:
    """Metrics for parallel OCR performance"""
    workers_used: int = 0
    processing_time: float = 0.0
    regions_processed: int = 0
    seam_lines_dropped: int = 0
