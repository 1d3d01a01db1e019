"""
Allocation module for SplitSlip
Works out what each person owes, spreading discounts by share of spending
"""

from decimal import Decimal
from typing import List, Sequence

from config import ALLOCATION_TOLERANCE
from constants import ZERO
from data_models import Allocation, LineShare, Person, PersonTotal, Receipt, ReceiptItem
from discounts import is_discount_item
from utils import get_logger

logger = get_logger(__name__)


def partition_items(items: Sequence[ReceiptItem]):
    """Split items into (regular, discount) lists.

    Non-discount items priced at zero or below belong to neither list.
    """
    regular = []
    discount = []
    for item in items:
        if is_discount_item(item.name, item.price):
            discount.append(item)
        elif item.price > 0:
            regular.append(item)
    return regular, discount


def compute_allocation(items: Sequence[ReceiptItem], people: Sequence[Person]) -> Allocation:
    """Compute every person's total from the current items and people.

    Each regular item is divided evenly between its payers. Each discount line
    is then spread over everyone in proportion to their share of regular
    spending, whoever the discount line itself is assigned to. Never raises on
    well-formed input: an empty payer set divides by one and zero spending
    gives everyone a zero proportion.
    """
    regular, discount = partition_items(items)
    regular_total = sum((item.price for item in regular), ZERO)
    discount_total = sum((item.price for item in discount), ZERO)

    person_totals: List[PersonTotal] = []
    for person in people:
        lines = []
        person_regular = ZERO
        for item in regular:
            if person.id in item.payers:
                share = item.price / Decimal(max(1, len(item.payers)))
                lines.append(LineShare(item_name=item.name, price=item.price, share=share))
                person_regular += share

        proportion = person_regular / regular_total if regular_total else ZERO

        person_discount = ZERO
        for item in discount:
            share = item.price * proportion
            person_discount += share
            if proportion:
                lines.append(LineShare(item_name=item.name, price=item.price, share=share, is_discount=True))

        person_totals.append(PersonTotal(
            person_id=person.id,
            person_name=person.name,
            total=person_regular + person_discount,
            regular_total=person_regular,
            discount_total=person_discount,
            spending_proportion=proportion,
            line_breakdown=lines,
        ))

    grand_total = regular_total + discount_total
    assigned = sum((person_total.total for person_total in person_totals), ZERO)
    difference = abs(grand_total - assigned)
    unassigned = difference if difference > ALLOCATION_TOLERANCE else ZERO

    if unassigned:
        logger.info("%s of %s is not assigned to anyone", unassigned, grand_total)

    return Allocation(
        person_totals=person_totals,
        grand_total=grand_total,
        unassigned_amount=unassigned,
        regular_total=regular_total,
        discount_total=discount_total,
    )


class BillSplitter:
    """Handles bill splitting for one receipt"""

    def __init__(self, receipt: Receipt, people: List[Person]):
        self.receipt = receipt
        self.people = people
        self.allocation = None

    def unassigned_items(self) -> List[ReceiptItem]:
        return [item for item in self.receipt.items if not item.payers]

    def assign_unassigned_to_everyone(self) -> int:
        """Give every item without payers to all people, returns how many changed"""
        everyone = {person.id for person in self.people}
        unassigned = self.unassigned_items()
        for item in unassigned:
            item.payers = set(everyone)
        return len(unassigned)

    def calculate(self) -> Allocation:
        """Recompute from the receipt's current state"""
        self.allocation = compute_allocation(self.receipt.items, self.people)
        return self.allocation
