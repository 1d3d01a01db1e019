"""
Bill Store module for SplitSlip
In-memory state for people, receipts and payer assignments
"""

import copy
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from allocation import compute_allocation
from data_models import Allocation, Person, Receipt, ReceiptItem, new_id
from errors import NotFoundError, ValidationError
from utils import get_logger, try_parse_decimal

logger = get_logger(__name__)


def normalize_payers(raw: Optional[Iterable[Union[str, Dict[str, Any]]]]) -> Set[str]:
    """Flatten payers given as ids or as relation objects into a set of ids.

    Accepts ``"id"``, ``{"personId": "id"}`` and ``{"person": {"id": "id"}}``.
    """
    payers = set()
    for entry in raw or []:
        if isinstance(entry, str):
            payers.add(entry)
        elif isinstance(entry, dict):
            person_id = entry.get("personId")
            if person_id is None and isinstance(entry.get("person"), dict):
                person_id = entry["person"].get("id")
            if person_id is None:
                raise ValidationError(f"Payer entry without a person id: {entry!r}")
            payers.add(str(person_id))
        else:
            raise ValidationError(f"Unsupported payer entry: {entry!r}")
    return payers


def _validate_name(name: str, what: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{what} name is required")
    return name.strip()


def _validate_price(price: Union[str, int, float, Decimal]) -> Decimal:
    amount = try_parse_decimal(price)
    if amount is None:
        raise ValidationError(f"Invalid price: {price!r}")
    return amount


class BillStore:
    """People and receipts for one bill-splitting session"""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or new_id()
        self._people: Dict[str, Person] = {}
        self._receipts: Dict[str, Receipt] = {}

    # People

    def add_person(self, name: str) -> Person:
        person = Person(id=new_id(), name=_validate_name(name, "Person"))
        self._people[person.id] = person
        logger.debug("Added person %s (%s)", person.name, person.id)
        return person

    def get_person(self, person_id: str) -> Person:
        try:
            return self._people[person_id]
        except KeyError:
            raise NotFoundError(f"Person not found: {person_id}") from None

    def remove_person(self, person_id: str) -> Person:
        """Delete a person and take them off every item they were paying for"""
        person = self.get_person(person_id)
        del self._people[person_id]
        for receipt in self._receipts.values():
            for item in receipt.items:
                item.payers.discard(person_id)
        logger.debug("Removed person %s (%s)", person.name, person_id)
        return person

    def list_people(self) -> List[Person]:
        return [copy.copy(person) for person in self._people.values()]

    # Receipts

    def add_receipt(self, receipt: Receipt) -> Receipt:
        receipt.session_id = receipt.session_id or self.session_id
        for item in receipt.items:
            item.payers = {payer for payer in item.payers if payer in self._people}
        self._receipts[receipt.id] = receipt
        logger.debug("Added receipt %s with %d item(s)", receipt.id, len(receipt.items))
        return receipt

    def get_receipt(self, receipt_id: str) -> Receipt:
        try:
            return self._receipts[receipt_id]
        except KeyError:
            raise NotFoundError(f"Receipt not found: {receipt_id}") from None

    def remove_receipt(self, receipt_id: str) -> Receipt:
        receipt = self.get_receipt(receipt_id)
        del self._receipts[receipt_id]
        return receipt

    def list_receipts(self) -> List[Receipt]:
        return list(self._receipts.values())

    # Items

    def _find_item(self, item_id: str) -> ReceiptItem:
        for receipt in self._receipts.values():
            for item in receipt.items:
                if item.id == item_id:
                    return item
        raise NotFoundError(f"Item not found: {item_id}")

    def add_item(self, receipt_id: str, name: str, price: Union[str, Decimal], notes: str = "") -> ReceiptItem:
        receipt = self.get_receipt(receipt_id)
        item = ReceiptItem(
            id=new_id(),
            name=_validate_name(name, "Item"),
            price=_validate_price(price),
            notes=(notes or "").strip(),
        )
        receipt.items.append(item)
        return item

    def update_item(self, item_id: str, name: Optional[str] = None,
                    price: Union[str, Decimal, None] = None, notes: Optional[str] = None) -> ReceiptItem:
        """Edit an item; all fields are validated before anything is changed"""
        item = self._find_item(item_id)
        new_name = _validate_name(name, "Item") if name is not None else item.name
        new_price = _validate_price(price) if price is not None else item.price

        item.name = new_name
        item.price = new_price
        if notes is not None:
            item.notes = notes.strip()
        return item

    def remove_item(self, item_id: str) -> ReceiptItem:
        item = self._find_item(item_id)
        for receipt in self._receipts.values():
            receipt.items = [other for other in receipt.items if other.id != item_id]
        return item

    def list_items_for_receipt(self, receipt_id: str) -> List[ReceiptItem]:
        return [copy.deepcopy(item) for item in self.get_receipt(receipt_id).items]

    # Payers

    def assign_payer(self, item_id: str, person_id: str) -> ReceiptItem:
        self.get_person(person_id)
        item = self._find_item(item_id)
        item.payers.add(person_id)
        return item

    def unassign_payer(self, item_id: str, person_id: str) -> ReceiptItem:
        item = self._find_item(item_id)
        item.payers.discard(person_id)
        return item

    def set_payers(self, item_id: str, raw_payers) -> ReceiptItem:
        """Replace an item's payers with ids or relation objects from outside"""
        payers = normalize_payers(raw_payers)
        for person_id in payers:
            self.get_person(person_id)
        item = self._find_item(item_id)
        item.payers = payers
        return item

    def summary(self, receipt_id: str) -> Allocation:
        """Allocation over a fresh snapshot of the receipt and people"""
        return compute_allocation(self.list_items_for_receipt(receipt_id), self.list_people())
