"""
CLI Interface module for SplitSlip
Command-line interface for receipt processing and bill splitting
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from allocation import BillSplitter
from bill_store import BillStore
from config import DEFAULT_MAX_WORKERS
from data_models import Allocation, Receipt
from errors import SplitSlipError
from ocr_processor import ParallelOCRProcessor
from receipt_parser import ReceiptParser
from utils import (
    clean_text_for_display, format_currency, get_logger, to_money, validate_image_path,
    validate_menu_choice,
)

logger = get_logger(__name__)


class SplitSlipCLI:
    """Command-line interface for SplitSlip"""

    def __init__(self, processor: Optional[ParallelOCRProcessor] = None, store: Optional[BillStore] = None,
                 num_workers: int = DEFAULT_MAX_WORKERS):
        self.processor = processor
        self.num_workers = num_workers
        self.parser = ReceiptParser()
        self.store = store or BillStore()
        self.receipt_id: Optional[str] = None

    @property
    def receipt(self) -> Optional[Receipt]:
        return self.store.get_receipt(self.receipt_id) if self.receipt_id else None

    def display_banner(self):
        print("\n" + "="*60)
        print("🧾  SPLITSLIP - Receipt Splitter")
        print("Scan a receipt, pick who had what, see who owes what")
        print("="*60)

    def _use_receipt(self, receipt: Receipt):
        self.store.add_receipt(receipt)
        self.receipt_id = receipt.id
        self.display_receipt()

    def process_receipt(self, image_path: str):
        """Scan a receipt image and make it the active receipt"""
        print(f"\n📸 Processing receipt: {image_path}")

        if self.processor is None:
            self.processor = ParallelOCRProcessor(num_workers=self.num_workers)

        ocr_text = self.processor.recognize_text(image_path)
        self._use_receipt(self.parser.parse(ocr_text, session_id=self.store.session_id, image_path=image_path))
        self.display_metrics()

    def load_text(self, text_path: str):
        """Parse an already recognized receipt text file"""
        text = Path(text_path).read_text(encoding='utf-8')
        self._use_receipt(self.parser.parse(text, session_id=self.store.session_id))

    def _payer_names(self, payers) -> str:
        names = {person.id: person.name for person in self.store.list_people()}
        return ', '.join(sorted(names[p] for p in payers if p in names)) or 'Unassigned'

    def display_receipt(self):
        """Display parsed receipt"""
        receipt = self.receipt
        if not receipt or not receipt.items:
            print("\n⚠ No items detected in receipt")
            return

        print("\n" + "="*50)
        print("📋 RECEIPT ITEMS")
        print("="*50)

        for i, item in enumerate(receipt.items, 1):
            name = clean_text_for_display(item.name, 30)
            print(f"{i:2}. {name:30} {format_currency(item.price):>10} [{self._payer_names(item.payers)}]")

        print("-"*50)
        print(f"{'ITEMS TOTAL:':30} {format_currency(receipt.items_total()):>14}")
        if receipt.total is not None:
            print(f"{'PRINTED TOTAL:':30} {format_currency(receipt.total):>14}")
        if receipt.date:
            print(f"{'DATE:':30} {receipt.date:>14}")

    def display_metrics(self):
        """Display OCR metrics"""
        m = self.processor.metrics
        print("\n" + "="*50)
        print("🚀 PROCESSING METRICS")
        print("="*50)
        print(f"Workers Used:      {m.workers_used}")
        print(f"Processing Time:   {m.processing_time:.2f}s")
        print(f"Regions Processed: {m.regions_processed}")
        print(f"Seam Lines Dropped: {m.seam_lines_dropped}")

    def manage_people(self):
        """Manage people for bill splitting"""
        print("\n" + "="*50)
        print("👥 PEOPLE MANAGEMENT")
        print("="*50)

        while True:
            people = self.store.list_people()
            print(f"\nCurrent people: {', '.join(p.name for p in people) if people else 'None'}")
            print("\n1. Add person")
            print("2. Remove person")
            print("3. Done")

            choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3']) or ''
            print("-"*50)

            if choice == '1':
                person = self.store.add_person(input("Enter name: "))
                print(f"✓ Added {person.name}")
            elif choice == '2':
                person = self._pick_person(people)
                if person:
                    self.store.remove_person(person.id)
                    print(f"✓ Removed {person.name} and their item assignments")
            elif choice == '3':
                break

    def _pick_person(self, people):
        if not people:
            print("No people yet")
            return None
        for i, person in enumerate(people, 1):
            print(f"{i}. {person.name}")
        idx = input("Select person number: ").strip()
        if idx.isdigit() and 1 <= int(idx) <= len(people):
            return people[int(idx) - 1]
        print("Invalid selection")
        return None

    def add_item(self):
        """Add an item by hand, starting a receipt if there is none"""
        if self.receipt is None:
            receipt = Receipt(session_id=self.store.session_id)
            self.store.add_receipt(receipt)
            self.receipt_id = receipt.id

        name = input("Item name: ")
        price = input("Price (negative for a discount): ")
        notes = input("Notes (optional): ")
        item = self.store.add_item(self.receipt_id, name, price, notes)
        print(f"✓ Added {item.name} {format_currency(item.price)}")

    def assign_items(self):
        """Assign payers to each item"""
        receipt = self.receipt
        if not receipt or not receipt.items:
            print("\n⚠ No receipt items to assign")
            return

        people = self.store.list_people()
        if not people:
            print("\n⚠ No people added yet")
            return

        print("\n" + "="*50)
        print("🔍 ITEM ASSIGNMENT")
        print("="*50)

        for item in receipt.items:
            print(f"\n{item.name} - {format_currency(item.price)}")
            print(f"Paid by: {self._payer_names(item.payers)}")

            print("\n1. Everyone")
            print("2. Specific people")
            print("3. Skip")

            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3']) or ''
            print("-"*50)

            if choice == '1':
                self.store.set_payers(item.id, [person.id for person in people])
                print("✓ Assigned to everyone")
            elif choice == '2':
                for i, person in enumerate(people, 1):
                    print(f"{i}. {person.name}")
                selections = input("Enter person numbers (comma-separated): ").split(',')
                indices = [int(x) - 1 for x in (s.strip() for s in selections) if x.isdigit()]
                chosen = [people[i] for i in indices if 0 <= i < len(people)]
                self.store.set_payers(item.id, [person.id for person in chosen])
                print(f"✓ Assigned to {', '.join(person.name for person in chosen) or 'nobody'}")

    def calculate_summary(self) -> Optional[Allocation]:
        """Calculate and display what everyone owes"""
        receipt = self.receipt
        people = self.store.list_people()
        if not receipt or not people:
            print("\n⚠ Need receipt and people to calculate the split")
            return None

        splitter = BillSplitter(receipt, people)
        unassigned = splitter.unassigned_items()
        if unassigned:
            answer = input(f"\n{len(unassigned)} item(s) have no payers. Split them between everyone? [y/N] ")
            if answer.strip().lower() == 'y':
                splitter.assign_unassigned_to_everyone()

        allocation = self.store.summary(receipt.id)

        print("\n" + "="*50)
        print("💰 BILL SUMMARY")
        print("="*50)
        print(f"Receipt Total:    {format_currency(allocation.grand_total)}")
        if allocation.discount_total:
            print(f"Discounts:        {format_currency(allocation.discount_total)}")
        if not allocation.is_reconciled:
            print(f"⚠ {format_currency(allocation.unassigned_amount)} of the bill is not assigned to anyone")

        for person_total in allocation.person_totals:
            print("\n" + "-"*50)
            print(f"{person_total.person_name:30} {format_currency(person_total.total):>12}")
            if not person_total.line_breakdown:
                print("  No items assigned")
            for line in person_total.line_breakdown:
                label = clean_text_for_display(line.item_name, 30)
                marker = ' (discount)' if line.is_discount else ''
                print(f"  {label:30} {format_currency(line.share):>10}{marker}")

        return allocation

    def build_export(self) -> dict:
        """Export data for the active receipt"""
        receipt = self.receipt
        people = self.store.list_people()
        data = {
            'export_info': {
                'timestamp': datetime.now().isoformat(),
                'version': '1.0',
            },
            'people': [{'id': p.id, 'name': p.name} for p in people],
            'receipt': None,
        }
        if receipt is None:
            return data

        data['receipt'] = {
            'id': receipt.id,
            'date': receipt.date,
            'total': str(receipt.total) if receipt.total is not None else None,
            'items': [
                {
                    'id': item.id,
                    'name': item.name,
                    'price': str(item.price),
                    'notes': item.notes,
                    'payers': sorted(item.payers),
                }
                for item in receipt.items
            ],
        }

        allocation = self.store.summary(receipt.id)
        data['summary'] = {
            'grand_total': str(to_money(allocation.grand_total)),
            'unassigned_amount': str(to_money(allocation.unassigned_amount)),
            'person_totals': [
                {
                    'person_id': pt.person_id,
                    'name': pt.person_name,
                    'total': str(to_money(pt.total)),
                    'lines': [
                        {
                            'item_name': line.item_name,
                            'price': str(line.price),
                            'share': str(to_money(line.share)),
                            'is_discount': line.is_discount,
                        }
                        for line in pt.line_breakdown
                    ],
                }
                for pt in allocation.person_totals
            ],
        }
        return data

    def export_results(self, filename: Optional[str] = None) -> str:
        """Write the export to a JSON file and return its name"""
        filename = filename or f"splitslip_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(self.build_export(), f, indent=2, ensure_ascii=False)
        print(f"\n✅ Exported to {filename}")
        return filename

    def run(self):
        """Run the CLI application"""
        self.display_banner()

        while True:
            print("\n" + "="*50)
            print("MAIN MENU")
            print("="*50)
            print("1. Process receipt image")
            print("2. Load receipt text file")
            print("3. Manage people")
            print("4. Add item manually")
            print("5. Assign items to people")
            print("6. Show bill summary")
            print("7. Export results")
            print("8. Exit")

            choice = input("\nChoice: ").strip()

            try:
                if choice == '1':
                    image_path = input("Enter image path: ").strip()
                    if validate_image_path(image_path):
                        self.process_receipt(image_path)
                    else:
                        print("⚠ Invalid or unsupported image")
                elif choice == '2':
                    self.load_text(input("Enter text file path: ").strip())
                elif choice == '3':
                    self.manage_people()
                elif choice == '4':
                    self.add_item()
                elif choice == '5':
                    self.assign_items()
                elif choice == '6':
                    self.calculate_summary()
                elif choice == '7':
                    self.export_results()
                elif choice == '8':
                    print("\n👋 Thank you for using SplitSlip!")
                    break
            except SplitSlipError as e:
                print(f"\n❌ {e}")
            except OSError as e:
                logger.error("File error: %s", e)
                print(f"\n❌ {e}")
