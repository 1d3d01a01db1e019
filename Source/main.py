"""
SplitSlip - Receipt scanning and fair bill splitting

python3 main.py                          # Interactive CLI mode
python3 main.py receipt.jpg              # Process image and start CLI
python3 main.py receipt.jpg --quick      # Quick mode - just show results
python3 main.py --text receipt.txt       # Parse already recognized text
python3 main.py --help                   # Show help
"""

import os
import sys
import logging
import argparse
from pathlib import Path

from config import DEFAULT_MAX_WORKERS, WORKERS_MAX, WORKERS_MIN
from data_models import Receipt
from errors import SplitSlipError
from ocr_processor import ParallelOCRProcessor
from receipt_parser import ReceiptParser
from cli_interface import SplitSlipCLI
from utils import format_currency, get_logger, set_log_level

logger = get_logger(__name__)


def print_receipt(receipt: Receipt):
    """Print parsed items, total and date"""
    if not receipt.items:
        print("\n⚠ No items found in receipt")
        print("Try:")
        print("  • Better image quality/lighting")
        print("  • Manual item entry in interactive mode")
        return

    print(f"\n📋 Found {len(receipt.items)} items:")
    for i, item in enumerate(receipt.items, 1):
        print(f"  {i:2}. {item.name[:40]:40} {format_currency(item.price):>10}")
    if receipt.total is not None:
        print(f"\n💰 Total: {format_currency(receipt.total)}")
    if receipt.date:
        print(f"📅 Date: {receipt.date}")


def quick_process(image_path: str, workers: int = DEFAULT_MAX_WORKERS):
    """Quick processing mode - just show results"""
    print(f"🚀 Quick processing: {image_path}")

    processor = ParallelOCRProcessor(num_workers=workers)
    ocr_text = processor.recognize_text(image_path)
    print_receipt(ReceiptParser().parse(ocr_text, image_path=image_path))

    m = processor.metrics
    print(f"\n⚡ Processed in {m.processing_time:.2f}s using {m.workers_used} workers")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='splitslip',
        description='SplitSlip - Receipt scanning and fair bill splitting',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  splitslip                     # Interactive mode
  splitslip receipt.jpg         # Process image then interactive
  splitslip receipt.jpg --quick # Quick mode - show results only
  splitslip --text receipt.txt  # Parse recognized text then interactive
  splitslip --workers 8         # Use 8 parallel OCR workers
        """
    )

    parser.add_argument(
        'image',
        nargs='?',
        help='Receipt image to process'
    )
    parser.add_argument(
        '--text',
        metavar='FILE',
        help='Receipt text file to parse instead of an image'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f'Number of parallel OCR workers (default: {DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument(
        '--quick',
        action='store_true',
        help='Quick mode - show parsed results only'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Log parser decisions to stderr'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='SplitSlip 1.0'
    )
    return parser


def main(argv=None):
    """Main entry point"""
    args = build_arg_parser().parse_args(argv)

    if args.debug:
        set_log_level(logging.DEBUG)

    if args.workers < WORKERS_MIN or args.workers > WORKERS_MAX:
        print(f"⚠ Workers must be between {WORKERS_MIN} and {WORKERS_MAX}")
        args.workers = max(WORKERS_MIN, min(WORKERS_MAX, args.workers))

    if args.quick:
        if args.text:
            print_receipt(ReceiptParser().parse(Path(args.text).read_text(encoding='utf-8')))
            return
        if not args.image or not os.path.exists(args.image):
            print(f"❌ File not found: {args.image}")
            sys.exit(1)
        quick_process(args.image, args.workers)
        return

    cli = SplitSlipCLI(num_workers=args.workers)

    if args.text:
        cli.load_text(args.text)
    elif args.image:
        if os.path.exists(args.image):
            cli.process_receipt(args.image)
        else:
            print(f"⚠ File not found: {args.image}")

    cli.run()


def run():
    """Console script wrapper with top-level error handling"""
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!")
        sys.exit(0)
    except SplitSlipError as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    run()
